"""
stackcc - Compiler Command-Line Interface
=========================================

Compiles source text given inline as the single positional argument.
The argument is the program itself, not a file path.

Usage Examples
--------------
Print assembly to stdout:
    $ stackcc 'x = 2*3+4; return x;'

Write assembly to a file:
    $ stackcc 'return 42;' -o prog.s

Inspect the front end:
    $ stackcc --tokens 'a = 1;'
    $ stackcc --ast 'a = b = 1;'

Run in the built-in emulator (exit status is the program's value):
    $ stackcc --run 'x = 2*3+4; return x;'; echo $?
    10

With no positional argument, or more than one, stackcc does nothing and
exits with status 0.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from stackc import __version__
from stackc.ast import ASTPrinter
from stackc.cli.errors import handle_cli_exception
from stackc.compiler import Compiler
from stackc.config import CompilerOptions
from stackc.emulator import run_assembly

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def write_output(text: str, output: Optional[Path]) -> None:
    """Write text to the output file, or to stdout when none is given."""
    if output is not None:
        output.write_text(text)
        logger.debug(f"Wrote {len(text)} bytes to {output}")
    else:
        click.echo(text, nl=False)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("source", nargs=-1)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write output (assembly, --tokens or --ast) to this file instead of stdout",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST and exit (for debugging)",
)
@click.option(
    "--dynamic-frame",
    is_flag=True,
    help="Size the stack frame from the variables used "
         "instead of the fixed capacity",
)
@click.option(
    "--comments",
    is_flag=True,
    help="Annotate the assembly with a comment per statement",
)
@click.option(
    "--run",
    is_flag=True,
    help="Execute the program in the built-in emulator and exit with its value",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="stackcc")
def main(
    source: tuple[str, ...],
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    dynamic_frame: bool,
    comments: bool,
    run: bool,
    verbose: bool,
) -> None:
    """
    Compile SOURCE to x86-64 assembly (GNU as, Intel syntax).

    SOURCE is the program text itself, for example 'x = 1; return x + 1;'.

    \b
    Examples:
        stackcc 'return 1+2*3;'              # Assembly on stdout
        stackcc 'return 42;' -o prog.s       # Assembly to a file
        stackcc --ast 'a = b = 1;'           # Show the parse tree
        stackcc --run 'return 7;'            # Exit status 7

    \b
    Environment:
        STACKC_MAX_VARIABLES   fixed frame capacity (default 26)
        STACKC_DYNAMIC_FRAME   size frame from variable count
        STACKC_COMMENTS        annotate output
    """
    setup_logging(verbose)

    if len(source) != 1:
        logger.debug(f"Expected exactly one source argument, got {len(source)}; nothing to do")
        return

    options = CompilerOptions.from_env()
    if dynamic_frame:
        options.dynamic_frame = True
    if comments:
        options.output_comments = True

    try:
        compiler = Compiler(options)
        text = source[0]

        if tokens:
            lines = [repr(token) for token in compiler.tokenize(text)]
            write_output("\n".join(lines) + "\n", output)
            return

        if ast:
            write_output(ASTPrinter().print(compiler.parse(text)) + "\n", output)
            return

        result = compiler.compile(text)

        if run:
            outcome = run_assembly(result.assembly, options.entry_symbol)
            logger.debug(f"Emulator returned {outcome.signed_rax}")
            sys.exit(outcome.exit_status)

        write_output(result.assembly, output)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
