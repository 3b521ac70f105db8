"""
stackc Compiler Configuration
=============================

Compiler options with defaults, optionally overridden from environment
variables. The CLI starts from `CompilerOptions.from_env()` and applies
its own flags on top.

Environment variables (all optional):
    STACKC_MAX_VARIABLES: Slots in the fixed stack frame (positive integer)
    STACKC_DYNAMIC_FRAME: Size the frame from the variable count (1/true/yes)
    STACKC_COMMENTS: Annotate generated assembly with comments (1/true/yes)

Invalid values are ignored and the default is kept.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")

# rsp stays 16-byte aligned after the prologue
STACK_ALIGNMENT = 16


def align_frame(size: int) -> int:
    """Round a frame size up to the stack alignment."""
    return (size + STACK_ALIGNMENT - 1) // STACK_ALIGNMENT * STACK_ALIGNMENT


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        filename: Name used for the source in diagnostics
        entry_symbol: Global label of the generated function
        slot_size: Bytes per variable slot
        max_variables: Variables the fixed frame has room for. The
            prologue reserves max_variables * slot_size bytes, rounded
            up to a multiple of 16.
        dynamic_frame: Size the frame from the variables actually used
            instead of the fixed capacity
        output_comments: Emit '#' comments describing each statement
    """
    filename: str = "<input>"
    entry_symbol: str = "main"
    slot_size: int = 8
    max_variables: int = 26
    dynamic_frame: bool = False
    output_comments: bool = False

    @property
    def frame_size(self) -> int:
        """Bytes reserved by the prologue when the frame is fixed."""
        return align_frame(self.max_variables * self.slot_size)

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """Create options from environment variables."""
        options = cls()

        if max_vars := os.environ.get("STACKC_MAX_VARIABLES"):
            try:
                value = int(max_vars)
            except ValueError:
                value = 0
            if value > 0:
                options.max_variables = value
            else:
                logger.warning(f"Ignoring invalid STACKC_MAX_VARIABLES={max_vars!r}")

        if dynamic := os.environ.get("STACKC_DYNAMIC_FRAME"):
            options.dynamic_frame = dynamic.strip().lower() in TRUE_VALUES

        if comments := os.environ.get("STACKC_COMMENTS"):
            options.output_comments = comments.strip().lower() in TRUE_VALUES

        return options
