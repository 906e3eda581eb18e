"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current ProgramState's
verbosity level without requiring explicit state passing.

Features:
- Context-aware logging tied to ProgramState verbosity
- Rich formatting with timestamps, colors, and metadata
- Warnings and errors are always emitted, whatever the verbosity
- Works throughout lib modules without passing state

Usage:
    from lib.log import LOG, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("This message appears if verbosity >= 1", level=1)
    LOG("Debug details appear if verbosity >= 2", level=2)
    LOG("Style entry failed to compile", severity="WARNING")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Configure loguru with rodixpreview-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")

_ALWAYS_SHOWN = {"WARNING", "ERROR", "CRITICAL"}


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this at the start of each pipeline function (or once in the server)
    to make the state's verbosity setting available to LOG() calls
    throughout that context.

    Args:
        state: Object with a verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, severity: str = "DEBUG", **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        severity: Loguru level name; WARNING and above ignore verbosity
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Debug (-vv or higher)

    Example:
        LOG("Document converted", level=1)
        LOG("Rewrote 14 custom tags", level=2)
        LOG("No Contribution file in plugin dir", severity="WARNING")
    """
    state = _program_state.get()

    if severity in _ALWAYS_SHOWN:
        logger.opt(depth=1).log(severity, message, **kwargs)
        return

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).log(severity, message, **kwargs)
