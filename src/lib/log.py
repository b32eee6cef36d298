"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState bound to the current
context, so compiler and runtime modules can log without threading the
state through every call.

Usage:
    from orfalius.lib.log import LOG, WARN, state_connectToLogger

    # At start of a pipeline stage:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Compiled notes/index.md", level=1)
    LOG("Sigil ':' attached lecture source", level=3)
    WARN("Animation folder is empty: img/steps")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{module: <12}</cyan>:<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Bind a ProgramState to the logging context.

    Args:
        state: ProgramState instance with a verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Nothing is emitted while no state is connected (library use, tests).
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """Log a warning whenever any state is connected, whatever its verbosity."""
    state = _program_state.get()

    if state is not None:
        logger.opt(depth=1).warning(message, **kwargs)
