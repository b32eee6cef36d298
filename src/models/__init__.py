"""
Models package for orfalius

Contains data structures and type definitions for the compiler pipeline
and the slide reader runtime.
"""

from .state import ProgramState, pipeline
from .blocks import BlockSpec, BlockCategory
from .sigils import SigilKind, SigilRule, SIGIL_RULES
from .reader import Slide, ReaderView, SyncPhase, Media, Take, Timeline

__all__ = [
    "ProgramState",
    "pipeline",
    "BlockSpec",
    "BlockCategory",
    "SigilKind",
    "SigilRule",
    "SIGIL_RULES",
    "Slide",
    "ReaderView",
    "SyncPhase",
    "Media",
    "Take",
    "Timeline",
]
