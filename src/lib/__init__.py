"""
orfalius - Annotated markdown to course pages and synchronized slides

Compiles annotated markdown notes into themed HTML pages and models the
slide reader that runs inside them.
"""

__version__ = "1.0.0"

from .blocks import BlockRegistry
from .compiler import CompiledDocument, DocumentCompiler
from .log import LOG, WARN, state_connectToLogger
from .markdown import IncludeError
from .presentation import Presentation
from .sigils import SigilDispatcher
from .theme import Theme, ThemeError
from .validator import StructureError

__all__ = [
    "BlockRegistry",
    "CompiledDocument",
    "DocumentCompiler",
    "IncludeError",
    "LOG",
    "WARN",
    "Presentation",
    "SigilDispatcher",
    "StructureError",
    "Theme",
    "ThemeError",
    "state_connectToLogger",
    "__version__",
]
