"""
orfalius - Annotated markdown to course pages and synchronized slides

Course notes written in markdown with directive blocks and paragraph
sigils compile to themed HTML pages; pages holding slides get a reader
that follows a lecture recording or records new slide timings.
"""

__version__ = "1.0.0"

from .lib import DocumentCompiler, Presentation, Theme, LOG, state_connectToLogger

__all__ = ["DocumentCompiler", "Presentation", "Theme", "LOG", "state_connectToLogger", "__version__"]
