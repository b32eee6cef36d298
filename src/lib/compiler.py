"""
Document compiler

Compiles one annotated markdown document into a themed HTML page:

    expand includes -> render markdown -> postprocess tree
        -> validate structure -> extract title -> compute prefix -> template

A compiler holds only immutable, shareable collaborators (renderer, block
registry, sigil dispatcher, theme); every compile builds and discards its
own tree, so one instance may compile any number of files.
"""

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional

from bs4 import BeautifulSoup

from ..config import appsettings
from .blocks import BlockRegistry
from .log import LOG
from .markdown import includes_expand, markdown_make
from .postprocess import TreePostprocessor
from .sigils import SigilDispatcher
from .theme import Theme
from .validator import structure_validate


@dataclass(frozen=True)
class CompiledDocument:
    """
    Result of compiling one document

    Attributes:
        path: Output path, relative to the site root (source suffix renamed)
        title: Text of the document's H1
        prefix: Relative path back to the site root, '/' for error pages
        html: Complete page
    """
    path: PurePath
    title: str
    prefix: str
    html: str


def prefix_compute(relative_path: PurePath) -> str:
    """
    Path prefix from a document back to the site root

    Documents directly inside an ``error`` folder are served from arbitrary
    depths, so they get the absolute root instead of a relative one.
    """
    if relative_path.parent.name == appsettings.error_dir:
        return '/'
    return '../' * (len(relative_path.parts) - 1)


class DocumentCompiler:
    """
    Compiles annotated markdown documents to HTML pages

    Responsibilities:
    - Expand {{ snippet }} includes
    - Render markdown with the directive blocks attached
    - Postprocess the rendered tree (sigils, figures, code, links, images)
    - Enforce the document shape
    - Fill the theme template
    """

    def __init__(
        self,
        theme: Theme,
        registry: Optional[BlockRegistry] = None,
        dispatcher: Optional[SigilDispatcher] = None,
        highlight_code: Optional[bool] = None,
    ) -> None:
        """
        Args:
            theme: Loaded theme (labels and page template)
            registry: Directive blocks (default: built-ins with theme labels)
            dispatcher: Paragraph sigil dispatcher (default: built-in table)
            highlight_code: Highlight code with Pygments (default: settings)
        """
        self.theme = theme
        self.registry = registry or BlockRegistry(labels=theme.labels_get())
        self.dispatcher = dispatcher or SigilDispatcher()
        self.highlight_code = highlight_code
        self.md = markdown_make(self.registry)

    def text_compile(self, text: str, relative_path: PurePath, dirname: Path) -> CompiledDocument:
        """
        Compile markdown text (includes already expanded)

        Args:
            text: Document source
            relative_path: Source path relative to the input root
            dirname: Folder of the source file on disk

        Returns:
            CompiledDocument for the page

        Raises:
            StructureError: if the document does not have exactly one H1
                            or starts with disallowed content
            FileNotFoundError: if an animation folder does not exist
        """
        relative_path = PurePath(relative_path)
        prefix = prefix_compute(relative_path)

        rendered = self.md.render(text)
        soup = BeautifulSoup(f"<body>{rendered}</body>", 'html.parser')
        body = soup.body

        TreePostprocessor(
            soup, dirname, prefix,
            dispatcher=self.dispatcher,
            highlight_code=self.highlight_code,
        ).run(body)

        heading = structure_validate(body)
        title = heading.get_text().strip()
        LOG(f"{relative_path}: '{title}' (prefix '{prefix}')", level=2)

        page = self.theme.template_render(title=title, prefix=prefix, contents=body.decode_contents())
        return CompiledDocument(
            path=relative_path.with_suffix(appsettings.output_suffix),
            title=title,
            prefix=prefix,
            html=page,
        )

    def file_compile(self, path: Path, root: Path) -> CompiledDocument:
        """
        Compile one source file

        Args:
            path: Source file
            root: Input root the output path is made relative to

        Raises:
            StructureError, IncludeError, FileNotFoundError,
            UnicodeDecodeError (source or snippet is not UTF-8)
        """
        path = Path(path)
        source = path.read_text(encoding='utf-8')
        text = includes_expand(source, path.parent, (path.resolve(),))
        return self.text_compile(text, path.relative_to(root), path.parent)
