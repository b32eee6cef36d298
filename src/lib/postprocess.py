"""
Tree postprocessor for rendered documents

Rewrites the BeautifulSoup tree of one rendered document into its final
markup, tag by tag:

    p            sigil dispatch, single-image figures, escape collapse
    table        captioned figure, boolean "cross" header, cells as paragraphs
    ul / ol      items as paragraphs
    pre          timing strip unwrap, code language inference
    code         language inference (inline code)
    a            external links open in a new browsing context
    img          size directive, img/ rooting

The walk is two-phase: classify() transforms the tree and collects the
nodes a transform consumed, prune() removes them once the walk is over.
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ..config import appsettings
from .images import imageSource_resolve
from .lexer import OrfaliusLexer
from .log import LOG
from .sigils import SigilDispatcher


EXTERNAL_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]*://')
WHITESPACE_RE = re.compile(r'\s')

# Containers walked without change
PASSTHROUGH_TAGS = {'blockquote', 'details', 'div', 'em', 'strong', 'span'}


def code_highlight(text: str, language: str) -> Optional[str]:
    """Pygments markup for ``text`` (class-based spans), or None for unknown languages"""
    lexer: Lexer
    try:
        if language.lower() in OrfaliusLexer.aliases:
            lexer = OrfaliusLexer()
        else:
            lexer = get_lexer_by_name(language)
    except ClassNotFound:
        return None
    return highlight(text, lexer, HtmlFormatter(nowrap=True))


class TreePostprocessor:
    """
    Postprocesses the rendered tree of one document

    Holds per-document context only (soup, folder, prefix); the sigil
    dispatcher it uses is shared and stateless.
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        dirname: Path,
        prefix: str = '',
        dispatcher: Optional[SigilDispatcher] = None,
        highlight_code: Optional[bool] = None,
    ) -> None:
        """
        Args:
            soup: Tree produced from the rendered document (mutated in place)
            dirname: Folder of the source document (animation frames live below it)
            prefix: Relative path back to the site root, '/' for error pages
            dispatcher: Sigil dispatcher (default: built-in table)
            highlight_code: Highlight code with Pygments (default: settings)
        """
        self.soup = soup
        self.dirname = Path(dirname)
        self.prefix = prefix
        self.dispatcher = dispatcher or SigilDispatcher()
        self.highlight_code = (
            appsettings.highlight_code if highlight_code is None else highlight_code
        )

    def html_set(self, element: Tag, markup: str) -> None:
        """Replace the children of ``element`` with parsed ``markup``"""
        element.clear()
        fragment = BeautifulSoup(markup, 'html.parser')
        for node in list(fragment.contents):
            element.append(node.extract())

    def run(self, root: Tag) -> Tag:
        """Postprocess everything below ``root`` and prune consumed nodes"""
        removable = self.classify(root)
        self.prune(removable)
        return root

    def prune(self, removable: Iterable[Tag]) -> int:
        """Remove nodes consumed by transforms; returns how many were removed"""
        count = 0
        for element in removable:
            element.decompose()
            count += 1
        if count:
            LOG(f"Pruned {count} consumed node(s)", level=3)
        return count

    def classify(self, element: Tag) -> List[Tag]:
        """
        Transform the children of ``element`` by tag

        Returns:
            Nodes consumed by transforms, to be pruned after the walk
        """
        removable: List[Tag] = []

        for child in list(element.children):
            if not isinstance(child, Tag):
                continue

            name = child.name
            if name == 'p':
                removable.extend(self.paragraph_process(child))
            elif name == 'table':
                removable.extend(self.table_process(child))
            elif name in ('ul', 'ol'):
                for item in child.find_all('li', recursive=False):
                    removable.extend(self.paragraph_process(item))
            elif name in PASSTHROUGH_TAGS:
                removable.extend(self.classify(child))
            elif name == 'pre':
                self.pre_process(child)
            elif name == 'code':
                self.code_process(child)
            elif name == 'a':
                self.link_process(child)
            elif name == 'img':
                self.image_process(child)

        return removable

    def paragraph_process(self, element: Tag) -> List[Tag]:
        """
        Postprocess a paragraph (or anything treated as one: cells, items)

        Sigils win; otherwise a lone image becomes a figure, and a leading
        escaped sigil collapses to one literal character.
        """
        removable = self.dispatcher.dispatch(element, self)
        if removable is not None:
            return removable

        children = [c for c in element.children if isinstance(c, Tag)]
        text = ''.join(c for c in element.children if isinstance(c, NavigableString))
        if len(children) == 1 and children[0].name == 'img' and not text.strip():
            image = children[0].extract()
            figure = self.soup.new_tag('figure', attrs={'class': 'img'})
            figure.append(image)
            element.replace_with(figure)
            self.image_process(image)
            return []

        collapsed = self.dispatcher.escape_collapse(element.decode_contents())
        if collapsed is not None:
            self.html_set(element, collapsed)

        return self.classify(element)

    def table_process(self, table: Tag) -> List[Tag]:
        """Wrap the table in a figure, read its boolean marker, process cells"""
        table.wrap(self.soup.new_tag('figure', attrs={'class': 'table'}))

        head = table.find('thead')
        cell = head.find(['th', 'td']) if head else None
        if cell is not None:
            inner = cell.decode_contents()
            if inner == 'x':
                table['class'] = ['cross']
                cell.clear()
            elif inner == '^x':
                cell.string = 'x'

        removable: List[Tag] = []
        for row in table.find_all('tr'):
            for cell in row.find_all(['th', 'td'], recursive=False):
                removable.extend(self.paragraph_process(cell))
        return removable

    def pre_process(self, pre: Tag) -> None:
        """Unwrap the timing strip; infer the language of other code blocks"""
        if 'times' in pre.get('class', []):
            inner = pre.find(True)
            if inner is not None:
                self.html_set(pre, f"\n{inner.decode_contents().strip()}\n")
            return

        code = pre.find('code')
        if code is None:
            return
        if not code.get('class'):
            self.code_process(code)
        elif self.highlight_code:
            # Fenced blocks already carry language-<info>
            for name in code['class']:
                if name.startswith('language-'):
                    highlighted = code_highlight(code.get_text(), name[len('language-'):])
                    if highlighted is not None:
                        self.html_set(code, highlighted)
                    break

    def code_process(self, code: Tag) -> None:
        """
        Infer a code element's language from its content

        A leading ``~`` forces terminal styling and is dropped; otherwise the
        first whitespace-delimited token names the language and is dropped.
        """
        text = code.get_text()
        language: Optional[str] = None

        if text.startswith('~'):
            text = text[1:]
        else:
            match = WHITESPACE_RE.search(text)
            if match and match.start() > 0:
                language = text[:match.start()]
                text = text[match.start() + 1:]

        code.string = text
        if language is None:
            code['class'] = appsettings.terminal_class.split()
            return

        code['class'] = [f"language-{language}"]
        if self.highlight_code:
            highlighted = code_highlight(text, language)
            if highlighted is not None:
                self.html_set(code, highlighted)

    def link_process(self, link: Tag) -> None:
        """Absolute URLs open in a new browsing context"""
        if EXTERNAL_RE.match(link.get('href', '')):
            link['target'] = '_blank'
            link['rel'] = ['noopener', 'noreferrer']

    def image_process(self, image: Tag) -> None:
        """Apply the size directive and root relative sources under img/"""
        src, style = imageSource_resolve(
            image.get('src', ''),
            image_dir=appsettings.image_dir,
            absolute=(self.prefix == '/'),
        )
        image['src'] = src
        if style:
            image['style'] = style
