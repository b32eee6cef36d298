"""
Markdown renderer configuration

Builds the markdown-it instance every document is rendered with:
CommonMark with raw HTML, typographic replacements and tables, plus the
directive blocks, MathJax-friendly math, keyboard keys and coloured
spans. Also expands
{{ snippet }} includes before rendering.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.rules_inline import StateInline
from mdit_py_plugins.dollarmath import dollarmath_plugin

from .blocks import BlockRegistry
from .log import LOG


INCLUDE_RE = re.compile(r'\{\{(.+?)\}\}')


class IncludeError(Exception):
    """Raised when snippet includes form a cycle"""
    pass


def mathjax_render(content: str, options: Dict[str, Any]) -> str:
    """Emit math with MathJax delimiters, escaped and otherwise untouched."""
    if options.get('display_mode'):
        return f'\\[{escapeHtml(content)}\\]'
    return f'\\({escapeHtml(content)}\\)'


def kbd_plugin(md: MarkdownIt) -> None:
    """
    Markdown-it plugin that turns ``[[Key]]`` into ``<kbd>Key</kbd>``.

    The key text is kept literal; an unterminated ``[[`` is left to the
    other inline rules.
    """

    def _kbd(state: StateInline, silent: bool) -> bool:
        start = state.pos
        if not state.src.startswith('[[', start):
            return False

        end = state.src.find(']]', start + 2)
        if end == -1:
            return False

        content = state.src[start + 2:end]
        if not content.strip() or '\n' in content or '[' in content:
            return False

        if not silent:
            token = state.push('kbd_open', 'kbd', 1)
            token.markup = '[['
            token = state.push('text', '', 0)
            token.content = content
            token = state.push('kbd_close', 'kbd', -1)
            token.markup = ']]'

        state.pos = end + 2
        return True

    # Before link so [[...]] is never read as a link label
    md.inline.ruler.before('link', 'kbd', _kbd)


COLOR_RE = re.compile(r'\{([A-Za-z][A-Za-z0-9-]*)\}\(')


def color_plugin(md: MarkdownIt, class_name: str = 'md-colorify') -> None:
    """
    Markdown-it plugin that colours ``{red}(some text)``.

    Renders ``<span class="md-colorify md-colorify--red">some text</span>``;
    the text inside the parentheses is ordinary inline markdown and may
    hold balanced parentheses of its own.
    """

    def _color(state: StateInline, silent: bool) -> bool:
        start = state.pos
        match = COLOR_RE.match(state.src, start, state.posMax)
        if match is None:
            return False

        depth = 1
        end = match.end()
        while end < state.posMax:
            char = state.src[end]
            if char == '\\':
                end += 2
                continue
            if char == '(':
                depth += 1
            elif char == ')':
                depth -= 1
                if depth == 0:
                    break
            end += 1
        if depth or end >= state.posMax or end == match.end():
            return False

        if not silent:
            maximum = state.posMax
            state.pos = match.end()
            state.posMax = end

            token = state.push('color_open', 'span', 1)
            token.attrSet('class', f'{class_name} {class_name}--{match.group(1)}')
            token.markup = match.group(0)
            state.md.inline.tokenize(state)
            token = state.push('color_close', 'span', -1)
            token.markup = ')'

            state.posMax = maximum
        state.pos = end + 1
        return True

    md.inline.ruler.before('link', 'color', _color)


def markdown_make(registry: Optional[BlockRegistry] = None) -> MarkdownIt:
    """
    Create the configured markdown-it instance

    Args:
        registry: Directive blocks to register (default: built-in blocks)

    Returns:
        MarkdownIt ready to render documents
    """
    md = (
        MarkdownIt('commonmark', {'html': True, 'typographer': True})
        .enable(['table', 'strikethrough', 'replacements', 'smartquotes'])
        .use(dollarmath_plugin, allow_space=False, allow_digits=False, renderer=mathjax_render)
        .use(kbd_plugin)
        .use(color_plugin)
    )
    (registry or BlockRegistry()).markdown_attach(md)
    return md


def includes_expand(source: str, root: Path, chain: Tuple[Path, ...] = ()) -> str:
    """
    Replace ``{{ path }}`` occurrences with the referenced file contents

    Paths resolve relative to ``root`` (the including file's folder); included
    files are expanded recursively relative to their own folder.

    Args:
        source: Markdown text
        root: Folder of the file ``source`` came from
        chain: Files currently being expanded (cycle detection)

    Returns:
        Source with every include expanded

    Raises:
        IncludeError: if a file includes itself, directly or not
        FileNotFoundError: if an included file does not exist
    """
    def expand_include(match: re.Match[str]) -> str:
        target = (root / match.group(1).strip()).resolve()
        if target in chain:
            cycle = ' -> '.join(str(p) for p in chain + (target,))
            raise IncludeError(f"Cyclic include: {cycle}")

        LOG(f"Including {target}", level=3)
        text = target.read_text(encoding='utf-8')
        return includes_expand(text, target.parent, chain + (target,))

    return INCLUDE_RE.sub(expand_include, source)
