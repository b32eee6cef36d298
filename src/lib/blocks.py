"""
Directive block registry for orfalius

Each directive block is declared once as a BlockSpec and registered with
markdown-it as a container construct. The registry only holds immutable
specs, so one registry can serve any number of compilations.
"""

from typing import Any, Dict, List, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token
from mdit_py_plugins.container import container_plugin

from ..models.blocks import BlockSpec, BlockCategory, BlockValidator, BlockRenderer
from .log import WARN


class BlockRegistry:
    """
    Registry of directive block specifications

    Maps block names to BlockSpec objects and builds the validate/render
    callables the container plugin expects.
    """

    def __init__(self, labels: Optional[Dict[str, str]] = None) -> None:
        """
        Initialize the registry and register all built-in blocks

        Args:
            labels: Optional default-title overrides keyed by block name
                    (typically the theme's ``labels`` mapping)
        """
        self.specs: Dict[str, BlockSpec] = {}
        self.labels: Dict[str, str] = dict(labels or {})
        self.noteBlocks_register()
        self.panelBlocks_register()
        self.structuralBlocks_register()

    def register(self, spec: BlockSpec) -> None:
        """Register a block specification"""
        self.specs[spec.name] = spec

    def blocks_listByCategory(self, category: BlockCategory) -> List[BlockSpec]:
        """Get all blocks in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def noteBlocks_register(self) -> None:
        """Register quote-styled note blocks (default titles)"""
        for name, marker, title in [
            ('warning', '!', 'Warning'),
            ('question', '?', 'Question'),
        ]:
            self.register(BlockSpec(
                name=name,
                marker=marker,
                category=BlockCategory.NOTE,
                opening=f'<blockquote class="{name}">\n<p>{{title}}</p>\n',
                closing='</blockquote>\n',
                default_title=title,
                description=f'Quote-styled {name} note',
            ))

    def panelBlocks_register(self) -> None:
        """Register collapsible panels and labeled items"""
        self.register(BlockSpec(
            name='answer',
            marker=':',
            category=BlockCategory.PANEL,
            opening='<details class="answer">\n<summary>{title}</summary>\n',
            closing='</details>\n',
            default_title='Answer',
            description='Collapsible answer panel',
        ))

        for name, marker in [('file', '´'), ('section', ';')]:
            self.register(BlockSpec(
                name=name,
                marker=marker,
                category=BlockCategory.CAPTIONED,
                opening=f'<details class="{name}">\n<summary>{{title}}</summary>\n',
                closing='</details>\n',
                description=f'Collapsible {name} panel, caption required',
            ))

        self.register(BlockSpec(
            name='item',
            marker='|',
            category=BlockCategory.CAPTIONED,
            opening=(
                '<div class="item">\n<div class="item-marker">\n{title}\n</div>\n'
                '<div class="item-content">\n'
            ),
            closing='</div>\n</div>\n',
            description='Labeled item, label required',
        ))

    def structuralBlocks_register(self) -> None:
        """Register the timing strip and the slide container"""
        self.register(BlockSpec(
            name='times',
            marker='///////',
            category=BlockCategory.STRUCTURAL,
            opening='<pre class="times">\n',
            closing='</pre>\n',
            description='Raw per-slide lecture timestamps',
        ))

        self.register(BlockSpec(
            name='slide',
            marker='++++++++++++++',
            category=BlockCategory.STRUCTURAL,
            opening=(
                '<div class="slide">\n<div class="slide-container">\n'
                '<div class="slide-header">\n{title}\n</div>\n<div class="slide-main">\n'
            ),
            closing='</div>\n</div>\n</div>\n',
            description='Slide shown by the reader',
        ))

    def title_resolve(self, spec: BlockSpec, params: str) -> str:
        """
        Resolve the title of an opened block

        Whitespace runs in the parameter collapse to single spaces; an empty
        parameter yields the (possibly theme-overridden) default title.
        """
        words = params.split()
        if words:
            return ' '.join(words)
        return self.labels.get(spec.name, spec.default_title or '')

    def validator_make(self, spec: BlockSpec) -> BlockValidator:
        """
        Build the container validator for a block

        Captioned blocks reject empty parameters; markdown-it then renders the
        marker line as an ordinary paragraph instead of failing the compile.
        The validator runs more than once per line, so it stays silent and
        captions_check reports the rejected lines.
        """
        def validate(params: str, *args: Any) -> bool:
            return not (spec.requires_title and not params.strip())
        return validate

    def captions_check(self, state: StateCore) -> None:
        """Core rule warning once for every captioned marker left as text"""
        captioned = self.blocks_listByCategory(BlockCategory.CAPTIONED)
        for token in state.tokens:
            if token.type != 'inline':
                continue
            for line in token.content.splitlines():
                text = line.strip()
                for spec in captioned:
                    if len(text) >= 3 * len(spec.marker) and not text.replace(spec.marker, ''):
                        WARN(f"Block '{spec.name}' without caption rendered as paragraph")

    def renderer_make(self, spec: BlockSpec) -> BlockRenderer:
        """Build the container renderer (called once on open, once on close)"""
        registry = self

        def render(renderer: Any, tokens: Sequence[Token], idx: int, options: Any, env: Any) -> str:
            token = tokens[idx]
            if token.nesting == 1:
                return spec.opening.format(title=registry.title_resolve(spec, token.info))
            return spec.closing
        return render

    def markdown_attach(self, md: MarkdownIt) -> MarkdownIt:
        """Register every block with a markdown-it instance"""
        for spec in self.specs.values():
            container_plugin(
                md,
                spec.name,
                marker=spec.marker,
                validate=self.validator_make(spec),
                render=self.renderer_make(spec),
            )
        md.core.ruler.push('captions_check', self.captions_check)
        return md
