"""
Paragraph sigil dispatch

Paragraphs are inspected after markdown rendering: the first character of
their inner HTML selects a transform from the fixed dispatch table in
models.sigils. A doubled sigil is an escape and never fires.

Handlers receive the postprocessor as context (soup, document folder,
path prefix, recursion) and return the nodes they want removed once the
whole tree has been walked.
"""

import html
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence
from urllib.parse import quote

from bs4 import Tag

from ..config import appsettings
from ..models.sigils import SigilKind, SigilRule, SIGIL_RULES
from .images import SCHEME_RE
from .log import LOG, WARN

if TYPE_CHECKING:
    from .postprocess import TreePostprocessor


SigilHandler = Callable[[Tag, str, SigilRule, "TreePostprocessor"], List[Tag]]


def fields_split(rest: str, rule: SigilRule) -> List[str]:
    """Split a sigil remainder on the rule separator and decode each field."""
    return [html.unescape(word) for word in rest.strip().split(rule.separator)]


def small_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """^ - wrap the remaining content in <small>"""
    small = processor.soup.new_tag('small')
    processor.html_set(small, rest)
    element.clear()
    element.append(small)
    return processor.classify(small)


def alert_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """! - tag the paragraph as an alert"""
    element['class'] = ['alert']
    processor.html_set(element, rest)
    return processor.classify(element)


def lecture_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """: - attach a source to the page's single lecture video"""
    removable: List[Tag] = []

    lecture = processor.soup.select_one('video.reader-lecture')
    if lecture:
        removable.append(element)
    else:
        lecture = processor.soup.new_tag('video', attrs={'class': 'reader-lecture'})
        element.replace_with(lecture)

    source = processor.soup.new_tag('source', attrs={
        'src': f"{appsettings.video_dir}/{html.unescape(rest.strip())}",
    })
    lecture.append(source)
    LOG(f"Lecture source {source['src']}", level=3)
    return removable


def animation_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """; - build an animation from the frames in img/<folder>"""
    tail = html.unescape(rest.strip())
    if not tail:
        return []

    folder: Path = processor.dirname / appsettings.image_dir / tail
    names = sorted(entry.name for entry in folder.iterdir() if entry.is_file())

    frames: List[Tag] = []
    for i, name in enumerate(names):
        frames.append(processor.soup.new_tag('img', attrs={
            'class': 'frame',
            'src': f"{tail}/{quote(name.replace('|', '||'))}",
            'alt': str(i + 1),
        }))

    if not frames:
        WARN(f"Animation folder {folder} holds no frames")
        return []

    animation = processor.soup.new_tag('div', attrs={'class': 'animation'})
    for frame in frames:
        animation.append(frame)
        processor.image_process(frame)
    element.replace_with(animation)
    return []


def anchor_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """@ - replace the paragraph with an addressable empty anchor"""
    anchor = processor.soup.new_tag('a', attrs={
        'class': 'anchor',
        'id': html.unescape(rest.strip()),
    })
    element.replace_with(anchor)
    return []


def video_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """% - inline video figure: source[%poster]"""
    words = fields_split(rest, rule)

    src = words[0]
    if not SCHEME_RE.match(src):
        src = f"{appsettings.video_dir}/{src}"

    video = processor.soup.new_tag('video', attrs={'src': src})
    if len(words) > 1 and words[1]:
        video['poster'] = f"{appsettings.video_dir}/{words[1]}"
    video['controls'] = ''

    figure = processor.soup.new_tag('figure', attrs={'class': 'video'})
    figure.append(video)
    element.replace_with(figure)
    return []


def embed_handle(element: Tag, rest: str, rule: SigilRule, processor: "TreePostprocessor") -> List[Tag]:
    """& - turn the paragraph into a snippet embed placeholder: user&hash[&tab]"""
    words = fields_split(rest, rule)
    words += [''] * (3 - len(words))

    element['class'] = ['codepen']
    element['data-theme-id'] = appsettings.embed_theme
    element['data-user'] = words[0]
    element['data-slug-hash'] = words[1]
    element['data-default-tab'] = words[2] or appsettings.embed_default_tab
    element.clear()
    return []


class SigilDispatcher:
    """
    Dispatches paragraphs on their leading sigil

    The table is immutable and holds exactly one handler per SigilKind, so
    a dispatcher can be shared across compilations.
    """

    def __init__(self, rules: Sequence[SigilRule] = SIGIL_RULES) -> None:
        self.rules = tuple(rules)
        self.handlers: Dict[SigilKind, SigilHandler] = {
            SigilKind.SMALL: small_handle,
            SigilKind.ALERT: alert_handle,
            SigilKind.LECTURE: lecture_handle,
            SigilKind.ANIMATION: animation_handle,
            SigilKind.ANCHOR: anchor_handle,
            SigilKind.VIDEO: video_handle,
            SigilKind.EMBED: embed_handle,
        }
        missing = {rule.kind for rule in self.rules} - set(self.handlers)
        if missing:
            raise ValueError(f"No handler for sigils: {sorted(k.value for k in missing)}")

    def rule_match(self, inner: str) -> Optional[SigilRule]:
        """First rule (in priority order) that fires on ``inner``"""
        for rule in self.rules:
            if rule.fires(inner):
                return rule
        return None

    def escape_collapse(self, inner: str) -> Optional[str]:
        """``inner`` with a leading escaped sigil reduced to one literal, or None"""
        for rule in self.rules:
            if inner.startswith(rule.escape):
                return inner[len(rule.prefix):]
        return None

    def dispatch(self, element: Tag, processor: "TreePostprocessor") -> Optional[List[Tag]]:
        """
        Apply the sigil transform of a paragraph

        Returns:
            Nodes to remove after the walk, or None when no sigil fired
        """
        inner = element.decode_contents()
        rule = self.rule_match(inner)
        if rule is None:
            return None

        LOG(f"Sigil {rule.kind.value} on <{element.name}>", level=3)
        return self.handlers[rule.kind](element, inner[len(rule.prefix):], rule, processor)
