"""
Paragraph sigil models

A sigil is the first character of a paragraph's rendered content. Each
sigil selects one transform; doubling the sigil escapes it.
"""

from enum import Enum
from dataclasses import dataclass


class SigilKind(Enum):
    """The fixed set of paragraph transforms, in dispatch priority order."""
    SMALL = "small"
    ALERT = "alert"
    LECTURE = "lecture"
    ANIMATION = "animation"
    ANCHOR = "anchor"
    VIDEO = "video"
    EMBED = "embed"


@dataclass(frozen=True)
class SigilRule:
    """
    One entry of the sigil dispatch table

    Attributes:
        kind: Transform selected by this sigil
        prefix: Sigil as it appears in *rendered* paragraph HTML. Usually the
                character itself; the ampersand appears entity-encoded.
        separator: Field separator used by sigils whose remainder carries
                   several values (video, embed)
    """
    kind: SigilKind
    prefix: str
    separator: str = ""

    @property
    def escape(self) -> str:
        """Doubled prefix: renders one literal prefix, never fires the rule."""
        return self.prefix * 2

    def fires(self, html: str) -> bool:
        """True when the rule applies to paragraph HTML ``html``."""
        return html.startswith(self.prefix) and not html.startswith(self.escape)


# Dispatch table in priority order: the first rule that fires wins
SIGIL_RULES = (
    SigilRule(SigilKind.SMALL, "^"),
    SigilRule(SigilKind.ALERT, "!"),
    SigilRule(SigilKind.LECTURE, ":"),
    SigilRule(SigilKind.ANIMATION, ";"),
    SigilRule(SigilKind.ANCHOR, "@"),
    SigilRule(SigilKind.VIDEO, "%", separator="%"),
    SigilRule(SigilKind.EMBED, "&amp;", separator="&amp;"),
)
