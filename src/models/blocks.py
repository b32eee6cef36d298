"""
Directive block specification models

Defines the shape of a fenced directive block (marker, validator, renderer)
as registered with the markdown renderer's container construct.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Callable, Optional


class BlockCategory(Enum):
    """
    Categories of directive blocks

    Only CAPTIONED blocks refuse empty parameters; the others fall back to a
    default title (or none at all).
    """
    NOTE = "note"            # !!! warning, ??? question
    CAPTIONED = "captioned"  # ´´´ file, ;;; section, ||| item
    PANEL = "panel"          # ::: answer
    STRUCTURAL = "structural"  # /////// times, ++++ slide


@dataclass(frozen=True)
class BlockSpec:
    """
    Specification for one directive block

    Attributes:
        name: Directive name; also the renderer token prefix (container_<name>)
        marker: Marker string, repeated at least three times to open/close
        category: Category controlling parameter validation
        opening: Opening HTML template, formatted with ``title``
        closing: Closing HTML fragment
        default_title: Title used when no parameter follows the marker
        description: Human-readable description

    Example:
        BlockSpec(
            name="section",
            marker=";",
            category=BlockCategory.CAPTIONED,
            opening='<details class="section">\\n<summary>{title}</summary>\\n',
            closing='</details>\\n',
        )
    """
    name: str
    marker: str
    category: BlockCategory
    opening: str
    closing: str
    default_title: Optional[str] = None
    description: str = ""

    @property
    def requires_title(self) -> bool:
        """Captioned blocks are meaningless without a caption."""
        return self.category == BlockCategory.CAPTIONED


BlockValidator = Callable[..., bool]
BlockRenderer = Callable[..., str]
