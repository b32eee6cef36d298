"""
Structural validation of compiled documents

A document has exactly one H1. Before it may only come alert paragraphs,
plus at most one introductory plain paragraph.
"""

from typing import Optional

from bs4 import Tag


class StructureError(SyntaxError):
    """Raised when a compiled document does not have the required shape"""
    pass


def alert_is(element: Tag) -> bool:
    """True for alert-sigil paragraphs"""
    return element.name == 'p' and 'alert' in element.get('class', [])


def alerts_skip(element: Optional[Tag]) -> Optional[Tag]:
    """First element at or after ``element`` that is not an alert paragraph"""
    while element is not None and alert_is(element):
        element = element.find_next_sibling()
    return element


def structure_validate(body: Tag) -> Tag:
    """
    Check the shape of a postprocessed document body

    Args:
        body: Root of the postprocessed tree

    Returns:
        The document's single H1

    Raises:
        StructureError: on a wrong H1 count or disallowed leading content
    """
    headings = body.find_all('h1')
    if len(headings) != 1:
        raise StructureError(f"Must have exactly one H1 (found {len(headings)})")

    first = alerts_skip(body.find(True, recursive=False))
    if first is None:
        raise StructureError("Must start with H1 or P followed by H1!")

    if first.name != 'h1':
        second = alerts_skip(first.find_next_sibling())
        if first.name != 'p' or second is None or second.name != 'h1':
            raise StructureError("Must start with H1 or P followed by H1!")

    return headings[0]
