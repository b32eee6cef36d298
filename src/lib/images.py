"""
Image source handling

An image source may carry a size directive: ``path|height``. The delimiter
counts only where it stands alone; a doubled delimiter is a literal one.

    "a|1.5"      -> ("a", "1.5")
    "a||b|2"     -> ("a|b", "2")
    "a/b.png||2" -> ("a/b.png|2", None)
"""

import re
from typing import Optional, Tuple


ENCODED_BAR_RE = re.compile(r'%7[cC]')
SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]*:')


def sizeDirective_parse(source: str, delimiter: str = '|') -> Tuple[str, Optional[str]]:
    """
    Split an image source into path and optional height

    Args:
        source: Raw source string (delimiters already decoded)
        delimiter: Size directive delimiter

    Returns:
        (path, height) with doubled delimiters in the path collapsed;
        height is None unless exactly one lone delimiter occurs
    """
    runs = re.finditer('(?:' + re.escape(delimiter) + ')+', source)
    lone = [match for match in runs if len(match.group(0)) == len(delimiter)]

    height: Optional[str] = None
    path = source
    if len(lone) == 1:
        path = source[:lone[0].start()]
        height = source[lone[0].end():].strip() or None

    return path.replace(delimiter * 2, delimiter), height


def path_isRelative(path: str) -> bool:
    """True for paths that live next to the document (not absolute, not parent-relative, no scheme)."""
    return not (path.startswith('..') or path.startswith('/') or SCHEME_RE.match(path))


def imageSource_resolve(
    source: str, image_dir: str = 'img', absolute: bool = False
) -> Tuple[str, Optional[str]]:
    """
    Resolve the final ``src`` and inline style of an image

    Args:
        source: ``src`` attribute as rendered (``|`` percent-encoded)
        image_dir: Folder relative sources are rooted under
        absolute: Root relative sources at the site root (``/img/...``)

    Returns:
        (src, style) where style is None when no size directive was given
    """
    path, height = sizeDirective_parse(ENCODED_BAR_RE.sub('|', source))
    path = path.replace('|', '%7C')

    if path_isRelative(path):
        path = f"{image_dir}/{path}"
        if absolute:
            path = '/' + path

    style = f"max-height: {height}em;" if height else None
    return path, style
