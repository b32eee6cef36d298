"""
Document structure tests

A document has exactly one H1, preceded only by alerts and at most one
introductory paragraph.
"""

import pytest
from bs4 import BeautifulSoup

from orfalius.lib.validator import StructureError, structure_validate


def body_make(html):
    return BeautifulSoup(f"<body>{html}</body>", "html.parser").body


class TestValidShapes:
    """Test accepted document shapes"""

    def test_heading_first(self):
        heading = structure_validate(body_make("<h1>Title</h1><p>text</p>"))
        assert heading.get_text() == "Title"

    def test_intro_paragraph(self):
        structure_validate(body_make("<p>intro</p><h1>Title</h1>"))

    def test_leading_alerts(self):
        structure_validate(body_make('<p class="alert">a</p><p class="alert">b</p><h1>Title</h1>'))

    def test_alerts_around_intro(self):
        html = '<p class="alert">a</p><p>intro</p><p class="alert">b</p><h1>Title</h1>'
        structure_validate(body_make(html))


class TestInvalidShapes:
    """Test rejected document shapes"""

    def test_no_heading(self):
        with pytest.raises(StructureError, match="exactly one H1"):
            structure_validate(body_make("<p>text</p>"))

    def test_two_headings(self):
        with pytest.raises(StructureError, match="found 2"):
            structure_validate(body_make("<h1>A</h1><h1>B</h1>"))

    def test_two_intro_paragraphs(self):
        with pytest.raises(StructureError, match="Must start with H1"):
            structure_validate(body_make("<p>a</p><p>b</p><h1>Title</h1>"))

    def test_other_leading_element(self):
        with pytest.raises(StructureError):
            structure_validate(body_make("<h2>Sub</h2><h1>Title</h1>"))

    def test_nested_heading_only(self):
        """The H1 must be a top-level element"""
        with pytest.raises(StructureError):
            structure_validate(body_make("<div><h1>Title</h1></div>"))

    def test_is_syntax_error(self):
        assert issubclass(StructureError, SyntaxError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
