"""
Tree postprocessor tests

Tests the tag-by-tag rewrites of rendered documents: tables, lists,
code language inference and highlighting, links, images and the timing
strip.
"""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from orfalius.lib.markdown import markdown_make
from orfalius.lib.postprocess import TreePostprocessor, code_highlight


def process(source, prefix="", highlight_code=False):
    """Render and postprocess a fragment, returning the body"""
    soup = BeautifulSoup(f"<body>{markdown_make().render(source)}</body>", "html.parser")
    TreePostprocessor(soup, Path("."), prefix, highlight_code=highlight_code).run(soup.body)
    return soup.body


class TestTables:
    """Test table figures and the boolean header marker"""

    def test_table_in_figure(self):
        body = process("| A | B |\n|---|---|\n| 1 | 2 |\n")
        assert body.select_one("figure.table > table") is not None

    def test_cross_marker(self):
        """An x in the first header cell marks a boolean table"""
        body = process("| x | A |\n|---|---|\n| a | b |\n")
        table = body.select_one("table")
        assert table.get("class") == ["cross"]
        assert table.find("th").get_text() == ""

    def test_escaped_cross_marker(self):
        body = process("| ^x | A |\n|---|---|\n| a | b |\n")
        table = body.select_one("table")
        assert table.get("class") is None
        assert table.find("th").get_text() == "x"

    def test_cells_are_paragraphs(self):
        """Sigils apply inside table cells"""
        body = process("| A |\n|---|\n| ^tiny |\n")
        assert body.select_one("td > small").get_text() == "tiny"


class TestCode:
    """Test code language inference"""

    def test_inline_language(self):
        code = process("`python print(1)`").find("code")
        assert code["class"] == ["language-python"]
        assert code.get_text() == "print(1)"

    def test_inline_terminal(self):
        """A leading ~ forces terminal styling"""
        code = process("`~echo hi`").find("code")
        assert code["class"] == ["terminal", "nohighlight"]
        assert code.get_text() == "echo hi"

    def test_inline_single_word(self):
        code = process("`ls`").find("code")
        assert code["class"] == ["terminal", "nohighlight"]
        assert code.get_text() == "ls"

    def test_fenced_without_info(self):
        """The first token of an untagged block names its language"""
        code = process("```\npython\nprint(1)\n```\n").select_one("pre > code")
        assert code["class"] == ["language-python"]
        assert code.get_text() == "print(1)\n"

    def test_fenced_with_info(self):
        code = process("```js\nlet a\n```\n").select_one("pre > code")
        assert code["class"] == ["language-js"]
        assert code.get_text() == "let a\n"

    def test_highlighting(self):
        code = process("`python print(1)`", highlight_code=True).find("code")
        assert code["class"] == ["language-python"]
        assert code.find("span") is not None
        assert code.get_text().strip() == "print(1)"

    def test_highlighting_fenced(self):
        code = process("```python\nx = 1\n```\n", highlight_code=True).select_one("pre > code")
        assert code.find("span") is not None

    def test_unknown_language_left_plain(self):
        code = process("`klingon qapla`", highlight_code=True).find("code")
        assert code["class"] == ["language-klingon"]
        assert code.find("span") is None
        assert code.get_text() == "qapla"

    def test_code_highlight(self):
        assert code_highlight("x", "no-such-language") is None
        assert 'class="kd"' in code_highlight("!!! Title\ntext\n!!!\n", "orfalius")


class TestLinksAndImages:
    """Test links, lone images and image sources"""

    def test_external_link(self):
        link = process("[site](https://example.org)").find("a")
        assert link["target"] == "_blank"
        assert link["rel"] == ["noopener", "noreferrer"]

    def test_relative_link(self):
        link = process("[next](next.html)").find("a")
        assert not link.has_attr("target")

    def test_lone_image_figure(self):
        body = process("![cat](cat.png|2)")
        image = body.select_one("figure.img > img")
        assert image["src"] == "img/cat.png"
        assert image["style"] == "max-height: 2em;"
        assert body.find("p") is None

    def test_inline_image(self):
        body = process("see ![cat](cat.png) here")
        image = body.select_one("p > img")
        assert image["src"] == "img/cat.png"
        assert not image.has_attr("style")
        assert body.find("figure") is None

    def test_error_page_image(self):
        image = process("![cat](cat.png)", prefix="/").find("img")
        assert image["src"] == "/img/cat.png"


class TestTimes:
    """Test the timing strip"""

    def test_times_unwrapped(self):
        slashes = "/" * 21
        pre = process(f"{slashes}\n0 12.5\n30\n{slashes}\n").select_one("pre.times")
        assert pre.find("p") is None
        assert pre.get_text().split() == ["0", "12.5", "30"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
