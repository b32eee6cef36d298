"""
Paragraph sigil tests

Tests every sigil transform on rendered documents, the doubled-sigil
escape, and the dispatch table itself.
"""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from orfalius.lib.markdown import markdown_make
from orfalius.lib.postprocess import TreePostprocessor
from orfalius.lib.sigils import SigilDispatcher
from orfalius.models.sigils import SigilKind, SIGIL_RULES


def process(source, dirname=Path("."), prefix=""):
    """Render and postprocess a fragment, returning the body"""
    soup = BeautifulSoup(f"<body>{markdown_make().render(source)}</body>", "html.parser")
    TreePostprocessor(soup, dirname, prefix, highlight_code=False).run(soup.body)
    return soup.body


class TestDispatchTable:
    """Test rule matching"""

    def test_one_handler_per_sigil(self):
        dispatcher = SigilDispatcher()
        assert set(dispatcher.handlers) == {rule.kind for rule in SIGIL_RULES}

    def test_rule_match(self):
        dispatcher = SigilDispatcher()
        assert dispatcher.rule_match("^x").kind == SigilKind.SMALL
        assert dispatcher.rule_match("&amp;u&amp;h").kind == SigilKind.EMBED
        assert dispatcher.rule_match("plain") is None

    def test_doubled_sigil_never_fires(self):
        dispatcher = SigilDispatcher()
        for rule in SIGIL_RULES:
            assert dispatcher.rule_match(rule.escape + "x") is None

    def test_escape_collapse(self):
        dispatcher = SigilDispatcher()
        assert dispatcher.escape_collapse("&amp;&amp;x") == "&amp;x"
        assert dispatcher.escape_collapse("%%x") == "%x"
        assert dispatcher.escape_collapse("plain") is None

    def test_priority_order(self):
        """The first matching rule wins"""
        dispatcher = SigilDispatcher(rules=SIGIL_RULES[::-1])
        assert dispatcher.rule_match("%x").kind == SigilKind.VIDEO
        assert [rule.kind for rule in SigilDispatcher().rules][0] == SigilKind.SMALL


class TestEscapes:
    """Test doubled sigils render one literal character"""

    def test_every_sigil_escapes(self):
        for sigil in ["^", "!", ":", ";", "@", "%", "&"]:
            body = process(f"{sigil}{sigil}literal")
            paragraph = body.find("p")
            assert paragraph is not None, sigil
            assert paragraph.get_text() == f"{sigil}literal"
            assert paragraph.get("class") is None


class TestSimpleSigils:
    """Test small print, alerts and anchors"""

    def test_small(self):
        body = process("^fine *print*")
        small = body.select_one("p > small")
        assert small.get_text() == "fine print"
        assert small.find("em") is not None

    def test_alert(self):
        body = process("!Exam moved to **Friday**")
        alert = body.select_one("p.alert")
        assert alert.get_text() == "Exam moved to Friday"
        assert alert.find("strong") is not None

    def test_anchor(self):
        body = process("@intro")
        anchor = body.select_one("a.anchor")
        assert anchor["id"] == "intro"
        assert anchor.get_text() == ""
        assert body.find("p") is None

    def test_sigil_in_list_item(self):
        body = process("- !Watch out\n- plain\n")
        items = body.select("li")
        assert items[0].get("class") == ["alert"]
        assert items[1].get("class") is None


class TestLecture:
    """Test the single lecture video"""

    def test_lecture(self):
        body = process(":talk.mp4")
        video = body.select_one("video.reader-lecture")
        assert [s["src"] for s in video.find_all("source")] == ["vid/talk.mp4"]
        assert body.find("p") is None

    def test_sources_share_one_video(self):
        """Later lecture paragraphs add sources to the first video"""
        body = process(":talk.webm\n\n:talk.mp4\n")
        videos = body.select("video.reader-lecture")
        assert len(videos) == 1
        assert [s["src"] for s in videos[0].find_all("source")] == ["vid/talk.webm", "vid/talk.mp4"]
        assert body.find("p") is None


class TestVideo:
    """Test inline video figures"""

    def test_video(self):
        body = process("%clip.mp4")
        video = body.select_one("figure.video > video")
        assert video["src"] == "vid/clip.mp4"
        assert video.has_attr("controls")
        assert not video.has_attr("poster")

    def test_video_with_poster(self):
        video = process("%clip.mp4%still.png").select_one("figure.video > video")
        assert video["src"] == "vid/clip.mp4"
        assert video["poster"] == "vid/still.png"

    def test_video_url(self):
        video = process("%https://example.org/clip.mp4").select_one("video")
        assert video["src"] == "https://example.org/clip.mp4"


class TestEmbed:
    """Test snippet embed placeholders"""

    def test_embed_default_tab(self):
        paragraph = process("&alice&abc123").select_one("p.codepen")
        assert paragraph["data-user"] == "alice"
        assert paragraph["data-slug-hash"] == "abc123"
        assert paragraph["data-default-tab"] == "result"
        assert paragraph["data-theme-id"] == "dark"
        assert paragraph.get_text() == ""

    def test_embed_tab(self):
        paragraph = process("&alice&abc123&js").select_one("p.codepen")
        assert paragraph["data-default-tab"] == "js"


class TestAnimation:
    """Test animation figures built from frame folders"""

    def test_frames_sorted(self, tmp_path):
        frames = tmp_path / "img" / "steps"
        frames.mkdir(parents=True)
        for name in ["b.png", "c.png", "a.png"]:
            (frames / name).write_bytes(b"")

        body = process(";steps", dirname=tmp_path)
        images = body.select("div.animation > img.frame")
        assert [img["src"] for img in images] == ["img/steps/a.png", "img/steps/b.png", "img/steps/c.png"]
        assert [img["alt"] for img in images] == ["1", "2", "3"]
        assert body.find("p") is None

    def test_frames_absolute_prefix(self, tmp_path):
        frames = tmp_path / "img" / "steps"
        frames.mkdir(parents=True)
        (frames / "a.png").write_bytes(b"")

        body = process(";steps", dirname=tmp_path, prefix="/")
        assert body.select_one("img.frame")["src"] == "/img/steps/a.png"

    def test_empty_folder_leaves_paragraph(self, tmp_path):
        (tmp_path / "img" / "empty").mkdir(parents=True)

        body = process(";empty", dirname=tmp_path)
        assert body.select_one("div.animation") is None
        assert body.find("p").get_text() == ";empty"

    def test_missing_folder(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            process(";nowhere", dirname=tmp_path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
