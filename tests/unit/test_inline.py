"""Tests for inline notation recognizers (ruby, headings, images, captions, text)."""

import pytest

from aozora_reader.config import ParserConfig
from aozora_reader.ir.schema import Caption, Heading, HeadingLevel, Image, PlainText, RubyText
from aozora_reader.parsers.inline import InlineNotationParser, slugify


@pytest.fixture
def parser():
    return InlineNotationParser(ParserConfig())


class TestRuby:
    def test_explicit_range(self, parser):
        match = parser.parse_ruby("｜我輩《わがはい》は猫である", 0)
        assert isinstance(match.element, RubyText)
        assert match.element.text == "我輩"
        assert match.element.ruby == "わがはい"
        assert match.length == len("｜我輩《わがはい》")

    def test_single_character(self, parser):
        match = parser.parse_ruby("猫《ねこ》である", 5)
        assert match.element.text == "猫"
        assert match.element.ruby == "ねこ"
        assert match.element.range.start.index == 5
        assert match.element.range.end.index == 5 + len("猫《ねこ》")

    def test_single_form_takes_one_character_only(self, parser):
        assert parser.parse_ruby("学校《がっこう》", 0) is None

    def test_unclosed_reading(self, parser):
        assert parser.parse_ruby("猫《ねこ", 0) is None

    def test_whitespace_base_rejected(self, parser):
        assert parser.parse_ruby("　《よみ》", 0) is None

    def test_disabled(self):
        parser = InlineNotationParser(ParserConfig(enable_ruby=False))
        assert parser.parse_ruby("猫《ねこ》", 0) is None


class TestHeading:
    @pytest.mark.parametrize(
        "marker,level",
        [("大", HeadingLevel.LARGE), ("中", HeadingLevel.MEDIUM), ("小", HeadingLevel.SMALL)],
    )
    def test_levels(self, parser, marker, level):
        match = parser.parse_heading(f"第一章［＃「第一章」は{marker}見出し］", 0)
        assert isinstance(match.element, Heading)
        assert match.element.level == level
        assert match.element.text == "第一章"

    def test_consumes_whole_directive(self, parser):
        text = "序［＃「序」は中見出し］本文"
        match = parser.parse_heading(text, 0)
        assert match.length == len("序［＃「序」は中見出し］")

    def test_id_is_slug(self, parser):
        match = parser.parse_heading("Chapter One［＃「Chapter One」は大見出し］", 0)
        assert match.element.id == "chapter-one"

    def test_leading_text_left_for_plain_text(self, parser):
        assert parser.parse_heading("前文。第一章［＃「第一章」は大見出し］", 0) is None

    def test_disabled(self):
        parser = InlineNotationParser(ParserConfig(enable_headings=False))
        assert parser.parse_heading("第一章［＃「第一章」は大見出し］", 0) is None


class TestImage:
    def test_with_dimensions(self, parser):
        match = parser.parse_image("［＃挿絵（fig01.png、横320×縦240）入る］", 0)
        assert isinstance(match.element, Image)
        assert match.element.description == "挿絵"
        assert match.element.filename == "fig01.png"
        assert match.element.width == 320
        assert match.element.height == 240

    def test_full_width_dimensions(self, parser):
        match = parser.parse_image("［＃挿絵（fig01.png、横３２０×縦２４０）入る］", 0)
        assert (match.element.width, match.element.height) == (320, 240)

    def test_without_dimensions(self, parser):
        match = parser.parse_image("［＃地図（map.jpg）入る］後", 0)
        assert match.element.filename == "map.jpg"
        assert match.element.width is None
        assert match.element.height is None
        assert match.length == len("［＃地図（map.jpg）入る］")

    def test_disabled(self):
        parser = InlineNotationParser(ParserConfig(enable_images=False))
        assert parser.parse_image("［＃挿絵（a.png）入る］", 0) is None


class TestCaption:
    def test_caption(self, parser):
        match = parser.parse_caption("図１［＃「図１」はキャプション］", 3)
        assert isinstance(match.element, Caption)
        assert match.element.text == "図１"
        assert match.element.range.start.index == 3

    def test_disabled(self):
        parser = InlineNotationParser(ParserConfig(enable_captions=False))
        assert parser.parse_caption("図１［＃「図１」はキャプション］", 0) is None


class TestPlainText:
    def test_runs_to_end(self, parser):
        match = parser.parse_plain_text("ただの文章", 0)
        assert match.element.content == "ただの文章"
        assert match.length == 5

    def test_holds_back_character_before_ruby(self, parser):
        match = parser.parse_plain_text("と雑誌《ざっし》", 0)
        assert match.element.content == "と雑"

    def test_single_character_before_ruby_consumed(self, parser):
        match = parser.parse_plain_text("学校《がっこう》", 0)
        assert match.element.content == "学"

    def test_minimum_one_character(self, parser):
        match = parser.parse_plain_text("》残り", 0)
        assert match.element.content == "》"
        assert match.length == 1

    def test_stops_at_bracket(self, parser):
        match = parser.parse_plain_text("本文［＃挿絵（a.png）入る］", 0)
        assert match.element.content == "本文"

    def test_stops_before_heading_target(self, parser):
        match = parser.parse_plain_text("前文。第一章［＃「第一章」は大見出し］", 0)
        assert match.element.content == "前文。"

    def test_empty_returns_none(self, parser):
        assert parser.parse_plain_text("", 0) is None


class TestRecognizerOrder:
    def test_priority(self, parser):
        names = [r.__name__ for r in parser.recognizers()]
        assert names == [
            "parse_ruby",
            "parse_heading",
            "parse_image",
            "parse_caption",
            "parse_plain_text",
        ]


class TestSlugify:
    def test_spaces_and_case(self):
        assert slugify("Hello World") == "hello-world"

    def test_japanese_kept(self):
        assert slugify("第一章") == "第一章"

    def test_punctuation_only_falls_back(self):
        assert slugify("！？") == "heading"
