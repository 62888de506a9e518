"""Tests for pipeline orchestrator and CLI.

These tests write small Aozora texts to tmp_path and run the full
load → parse → generate flow, plus CLI argument handling.
"""

import json

import pytest
from click.testing import CliRunner
from docx import Document as open_docx

from aozora_reader.cli import main
from aozora_reader.config import Config, ParserConfig
from aozora_reader.exceptions import EncodingError, FileSizeLimitError, ParseError
from aozora_reader.ir.schema import Heading, HeadingLevel, ParsedDocument, PlainText, Range
from aozora_reader.pipeline import Pipeline


SAMPLE = (
    "第一章［＃「第一章」は大見出し］\n"
    "｜我輩《わがはい》は猫である。\n"
    "一節［＃「一節」は中見出し］\n"
    "［＃ここから２字下げ］\n"
    "名前はまだ無い。\n"
    "［＃ここで字下げ終わり］\n"
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_txt(tmp_path):
    path = tmp_path / "neko.txt"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


def _simple_document() -> ParsedDocument:
    return ParsedDocument(
        title="Title",
        elements=[
            Heading(level=HeadingLevel.LARGE, text="Title", id="title-1", range=Range.span(0, 5)),
            PlainText(content="Body text.", range=Range.span(6, 16)),
        ],
    )


# ---------------------------------------------------------------------------
# Pipeline tests
# ---------------------------------------------------------------------------

class TestPipelineLoad:
    def test_load_utf8(self, sample_txt):
        text, result = Pipeline().load(sample_txt)
        assert text == SAMPLE
        assert result.encoding.value == "utf-8"

    def test_load_shift_jis(self, tmp_path):
        path = tmp_path / "sjis.txt"
        path.write_bytes("吾輩は猫である".encode("cp932"))
        text, result = Pipeline().load(path)
        assert text == "吾輩は猫である"
        assert result.encoding.value == "shift-jis"

    def test_binary_rejected(self, tmp_path):
        path = tmp_path / "image.bin"
        path.write_bytes(b"\x89PNG\x00\x00\x00\x00" * 10)
        with pytest.raises(EncodingError, match="binary"):
            Pipeline().load(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(EncodingError, match="Failed to read"):
            Pipeline().load(tmp_path / "missing.txt")

    @pytest.mark.asyncio
    async def test_aload(self, sample_txt):
        text, result = await Pipeline().aload(sample_txt)
        assert text == SAMPLE
        assert result.is_valid is True

    @pytest.mark.asyncio
    async def test_aload_binary_rejected(self, tmp_path):
        path = tmp_path / "image.bin"
        path.write_bytes(b"\x89PNG\x00\x00\x00\x00" * 10)
        with pytest.raises(EncodingError, match="binary"):
            await Pipeline().aload(path)

    @pytest.mark.asyncio
    async def test_aload_missing_file(self, tmp_path):
        with pytest.raises(EncodingError, match="Failed to read"):
            await Pipeline().aload(tmp_path / "missing.txt")

    @pytest.mark.asyncio
    async def test_aparse_file(self, sample_txt):
        parsed = await Pipeline().aparse_file(sample_txt)
        assert parsed.title == "第一章"


class TestPipelineParse:
    def test_parse_file(self, sample_txt):
        pipeline = Pipeline()
        parsed = pipeline.parse_file(sample_txt)
        assert parsed.title == "第一章"
        assert [h.text for h in parsed.headings] == ["第一章", "一節"]
        assert parsed.metadata.filename == "neko.txt"
        assert parsed.metadata.encoding == "utf-8"
        assert parsed.metadata.is_valid_encoding is True

    def test_last_report(self, sample_txt):
        pipeline = Pipeline()
        pipeline.parse_file(sample_txt)
        report = pipeline.last_report
        assert report is not None
        assert report.heading_count == 2
        assert report.ruby_count == 1
        assert report.indent_block_count == 1

    def test_size_limit_propagates(self, sample_txt):
        pipeline = Pipeline(Config(parser=ParserConfig(max_file_size=10)))
        with pytest.raises(FileSizeLimitError):
            pipeline.parse_file(sample_txt)

    def test_inspect_returns_json(self, sample_txt):
        data = json.loads(Pipeline().inspect(sample_txt))
        assert data["title"] == "第一章"
        assert any(e["type"] == "indent-block" for e in data["elements"])


class TestPipelineGenerate:
    def test_convert(self, sample_txt, tmp_path):
        out = tmp_path / "neko.docx"
        result = Pipeline().convert(sample_txt, out)
        assert result == out
        texts = [p.text for p in open_docx(str(out)).paragraphs]
        assert "第一章" in texts
        assert "我輩（わがはい）は猫である。" in texts

    def test_convert_with_json_and_report(self, sample_txt, tmp_path):
        out = tmp_path / "neko.docx"
        Pipeline().convert(sample_txt, out, save_json=True, save_report=True)
        assert (tmp_path / "neko.json").exists()
        report = json.loads((tmp_path / "neko.report.json").read_text(encoding="utf-8"))
        assert report["summary"]["headings"] == 2

    def test_custom_json_path(self, sample_txt, tmp_path):
        json_path = tmp_path / "custom.json"
        Pipeline().convert(sample_txt, tmp_path / "neko.docx", save_json=True, json_path=json_path)
        assert json_path.exists()

    def test_save_and_load_json(self, tmp_path):
        pipeline = Pipeline()
        json_path = tmp_path / "doc.json"
        pipeline.save_json(_simple_document(), json_path)
        assert json_path.exists()

        out = tmp_path / "from_json.docx"
        result = pipeline.from_json(json_path, out)
        assert result == out
        assert out.exists()

    def test_save_json_roundtrip_content(self, tmp_path):
        json_path = tmp_path / "doc.json"
        Pipeline.save_json(_simple_document(), json_path)
        restored = ParsedDocument.from_json(json_path.read_text(encoding="utf-8"))
        assert restored.elements == _simple_document().elements

    def test_from_json_missing_file(self, tmp_path):
        with pytest.raises(ParseError, match="not found"):
            Pipeline().from_json(tmp_path / "nonexistent.json", tmp_path / "out.docx")

    def test_from_json_invalid_content(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"elements": [{"type": "nope"}]}', encoding="utf-8")
        with pytest.raises(ParseError, match="Failed to load"):
            Pipeline().from_json(bad, tmp_path / "out.docx")


# ---------------------------------------------------------------------------
# CLI tests
# ---------------------------------------------------------------------------

class TestCLI:
    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("convert", "inspect", "from-json", "detect", "toc"):
            assert command in result.output

    def test_convert_default_output(self, sample_txt):
        result = CliRunner().invoke(main, ["convert", str(sample_txt)])
        assert result.exit_code == 0, result.output
        assert sample_txt.with_suffix(".docx").exists()
        assert "Generated:" in result.output

    def test_convert_with_report(self, sample_txt, tmp_path):
        out = tmp_path / "out.docx"
        result = CliRunner().invoke(main, ["convert", str(sample_txt), str(out), "--report", "--save-json"])
        assert result.exit_code == 0, result.output
        assert "Report: 2 headings, 1 ruby, 0 images" in result.output
        assert (tmp_path / "out.report.json").exists()
        assert (tmp_path / "out.json").exists()

    def test_inspect(self, sample_txt):
        result = CliRunner().invoke(main, ["inspect", str(sample_txt)])
        assert result.exit_code == 0
        assert json.loads(result.output)["title"] == "第一章"

    def test_from_json(self, tmp_path):
        json_path = tmp_path / "doc.json"
        Pipeline.save_json(_simple_document(), json_path)
        out = tmp_path / "out.docx"
        result = CliRunner().invoke(main, ["from-json", str(json_path), str(out)])
        assert result.exit_code == 0
        assert out.exists()

    def test_detect(self, tmp_path):
        path = tmp_path / "sjis.txt"
        path.write_bytes("吾輩は猫である".encode("cp932"))
        result = CliRunner().invoke(main, ["detect", str(path)])
        assert result.exit_code == 0
        assert "shift-jis" in result.output
        assert "BOM:        no" in result.output

    def test_toc(self, sample_txt):
        result = CliRunner().invoke(main, ["toc", str(sample_txt)])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["第一章", "  一節"]

    def test_toc_without_headings(self, tmp_path):
        path = tmp_path / "plain.txt"
        path.write_text("本文のみ", encoding="utf-8")
        result = CliRunner().invoke(main, ["toc", str(path)])
        assert "(no headings)" in result.output

    def test_error_exit_code(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x00" * 100)
        result = CliRunner().invoke(main, ["convert", str(path)])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_config_option(self, sample_txt, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("parser:\n  max_file_size: 5\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["--config", str(config), "inspect", str(sample_txt)])
        assert result.exit_code == 1
        assert "File size exceeds maximum limit" in result.output

    def test_missing_input_file(self, tmp_path):
        result = CliRunner().invoke(main, ["convert", str(tmp_path / "missing.txt")])
        assert result.exit_code != 0
