"""
End-to-end tests for the conversion pipeline, configuration and CLI.

The text source is faked; normalization, reconstruction, formatting and
DOCX assembly run for real.
"""

import io
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< >>\nendobj\n%%EOF\n"

SAMPLE_TEXT = """Lecture notes: Functions
Let
f
=
x
+ 1,
where f ( 2 )=3.
● first property
● second property
"""


def docx_texts(data: bytes):
    from docx import Document
    return [p.text for p in Document(io.BytesIO(data)).paragraphs if p.text]


def make_pipeline(text=None, ocr_text="", error=None, **config_overrides):
    """Pipeline with a fake text source."""
    from pdfword.config import PipelineConfig
    from pdfword.utils.extract import TextSource
    from pdfword.utils.pipeline import ConversionPipeline

    calls = {"text_layer": 0, "ocr": 0}

    def text_layer(data):
        calls["text_layer"] += 1
        if error:
            raise error
        return text

    def ocr(data):
        calls["ocr"] += 1
        return ocr_text

    config = PipelineConfig(**config_overrides)
    source = TextSource(config.extraction, config.ocr, text_layer=text_layer, ocr=ocr)
    return ConversionPipeline(config, text_source=source), calls


class TestPipeline:
    """Test ConversionPipeline.convert()."""

    def test_math_mode(self):
        """Fragments are rejoined, formulas spaced and bullets split."""
        pipeline, calls = make_pipeline(SAMPLE_TEXT)

        result = pipeline.convert(PDF_BYTES, filename="lecture3.pdf")

        assert result.ok
        assert result.status_code == 200
        assert result.filename == "lecture3.docx"
        assert result.mime_type == (
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        )
        assert result.source.value == "embedded-text"
        assert calls == {"text_layer": 1, "ocr": 0}

        texts = docx_texts(result.data)
        assert texts == [
            "Lecture notes: Functions Let f = x + 1, where f(2) = 3.",
            "●",
            "first property",
            "●",
            "second property",
        ]
        assert result.paragraph_count == len(texts)

    def test_legacy_mode(self):
        """Legacy mode emits one paragraph per line without math formatting."""
        pipeline, _ = make_pipeline("x=1\n\ny  =  2", mode="legacy")

        result = pipeline.convert(PDF_BYTES)

        assert result.ok
        assert result.paragraph_count == 3
        assert docx_texts(result.data) == ["x=1", "y  =  2"]

    def test_ocr_fallback(self):
        """Scanned PDFs are converted from OCR text."""
        pipeline, calls = make_pipeline("", ocr_text="a=b")

        result = pipeline.convert(PDF_BYTES, filename="scan.pdf")

        assert result.ok
        assert result.source.value == "ocr"
        assert calls == {"text_layer": 1, "ocr": 1}
        assert docx_texts(result.data) == ["a = b"]

    def test_text_layer_error_falls_back(self):
        """A crashing text layer is not surfaced; OCR runs once."""
        pipeline, calls = make_pipeline(error=ValueError("bad xref"), ocr_text="recognized")

        result = pipeline.convert(PDF_BYTES)

        assert result.ok
        assert calls["ocr"] == 1

    def test_no_text_found(self):
        """Whitespace from both strategies yields NoTextFound and no bytes."""
        pipeline, calls = make_pipeline("  \n ", ocr_text=" \t\n")

        result = pipeline.convert(PDF_BYTES)

        assert not result.ok
        assert result.data is None
        assert result.reason == "NoTextFound"
        assert result.status_code == 422
        assert result.message == "Unable to extract text from the PDF"
        assert calls["ocr"] == 1

    @pytest.mark.parametrize("mode", ["math", "legacy"])
    def test_xml_illegal_characters_do_not_fail(self, mode):
        """Stray noncharacters in the text layer are dropped, not fatal."""
        pipeline, _ = make_pipeline("Page one text\n\ufffe\nMore text\uffff.", mode=mode)

        result = pipeline.convert(PDF_BYTES)

        assert result.ok
        assert "More text." in " ".join(docx_texts(result.data))

    def test_invalid_upload(self):
        """Non-PDF uploads fail before any extraction."""
        pipeline, calls = make_pipeline("text")

        result = pipeline.convert(b"GIF89a...")

        assert result.reason == "FormParsingFailure"
        assert result.status_code == 400
        assert calls == {"text_layer": 0, "ocr": 0}

    def test_build_failure(self, monkeypatch):
        """Serialization errors map to a generic processing error."""
        from pdfword.utils.errors import DocumentBuildFailure

        pipeline, _ = make_pipeline("text")

        def broken(paragraphs):
            raise DocumentBuildFailure("lxml exploded")

        monkeypatch.setattr(pipeline.assembler, "assemble", broken)
        result = pipeline.convert(PDF_BYTES)

        assert result.reason == "DocumentBuildFailure"
        assert result.status_code == 500
        assert result.message == "Error processing the PDF file"
        assert "lxml" not in result.message
        assert result.source.value == "embedded-text"

    def test_default_filename(self):
        """Without an upload name the fixed fallback name is used."""
        pipeline, _ = make_pipeline("text")

        assert pipeline.convert(PDF_BYTES).filename == "converted_document.docx"

    def test_filename_from_path(self, tmp_path):
        """Converting a path derives the name from it."""
        pipeline, _ = make_pipeline("text")
        pdf = tmp_path / "notes.pdf"
        pdf.write_bytes(PDF_BYTES)

        assert pipeline.convert(pdf).filename == "notes.docx"

    def test_exact_spacing_parity(self):
        """The single-shot collapse can be switched back on."""
        from pdfword.config import FormatterConfig

        pipeline, _ = make_pipeline(
            "one   two   three", formatter=FormatterConfig(collapse_all_spaces=False)
        )

        paragraphs = pipeline.build_paragraphs("one   two   three")

        assert paragraphs[0].text == "one two   three"

    def test_to_dict(self):
        """Results serialize without the document bytes."""
        pipeline, _ = make_pipeline("x")

        data = pipeline.convert(PDF_BYTES, filename="a.pdf").to_dict()

        assert data["ok"] is True
        assert data["filename"] == "a.docx"
        assert data["source"] == "embedded-text"
        assert "data" not in data


class TestConfig:
    """Test configuration and environment overrides."""

    def test_defaults(self, monkeypatch):
        """Defaults match the documented values."""
        from pdfword.config import get_config

        for name in ["PDFWORD_MODE", "PDFWORD_OCR_DPI", "PDFWORD_OCR_LANG",
                     "PDFWORD_TESSERACT_CMD", "PDFWORD_NO_OCR", "PDFWORD_DEBUG",
                     "PDFWORD_EXACT_SPACING"]:
            monkeypatch.delenv(name, raising=False)

        config = get_config()

        assert config.mode == "math"
        assert config.ocr.tesseract_lang == "eng"
        assert config.ocr.dpi == 300
        assert config.ocr.enabled is True
        assert config.formatter.font_size_half_points == 24
        assert config.formatter.space_after_twips == 200
        assert config.formatter.collapse_all_spaces is True

    def test_env_overrides(self, monkeypatch):
        """Environment variables override the defaults."""
        from pdfword.config import get_config

        monkeypatch.setenv("PDFWORD_MODE", "legacy")
        monkeypatch.setenv("PDFWORD_OCR_DPI", "400")
        monkeypatch.setenv("PDFWORD_NO_OCR", "true")
        monkeypatch.setenv("PDFWORD_EXACT_SPACING", "1")
        monkeypatch.setenv("PDFWORD_TESSERACT_CMD", "/usr/local/bin/tesseract")

        config = get_config()

        assert config.mode == "legacy"
        assert config.ocr.dpi == 400
        assert config.ocr.enabled is False
        assert config.formatter.collapse_all_spaces is False
        assert config.ocr.tesseract_cmd == "/usr/local/bin/tesseract"

    def test_bad_env_values_ignored(self, monkeypatch):
        """Invalid overrides are ignored."""
        from pdfword.config import get_config

        monkeypatch.setenv("PDFWORD_MODE", "fancy")
        monkeypatch.setenv("PDFWORD_OCR_DPI", "high")

        config = get_config()

        assert config.mode == "math"
        assert config.ocr.dpi == 300

    def test_invalid_mode_rejected(self):
        """Unknown modes are rejected at construction."""
        from pdfword.config import PipelineConfig

        with pytest.raises(ValueError):
            PipelineConfig(mode="fancy")


class TestCLI:
    """Test the command-line interface."""

    @pytest.fixture
    def sample_pdf(self, tmp_path, monkeypatch):
        from pdfword.utils import extract

        monkeypatch.setattr(extract, "extract_text_layer", lambda data, **kw: "x=y+2")
        for name in ["PDFWORD_MODE", "PDFWORD_NO_OCR", "PDFWORD_EXACT_SPACING"]:
            monkeypatch.delenv(name, raising=False)

        pdf = tmp_path / "algebra.pdf"
        pdf.write_bytes(PDF_BYTES)
        return pdf

    def test_writes_docx_next_to_input(self, sample_pdf):
        """By default the document is written beside the PDF."""
        from pdfword.cli import setup_argparser, run_pipeline

        args = setup_argparser().parse_args(["--input", str(sample_pdf), "--quiet"])

        assert run_pipeline(args) == 0
        output = sample_pdf.with_name("algebra.docx")
        assert docx_texts(output.read_bytes()) == ["x = y + 2"]

    def test_output_directory(self, sample_pdf, tmp_path):
        """An output directory receives the derived file name."""
        from pdfword.cli import setup_argparser, run_pipeline

        out_dir = tmp_path / "out"
        args = setup_argparser().parse_args(
            ["-i", str(sample_pdf), "-o", str(out_dir), "--mode", "legacy", "-q"]
        )

        assert run_pipeline(args) == 0
        assert docx_texts((out_dir / "algebra.docx").read_bytes()) == ["x=y+2"]

    def test_text_preview(self, sample_pdf, capsys):
        """--text prints paragraphs instead of writing a document."""
        from pdfword.cli import setup_argparser, run_pipeline

        args = setup_argparser().parse_args(["-i", str(sample_pdf), "--text"])

        assert run_pipeline(args) == 0
        assert capsys.readouterr().out.strip() == "x = y + 2"
        assert not sample_pdf.with_name("algebra.docx").exists()

    def test_missing_input(self, tmp_path):
        """A missing input file is an error exit."""
        from pdfword.cli import setup_argparser, run_pipeline

        args = setup_argparser().parse_args(["-i", str(tmp_path / "none.pdf")])

        assert run_pipeline(args) == 1

    def test_no_text_exit_code(self, sample_pdf, monkeypatch):
        """Conversion failures exit with 1."""
        from pdfword.utils import extract
        from pdfword.cli import setup_argparser, run_pipeline

        monkeypatch.setattr(extract, "extract_text_layer", lambda data, **kw: "")
        args = setup_argparser().parse_args(["-i", str(sample_pdf), "--no-ocr", "-q"])

        assert run_pipeline(args) == 1

    def test_resolve_output_path(self, tmp_path):
        """Explicit .docx paths are used as-is."""
        from pdfword.cli import resolve_output_path

        src = tmp_path / "a.pdf"

        assert resolve_output_path(src, None, "a.docx") == tmp_path / "a.docx"
        assert resolve_output_path(src, str(tmp_path / "b.docx"), "a.docx") == tmp_path / "b.docx"
        assert resolve_output_path(src, str(tmp_path), "a.docx") == tmp_path / "a.docx"

    def test_build_config(self):
        """Flags override the configuration."""
        from pdfword.cli import setup_argparser, build_config

        args = setup_argparser().parse_args(
            ["-i", "x.pdf", "--mode", "legacy", "--no-ocr", "--dpi", "150",
             "--lang", "deu", "--exact-spacing"]
        )
        config = build_config(args)

        assert config.mode == "legacy"
        assert config.ocr.enabled is False
        assert config.ocr.dpi == 150
        assert config.ocr.tesseract_lang == "deu"
        assert config.formatter.collapse_all_spaces is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
