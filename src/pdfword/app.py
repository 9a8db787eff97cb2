#!/usr/bin/env python
"""
Streamlit Web UI for the PDF to Word converter.

Run with:
    streamlit run src/pdfword/app.py

Features:
- Upload a PDF
- Convert with math-aware formatting or plain line-per-paragraph mode
- Download the resulting .docx
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import logging

import streamlit as st

from pdfword.config import get_config
from pdfword.utils.pipeline import ConversionPipeline, ConversionResult

logger = logging.getLogger("pdfword.app")

# Page config must be first Streamlit command
st.set_page_config(
    page_title="PDF to Word",
    page_icon="📄",
    layout="centered",
)


def init_session_state():
    """Initialize session state variables."""
    if "result" not in st.session_state:
        st.session_state.result = None


def render_sidebar() -> dict:
    """Render settings sidebar."""
    st.sidebar.header("⚙️ Settings")

    mode_display = st.sidebar.selectbox(
        "Formatting",
        ["Math-aware", "Plain (one paragraph per line)"],
        help="Math-aware mode re-joins formulas split across lines and normalizes operator spacing"
    )

    use_ocr = st.sidebar.checkbox(
        "OCR fallback for scanned PDFs",
        value=True,
        help="Runs Tesseract when the PDF has no text layer"
    )

    debug_mode = st.sidebar.checkbox("Debug mode", value=False)

    return {
        "mode": "math" if mode_display == "Math-aware" else "legacy",
        "use_ocr": use_ocr,
        "debug_mode": debug_mode,
    }


def convert_upload(uploaded_file, settings: dict) -> ConversionResult:
    """Run the pipeline on an uploaded file."""
    config = get_config()
    config.mode = settings["mode"]
    config.ocr.enabled = settings["use_ocr"]
    config.debug_mode = settings["debug_mode"]

    pipeline = ConversionPipeline(config)
    return pipeline.convert(uploaded_file.getvalue(), filename=uploaded_file.name)


def render_result(result: ConversionResult, settings: dict):
    """Show the download button or the failure message."""
    if not result.ok:
        st.error(result.message)
        if settings["debug_mode"]:
            st.code(f"{result.reason}: {result.error}")
        return

    st.success(f"✅ Converted {result.paragraph_count} paragraphs ({result.source.value})")
    st.download_button(
        "📋 Download DOCX",
        result.data,
        file_name=result.filename,
        mime=result.mime_type,
        use_container_width=True
    )


def main():
    """Main application."""
    init_session_state()

    st.title("📄 PDF to Word")
    st.caption("Convert a PDF into an editable Word document")

    settings = render_sidebar()

    uploaded_file = st.file_uploader(
        "Upload a PDF",
        type=["pdf"],
        help="Text PDFs are converted directly; scanned PDFs go through OCR"
    )

    if uploaded_file:
        st.info(f"📁 **{uploaded_file.name}** ({uploaded_file.size / 1024:.1f} KB)")

        if st.button("🚀 Convert", type="primary", use_container_width=True):
            with st.spinner("Converting..."):
                try:
                    st.session_state.result = convert_upload(uploaded_file, settings)
                except Exception as e:
                    logger.exception("Unexpected conversion error")
                    st.session_state.result = None
                    st.error("Error processing the PDF file")
                    if settings["debug_mode"]:
                        st.code(str(e))

    if st.session_state.result is not None:
        render_result(st.session_state.result, settings)


if __name__ == "__main__":
    main()
