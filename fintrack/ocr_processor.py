"""
FinTrack - Text Extraction

PURPOSE: Recover plain text from uploaded receipt images and PDF documents
SCOPE: Tesseract OCR for images, PyMuPDF text layer for PDFs
DEPENDENCIES: pytesseract, cv2, PIL, numpy, fitz (PyMuPDF)
"""

import asyncio
import io
import logging

import cv2
import fitz  # PyMuPDF
import numpy as np
import pytesseract
from PIL import Image

from .config import config
from .exceptions import ExtractionError, ExtractionKind

logger = logging.getLogger(__name__)


class TesseractBackend:
    """OCR backend for image uploads using a single Tesseract language model."""

    name = 'ocr'

    def __init__(self, language: str = None, ocr_config: str = None):
        self.language = language or config.OCR_LANGUAGE
        self.ocr_config = ocr_config or config.OCR_CONFIG

    def extract_text(self, data: bytes) -> str:
        with Image.open(io.BytesIO(data)) as image:
            gray = cv2.cvtColor(np.array(image.convert('RGB')), cv2.COLOR_RGB2GRAY)
        return pytesseract.image_to_string(
            gray, lang=self.language, config=self.ocr_config
        )


class PyMuPDFBackend:
    """Text-layer backend for PDF uploads."""

    name = 'pdf'

    def extract_text(self, data: bytes) -> str:
        doc = fitz.open(stream=data, filetype='pdf')
        try:
            logger.debug(f"Reading PDF with {doc.page_count} pages")
            return "\n".join(page.get_text() for page in doc)
        finally:
            doc.close()


class TextExtractor:
    """Selects a backend by media type and turns its output into text or a typed failure."""

    def __init__(self, ocr_backend=None, pdf_backend=None):
        self.ocr_backend = ocr_backend or TesseractBackend()
        self.pdf_backend = pdf_backend or PyMuPDFBackend()

    def backend_for(self, media_type: str):
        return self.pdf_backend if config.is_pdf(media_type) else self.ocr_backend

    async def extract(self, data: bytes, media_type: str) -> str:
        """Extract text from a document, running the blocking backend in an executor."""
        backend = self.backend_for(media_type)
        logger.info(f"Extracting text from {len(data)} bytes ({media_type}) with {backend.name} backend")

        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(None, backend.extract_text, data)
        except Exception as e:
            logger.error(f"{backend.name} backend failed: {e}")
            raise ExtractionError(
                f"Failed to read the document with the {backend.name} backend: {e}",
                ExtractionKind.BACKEND_FAILURE,
            ) from e

        if not text or not text.strip():
            logger.warning("No text extracted from document")
            raise ExtractionError(
                "The document was readable but contained no text",
                ExtractionKind.EMPTY_OUTPUT,
            )

        logger.info(f"Extracted {len(text)} characters")
        return text
