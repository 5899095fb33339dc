import io
import os
import logging

import fitz  # PyMuPDF
from PIL import Image
import pytesseract

logger = logging.getLogger("questly")

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


def extract_text_from_pdf(path=None, data=None):
    try:
        doc = fitz.open(path) if data is None else fitz.open(stream=data, filetype="pdf")
        with doc:
            text = "\n".join(page.get_text() for page in doc)
        return text.strip()
    except Exception as e:
        logger.error("PDF extract failed: %s", e)
        return ""


def extract_text_from_image(path=None, data=None):
    try:
        source = path if data is None else io.BytesIO(data)
        return pytesseract.image_to_string(Image.open(source)).strip()
    except Exception as e:
        logger.error("Image OCR failed: %s", e)
        return ""


def extract_text_from_bytes(data, filename="", mimetype=""):
    """Dispatch on file name / mime type; plain text is the default."""
    name = (filename or "").lower()
    mimetype = (mimetype or "").lower()
    if mimetype == "application/pdf" or name.endswith(".pdf"):
        return extract_text_from_pdf(data=data)
    if mimetype.startswith("image/") or name.endswith(IMAGE_EXTENSIONS):
        return extract_text_from_image(data=data)
    return data.decode("utf-8", errors="ignore")


def extract_text(file):
    """Extract text from an upload (werkzeug FileStorage) or a filesystem path."""
    if isinstance(file, (str, os.PathLike)):
        try:
            with open(file, "rb") as f:
                data = f.read()
        except OSError as e:
            logger.error("Could not read %s: %s", file, e)
            return ""
        return extract_text_from_bytes(data, filename=os.fspath(file))
    try:
        data = file.read()
    except Exception as e:
        logger.error("Could not read upload: %s", e)
        return ""
    return extract_text_from_bytes(data, filename=file.filename, mimetype=file.mimetype)
