import io
import logging
import os
import tempfile
from dataclasses import dataclass

import pdfplumber

from healthlens.config import Settings

logger = logging.getLogger(__name__)

PDF_TYPES = {"application/pdf"}
IMAGE_TYPES = {"image/png", "image/jpeg", "image/jpg"}


class OcrError(Exception):
    """``kind`` is ``no_text`` when the file holds nothing readable, ``failed`` otherwise."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass
class OcrResult:
    text: str
    page_count: int
    engine: str


def read_pdf_text_layer(file_bytes: bytes) -> tuple[str, int]:
    with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages).strip(), len(pages)


async def parse_with_llamaparse(file_bytes: bytes, file_name: str, settings: Settings) -> tuple[str, int]:
    try:
        from llama_parse import LlamaParse
    except ImportError as exc:
        raise OcrError("failed", "llama_parse is not installed") from exc

    if not settings.llama_cloud_api_key:
        raise OcrError("failed", "LLAMA_CLOUD_API_KEY is missing")

    parser = LlamaParse(
        api_key=settings.llama_cloud_api_key,
        high_res_ocr=True,
        result_type="text",
    )
    suffix = os.path.splitext(file_name)[1] or ".pdf"
    with tempfile.NamedTemporaryFile(suffix=suffix) as tmp:
        tmp.write(file_bytes)
        tmp.flush()
        documents = await parser.aload_data(tmp.name, extra_info={"file_name": os.path.basename(file_name)})
    return "\n\n".join(doc.text for doc in documents).strip(), len(documents)


async def extract_text(file_bytes: bytes, file_name: str, content_type: str, settings: Settings) -> OcrResult:
    if content_type in PDF_TYPES:
        try:
            text, pages = read_pdf_text_layer(file_bytes)
        except Exception as exc:
            raise OcrError("failed", "Unable to read PDF") from exc
        if text:
            return OcrResult(text=text, page_count=pages or 1, engine="pdfplumber")

        logger.info("PDF has no text layer, sending to OCR")
        ocr_text, ocr_pages = await parse_with_llamaparse(file_bytes, file_name, settings)
        if not ocr_text:
            raise OcrError("no_text", "PDF is image-based and no text could be recognised")
        return OcrResult(text=ocr_text, page_count=pages or ocr_pages or 1, engine="llamaparse")

    if content_type in IMAGE_TYPES:
        text, _ = await parse_with_llamaparse(file_bytes, file_name, settings)
        if not text:
            raise OcrError("no_text", "No text found in image")
        return OcrResult(text=text, page_count=1, engine="llamaparse")

    raise OcrError("failed", "Unsupported file type")
