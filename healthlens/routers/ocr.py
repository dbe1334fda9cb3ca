import logging

from fastapi import APIRouter, Depends, File, UploadFile

from healthlens.config import Settings
from healthlens.errors import ApiError
from healthlens.routers.deps import get_settings
from healthlens.schemas.requests import OcrFileMeta, OcrFileResult
from healthlens.services.ocr import IMAGE_TYPES, PDF_TYPES, OcrError, extract_text

router = APIRouter(prefix="/ocr", tags=["ocr"])
logger = logging.getLogger(__name__)


@router.post("/extract")
async def extract(
    file: list[UploadFile] | None = File(default=None),
    settings: Settings = Depends(get_settings),
):
    uploads = file or []
    if not uploads:
        raise ApiError("UNSUPPORTED_FILE", "No files uploaded", 400)
    if len(uploads) > settings.ocr_max_files:
        raise ApiError("UNSUPPORTED_FILE", f"Maximum {settings.ocr_max_files} files allowed", 400)

    pdf_count = sum(1 for upload in uploads if upload.content_type in PDF_TYPES)
    image_count = sum(1 for upload in uploads if upload.content_type in IMAGE_TYPES)
    if pdf_count > settings.ocr_max_pdfs:
        raise ApiError("UNSUPPORTED_FILE", f"Maximum {settings.ocr_max_pdfs} PDF allowed", 400)
    if image_count > settings.ocr_max_images:
        raise ApiError("UNSUPPORTED_FILE", f"Maximum {settings.ocr_max_images} images allowed", 400)

    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    results: list[OcrFileResult] = []
    for upload in uploads:
        name = upload.filename
        if upload.content_type not in PDF_TYPES | IMAGE_TYPES:
            results.append(OcrFileResult(originalname=name, error="Unsupported file type", code="UNSUPPORTED_FILE"))
            continue

        file_bytes = await upload.read()
        if len(file_bytes) > max_size_bytes:
            results.append(
                OcrFileResult(
                    originalname=name,
                    error=f"File too large. Max size is {settings.max_upload_size_mb}MB",
                    code="UNSUPPORTED_FILE",
                )
            )
            continue

        try:
            extracted = await extract_text(file_bytes, name or "upload", upload.content_type, settings)
        except OcrError as exc:
            logger.warning("OCR %s for an uploaded file: %s", exc.kind, exc.message)
            results.append(OcrFileResult(originalname=name, error=exc.message, code="OCR_FAILED"))
            continue
        except Exception:
            logger.exception("OCR error for an uploaded file")
            results.append(OcrFileResult(originalname=name, error="Unable to extract text", code="OCR_FAILED"))
            continue

        results.append(
            OcrFileResult(
                originalname=name,
                text=extracted.text,
                meta=OcrFileMeta(pages=extracted.page_count, engine=extracted.engine),
            )
        )

    return {"files": [result.model_dump(exclude_none=True) for result in results]}
