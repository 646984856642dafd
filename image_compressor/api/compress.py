from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from image_compressor.core.config import get_settings
from image_compressor.core.logging import configure_logging
from image_compressor.models import CompressionRequest, ErrorResponse, HistoryResponse, ImageFormat
from image_compressor.models.compress import validate_options
from image_compressor.services.compression_service import CompressionService
from image_compressor.storage.lifecycle import ArtifactLifecycle
from image_compressor.storage.local import LocalStorage
from image_compressor.utils.file_utils import download_name, ensure_image, parse_optional_int
from image_compressor.utils.responses import ArtifactFileResponse

router = APIRouter(prefix="/api/compress", tags=["Image Compression"])

logger = configure_logging()
settings = get_settings()
storage = LocalStorage()
compression_service = CompressionService()


@router.post(
    "/image",
    summary="ضغط صورة مرفوعة وإرجاع الملف الناتج",
    responses={code: {"model": ErrorResponse} for code in (400, 422, 500, 503, 504)},
)
async def compress_image(
    image: Optional[UploadFile] = File(None),
    quality: Optional[str] = Form(None),
    output_format: Optional[str] = Form(None, alias="format"),
    max_width: Optional[str] = Form(None, alias="maxWidth"),
    max_height: Optional[str] = Form(None, alias="maxHeight"),
    target_size: Optional[str] = Form(None, alias="targetSize"),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="لم يتم إرسال ملف صورة.")

    ensure_image(image, settings.allowed_extensions)

    # التحقق من خيارات الطلب قبل كتابة أي ملف على القرص
    requested_quality = parse_optional_int(quality, "quality")
    options = {
        "quality": settings.default_quality if requested_quality is None else requested_quality,
        "format": ImageFormat.parse(output_format or settings.default_format),
        "max_width": parse_optional_int(max_width, "maxWidth"),
        "max_height": parse_optional_int(max_height, "maxHeight"),
        # الحجم المستهدف يصل بالكيلوبايت
        "target_size_bytes": parse_optional_int(target_size, "targetSize", multiplier=1024),
    }
    validate_options(options["quality"], options["max_width"], options["max_height"], options["target_size_bytes"])

    source_path = storage.save_upload(image)

    with ArtifactLifecycle(source_path, storage.compressed_dir) as lifecycle:
        request = CompressionRequest(source_path=source_path, **options)
        output_path = lifecycle.allocate_output(request.format.extension)

        result = await run_in_threadpool(compression_service.compress, request, output_path)
        logger.info(
            "تم ضغط %s بنسبة تقليص %.2f%% (%d -> %d بايت)",
            image.filename,
            result.reduction_percent,
            result.original_bytes,
            result.compressed_bytes,
        )

        response = ArtifactFileResponse(
            lifecycle,
            path=result.output_path,
            media_type=result.format.media_type,
            filename=download_name(image.filename, result.format),
            headers=result.to_headers(),
        )
        lifecycle.hand_off()

    return response


@router.get("/history", summary="سجل عمليات الضغط (غير متوفر)", response_model=HistoryResponse)
async def compression_history() -> HistoryResponse:
    return HistoryResponse(message="سجل عمليات الضغط غير متوفر، لا تحتفظ الخدمة بأي بيانات.", history=[])
