# image_compressor/main.py
from __future__ import annotations

import os
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from image_compressor.api import routers
from image_compressor.core.config import get_settings
from image_compressor.core.errors import CompressionError
from image_compressor.core.logging import configure_logging
from image_compressor.models import HealthResponse

# === إعدادات وتسجيل ===
settings = get_settings()
logger = configure_logging()

app = FastAPI(
    title=getattr(settings, "app_name", "Image Compressor API"),
    version=getattr(settings, "app_version", "0.1.0"),
)

RESULT_HEADERS = [
    "Content-Disposition",
    "X-Original-Size",
    "X-Compressed-Size",
    "X-Final-Quality",
    "X-Attempts",
    "X-Target-Met",
    "X-Output-Width",
    "X-Output-Height",
]


# === CORS ===
def _as_list(val: Iterable | str | None, fallback: list[str]) -> list[str]:
    if val is None:
        return fallback
    if isinstance(val, (list, tuple, set)):
        return [str(x).strip() for x in val if str(x).strip()] or fallback
    s = str(val).strip()
    if not s:
        return fallback
    return [x.strip() for x in s.split(",") if x.strip()]


allow_origins = _as_list(
    os.getenv("FRONTEND_URL") or settings.allow_origins,
    fallback=["http://localhost:3000"],
)
allow_credentials = settings.allow_credentials

# لا يصح الجمع بين allow_credentials و allow_origins=["*"]
if allow_credentials and ("*" in allow_origins):
    allow_origins = ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=RESULT_HEADERS,  # لقراءة إحصاءات الضغط واسم الملف من الواجهة
)

# === Routers ===
for router in routers:
    app.include_router(router)


# === Error handlers ===
@app.exception_handler(CompressionError)
async def compression_error_handler(request: Request, exc: CompressionError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("فشل ضغط الصورة (%s): %s %s", exc.kind, exc.message, exc.details or "")
    else:
        logger.warning("طلب ضغط مرفوض (%s): %s %s", exc.kind, exc.message, exc.details or "")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


HTTP_ERROR_KINDS = {404: "not_found", 405: "method_not_allowed"}


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # بقية أخطاء HTTP تصدر من طبقة الرفع (نوع الملف، الحجم، غياب الملف)
    kind = HTTP_ERROR_KINDS.get(exc.status_code, "upload_error")
    message = "المسار غير موجود." if exc.status_code == 404 else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message, "kind": kind},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("بيانات طلب غير صالحة: %s", exc.errors())
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"error": "بيانات الطلب غير صالحة.", "kind": "validation_error", "details": details},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("خطأ غير متوقع: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "فشل ضغط الصورة.", "kind": "internal_error", "details": str(exc)},
    )


# === Basic endpoints ===
@app.get("/")
async def root() -> dict:
    logger.debug("Root endpoint accessed")
    return {"message": "Welcome to Image Compressor API"}


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    logger.debug("Health check invoked")
    return HealthResponse()
