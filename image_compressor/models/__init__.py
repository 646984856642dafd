from .common import ErrorResponse, HealthResponse, HistoryResponse
from .compress import (
    CompressionRequest,
    CompressionResult,
    DimensionPlan,
    EncodeAttempt,
    ImageDimensions,
    ImageFormat,
)

__all__ = [
    "CompressionRequest",
    "CompressionResult",
    "DimensionPlan",
    "EncodeAttempt",
    "ErrorResponse",
    "HealthResponse",
    "HistoryResponse",
    "ImageDimensions",
    "ImageFormat",
]
