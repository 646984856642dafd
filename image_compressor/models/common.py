from typing import List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Server is running"


class HistoryResponse(BaseModel):
    message: str = Field(..., description="سبب عدم توفر السجل.")
    history: List[dict] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    kind: str
    details: str | None = None
