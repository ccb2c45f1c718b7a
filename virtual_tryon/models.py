from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, field_validator

GarmentCategory = Literal["upper_body", "lower_body", "dresses"]

GARMENT_CATEGORIES: tuple[str, ...] = ("upper_body", "lower_body", "dresses")
DEFAULT_CATEGORY: GarmentCategory = "upper_body"
DEFAULT_GARMENT_DESCRIPTION = "clothing item"


class TryOnRequest(BaseModel):
    userPhoto: str | None = None
    clothingPhoto: str | None = None
    garmentDescription: str | None = None
    category: GarmentCategory | None = None

    def with_defaults(self) -> "TryOnRequest":
        return self.model_copy(
            update={
                "garmentDescription": self.garmentDescription or DEFAULT_GARMENT_DESCRIPTION,
                "category": self.category or DEFAULT_CATEGORY,
            }
        )


class PredictionStatus(str, Enum):
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            PredictionStatus.SUCCEEDED,
            PredictionStatus.FAILED,
            PredictionStatus.CANCELED,
        )


class PredictionJob(BaseModel):
    id: str
    status: PredictionStatus
    output: Any = None
    error: str | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _error_as_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def output_url(self) -> str | None:
        """First output URL; IDM-VTON returns a single URL but may wrap it in a list."""
        output = self.output
        if isinstance(output, list):
            output = output[0] if output else None
        return str(output) if output else None


class TryOnResult(BaseModel):
    success: bool
    image: str | None = None
    message: str | None = None
    error: str | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    replicate_configured: bool
