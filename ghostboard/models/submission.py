"""Validated request payloads consumed by the leaderboard services."""

from __future__ import annotations

import math
from typing import Any, ClassVar, Dict, Mapping, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ValidationError
from .leaderboard import RecordKey

_T = TypeVar("_T", bound="LapSubmission")


class LapSubmission(BaseModel):
    """One timed lap reported by the game client."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    driver_id: str = Field(alias="driver__steamID64", min_length=1)
    name: str
    car: int = Field(ge=0)
    track: int = Field(ge=0)
    layout: int = Field(ge=0)
    condition: int = Field(ge=0)
    weather: int = Field(ge=0)
    timing: float
    ghost_length: int = Field(alias="ghostLength", ge=0)

    @field_validator("timing")
    @classmethod
    def _finite_timing(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0:
            raise ValueError("timing must be a finite, non-negative number")
        return value

    @property
    def key(self) -> RecordKey:
        return (
            self.driver_id,
            self.car,
            self.track,
            self.layout,
            self.condition,
            self.weather,
        )

    @classmethod
    def parse(cls: Type[_T], payload: Any) -> _T:
        """Validate a raw payload, raising the service-level ValidationError."""

        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be an object")
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid submission",
                detail=[
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in exc.errors()
                ],
            ) from exc


class GhostUploadForm(LapSubmission):
    """Form fields sent alongside a ghost file."""

    sha256: str = Field(min_length=1)
    size: int = Field(ge=0)

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "driver__steamID64",
        "name",
        "car",
        "track",
        "layout",
        "condition",
        "weather",
        "timing",
        "ghostLength",
        "sha256",
        "size",
    )

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "GhostUploadForm":
        """Check presence of every multipart field, then validate types."""

        for name in cls.REQUIRED_FIELDS:
            if name not in fields:
                raise ValidationError(f"Missing field '{name}'.")
        data: Dict[str, Any] = {name: fields[name] for name in cls.REQUIRED_FIELDS}
        return cls.parse(data)


__all__ = ["GhostUploadForm", "LapSubmission"]
