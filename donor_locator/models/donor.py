import math
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlmodel import Column, Field, SQLModel, Text, UniqueConstraint

from donor_locator.utils.blood import BLOOD_GROUPS, normalize_blood_group


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Donor(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("phone", name="uq_donor_phone"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    age: int
    blood_group: str = Field(max_length=3, index=True)  # A+ | A- | ... | O-
    phone: str = Field(max_length=20)
    email: str = Field(max_length=255)
    address: str = Field(sa_column=Column(Text, nullable=False))
    latitude: float
    longitude: float
    registered_at: datetime = Field(default_factory=_utcnow)


# --- request / response shapes ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def _check_blood_group(value: Any) -> str:
    canonical = normalize_blood_group(value) if isinstance(value, str) else None
    if canonical is None:
        raise ValueError(f"must be one of {', '.join(BLOOD_GROUPS)}")
    return canonical


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    return value


def _check_finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError("must be a finite number")
    return value


class DonorCreate(_CamelModel):
    """Fields a donor supplies at registration."""

    name: str = PydanticField(min_length=1, max_length=255)
    age: int = PydanticField(gt=0)
    blood_group: str
    phone: str = PydanticField(min_length=1, max_length=20)
    email: str = PydanticField(min_length=1, max_length=255)
    address: str = PydanticField(min_length=1)
    latitude: float = PydanticField(ge=-90, le=90)
    longitude: float = PydanticField(ge=-180, le=180)

    @field_validator("blood_group", mode="before")
    @classmethod
    def canonical_blood_group(cls, v: Any) -> str:
        return _check_blood_group(v)

    @field_validator("phone", mode="before")
    @classmethod
    def phone_as_text(cls, v: Any) -> Any:
        # JSON clients sometimes send the number as an integer
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("age", "latitude", "longitude", mode="before")
    @classmethod
    def numbers_not_booleans(cls, v: Any) -> Any:
        return _reject_bool(v)

    @field_validator("latitude", "longitude")
    @classmethod
    def finite_coordinates(cls, v: float) -> float:
        return _check_finite(v)


class GeoPoint(_CamelModel):
    latitude: float = PydanticField(ge=-90, le=90)
    longitude: float = PydanticField(ge=-180, le=180)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def numbers_not_booleans(cls, v: Any) -> Any:
        return _reject_bool(v)

    @field_validator("latitude", "longitude")
    @classmethod
    def finite_coordinates(cls, v: float) -> float:
        return _check_finite(v)


class SearchQuery(GeoPoint):
    """Origin and blood group of a proximity search."""

    blood_group: str

    @field_validator("blood_group", mode="before")
    @classmethod
    def canonical_blood_group(cls, v: Any) -> str:
        return _check_blood_group(v)


class DonorMatch(_CamelModel):
    """Public donor fields plus the distance from the search origin."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    blood_group: str
    phone: str
    latitude: float
    longitude: float
    distance_km: float

    @classmethod
    def from_donor(cls, donor: Donor, distance_km: float) -> "DonorMatch":
        return cls(
            id=donor.id,
            name=donor.name,
            blood_group=donor.blood_group,
            phone=donor.phone,
            latitude=donor.latitude,
            longitude=donor.longitude,
            distance_km=distance_km,
        )
