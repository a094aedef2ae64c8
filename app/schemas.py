# app/schemas.py

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROMO_ERROR = "El campo promo debe ser un número válido."
PRICE_ERROR = "El precio debe ser un número mayor o igual a 0."
DEFAULT_PROMO_CATEGORY = "promociones"

_LEADING_INTEGER = re.compile(r"^\s*([+-]?)0*(\d+)")
MAX_PROMO = 100


def _promo_percentage(number: int) -> str:
    if not 0 <= number <= MAX_PROMO:
        raise ValueError(PROMO_ERROR)
    return str(number)


def parse_promo(value: Any) -> str:
    """
    Normalizes a discount indicator to its canonical text form.

    Accepts integers or text starting with an integer ("15", "15%") and
    returns the percentage as text; it must lie between 0 and 100. Empty or
    missing values mean "no promotion" and come back as "".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        raise ValueError(PROMO_ERROR)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(PROMO_ERROR)
        return _promo_percentage(int(value))
    if isinstance(value, int):
        return _promo_percentage(value)
    if isinstance(value, str):
        if not value.strip():
            return ""
        match = _LEADING_INTEGER.match(value)
        # More than three significant digits is out of range anyway.
        if match and len(match.group(2)) <= 3:
            sign, digits = match.groups()
            return _promo_percentage(int(sign + digits))
    raise ValueError(PROMO_ERROR)


class ProductBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    nombre: str = Field(..., min_length=1, max_length=255)
    descripcion: str = Field("", max_length=5000)
    precio: float = Field(..., ge=0, allow_inf_nan=False)
    imagenes: List[str] = Field(default_factory=list)
    colores: List[str] = Field(default_factory=list)
    tallas: List[str] = Field(default_factory=list)
    promo: str = Field("", description="Discount percentage as text, or empty.")
    categoria: str = Field(..., min_length=1, max_length=100)

    @field_validator("descripcion", mode="before")
    @classmethod
    def _default_text(cls, value):
        return "" if value is None else value

    @field_validator("imagenes", "colores", "tallas", mode="before")
    @classmethod
    def _default_list(cls, value):
        return [] if value is None else value

    @field_validator("promo", mode="before")
    @classmethod
    def _canonical_promo(cls, value):
        return parse_promo(value)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    """Full replacement: omitted optional fields are reset to their defaults."""


class PromotionCreate(ProductBase):
    promo: str = Field(..., min_length=1)
    categoria: str = Field(DEFAULT_PROMO_CATEGORY, max_length=100)

    @field_validator("categoria", mode="before")
    @classmethod
    def _default_category(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PROMO_CATEGORY
        return value


class ProductResponse(ProductBase):
    id: str
    fecha_creacion: datetime = Field(..., serialization_alias="fechaCreacion")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("fecha_creacion")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; they are stored as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


class ProtectedResponse(BaseModel):
    message: str
    user: Dict[str, Any]
