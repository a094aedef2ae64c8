# app/models.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, String, Text

from .db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "productos"
    id = Column(String(32), primary_key=True, default=_new_id)
    nombre = Column(String(255), nullable=False)
    descripcion = Column(Text, nullable=False, default="")
    precio = Column(Float, nullable=False)
    imagenes = Column(JSON, nullable=False, default=list)
    colores = Column(JSON, nullable=False, default=list)
    tallas = Column(JSON, nullable=False, default=list)
    promo = Column(String(16), nullable=False, default="", index=True)
    categoria = Column(String(100), nullable=False, index=True)
    # Set once on insert; updates never touch it.
    fecha_creacion = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self):
        return f"<Product(id={self.id}, nombre='{self.nombre}', categoria='{self.categoria}', promo='{self.promo}')>"
