# app/crud.py

from typing import List, Optional

from sqlalchemy.orm import Session

from .models import Product
from .schemas import ProductBase


def list_products(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.fecha_creacion.desc()).all()


def list_promotions(db: Session) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.promo.isnot(None), Product.promo != "")
        .order_by(Product.fecha_creacion.desc())
        .all()
    )


def get_product(db: Session, product_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def create_product(db: Session, data: ProductBase) -> Product:
    db_product = Product(**data.model_dump())
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product


def update_product(db: Session, product_id: str, data: ProductBase) -> Optional[Product]:
    """Overwrites every mutable field. Returns None if the product does not exist."""
    db_product = get_product(db, product_id)
    if db_product is None:
        return None
    for key, value in data.model_dump().items():
        setattr(db_product, key, value)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product


def add_image(db: Session, db_product: Product, image_url: str) -> Product:
    # Reassign so SQLAlchemy notices the JSON column changed.
    db_product.imagenes = [*db_product.imagenes, image_url]
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product


def delete_product(db: Session, product_id: str) -> bool:
    db_product = get_product(db, product_id)
    if db_product is None:
        return False
    db.delete(db_product)
    db.commit()
    return True
