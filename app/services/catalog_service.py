from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.product import Product


def list_products(db: Session) -> List[Product]:
    return list(
        db.execute(select(Product).order_by(Product.mesh_type, Product.material)).scalars().all()
    )
