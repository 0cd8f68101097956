import logging
import os

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models.enums import UserRole
from app.models.product import Product
from app.models.user import User
from app.services.auth_service import register
from app.services.pricing import MATERIAL_UNIT_PRICE, TYPE_MULTIPLIER

logger = logging.getLogger(__name__)


def seed_products(db: Session) -> int:
    """
    One catalogue row per mesh type / material pair, priced at the
    Nairobi-zone base rate. Existing rows are left alone.
    """
    existing = {
        (p.mesh_type, p.material) for p in db.execute(select(Product)).scalars().all()
    }
    added = 0
    for mesh_type, multiplier in TYPE_MULTIPLIER.items():
        for material, unit_price in MATERIAL_UNIT_PRICE.items():
            if (mesh_type.value, material.value) in existing:
                continue
            db.add(
                Product(
                    mesh_type=mesh_type.value,
                    material=material.value,
                    price_per_m2=unit_price * multiplier,
                    description=f"{material.value.title()} {mesh_type.value} mosquito mesh",
                )
            )
            added += 1
    db.commit()
    return added


def seed_admin(db: Session, email: str, password: str) -> None:
    if db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none():
        return
    register(db, name="Administrator", email=email, password=password, role=UserRole.ADMIN)


def seed():
    db: Session = SessionLocal()
    try:
        added = seed_products(db)
        logger.info("products seeded", extra={"added": added})

        admin_email = os.getenv("SEED_ADMIN_EMAIL")
        admin_password = os.getenv("SEED_ADMIN_PASSWORD")
        if admin_email and admin_password:
            seed_admin(db, admin_email, admin_password)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
