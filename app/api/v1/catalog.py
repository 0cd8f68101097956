from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.misc import CoverageRequest
from app.services.catalog_service import list_products
from app.services.coverage_service import SERVICE_AREAS, check_coverage

router = APIRouter()


@router.get("/products")
def products(db: Session = Depends(get_db)):
    rows = list_products(db)
    return {
        "success": True,
        "products": [
            {
                "id": str(p.id),
                "type": p.mesh_type,
                "material": p.material,
                "pricePerM2": p.price_per_m2,
                "image": p.image,
                "description": p.description,
            }
            for p in rows
        ],
    }


@router.post("/coverage")
def coverage(payload: CoverageRequest):
    result = check_coverage(payload.address)
    return {
        "success": True,
        "coverage": result.coverage,
        "installationDays": result.installation_days,
        "message": result.message,
    }


@router.get("/service-areas")
def service_areas():
    return {"success": True, "count": len(SERVICE_AREAS), "serviceAreas": SERVICE_AREAS}
