from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.deps import get_order_service
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.orders import OrderCreateRequest, order_out
from app.services.orders_service import OrderService

router = APIRouter(prefix="/orders")


@router.post("", status_code=201)
def create_order(
    payload: OrderCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    orders: OrderService = Depends(get_order_service),
):
    order = orders.place_order(db, principal, payload.quoteId)
    return {"success": True, "order": order_out(order)}


@router.get("")
def list_orders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    orders: OrderService = Depends(get_order_service),
):
    rows = orders.list_for_user(db, principal.user_id)
    return {"success": True, "count": len(rows), "orders": [order_out(o) for o in rows]}
