#app/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.security import create_access_token
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.services.auth_service import authenticate, get_user, register

router = APIRouter(prefix="/users")


@router.post("/register", status_code=201)
def register_user(req: RegisterRequest, db: Session = Depends(get_db)):
    register(db, name=req.name, email=req.email, password=req.password, phone=req.phone)
    return {"success": True, "message": "User created"}


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    principal = authenticate(db, req.email, req.password)
    if not principal:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(principal)
    return TokenResponse(token=token, name=principal.name)


@router.get("/me")
def get_me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    user = get_user(db, principal.user_id)
    return {
        "success": True,
        "user": {
            "id": str(user.id),
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "phone": user.phone,
        },
    }
