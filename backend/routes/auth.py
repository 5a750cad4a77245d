from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..db import HikeDatabase
from ..logs import LogContext
from ..services.auth_svc import get_user, login, register
from .deps import get_db

router = APIRouter()


class RegisterBody(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str | None = None


class LoginBody(BaseModel):
    email: str
    password: str


@router.post("/api/auth/register", status_code=201)
def api_register(body: RegisterBody, db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "REGISTER")
    log.set_payload({"name": body.name, "email": body.email})
    try:
        user = register(db, body.name, body.email, body.password, body.confirm_password, log)
        log.write("OK")
        return {"message": "ok", "user": user}
    except ValueError as ve:
        log.write("ERROR", str(ve))
        status = 409 if str(ve) == "email_already_registered" else 400
        raise HTTPException(status_code=status, detail=str(ve))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/auth/login")
def api_login(body: LoginBody, db: HikeDatabase = Depends(get_db)):
    try:
        return {"message": "ok", "user": login(db, body.email, body.password)}
    except ValueError as ve:
        status = 401 if str(ve) == "invalid_credentials" else 400
        raise HTTPException(status_code=status, detail=str(ve))


@router.get("/api/users/{user_id}")
def api_user_get(user_id: int, db: HikeDatabase = Depends(get_db)):
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")
    return user
