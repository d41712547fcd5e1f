from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from clausecraft.auth import hash_password, login, logout, require_user, verify_password
from clausecraft.errors import DuplicateUser
from clausecraft.schemas import Credentials, User

router = APIRouter(prefix="/api", tags=["auth"])

log = logging.getLogger("clausecraft.api.auth")


@router.post("/register", response_model=User, status_code=201)
def register(payload: Credentials, request: Request) -> User:
    store = request.app.state.store
    try:
        record = store.create_user(payload.email.strip(), hash_password(payload.password))
    except DuplicateUser as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    user = record.public()
    login(request, user)
    return user


@router.post("/login", response_model=User)
def login_route(payload: Credentials, request: Request) -> User:
    record = request.app.state.store.get_user_by_email(payload.email)
    if record is None or not verify_password(payload.password, record.passwordHash):
        # Do not reveal which half of the credentials was wrong
        log.info("login rejected")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user = record.public()
    login(request, user)
    return user


@router.post("/logout")
def logout_route(request: Request):
    logout(request)
    return {}


@router.get("/user", response_model=User)
def me(user: User = Depends(require_user)) -> User:
    return user
