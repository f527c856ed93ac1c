from fastapi import APIRouter, Depends, Request

from stockroom.core.errors import UnauthenticatedError
from stockroom.core.security import SESSION_USER_KEY, authenticate, current_user, public_user
from stockroom.database.store import RecordStore
from stockroom.dependencies import get_store
from stockroom.schemas.auth import AuthStatus, LoginRequest, LoginResult

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResult)
def login(payload: LoginRequest, request: Request, store: RecordStore = Depends(get_store)):
    user = authenticate(store, payload.username, payload.password)
    if user is None:
        raise UnauthenticatedError("Invalid credentials")
    request.session[SESSION_USER_KEY] = user["id"]
    return {"success": True, "user": public_user(user)}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"success": True}


@router.get("/status", response_model=AuthStatus)
def auth_status(request: Request, store: RecordStore = Depends(get_store)):
    user = current_user(request, store)
    if user is None:
        return {"authenticated": False}
    return {"authenticated": True, "user": public_user(user)}


__all__ = ["router"]
