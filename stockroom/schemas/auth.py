from typing import Optional

from stockroom.schemas.base import CamelModel


class LoginRequest(CamelModel):
    username: str = ""
    password: str = ""


class UserRead(CamelModel):
    id: str
    username: str
    role: str


class LoginResult(CamelModel):
    success: bool = True
    user: UserRead


class AuthStatus(CamelModel):
    authenticated: bool
    user: Optional[UserRead] = None
