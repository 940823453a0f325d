from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LoginIn(BaseModel):
    # presence is checked by the handler so a missing field is a 400, not a 422
    email: str | None = None
    password: str | None = None


class RegisterIn(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    cpf_cnpj: str | None = None
    profession: str | None = None
    crn: str | None = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str


class RegisteredUserOut(BaseModel):
    id: int
    name: str
    email: str
    uuid: str

    model_config = ConfigDict(from_attributes=True)


class LoginOut(BaseModel):
    user: UserOut
    token: str


class RegisterOut(BaseModel):
    user: RegisteredUserOut
    message: str
