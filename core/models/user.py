from pydantic import BaseModel


class SessionUser(BaseModel):
    """Identity claims carried by a session token."""

    id: str
    email: str
    name: str | None = None
