from pydantic import BaseModel


class Credentials(BaseModel):
    """Body of /auth/login and /auth/register."""
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str
