from pydantic import BaseModel, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    # Bcrypt limit is 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    role: str = "client"

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("role")
    @classmethod
    def signup_role(cls, v: str) -> str:
        role = (v or "").strip().lower()
        if role not in {"client", "counselor"}:
            raise ValueError("Role must be one of: client, counselor")
        return role


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str
    role: str
