from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=2)
    department: str | None = None
    position: str | None = None
    token: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AccountOut(BaseModel):
    id: str
    email: str
    role: str


class TokenResponse(BaseModel):
    message: str
    token: str
    user: AccountOut


class MeOut(BaseModel):
    id: str
    email: str
    role: str
    is_active: bool
    employee_id: str | None
