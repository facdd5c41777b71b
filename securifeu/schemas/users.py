from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

# --- AUTH ---
class Token(BaseModel):
    access_token: str
    token_type: str

class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: str

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class ForgotPassword(BaseModel):
    email: EmailStr

class ResetPassword(BaseModel):
    token: str
    password: str

class UserOut(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class AuthResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: Optional[UserOut] = None
    access_token: Optional[str] = None
    token_type: str = "bearer"

class MessageOut(BaseModel):
    success: bool = True
    message: str
