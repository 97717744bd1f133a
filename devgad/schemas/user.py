from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    pincode: str = ""
    password: str = ""
    confirm_password: str = ""

class LoginRequest(BaseModel):
    email: str
    password: str

class EmailLinkRequest(BaseModel):
    email: str

class EmailLinkSignIn(BaseModel):
    email: str
    code: str

class FederatedSignIn(BaseModel):
    id_token: Optional[str] = None

class ActionCode(BaseModel):
    code: str

class AuthResult(BaseModel):
    access_token: str
    token_type: str = "bearer"
    uid: str
    email: str
    email_verified: bool
    redirect_to: str

class UserWithRoleOut(BaseModel):
    id: str
    uid: str
    name: str
    email: str
    phone: str
    address: str
    pincode: str
    created_at: Optional[datetime] = None
    admin: bool
    suspended: bool

class RoleRecordOut(BaseModel):
    uid: str
    admin: Optional[bool] = None
    suspended: Optional[bool] = None
