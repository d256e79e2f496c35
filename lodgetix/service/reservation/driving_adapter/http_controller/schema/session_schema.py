from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field, SecretStr


class ConvertAnonymousUserRequest(BaseModel):
    email: EmailStr
    password: SecretStr = Field(..., min_length=6)
    metadata: Dict[str, Any] = {}

    class Config:
        json_schema_extra = {
            'example': {
                'email': 'brother@lodge.org',
                'password': 'P@ssw0rd',
                'metadata': {'first_name': 'John', 'last_name': 'Smith'},
            }
        }


class OneTimePasswordRequest(BaseModel):
    email: EmailStr


class VerifyOneTimePasswordRequest(BaseModel):
    email: EmailStr
    token: str = Field(..., min_length=1)


class AuthUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    is_anonymous: bool
    user_metadata: Dict[str, Any] = {}


class SessionResultResponse(BaseModel):
    success: bool
    user: Optional[AuthUserResponse] = None
    error: Optional[str] = None
    access_token: Optional[str] = None
    token_type: str = 'bearer'
    expires_at: Optional[datetime] = None


class EmailRegisteredResponse(BaseModel):
    email: str
    registered: bool
