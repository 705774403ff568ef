# testgenium/schemas/auth.py
from typing import Optional

from pydantic import AliasChoices, Field

from testgenium.core.constants import PlanType
from testgenium.schemas.common import CamelModel
from testgenium.schemas.tenant import Tenant


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, validation_alias=AliasChoices("password", "secret"))


class RegisterRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, validation_alias=AliasChoices("password", "secret"))
    company_name: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    plan: PlanType = PlanType.BASIC


class AuthResponse(CamelModel):
    message: str
    tenant: Tenant
    token: str
    token_type: str = "bearer"
