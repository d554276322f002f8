# akibaflow/core/models.py
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

AccountType = Literal["checking", "savings", "credit"]
TransactionType = Literal["INCOME", "EXPENSE"]


class ApiModel(BaseModel):
    """Response DTO. Unknown fields from newer API versions are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


# User / auth schemas
class User(ApiModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    password: str
    phone_number: str


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    user_type: Optional[str] = None
    phone_number: Optional[str] = None
    active: Optional[bool] = None


class Token(ApiModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    username: str
    password: str
    grant_type: str = "password"
    scope: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    def form_data(self) -> dict:
        return {k: v for k, v in self.model_dump().items() if v is not None}


# Account schemas
class Account(ApiModel):
    id: int
    user_id: int
    name: str
    initial_balance: Decimal = Decimal("0")
    current_balance: Optional[Decimal] = None
    currency: str
    type: AccountType
    is_active: bool = True
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccountCreate(BaseModel):
    name: str
    initial_balance: Decimal
    currency: str
    type: AccountType = "checking"


class AccountUpdate(BaseModel):
    name: Optional[str] = None
    currency: Optional[str] = None
    type: Optional[AccountType] = None
    is_active: Optional[bool] = None


# Category schemas
class Category(ApiModel):
    id: int
    name: str
    system_name: Optional[str] = None
    is_custom: bool = False
    user_id: Optional[int] = None


class CategoryCreate(BaseModel):
    name: str
    system_name: Optional[str] = None


# Transaction schemas
class Transaction(ApiModel):
    id: int
    user_id: int
    amount: Decimal
    transaction_type: TransactionType
    account_id: int
    category_id: int
    description: str = ""
    transaction_date: datetime
    is_automated: bool = False
    raw_text: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TransactionCreate(BaseModel):
    amount: Decimal
    transaction_type: TransactionType
    account_id: int
    category_id: int
    description: str = ""
    transaction_date: datetime


class TransactionUpdate(BaseModel):
    category_id: Optional[int] = None
    description: Optional[str] = None
    transaction_date: Optional[datetime] = None


# Error schemas
class ValidationErrorDetail(ApiModel):
    loc: List = []
    msg: str
    type: str = ""


def to_payload(model: BaseModel, partial: bool = False) -> dict:
    """JSON-ready request body. With ``partial`` only the fields set by the caller are sent."""
    return model.model_dump(mode="json", exclude_unset=partial)
