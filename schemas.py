"""
Database Schemas for RentCare

Users and properties live in MongoDB collections (`users`, `properties`).
Tenant, MaintenanceRequest, PaymentEntry and Notification are embedded
in a property document.
"""
from typing import List, Optional, Literal, Union
from pydantic import BaseModel, ConfigDict

PAYMENT_PENDING = "Pending"
PAYMENT_PAID = "Paid"
PAYMENT_PARTIAL = "Partial"

REQUEST_PENDING = "Pending"

Amount = Union[int, float]


class Document(BaseModel):
    # Stored documents may carry fields this code does not know about
    model_config = ConfigDict(extra="allow")


class PaymentEntry(Document):
    id: str
    amount: Amount
    date: str
    status: str = PAYMENT_PAID
    sessionId: Optional[str] = None


class Notification(Document):
    id: str
    message: str
    date: str


class Tenant(Document):
    id: Optional[str] = None
    flatNo: str
    name: str = ""
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    rentAmount: Amount = 0
    paymentStatus: Literal['Pending', 'Paid'] = PAYMENT_PENDING
    paymentHistory: List[PaymentEntry] = []
    notifiedMessages: List[Notification] = []
    lastNotify: Optional[str] = None


class MaintenanceRequest(Document):
    id: Optional[str] = None
    flatNo: str
    description: str
    status: Literal['Pending', 'In Progress', 'Resolved'] = REQUEST_PENDING
    remarks: str = ""
    date: Optional[str] = None


class User(BaseModel):
    role: str = "owner"
    email: Optional[str] = None
    username: Optional[str] = None
    name: Optional[str] = None
    password: str


# ---------- Request bodies ----------

class UserIn(User):
    pass


class TenantIn(Tenant):
    # Set by clients when a tenant moves to another flat number
    originalFlatNo: Optional[str] = None


class PropertyIn(BaseModel):
    """Create/update body. Clients send whole documents; unknown keys are dropped."""
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    location: str = ""
    ownerId: Optional[str] = None
    tenants: List[TenantIn] = []
    maintenanceRequests: List[MaintenanceRequest] = []


class LoginIn(BaseModel):
    identifier: str
    password: str


class CheckoutTenant(BaseModel):
    flatNo: str
    rentAmount: Optional[Amount] = None
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None


class CheckoutSessionIn(BaseModel):
    tenant: CheckoutTenant
    propertyId: str
    propertyName: Optional[str] = None


class PaymentSuccessIn(BaseModel):
    rentAmount: Amount
    sessionId: Optional[str] = None


class NotifyIn(BaseModel):
    message: str
