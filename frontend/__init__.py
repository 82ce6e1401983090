"""
Page controllers for the RentCare web client.

Each page keeps its own state (banner message, loading flags, fetched
documents) and returns a Redirect where the browser should navigate.
"""
from .api import ApiClient, ApiError
from .common import ClientConfig, Redirect
from .login import LoginPage, LoginState
from .owner_dashboard import OwnerDashboard
from .owner_maintenance import OwnerMaintenanceRequests
from .tenant_dashboard import TenantDashboard
from .payment_success import PaymentSuccess

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientConfig",
    "Redirect",
    "LoginPage",
    "LoginState",
    "OwnerDashboard",
    "OwnerMaintenanceRequests",
    "TenantDashboard",
    "PaymentSuccess",
]
