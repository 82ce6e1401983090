import copy
import logging
from datetime import date
from time import time
from typing import Callable, Optional

from frontend.api import ApiError
from frontend.common import Page, Redirect, STRIPE_MISCONFIGURED

log = logging.getLogger(__name__)

EMPTY_DESCRIPTION = "Maintenance description cannot be empty."
INVALID_SESSION = "Received an invalid session from the server. Cannot proceed with payment."
DELETE_REQUEST_PROMPT = "Are you sure you want to delete this maintenance request?"


def _newest_first(entries: list) -> list:
    return sorted(entries, key=lambda e: e.get("date") or "", reverse=True)


class TenantDashboard(Page):
    """Rent status, payment, notifications and maintenance requests for one tenant."""

    def __init__(self, property_id: Optional[str], flat_no: Optional[str], confirm: Callable[[str], bool],
                 api=None, config=None):
        super().__init__(api, config)
        self.property_id = property_id
        self.flat_no = flat_no
        self.confirm = confirm
        self.property = None
        self.tenant = None
        self.loading = False
        self.action_loading = False

    # ---------- Loading ----------

    def load(self):
        self.message = ""
        self.config_error = ""
        if not self._check_api():
            log.error("API base URL is not set in the environment.")
            return
        if not self.config.payments_enabled:
            # Payment is disabled but the rest of the page still loads
            self.config_error = STRIPE_MISCONFIGURED
        if not self.property_id or not self.flat_no:
            self.config_error = "Error: Invalid navigation parameters. Property ID or Flat No missing from URL."
            return

        self.loading = True
        try:
            prop = self.api.get_property(self.property_id)
            if not prop or not isinstance(prop, dict):
                raise ApiError("Property data received is invalid or empty.")
            self.property = prop
            tenant = next((t for t in prop.get("tenants") or [] if t.get("flatNo") == self.flat_no), None)
            if tenant is None:
                raise ApiError(
                    f'Tenant for Flat No: "{self.flat_no}" not found in property: '
                    f'"{prop.get("name") or self.property_id}". Check login details or property data.'
                )
            self.tenant = tenant
        except ApiError as e:
            log.error(f"Error loading tenant/property data: {e.message}")
            self.message = f"Error loading dashboard: {e.message}."
        finally:
            self.loading = False

    @property
    def is_fatal(self) -> bool:
        return bool(self.config_error) and self.config_error != STRIPE_MISCONFIGURED

    # ---------- Derived views ----------

    @property
    def maintenance_requests(self) -> list:
        if not self.property or not self.tenant:
            return []
        own = [r for r in self.property.get("maintenanceRequests") or [] if r.get("flatNo") == self.tenant["flatNo"]]
        return _newest_first(own)

    def request_rows(self) -> list:
        """Requests with whether the delete control is offered (Pending only)."""
        return [dict(r, canDelete=r.get("status") == "Pending") for r in self.maintenance_requests]

    @property
    def payment_history(self) -> list:
        return _newest_first((self.tenant or {}).get("paymentHistory") or [])

    @property
    def notifications(self) -> list:
        return _newest_first((self.tenant or {}).get("notifiedMessages") or [])

    @property
    def can_pay_rent(self) -> bool:
        return bool(
            self.tenant
            and self.tenant.get("paymentStatus", "Pending") == "Pending"
            and (self.tenant.get("rentAmount") or 0) > 0
            and self.api is not None
            and self.config.payments_enabled
        )

    # ---------- Payment ----------

    def pay_rent(self) -> Optional[Redirect]:
        if self.api is None or not self.config.payments_enabled:
            self.message = "Configuration error prevents payment. Please contact support."
            return None
        tenant, prop = self.tenant, self.property
        if not tenant or not prop or not tenant.get("rentAmount") or tenant["rentAmount"] <= 0:
            self.message = "Tenant data or rent amount is missing or invalid. Cannot proceed with payment."
            return None

        body = {
            "tenant": {
                "flatNo": tenant["flatNo"],
                "rentAmount": tenant["rentAmount"],
                "name": tenant.get("name"),
                "email": tenant.get("email") or f"{tenant.get('username') or tenant['flatNo']}-tenant@example.com",
            },
            "propertyId": prop["id"],
            "propertyName": prop.get("name"),
        }
        self.action_loading = True
        self.message = "Initializing payment..."
        try:
            session = self.api.create_checkout_session(body)
            if not session or not session.get("id") or not session.get("url"):
                raise ApiError(INVALID_SESSION)
        except ApiError as e:
            log.error(f"Payment process error: {e.message}")
            self.message = f"Payment Process Error: {e.message}"
            return None
        finally:
            self.action_loading = False
        self.message = ""
        log.info(f"Redirecting to hosted checkout with session {session['id']}")
        return Redirect(session["url"], state={"sessionId": session["id"]})

    # ---------- Maintenance requests ----------

    def _save_optimistic(self, optimistic: dict, success: str, failure: str) -> bool:
        original = copy.deepcopy(self.property)
        self.property = optimistic
        self.action_loading = True
        try:
            saved = self.api.update_property(self.property_id, optimistic)
        except ApiError as e:
            log.error(f"{failure}: {e.message}")
            self.property = original
            self.message = f"{failure}: {e.message}"
            return False
        finally:
            self.action_loading = False
        if saved:
            self.property = saved
        self.message = success
        return True

    def raise_request(self, description: Optional[str]) -> bool:
        if not self.tenant or not self.property:
            return False
        if self.api is None:
            self.message = "API URL is not configured. Cannot submit request."
            return False
        if not description or not description.strip():
            self.message = EMPTY_DESCRIPTION
            return False

        new_request = {
            "id": f"temp-mr-{int(time() * 1000)}",
            "flatNo": self.tenant["flatNo"],
            "description": description.strip(),
            "status": "Pending",
            "date": date.today().isoformat(),
            "remarks": "",
        }
        optimistic = dict(self.property, maintenanceRequests=list(self.property.get("maintenanceRequests") or []) + [new_request])
        return self._save_optimistic(optimistic, "Maintenance request submitted successfully.", "Error submitting request")

    def delete_request(self, request_id: str) -> bool:
        if not self.property or not request_id:
            return False
        request = next((r for r in self.maintenance_requests if r.get("id") == request_id), None)
        if request is None or request.get("status") != "Pending":
            self.message = "Only pending requests can be deleted."
            return False
        if not self.confirm(DELETE_REQUEST_PROMPT):
            return False
        if self.api is None:
            self.message = "API URL is not configured. Cannot delete request."
            return False

        remaining = [r for r in self.property.get("maintenanceRequests") or [] if r.get("id") != request_id]
        optimistic = dict(self.property, maintenanceRequests=remaining)
        return self._save_optimistic(optimistic, "Maintenance request deleted successfully.", "Error deleting request")
