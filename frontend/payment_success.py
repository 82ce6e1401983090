import logging
from typing import Optional

from frontend.api import ApiError
from frontend.common import Page, Redirect

log = logging.getLogger(__name__)


class PaymentSuccess(Page):
    """Landing page after hosted checkout: records the payment, then sends the tenant back."""

    def process(self, property_id: Optional[str], flat_no: Optional[str], session_id: Optional[str] = None) -> Redirect:
        try:
            if not property_id or not flat_no:
                raise ApiError("Missing property ID or flat number.")
            if not self._check_api():
                raise ApiError(self.config_error)

            prop = self.api.get_property(property_id)
            tenant = next((t for t in prop.get("tenants") or [] if t.get("flatNo") == flat_no), None)
            if tenant is None:
                raise ApiError("Tenant not found in property data.")

            # The tenant's current rent is what gets recorded
            self.api.mark_payment_success(property_id, flat_no, tenant.get("rentAmount"), session_id=session_id)
        except ApiError as e:
            log.error(f"Payment success processing error: {e.message}")
            self.message = (
                f"Payment processing encountered an issue: {e.message}. "
                "Please contact support or check your dashboard later."
            )
            if property_id and flat_no:
                return Redirect(f"/TenantDashboard/{property_id}/{flat_no}")
            return Redirect("/")
        return Redirect(f"/TenantDashboard/{property_id}/{flat_no}")
