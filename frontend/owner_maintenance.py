import logging
from typing import Callable, Optional

from frontend.api import ApiError
from frontend.common import Page

log = logging.getLogger(__name__)

REQUEST_STATUSES = ("Pending", "In Progress", "Resolved")
UNKNOWN_TENANT = "N/A (Tenant may be deleted)"
DELETE_REQUEST_PROMPT = "Are you sure you want to delete this maintenance request?"


def _strip_ui_fields(request: dict) -> dict:
    return {k: v for k, v in request.items() if k != "tenantName"}


class OwnerMaintenanceRequests(Page):
    """
    One property's maintenance requests for its owner. Status and remarks
    are edited locally, then saved in one whole-array PUT.
    """

    def __init__(self, property_id: Optional[str], confirm: Callable[[str], bool],
                 property_name: Optional[str] = None, flat_no: Optional[str] = None,
                 api=None, config=None):
        super().__init__(api, config)
        self.property_id = property_id
        self.property_name = property_name
        self.filter_flat_no = flat_no
        self.confirm = confirm
        self.property = None
        self.requests = []
        self.loading = False

    def load(self):
        if not self._check_api():
            self.message = "Error: API URL is not configured."
            return
        if not self.property_id:
            self.message = "Property ID not provided. Please go back and select a property."
            return
        self.loading = True
        try:
            prop = self.api.get_property(self.property_id)
        except ApiError as e:
            log.error(f"Error fetching property data for maintenance: {e.message}")
            self.message = f"Error fetching data: {e.message}"
            return
        finally:
            self.loading = False

        self.property = prop
        self.property_name = prop.get("name") or self.property_name
        tenant_names = {t.get("flatNo"): t.get("name") for t in prop.get("tenants") or []}
        requests = [
            dict(req, tenantName=tenant_names.get(req.get("flatNo")) or UNKNOWN_TENANT)
            for req in prop.get("maintenanceRequests") or []
        ]
        if self.filter_flat_no:
            requests = [r for r in requests if r.get("flatNo") == self.filter_flat_no]
        self.requests = requests

    def change_status(self, request_id: str, status: str):
        if status not in REQUEST_STATUSES:
            raise ValueError(f"Unknown maintenance status: {status}")
        self.requests = [dict(r, status=status) if r["id"] == request_id else r for r in self.requests]

    def change_remarks(self, request_id: str, remarks: str):
        self.requests = [dict(r, remarks=remarks) if r["id"] == request_id else r for r in self.requests]

    def save_all(self) -> bool:
        if not self.property:
            return False
        edited = {r["id"]: _strip_ui_fields(r) for r in self.requests}
        # Requests hidden by the flat filter are written back untouched
        merged = [edited.get(r.get("id"), r) for r in self.property.get("maintenanceRequests") or []]
        self.loading = True
        try:
            self.api.update_property(self.property_id, dict(self.property, maintenanceRequests=merged))
        except ApiError as e:
            log.error(f"Failed to update maintenance requests: {e.message}")
            self.message = f"Failed to save changes: {e.message}"
            return False
        finally:
            self.loading = False
        self.load()
        if not self.message:
            self.message = "All maintenance request changes saved successfully."
        return True

    def delete(self, request_id: str) -> bool:
        if not self.property or not self.confirm(DELETE_REQUEST_PROMPT):
            return False
        remaining = [r for r in self.property.get("maintenanceRequests") or [] if r.get("id") != request_id]
        updated = dict(self.property, maintenanceRequests=remaining)
        self.loading = True
        try:
            self.api.update_property(self.property_id, updated)
        except ApiError as e:
            log.error(f"Failed to delete maintenance request: {e.message}")
            self.message = f"Failed to delete request: {e.message}"
            return False
        finally:
            self.loading = False
        self.property = updated
        self.requests = [r for r in self.requests if r["id"] != request_id]
        self.message = "Maintenance request deleted successfully."
        return True
