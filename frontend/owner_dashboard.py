import logging
from typing import Callable, Optional

from frontend.api import ApiError
from frontend.common import Page, Redirect

log = logging.getLogger(__name__)

DELETE_PROPERTY_PROMPT = "Are you sure you want to delete this property? This action cannot be undone."
REMOVE_TENANT_PROMPT = "Are you sure you want to remove this tenant?"


class OwnerDashboard(Page):
    """Property list plus the add/edit form and tenant management for one owner."""

    def __init__(self, owner_id: Optional[str], confirm: Callable[[str], bool], api=None, config=None):
        super().__init__(api, config)
        self.owner_id = owner_id
        self.confirm = confirm
        self.properties = []
        self.form = {"name": "", "location": ""}
        self.editing = None
        self.show_form = False
        self.loading = False

    @property
    def edit_mode(self) -> bool:
        return self.editing is not None

    def load(self):
        if not self._check_api():
            self.message = "Error: API URL is not configured."
            return
        if not self.owner_id:
            self.message = "Error: Owner ID is missing. Cannot load properties."
            return
        self.loading = True
        self.message = ""
        try:
            self.properties = self.api.list_properties(self.owner_id)
        except ApiError as e:
            log.error(f"Error fetching properties: {e.message}")
            self.message = "Error fetching properties: " + e.message
        finally:
            self.loading = False

    # ---------- Form ----------

    def open_add_form(self):
        self.show_form = True
        self.editing = None
        self.form = {"name": "", "location": ""}
        self.message = ""

    def open_edit_form(self, prop: dict):
        self.show_form = True
        self.editing = prop
        self.form = {"name": prop.get("name", ""), "location": prop.get("location", "")}
        self.message = ""

    def set_field(self, name: str, value: str):
        self.form[name] = value

    def reset_form(self, message: str = ""):
        self.form = {"name": "", "location": ""}
        self.editing = None
        self.show_form = False
        if message:
            self.message = message

    def submit(self) -> bool:
        if not self.form["name"] or not self.form["location"]:
            self.message = "Property name and location are required."
            return False

        data = {
            "name": self.form["name"],
            "location": self.form["location"],
            "tenants": (self.editing.get("tenants") or []) if self.edit_mode else [],
            "maintenanceRequests": (self.editing.get("maintenanceRequests") or []) if self.edit_mode else [],
        }
        if not self.edit_mode:
            data["ownerId"] = self.owner_id
        action = "updated" if self.edit_mode else "added"

        self.loading = True
        try:
            if self.edit_mode:
                self.api.update_property(self.editing["id"], data)
            else:
                self.api.create_property(data)
        except ApiError as e:
            log.error(f"Error saving property: {e.message}")
            self.message = "Error saving property: " + e.message
            self.loading = False
            return False
        self.reset_form()
        self.load()
        if not self.message:
            self.message = f"Property {action} successfully!"
        return True

    def delete_property(self, property_id: str) -> bool:
        if not self.confirm(DELETE_PROPERTY_PROMPT):
            return False
        self.loading = True
        try:
            self.api.delete_property(property_id)
        except ApiError as e:
            log.error(f"Error deleting property: {e.message}")
            self.message = "Error deleting property: " + e.message
            return False
        finally:
            self.loading = False
        self.properties = [p for p in self.properties if p["id"] != property_id]
        self.message = "Property deleted successfully!"
        return True

    # ---------- Tenants ----------

    def _find(self, property_id: str) -> dict:
        for prop in self.properties:
            if prop["id"] == property_id:
                return prop
        raise KeyError(property_id)

    def _replace(self, saved: dict):
        self.properties = [saved if p["id"] == saved["id"] else p for p in self.properties]

    def save_tenant(self, property_id: str, tenant: dict, original_flat_no: Optional[str] = None) -> bool:
        """Add a tenant, or update the one currently at `original_flat_no`."""
        if not tenant.get("flatNo") or not tenant.get("name"):
            self.message = "Flat number and tenant name are required."
            return False
        prop = self._find(property_id)
        tenants = list(prop.get("tenants") or [])
        if any(t["flatNo"] == tenant["flatNo"] and t["flatNo"] != original_flat_no for t in tenants):
            self.message = f"Flat {tenant['flatNo']} already has a tenant."
            return False

        if original_flat_no is None:
            updated = tenants + [dict({"paymentStatus": "Pending", "paymentHistory": [], "notifiedMessages": []}, **tenant)]
        else:
            moved = dict(tenant, originalFlatNo=original_flat_no) if tenant["flatNo"] != original_flat_no else tenant
            updated = [dict(t, **moved) if t["flatNo"] == original_flat_no else t for t in tenants]
        try:
            saved = self.api.update_property(property_id, dict(prop, tenants=updated))
        except ApiError as e:
            self.message = "Error saving tenant: " + e.message
            return False
        self._replace(saved)
        self.message = "Tenant saved successfully!"
        return True

    def remove_tenant(self, property_id: str, flat_no: str) -> bool:
        if not self.confirm(REMOVE_TENANT_PROMPT):
            return False
        prop = self._find(property_id)
        tenants = [t for t in prop.get("tenants") or [] if t["flatNo"] != flat_no]
        try:
            saved = self.api.update_property(property_id, dict(prop, tenants=tenants))
        except ApiError as e:
            self.message = "Error removing tenant: " + e.message
            return False
        self._replace(saved)
        self.message = "Tenant removed successfully!"
        return True

    def notify_tenant(self, property_id: str, flat_no: str, text: str) -> bool:
        if not text or not text.strip():
            self.message = "Notification message cannot be empty."
            return False
        try:
            saved = self.api.notify_tenant(property_id, flat_no, text.strip())
        except ApiError as e:
            self.message = "Error notifying tenant: " + e.message
            return False
        self._replace(saved)
        self.message = f"Notification sent to flat {flat_no}."
        return True

    def maintenance_link(self, prop: dict, flat_no: Optional[str] = None) -> Redirect:
        state = {"propertyId": prop["id"], "propertyName": prop.get("name")}
        if flat_no:
            state["flatNo"] = flat_no
        return Redirect("/OwnerMaintenanceRequests", state=state)
