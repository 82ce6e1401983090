"""
Domain logic shared by the routers: login scan, property merges,
payment recording and tenant notifications.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException

from logger import log_payment
from database import (
    now_iso, new_id, get_documents, get_document, replace_document, update_document,
)
from schemas import (
    PropertyIn, PaymentEntry, Notification,
    PAYMENT_PAID, PAYMENT_PARTIAL, REQUEST_PENDING,
)
from security import (
    verify_password, hash_password, is_hashed, create_access_token,
    ROLE_OWNER, ROLE_TENANT,
)

log = logging.getLogger(__name__)

USERS = "users"
PROPERTIES = "properties"

INVALID_CREDENTIALS = "Invalid email/username or password."
TEMP_ID_PREFIX = "temp-"


# ---------- Output shaping ----------

def public_user(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if k != "password"}


def _public_tenant(tenant: dict) -> dict:
    return {k: v for k, v in tenant.items() if k != "password"}


def public_property(doc: dict, principal: Optional[dict] = None) -> dict:
    """Strip tenant passwords; a tenant only sees their own tenant record."""
    tenants = doc.get("tenants") or []
    if principal and principal.get("role") == ROLE_TENANT:
        tenants = [t for t in tenants if t.get("flatNo") == principal.get("flatNo")]
    out = dict(doc)
    out["tenants"] = [_public_tenant(t) for t in tenants]
    out.setdefault("maintenanceRequests", [])
    return out


def find_tenant(doc: dict, flat_no: str) -> Optional[dict]:
    for tenant in doc.get("tenants") or []:
        if tenant.get("flatNo") == flat_no:
            return tenant
    return None


# ---------- Authentication ----------

def _matches(value: Optional[str], identifier: str) -> bool:
    return bool(value) and value.lower() == identifier.lower()


def authenticate(identifier: str, password: str) -> Optional[dict]:
    """
    Owners first, then every property's tenants; first match wins.
    Returns the login response body or None.
    """
    identifier = identifier.strip()
    for user in get_documents(USERS):
        if user.get("role") != ROLE_OWNER:
            continue
        if not (_matches(user.get("email"), identifier) or _matches(user.get("username"), identifier)):
            continue
        valid, needs_upgrade = verify_password(password, user.get("password"))
        if not valid:
            continue
        if needs_upgrade:
            update_document(USERS, user["id"], {"password": hash_password(password)})
            log.info(f"Upgraded plaintext password to hash for user {user['id']}")
        log.info(f"Owner {user['id']} logged in")
        return {
            "token": create_access_token(user["id"], ROLE_OWNER),
            "role": ROLE_OWNER,
            "ownerId": user["id"],
            "redirect": f"/OwnerDashboard/{user['id']}",
        }

    for prop in get_documents(PROPERTIES):
        tenants = prop.get("tenants")
        if not isinstance(tenants, list):
            continue
        for tenant in tenants:
            if not (_matches(tenant.get("username"), identifier) or tenant.get("flatNo") == identifier):
                continue
            valid, needs_upgrade = verify_password(password, tenant.get("password"))
            if not valid:
                continue
            if needs_upgrade:
                tenant["password"] = hash_password(password)
                replace_document(PROPERTIES, prop["id"], prop)
                log.info(f"Upgraded plaintext password to hash for tenant {tenant['flatNo']} of property {prop['id']}")
            flat_no = tenant["flatNo"]
            log.info(f"Tenant {flat_no} of property {prop['id']} logged in")
            return {
                "token": create_access_token(
                    f"{prop['id']}:{flat_no}", ROLE_TENANT, propertyId=prop["id"], flatNo=flat_no
                ),
                "role": ROLE_TENANT,
                "propertyId": prop["id"],
                "flatNo": flat_no,
                "redirect": f"/TenantDashboard/{prop['id']}/{flat_no}",
            }
    return None


# ---------- Access ----------

def load_property_for(property_id: str, principal: dict) -> dict:
    doc = get_document(PROPERTIES, property_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Property not found")
    if principal["role"] == ROLE_OWNER:
        if doc.get("ownerId") != principal["sub"]:
            raise HTTPException(status_code=403, detail="Not the owner of this property")
    elif principal.get("propertyId") != property_id:
        raise HTTPException(status_code=403, detail="Not a tenant of this property")
    return doc


# ---------- Whole-document merges ----------

def _keep_unchanged(stored: dict, incoming: dict) -> dict:
    return stored if stored == incoming else incoming


def _stored_match(tenant: dict, by_id: dict, by_flat: dict, claimed: set) -> Optional[dict]:
    """Stored record for an incoming tenant: by id, then by the flat it moved from, then by flat."""
    for candidate in (
        by_id.get(tenant.get("id")),
        by_flat.get(tenant.get("originalFlatNo")),
        by_flat.get(tenant["flatNo"]),
    ):
        if candidate is not None and id(candidate) not in claimed:
            return candidate
    return None


def merge_tenants(stored_tenants: list, incoming_tenants: list) -> list:
    """
    Tenants come back from clients without passwords. Keep the stored hash
    for those, hash any new plaintext, and keep entries that did not change
    exactly as stored. A tenant moving flats is matched to its stored record
    by `id` or `originalFlatNo`.
    """
    by_id = {t["id"]: t for t in stored_tenants if t.get("id")}
    by_flat = {t.get("flatNo"): t for t in stored_tenants}
    seen = set()
    claimed = set()
    merged = []
    for tenant in incoming_tenants:
        flat_no = tenant["flatNo"]
        if flat_no in seen:
            raise HTTPException(status_code=400, detail=f"Duplicate flat number: {flat_no}")
        seen.add(flat_no)

        stored = _stored_match(tenant, by_id, by_flat, claimed)
        tenant = {k: v for k, v in tenant.items() if k != "originalFlatNo"}
        if stored is None:
            tenant.setdefault("id", new_id())
        else:
            claimed.add(id(stored))

        password = tenant.get("password")
        if not password:
            tenant.pop("password", None)
            if stored is None:
                raise HTTPException(status_code=400, detail=f"A password is required for the tenant in flat {flat_no}.")
            if _public_tenant(stored) == tenant:
                merged.append(stored)
                continue
            if stored.get("password"):
                tenant["password"] = stored["password"]
            merged.append(tenant)
            continue

        if stored is not None and password == stored.get("password"):
            merged.append(_keep_unchanged(stored, tenant))
            continue
        if not is_hashed(password):
            tenant["password"] = hash_password(password)
        merged.append(tenant)
    return merged


def merge_owner_requests(stored_requests: list, incoming_requests: list) -> list:
    by_id = {r.get("id"): r for r in stored_requests if r.get("id")}
    merged = []
    for request in incoming_requests:
        request = dict(request)
        if not request.get("id"):
            request["id"] = new_id()
        stored = by_id.get(request["id"])
        merged.append(_keep_unchanged(stored, request) if stored else request)
    return merged


def merge_owner_update(stored: dict, body: PropertyIn) -> dict:
    incoming = body.model_dump(exclude_unset=True)
    doc = dict(stored)
    doc.pop("tenants", None)
    doc.pop("maintenanceRequests", None)
    if "name" in incoming:
        doc["name"] = incoming["name"]
    if "location" in incoming:
        doc["location"] = incoming["location"]
    if not doc.get("name") or not doc.get("location"):
        raise HTTPException(status_code=400, detail="Property name and location are required.")
    doc["tenants"] = merge_tenants(stored.get("tenants") or [], incoming.get("tenants", stored.get("tenants") or []))
    doc["maintenanceRequests"] = merge_owner_requests(
        stored.get("maintenanceRequests") or [],
        incoming.get("maintenanceRequests", stored.get("maintenanceRequests") or []),
    )
    return doc


def _new_tenant_request(request: dict, flat_no: str) -> dict:
    request_id = request.get("id")
    if not request_id or request_id.startswith(TEMP_ID_PREFIX):
        request_id = new_id()
    return {
        "id": request_id,
        "flatNo": flat_no,
        "description": request["description"].strip(),
        "status": REQUEST_PENDING,
        "date": request.get("date") or date.today().isoformat(),
        "remarks": "",
    }


def merge_tenant_requests(stored_requests: list, incoming_requests: list, flat_no: str) -> list:
    """
    A tenant may add requests for their own flat and edit or remove their
    own Pending requests. Everything else stays as stored.
    """
    incoming_own = {}
    new_requests = []
    stored_ids = {r.get("id") for r in stored_requests}
    for request in incoming_requests:
        if request.get("flatNo") != flat_no:
            continue
        if not request.get("description", "").strip():
            raise HTTPException(status_code=400, detail="Maintenance description cannot be empty.")
        if request.get("id") in stored_ids:
            incoming_own[request["id"]] = request
        else:
            new_requests.append(_new_tenant_request(request, flat_no))

    merged = []
    for stored in stored_requests:
        if stored.get("flatNo") != flat_no or stored.get("status") != REQUEST_PENDING:
            merged.append(stored)
            continue
        edited = incoming_own.get(stored.get("id"))
        if edited is None:
            continue
        description = edited["description"].strip()
        if description == stored.get("description"):
            merged.append(stored)
        else:
            merged.append(dict(stored, description=description))
    return merged + new_requests


def merge_tenant_update(stored: dict, body: PropertyIn, flat_no: str) -> dict:
    incoming = body.model_dump(exclude_unset=True)
    doc = dict(stored)
    doc["maintenanceRequests"] = merge_tenant_requests(
        stored.get("maintenanceRequests") or [],
        incoming.get("maintenanceRequests", stored.get("maintenanceRequests") or []),
        flat_no,
    )
    return doc


# ---------- Tenant sub-resources ----------

def _load_tenant(property_id: str, flat_no: str) -> tuple:
    doc = get_document(PROPERTIES, property_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Property not found")
    tenant = find_tenant(doc, flat_no)
    if tenant is None:
        raise HTTPException(status_code=404, detail=f"Tenant with flat number {flat_no} not found")
    return doc, tenant


def _minor_units(amount) -> int:
    return int(round((amount or 0) * 100))


def record_payment(property_id: str, flat_no: str, amount, session_id: Optional[str] = None) -> dict:
    """
    Append a payment-history entry. The tenant is marked Paid only when the
    amount covers their current rent; a smaller amount is kept as Partial.
    """
    doc, tenant = _load_tenant(property_id, flat_no)
    history = tenant.setdefault("paymentHistory", [])
    if session_id and any(entry.get("sessionId") == session_id for entry in history):
        log_payment("already recorded", property_id, flat_no, session_id=session_id)
        return doc

    covers_rent = _minor_units(amount) >= _minor_units(tenant.get("rentAmount"))
    status = PAYMENT_PAID if covers_rent else PAYMENT_PARTIAL
    entry = PaymentEntry(id=new_id(), amount=amount, date=now_iso(), status=status, sessionId=session_id)
    history.append(entry.model_dump(exclude_none=True))
    if covers_rent:
        tenant["paymentStatus"] = PAYMENT_PAID
        log_payment("recorded", property_id, flat_no, amount=amount, session_id=session_id)
    else:
        log_payment(
            f"short of rent {tenant.get('rentAmount')}", property_id, flat_no,
            amount=amount, session_id=session_id, level=logging.WARNING,
        )
    return replace_document(PROPERTIES, property_id, doc)


def notify_tenant(property_id: str, flat_no: str, message: str) -> dict:
    message = message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Notification message cannot be empty.")
    doc, tenant = _load_tenant(property_id, flat_no)
    notification = Notification(id=new_id(), message=message, date=now_iso())
    tenant.setdefault("notifiedMessages", []).append(notification.model_dump())
    tenant["lastNotify"] = notification.date
    saved = replace_document(PROPERTIES, property_id, doc)
    log.info(f"Notified flat {flat_no} of property {property_id}")
    return saved
