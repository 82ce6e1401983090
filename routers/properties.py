"""
Properties Router
Property CRUD for owners, whole-document updates, and the per-tenant
payment and notification endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from database import create_document, get_documents, get_document, replace_document, delete_document
from schemas import PropertyIn, PaymentSuccessIn, NotifyIn
from security import get_current_principal, require_owner, ROLE_OWNER
from services import (
    PROPERTIES,
    public_property, load_property_for, merge_owner_update, merge_tenant_update,
    merge_tenants, record_payment, notify_tenant,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("")
def list_properties(ownerId: Optional[str] = Query(None), principal: dict = Depends(require_owner)):
    if ownerId and ownerId != principal["sub"]:
        raise HTTPException(status_code=403, detail="Cannot list another owner's properties")
    items = get_documents(PROPERTIES, {"ownerId": principal["sub"]})
    return [public_property(p) for p in items]


@router.post("", status_code=201)
def create_property(payload: PropertyIn, principal: dict = Depends(require_owner)):
    """Create a property for the calling owner, with empty tenant and request lists."""
    if not payload.name.strip() or not payload.location.strip():
        raise HTTPException(status_code=400, detail="Property name and location are required.")
    doc = {
        "ownerId": principal["sub"],
        "name": payload.name.strip(),
        "location": payload.location.strip(),
        "tenants": merge_tenants([], [t.model_dump(exclude_unset=True) for t in payload.tenants]),
        "maintenanceRequests": [],
    }
    property_id = create_document(PROPERTIES, doc)
    log.info(f"Owner {principal['sub']} created property {property_id}")
    return public_property(get_document(PROPERTIES, property_id))


@router.get("/{property_id}")
def get_property(property_id: str, principal: dict = Depends(get_current_principal)):
    return public_property(load_property_for(property_id, principal), principal)


@router.put("/{property_id}")
def update_property(property_id: str, payload: PropertyIn, principal: dict = Depends(get_current_principal)):
    """
    Whole-document update.
    Owners replace name, location, tenants and requests; tenants can only
    touch their own maintenance requests.
    """
    stored = load_property_for(property_id, principal)
    if principal["role"] == ROLE_OWNER:
        doc = merge_owner_update(stored, payload)
    else:
        doc = merge_tenant_update(stored, payload, principal["flatNo"])
    saved = replace_document(PROPERTIES, property_id, doc)
    if saved is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return public_property(saved, principal)


@router.delete("/{property_id}")
def delete_property(property_id: str, principal: dict = Depends(require_owner)):
    load_property_for(property_id, principal)
    delete_document(PROPERTIES, property_id)
    log.info(f"Owner {principal['sub']} deleted property {property_id}")
    return {"message": "Property deleted", "id": property_id}


@router.put("/{property_id}/tenants/{flat_no}/payment-success")
def payment_success(
    property_id: str,
    flat_no: str,
    payload: PaymentSuccessIn,
    principal: dict = Depends(get_current_principal),
):
    """
    Called when the browser returns from hosted checkout.
    The amount is the rent the client reports, not a provider-confirmed charge.
    """
    load_property_for(property_id, principal)
    if principal["role"] != ROLE_OWNER and principal.get("flatNo") != flat_no:
        raise HTTPException(status_code=403, detail="Not the tenant of this flat")
    saved = record_payment(property_id, flat_no, payload.rentAmount, session_id=payload.sessionId)
    return public_property(saved, principal)


@router.post("/{property_id}/tenants/{flat_no}/notify")
def notify(property_id: str, flat_no: str, payload: NotifyIn, principal: dict = Depends(require_owner)):
    load_property_for(property_id, principal)
    return public_property(notify_tenant(property_id, flat_no, payload.message))
