"""
Payment Router
Hosted checkout session creation and signature-verified confirmation
"""
import logging

import stripe
from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import PlainTextResponse

from config import settings
from schemas import CheckoutSessionIn
from logger import log_payment
from security import get_current_principal, ROLE_OWNER
from services import find_tenant, load_property_for, record_payment

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payment", tags=["payment"])


def checkout_email(tenant: dict) -> str:
    return tenant.get("email") or f"{tenant.get('username') or tenant['flatNo']}-tenant@example.com"


@router.post("/create-checkout-session")
def create_checkout_session(payload: CheckoutSessionIn, principal: dict = Depends(get_current_principal)):
    """
    Start a Stripe Checkout session for one month's rent.
    The amount is the tenant's stored rent; whatever the client sends is ignored.
    The client redirects the browser to the returned session.
    """
    if not settings.stripe_secret_key:
        log.error("STRIPE_SECRET_KEY is not set; cannot create checkout session.")
        raise HTTPException(status_code=503, detail="Payment provider is not configured.")

    property_id = payload.propertyId
    flat_no = payload.tenant.flatNo
    prop = load_property_for(property_id, principal)
    if principal["role"] != ROLE_OWNER and principal.get("flatNo") != flat_no:
        raise HTTPException(status_code=403, detail="Not the tenant of this flat")
    tenant = find_tenant(prop, flat_no)
    if tenant is None:
        raise HTTPException(status_code=404, detail=f"Tenant with flat number {flat_no} not found")

    rent = tenant.get("rentAmount")
    if not rent or rent <= 0:
        raise HTTPException(status_code=400, detail="Rent amount must be greater than zero.")

    amount_minor = int(round(rent * 100))
    property_label = prop.get("name") or payload.propertyName or property_id
    success_url = (
        f"{settings.client_url}/payment-success/{property_id}/{flat_no}"
        "?session_id={CHECKOUT_SESSION_ID}"
    )
    cancel_url = f"{settings.client_url}/TenantDashboard/{property_id}/{flat_no}"

    try:
        session = stripe.checkout.Session.create(
            api_key=settings.stripe_secret_key,
            payment_method_types=["card"],
            mode="payment",
            customer_email=checkout_email(tenant),
            line_items=[
                {
                    "price_data": {
                        "currency": settings.stripe_currency,
                        "product_data": {"name": f"Rent for Flat {flat_no} - {property_label}"},
                        "unit_amount": amount_minor,
                    },
                    "quantity": 1,
                }
            ],
            metadata={"propertyId": property_id, "flatNo": flat_no},
            success_url=success_url,
            cancel_url=cancel_url,
        )
    except stripe.StripeError as e:
        log.error(f"Failed to create checkout session for flat {flat_no} of property {property_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Payment provider error: {e.user_message or str(e)}")

    if not session or not session.id:
        raise HTTPException(status_code=502, detail="Payment provider returned no session id.")

    log_payment("checkout created", property_id, flat_no, amount=rent, session_id=session.id)
    return {"id": session.id, "url": session.url}


@router.post("/webhook")
async def stripe_webhook(request: Request):
    """
    Provider-verified confirmation of completed checkouts.
    Records the charged amount; it must cover the rent for a Paid status.
    Duplicates of a redirect-recorded session are ignored.
    """
    if not settings.stripe_webhook_secret:
        log.error("STRIPE_WEBHOOK_SECRET not configured; cannot verify webhook.")
        return PlainTextResponse("Webhook secret not configured", status_code=500)

    payload = await request.body()
    sig_header = request.headers.get("Stripe-Signature", "")
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, settings.stripe_webhook_secret)
    except ValueError:
        log.warning("Invalid payload in Stripe webhook.")
        return PlainTextResponse("Invalid payload", status_code=400)
    except stripe.SignatureVerificationError:
        log.warning("Invalid signature in Stripe webhook.")
        return PlainTextResponse("Invalid signature", status_code=400)

    if event["type"] != "checkout.session.completed":
        log.debug(f"Unhandled Stripe event type: {event['type']}")
        return {"received": True}

    session_obj = event["data"]["object"]
    metadata = session_obj.get("metadata") or {}
    property_id = metadata.get("propertyId")
    flat_no = metadata.get("flatNo")
    amount_total = session_obj.get("amount_total")
    if not (property_id and flat_no and amount_total is not None):
        log.error(f"Missing metadata in checkout.session.completed {session_obj.get('id')}: {metadata}")
        return PlainTextResponse("Missing metadata", status_code=400)

    record_payment(property_id, flat_no, amount_total / 100, session_id=session_obj.get("id"))
    return {"received": True}
