import os
import logging
from datetime import datetime, timezone

import stripe

import db

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("active", "trialing")
SUBSCRIPTION_EVENTS = ("customer.subscription.created", "customer.subscription.updated")


def _configure():
    stripe.api_key = os.getenv("STRIPE_SECRET_KEY", "")


def _isoformat(ts):
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def create_checkout_session(user, price_id, origin):
    """Create a Stripe subscription checkout for `user` and return its URL."""
    if not price_id:
        raise ValueError("Missing required parameter: priceId")
    _configure()
    row = db.get_subscription(user["id"])
    customer_id = row["stripe_customer_id"] if row else None
    if not customer_id:
        customer = stripe.Customer.create(email=user["email"], metadata={"user_id": user["id"]})
        customer_id = customer["id"]
        if not row:
            db.upsert_subscription(user["id"])
        db.update_subscription_by_user(user["id"], stripe_customer_id=customer_id)
        logger.info("Created Stripe customer for user %s", user["id"])

    origin = origin.rstrip("/")
    session = stripe.checkout.Session.create(
        customer=customer_id,
        payment_method_types=["card"],
        line_items=[{"price": price_id, "quantity": 1}],
        mode="subscription",
        client_reference_id=user["id"],
        success_url=f"{origin}/payment-success",
        cancel_url=f"{origin}/pricing",
    )
    return session["url"]


def construct_event(payload, signature):
    """Verify a webhook payload. Raises ValueError or stripe.SignatureVerificationError."""
    _configure()
    return stripe.Webhook.construct_event(payload, signature, os.getenv("STRIPE_WEBHOOK_SECRET", ""))


def _period_end(subscription):
    try:
        return subscription["current_period_end"]
    except KeyError:
        # newer API versions keep the period on the subscription items
        return subscription["items"]["data"][0]["current_period_end"]


def _customer_user_id(customer_id):
    customer = stripe.Customer.retrieve(customer_id)
    try:
        return customer["metadata"]["user_id"]
    except KeyError:
        return None


def _apply_event(event_id, event_type, subscription):
    user_id = _customer_user_id(subscription["customer"])
    if not user_id:
        logger.error("No user ID found in customer metadata for event %s", event_id)
        return None, 0

    if event_type in SUBSCRIPTION_EVENTS:
        is_active = subscription["status"] in ACTIVE_STATUSES
        fields = {
            "tier": "premium" if is_active else "free",
            "is_active": is_active,
            "stripe_subscription_id": subscription["id"],
            "subscription_end_date": _isoformat(_period_end(subscription)),
        }
        if not db.get_subscription(user_id):
            db.upsert_subscription(user_id)
        return user_id, db.update_subscription_by_user(user_id, **fields)
    return user_id, db.update_subscription_by_stripe_id(
        subscription["id"],
        tier="free",
        is_active=False,
        subscription_end_date=datetime.now(tz=timezone.utc).isoformat(),
    )


def handle_event(event):
    """Apply a verified webhook event. Returns the number of subscription rows updated.

    The event id is claimed before any update so concurrent redeliveries apply
    at most once. The claim is released when the event could not be applied.
    """
    event_id = event["id"]
    event_type = event["type"]
    if event_type not in SUBSCRIPTION_EVENTS and event_type != "customer.subscription.deleted":
        logger.debug("Ignoring event type %s", event_type)
        return 0
    if not db.record_stripe_event(event_id, event_type):
        logger.info("Skipping already processed event %s", event_id)
        return 0

    _configure()
    try:
        user_id, updated = _apply_event(event_id, event_type, event["data"]["object"])
    except Exception:
        db.forget_stripe_event(event_id)
        raise
    if not user_id:
        db.forget_stripe_event(event_id)
        return 0
    logger.info("Processed %s for user %s (%d row(s))", event_type, user_id, updated)
    return updated
