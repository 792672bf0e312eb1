import logging
from datetime import datetime, timezone

import config
import db

logger = logging.getLogger(__name__)

LIMITS = config.QUIZ_LIMITS


def utcnow():
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value):
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_user_subscription(user_id=None):
    """Subscription record in API shape; users without a row are on the free tier."""
    default = {"tier": "free", "questionCount": 0, "isActive": True}
    if not user_id:
        return default
    row = db.get_subscription(user_id)
    if not row:
        return default
    return {
        "tier": row["tier"],
        "questionCount": row["question_count"],
        "subscriptionEndDate": row["subscription_end_date"],
        "isActive": bool(row["is_active"]),
        "stripeCustomerId": row["stripe_customer_id"],
        "stripeSubscriptionId": row["stripe_subscription_id"],
    }


def question_limit(subscription, registered=True):
    if not registered:
        return LIMITS["free"]
    if subscription["tier"] == "premium" and subscription.get("isActive", True):
        return LIMITS["premium"]
    return LIMITS["registered"]


def is_subscription_active(subscription, now=None):
    if not subscription["isActive"]:
        return False
    end = parse_timestamp(subscription.get("subscriptionEndDate"))
    if end and end < (now or utcnow()):
        return False
    return True


def can_generate_questions(user_id=None, count=1):
    if not user_id:
        return count <= LIMITS["free"]
    subscription = get_user_subscription(user_id)
    subscription["isActive"] = is_subscription_active(subscription)
    return subscription["questionCount"] + count <= question_limit(subscription)


def get_remaining_questions(user_id=None):
    if not user_id:
        return LIMITS["free"]
    subscription = get_user_subscription(user_id)
    subscription["isActive"] = is_subscription_active(subscription)
    return max(0, question_limit(subscription) - subscription["questionCount"])


def record_usage(user_id, count):
    db.increment_question_count(user_id, count)


def get_subscription_plans():
    return [
        {
            "id": "free-tier",
            "name": "Free",
            "description": "Basic access for casual users",
            "price": 0,
            "features": [
                f"Generate up to {LIMITS['free']} questions per month",
                "Basic question types",
                "Access to review hub",
            ],
            "questionLimit": LIMITS["free"],
            "tier": "free",
        },
        {
            "id": "registered-tier",
            "name": "Registered",
            "description": "Standard access for registered users",
            "price": 0,
            "features": [
                f"Generate up to {LIMITS['registered']} questions per month",
                "All question types",
                "Save question history",
            ],
            "questionLimit": LIMITS["registered"],
            "tier": "free",
        },
        {
            "id": "premium-tier",
            "name": "Premium",
            "description": "Full access for professionals and educators",
            "price": 9.99,
            "priceId": config.STRIPE_PRICE_IDS["premium"],
            "features": [
                f"Generate up to {LIMITS['premium']:,} questions per month",
                "All question types",
                "Advanced Bloom's taxonomy targeting",
                "Priority support",
            ],
            "questionLimit": LIMITS["premium"],
            "tier": "premium",
        },
    ]


def check_subscription(user):
    """Body returned by the check-subscription function. `user` is None when unauthenticated."""
    if not user:
        return {
            "error": "User not authenticated",
            "subscription": {"tier": "free", "isActive": True, "questionLimit": LIMITS["free"]},
        }
    row = db.get_subscription(user["id"])
    if not row:
        return {
            "subscription": {
                "tier": "free",
                "isActive": True,
                "questionCount": 0,
                "questionLimit": LIMITS["registered"],
            }
        }
    subscription = get_user_subscription(user["id"])
    return {
        "subscription": {
            "tier": subscription["tier"],
            "isActive": is_subscription_active(subscription),
            "questionCount": subscription["questionCount"],
            "questionLimit": LIMITS["premium"] if subscription["tier"] == "premium" else LIMITS["registered"],
            "subscriptionEndDate": subscription["subscriptionEndDate"],
        }
    }


def provision_new_user(user_id):
    """Create the profile and free subscription for a freshly registered user."""
    user = db.get_user(user_id)
    if not user:
        raise LookupError(f"User {user_id} not found")
    email = user.get("email") or ""
    display_name = user.get("display_name") or (email.split("@")[0] if email else "") or "User"
    db.upsert_profile(user_id, email, display_name)
    db.upsert_subscription(user_id, tier="free", question_count=0, is_active=True)
    logger.info("User registration processed: %s", user_id)
    return {"success": True, "userId": user_id}
