"""
Subscription bookkeeping for payment-provider webhooks.

Signature verification happens before these functions are reached; here we
only keep events idempotent and map subscriptions onto plan limits.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.redesign.ledger import FREE_PLAN, limit_for_plan
from .models import Account, WebhookEvent

logger = logging.getLogger(__name__)


def map_price_to_plan(price_id: str) -> str:
    for plan, price_ids in settings.POLAR_PRICE_IDS.items():
        if price_id and price_id in [p for p in price_ids if p]:
            return plan
    return FREE_PLAN


def log_webhook_event(event_id: str, event_type: str, payload: dict) -> bool:
    """
    Record an incoming event. Returns True if it was already processed,
    in which case the caller must skip it.
    """
    existing = WebhookEvent.objects.filter(event_id=event_id).first()
    if existing:
        return existing.processed

    try:
        with transaction.atomic():
            WebhookEvent.objects.create(event_id=event_id, event_type=event_type, payload=payload)
    except IntegrityError:
        # A concurrent delivery of the same event got there first
        return WebhookEvent.objects.get(event_id=event_id).processed
    return False


def mark_webhook_processed(event_id: str):
    updated = WebhookEvent.objects.filter(event_id=event_id).update(processed=True, processed_at=timezone.now())
    if not updated:
        raise WebhookEvent.DoesNotExist(f"Event not found: {event_id}")


def apply_subscription_update(customer_id: str, subscription_id: str, price_id: str,
                              status: str, current_period_end=None) -> Account:
    """Move the account to the plan behind `price_id`; canceled subscriptions fall back to Free."""
    account = Account.objects.get(polar_customer_id=customer_id)

    plan = map_price_to_plan(price_id) if status == 'active' else FREE_PLAN
    account.plan = plan
    account.monthly_redesign_limit = limit_for_plan(plan)
    account.subscription_id = subscription_id
    account.subscription_status = status
    account.current_period_end = current_period_end
    account.save(update_fields=[
        'plan', 'monthly_redesign_limit', 'subscription_id', 'subscription_status', 'current_period_end',
    ])
    logger.info(f"Account {account.pk} moved to {plan} ({status})")
    return account


def process_subscription_event(event_id: str, event_type: str, payload: dict):
    """Idempotently apply one subscription webhook payload."""
    if log_webhook_event(event_id, event_type, payload):
        logger.info(f"Webhook {event_id} already processed, skipping")
        return None

    data = payload.get('data', {})
    account = apply_subscription_update(
        customer_id=data.get('customer_id'),
        subscription_id=data.get('id'),
        price_id=data.get('price_id'),
        status=data.get('status', 'active'),
        current_period_end=data.get('current_period_end'),
    )
    mark_webhook_processed(event_id)
    return account
