"""
Usage ledger: per-account redesign counter over a rolling 30-day period.

Checking the limit and recording usage are separate steps and are not atomic
against each other. Two concurrent requests from the same account can both
pass `check_limit` before either increments, briefly overshooting the quota.
That window is accepted; `record_usage` itself is an atomic increment.
"""
from datetime import timedelta
import logging

from django.db.models import F
from django.utils import timezone

from .schemas import UsageStatus

logger = logging.getLogger(__name__)

PERIOD_LENGTH = timedelta(days=30)
FREE_PLAN = "Free"
UNLIMITED_PLAN = "Business"
UNLIMITED_REMAINING = 999999

PLAN_LIMITS = {
    "Free": 3,
    "Personal": 50,
    "Creator": 200,
    "Business": 999999,
}


def limit_for_plan(plan: str) -> int:
    return PLAN_LIMITS.get(plan, PLAN_LIMITS[FREE_PLAN])


def _roll_period(account, now):
    """Reset the counter when the current period is 30 days old or more."""
    if now - account.period_start < PERIOD_LENGTH:
        return
    logger.info(f"Usage period rolled over for account {account.pk} (used {account.redesigns_used})")
    account.redesigns_used = 0
    account.period_start = now
    account.save(update_fields=["redesigns_used", "period_start"])


def check_limit(account, now=None) -> UsageStatus:
    now = now or timezone.now()
    _roll_period(account, now)

    used = account.redesigns_used
    limit = account.monthly_redesign_limit

    if account.plan == UNLIMITED_PLAN:
        return UsageStatus(
            used=used,
            limit=limit,
            remaining=UNLIMITED_REMAINING,
            has_reached_limit=False,
            is_unlimited=True,
            plan=account.plan,
        )

    return UsageStatus(
        used=used,
        limit=limit,
        remaining=max(0, limit - used),
        has_reached_limit=used >= limit,
        is_unlimited=False,
        plan=account.plan,
    )


def record_usage(account):
    """Count one redesign. Callers must already have checked the limit."""
    type(account).objects.filter(pk=account.pk).update(redesigns_used=F("redesigns_used") + 1)
    account.refresh_from_db(fields=["redesigns_used"])
    logger.info(f"Recorded redesign usage for account {account.pk}: {account.redesigns_used}")
