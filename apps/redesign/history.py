import logging

from django.db import transaction

from apps.api.models import Redesign
from .persistence import remove_stored_images

logger = logging.getLogger(__name__)


def list_redesigns(account):
    # Model ordering already puts pinned first, newest first
    return Redesign.objects.filter(account=account).order_by('-is_pinned', '-created_at')


def get_redesign(account, redesign_id) -> Redesign:
    """Raises Redesign.DoesNotExist for ids owned by another account."""
    return Redesign.objects.get(account=account, id=redesign_id)


def toggle_pin(account, redesign_id) -> Redesign:
    with transaction.atomic():
        redesign = Redesign.objects.select_for_update().get(account=account, id=redesign_id)
        redesign.is_pinned = not redesign.is_pinned
        redesign.save(update_fields=['is_pinned'])
    return redesign


def delete_redesign(account, redesign_id, delete=None):
    """Delete the record, then its stored images. Usage is never refunded."""
    redesign = get_redesign(account, redesign_id)
    redesign.delete()
    remove_stored_images(redesign, delete=delete)
    logger.info(f"Deleted redesign {redesign_id} for account {account.pk}")
