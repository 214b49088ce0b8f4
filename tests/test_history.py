from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from apps.api.models import Redesign
from apps.redesign import history
from tests.factories import make_account

def make_redesign(account, name, minutes_ago=0, **fields):
    redesign = Redesign.objects.create(
        account=account,
        original_image_url=f"https://cdn.example.com/{name}-o.png",
        original_image_key=f"{name}-o.png",
        redesigned_image_url=f"https://cdn.example.com/{name}-r.png",
        redesigned_image_key=f"{name}-r.png",
        styles=["modern"],
        **fields,
    )
    Redesign.objects.filter(pk=redesign.pk).update(created_at=timezone.now() - timedelta(minutes=minutes_ago))
    return redesign

class HistoryTests(TestCase):
    def setUp(self):
        self.account = make_account(redesigns_used=2)

    def test_pinned_first_then_newest(self):
        old = make_redesign(self.account, "old", minutes_ago=30)
        new = make_redesign(self.account, "new", minutes_ago=1)
        pinned = make_redesign(self.account, "pinned", minutes_ago=60, is_pinned=True)
        self.assertEqual(list(history.list_redesigns(self.account)), [pinned, new, old])

    def test_toggle_pin(self):
        redesign = make_redesign(self.account, "a")
        self.assertTrue(history.toggle_pin(self.account, redesign.id).is_pinned)
        self.assertFalse(history.toggle_pin(self.account, redesign.id).is_pinned)

    def test_delete_removes_images_without_refund(self):
        redesign = make_redesign(self.account, "a")
        deleted = []
        history.delete_redesign(self.account, redesign.id, delete=deleted.append)

        self.assertFalse(Redesign.objects.exists())
        self.assertEqual(deleted, ["a-o.png", "a-r.png"])
        self.account.refresh_from_db()
        self.assertEqual(self.account.redesigns_used, 2)

    def test_other_accounts_cannot_reach_a_redesign(self):
        redesign = make_redesign(self.account, "a")
        stranger = make_account(username="stranger")
        with self.assertRaises(Redesign.DoesNotExist):
            history.get_redesign(stranger, redesign.id)
        with self.assertRaises(Redesign.DoesNotExist):
            history.delete_redesign(stranger, redesign.id, delete=lambda key: None)
