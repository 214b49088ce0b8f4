from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from apps.api.models import Redesign
from apps.redesign.errors import UploadFailed
from apps.redesign.persistence import PersistenceGateway
from tests.factories import FakeUploads, generated, make_account, make_request

class PersistenceGatewayTests(TestCase):
    def setUp(self):
        self.account = make_account(redesigns_used=1)

    def assertNothingPersisted(self, uploads):
        self.assertFalse(Redesign.objects.exists())
        self.assertEqual(sorted(uploads.deleted), sorted(uploads.uploaded))
        self.account.refresh_from_db()
        self.assertEqual(self.account.redesigns_used, 1)

    def test_persist_creates_record_and_counts_usage(self):
        uploads = FakeUploads()
        request = make_request(styles=("japanese", "zen"), climate_zone="Coastal Oregon")
        result = generated()
        redesign = PersistenceGateway(upload=uploads.upload, delete=uploads.delete).persist(
            request, result, result.catalog, self.account,
        )

        self.assertEqual(len(uploads.uploaded), 2)
        self.assertEqual(redesign.styles, ["japanese", "zen"])
        self.assertEqual(redesign.climate_zone, "Coastal Oregon")
        self.assertTrue(redesign.original_image_url.startswith("https://cdn.example.com/redesigns/"))
        self.assertEqual(self.account.redesigns_used, 2)
        self.assertEqual(uploads.deleted, [])

    def test_one_failed_upload_leaves_nothing_behind(self):
        request = make_request()
        result = generated()
        # Only the generated image upload fails
        uploads = FakeUploads(fail_on=lambda data: data == result.image_bytes)
        gateway = PersistenceGateway(upload=uploads.upload, delete=uploads.delete)

        with self.assertRaises(UploadFailed):
            gateway.persist(request, result, result.catalog, self.account)

        self.assertEqual(len(uploads.uploaded), 1)
        self.assertNothingPersisted(uploads)

    def test_unexpected_upload_error_still_removes_the_other_image(self):
        request = make_request()
        result = generated()
        uploads = FakeUploads(
            fail_on=lambda data: data == result.image_bytes,
            error=ValueError("Invalid endpoint: https://.r2.cloudflarestorage.com"),
        )
        gateway = PersistenceGateway(upload=uploads.upload, delete=uploads.delete)

        with self.assertRaises(UploadFailed):
            gateway.persist(request, result, result.catalog, self.account)

        self.assertEqual(len(uploads.uploaded), 1)
        self.assertNothingPersisted(uploads)

    def test_database_failure_removes_both_images(self):
        uploads = FakeUploads()
        result = generated()
        gateway = PersistenceGateway(upload=uploads.upload, delete=uploads.delete)

        with mock.patch("apps.redesign.persistence.ledger.record_usage", side_effect=DatabaseError("disk I/O error")):
            with self.assertRaises(DatabaseError):
                gateway.persist(make_request(), result, result.catalog, self.account)

        self.assertEqual(len(uploads.uploaded), 2)
        self.assertNothingPersisted(uploads)
