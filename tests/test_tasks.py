from unittest import mock

from django.test import TestCase

from apps.api.models import Redesign, RedesignJob
from apps.api.tasks import process_redesign_task
from apps.redesign.engine import RedesignEngine
from apps.redesign.persistence import PersistenceGateway
from apps.redesign.schemas import ValidationResult
from tests.factories import (
    FakeGenerator,
    FakeUploads,
    FakeValidator,
    failing_validation,
    generated,
    make_account,
    png_bytes,
)

class RedesignTaskTests(TestCase):
    def setUp(self):
        self.account = make_account()
        self.job = RedesignJob.objects.create(
            account=self.account,
            source_image=png_bytes(),
            source_mime_type="image/png",
            styles=["modern"],
        )
        uploads = FakeUploads()
        self.gateway = PersistenceGateway(upload=uploads.upload, delete=uploads.delete)

    def run_task(self, generator, validator):
        engine = RedesignEngine(generate=generator, validator=validator, gateway=self.gateway)
        with mock.patch("apps.api.tasks.RedesignEngine", return_value=engine):
            state = process_redesign_task(str(self.job.id))
        self.job.refresh_from_db()
        return state

    def test_success_records_attempts_and_notifications(self):
        validator = FakeValidator(failing_validation("style mismatch"), ValidationResult.passing())
        state = self.run_task(FakeGenerator(generated()), validator)

        self.assertEqual(state, "SUCCESS")
        self.assertEqual(self.job.status, "SUCCESS")
        self.assertEqual(self.job.attempts, 2)
        self.assertEqual(self.job.notifications, [
            {"level": "info", "message": "Retrying redesign (attempt 2 of 2)..."},
        ])
        self.assertIsNotNone(self.job.redesign)

    def test_failure_is_written_to_job(self):
        state = self.run_task(FakeGenerator(generated()), FakeValidator(failing_validation("house altered")))
        self.assertEqual(state, "FAILED")
        self.assertEqual(self.job.error_kind, "validation_failed")
        self.assertIsNone(self.job.redesign)

    def test_superseded_mid_run_discards_result(self):
        job_id = self.job.id
        inner = FakeGenerator(generated())

        def generate(image_bytes, mime_type, prompt):
            # A newer request from the same context arrives while the model is working
            RedesignJob.objects.filter(id=job_id).update(status="SUPERSEDED")
            return inner(image_bytes, mime_type, prompt)

        validator = FakeValidator(ValidationResult.passing())
        state = self.run_task(generate, validator)

        self.assertEqual(state, "SUPERSEDED")
        self.assertEqual(self.job.status, "SUPERSEDED")
        self.assertEqual(validator.calls, 0)
        self.assertFalse(Redesign.objects.exists())
        self.account.refresh_from_db()
        self.assertEqual(self.account.redesigns_used, 0)

    def test_cancel_during_persistence_keeps_job_superseded(self):
        job_id = self.job.id
        uploads = FakeUploads()

        class CancelledMidPersist(PersistenceGateway):
            def persist(self, *args):
                RedesignJob.objects.filter(id=job_id).update(status="SUPERSEDED")
                return super().persist(*args)

        self.gateway = CancelledMidPersist(upload=uploads.upload, delete=uploads.delete)
        self.run_task(FakeGenerator(generated()), FakeValidator(ValidationResult.passing()))

        self.assertEqual(self.job.status, "SUPERSEDED")
        self.assertIsNone(self.job.redesign)
        self.assertEqual(Redesign.objects.count(), 1)
        self.account.refresh_from_db()
        self.assertEqual(self.account.redesigns_used, 1)

    def test_terminal_job_is_not_rerun(self):
        RedesignJob.objects.filter(id=self.job.id).update(status="SUPERSEDED")
        generator = FakeGenerator(generated())
        self.assertEqual(self.run_task(generator, FakeValidator(ValidationResult.passing())), "SUPERSEDED")
        self.assertEqual(generator.calls, [])
