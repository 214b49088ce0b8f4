import io
import uuid

from django.contrib.auth import get_user_model
from PIL import Image

from apps.api.models import Account
from apps.redesign.errors import UploadFailed
from apps.redesign.schemas import DesignCatalog, GenerationResult, RedesignRequest, ValidationResult
from apps.redesign.storage import StoredImage


def png_bytes(width=64, height=48, color=(40, 120, 40)):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def make_account(username="gardener", **fields):
    user = get_user_model().objects.create_user(username=username, password="pw-12345-long")
    return Account.objects.create(user=user, **fields)


def make_request(**overrides):
    params = dict(
        source_image=png_bytes(),
        mime_type="image/png",
        styles=("modern",),
        allow_structural_changes=False,
        climate_zone="",
        lock_aspect_ratio=True,
        density="balanced",
    )
    params.update(overrides)
    return RedesignRequest(**params)


def failing_validation(*reasons):
    return ValidationResult(style_accuracy=False, reasons=list(reasons))


class FakeGenerator:
    """Stands in for the image model; pops scripted results (or exceptions) per call."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def __call__(self, image_bytes, mime_type, prompt):
        self.calls.append(prompt)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def generated(catalog=None):
    return GenerationResult(
        image_bytes=png_bytes(color=(10, 200, 10)),
        mime_type="image/png",
        catalog=catalog or DesignCatalog(plants=[{"name": "Agave", "species": "Agave americana"}]),
    )


class FakeValidator:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def validate(self, original_image, original_mime, generated_image, generated_mime, request):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeUploads:
    def __init__(self, fail_on=None, error=None):
        self.fail_on = fail_on
        self.error = error
        self.uploaded = []
        self.deleted = []

    def upload(self, data, mime_type, *, subdir):
        if self.fail_on is not None and self.fail_on(data):
            raise self.error or UploadFailed("Failed to upload after 4 attempts")
        key = f"{subdir}/{uuid.uuid4().hex}.png"
        self.uploaded.append(key)
        return StoredImage(key=key, url=f"https://cdn.example.com/{key}")

    def delete(self, key):
        self.deleted.append(key)
