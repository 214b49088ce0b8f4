from concurrent.futures import ThreadPoolExecutor
import logging

from botocore.exceptions import BotoCoreError, ClientError
from django.db import transaction

from apps.api.models import Redesign
from . import ledger, storage
from .errors import UploadFailed
from .schemas import DesignCatalog, GenerationResult, RedesignRequest

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """
    Stores a validated redesign: both images to object storage, then the
    Redesign row and the usage increment in one transaction.
    """

    def __init__(self, upload=None, delete=None):
        self.upload = upload or storage.upload_image
        self.delete = delete or storage.delete_image

    def persist(self, request: RedesignRequest, generated: GenerationResult,
                catalog: DesignCatalog, account) -> Redesign:
        subdir = f"redesigns/{account.pk}"

        # The two uploads are independent; run them side by side
        with ThreadPoolExecutor(max_workers=2) as pool:
            original_future = pool.submit(self.upload, request.source_image, request.mime_type, subdir=subdir)
            generated_future = pool.submit(self.upload, generated.image_bytes, generated.mime_type, subdir=subdir)
            uploads = []
            errors = []
            for future in (original_future, generated_future):
                try:
                    uploads.append(future.result())
                except Exception as e:
                    errors.append(e)

        if errors:
            self._discard(uploads)
            error = errors[0]
            if isinstance(error, UploadFailed):
                raise error
            logger.error(f"Upload raised outside the retry policy: {error!r}")
            raise UploadFailed(f"Upload failed: {error}") from error

        original, redesigned = uploads
        try:
            with transaction.atomic():
                redesign = Redesign.objects.create(
                    account=account,
                    original_image_url=original.url,
                    original_image_key=original.key,
                    redesigned_image_url=redesigned.url,
                    redesigned_image_key=redesigned.key,
                    design_catalog=catalog.to_dict(),
                    styles=list(request.styles),
                    climate_zone=request.climate_zone,
                )
                ledger.record_usage(account)
        except Exception:
            # Row and usage rolled back; the stored objects would otherwise be orphaned
            self._discard(uploads)
            raise

        logger.info(f"Persisted redesign {redesign.id} for account {account.pk}")
        return redesign

    def _discard(self, uploads):
        """Remove objects left behind by a half-finished persist."""
        for stored in uploads:
            try:
                self.delete(stored.key)
            except (BotoCoreError, ClientError) as e:
                logger.warning(f"Could not remove orphaned upload {stored.key}: {e}")


def remove_stored_images(redesign, delete=None):
    delete = delete or storage.delete_image
    for key in (redesign.original_image_key, redesign.redesigned_image_key):
        try:
            delete(key)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Could not remove stored image {key}: {e}")
