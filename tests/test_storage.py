from unittest import mock

from botocore.exceptions import ClientError
from django.test import SimpleTestCase, override_settings

from apps.redesign import storage
from apps.redesign.errors import UploadFailed

def client_error(code="InternalError"):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "PutObject")

@override_settings(R2_BUCKET="yardcraft-test", R2_PUBLIC_BASE_URL="https://img.example.com/")
class ImageStorageTests(SimpleTestCase):
    def test_upload_returns_public_url(self):
        client = mock.Mock()
        stored = storage.upload_image(b"png", "image/png", subdir="redesigns/7", filename="a.png", client=client)

        self.assertEqual(stored.key, "redesigns/7/a.png")
        self.assertEqual(stored.url, "https://img.example.com/redesigns/7/a.png")
        kwargs = client.put_object.call_args.kwargs
        self.assertEqual(kwargs["Bucket"], "yardcraft-test")
        self.assertEqual(kwargs["ContentType"], "image/png")

    def test_transient_errors_are_retried(self):
        client = mock.Mock()
        client.put_object.side_effect = [client_error(), client_error(), None]
        stored = storage.upload_image(
            b"jpg", "image/jpeg", subdir="redesigns/7", client=client, max_attempts=4, backoff_seconds=0,
        )
        self.assertEqual(client.put_object.call_count, 3)
        self.assertTrue(stored.key.endswith(".jpg"))

    def test_gives_up_after_attempt_budget(self):
        client = mock.Mock()
        client.put_object.side_effect = client_error("SlowDown")
        with self.assertRaises(UploadFailed):
            storage.upload_image(b"x", "image/png", subdir="s", client=client, max_attempts=4, backoff_seconds=0)
        self.assertEqual(client.put_object.call_count, 4)

    def test_retries_reuse_the_same_key(self):
        client = mock.Mock()
        client.put_object.side_effect = [client_error(), None]
        storage.upload_image(b"x", "image/png", subdir="s", client=client, backoff_seconds=0)
        keys = {c.kwargs["Key"] for c in client.put_object.call_args_list}
        self.assertEqual(len(keys), 1)

    def test_delete_image(self):
        client = mock.Mock()
        storage.delete_image("redesigns/7/a.png", client=client)
        client.delete_object.assert_called_once_with(Bucket="yardcraft-test", Key="redesigns/7/a.png")
