"""Builders and fakes shared across test modules."""

import hashlib
import io

from botocore.exceptions import ClientError

from ghostboard.models import GhostUploadForm, LapSubmission


class FakeS3Client:
    """Minimal in-memory stand-in for a boto3 S3 client."""

    def __init__(self):
        self.objects = {}
        self.put_calls = 0

    def put_object(self, Bucket, Key, Body, **kwargs):
        self.put_calls += 1
        self.objects[(Bucket, Key)] = bytes(Body)
        return {"ETag": '"fake"'}

    def get_object(self, Bucket, Key):
        try:
            data = self.objects[(Bucket, Key)]
        except KeyError:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
            )
        return {"Body": io.BytesIO(data), "ContentLength": len(data)}


def sha(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def lap_payload(**overrides) -> dict:
    payload = {
        "driver__steamID64": "A",
        "name": "Alice",
        "car": 1,
        "track": 2,
        "layout": 0,
        "condition": 0,
        "weather": 0,
        "timing": 90.5,
        "ghostLength": 100,
    }
    payload.update(overrides)
    return payload


def lap(**overrides) -> LapSubmission:
    return LapSubmission.parse(lap_payload(**overrides))


def ghost_fields(data: bytes, **overrides) -> dict:
    fields = {
        "driver__steamID64": "A",
        "name": "Alice",
        "car": "1",
        "track": "2",
        "layout": "0",
        "condition": "0",
        "weather": "0",
        "timing": "89.0",
        "ghostLength": "120",
        "sha256": sha(data),
        "size": "999999",
    }
    fields.update(overrides)
    return fields


def ghost_form(data: bytes, **overrides) -> GhostUploadForm:
    return GhostUploadForm.from_fields(ghost_fields(data, **overrides))
