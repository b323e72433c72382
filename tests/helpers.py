"""Test doubles shared across modules."""
from botocore.exceptions import ClientError

from moltly.config import S3Settings


class StubS3:
    """Just enough of a boto3 S3 client for the attachment store."""

    def __init__(self, fail=False):
        self.objects = {}
        self.deleted = []
        self.fail = fail

    def put_object(self, Bucket, Key, Body, **extra):
        if self.fail:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        self.objects[(Bucket, Key)] = (Body, extra.get("ContentType"))

    def delete_object(self, Bucket, Key):
        self.deleted.append((Bucket, Key))


def s3_settings(**overrides) -> S3Settings:
    values = dict(
        bucket="moltly",
        region="us-east-1",
        access_key="key",
        secret_key="secret",
        endpoint="http://minio:9000",
        public_url="https://cdn.example.com",
    )
    values.update(overrides)
    return S3Settings(**values)
