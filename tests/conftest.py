import io
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

ENV_VARS = (
    "S3_BUCKET_NAME",
    "AWS_REGION",
    "ASSURE_AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "ASSURE_AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "ASSURE_AWS_SECRET_ACCESS_KEY",
    "S3_ENDPOINT",
    "SUBMISSIONS_PASSWORD",
    "LOG_LEVEL",
)

PASSWORD = "hunter2"


class FakeS3:
    """In-memory stand-in for the boto3 S3 client (put/list/get only)."""

    def __init__(self):
        self.objects = {}  # key -> (body bytes, LastModified)
        self.calls = []
        self.put_error = None
        self.list_error = None
        self.get_errors = {}  # key -> exception
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def add(self, key, body, last_modified=None):
        if isinstance(body, str):
            body = body.encode("utf-8")
        if last_modified is None:
            self._clock += timedelta(minutes=1)
            last_modified = self._clock
        self.objects[key] = (body, last_modified)

    def put_object(self, **kwargs):
        self.calls.append(("put_object", kwargs))
        if self.put_error:
            raise self.put_error
        self.add(kwargs["Key"], kwargs["Body"])
        return {"ETag": '"etag"'}

    def list_objects_v2(self, **kwargs):
        self.calls.append(("list_objects_v2", kwargs))
        if self.list_error:
            raise self.list_error
        prefix = kwargs.get("Prefix", "")
        contents = [
            {"Key": key, "LastModified": last_modified, "Size": len(body)}
            for key, (body, last_modified) in self.objects.items()
            if key.startswith(prefix)
        ][: kwargs.get("MaxKeys", 1000)]
        resp = {"KeyCount": len(contents)}
        if contents:
            resp["Contents"] = contents
        return resp

    def get_object(self, **kwargs):
        self.calls.append(("get_object", kwargs))
        key = kwargs["Key"]
        if key in self.get_errors:
            raise self.get_errors[key]
        body, _ = self.objects[key]
        return {"Body": io.BytesIO(body), "ContentType": "application/json"}

    def called(self, op):
        return [kw for name, kw in self.calls if name == op]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # geen echte AWS config of .env in tests
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def s3_env(monkeypatch):
    monkeypatch.setenv("S3_BUCKET_NAME", "forms-archive")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIATEST")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setenv("AWS_REGION", "ap-southeast-2")


@pytest.fixture
def password_env(monkeypatch):
    monkeypatch.setenv("SUBMISSIONS_PASSWORD", PASSWORD)
    return PASSWORD


@pytest.fixture
def fake_s3():
    return FakeS3()


@pytest.fixture
def factory(fake_s3):
    """Client factory returning ``fake_s3``; remembers the configs it was given."""

    def _factory(config):
        _factory.configs.append(config)
        return fake_s3

    _factory.configs = []
    return _factory


@pytest.fixture
def client(factory):
    from formarchive.dependencies import get_s3_client_factory
    from formarchive.main import app

    app.dependency_overrides[get_s3_client_factory] = lambda: factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 7, 9, 15, 0, tzinfo=timezone.utc)
