# formarchive/dependencies.py
from formarchive.infra.s3_client import S3ClientFactory, make_s3_client


def get_s3_client_factory() -> S3ClientFactory:
    """FastAPI dependency; tests override it with an in-memory client."""
    return make_s3_client
