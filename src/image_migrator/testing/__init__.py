"""Testing utilities and fakes for the image migrator."""

from .fakes import (
    FakeRecordSource,
    FakeUploadGateway,
    FakeImageFetcher,
    FakeLogger,
    FakeSleep,
    create_test_image,
    to_data_uri,
    setup_test_store,
)

__all__ = [
    "FakeRecordSource",
    "FakeUploadGateway",
    "FakeImageFetcher",
    "FakeLogger",
    "FakeSleep",
    "create_test_image",
    "to_data_uri",
    "setup_test_store",
]
