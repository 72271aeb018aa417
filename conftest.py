import pytest

from replicate_client import ReplicateClient
from tests.helpers import TEST_API_TOKEN, TEST_BASE_URL, FakeFetch


@pytest.fixture()
def fetch():
    yield FakeFetch()


@pytest.fixture()
def client(fetch):
    test_client = ReplicateClient(
        api_token=TEST_API_TOKEN, base_url=TEST_BASE_URL, fetch=fetch
    )
    # Retries are exercised without waiting.
    test_client.connection.retry_interval = 0
    test_client.connection.retry_jitter = 0
    yield test_client
