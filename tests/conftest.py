import pytest
from aioresponses import aioresponses

from coinbase_client.core.models import Credentials
from coinbase_client.utils.logger import ClientLogger

API_URL = "https://api.test.local"

# Known-good secret; signatures in the tests were produced with it.
SECRET = "tGJSu7SuV3/HOR1/9DcFwO1s560BKI51SDEbnwuvTPbw4BbG5lYJLuKUFpD8TPU61R85dxJpGTygKZ5v+6wJdA=="
FIXED_TIMESTAMP = "1622764800"


@pytest.fixture
def credentials():
    return Credentials(api_key="test-key", secret=SECRET, passphrase="test-passphrase")


@pytest.fixture
def logger():
    return ClientLogger("coinbase-client-test")


@pytest.fixture
def http_mocks():
    with aioresponses() as mocked:
        yield mocked


def sent_requests(mocked, method):
    """Flatten aioresponses' call log into ``(url, kwargs)`` pairs for one method."""
    calls = []
    for (verb, url), entries in mocked.requests.items():
        if verb != method:
            continue
        for entry in entries:
            calls.append((str(url), entry.kwargs))
    return calls
