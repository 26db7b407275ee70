import pytest

from inkan_core.service import KeyService
from inkan_core.storage import InMemoryStorage, JSONFileStorage


@pytest.fixture
def memory_service():
    svc = KeyService(InMemoryStorage(), workers=2)
    yield svc
    svc.close()


@pytest.fixture
def json_service(tmp_path):
    svc = KeyService(JSONFileStorage(str(tmp_path / "keys.json")), workers=2)
    yield svc
    svc.close()
