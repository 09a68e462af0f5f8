import pytest

from civic_reporter.core.config import Settings
from civic_reporter.domain.models import ReportDraft
from civic_reporter.domain.services.auth_service import AuthService
from civic_reporter.domain.services.report_service import ReportService
from civic_reporter.infrastructure.database import build_engine
from civic_reporter.infrastructure.storage import InMemoryKeyValueStore, SqlKeyValueStore
from civic_reporter.main import CivicReporter

ASHA = {
    "full_name": "Asha Rao",
    "mobile_number": "9876543210",
    "password": "secret1",
    "confirm_password": "secret1",
}


@pytest.fixture(scope="function")
def store():
    """Fresh in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture(scope="function")
def sql_store(tmp_path):
    """Durable SQLite store in a per-test temp directory."""
    engine = build_engine(f"sqlite:///{tmp_path / 'kv.db'}", echo=False)
    yield SqlKeyValueStore(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def auth_service(store):
    return AuthService(store)


@pytest.fixture(scope="function")
def report_service(store):
    return ReportService(store)


@pytest.fixture(scope="function")
def session(auth_service):
    """Signed-in session for Asha Rao."""
    return auth_service.register(**ASHA)


@pytest.fixture(scope="function")
def reporter(store):
    return CivicReporter(store, Settings())


@pytest.fixture(scope="function")
def signed_in_reporter(reporter):
    reporter.register(**ASHA)
    return reporter


@pytest.fixture
def manual_draft():
    """The MG Road pothole draft used across report tests."""
    return ReportDraft(
        image_ref="img1",
        location_mode="manual",
        manual_location_text="MG Road",
        description="Pothole",
        category="road",
        priority="high",
    )


@pytest.fixture
def auto_draft():
    return ReportDraft(
        image_ref="file:///photos/streetlight.jpg",
        location_mode="auto",
        coordinates={"latitude": 12.9716, "longitude": 77.5946},
        description="Streetlight out for a week",
        category="electricity",
    )
