import logging
from typing import Optional

from .core.config import Settings, settings as default_settings
from .domain.models import Report, ReportDraft, Session, LocationMode
from .domain.services.auth_service import AuthService
from .domain.services.interfaces import IImageProvider, IKeyValueStore, ILocationProvider
from .domain.services.location_service import LocationService
from .domain.services.report_service import ReportService
from .domain.services.validation_service import build_report_draft
from .infrastructure.database import build_engine
from .infrastructure.storage import SqlKeyValueStore

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or default_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class CivicReporter:
    """
    Owns the store and both services for one device profile.

    The current session is looked up from AuthService and handed to
    ReportService explicitly on every submission.
    """

    def __init__(self, store: IKeyValueStore, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.store = store
        self.auth = AuthService(store)
        self.reports = ReportService(
            store, require_session=self.settings.REQUIRE_SESSION_FOR_REPORTS
        )

    # Session ----------------------------------------------------------------

    def register(self, full_name: str, mobile_number: str, password: str, confirm_password: str) -> Session:
        return self.auth.register(full_name, mobile_number, password, confirm_password)

    def login(self, mobile_number: str, password: str) -> Session:
        return self.auth.login(mobile_number, password)

    def logout(self) -> None:
        self.auth.logout()

    def current_session(self) -> Optional[Session]:
        return self.auth.current_session()

    # Reports ----------------------------------------------------------------

    def new_draft(
        self,
        image_provider: Optional[IImageProvider] = None,
        location_provider: Optional[ILocationProvider] = None,
        **fields,
    ) -> ReportDraft:
        """
        Start a draft, pulling the photo and auto location from collaborators.

        A cancelled capture leaves image_ref empty; an unavailable location
        leaves coordinates empty so the caller can switch to manual entry.
        Malformed field values raise ValidationError naming the form field.
        """
        draft = build_report_draft(**fields)
        updates = {}
        if image_provider is not None and draft.image_ref is None:
            updates["image_ref"] = image_provider.capture()
        if (
            location_provider is not None
            and draft.location_mode == LocationMode.AUTO.value
            and draft.coordinates is None
        ):
            updates["coordinates"] = LocationService(location_provider).resolve()
        return draft.model_copy(update=updates) if updates else draft

    def submit_report(self, draft: ReportDraft) -> Report:
        return self.reports.submit(draft, self.auth.current_session())

    def list_reports(self) -> list[Report]:
        return self.reports.list()

    def delete_report(self, report_id: str) -> None:
        self.reports.delete(report_id)

    def close(self) -> None:
        """Release the database engine behind a SQL-backed store."""
        if isinstance(self.store, SqlKeyValueStore):
            self.store.engine.dispose()
            logger.debug("Disposed database engine")


def create_reporter(
    settings: Optional[Settings] = None,
    store: Optional[IKeyValueStore] = None,
) -> CivicReporter:
    """Build a reporter backed by DATABASE_URL unless a store is given."""
    settings = settings or default_settings
    if store is None:
        engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        store = SqlKeyValueStore(engine)
    logger.info(f"Starting {settings.PROJECT_NAME}")
    return CivicReporter(store, settings)
