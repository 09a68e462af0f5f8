"""
Report Store
Creates, lists and deletes civic issue reports kept as one collection
"""
import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import NotAuthenticatedError, StorageError
from ..models import (
    Report,
    ReportDraft,
    Session,
    ANONYMOUS_REPORTER,
    encode_reports,
    decode_reports,
    utcnow,
)
from ...utils.ids import generate_report_id
from ...utils.locks import store_lock
from .interfaces import IKeyValueStore
from .validation_service import validate_report_draft

logger = logging.getLogger(__name__)

REPORTS_KEY = "civic_reports"


class ReportService:
    """
    Service for the civic report collection.

    The whole collection lives under a single key, newest report first.
    Every mutation re-reads it, changes it, and writes it back while holding
    the lock for REPORTS_KEY on this store, shared by every service
    over the same store. Reads never cache, so callers always see what is
    persisted.
    """

    def __init__(self, store: IKeyValueStore, require_session: bool = True):
        self.store = store
        self.require_session = require_session
        self._lock = store_lock(store, REPORTS_KEY)

    def submit(self, draft: ReportDraft, session: Optional[Session]) -> Report:
        """
        Validate a draft and store it as a new report.

        Args:
            draft: Form input from the report screen
            session: Current session; its account is stamped on the report

        Returns:
            The created Report (also first in list())

        Raises:
            NotAuthenticatedError: No session while sessions are required
            ValidationError: Naming the first missing/invalid field
            StorageError: If the collection cannot be read or written
        """
        if session is None and self.require_session:
            raise NotAuthenticatedError()

        fields = validate_report_draft(draft)
        account = session.account if session is not None else None

        with self._lock:
            reports = self._load()
            report = Report(
                id=generate_report_id(),
                created_at=utcnow(),
                reported_by_name=account.full_name if account else ANONYMOUS_REPORTER,
                reported_by_mobile=account.mobile_number if account else None,
                **fields,
            )
            reports.insert(0, report)
            self._save(reports)

        logger.info(f"Submitted report {report.id} ({report.category.value}, {report.priority.value})")
        return report

    def list(self) -> List[Report]:
        """All reports, newest first. Empty if nothing was ever submitted."""
        return self._load()

    def get(self, report_id: str) -> Optional[Report]:
        for report in self._load():
            if report.id == report_id:
                return report
        return None

    def count(self) -> int:
        return len(self._load())

    def delete(self, report_id: str) -> None:
        """Remove a report by id. Unknown ids are ignored."""
        with self._lock:
            reports = self._load()
            remaining = [r for r in reports if r.id != report_id]
            if len(remaining) == len(reports):
                logger.debug(f"Report {report_id} not found, nothing to delete")
                return
            self._save(remaining)

        logger.info(f"Deleted report {report_id}")

    def _load(self) -> List[Report]:
        raw = self.store.get(REPORTS_KEY)
        if raw is None:
            return []
        try:
            return decode_reports(raw)
        except PydanticValidationError as e:
            logger.error(f"Stored report collection is unreadable: {e}")
            raise StorageError("decode", "corrupt report collection")

    def _save(self, reports: List[Report]) -> None:
        self.store.set(REPORTS_KEY, encode_reports(reports))
