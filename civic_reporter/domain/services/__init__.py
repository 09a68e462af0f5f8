"""
Core services: authentication, report storage, validation, location.

Usage:
    from civic_reporter.domain.services import AuthService, ReportService

    auth = AuthService(store)
    session = auth.login("9876543210", "secret1")
    ReportService(store).submit(draft, session)
"""
from .auth_service import AuthService
from .location_service import LocationService
from .report_service import ReportService

__all__ = ["AuthService", "LocationService", "ReportService"]
