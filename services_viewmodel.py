"""View-facing access to the services repository."""

from __future__ import annotations

from observable import ObservableValue
from services_models import ServiceResult
from services_repository import ServicesRepository


class ServicesViewModel:
    """Exposes the services observable to a presentation layer."""

    def __init__(self, repository: ServicesRepository) -> None:
        self._repository = repository

    @property
    def services(self) -> ObservableValue[ServiceResult]:
        """The observable, without triggering a fetch."""
        return self._repository.services

    def get_services(self) -> ObservableValue[ServiceResult]:
        """Trigger a fetch and return the observable it will update."""
        return self._repository.fetch_services()
