"""
services_repository.py
======================
Fetch orchestration for the ``services`` endpoint.

:class:`ServicesRepository` owns one :class:`observable.ObservableValue`
holding the latest :data:`services_models.ServiceResult`.  Each call to
:meth:`ServicesRepository.fetch_services` starts a background request and
returns that same observable; when the request completes the slot is
overwritten with ``Ok(record)`` or ``Err(error)``.

Overlapping fetches are not sequenced.  Whichever request completes last
determines the final value, even if it was issued first.
"""

from __future__ import annotations

import logging
from typing import Optional

from api_call import enqueue_api_call
from observable import ObservableValue
from services_api import ServicesApiClient
from services_models import Err, Ok, ServiceRecord, ServiceResult

logger = logging.getLogger('mvvm.repository')


class ServicesRepository:
    """Runs ``services`` fetches and publishes their results.

    Args:
        client:   Transport used to build each request.
        services: Observable to publish into; created on first use if omitted.
    """

    def __init__(
        self,
        client: ServicesApiClient,
        services: Optional[ObservableValue[ServiceResult]] = None,
    ) -> None:
        self._client   = client
        self._services = services

    @property
    def services(self) -> ObservableValue[ServiceResult]:
        if self._services is None:
            self._services = ObservableValue()
        return self._services

    def fetch_services(self) -> ObservableValue[ServiceResult]:
        """Start a fetch and return the observable it will update."""
        services = self.services
        enqueue_api_call(
            self._client.get_services(),
            on_success=self._on_success,
            on_failure=self._on_failure,
        )
        return services

    def _on_success(self, record: ServiceRecord) -> None:
        logger.info("Fetched services message: %r", record.message)
        self.services.set_value(Ok(record))

    def _on_failure(self, error: BaseException) -> None:
        logger.error("Error fetching services: %s", error)
        self.services.set_value(Err(error))
