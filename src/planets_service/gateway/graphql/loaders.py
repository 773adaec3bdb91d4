"""GraphQL DataLoader utilities for the gateway.

Key Responsibilities:
    - Coalesce the ``details`` lookups issued while resolving one operation
      into a single batched gateway call
    - Isolate failures per key: a planet without details fails only its own
      ``details`` field

Collaborators:
    - Upstream: ``Planet.details`` resolver
    - Downstream: :class:`~planets_service.services.planets.PlanetService`

Thread Safety:
    - Loaders are scoped per request and are not thread-safe

Performance Characteristics:
    - Every ``load`` issued before the event loop runs the scheduled dispatch
      lands in one batch; duplicate ids are fetched once
    - Values are never memoised beyond the batch that produced them
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from opentelemetry import trace
from strawberry.dataloader import DataLoader

from ...models import Details
from ...observability.metrics import DETAILS_BATCH_SIZE, DETAILS_BATCHES_TOTAL
from ...services.planets import PlanetService
from ...utils.errors import DetailsNotFound

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

# ==============================================================================
# LOADER DEFINITIONS
# ==============================================================================


class GraphQLLoaders:
    """Collection of request-scoped loaders shared via GraphQL context.

    Attributes:
        service: Planet service fulfilling batched lookups.
        details_loader: Loader resolving planet ids to :data:`Details`.
        batches_dispatched: Number of batch calls issued by this instance.
    """

    def __init__(self, service: PlanetService, *, max_batch_size: int | None = None) -> None:
        self.service = service
        self.batches_dispatched = 0
        self.details_loader: DataLoader[int, Details] = DataLoader(
            self._load_details,
            cache=False,
            max_batch_size=max_batch_size,
        )

    async def _load_details(self, planet_ids: Sequence[int]) -> list[Details | BaseException]:
        """Resolve one batch of planet ids.

        Args:
            planet_ids: Keys in request order, possibly repeated.

        Returns:
            One entry per key, either the details or a :class:`DetailsNotFound`.
        """
        unique_ids = set(planet_ids)
        self.batches_dispatched += 1
        DETAILS_BATCH_SIZE.observe(len(unique_ids))
        with tracer.start_as_current_span("details.batch") as span:
            span.set_attribute("details.batch.keys", len(planet_ids))
            span.set_attribute("details.batch.unique_keys", len(unique_ids))
            try:
                found = await self.service.batch_details(unique_ids)
            except Exception:
                DETAILS_BATCHES_TOTAL.labels("error").inc()
                raise
        DETAILS_BATCHES_TOTAL.labels("ok").inc()
        missing = unique_ids.difference(found)
        logger.debug(
            "details.batch.dispatched",
            keys=len(planet_ids),
            unique_keys=len(unique_ids),
            missing=sorted(missing),
        )
        return [
            found[planet_id] if planet_id in found else DetailsNotFound(planet_id)
            for planet_id in planet_ids
        ]
