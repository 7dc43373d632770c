"""Resolution of the analysis service endpoint."""
from __future__ import annotations

import structlog

from rover_service.core.exceptions import ConflictError
from rover_service.services.state_store import StateStore

logger = structlog.get_logger(__name__)


class AnalysisEndpointResolver:
    """Returns the analysis URL: a cache-held override when one is set, else the default.

    Overrides are only possible when a cache key is configured.
    """

    def __init__(
        self,
        default_url: str,
        *,
        state_store: StateStore | None = None,
        key: str | None = None,
    ) -> None:
        self._default_url = default_url
        self._store = state_store if key else None
        self._key = key

    @property
    def overridable(self) -> bool:
        return self._store is not None

    async def resolve(self) -> str:
        url, _source = await self.describe()
        return url

    async def describe(self) -> tuple[str, str]:
        """Return ``(url, source)`` where source is ``override`` or ``default``."""
        if self._store is not None and self._key:
            override = await self._store.get(self._key)
            if override:
                return override, "override"
        return self._default_url, "default"

    async def update(self, url: str) -> None:
        store, key = self._require_override()
        await store.set(key, url)
        logger.info("analysis_endpoint_updated", url=url)

    async def reset(self) -> None:
        store, key = self._require_override()
        await store.delete(key)
        logger.info("analysis_endpoint_reset", url=self._default_url)

    def _require_override(self) -> tuple[StateStore, str]:
        if self._store is None or not self._key:
            raise ConflictError("Runtime analysis endpoint override is not enabled")
        return self._store, self._key
