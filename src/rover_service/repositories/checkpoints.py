"""Checkpoint persistence in the state store."""
from __future__ import annotations

from pydantic import ValidationError

from rover_service.core.exceptions import CheckpointDecodeError
from rover_service.domain.dto import CheckpointDTO
from rover_service.domain.models import OperationCheckpoint
from rover_service.services.state_store import StateStore


def checkpoint_key(rover_id: int) -> str:
    return str(rover_id)


class CheckpointRepository:
    """Stores one JSON checkpoint per rover, overwritten on every write."""

    def __init__(self, store: StateStore, *, ttl_seconds: int | None = None):
        self._store = store
        self._ttl = ttl_seconds or None

    async def save(self, rover_id: int, checkpoint: OperationCheckpoint) -> None:
        payload = CheckpointDTO.from_checkpoint(checkpoint).model_dump_json(by_alias=True)
        await self._store.set(checkpoint_key(rover_id), payload, ttl=self._ttl)

    async def get(self, rover_id: int) -> OperationCheckpoint | None:
        raw = await self._store.get(checkpoint_key(rover_id))
        if raw is None:
            return None
        try:
            return CheckpointDTO.model_validate_json(raw).to_checkpoint()
        except ValidationError as exc:
            raise CheckpointDecodeError(f"Stored operation state is malformed: {exc}") from exc
