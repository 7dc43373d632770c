"""HTTP client for the external image analysis service."""
from __future__ import annotations

import asyncio
from typing import Any

import httpx
from pydantic import ValidationError

from rover_service.core.exceptions import (
    AnalysisRejectedError,
    AnalysisResponseError,
    AnalysisTransportError,
)
from rover_service.domain.dto import AnalysisRequestDTO, AnalysisResponseDTO
from rover_service.domain.models import AnalysisResult


class AnalysisServiceClient:
    """Sends one POST per image, with no retries.

    ``max_concurrency`` bounds both the connection pool and the number of
    requests in flight; callers beyond the bound wait for a slot.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        max_concurrency: int = 16,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s),
            limits=httpx.Limits(max_connections=max_concurrency),
            transport=transport,
        )
        self._timeout_s = timeout_s
        self._slots = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> AnalysisServiceClient:
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def analyze(self, image: str, *, url: str) -> AnalysisResult:
        """Send ``image`` to ``url`` and parse the coordinate list.

        Raises:
            AnalysisTransportError: the request did not complete within ``timeout_s``
                or ``url`` is not a usable URL.
            AnalysisRejectedError: the service answered with a non-2xx status.
            AnalysisResponseError: a 2xx body did not match the expected shape.
        """
        payload = AnalysisRequestDTO(image=image).model_dump()
        async with self._slots:
            try:
                response = await asyncio.wait_for(
                    self._client.post(url, json=payload), timeout=self._timeout_s
                )
            except asyncio.TimeoutError as exc:
                raise AnalysisTransportError(
                    f"Request error: no response within {self._timeout_s}s"
                ) from exc
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise AnalysisTransportError(f"Request error: {exc}") from exc

        if not response.is_success:
            raise AnalysisRejectedError(response.status_code, response.text)

        try:
            body = AnalysisResponseDTO.model_validate_json(response.content)
        except ValidationError as exc:
            raise AnalysisResponseError(f"JSON parse error: {exc}") from exc
        return body.to_result()
