"""Container snapshot loader backed by the container HTTP endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..errors import DataFetchError
from ..models.domain import Container
from ..schemas.containers import ContainerRecord

logger = logging.getLogger(__name__)


def parse_container_records(payload: Any) -> tuple[Container, ...]:
    """Convert the endpoint payload into containers.

    A payload that is not a JSON array is a fetch error; individual records
    that fail validation are skipped.
    """

    if not isinstance(payload, list):
        raise DataFetchError(
            f"Container source returned {type(payload).__name__}, expected a JSON array."
        )

    containers: list[Container] = []
    for position, item in enumerate(payload):
        try:
            containers.append(ContainerRecord.model_validate(item).to_domain())
        except ValidationError as exc:
            logger.warning(f"Skipping invalid container record at index {position}: {exc.error_count()} error(s)")
            continue
    return tuple(containers)


class ContainerRepository:
    """Fetches container snapshots and remembers the last good one."""

    def __init__(
        self,
        source_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.source_url = source_url or settings.container_source_url
        self.timeout = timeout if timeout is not None else settings.container_fetch_timeout_seconds
        self.transport = transport
        self.last_snapshot: Optional[tuple[Container, ...]] = None
        self.fetched_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    async def fetch(self) -> tuple[Container, ...]:
        """Download a fresh snapshot; on failure the previous snapshot is kept."""

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.source_url)
                response.raise_for_status()
                payload = response.json()
            containers = parse_container_records(payload)
        except httpx.TimeoutException as exc:
            self.last_error = f"Container source timed out after {self.timeout:.0f}s."
            raise DataFetchError(self.last_error) from exc
        except httpx.HTTPStatusError as exc:
            self.last_error = f"Container source returned HTTP {exc.response.status_code}."
            raise DataFetchError(self.last_error) from exc
        except httpx.HTTPError as exc:
            self.last_error = f"Failed to reach container source: {exc}"
            raise DataFetchError(self.last_error) from exc
        except ValueError as exc:
            self.last_error = "Container source returned invalid JSON."
            raise DataFetchError(self.last_error) from exc
        except DataFetchError as exc:
            self.last_error = str(exc)
            raise

        self.last_snapshot = containers
        self.fetched_at = datetime.now(timezone.utc)
        self.last_error = None
        logger.info(f"Fetched {len(containers)} containers from {self.source_url}")
        return containers

    async def snapshot(self) -> tuple[tuple[Container, ...], bool]:
        """Return ``(containers, stale)``, serving the last good snapshot when a refresh fails."""

        try:
            return await self.fetch(), False
        except DataFetchError as exc:
            if self.last_snapshot is None:
                raise
            logger.warning(f"Serving stale container snapshot: {exc}")
            return self.last_snapshot, True
