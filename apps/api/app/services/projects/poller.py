from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

import httpx
from loguru import logger

from app.core.config import settings
from app.services.projects.status import TERMINAL, ProjectStatus

StatusFetcher = Callable[[str], Awaitable[Optional[str]]]


def http_status_fetcher(base_url: str, client: Optional[httpx.AsyncClient] = None) -> StatusFetcher:
    """Fetch status through GET /api/v1/projects/{id}/status."""
    http = client or httpx.AsyncClient(base_url=base_url, timeout=10)

    async def _fetch(project_id: str) -> Optional[str]:
        r = await http.get(f"/api/v1/projects/{project_id}/status")
        r.raise_for_status()
        return r.json().get("status")

    return _fetch


def parse_status(raw: Optional[str]) -> Optional[ProjectStatus]:
    """Map a status string to ProjectStatus; unrecognized values read as unknown."""
    if not raw:
        return None
    try:
        return ProjectStatus(raw)
    except ValueError:
        logger.warning("Unrecognized project status {!r}, treating as unknown", raw)
        return None


class StatusPoller:
    """
    Polls a project's status until it reaches COMPLETED or FAILED.

    ``on_terminal`` is called once with the terminal status; non-terminal
    and unknown statuses keep the loop going.
    """

    def __init__(self, fetch_status: StatusFetcher, interval: Optional[float] = None, sleep=asyncio.sleep) -> None:
        self.fetch_status = fetch_status
        self.interval = settings.STATUS_POLL_INTERVAL_SECONDS if interval is None else interval
        self._sleep = sleep

    async def wait(
        self,
        project_id: str,
        on_terminal: Optional[Callable[[ProjectStatus], None]] = None,
        max_polls: Optional[int] = None,
    ) -> Optional[ProjectStatus]:
        polls = 0
        while max_polls is None or polls < max_polls:
            raw = await self.fetch_status(project_id)
            polls += 1
            status = parse_status(raw)
            if status in TERMINAL:
                logger.info("Project {} finished with {}", project_id, status.value)
                if on_terminal is not None:
                    on_terminal(status)
                return status
            logger.debug("Project {} is {}, polling again in {}s", project_id, raw, self.interval)
            await self._sleep(self.interval)
        return None
