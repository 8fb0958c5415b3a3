"""Preview job outbox and its dispatcher.

Mutations never talk to the previewer directly. They append a ``PreviewJob``
to the outbox; ``PreviewDispatcher.dispatch_pending`` runs later (as a FastAPI
background task) and POSTs each job to ``{previewer_url}/create-preview/{id}``.
Delivery problems are logged and the job is dropped.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewJob:
    scene_id: str
    reason: str
    requested_at: float = field(default_factory=time.time)


class PreviewOutbox:
    def __init__(self) -> None:
        self._jobs: deque[PreviewJob] = deque()
        self._lock = threading.Lock()

    def enqueue(self, job: PreviewJob) -> None:
        with self._lock:
            self._jobs.append(job)
        logger.debug("Queued preview job for scene %s (%s)", job.scene_id, job.reason)

    def drain(self) -> list[PreviewJob]:
        with self._lock:
            jobs = list(self._jobs)
            self._jobs.clear()
        return jobs

    @property
    def pending(self) -> list[PreviewJob]:
        with self._lock:
            return list(self._jobs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


class PreviewDispatcher:
    def __init__(
        self,
        outbox: PreviewOutbox,
        previewer_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.outbox = outbox
        self.previewer_url = previewer_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def dispatch_pending(self) -> int:
        """Send every queued job once. Returns how many the previewer accepted."""
        jobs = self.outbox.drain()
        if not jobs:
            return 0

        if not self.previewer_url:
            logger.info("Previewer not configured; dropping %d preview job(s)", len(jobs))
            return 0

        accepted = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for job in jobs:
                url = f"{self.previewer_url}/create-preview/{job.scene_id}"
                try:
                    response = await client.post(url)
                except httpx.HTTPError as e:
                    logger.error("Preview request for scene %s failed: %s", job.scene_id, e)
                    continue

                # 200 only means the job was received, not that rendering worked
                if response.status_code != 200:
                    logger.error(
                        "Previewer returned %d for scene %s", response.status_code, job.scene_id
                    )
                    continue
                accepted += 1
        return accepted
