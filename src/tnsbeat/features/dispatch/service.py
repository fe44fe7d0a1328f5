from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Protocol

import requests

from tnsbeat.core.logging import get_logger


class BeaconSink(Protocol):
    """Anything that can take a finished beacon URL."""

    def dispatch(self, url: str) -> None: ...


class HttpBeaconDispatcher:
    """
    Fire-and-forget GET of beacon URLs.

    Requests run on a small worker pool so the caller (the timer tick) never
    waits on the network. Failures are logged and dropped; there is no retry
    and no callback into the scheduler.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 5.0,
        max_workers: int = 2,
        session: Any | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.timeout_s = float(timeout_s)
        self._session = session if session is not None else requests.Session()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="tns-beacon"
        )
        self._logger = get_logger(__name__)
        self._closed = False

    def dispatch(self, url: str) -> None:
        if self._closed:
            raise RuntimeError("HttpBeaconDispatcher is closed.")
        self._executor.submit(self._send, url)

    def _send(self, url: str) -> None:
        try:
            response = self._session.get(url, timeout=self.timeout_s)
        except requests.RequestException as e:
            self._logger.warning(
                "beacon_failed", extra={"feature": "dispatch", "url": url, "reason": str(e)}
            )
            return

        if not response.ok:
            self._logger.debug(
                "beacon_rejected",
                extra={"feature": "dispatch", "url": url, "reason": f"HTTP {response.status_code}"},
            )

    def close(self) -> None:
        # let queued beacons go out, then release the pool and connections
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        self._session.close()


class DryRunDispatcher:
    """Logs and keeps beacon URLs instead of sending them."""

    def __init__(self) -> None:
        self.urls: list[str] = []
        self._logger = get_logger(__name__)

    def dispatch(self, url: str) -> None:
        self.urls.append(url)
        self._logger.info("beacon_dry_run", extra={"feature": "dispatch", "url": url})

    def close(self) -> None:
        return None
