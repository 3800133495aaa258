"""Waiting for a requested download to complete.

Providers do not notify when a download finishes, so the waiter polls the
status of the local path at a fixed interval. By default it waits forever;
a timeout and a cancel event bound the wait when configured.
"""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from ..config import DEFAULT_POLL_INTERVAL
from ..exceptions import (
    MaterializationCancelledError,
    MaterializationTimeoutError,
    ProviderError,
)
from ..output import OutputFormatter
from ..provider import StatusProvider

logger = logging.getLogger(__name__)


class MaterializationWaiter:
    """Polls a status provider until a file is downloaded."""

    def __init__(
        self,
        provider: StatusProvider,
        output: OutputFormatter,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the waiter.

        Args:
            provider: Provider queried on every poll
            output: Output formatter for status lines
            poll_interval: Seconds between two queries
            timeout: Seconds before giving up, None to wait forever
            cancel_event: Event that aborts the wait when set
            sleep: Sleep function, used when no cancel event is given
            clock: Monotonic clock used for the timeout
        """
        self.provider = provider
        self.output = output
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.cancel_event = cancel_event
        self._sleep = sleep
        self._clock = clock

    def wait(self, local_path: Path) -> int:
        """Block until ``local_path`` is reported as current.

        Query failures are logged and polling continues; the file usually
        does not exist under its local name until the download starts.

        Args:
            local_path: Path the downloaded file will have

        Returns:
            Number of status queries made

        Raises:
            MaterializationTimeoutError: If the timeout expired
            MaterializationCancelledError: If the cancel event was set
        """
        deadline = None if self.timeout is None else self._clock() + self.timeout
        polls = 0

        while True:
            polls += 1
            # Build a new path each time, a provider may cache per object
            fresh_path = Path(os.fspath(local_path))
            try:
                status = self.provider.query(fresh_path)
            except (ProviderError, OSError) as e:
                self.output.error(
                    f"- could not request download status for file: "
                    f"{fresh_path} error: {e}"
                )
            else:
                logger.debug(
                    f"Poll {polls} of {fresh_path}: {status.download_state.value}"
                )
                if status.is_current:
                    self.output.info(f"- download complete: {fresh_path}")
                    return polls

            if deadline is not None and self._clock() >= deadline:
                raise MaterializationTimeoutError(
                    f"Download did not complete within {self.timeout:g}s",
                    local_path,
                )
            self._pause(local_path)

    def _pause(self, local_path: Path) -> None:
        if self.cancel_event is None:
            self._sleep(self.poll_interval)
        elif self.cancel_event.wait(self.poll_interval):
            raise MaterializationCancelledError(
                "Waiting for download was cancelled", local_path
            )
