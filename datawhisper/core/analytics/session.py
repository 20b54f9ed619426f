"""Single-dataset profiling session.

Holds the current PipelineOutput for a presentation layer. Every upload
gets a ticket; only the newest ticket may install its result, so a slow
upload that finishes late cannot overwrite a fresher one.
"""

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Optional

from .exceptions import MalformedInputError, ParseError
from .parser import Content
from .pipeline import ProfilingPipeline
from .types import PipelineOutput

logger = logging.getLogger(__name__)


class ProfilingSession:
    """Owns the current profiling result and discards stale ones."""

    def __init__(self, pipeline: Optional[ProfilingPipeline] = None):
        self._pipeline = pipeline or ProfilingPipeline()
        self._lock = threading.Lock()
        self._latest_ticket = 0
        self._settled_ticket = 0
        self._current: Optional[PipelineOutput] = None
        self._last_error: Optional[ParseError] = None

    @property
    def current(self) -> Optional[PipelineOutput]:
        """Result of the most recent successful upload."""
        with self._lock:
            return self._current

    @property
    def last_error(self) -> Optional[ParseError]:
        """Error of the most recent upload, if it failed."""
        with self._lock:
            return self._last_error

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._settled_ticket < self._latest_ticket

    def begin_upload(self) -> int:
        """Start an upload and return its ticket. Older tickets become stale."""
        with self._lock:
            self._latest_ticket += 1
            ticket = self._latest_ticket
        logger.debug(f"Upload ticket {ticket} started")
        return ticket

    def complete(self, ticket: int, output: PipelineOutput) -> bool:
        """Install ``output`` if ``ticket`` is still the newest upload.

        Returns:
            True if installed, False if the result was stale and discarded
        """
        with self._lock:
            if ticket != self._latest_ticket:
                stale = True
            else:
                stale = False
                self._current = output
                self._last_error = None
                self._settled_ticket = ticket

        if stale:
            logger.info(f"Discarding stale result for ticket {ticket} ({output.parsed.file_name})")
            return False

        logger.info(f"Session updated with {output.parsed.file_name} (ticket {ticket})")
        return True

    def fail(self, ticket: int, error: ParseError) -> bool:
        """Record ``error`` if ``ticket`` is still the newest upload.

        The current result is left in place.
        """
        with self._lock:
            if ticket != self._latest_ticket:
                stale = True
            else:
                stale = False
                self._last_error = error
                self._settled_ticket = ticket

        if stale:
            logger.info(f"Discarding stale error for ticket {ticket}: {error.message}")
            return False

        logger.warning(f"Upload failed (ticket {ticket}): {error.message}")
        return True

    def upload(self, file_name: str, content: Content) -> Optional[PipelineOutput]:
        """Profile a file and make it the current result.

        Returns:
            The new PipelineOutput, or None if parsing failed or a newer
            upload superseded this one
        """
        ticket = self.begin_upload()
        return self._run(ticket, file_name, content)

    async def upload_async(
        self,
        file_name: str,
        read: Callable[[], Awaitable[Content]],
    ) -> Optional[PipelineOutput]:
        """Read file content asynchronously, then profile it.

        Reading is the only suspension point. If another upload starts while
        this one is reading, this result is discarded when it arrives.

        Args:
            file_name: Original file name
            read: Coroutine function returning the file content
        """
        ticket = self.begin_upload()
        try:
            content = await read()
        except (OSError, ValueError) as e:
            error = MalformedInputError(f"Error reading file: {e}", cause=e)
            self.fail(ticket, error)
            return None
        except (Exception, asyncio.CancelledError) as e:
            # Cancellation and unexpected errors still settle the ticket
            self.fail(ticket, MalformedInputError(f"Error reading file: {e!r}", cause=e))
            raise

        return self._run(ticket, file_name, content)

    def reset(self) -> None:
        """Forget the current result and invalidate in-flight uploads."""
        with self._lock:
            self._latest_ticket += 1
            self._settled_ticket = self._latest_ticket
            self._current = None
            self._last_error = None
        logger.debug("Session reset")

    def _run(self, ticket: int, file_name: str, content: Content) -> Optional[PipelineOutput]:
        try:
            output = self._pipeline.run(file_name, content)
        except ParseError as e:
            self.fail(ticket, e)
            return None
        except Exception as e:
            error = MalformedInputError(f"Unexpected error profiling {file_name}: {e}", cause=e)
            self.fail(ticket, error)
            raise

        if not self.complete(ticket, output):
            return None
        return output
