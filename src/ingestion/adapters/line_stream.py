"""
Lazy line reader over an open export response.

EventLineStream owns three resources for one export call: the line cursor,
the streamed httpx response and the httpx client that produced it. It is the
only owner of all three; whoever obtains a stream must close it, normally
with a `with` block.
"""

import logging
from collections.abc import Iterator

import httpx

from src.ingestion.errors import StreamExhaustedError

logger = logging.getLogger(__name__)

_NOT_READ = object()


class EventLineStream:
    """
    Forward-only, single-pass sequence of export lines.

    Supports the explicit has_next()/next() protocol as well as plain
    iteration. Lines are pulled from the response only when asked for.

    Example:
        with adapter.open_event_stream(params) as stream:
            for line in stream:
                handle(line)
    """

    def __init__(self, client: httpx.Client, response: httpx.Response):
        """
        Wrap an open streamed response.

        Args:
            client: Client the response was sent with; closed last
            response: Response opened with stream=True and a success status
        """
        self._client = client
        self._response = response
        self._lines: Iterator[str] | None = response.iter_lines()
        self._pending = _NOT_READ
        self._closed = False
        self.lines_read = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def has_next(self) -> bool:
        """Return True if another line is available. Reads ahead by one line."""
        if self._pending is not _NOT_READ:
            return True
        if self._closed or self._lines is None:
            return False
        try:
            self._pending = next(self._lines)
        except StopIteration:
            self._lines = None
            return False
        return True

    def next(self) -> str:
        """
        Return the next line.

        Raises:
            StreamExhaustedError: If no line is left
        """
        if not self.has_next():
            raise StreamExhaustedError("No more lines in event stream")
        line = self._pending
        self._pending = _NOT_READ
        self.lines_read += 1
        return line

    def __iter__(self) -> "EventLineStream":
        return self

    def __next__(self) -> str:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def close(self) -> None:
        """
        Release the line cursor, the response and the client, in that order.

        Safe to call more than once. A failure releasing one resource is
        logged and does not stop the others from being released.
        """
        if self._closed:
            return
        self._closed = True
        self._pending = _NOT_READ

        lines, self._lines = self._lines, None
        releases = (
            ("line cursor", getattr(lines, "close", None)),
            ("response", self._response.close),
            ("client", self._client.close),
        )
        for name, release in releases:
            if release is None:
                continue
            try:
                release()
            except Exception as e:
                logger.warning(f"Failed to release {name} of event stream: {e}")

        logger.debug(f"Event stream closed after {self.lines_read} lines")

    def __enter__(self) -> "EventLineStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
