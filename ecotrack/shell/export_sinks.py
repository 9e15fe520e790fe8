"""Export Sinks - Delivering formatted reports outside the process.

Exports run as asyncio tasks so the caller is never blocked. A request can be
cancelled, and its outcome is reported as an ExportResult. Tracker state is
never touched here: sinks only receive already-formatted text.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Protocol

from ..core.errors import ExportError
from ..core.models import ExportResult


logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Export cancelled"


class ExportSink(Protocol):
    """Destination for a formatted report."""

    name: str
    success_message: str
    failure_message: str

    async def deliver(self, filename: str, content: str) -> None:
        """Deliver the content or raise ExportError."""
        ...


class FileDownloadSink:
    """Writes reports as text files into a download directory."""

    name = "download"
    success_message = "Text report downloaded!"
    failure_message = "Export failed - please try again"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _write(self, filename: str, content: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / filename).write_text(content, encoding="utf-8")

    async def deliver(self, filename: str, content: str) -> None:
        try:
            await asyncio.to_thread(self._write, filename, content)
        except OSError as e:
            raise ExportError(f"Could not write {filename}: {e}") from e


class ClipboardSink:
    """Holds the last copied report for the client to paste.

    An unavailable clipboard (e.g. permission denied by the client) fails
    every copy until it is made available again.
    """

    name = "clipboard"
    success_message = "Copied to clipboard!"
    failure_message = "Copy failed - manual selection needed"

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.content: str | None = None

    async def deliver(self, filename: str, content: str) -> None:
        if not self.available:
            raise ExportError("Clipboard is not available")
        self.content = content


class ExportRequest:
    """One in-flight export. Re-submit a new request to retry."""

    def __init__(
        self,
        sink: ExportSink,
        filename: str,
        content: str,
        on_done: Callable[[ExportResult], None] | None = None,
    ) -> None:
        self.sink = sink
        self.filename = filename
        self._content = content
        self._on_done = on_done
        self._task: asyncio.Task[ExportResult] | None = None

    def start(self) -> "ExportRequest":
        """Schedule the export on the running event loop and return at once."""
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            self._task.add_done_callback(self._notify)
        return self

    def cancel(self) -> bool:
        """Cancel the export if it has not finished yet."""
        if self._task is None:
            return False
        return self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def result(self) -> ExportResult:
        """Wait for the outcome. Cancellation is reported, not raised."""
        self.start()
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return self._cancelled_result()
            raise

    async def _run(self) -> ExportResult:
        logger.info("Exporting %s to %s", self.filename, self.sink.name)
        try:
            await self.sink.deliver(self.filename, self._content)
        except ExportError as e:
            logger.error("Export to %s failed: %s", self.sink.name, str(e))
            return self._failed_result()
        except Exception:
            logger.exception("Unexpected error exporting to %s", self.sink.name)
            return self._failed_result()
        return ExportResult(
            sink=self.sink.name,
            success=True,
            message=self.sink.success_message,
            filename=self.filename,
        )

    def _failed_result(self) -> ExportResult:
        return ExportResult(sink=self.sink.name, success=False, message=self.sink.failure_message)

    def _cancelled_result(self) -> ExportResult:
        return ExportResult(sink=self.sink.name, success=False, message=CANCELLED_MESSAGE)

    def _notify(self, task: "asyncio.Task[ExportResult]") -> None:
        if self._on_done is None:
            return
        if task.cancelled():
            self._on_done(self._cancelled_result())
        elif task.exception() is not None:
            self._on_done(self._failed_result())
        else:
            self._on_done(task.result())


def submit_export(
    sink: ExportSink,
    filename: str,
    content: str,
    on_done: Callable[[ExportResult], None] | None = None,
) -> ExportRequest:
    """Start an export in the background.

    Args:
        sink: Where to deliver the report
        filename: Suggested file name
        content: Formatted report text
        on_done: Called with the ExportResult when the request settles

    Returns:
        The started ExportRequest
    """
    return ExportRequest(sink, filename, content, on_done).start()
