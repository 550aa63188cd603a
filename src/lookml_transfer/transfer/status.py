"""Per-row progress reporting."""

from typing import Protocol

from loguru import logger


class StatusSink(Protocol):
    """Destination for live per-row status messages.

    Implementations overwrite the row's status with ``message`` and flush
    any buffered writes before returning.
    """

    def report(self, row_key: int, message: str) -> None:
        ...


class StatusReporter:
    """Reports workflow progress for a single row."""

    def __init__(self, sink: StatusSink, row_key: int, project_id: str):
        self.sink = sink
        self.row_key = row_key
        self.logger = logger.bind(component='StatusReporter', project=project_id)

    def report(self, message: str) -> None:
        self.logger.info(message)
        self.sink.report(self.row_key, message)
