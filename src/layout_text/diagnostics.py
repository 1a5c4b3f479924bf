"""
Diagnostic sinks for the reconstruction pipeline.

Components report intermediate values (page dimensions, widths, slot sizes)
to an injected sink instead of printing them.
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticSink:
    """Base sink: receives named events with keyword fields."""

    def record(self, event: str, **fields: Any) -> None:
        raise NotImplementedError


class NullSink(DiagnosticSink):
    """Discards every event."""

    def record(self, event: str, **fields: Any) -> None:
        pass


class LoggingSink(DiagnosticSink):
    """Forwards events to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.log = log or logger
        self.level = level

    def record(self, event: str, **fields: Any) -> None:
        if self.log.isEnabledFor(self.level):
            details = ", ".join(f"{k}={v}" for k, v in fields.items())
            self.log.log(self.level, f"{event}: {details}")


class CollectingSink(DiagnosticSink):
    """Keeps events in memory, e.g. for a debug JSON dump."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def record(self, event: str, **fields: Any) -> None:
        self.events.append({"event": event, **fields})

    def by_event(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]

    def clear(self) -> None:
        self.events = []

    def to_dict(self) -> Dict[str, Any]:
        return {"events": list(self.events)}


class TeeSink(DiagnosticSink):
    """Sends each event to several sinks."""

    def __init__(self, *sinks: DiagnosticSink):
        self.sinks = list(sinks)

    def record(self, event: str, **fields: Any) -> None:
        for sink in self.sinks:
            sink.record(event, **fields)
