"""Test helper functions."""

import logging
from typing import Any, Dict, List

from estate_match.utils.logging import StructuredLogger


class RecordingLogger(StructuredLogger):
    """StructuredLogger that keeps every call for inspection."""

    def __init__(self):
        super().__init__(logging.getLogger("tests.recording"))
        self.records: List[Dict[str, Any]] = []

    def _record(self, level: str, message: str, **kwargs: Any) -> None:
        self.records.append({"level": level, "message": message, **self.context, **kwargs})

    def debug(self, message: str, **kwargs: Any) -> None:
        self._record("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._record("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._record("warning", message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._record("error", message, **kwargs)

    def messages(self, level: str = None) -> List[str]:
        return [r["message"] for r in self.records if level is None or r["level"] == level]
