# File: app/core/metrics.py
import threading
from typing import Dict, Tuple


class Counter:
    """Process-local monotonically increasing counter with optional labels."""

    def __init__(self, name: str, help_text: str, label_names: Tuple[str, ...] = ()):
        self.name = name
        self.help_text = help_text
        self.label_names = label_names
        self._values: Dict[Tuple[str, ...], int] = {}
        self._lock = threading.Lock()

    def inc(self, *labels: str, amount: int = 1) -> None:
        if len(labels) != len(self.label_names):
            raise ValueError(f"{self.name} expects labels {self.label_names}, got {labels}")
        with self._lock:
            self._values[labels] = self._values.get(labels, 0) + amount

    def value(self, *labels: str) -> int:
        with self._lock:
            return self._values.get(labels, 0)

    def snapshot(self) -> dict:
        with self._lock:
            if not self.label_names:
                return {"help": self.help_text, "value": self._values.get((), 0)}
            return {
                "help": self.help_text,
                "values": [
                    {**dict(zip(self.label_names, labels)), "value": count}
                    for labels, count in sorted(self._values.items())
                ],
            }


reviews_submitted_total = Counter(
    "reviews_submitted_total", "Number of reviews successfully submitted"
)
decisions_made_total = Counter(
    "decisions_made_total", "Number of decisions (accept/reject)", ("decision",)
)
final_uploads_total = Counter(
    "final_uploads_total", "Number of final PDFs uploaded and accepted"
)

REGISTRY = (reviews_submitted_total, decisions_made_total, final_uploads_total)


def render_metrics() -> dict:
    return {counter.name: counter.snapshot() for counter in REGISTRY}
