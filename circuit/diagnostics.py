"""
Non-fatal sink for internal-consistency violations of the spike recurrence.

A violation (a spike placed before its slot, a non-finite spike time, a
non-positive firing period) means the algorithm is wrong. It is logged and
counted; the run goes on. Tests assert that the count stays at zero.
"""

import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class Violation:
    kind: str
    neuron: int
    slot_start: float
    slot_length: float
    value: float


@dataclass
class DiagnosticsSink:
    """Counts and logs internal errors. Keeps the first max_kept records."""
    max_kept: int = 100
    count: int = 0
    violations: List[Violation] = field(default_factory=list)

    def report(self, kind, neuron, slot_start, slot_length, value):
        self.count += 1
        if len(self.violations) < self.max_kept:
            self.violations.append(
                Violation(kind, neuron, slot_start, slot_length, value))
        logger.error(
            "Internal error (%s): neuron %d, current step [%g,%g) value: %r",
            kind, neuron, slot_start, slot_start + slot_length, value)

    def reset(self):
        self.count = 0
        self.violations.clear()
