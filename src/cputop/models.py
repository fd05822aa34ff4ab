"""Data models for cputop."""

from dataclasses import dataclass, field
from enum import Enum

MIN_INTERVAL = 0.1


class Scale(Enum):
    """What 100% means for a process."""

    MACHINE = "machine"  # all cores together
    CORE = "core"  # a single core


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable result row for one sampled process."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0, or 100.0 * core_count with Scale.CORE


@dataclass(slots=True)
class CounterSnapshot:
    """Cumulative CPU ticks captured at one instant."""

    system_ticks: int
    process_ticks: dict[int, int] = field(default_factory=dict)
