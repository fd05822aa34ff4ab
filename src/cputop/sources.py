"""CPU counter sources for cputop.

The sampling engine never touches the operating system directly. It reads
through a ``CounterSource``: ``ProcfsCounterSource`` for the live system and
``FixtureCounterSource`` for literal, replayable snapshot values.
"""

import os
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

import psutil

from cputop.errors import SystemTotalUnavailable

# user, nice, system, idle, iowait, irq, softirq, steal
# guest and guest_nice are already folded into user and nice.
SYSTEM_TICK_FIELDS = 8

# Fields after the closing paren of comm in /proc/<pid>/stat
_UTIME_INDEX = 11
_STIME_INDEX = 12


class CounterSource(Protocol):
    """Read-only view of process and system CPU-time counters."""

    def list_pids(self) -> Iterable[int]: ...

    def process_ticks(self, pid: int) -> int: ...

    def system_ticks(self) -> int: ...

    def process_name(self, pid: int) -> str: ...

    def cpu_count(self) -> int: ...


class ProcfsCounterSource:
    """
    Counter source backed by the procfs mount.

    The mount point follows ``psutil.PROCFS_PATH`` so that enumeration (done by
    psutil) and counter reads always agree on which process table they see.

    Per-process reads raise ``psutil.NoSuchProcess`` when the process is gone,
    ``psutil.AccessDenied`` on permission failures and ``ValueError`` on
    malformed data. ``system_ticks`` raises ``SystemTotalUnavailable``.
    """

    @property
    def procfs_path(self) -> str:
        """Get the procfs mount point currently in use."""
        return psutil.PROCFS_PATH

    def list_pids(self) -> list[int]:
        """List the numeric entries of the process namespace."""
        return psutil.pids()

    def process_ticks(self, pid: int) -> int:
        """Return utime + stime for ``pid`` in clock ticks."""
        data = self._read(pid, "stat")
        # comm can hold spaces and parens, so split after the last one
        _, sep, rest = data.rpartition(")")
        if not sep:
            raise ValueError(f"malformed stat for pid {pid}")
        fields = rest.split()
        if len(fields) <= _STIME_INDEX:
            raise ValueError(f"not enough fields in stat for pid {pid}")
        return int(fields[_UTIME_INDEX]) + int(fields[_STIME_INDEX])

    def process_name(self, pid: int) -> str:
        """Return the short command name of ``pid``."""
        return self._read(pid, "comm").strip()

    def system_ticks(self) -> int:
        """Return the aggregate CPU ticks across all cores."""
        path = os.path.join(self.procfs_path, "stat")
        try:
            with open(path, encoding="ascii") as f:
                line = f.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise SystemTotalUnavailable(f"cannot read {path}: {exc}") from exc

        fields = line.split()
        if len(fields) < 2 or fields[0] != "cpu":
            raise SystemTotalUnavailable(f"no aggregate cpu line in {path}")
        try:
            return sum(int(value) for value in fields[1 : 1 + SYSTEM_TICK_FIELDS])
        except ValueError as exc:
            raise SystemTotalUnavailable(f"malformed cpu line in {path}: {line!r}") from exc

    def cpu_count(self) -> int:
        """Return the number of logical CPUs."""
        return psutil.cpu_count() or 1

    def _read(self, pid: int, name: str) -> str:
        path = os.path.join(self.procfs_path, str(pid), name)
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return f.read()
        except (FileNotFoundError, ProcessLookupError) as exc:
            raise psutil.NoSuchProcess(pid) from exc
        except PermissionError as exc:
            raise psutil.AccessDenied(pid) from exc


class FixtureCounterSource:
    """
    Counter source that replays literal snapshot values.

    Phase ``n`` serves ``process_ticks[n]`` and ``system_ticks[n]``. Pass
    ``advance`` as the sampler's sleep callable to step between phases without
    waiting on real time.
    """

    def __init__(
        self,
        pids: Iterable[int],
        process_ticks: Sequence[Mapping[int, int]],
        system_ticks: Sequence[int | None],
        names: Mapping[int, str] | None = None,
        cpu_count: int = 1,
    ) -> None:
        """
        Initialize the FixtureCounterSource.

        Args:
            pids: Handles reported by ``list_pids``.
            process_ticks: One ``{pid: ticks}`` mapping per phase. A missing
                pid behaves like a process that exited.
            system_ticks: One system total per phase. ``None`` behaves like
                an unreadable counter.
            names: Display names. When omitted every pid is named ``proc-<pid>``;
                when given, a missing pid behaves like an unreadable name.
            cpu_count: Logical CPUs reported by ``cpu_count``.
        """
        if len(process_ticks) != len(system_ticks):
            raise ValueError("process_ticks and system_ticks need one entry per phase")
        self._pids = list(pids)
        self._process_ticks = [dict(phase) for phase in process_ticks]
        self._system_ticks = list(system_ticks)
        self._names = dict(names) if names is not None else None
        self._cpu_count = cpu_count
        self._phase = 0
        self.list_calls = 0

    @property
    def phase(self) -> int:
        """Get the index of the phase currently served."""
        return self._phase

    def advance(self, _seconds: float = 0.0) -> None:
        """Move to the next phase."""
        if self._phase + 1 >= len(self._system_ticks):
            raise IndexError("no more fixture phases")
        self._phase += 1

    def list_pids(self) -> list[int]:
        self.list_calls += 1
        return list(self._pids)

    def process_ticks(self, pid: int) -> int:
        try:
            return self._process_ticks[self._phase][pid]
        except KeyError:
            raise psutil.NoSuchProcess(pid) from None

    def system_ticks(self) -> int:
        ticks = self._system_ticks[self._phase]
        if ticks is None:
            raise SystemTotalUnavailable(f"system counter unavailable in phase {self._phase}")
        return ticks

    def process_name(self, pid: int) -> str:
        if self._names is None:
            return f"proc-{pid}"
        try:
            return self._names[pid].strip()
        except KeyError:
            raise psutil.NoSuchProcess(pid) from None

    def cpu_count(self) -> int:
        return self._cpu_count
