"""Sampling engine for cputop."""

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor

import psutil

from cputop.errors import CounterRegressionError
from cputop.models import MIN_INTERVAL, CounterSnapshot, ProcessRecord, Scale
from cputop.sources import CounterSource

logger = logging.getLogger(__name__)

# Per-process failures that drop the process instead of failing the run
READ_ERRORS = (psutil.NoSuchProcess, psutil.AccessDenied, OSError, ValueError)


def enumerate_pids(source: CounterSource) -> frozenset[int]:
    """
    List the process handles currently visible through ``source``.

    An unreadable process namespace yields an empty set rather than an error.
    """
    try:
        pids = source.list_pids()
        return frozenset(pid for pid in pids if pid > 0)
    except (OSError, psutil.Error) as exc:
        logger.warning("Cannot list processes: %s", exc)
        return frozenset()


class CpuSampler:
    """
    Two-snapshot CPU sampler.

    Reads every process counter and the system total, sleeps for ``interval``,
    reads them again against the same handle set, and ranks processes by their
    share of the system delta. Processes that exit or cannot be read are dropped.
    """

    def __init__(
        self,
        source: CounterSource,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        scale: Scale = Scale.MACHINE,
        workers: int = 1,
    ) -> None:
        """
        Initialize the CpuSampler.

        Args:
            source: Where counters are read from.
            interval: Seconds between the two snapshots. Default 1.0s.
            sleep: Called once with ``interval`` between the snapshots.
            scale: Report share of the whole machine or of a single core.
            workers: Threads used for per-process reads within a snapshot.
        """
        self._source = source
        self._sleep = sleep
        self._scale = scale
        self._workers = max(1, workers)
        self.interval = interval

    @property
    def interval(self) -> float:
        """Get the sampling interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the sampling interval."""
        self._interval = max(MIN_INTERVAL, value)

    @property
    def scale(self) -> Scale:
        """Get the percentage scale."""
        return self._scale

    def run(self) -> list[ProcessRecord]:
        """Enumerate processes and sample them."""
        return self.sample()

    def sample(self, pids: Iterable[int] | None = None) -> list[ProcessRecord]:
        """
        Sample ``pids`` and return them ranked by CPU usage, highest first.

        When ``pids`` is None the source is enumerated once.

        Raises:
            SystemTotalUnavailable: The system counter could not be read.
            CounterRegressionError: The system counter went backwards.
        """
        if pids is None:
            pids = enumerate_pids(self._source)
        pids = sorted(set(pids))
        logger.debug("Sampling %d processes over %.2fs", len(pids), self._interval)

        first = self._take_snapshot(pids)
        self._sleep(self._interval)
        second = self._take_snapshot(pids)

        system_delta = second.system_ticks - first.system_ticks
        if system_delta < 0:
            raise CounterRegressionError(first.system_ticks, second.system_ticks)
        if system_delta == 0:
            logger.warning("System CPU counter did not advance; no usage to report")
            return []

        factor = 100.0 * (self._source.cpu_count() if self._scale is Scale.CORE else 1)
        records: list[ProcessRecord] = []
        for pid in pids:
            if pid not in first.process_ticks or pid not in second.process_ticks:
                continue
            delta = second.process_ticks[pid] - first.process_ticks[pid]
            if delta < 0:
                logger.debug("Counter for pid %d went backwards, dropping", pid)
                continue
            try:
                name = self._source.process_name(pid)
            except READ_ERRORS as exc:
                logger.debug("Cannot read name of pid %d: %s", pid, exc)
                continue
            records.append(ProcessRecord(pid=pid, name=name, cpu_percent=factor * delta / system_delta))

        records.sort(key=lambda r: (-r.cpu_percent, r.pid))
        logger.debug("Ranked %d of %d processes", len(records), len(pids))
        return records

    def _take_snapshot(self, pids: list[int]) -> CounterSnapshot:
        """Read the system total, then every process counter."""
        snapshot = CounterSnapshot(system_ticks=self._source.system_ticks())

        if self._workers > 1 and len(pids) > 1:
            with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="CpuSampler") as pool:
                results = list(pool.map(self._read_ticks, pids))
        else:
            results = [self._read_ticks(pid) for pid in pids]

        for pid, ticks in zip(pids, results):
            if ticks is not None:
                snapshot.process_ticks[pid] = ticks
        return snapshot

    def _read_ticks(self, pid: int) -> int | None:
        try:
            return self._source.process_ticks(pid)
        except READ_ERRORS as exc:
            # Exited, access denied, or malformed
            logger.debug("Cannot read counters of pid %d: %s", pid, exc)
            return None
