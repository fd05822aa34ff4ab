"""Run-level failures raised by the sampling engine."""


class SamplingError(Exception):
    """CPU usage could not be determined for this run."""


class SystemTotalUnavailable(SamplingError):
    """The system-wide CPU counter could not be read."""


class CounterRegressionError(SamplingError):
    """The system-wide CPU counter went backwards between snapshots."""

    def __init__(self, before: int, after: int) -> None:
        super().__init__(f"system CPU counter went backwards ({before} -> {after})")
        self.before = before
        self.after = after
