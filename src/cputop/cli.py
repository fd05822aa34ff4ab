"""Command line entry point for cputop."""

import logging
import sys
import time
from collections.abc import Callable, Sequence

from cputop.config import Settings, parse_args, setup_logging
from cputop.errors import SamplingError
from cputop.render import Renderer, get_renderer
from cputop.sampler import CpuSampler
from cputop.sources import CounterSource, ProcfsCounterSource

logger = logging.getLogger(__name__)


def run(
    settings: Settings,
    source: CounterSource | None = None,
    renderer: Renderer | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Sample once and hand the result to the renderer.

    Returns the process exit status: 0 when a result (possibly empty) was
    rendered, 1 when CPU usage could not be determined at all.
    """
    sampler = CpuSampler(
        source if source is not None else ProcfsCounterSource(),
        interval=settings.interval,
        sleep=sleep,
        scale=settings.scale,
        workers=settings.workers,
    )
    try:
        records = sampler.run()
    except SamplingError as exc:
        logger.debug("Sampling failed", exc_info=True)
        print(f"cputop: {exc}", file=sys.stderr)
        return 1

    (renderer or get_renderer(settings.mode))(records)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the cputop application."""
    settings = parse_args(argv)
    setup_logging(settings.log_level)
    sys.exit(run(settings))


if __name__ == "__main__":
    main()
