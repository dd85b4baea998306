# aquasense/runtime/runner.py
import argparse
import logging
import os
import signal
import sys
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from aquasense.core.config import config_by_name, LOG_FORMAT
from aquasense.runtime.aggregation import ReportAggregator
from aquasense.runtime.base import PassResult
from aquasense.runtime.feeding import FeedingExecutor
from aquasense.runtime.guard import RuntimeRepository
from aquasense.runtime.sampling import SensorSampler
from aquasense.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class Runtime:
    """
    Background loop driving the feeding, sampling and rollup passes.

    Feeding runs on every tick; sampling and rollup run once at least
    `sample_interval_seconds` have passed since the previous sample.
    """

    def __init__(self, repo, feeder, tick_seconds: float = 60, sample_interval_seconds: float = 300,
                 clock: Callable[[], datetime] = DateTimeUtils.now):
        self.repo = RuntimeRepository(repo)
        self.feeding = FeedingExecutor(self.repo, feeder)
        self.sampler = SensorSampler(self.repo)
        self.aggregator = ReportAggregator(self.repo)
        self.tick_seconds = tick_seconds
        self.sample_interval_seconds = sample_interval_seconds
        self.clock = clock
        self._last_sample_at: Optional[datetime] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _sample_due(self, now: datetime) -> bool:
        if self._last_sample_at is None:
            return True
        return (now - self._last_sample_at).total_seconds() >= self.sample_interval_seconds

    def tick(self, now: Optional[datetime] = None) -> List[PassResult]:
        now = now or self.clock()
        results = [self._run_pass("feeding", lambda: self.feeding.run(now))]
        if self._sample_due(now):
            results.append(self._run_pass("sampling", lambda: self.sampler.run(now)))
            results.append(self._run_pass("rollup", lambda: self.aggregator.run(now)))
            self._last_sample_at = now
        return results

    @staticmethod
    def _run_pass(name: str, fn: Callable[[], PassResult]) -> PassResult:
        try:
            return fn()
        except Exception as e:
            # Pass-level failure (e.g. listing users); the next tick tries again.
            logger.error(f"[{name}] pass aborted: {e}", exc_info=True)
            return PassResult(name=name, errors=1)

    def run_forever(self):
        logger.info(f"Runtime started (tick: {self.tick_seconds}s, sample interval: {self.sample_interval_seconds}s)")
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self.tick_seconds)
        logger.info("Runtime stopped")

    def stop(self):
        self._stop.set()

    def start_in_background(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run_forever, name="aquasense-runtime")
        self._thread.daemon = True
        self._thread.start()
        return self._thread

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()


def build_runtime(config) -> Runtime:
    """Initialize Firebase from `config` and wire a Runtime to the live services."""
    from aquasense.core.firebase import init_firebase
    from aquasense.services.feeder_service import FeederService
    from aquasense.services.firestore_service import FirestoreRepository

    init_firebase(config)
    return Runtime(
        repo=FirestoreRepository(poll_interval=config.REFRESH_FALLBACK_SECONDS),
        feeder=FeederService(),
        tick_seconds=config.RUNTIME_TICK_SECONDS,
        sample_interval_seconds=config.SAMPLE_INTERVAL_SECONDS
    )


def _summary(results: List[PassResult]) -> Dict[str, Dict]:
    return {r.name: r.to_dict() for r in results}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="AquaSense feeding and aggregation runtime")
    parser.add_argument("--once", action="store_true", help="Run a single tick then exit")
    parser.add_argument("--env", default=None, help="Config name (development, testing, production)")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    config_name = args.env or os.getenv('FLASK_ENV', 'development')
    config = config_by_name[config_name]

    runtime = build_runtime(config)

    if args.once:
        results = runtime.tick()
        logger.info(f"Single tick finished: {_summary(results)}")
        return 1 if any(r.errors for r in results) else 0

    def _handle_signal(signum, frame):
        logger.info(f"Signal {signum} received, stopping runtime")
        runtime.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)
    runtime.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
