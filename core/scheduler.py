"""Timer-driven ticking for the live backtest with play/pause and speed control."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading

from core.simulation import LiveBacktest, Stats

BASE_TICK_SECONDS = 0.22
ALLOWED_SPEEDS = (1, 2, 3, 4)

LOGGER = logging.getLogger("ict.scheduler")


@dataclass(frozen=True)
class BacktestSnapshot:
    """Consistent read of scheduler and backtest state."""

    seed: int
    series: tuple[float, ...]
    stats: Stats
    ticks: int
    running: bool
    speed: int
    interval_seconds: float


class TickScheduler:
    """Advance a ``LiveBacktest`` on a timer, one pending tick at most.

    Each run period gets its own worker thread and stop event. Changing speed
    or run state stops the current worker and starts a new one, and a worker
    only ticks while its generation is still current.
    """

    def __init__(
        self,
        backtest: LiveBacktest,
        base_interval: float = BASE_TICK_SECONDS,
        speed: int = 1,
    ) -> None:
        self._validate_speed(speed)
        self._backtest = backtest
        self._base_interval = base_interval
        self._speed = speed
        self._running = False
        self._lock = threading.RLock()
        self._generation = 0
        self._stop_event: threading.Event | None = None
        self._worker: threading.Thread | None = None

    @staticmethod
    def _validate_speed(speed: int) -> None:
        if speed not in ALLOWED_SPEEDS:
            raise ValueError(f"Speed must be one of {ALLOWED_SPEEDS}, got {speed!r}.")

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def speed(self) -> int:
        with self._lock:
            return self._speed

    @property
    def interval_seconds(self) -> float:
        with self._lock:
            return self._base_interval / self._speed

    def play(self) -> None:
        with self._lock:
            self._running = True
            self._restart_timer()

    def pause(self) -> None:
        with self._lock:
            self._running = False
            self._restart_timer()

    def toggle(self) -> bool:
        with self._lock:
            if self._running:
                self.pause()
            else:
                self.play()
            return self._running

    def set_speed(self, speed: int) -> None:
        self._validate_speed(speed)
        with self._lock:
            self._speed = speed
            self._restart_timer()

    def reseed(self, seed: int) -> None:
        with self._lock:
            self._backtest.reseed(seed)
            self._restart_timer()

    def stop(self) -> None:
        """Cancel the pending tick and leave the scheduler paused."""
        with self._lock:
            self._running = False
            self._cancel_timer()
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=1.0)

    def tick_now(self) -> None:
        """Apply one tick immediately, outside the timer."""
        with self._lock:
            self._backtest.advance()

    def snapshot(self) -> BacktestSnapshot:
        with self._lock:
            return BacktestSnapshot(
                seed=self._backtest.seed,
                series=self._backtest.series,
                stats=self._backtest.stats,
                ticks=self._backtest.ticks,
                running=self._running,
                speed=self._speed,
                interval_seconds=self._base_interval / self._speed,
            )

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._stop_event is not None:
            self._stop_event.set()
            self._stop_event = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        if not self._running:
            LOGGER.info("Backtest paused at tick %s", self._backtest.ticks)
            return

        generation = self._generation
        stop_event = threading.Event()
        interval = self._base_interval / self._speed
        self._stop_event = stop_event

        def _loop() -> None:
            while not stop_event.wait(interval):
                with self._lock:
                    if generation != self._generation:
                        return
                    self._backtest.advance()

        self._worker = threading.Thread(
            target=_loop,
            name=f"ict-backtest-ticker-{generation}",
            daemon=True,
        )
        self._worker.start()
        LOGGER.info("Backtest ticking every %.3fs (speed=%sx)", interval, self._speed)
