"""
ingestion/noise_engine.py — Stateful orchestrator for the audio→noise pipeline.

NoiseEngine owns the current Waveform and NoiseConfig snapshots and is the
single place results are committed:

    audio file / bytes
        │
        ├─ load_waveform()         [ingestion/audio_loader.py — I/O boundary]
        │       ↓
        ├─ run_pipeline()          [core/noise/pipeline.py — pure, synchronous]
        │       ↓
        └─ commit (latest request only) → on_result / on_progress callbacks

Recompute contract
------------------
Every recompute is tagged with a monotonically increasing request id. A run
commits its result only if its id is still the latest issued when it
finishes — last-writer-wins by request ordering, not completion ordering.
Runs that fall behind are cancelled cooperatively between windows and their
output is dropped.

request_recompute() / update_config() coalesce bursts (a dragged slider)
through a depth-1 debounce: each call replaces the pending timer, so only the
most recent configuration is ever processed.

This module is in `ingestion/` because it decodes audio and runs background
timers. The numeric logic is pure and lives in `core/noise/`.

Usage:
    engine = NoiseEngine(on_progress=lambda pct: print(pct, "%"))
    result = engine.load_file("/path/to/take.wav")
    engine.update_config(curve_strength=3.0)   # debounced
    result = engine.wait()
"""

from __future__ import annotations

import dataclasses
import logging
import math
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from core.config import DEFAULT_CONFIG, NoiseConfig
from core.noise.pipeline import PipelineCancelled, run_pipeline
from core.noise.types import NoiseResult, Waveform
from infrastructure.metrics import LatencyTimer, record_decode_failure, record_recompute
from ingestion.audio_loader import load_waveform, load_waveform_bytes

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS: float = 0.1

ProgressListener = Callable[[int], None]
ResultListener = Callable[[NoiseResult], None]


class NoiseEngine:
    """Coordinates decoding, recomputation and result delivery.

    Thread-safe: the request counter, snapshots and committed result are
    guarded by one lock. Callbacks run on the thread that ran the pipeline
    (the caller's thread for recompute(), a timer thread for debounced
    requests); result delivery is serialized by a second lock.

    Args:
        config: Initial configuration (default: DEFAULT_CONFIG).
        debounce_seconds: Quiet period before a coalesced request runs
            (default: 0.1 s).
        on_progress: Receives integer percentages 0–100, only when the value
            changes, only for the latest request.
        on_result: Receives committed results in request order. A result
            overtaken by a newer one before delivery is never delivered.

    Example::

        engine = NoiseEngine(on_result=chart.update)
        engine.load_bytes(blob, filename="take.webm")
        engine.update_config(lower_threshold=0.01)
    """

    def __init__(
        self,
        config: NoiseConfig = DEFAULT_CONFIG,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_progress: ProgressListener | None = None,
        on_result: ResultListener | None = None,
    ) -> None:
        """Initialize with no audio loaded."""
        if debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be non-negative, got {debounce_seconds}")
        self._config = config
        self._debounce = debounce_seconds
        self._on_progress = on_progress
        self._on_result = on_result

        self._waveform: Waveform | None = None
        self._source_audio: bytes | None = None
        self._result: NoiseResult | None = None
        self._latest_request = 0
        self._progress = 0
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._delivered_request = 0
        self._delivery_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def config(self) -> NoiseConfig:
        with self._lock:
            return self._config

    @property
    def waveform(self) -> Waveform | None:
        with self._lock:
            return self._waveform

    @property
    def result(self) -> NoiseResult | None:
        """Most recently committed result, or None before the first run."""
        with self._lock:
            return self._result

    @property
    def progress(self) -> int:
        """Progress of the latest request as an integer percentage."""
        with self._lock:
            return self._progress

    @property
    def source_audio(self) -> bytes | None:
        """Original encoded bytes of the last load_bytes() input, unmodified."""
        with self._lock:
            return self._source_audio

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._latest_request

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def load_file(self, path: str | Path, *, duration: float | None = None) -> NoiseResult | None:
        """Decode an audio file, replace the waveform, and recompute.

        Raises:
            FileNotFoundError, ValueError, RuntimeError: from load_waveform.
                The previous waveform and result are left untouched.
        """
        waveform = self._decode(load_waveform, path, duration=duration)
        with self._lock:
            self._source_audio = None
        return self.recompute(waveform=waveform)

    def load_bytes(
        self,
        data: bytes,
        *,
        filename: str = "recording.wav",
        duration: float | None = None,
    ) -> NoiseResult | None:
        """Decode an upload or finished recording, replace the waveform, and recompute.

        The encoded bytes are kept so they can be re-exported unmodified.

        Raises:
            ValueError, RuntimeError: from load_waveform_bytes.
                The previous waveform and result are left untouched.
        """
        waveform = self._decode(load_waveform_bytes, data, filename=filename, duration=duration)
        with self._lock:
            self._source_audio = bytes(data)
        return self.recompute(waveform=waveform)

    def _decode(self, loader: Callable[..., Waveform], source: Any, **kwargs: Any) -> Waveform:
        try:
            return loader(source, **kwargs)
        except FileNotFoundError:
            record_decode_failure("not_found")
            raise
        except ValueError as exc:
            record_decode_failure("unsupported")
            logger.warning("Rejected audio input: %s", exc)
            raise
        except RuntimeError as exc:
            record_decode_failure("decode_error")
            logger.warning("Audio decoding failed: %s", exc)
            raise

    # ------------------------------------------------------------------
    # Recompute — synchronous
    # ------------------------------------------------------------------

    def recompute(
        self,
        waveform: Waveform | None = None,
        config: NoiseConfig | None = None,
    ) -> NoiseResult | None:
        """Run the full pipeline now, on the caller's thread.

        Any pending debounced request is dropped and any in-flight run is
        superseded by this one.

        Args:
            waveform: Replaces the current waveform when given.
            config: Replaces the current configuration when given.

        Returns:
            The committed NoiseResult, or None if a newer request superseded
            this run before it finished or a newer result was delivered first.

        Raises:
            ValueError: If no waveform has been loaded yet.
        """
        with self._lock:
            snapshot_waveform = waveform if waveform is not None else self._waveform
            if snapshot_waveform is None:
                raise ValueError("No audio loaded — upload a file or finish a recording first")
            self._waveform = snapshot_waveform
            if config is not None:
                self._config = config
            snapshot_config = self._config
            request_id = self._issue_request_locked()
            self._cancel_timer_locked()

        return self._run(request_id, snapshot_waveform, snapshot_config)

    # ------------------------------------------------------------------
    # Recompute — debounced / coalesced
    # ------------------------------------------------------------------

    def request_recompute(
        self,
        config: NoiseConfig | None = None,
        waveform: Waveform | None = None,
    ) -> int:
        """Schedule a recompute after the debounce period.

        A later call before the timer fires replaces this one. An in-flight
        run is superseded immediately.

        Returns:
            The request id assigned to this request.

        Raises:
            ValueError: If no waveform has been loaded yet.
        """
        with self._lock:
            if waveform is None and self._waveform is None:
                raise ValueError("No audio loaded — upload a file or finish a recording first")
            if waveform is not None:
                self._waveform = waveform
            if config is not None:
                self._config = config
            request_id = self._issue_request_locked()
            self._cancel_timer_locked()
            timer = threading.Timer(self._debounce, self._fire, args=(request_id,))
            timer.daemon = True
            self._timer = timer
            timer.start()
        logger.debug("Recompute request #%d scheduled in %.3fs", request_id, self._debounce)
        return request_id

    def update_config(self, **changes: Any) -> int | None:
        """Apply parameter changes and schedule a debounced recompute.

        Validation happens immediately, so an invalid value raises here and
        never reaches the pipeline.

        Returns:
            The request id, or None when no audio is loaded yet (the new
            configuration is stored and used by the next load).

        Raises:
            ValueError: If the resulting configuration is invalid.
            TypeError: If an unknown parameter name is passed.
        """
        with self._lock:
            new_config = dataclasses.replace(self._config, **changes)
            if self._waveform is None:
                self._config = new_config
                return None
        return self.request_recompute(config=new_config)

    def wait(self, timeout: float | None = None) -> NoiseResult | None:
        """Block until any pending debounced request has run.

        Returns:
            The committed result afterwards (may be None if nothing ran).
        """
        while True:
            with self._lock:
                timer = self._timer
            if timer is None:
                break
            timer.join(timeout)
            if timer.is_alive():
                break
            with self._lock:
                if self._timer is timer:
                    self._timer = None
        return self.result

    def close(self) -> None:
        """Drop any pending request and supersede any in-flight run."""
        with self._lock:
            self._cancel_timer_locked()
            self._issue_request_locked()

    def __enter__(self) -> NoiseEngine:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _issue_request_locked(self) -> int:
        self._latest_request += 1
        return self._latest_request

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def _is_stale(self, request_id: int) -> bool:
        with self._lock:
            return request_id != self._latest_request

    def _fire(self, request_id: int) -> None:
        with self._lock:
            if request_id != self._latest_request:
                return
            waveform = self._waveform
            config = self._config
        if waveform is None:
            return
        try:
            self._run(request_id, waveform, config)
        except Exception:  # noqa: BLE001
            logger.exception("Debounced recompute #%d failed", request_id)

    def _run(self, request_id: int, waveform: Waveform, config: NoiseConfig) -> NoiseResult | None:
        self._report_progress(request_id, 0, restart=True)

        try:
            with LatencyTimer() as timer:
                result = run_pipeline(
                    waveform,
                    config,
                    on_progress=lambda fraction: self._report_progress(
                        request_id, _to_percent(fraction)
                    ),
                    should_cancel=lambda: self._is_stale(request_id),
                )
        except PipelineCancelled as exc:
            logger.debug("Recompute #%d superseded: %s", request_id, exc)
            record_recompute(outcome="superseded")
            return None

        with self._lock:
            if request_id != self._latest_request:
                committed = False
            else:
                self._result = result
                committed = True

        if not committed:
            logger.debug("Recompute #%d finished after being superseded — discarded", request_id)
            record_recompute(outcome="superseded")
            return None

        record_recompute(
            outcome="committed",
            latency_seconds=timer.elapsed,
            windows=result.window_count,
        )
        logger.info(
            "Recompute #%d committed: %d values, balance %+.1f (%.1f ms)",
            request_id,
            result.window_count,
            result.balance,
            timer.elapsed * 1000.0,
        )
        if not self._deliver(request_id, result):
            logger.debug("Recompute #%d overtaken by a newer delivery — not delivered", request_id)
            return None
        return result

    def _deliver(self, request_id: int, result: NoiseResult) -> bool:
        # Listeners only ever see increasing request ids. Reentrant so an
        # on_result callback may itself call recompute().
        with self._delivery_lock:
            if request_id <= self._delivered_request:
                return False
            self._delivered_request = request_id
            if self._on_result is not None:
                self._on_result(result)
        return True

    def _report_progress(self, request_id: int, percent: int, *, restart: bool = False) -> None:
        with self._lock:
            if request_id != self._latest_request:
                return
            if not restart and percent <= self._progress:
                return
            self._progress = percent
        if self._on_progress is not None:
            self._on_progress(percent)


def _to_percent(fraction: float) -> int:
    # 0.29 * 100 == 28.999999999999996
    return min(100, math.floor(round(fraction * 100.0, 9)))
