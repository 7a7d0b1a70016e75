"""
Filter engine: owns the current filter state and runs the pipeline.

A run copies the pristine buffer, applies the selected effect filter with the
current intensity, then the adjustment pass. At most one run is in flight at
a time. Bursts of parameter changes are collapsed by a trailing-edge
quiescence timer so only the latest parameters are rendered.
"""

import logging
import threading
from dataclasses import dataclass

from core.adjustments import AdjustmentParams, apply_adjustments
from core.effect_filters import FilterKind, apply_effect
from core.errors import InvalidSource
from core.original_state import OriginalStateManager
from core.pixel_buffer import PixelBuffer
from utils.helpers import time_function

DEFAULT_DEBOUNCE_INTERVAL = 0.1  # seconds


@dataclass(frozen=True)
class PipelineResult:
    """A finished output buffer and the settings that produced it."""

    buffer: PixelBuffer
    filter_kind: FilterKind
    params: AdjustmentParams


@time_function
def run_pipeline(pristine, kind, params):
    """Pure pipeline run; identical inputs give byte-identical output."""
    working = pristine.copy()
    working = apply_effect(kind, working, params.intensity)
    working = apply_adjustments(working, params)
    return PipelineResult(working, FilterKind.from_name(kind), params)


class FilterEngine:
    """Stateful front end over ``run_pipeline``.

    ``on_result`` is called with each newly published ``PipelineResult``.
    Debounced runs happen on a timer thread, so callers that touch a UI must
    marshal the callback back to their own thread.
    """

    def __init__(self, debounce_interval=DEFAULT_DEBOUNCE_INTERVAL, on_result=None, logger=None):
        self.logger = logger or logging.getLogger('neural_canvas')
        self.debounce_interval = debounce_interval
        self.on_result = on_result
        self.state = OriginalStateManager(self.logger)
        self.last_error = None

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._filter = FilterKind.NONE
        self._params = AdjustmentParams()
        self._result = None
        self._busy = False
        self._dirty = False
        self._timer = None
        self._request_id = 0
        self._generation = 0
        self._run_count = 0

    # Read-only state

    @property
    def has_source(self):
        return self.state.has_source

    @property
    def current_filter(self):
        return self._filter

    @property
    def params(self):
        return self._params

    @property
    def current_result(self):
        return self._result

    @property
    def busy(self):
        return self._busy

    @property
    def run_count(self):
        """Number of pipeline executions, including discarded stale ones."""
        return self._run_count

    # Control surface

    def set_source(self, buffer):
        """Install a new pristine image and return its identity result."""
        with self._lock:
            pristine = self.state.load(buffer)
            self._cancel_pending()
            self._generation += 1
            self._filter = FilterKind.NONE
            self._params = AdjustmentParams()
            self._result = PipelineResult(pristine, FilterKind.NONE, self._params)
            self.last_error = None
            result = self._result
            self._idle.notify_all()

        self._publish(result)
        return result

    def select_filter(self, kind):
        kind = FilterKind.from_name(kind)
        with self._lock:
            self._filter = kind
        self.logger.info(f"Selected filter: {kind.value}")
        self.request_recompute(delay=0)
        return kind

    def set_adjustment(self, field, value):
        """Clamp and store one adjustment, then schedule a debounced run."""
        with self._lock:
            self._params = self._params.with_value(field, value)
            params = self._params
        self.logger.debug(f"Adjustment {field} set to {getattr(params, field)}")
        self.request_recompute()
        return params

    def request_recompute(self, delay=None):
        """Schedule a run once no further requests arrive for ``delay`` seconds."""
        delay = self.debounce_interval if delay is None else delay
        with self._lock:
            if not self.state.has_source:
                self.logger.debug("Recompute requested before any source was loaded")
                return
            self._arm_timer(delay)

    def recompute(self):
        """Run the pipeline now, bypassing the debounce, and return the result."""
        with self._lock:
            if not self.state.has_source:
                raise InvalidSource("No source image loaded")
            while self._busy:
                self._idle.wait()
            self._cancel_pending()
            self._busy = True
            pristine, kind, params, generation = self._snapshot()

        result = None
        try:
            result = run_pipeline(pristine, kind, params)
        finally:
            with self._lock:
                published = self._finish_run(result, generation)

        if published:
            self._publish(result)
        return result

    def reset(self):
        """Back to the original: no filter, default adjustments."""
        with self._lock:
            pristine = self.state.pristine
            self._cancel_pending()
            self._generation += 1
            self._filter = FilterKind.NONE
            self._params = AdjustmentParams()
            self._result = PipelineResult(pristine, FilterKind.NONE, self._params)
            result = self._result
            self._idle.notify_all()

        self.logger.info("Reset to original image")
        self._publish(result)
        return result

    def compare(self):
        """Return ``(pristine, current)`` buffers for a before/after view."""
        with self._lock:
            pristine = self.state.pristine
            current = self._result.buffer if self._result is not None else pristine
        return pristine, current

    def wait_idle(self, timeout=None):
        """Block until nothing is pending or running. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(
                lambda: self._timer is None and not self._busy and not self._dirty,
                timeout,
            )

    def close(self):
        """Cancel any pending run."""
        with self._lock:
            self._cancel_pending()
            self._idle.notify_all()

    # Internals; callers hold ``self._lock`` unless noted

    def _snapshot(self):
        return self.state.pristine, self._filter, self._params, self._generation

    def _arm_timer(self, delay):
        if self._timer is not None:
            self._timer.cancel()
        self._request_id += 1
        self._timer = threading.Timer(delay, self._on_quiescence, args=(self._request_id,))
        self._timer.daemon = True
        self._timer.start()

    def _cancel_pending(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._dirty = False

    def _commit(self, result, generation):
        if generation != self._generation:
            self.logger.debug("Discarding result computed for a replaced source")
            return False
        self._result = result
        self.last_error = None
        return True

    def _finish_run(self, result, generation, error=None):
        """Record a finished run and schedule the follow-up for requests made meanwhile."""
        self._run_count += 1
        self._busy = False
        if error is not None:
            self.last_error = error
        published = result is not None and self._commit(result, generation)
        if self._dirty:
            self._dirty = False
            self._arm_timer(self.debounce_interval)
        self._idle.notify_all()
        return published

    def _on_quiescence(self, request_id):
        # Timer thread, lock not held.
        with self._lock:
            if request_id != self._request_id or self._timer is None:
                return
            self._timer = None
            if self._busy:
                self._dirty = True
                return
            self._busy = True
            pristine, kind, params, generation = self._snapshot()

        result = error = None
        try:
            result = run_pipeline(pristine, kind, params)
        except Exception as e:
            self.logger.error(f"Error running {kind.value} pipeline: {e}")
            error = e

        with self._lock:
            published = self._finish_run(result, generation, error)

        if published:
            self._publish(result)

    def _publish(self, result):
        # Lock not held.
        if self.on_result is not None:
            self.on_result(result)
