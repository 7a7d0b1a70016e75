"""Tests for FilterEngine orchestration, debounce and cancellation."""

import threading
import time

import numpy as np
import pytest

import core.filter_engine as filter_engine
from core.adjustments import AdjustmentParams
from core.effect_filters import FilterKind
from core.errors import InvalidSource, ParamOutOfRange, UnknownFilter
from core.filter_engine import FilterEngine, PipelineResult, run_pipeline
from core.original_state import OriginalStateManager
from core.pixel_buffer import PixelBuffer


@pytest.fixture
def engine():
    engine = FilterEngine(debounce_interval=0.2)
    yield engine
    engine.close()


def _other_buffer():
    data = np.full((2, 2, 4), 40, dtype=np.uint8)
    return PixelBuffer.from_array(data)


# Original state


def test_original_state_requires_a_source():
    state = OriginalStateManager()
    assert not state.has_source
    with pytest.raises(InvalidSource):
        state.pristine


def test_original_state_keeps_a_read_only_copy(quad_buffer):
    state = OriginalStateManager()
    state.load(quad_buffer)
    quad_buffer.pixels[0] = 0

    assert state.pristine.pixels[0] == 255
    assert not state.pristine.writeable
    assert state.working_copy().writeable


def test_original_state_rejects_non_buffers():
    with pytest.raises(InvalidSource):
        OriginalStateManager().load(b"\x00\x00\x00\x00")


# Source handling


def test_set_source_publishes_identity_result(engine, quad_buffer):
    results = []
    engine.on_result = results.append

    result = engine.set_source(quad_buffer)

    assert isinstance(result, PipelineResult)
    assert result.buffer == quad_buffer
    assert result.filter_kind is FilterKind.NONE
    assert result.params == AdjustmentParams()
    assert results == [result]
    assert engine.run_count == 0


def test_set_source_rejects_invalid_input(engine):
    with pytest.raises(InvalidSource):
        engine.set_source(np.zeros((2, 2, 4), dtype=np.uint8))
    assert engine.current_result is None


def test_set_source_resets_filter_and_params(engine, quad_buffer):
    engine.set_source(quad_buffer)
    engine.select_filter('neon')
    engine.set_adjustment('contrast', 20)
    engine.set_source(_other_buffer())

    assert engine.current_filter is FilterKind.NONE
    assert engine.params == AdjustmentParams()


def test_recompute_without_source_raises(engine):
    with pytest.raises(InvalidSource):
        engine.recompute()


# Recompute


def test_recompute_applies_selected_filter(engine, quad_buffer):
    engine.set_source(quad_buffer)
    engine.select_filter('vintage')

    result = engine.recompute()

    assert result.filter_kind is FilterKind.VINTAGE
    assert tuple(result.buffer.as_array()[0, 0]) == (100, 89, 69, 255)
    assert engine.current_result is result


def test_recompute_is_deterministic(engine, random_buffer):
    engine.set_source(random_buffer)
    engine.select_filter('sketch')
    engine.set_adjustment('intensity', 60)
    engine.set_adjustment('saturation', 35)
    engine.set_adjustment('blur', 2)

    first = engine.recompute()
    second = engine.recompute()

    assert first.buffer.to_bytes() == second.buffer.to_bytes()
    direct = run_pipeline(random_buffer, FilterKind.SKETCH, engine.params)
    assert direct.buffer == first.buffer


def test_pristine_is_never_mutated(engine, random_buffer):
    original = random_buffer.copy()
    engine.set_source(random_buffer)
    for name in ('oil', 'dramatic', 'watercolor'):
        engine.select_filter(name)
        engine.set_adjustment('brightness', 30)
        engine.recompute()

    pristine, current = engine.compare()
    assert pristine == original
    assert current != original


def test_unknown_filter_leaves_state_untouched(engine, quad_buffer):
    engine.set_source(quad_buffer)
    engine.select_filter('dreamy')
    before = engine.recompute()

    with pytest.raises(UnknownFilter):
        engine.select_filter('psychedelic')

    assert engine.current_filter is FilterKind.DREAMY
    assert engine.current_result is before


def test_negative_blur_surfaces_error(engine, quad_buffer):
    engine.set_source(quad_buffer)
    with pytest.raises(ParamOutOfRange):
        engine.set_adjustment('blur', -2)
    assert engine.params.blur == 0


def test_set_adjustment_clamps(engine, quad_buffer):
    engine.set_source(quad_buffer)
    params = engine.set_adjustment('saturation', 250)
    assert params.saturation == 100


# Reset and compare


def test_reset_returns_pristine(engine, random_buffer):
    engine.set_source(random_buffer)
    engine.select_filter('neon')
    engine.set_adjustment('contrast', 45)
    engine.recompute()

    result = engine.reset()

    assert result.buffer == random_buffer
    assert engine.current_filter is FilterKind.NONE
    assert engine.params == AdjustmentParams()


def test_reset_then_recompute_equals_pristine(engine, random_buffer):
    engine.set_source(random_buffer)
    engine.select_filter('oil')
    engine.set_adjustment('blur', 1)
    engine.set_adjustment('brightness', -40)
    engine.recompute()

    engine.reset()
    assert engine.recompute().buffer == random_buffer


def test_reset_without_source_raises(engine):
    with pytest.raises(InvalidSource):
        engine.reset()


def test_compare_returns_pristine_and_current(engine, quad_buffer):
    engine.set_source(quad_buffer)
    engine.select_filter('dramatic')
    result = engine.recompute()

    pristine, current = engine.compare()
    assert pristine == quad_buffer
    assert current is result.buffer


# Debounce and concurrency


def test_rapid_changes_coalesce_into_one_run(engine, quad_buffer):
    results = []
    engine.set_source(quad_buffer)
    engine.on_result = results.append

    for value in (10, 20, 30, 40, 50):
        engine.set_adjustment('brightness', value)

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 1
    assert len(results) == 1
    assert results[0].params.brightness == 50
    assert engine.current_result is results[0]


def test_select_filter_runs_in_background(engine, quad_buffer):
    engine.set_source(quad_buffer)
    engine.select_filter('vintage')

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 1
    assert engine.current_result.filter_kind is FilterKind.VINTAGE


def test_set_source_cancels_pending_run(engine, quad_buffer):
    replacement = _other_buffer()
    engine.set_source(quad_buffer)
    engine.set_adjustment('brightness', 50)
    engine.set_source(replacement)

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 0
    assert engine.current_result.buffer == replacement


def test_reset_cancels_pending_run(engine, quad_buffer):
    engine.set_source(quad_buffer)
    engine.set_adjustment('contrast', 80)
    engine.reset()

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 0
    assert engine.current_result.buffer == quad_buffer


class _BlockingPipeline:
    """Wraps run_pipeline so the first call waits until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def __call__(self, pristine, kind, params):
        self.calls += 1
        if self.calls == 1:
            self.started.set()
            self.release.wait(timeout=5)
        return run_pipeline(pristine, kind, params)


def test_stale_result_never_overwrites_new_source(monkeypatch, quad_buffer):
    blocking = _BlockingPipeline()
    monkeypatch.setattr(filter_engine, 'run_pipeline', blocking)
    engine = FilterEngine(debounce_interval=0.05)
    replacement = _other_buffer()

    engine.set_source(quad_buffer)
    engine.select_filter('neon')
    assert blocking.started.wait(timeout=5)

    engine.set_source(replacement)
    blocking.release.set()

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 1
    assert engine.current_result.buffer == replacement
    assert engine.current_result.filter_kind is FilterKind.NONE
    engine.close()


def test_request_while_busy_is_deferred_to_latest_params(monkeypatch, quad_buffer):
    blocking = _BlockingPipeline()
    monkeypatch.setattr(filter_engine, 'run_pipeline', blocking)
    engine = FilterEngine(debounce_interval=0.05)

    engine.set_source(quad_buffer)
    engine.select_filter('watercolor')
    assert blocking.started.wait(timeout=5)

    engine.set_adjustment('brightness', 10)
    engine.set_adjustment('brightness', 30)
    assert engine.busy
    blocking.release.set()

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 2
    assert engine.current_result.params.brightness == 30
    assert engine.current_result.filter_kind is FilterKind.WATERCOLOR
    engine.close()


def test_request_during_recompute_is_rendered_afterwards(monkeypatch, quad_buffer):
    blocking = _BlockingPipeline()
    monkeypatch.setattr(filter_engine, 'run_pipeline', blocking)
    engine = FilterEngine(debounce_interval=0.02)
    engine.set_source(quad_buffer)

    worker = threading.Thread(target=engine.recompute)
    worker.start()
    assert blocking.started.wait(timeout=5)

    engine.set_adjustment('brightness', 40)
    # Let the debounce timer fire while the synchronous run is in flight
    time.sleep(0.2)
    assert engine.busy
    blocking.release.set()
    worker.join(timeout=5)

    assert engine.wait_idle(timeout=5)
    assert engine.run_count == 2
    assert engine.current_result.params.brightness == 40
    engine.close()


def test_background_failure_keeps_last_good_result(monkeypatch, quad_buffer):
    def failing(pristine, kind, params):
        raise RuntimeError("boom")

    monkeypatch.setattr(filter_engine, 'run_pipeline', failing)
    engine = FilterEngine(debounce_interval=0.05)
    identity = engine.set_source(quad_buffer)

    engine.select_filter('sketch')

    assert engine.wait_idle(timeout=5)
    assert isinstance(engine.last_error, RuntimeError)
    assert engine.current_result is identity
    assert not engine.busy
    engine.close()
