"""Tests for devocal.worker (message boundary and background worker)."""

import threading

import numpy as np
import pytest

import devocal.worker as worker_mod
from devocal.worker import (
    DEFAULT_ERROR_MESSAGE,
    TaskStatus,
    VocalRemovalWorker,
    error_response,
    handle_message,
)
from devocal.errors import InvalidInput


def _message(frames=4096, sample_rate=44100, **extra):
    t = np.arange(frames) / sample_rate
    tone = np.sin(2 * np.pi * 1000.0 * t).astype(np.float32)
    msg = {"leftChannel": tone, "rightChannel": tone.copy(), "sampleRate": sample_rate}
    msg.update(extra)
    return msg


# ---------------------------------------------------------------------------
# handle_message
# ---------------------------------------------------------------------------


class TestHandleMessage:
    def test_success_response(self):
        response = handle_message(_message())
        assert set(response) == {"leftChannel", "rightChannel"}
        assert response["leftChannel"].shape == (4096,)
        assert response["rightChannel"].dtype == np.float32

    def test_accepts_plain_lists(self):
        response = handle_message(
            {"leftChannel": [0.5] * 3000, "rightChannel": [0.25] * 3000, "sampleRate": 48000}
        )
        assert len(response["leftChannel"]) == 3000

    def test_options(self):
        response = handle_message(_message(options={"fftSize": 1024, "attenuation": 0.5}))
        assert "error" not in response

    def test_unknown_option(self):
        response = handle_message(_message(options={"fft": 1024}))
        assert response["error"].startswith("InvalidParameter")
        assert "Unknown option" in response["error"]

    def test_length_mismatch(self):
        msg = _message()
        msg["rightChannel"] = msg["rightChannel"][:-1]
        response = handle_message(msg)
        assert set(response) == {"error"}
        assert response["error"].startswith("InvalidInput")

    def test_missing_field(self):
        msg = _message()
        del msg["sampleRate"]
        response = handle_message(msg)
        assert "sampleRate" in response["error"]

    @pytest.mark.parametrize("sr", [0, -8000])
    def test_bad_sample_rate(self, sr):
        msg = _message()
        msg["sampleRate"] = sr
        assert handle_message(msg)["error"].startswith("InvalidParameter")

    def test_not_a_mapping(self):
        response = handle_message([1, 2, 3])
        assert response["error"].startswith("InvalidInput")

    def test_cancelled(self):
        ev = threading.Event()
        ev.set()
        response = handle_message(_message(), cancel_event=ev)
        assert response["error"].startswith("ProcessingCancelled")

    def test_unexpected_error_without_message(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError()

        monkeypatch.setattr(worker_mod, "process", boom)
        assert handle_message(_message()) == {"error": DEFAULT_ERROR_MESSAGE}

    def test_error_response_format(self):
        assert error_response(InvalidInput("bad")) == {"error": "InvalidInput: bad"}
        assert error_response(KeyError("x")) == {"error": "'x'"}


# ---------------------------------------------------------------------------
# VocalRemovalWorker
# ---------------------------------------------------------------------------


class TestWorker:
    def test_submit_and_result(self):
        with VocalRemovalWorker() as w:
            task_id = w.submit(_message())
            response = w.result(task_id, timeout=30)
            assert response["leftChannel"].shape == (4096,)
            assert w.get_status(task_id) is TaskStatus.COMPLETED

    def test_callback_called_once(self):
        received = []
        done = threading.Event()

        def on_response(response):
            received.append(response)
            done.set()

        with VocalRemovalWorker() as w:
            task_id = w.submit(_message(), callback=on_response)
            assert done.wait(30)
            w.result(task_id, timeout=30)
        assert len(received) == 1
        assert "leftChannel" in received[0]

    def test_failure_status(self):
        with VocalRemovalWorker() as w:
            task_id = w.submit({"leftChannel": [0.0], "sampleRate": 44100})
            response = w.result(task_id, timeout=30)
            assert "error" in response
            assert w.get_status(task_id) is TaskStatus.FAILED

    def test_callback_error_does_not_lose_response(self):
        def bad_callback(response):
            raise ValueError("callback failed")

        with VocalRemovalWorker() as w:
            task_id = w.submit(_message(), callback=bad_callback)
            assert "leftChannel" in w.result(task_id, timeout=30)

    def test_cancel_queued_task(self, monkeypatch):
        gate = threading.Event()
        started = threading.Event()
        real_handle = worker_mod.handle_message

        def gated_handle(message, cancel_event=None, parallel=False):
            if message.get("block"):
                started.set()
                gate.wait(30)
            return real_handle(
                {k: v for k, v in message.items() if k != "block"},
                cancel_event=cancel_event,
                parallel=parallel,
            )

        monkeypatch.setattr(worker_mod, "handle_message", gated_handle)
        with VocalRemovalWorker(max_workers=1) as w:
            first = w.submit(_message(block=True))
            assert started.wait(30)
            second = w.submit(_message())
            assert w.get_status(second) is TaskStatus.PENDING
            assert w.cancel(second) is True
            gate.set()
            assert "leftChannel" in w.result(first, timeout=30)
            response = w.result(second, timeout=30)
        assert response["error"].startswith("ProcessingCancelled")
        assert w.get_status(second) is TaskStatus.CANCELLED

    def test_cancel_finished_or_unknown(self):
        with VocalRemovalWorker() as w:
            task_id = w.submit(_message())
            w.result(task_id, timeout=30)
            assert w.cancel(task_id) is False
            assert w.cancel("nope") is False
            assert w.get_status("nope") is None

    def test_parallel_channels(self):
        with VocalRemovalWorker(parallel_channels=True) as w:
            response = w.result(w.submit(_message()), timeout=30)
        assert "leftChannel" in response

    def test_submit_after_shutdown(self):
        w = VocalRemovalWorker()
        w.shutdown()
        with pytest.raises(RuntimeError, match="shutting down"):
            w.submit(_message())

    def test_unknown_result_raises(self):
        with VocalRemovalWorker() as w:
            with pytest.raises(KeyError):
                w.result("missing")

    def test_finished_tasks_are_forgotten(self):
        with VocalRemovalWorker(max_finished_tasks=2) as w:
            ids = []
            for _ in range(5):
                task_id = w.submit(_message())
                w.result(task_id, timeout=30)
                ids.append(task_id)
            assert len(w._tasks) == 2
            assert w.get_status(ids[0]) is None
            with pytest.raises(KeyError):
                w.result(ids[0])
            assert w.get_status(ids[-1]) is TaskStatus.COMPLETED
            assert "leftChannel" in w.result(ids[-1])

    def test_request_released_after_completion(self):
        with VocalRemovalWorker() as w:
            task_id = w.submit(_message())
            w.result(task_id, timeout=30)
            assert w._tasks[task_id].message is None

    def test_bad_max_finished_tasks(self):
        with pytest.raises(ValueError, match="max_finished_tasks"):
            VocalRemovalWorker(max_finished_tasks=0)

    def test_rejected_submit_registers_nothing(self, monkeypatch):
        w = VocalRemovalWorker()

        def reject(*args, **kwargs):
            raise RuntimeError("cannot schedule new futures after shutdown")

        monkeypatch.setattr(w._executor, "submit", reject)
        with pytest.raises(RuntimeError, match="cannot schedule"):
            w.submit(_message())
        assert w._tasks == {}
        w.shutdown()
