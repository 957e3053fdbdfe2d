"""
Unit tests for the frame polling loop.
"""
import threading
import time
import numpy as np
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / "src"))

from asl_learn.classifier import NO_SIGNAL, Prediction
from asl_learn.config import RetryPolicy
from asl_learn.errors import FrameUnavailable, NoHandDetected
from asl_learn.polling import FramePoller


class TestFramePoller:
    """Test cases for FramePoller."""

    @pytest.fixture
    def frame(self):
        return np.zeros((120, 160, 3), dtype=np.uint8)

    @pytest.fixture
    def classifier(self):
        classifier = Mock()
        classifier.classify.return_value = Prediction("A", {"A": 0.9})
        return classifier

    def test_poll_with_frame_classifies_and_reports(self, frame, classifier):
        source = Mock()
        source.get_current_frame.return_value = frame
        on_result = Mock()
        poller = FramePoller(source, classifier, on_result)

        assert poller.poll_once() is True

        classifier.classify.assert_called_once_with(frame)
        result = on_result.call_args.args[0]
        assert result.label == "A"
        assert poller.misses == 0

    def test_poll_without_frame_skips_classifier(self, classifier):
        """
        TEST: What happens when the camera has no frame yet?

        CHECKS: Classifier not called, no result reported, miss counted.
        """
        source = Mock()
        source.get_current_frame.return_value = None
        on_result = Mock()
        poller = FramePoller(source, classifier, on_result)

        assert poller.poll_once() is False
        assert poller.poll_once() is False

        classifier.classify.assert_not_called()
        on_result.assert_not_called()
        assert poller.misses == 2

    def test_frame_unavailable_counts_as_miss(self, classifier):
        source = Mock()
        source.get_current_frame.side_effect = FrameUnavailable("camera warming up")
        poller = FramePoller(source, classifier, Mock())

        assert poller.poll_once() is False
        assert poller.misses == 1

    def test_frame_resets_miss_counter(self, frame, classifier):
        source = Mock()
        source.get_current_frame.side_effect = [None, None, frame]
        poller = FramePoller(source, classifier, Mock())

        poller.poll_once()
        poller.poll_once()
        assert poller.misses == 2
        poller.poll_once()
        assert poller.misses == 0

    def test_missing_callback_follows_retry_policy(self, classifier):
        source = Mock()
        source.get_current_frame.return_value = None
        on_missing = Mock()
        poller = FramePoller(source, classifier, Mock(), retry=RetryPolicy(warn_every=3),
                             on_missing=on_missing)

        for _ in range(7):
            poller.poll_once()

        assert [c.args[0] for c in on_missing.call_args_list] == [3, 6]

    def test_classifier_failure_reports_no_signal(self, frame):
        source = Mock()
        source.get_current_frame.return_value = frame
        classifier = Mock()
        classifier.classify.side_effect = NoHandDetected("No hand detected")
        on_result = Mock()
        poller = FramePoller(source, classifier, on_result)

        assert poller.poll_once() is True

        result = on_result.call_args.args[0]
        assert result.label == NO_SIGNAL
        assert result.confidence == 0.0

    def test_next_delay_uses_backoff(self, classifier):
        source = Mock()
        source.get_current_frame.return_value = None
        poller = FramePoller(source, classifier, Mock(), interval=0.5,
                             retry=RetryPolicy(backoff=2.0, max_delay=3.0))

        assert poller.next_delay() == 0.5
        poller.poll_once()
        assert poller.next_delay() == 1.0
        poller.poll_once()
        poller.poll_once()
        assert poller.next_delay() == 3.0

    def test_thread_polls_until_stopped(self, frame, classifier):
        source = Mock()
        source.get_current_frame.return_value = frame
        got_results = threading.Event()
        results = []

        def on_result(result):
            results.append(result)
            if len(results) >= 3:
                got_results.set()

        poller = FramePoller(source, classifier, on_result, interval=0.01)
        poller.start()
        poller.start()  # no second thread
        try:
            assert got_results.wait(5.0)
            assert poller.is_running
        finally:
            poller.stop()

        assert not poller.is_running
        count = len(results)
        threading.Event().wait(0.05)
        assert len(results) == count

    def test_loop_survives_callback_errors(self, frame, classifier):
        source = Mock()
        source.get_current_frame.return_value = frame
        calls = []
        done = threading.Event()

        def on_result(result):
            calls.append(result)
            if len(calls) >= 2:
                done.set()
            raise RuntimeError("subscriber blew up")

        poller = FramePoller(source, classifier, on_result, interval=0.01)
        poller.start()
        try:
            assert done.wait(5.0)
        finally:
            poller.stop()

    def test_gives_up_after_max_misses(self, classifier):
        source = Mock()
        source.get_current_frame.return_value = None
        exhausted = threading.Event()
        poller = FramePoller(source, classifier, Mock(), interval=0.01,
                             retry=RetryPolicy(max_misses=3), on_exhausted=exhausted.set)

        poller.start()
        try:
            assert exhausted.wait(5.0)
        finally:
            poller.stop()

        assert poller.misses == 3
        classifier.classify.assert_not_called()

    def test_thread_survives_long_outage_with_backoff(self, classifier):
        """
        TEST: Does the polling thread keep running through a very long outage?

        WHY: With backoff enabled the miss counter keeps growing while the
        camera is gone; the loop must keep retrying at the capped delay.

        CHECKS: More than 1100 consecutive misses, thread still alive.
        """
        source = Mock()
        source.get_current_frame.return_value = None
        poller = FramePoller(source, classifier, Mock(), interval=1e-4,
                             retry=RetryPolicy(backoff=2.0, max_delay=1e-4))

        poller.start()
        try:
            deadline = time.monotonic() + 30.0
            while poller.misses <= 1100 and time.monotonic() < deadline:
                time.sleep(0.01)

            assert poller.misses > 1100
            assert poller.is_running
        finally:
            poller.stop()

    def test_thread_survives_retry_delay_errors(self, classifier):
        source = Mock()
        source.get_current_frame.return_value = None
        poller = FramePoller(source, classifier, Mock(), interval=0.01)
        poller.next_delay = Mock(side_effect=OverflowError("Numerical result out of range"))

        poller.start()
        try:
            deadline = time.monotonic() + 5.0
            while poller.polls < 3 and time.monotonic() < deadline:
                time.sleep(0.01)

            assert poller.polls >= 3
            assert poller.is_running
        finally:
            poller.stop()

    def test_stop_without_start_is_noop(self, classifier):
        poller = FramePoller(Mock(), classifier, Mock())
        poller.stop()
        poller.join()
        assert not poller.is_running
