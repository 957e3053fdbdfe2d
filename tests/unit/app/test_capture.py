"""
Unit tests for the camera frame source.
"""
import numpy as np
import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / "src"))

from asl_learn.capture import CameraFrameSource, mirror_frame, setup_camera
from asl_learn.errors import CameraError


def gradient_frame():
    frame = np.zeros((4, 6, 3), dtype=np.uint8)
    frame[:, :, 0] = np.arange(6, dtype=np.uint8)
    return frame


class TestSetupCamera:

    @patch("asl_learn.capture.cv2.VideoCapture")
    def test_unavailable_camera(self, mock_capture):
        mock_capture.return_value.isOpened.return_value = False

        with pytest.raises(CameraError, match="camera device 3"):
            setup_camera(3)

    @patch("asl_learn.capture.cv2.VideoCapture")
    def test_configures_resolution(self, mock_capture):
        cap = mock_capture.return_value
        cap.isOpened.return_value = True

        assert setup_camera(0, width=320, height=240) is cap
        assert cap.set.call_count == 3


class TestCameraFrameSource:
    """Test cases for CameraFrameSource."""

    @pytest.fixture
    def capture(self):
        cap = MagicMock()
        cap.read.return_value = (True, gradient_frame())
        return cap

    def test_no_frame_before_first_read(self, capture):
        source = CameraFrameSource(capture=capture)

        assert source.get_current_frame() is None

    def test_read_once_mirrors_frame(self, capture):
        """
        TEST: Is the stored frame mirrored like a selfie preview?

        CHECKS: Left/right swapped, counters updated.
        """
        source = CameraFrameSource(capture=capture)

        assert source.read_once() is True

        frame = source.get_current_frame()
        np.testing.assert_array_equal(frame, mirror_frame(gradient_frame()))
        assert frame[0, 0, 0] == 5
        assert source.frames_read == 1

    def test_read_once_without_mirror(self, capture):
        source = CameraFrameSource(mirror=False, capture=capture)
        source.read_once()

        np.testing.assert_array_equal(source.get_current_frame(), gradient_frame())

    def test_failed_read_keeps_previous_frame(self, capture):
        source = CameraFrameSource(capture=capture)
        source.read_once()
        capture.read.return_value = (False, None)

        assert source.read_once() is False
        assert source.read_failures == 1
        assert source.get_current_frame() is not None

    def test_current_frame_is_a_copy(self, capture):
        source = CameraFrameSource(capture=capture)
        source.read_once()

        frame = source.get_current_frame()
        frame[:] = 255

        assert source.get_current_frame()[0, 0, 0] == 5

    def test_start_and_stop(self, capture):
        capture.get.return_value = 640
        source = CameraFrameSource(capture=capture)

        with source:
            assert source.is_running

        assert not source.is_running
        capture.release.assert_called_once()
        assert source.get_current_frame() is None
