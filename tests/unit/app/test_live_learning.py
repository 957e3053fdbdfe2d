"""
Unit tests for the live learning window logic.

Nothing here opens a window or a camera: drawing works on plain numpy
frames and the frame source is a mock.
"""
import numpy as np
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock, patch

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / "src"))

from asl_learn.classifier import Classification
from asl_learn.config import LearningConfig, SpellingConfig
from asl_learn.live_learning import LiveLearningApp, build_parser, main


class TestLiveLearningApp:
    """Test cases for LiveLearningApp."""

    @pytest.fixture
    def app(self):
        frame_source = Mock()
        frame_source.get_current_frame.return_value = None
        app = LiveLearningApp(
            Mock(),
            frame_source=frame_source,
            learning_config=LearningConfig(poll_interval=60.0),
            spelling_config=SpellingConfig(poll_interval=60.0),
        )
        yield app
        app.spelling.stop()
        app.spelling.poller.join()
        app.session.close()

    @pytest.fixture
    def frame(self):
        return np.zeros((480, 640, 3), dtype=np.uint8)

    def test_idle_banner(self, app, frame):
        assert app.banner == "Press L to start learning"

        out = app._draw_ui(frame)

        assert out.shape == (480, 640, 3)
        assert out.any()

    def test_learning_keys(self, app):
        """
        TEST: Do L and X start and stop the lesson?

        CHECKS: Snapshot pushed over the event bus, banner follows the state.
        """
        assert app._handle_keypress(ord('l')) is True
        assert app.snapshot.active is True
        assert app.snapshot.target_letter == "A"
        assert app.banner == ""

        assert app._handle_keypress(ord('x')) is True
        assert app.snapshot.active is False
        assert app.banner == "Press L to start learning"

    def test_quit_key(self, app):
        assert app._handle_keypress(ord('q')) is False

    def test_unknown_key_is_ignored(self, app):
        assert app._handle_keypress(255) is True
        assert app.snapshot.active is False

    def test_spelling_toggle_stops_lesson(self, app):
        app.start_learning()

        app._handle_keypress(ord('t'))

        assert app.spelling_active is True
        assert app.snapshot.active is False
        assert app.banner == ""

        app._handle_keypress(ord('t'))
        assert app.spelling_active is False

    def test_learning_stops_spelling(self, app):
        app.toggle_spelling()

        app.start_learning()

        assert app.spelling.active is False
        assert app.spelling_active is False
        assert app.snapshot.active is True

    def test_spelled_text_follows_events(self, app):
        app.toggle_spelling()

        app.spelling.submit(Classification(label="H", confidence=0.95))
        app.spelling.submit(Classification(label="I", confidence=0.95))
        assert app.spelled_text == "HI"

        app._handle_keypress(ord('c'))
        assert app.spelled_text == ""

    def test_feedback_is_drawn(self, app, frame):
        app.start_learning()
        app.session.submit_classification("B", 0.9)

        assert app.snapshot.feedback_visible is True
        out = app._draw_ui(frame)
        assert out.shape == frame.shape
        assert app.snapshot.feedback_text == "Try again"

    def test_spelling_mode_is_drawn(self, app, frame):
        app.toggle_spelling()

        out = app._draw_ui(frame)

        assert out.any()

    def test_missing_frames_are_reported(self, app):
        app.start_learning()

        app.session._on_frame_missing(20)

        assert app.missing_frames == 20

    def test_completion_banner(self, app):
        app.start_learning()
        for _ in range(25):
            app.session.advance()

        app.session.advance()

        assert app.snapshot.completed is True
        assert app.banner == "Congratulations! Alphabet complete."

    def test_reference_image_lookup(self, tmp_path):
        reference = np.full((50, 50, 3), 200, dtype=np.uint8)
        with patch("asl_learn.live_learning.cv2.imread", return_value=reference) as imread:
            (tmp_path / "asl_a_sign.png").write_bytes(b"")
            app = LiveLearningApp(Mock(), frame_source=Mock(), reference_dir=str(tmp_path))

            assert app._reference_image("A") is reference
            assert app._reference_image("A") is reference
            assert app._reference_image("B") is None

        imread.assert_called_once()

    def test_run_loop_quits_on_q(self, app):
        with patch("asl_learn.live_learning.cv2") as mock_cv2:
            mock_cv2.waitKey.side_effect = [ord('l'), ord('q')]
            app._draw_ui = Mock(side_effect=lambda f: f)

            app.run()

        app.frame_source.start.assert_called_once()
        app.frame_source.stop.assert_called_once()
        mock_cv2.imshow.assert_called_once()
        mock_cv2.destroyAllWindows.assert_called_once()
        assert app.session.snapshot().active is False


class TestMain:

    def test_parser_defaults(self):
        args = build_parser().parse_args(["--model", "model.pth"])

        assert args.camera == 0
        assert args.threshold == 0.5
        assert args.confirm_delay == 1.0
        assert args.poll_interval == 1.0
        assert args.max_misses is None

    def test_missing_model(self, tmp_path):
        assert main(["--model", str(tmp_path / "missing.pth")]) == 1

    def test_invalid_threshold(self, tmp_path):
        assert main(["--model", str(tmp_path / "missing.pth"), "--threshold", "1.5"]) == 2
