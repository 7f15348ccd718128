"""
Tests for the capture state machine with in-memory camera fakes.
"""

import base64
import io

import pytest
from unittest.mock import MagicMock, patch
from PIL import Image

from tryon.capture import (
    CaptureSession,
    CaptureState,
    OpenCVCamera,
    encode_frame_as_jpeg_data_url,
    read_file_as_data_url,
)
from tryon.data_urls import decode_data_url
from tryon.exceptions import CameraAccessDenied


class FakeTrack:
    def __init__(self):
        self.stop_calls = 0

    def stop(self):
        self.stop_calls += 1


class FakeStream:
    def __init__(self, track_count=2, size=(64, 48)):
        self.tracks = [FakeTrack() for _ in range(track_count)]
        self.size = size
        self.frames_read = 0

    def get_tracks(self):
        return self.tracks

    def read_frame(self):
        self.frames_read += 1
        return Image.new("RGB", self.size, color=(200, 120, 90))

    @property
    def all_stopped(self):
        return all(track.stop_calls >= 1 for track in self.tracks)


class FakeCamera:
    def __init__(self, deny=False):
        self.deny = deny
        self.streams = []

    def open(self):
        if self.deny:
            raise CameraAccessDenied("Permission denied")
        stream = FakeStream()
        self.streams.append(stream)
        return stream


@pytest.fixture
def photo_file(tmp_path):
    path = tmp_path / "me.png"
    Image.new("RGB", (10, 10), color="white").save(path, format="PNG")
    return path


class TestReadFile:

    def test_mime_from_extension(self, photo_file):
        data_url = read_file_as_data_url(photo_file)
        assert data_url.startswith("data:image/png;base64,")
        assert decode_data_url(data_url)[1] == photo_file.read_bytes()

    def test_mime_sniffed_when_extension_unknown(self, tmp_path):
        path = tmp_path / "upload.bin"
        buffer = io.BytesIO()
        Image.new("RGB", (4, 4)).save(buffer, format="JPEG")
        path.write_bytes(buffer.getvalue())

        assert read_file_as_data_url(path).startswith("data:image/jpeg;base64,")


class TestEncodeFrame:

    def test_jpeg_at_native_resolution(self):
        data_url = encode_frame_as_jpeg_data_url(Image.new("RGBA", (320, 240)))

        assert data_url.startswith("data:image/jpeg;base64,")
        raw = base64.b64decode(data_url.split(",", 1)[1])
        with Image.open(io.BytesIO(raw)) as img:
            assert img.size == (320, 240)
            assert img.format == "JPEG"


class TestCaptureSession:

    def test_starts_idle(self):
        session = CaptureSession(FakeCamera())
        assert session.state is CaptureState.IDLE
        assert not session.has_source
        assert session.snapshot() is None

    def test_load_file(self, photo_file):
        session = CaptureSession(FakeCamera())
        session.load_file(photo_file)

        assert session.state is CaptureState.IMAGE_READY
        assert session.snapshot() == read_file_as_data_url(photo_file)

    def test_camera_and_file_are_mutually_exclusive(self, photo_file):
        camera = FakeCamera()
        session = CaptureSession(camera)
        session.load_file(photo_file)

        assert session.enable_camera() is None
        assert session.state is CaptureState.CAMERA_ACTIVE
        assert session.image_data is None

        session.load_file(photo_file)
        assert session.state is CaptureState.IMAGE_READY
        assert session.stream is None
        assert camera.streams[0].all_stopped

    def test_reenabling_camera_stops_previous_stream(self):
        camera = FakeCamera()
        session = CaptureSession(camera)
        session.enable_camera()
        session.enable_camera()

        assert camera.streams[0].all_stopped
        assert not camera.streams[1].all_stopped

    def test_denied_camera_returns_warning_and_keeps_state(self, photo_file):
        session = CaptureSession(FakeCamera(deny=True))
        session.load_file(photo_file)

        warning = session.enable_camera()

        assert warning == "Please allow camera access to use this feature."
        assert session.state is CaptureState.IMAGE_READY
        assert session.image_data is not None

    def test_frame_is_captured_only_on_snapshot(self):
        camera = FakeCamera()
        session = CaptureSession(camera)
        session.enable_camera()
        stream = camera.streams[0]
        assert stream.frames_read == 0

        data_url = session.snapshot()

        assert stream.frames_read == 1
        assert data_url.startswith("data:image/jpeg;base64,")

    def test_reset_stops_every_track(self):
        camera = FakeCamera()
        session = CaptureSession(camera)
        session.enable_camera()

        session.reset()

        assert camera.streams[0].all_stopped
        assert session.state is CaptureState.IDLE
        assert session.stream is None
        # Safe to repeat
        session.reset()
        assert all(track.stop_calls == 1 for track in camera.streams[0].tracks)

    def test_failing_track_does_not_block_the_rest(self):
        camera = FakeCamera()
        session = CaptureSession(camera)
        session.enable_camera()
        stream = camera.streams[0]
        stream.tracks[0].stop = MagicMock(side_effect=RuntimeError("device busy"))

        session.reset()

        assert stream.tracks[1].stop_calls == 1
        assert session.state is CaptureState.IDLE


class TestOpenCVCamera:

    def test_unopened_device_is_denied(self):
        with patch("cv2.VideoCapture") as mock_capture_cls:
            mock_capture_cls.return_value.isOpened.return_value = False
            with pytest.raises(CameraAccessDenied):
                OpenCVCamera(3).open()
            mock_capture_cls.return_value.release.assert_called_once()

    def test_track_stop_releases_device_once(self):
        with patch("cv2.VideoCapture") as mock_capture_cls:
            capture = mock_capture_cls.return_value
            capture.isOpened.return_value = True
            stream = OpenCVCamera().open()

        track = stream.get_tracks()[0]
        track.stop()
        track.stop()

        capture.release.assert_called_once()
        with pytest.raises(CameraAccessDenied):
            stream.read_frame()
