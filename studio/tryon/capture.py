"""
Media acquisition for the try-on workflow.

A photo comes from exactly one of two sources: a file read fully into memory, or a live
camera stream whose current frame is grabbed only when the request is submitted. The
CaptureSession keeps the two mutually exclusive and owns the camera hardware: any stream it
replaces or resets has every track stopped.
"""

import io
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol, Union

from PIL import Image

from tryon.data_urls import encode_bytes_as_data_url
from tryon.exceptions import CameraAccessDenied

logger = logging.getLogger(__name__)

JPEG_QUALITY = 92


class CaptureState(str, Enum):
    IDLE = "idle"
    CAMERA_ACTIVE = "camera_active"
    IMAGE_READY = "image_ready"


class Track(Protocol):
    def stop(self) -> None: ...


class MediaStream(Protocol):
    def get_tracks(self) -> List[Track]: ...

    def read_frame(self) -> Image.Image: ...


class CameraSource(Protocol):
    def open(self) -> MediaStream:
        """Raises CameraAccessDenied when the device cannot be used."""
        ...


def read_file_as_data_url(path: Union[str, Path]) -> str:
    """Reads a whole image file and encodes it as a data URL. No size limit is applied."""
    path = Path(path)
    data = path.read_bytes()
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        mime_type = _sniff_image_mime(data)
    return encode_bytes_as_data_url(data, mime_type)


def _sniff_image_mime(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "", "application/octet-stream")
    except (OSError, ValueError):
        return "application/octet-stream"


def encode_frame_as_jpeg_data_url(frame: Image.Image, quality: int = JPEG_QUALITY) -> str:
    """Serializes a frame at its native resolution to a JPEG data URL."""
    if frame.mode != "RGB":
        frame = frame.convert("RGB")
    buffer = io.BytesIO()
    frame.save(buffer, format="JPEG", quality=quality)
    return encode_bytes_as_data_url(buffer.getvalue(), "image/jpeg")


class OpenCVVideoTrack:
    def __init__(self, capture):
        self._capture = capture
        self.stopped = False

    def stop(self) -> None:
        if not self.stopped:
            self._capture.release()
            self.stopped = True


class OpenCVStream:
    def __init__(self, capture):
        self._capture = capture
        self._track = OpenCVVideoTrack(capture)

    def get_tracks(self) -> List[Track]:
        return [self._track]

    def read_frame(self) -> Image.Image:
        import cv2

        if self._track.stopped:
            raise CameraAccessDenied("Camera stream has been stopped")
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CameraAccessDenied("Could not read a frame from the camera")
        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))


class OpenCVCamera:
    """Webcam source backed by ``cv2.VideoCapture``."""

    def __init__(self, device_index: int = 0):
        self.device_index = device_index

    def open(self) -> MediaStream:
        import cv2

        capture = cv2.VideoCapture(self.device_index)
        if not capture.isOpened():
            capture.release()
            raise CameraAccessDenied(f"Camera {self.device_index} could not be opened")
        return OpenCVStream(capture)


class CaptureSession:
    def __init__(self, camera: Optional[CameraSource] = None):
        self.camera = camera
        self.state = CaptureState.IDLE
        self.image_data: Optional[str] = None
        self.stream: Optional[MediaStream] = None

    @property
    def has_source(self) -> bool:
        return self.state in (CaptureState.CAMERA_ACTIVE, CaptureState.IMAGE_READY)

    def load_file(self, path: Union[str, Path]) -> str:
        """Holds the file's image; an active camera is released first."""
        image_data = read_file_as_data_url(path)
        self._stop_stream()
        self.image_data = image_data
        self.state = CaptureState.IMAGE_READY
        logger.info(f"Photo loaded from {path}")
        return image_data

    def enable_camera(self) -> Optional[str]:
        """
        Opens the camera. Returns None on success, or a user-facing warning when access is
        denied; in that case the current state is left as it was.
        """
        if self.camera is None:
            return "No camera available on this device."
        try:
            stream = self.camera.open()
        except CameraAccessDenied as e:
            logger.warning(f"Camera access denied: {e}")
            return "Please allow camera access to use this feature."

        self._stop_stream()
        self.stream = stream
        self.image_data = None
        self.state = CaptureState.CAMERA_ACTIVE
        logger.info("Camera enabled")
        return None

    def snapshot(self) -> Optional[str]:
        """The image to submit: the current camera frame, or the loaded file."""
        if self.state == CaptureState.CAMERA_ACTIVE and self.stream is not None:
            return encode_frame_as_jpeg_data_url(self.stream.read_frame())
        return self.image_data

    def reset(self) -> None:
        self._stop_stream()
        self.image_data = None
        self.state = CaptureState.IDLE

    def _stop_stream(self) -> None:
        stream, self.stream = self.stream, None
        if stream is None:
            return
        for track in stream.get_tracks():
            try:
                track.stop()
            except Exception as e:
                logger.error(f"Failed to stop camera track: {e}")
