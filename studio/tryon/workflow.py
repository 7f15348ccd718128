"""
The try-on page as a state machine: pick a photo or open the camera, choose a category, type
a prompt, apply, then view or download the result.
"""

import logging
import threading
from typing import Optional

from tryon.capture import CaptureSession
from tryon.client import TryOnApiClient
from tryon.composer import Category
from tryon.exceptions import CameraAccessDenied
from tryon.outcome import FailureKind, FailureOutcome, GenerationOutcome
from tryon.presentation import ResultView, present

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please provide both an image and a prompt."
BUSY_MESSAGE = "A try-on is already being generated."


class TryOnWorkflow:
    def __init__(self, client: TryOnApiClient, capture: Optional[CaptureSession] = None):
        self.client = client
        self.capture = capture or CaptureSession()
        self.category: str = Category.MAKEUP.value
        self.prompt: str = ""
        self.result: Optional[ResultView] = None
        self.last_outcome: Optional[GenerationOutcome] = None
        self._in_flight = threading.Lock()

    @property
    def is_generating(self) -> bool:
        return self._in_flight.locked()

    @property
    def can_submit(self) -> bool:
        return bool(self.prompt.strip()) and self.capture.has_source and not self.is_generating

    def apply(self) -> ResultView:
        """
        Submits the current photo and prompt. Invalid input and a second click while a request is
        in flight are refused without touching the network. The capture state is never changed
        here, so a failed attempt can be retried straight away.
        """
        if not self.prompt.strip() or not self.capture.has_source:
            return ResultView(error=MISSING_INPUT_MESSAGE)
        if not self._in_flight.acquire(blocking=False):
            return ResultView(error=BUSY_MESSAGE)

        try:
            try:
                image = self.capture.snapshot()
            except CameraAccessDenied as e:
                logger.warning(f"Could not capture camera frame: {e}")
                outcome = FailureOutcome(kind=FailureKind.VALIDATION, message=str(e))
            else:
                if not image:
                    return ResultView(error=MISSING_INPUT_MESSAGE)
                outcome = self.client.generate(image, self.prompt.strip(), self.category)
        finally:
            self._in_flight.release()

        self.last_outcome = outcome
        view = present(outcome)
        if view.error:
            logger.warning(f"Try-on failed: {view.error}")
        else:
            self.result = view
        return view

    def reset(self) -> None:
        self.capture.reset()
        self.result = None
        self.last_outcome = None
