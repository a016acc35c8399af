"""
Per-user analysis state: the diagnosis on screen, the image it came from,
and whether a request is running or has failed.

Requests are tagged with increasing tokens. Only the latest token may change
what is shown, so a slow reply for an image the user already replaced is
dropped instead of overwriting the newer result.
"""
import logging
from typing import Callable, Optional

from .models import DiagnosisRecord
from .vision import DiagnosisError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong while analyzing the image. Please try again."

Analyzer = Callable[[str], DiagnosisRecord]


class AnalysisSession:
    def __init__(self):
        self.current: Optional[DiagnosisRecord] = None
        self.selected_image: Optional[str] = None
        self.is_loading = False
        self.error: Optional[str] = None
        self.processed_upload: Optional[str] = None
        self._latest_token = 0

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def begin(self, image: str) -> int:
        self._latest_token += 1
        self.selected_image = image
        self.current = None
        self.error = None
        self.is_loading = True
        return self._latest_token

    def complete(self, token: int, record: DiagnosisRecord) -> bool:
        if token != self._latest_token:
            logger.info("Discarding stale diagnosis %s (request %d, latest %d)", record.id, token, self._latest_token)
            return False
        self.current = record
        self.error = None
        self.is_loading = False
        return True

    def fail(self, token: int) -> bool:
        if token != self._latest_token:
            logger.info("Discarding failure of stale request %d (latest %d)", token, self._latest_token)
            return False
        self.current = None
        self.error = GENERIC_ERROR_MESSAGE
        self.is_loading = False
        return True

    def run(self, analyze: Analyzer, image: str) -> bool:
        token = self.begin(image)
        try:
            record = analyze(image)
        except DiagnosisError as e:
            logger.warning("Diagnosis request %d failed: %s", token, e)
            return self.fail(token)
        return self.complete(token, record)

    def is_processed(self, upload_id: str) -> bool:
        return upload_id == self.processed_upload

    def run_upload(self, upload_id: str, analyze: Analyzer, image: str) -> bool:
        """
        Analyze an uploaded file once. The upload is marked handled only here,
        when its request is issued, so a file rejected earlier (for example
        before an API key was configured) is picked up again on the next run.
        """
        if self.is_processed(upload_id):
            return False
        self.processed_upload = upload_id
        return self.run(analyze, image)

    def retry(self, analyze: Analyzer) -> bool:
        if not self.selected_image:
            return False
        return self.run(analyze, self.selected_image)

    def select(self, record: DiagnosisRecord) -> None:
        # Invalidates any request still running
        self._latest_token += 1
        self.current = record
        self.selected_image = record.image_url
        self.error = None
        self.is_loading = False

    def reset(self) -> None:
        self._latest_token += 1
        self.processed_upload = None
        self.current = None
        self.selected_image = None
        self.error = None
        self.is_loading = False

    def apply_notes(self, record_id: str, notes: str) -> bool:
        if self.current is None or self.current.id != record_id:
            return False
        self.current = self.current.with_notes(notes)
        return True

    def record_for_saving(self) -> Optional[DiagnosisRecord]:
        if self.current is None:
            return None
        return self.current.with_image(self.selected_image)
