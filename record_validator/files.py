"""
Uploaded file validation.

FileValidator checks an upload descriptor, the mapping a web framework builds
for one submitted file:

    {"name": "photo.jpg", "type": "image/jpeg", "tmp_name": "/tmp/upl_x1",
     "error": 0, "size": 20480}

"error" holds one of the UploadError status codes. Committing the temporary
file to its final location is delegated to a committer callable so hosts can
plug in their own storage.
"""

import logging
import os
import shutil
from enum import IntEnum
from typing import Any, Callable, Iterable, Mapping, Optional

from .checks import BaseValidator, check

logger = logging.getLogger(__name__)


class UploadError(IntEnum):
    """Upload status codes reported in the descriptor's "error" field."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


def commit_upload(source: str, destination: str) -> bool:
    """Move an uploaded temporary file to its destination."""
    if not os.path.isfile(source):
        return False
    shutil.move(source, destination)
    return True


class FileValidator(BaseValidator):
    """Validates one upload descriptor with chainable checks."""

    def __init__(
        self,
        file: Optional[Mapping[str, Any]],
        label: str,
        messages: Any = None,
        committer: Callable[[str, str], bool] = commit_upload,
    ):
        """
        Args:
            file: Upload descriptor (None is treated as an empty descriptor)
            label: Field label used in error messages
            messages: Flat message catalog, MessageFormatter, or None
            committer: Callable moving (source, destination); returns False
                or raises OSError/ValueError on failure
        """
        super().__init__(label, messages)
        self.file = dict(file or {})
        self.committer = committer

    def is_uploaded(self) -> bool:
        """
        Return True if a file was submitted, whether or not it arrived intact.

        Distinguishes "nothing submitted" from "submitted but failed"; it does
        not record errors and is not available to rule sets.
        """
        if self.file.get("error") is None:
            return False
        return self.file["error"] != UploadError.NO_FILE

    @property
    def extension(self) -> str:
        """Lowercase extension of the client file name, without the dot."""
        _, ext = os.path.splitext(str(self.file.get("name") or ""))
        return ext[1:].lower()

    @check("isOk")
    def is_ok(self):
        status = self.file.get("error")
        if status is None:
            self._add_error("isRequired")
            return self
        if status != UploadError.OK:
            code = int(status) if isinstance(status, int) else status
            self._add_error(f"isOk:{code}")
        return self

    @check("isMimeType")
    def is_mime_type(self, types: Iterable[str]):
        mime_type = self.file.get("type")
        if (
            mime_type is None
            or not isinstance(types, (list, tuple, set, frozenset))
            or mime_type not in types
        ):
            self._add_error("isMimeType")
        return self

    @check("move")
    def move(self, path: str):
        source = self.file.get("tmp_name")
        if not source or not isinstance(path, (str, os.PathLike)):
            self._add_error("move")
            return self
        try:
            moved = self.committer(source, path)
        except (OSError, ValueError) as e:
            logger.warning(
                f"Failed to commit upload: {e}",
                extra={"source": source, "destination": path},
            )
            moved = False
        if not moved:
            self._add_error("move")
        return self
