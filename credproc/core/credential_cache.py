import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from credproc.exceptions.cache_exceptions import CacheWriteException
from credproc.models.credential_document import CredentialDocument


class CredentialCache:
    def __init__(self, path: str, safety_margin: int = 600):
        self.path = Path(path)
        self.safety_margin = safety_margin

    def load(self) -> Optional[CredentialDocument]:
        """Read the cached document, or None when it is missing or unreadable."""
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            logger.debug(f"No usable credential cache at {self.path}: {e}")
            return None

        try:
            return CredentialDocument.model_validate_json(raw)
        except ValidationError as e:
            logger.info(f"Discarding corrupt credential cache {self.path}: {e.error_count()} errors")
            return None

    def is_valid(self, doc: CredentialDocument, now: Optional[datetime] = None) -> bool:
        if doc.expiration is None:
            return False

        now = now or datetime.now(timezone.utc)
        remaining_seconds = (doc.expiration - now).total_seconds()
        if remaining_seconds <= self.safety_margin:
            logger.info(
                f"Remaining seconds to expiry is too small ({remaining_seconds:.0f}), "
                "will get new credentials."
            )
            return False
        return True

    def store(self, doc: CredentialDocument) -> None:
        """
        Persist the document, readable and writable by the owner only.
        Args:
            doc (CredentialDocument): The document to write.
        """
        directory = self.path.parent
        try:
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)

            # mkstemp creates the file with mode 0600
            fd, tmp = tempfile.mkstemp(prefix=self.path.name + ".", dir=str(directory))
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(doc.to_json())
                os.replace(tmp, self.path)
            except OSError:
                os.unlink(tmp)
                raise
        except OSError as e:
            raise CacheWriteException(str(self.path), e)
