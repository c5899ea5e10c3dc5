"""
Resume directory - the filesystem side of resume handling (list, stat, save, delete).

A missing or unreadable directory lists as empty: uploads may legitimately not exist yet.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from backend.app.core.config import ALLOWED_RESUME_EXTENSIONS
from backend.app.core.logging_config import get_logger

logger = get_logger("services.resume_storage")


@dataclass(frozen=True)
class ResumeFile:
    filename: str
    size_bytes: int
    modified_at: datetime


def is_resume_filename(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_RESUME_EXTENSIONS


class ResumeDirectory:
    """Resume files stored flat under one directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def list_files(self) -> list[str]:
        """Resume filenames (allowed extensions only), sorted. [] if the directory is absent."""
        try:
            entries = [p for p in self.root.iterdir() if p.is_file()]
        except FileNotFoundError:
            logger.info("Upload directory %s does not exist yet", self.root)
            return []
        except OSError as e:
            logger.warning("Upload directory %s unreadable: %s", self.root, e)
            return []
        return sorted(p.name for p in entries if is_resume_filename(p.name))

    def stat_file(self, filename: str) -> ResumeFile:
        """Size and mtime. Raises OSError (e.g. FileNotFoundError) when the file can't be stat'ed."""
        st = self.path_for(filename).stat()
        return ResumeFile(
            filename=filename,
            size_bytes=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).replace(tzinfo=None),
        )

    def path_for(self, filename: str) -> Path:
        """Absolute path of a stored file. Rejects names that would escape the directory."""
        name = Path(filename).name
        if not name or name != filename or name in (".", ".."):
            raise ValueError(f"Invalid resume filename: {filename!r}")
        return (self.root / name).resolve()

    def exists(self, filename: str) -> bool:
        try:
            return self.path_for(filename).is_file()
        except ValueError:
            return False

    def save_upload(self, filename: str, content: bytes) -> Path:
        """Write content under filename, replacing any file of the same name."""
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(filename)
        path.write_bytes(content)
        logger.info("Stored resume file=%s bytes=%d", filename, len(content))
        return path

    def delete(self, filename: str) -> bool:
        """Remove a stored file. True if deleted or already absent."""
        try:
            self.path_for(filename).unlink()
            logger.info("Deleted resume file=%s", filename)
        except FileNotFoundError:
            return True
        except (OSError, ValueError) as e:
            logger.warning("Failed to delete resume %s: %s", filename, e)
            return False
        return True
