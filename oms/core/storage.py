import logging
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import HTTPException, UploadFile, status

from oms.core.config import settings

logger = logging.getLogger(__name__)

MB = 1024 * 1024


@dataclass(frozen=True)
class UploadPolicy:
    area: str
    prefix: str
    max_bytes: int
    extensions: frozenset[str]
    mime_keywords: frozenset[str]
    error_message: str


DOCUMENT_POLICY = UploadPolicy(
    area="documents",
    prefix="document",
    max_bytes=5 * MB,
    extensions=frozenset({".jpeg", ".jpg", ".png", ".gif", ".pdf", ".doc", ".docx"}),
    mime_keywords=frozenset({"jpeg", "jpg", "png", "gif", "pdf", "doc", "docx", "msword"}),
    error_message="Only images, PDFs, and documents are allowed",
)

LEAVE_POLICY = UploadPolicy(
    area="leaves",
    prefix="leave",
    max_bytes=5 * MB,
    extensions=DOCUMENT_POLICY.extensions,
    mime_keywords=DOCUMENT_POLICY.mime_keywords,
    error_message="Only images and documents are allowed",
)

TASK_POLICY = UploadPolicy(
    area="tasks",
    prefix="task",
    max_bytes=10 * MB,
    extensions=DOCUMENT_POLICY.extensions | {".txt", ".zip"},
    mime_keywords=DOCUMENT_POLICY.mime_keywords | {"text", "zip"},
    error_message="Only images, documents, and archives are allowed",
)

BROADCAST_POLICY = UploadPolicy(
    area="broadcasts",
    prefix="broadcast",
    max_bytes=10 * MB,
    extensions=TASK_POLICY.extensions,
    mime_keywords=TASK_POLICY.mime_keywords,
    error_message=TASK_POLICY.error_message,
)

PROFILE_PICTURE_POLICY = UploadPolicy(
    area="profile-pictures",
    prefix="profile",
    max_bytes=5 * MB,
    extensions=frozenset({".jpeg", ".jpg", ".png", ".gif", ".webp"}),
    mime_keywords=frozenset({"jpeg", "jpg", "png", "gif", "webp"}),
    error_message="Only image files are allowed",
)


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def _is_allowed(policy: UploadPolicy, filename: str, content_type: str | None) -> bool:
    ext = os.path.splitext(filename)[1].lower()
    mime = (content_type or "").lower()
    return ext in policy.extensions and any(k in mime for k in policy.mime_keywords)


def check_upload(policy: UploadPolicy, upload: UploadFile) -> None:
    if not upload.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if not _is_allowed(policy, upload.filename, upload.content_type):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=policy.error_message)


def save_upload(policy: UploadPolicy, upload: UploadFile) -> str:
    """Persist an uploaded file under UPLOAD_DIR/<area>/ and return its path."""
    check_upload(policy, upload)

    data = upload.file.read(policy.max_bytes + 1)
    if len(data) > policy.max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large (max {policy.max_bytes // MB}MB)",
        )

    target_dir = upload_root() / policy.area
    target_dir.mkdir(parents=True, exist_ok=True)

    ext = os.path.splitext(upload.filename)[1].lower()
    name = f"{policy.prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
    path = target_dir / name
    path.write_bytes(data)
    return str(path)


def save_uploads(policy: UploadPolicy, uploads: list[UploadFile], max_count: int) -> list[tuple[str, str]]:
    """Returns (original file name, stored path) pairs. Saved files are removed if a later one fails."""
    if len(uploads) > max_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files (max {max_count})",
        )
    for upload in uploads:
        check_upload(policy, upload)

    saved: list[tuple[str, str]] = []
    try:
        for upload in uploads:
            saved.append((upload.filename, save_upload(policy, upload)))
    except HTTPException:
        for _, path in saved:
            delete_file(path)
        raise
    return saved


def delete_file(path: str | None) -> None:
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.exception("Could not delete stored file %s", path)


def file_exists(path: str | None) -> bool:
    return bool(path) and os.path.isfile(path)
