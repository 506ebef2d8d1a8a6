"""
Upload validation for chat session attachments.

Type checking is permissive: the knowledge store accepts most document,
data, code and image formats, so only size and count limits are enforced.
"""

import math
from typing import List, Optional, Sequence, Tuple

from app.core.config import settings
from app.core.exceptions import FileValidationError


SUPPORTED_TYPES = frozenset({
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/markdown",
    "application/rtf",
    # Spreadsheets
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/csv",
    "text/tab-separated-values",
    # Presentations
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Data formats
    "application/json",
    "application/xml",
    "text/xml",
    "application/x-yaml",
    "text/yaml",
    # Code
    "text/javascript",
    "application/javascript",
    "text/typescript",
    "application/typescript",
    "text/x-python",
    "text/x-java",
    "text/x-go",
    "text/x-rust",
    # Images (OCR)
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
})


def is_supported_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.split(";")[0].strip().lower() in SUPPORTED_TYPES


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 B"
    sizes = ["B", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(sizes) - 1)
    return f"{num_bytes / math.pow(1024, i):.1f} {sizes[i]}"


def validate_file(file_name: str, size: int, max_size: Optional[int] = None) -> Optional[FileValidationError]:
    """Return the first problem with a single file, or None when it is acceptable"""
    max_size = max_size if max_size is not None else settings.MAX_FILE_SIZE

    if size == 0:
        return FileValidationError("File is empty", code="EMPTY_FILE", file_name=file_name)

    if size > max_size:
        limit_mb = max_size // (1024 * 1024)
        return FileValidationError(
            f"File size ({size / 1024 / 1024:.1f} MB) exceeds {limit_mb} MB limit",
            code="SIZE_EXCEEDED",
            file_name=file_name,
        )
    return None


def validate_file_list(
    files: Sequence[Tuple[str, int]],
    current_file_count: int,
    max_files: Optional[int] = None,
) -> List[FileValidationError]:
    """
    Validate a batch of (file_name, size) pairs against the per-session limit.

    Exceeding the file count short-circuits: no per-file errors are reported.
    """
    max_files = max_files if max_files is not None else settings.MAX_FILES_PER_SESSION

    if current_file_count + len(files) > max_files:
        return [FileValidationError(
            f"Maximum {max_files} files per session (currently {current_file_count})",
            code="TOO_MANY_FILES",
            file_name="Multiple files",
        )]

    errors = []
    for file_name, size in files:
        error = validate_file(file_name, size)
        if error is not None:
            errors.append(error)
    return errors
