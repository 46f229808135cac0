"""Content classification: map a (mime type, extension) pair to a primary type.

Pure functions, no I/O. ``classify`` is total: any input, including
``None`` and empty strings, yields one of the ``PrimaryType`` values.

Resolution order, first match wins:
    1. exact mime type in a curated per-type set
    2. extension in a curated per-type set
    3. mime type prefix (text/, audio/, video/, image/)
    4. ``other``

A declared mime type outranks the filename suffix when the two disagree.
"""

import mimetypes
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

DEFAULT_MIME_TYPE = "application/octet-stream"


class PrimaryType(str, Enum):
    """Content kind of a stored file."""
    TEXT = "text"
    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"
    DOCUMENT = "document"
    ARCHIVE = "archive"
    OTHER = "other"


# Kinds that carry a downloadable media descriptor in feeds.
MEDIA_TYPES = frozenset({PrimaryType.AUDIO.value, PrimaryType.VIDEO.value, PrimaryType.IMAGE.value})
# Kinds that switch on the podcast extension block.
PODCAST_TYPES = frozenset({PrimaryType.AUDIO.value, PrimaryType.VIDEO.value})

# Checked in declaration order; the sets are disjoint so order only
# matters for readability.
_MIME_TYPES: Tuple[Tuple[PrimaryType, FrozenSet[str]], ...] = (
    (PrimaryType.TEXT, frozenset({
        "application/pdf", "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain", "text/markdown", "text/csv", "application/json", "text/xml",
        "text/html", "text/css", "text/javascript", "application/javascript",
        "text/rtf", "application/rtf",
    })),
    (PrimaryType.AUDIO, frozenset({
        "audio/mpeg", "audio/wav", "audio/mp4", "audio/x-m4a", "audio/ogg",
        "audio/flac", "audio/aac", "audio/wma", "audio/opus",
    })),
    (PrimaryType.VIDEO, frozenset({
        "video/mp4", "video/quicktime", "video/x-msvideo", "video/webm",
        "video/x-flv", "video/3gpp", "video/x-ms-wmv", "video/mkv", "video/x-matroska",
    })),
    (PrimaryType.IMAGE, frozenset({
        "image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml",
        "image/bmp", "image/tiff", "image/x-icon", "image/heic", "image/heif",
    })),
    (PrimaryType.DOCUMENT, frozenset({
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.oasis.opendocument.text",
        "application/vnd.oasis.opendocument.spreadsheet",
    })),
    (PrimaryType.ARCHIVE, frozenset({
        "application/zip", "application/x-rar-compressed", "application/x-7z-compressed",
        "application/x-tar", "application/gzip", "application/x-bzip2",
    })),
)

_EXTENSIONS: Tuple[Tuple[PrimaryType, FrozenSet[str]], ...] = (
    (PrimaryType.TEXT, frozenset({
        "pdf", "doc", "docx", "txt", "md", "csv", "json", "xml", "html", "css", "js", "rtf",
    })),
    (PrimaryType.AUDIO, frozenset({"mp3", "wav", "m4a", "ogg", "flac", "aac", "wma", "opus"})),
    (PrimaryType.VIDEO, frozenset({"mp4", "mov", "avi", "webm", "flv", "3gp", "wmv", "mkv"})),
    (PrimaryType.IMAGE, frozenset({
        "jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "tiff", "ico", "heic", "heif",
    })),
    (PrimaryType.DOCUMENT, frozenset({"xls", "xlsx", "ppt", "pptx", "odt", "ods"})),
    (PrimaryType.ARCHIVE, frozenset({"zip", "rar", "7z", "tar", "gz", "bz2"})),
)

_MIME_PREFIXES: Dict[str, PrimaryType] = {
    "text/": PrimaryType.TEXT,
    "audio/": PrimaryType.AUDIO,
    "video/": PrimaryType.VIDEO,
    "image/": PrimaryType.IMAGE,
}


def normalize_extension(extension: Optional[str]) -> str:
    """Lower-case extension without the leading dot (``".MP3"`` -> ``"mp3"``)."""
    return (extension or "").strip().lstrip(".").lower()


def classify(mime_type: Optional[str], extension: Optional[str]) -> PrimaryType:
    """Return the primary type for a mime type / extension pair. Never raises."""
    mime = (mime_type or "").strip().lower()
    ext = normalize_extension(extension)

    for kind, members in _MIME_TYPES:
        if mime in members:
            return kind

    for kind, members in _EXTENSIONS:
        if ext in members:
            return kind

    for prefix, kind in _MIME_PREFIXES.items():
        if mime.startswith(prefix):
            return kind

    return PrimaryType.OTHER


def split_extension(filename: str) -> str:
    """Normalized extension of *filename*, or ``""`` when it has none."""
    base = filename.rsplit("/", 1)[-1]
    if "." not in base.strip("."):
        return ""
    return normalize_extension(base.rsplit(".", 1)[-1])


def guess_mime_type(filename: str, declared: Optional[str] = None) -> str:
    """Mime type for an upload: the declared one unless it is missing or generic."""
    if declared and declared != DEFAULT_MIME_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE
