"""Media/document metadata probing for ingested payloads.

Wraps two external collaborators: the ``ffprobe`` binary for audio/video
and pypdf for PDF page counts. Every failure is logged and swallowed here;
ingestion must succeed whatever the probe outcome.
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..core.config import settings
from .classifier import PrimaryType, split_extension

logger = logging.getLogger(__name__)

# Text formats the preview endpoint can show inline.
PREVIEWABLE_TEXT_FORMATS = frozenset({"txt", "md", "json", "xml", "html", "css", "js", "csv"})


class ProbeError(Exception):
    """An external probe could not inspect the payload."""


@dataclass
class MediaMetadata:
    """Probe result. Absent fields stay ``None``."""
    duration_seconds: Optional[float] = None
    page_count: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    preview_available: bool = False


def run_ffprobe(source: Path) -> Dict[str, Any]:
    """Return ffprobe's ``show_format``/``show_streams`` JSON for *source*.

    Raises:
        ProbeError: binary missing, timeout, non-zero exit, or unparsable output.
    """
    command = [
        settings.ffprobe_path,
        "-hide_banner",
        "-loglevel", "error",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(source),
    ]
    try:
        process = subprocess.run(
            command,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=settings.probe_timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise ProbeError(f"ffprobe executable not found: {settings.ffprobe_path}") from exc
    except subprocess.TimeoutExpired as exc:
        raise ProbeError(f"ffprobe timed out on {source}") from exc

    if process.returncode != 0 or not process.stdout:
        stderr = process.stderr.decode("utf-8", "ignore").strip()
        raise ProbeError(f"ffprobe failed to inspect {source}: {stderr or 'unknown error'}")
    try:
        return json.loads(process.stdout.decode("utf-8"))
    except json.JSONDecodeError as exc:
        raise ProbeError("ffprobe returned invalid JSON output") from exc


def _positive_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _probe_av(source: Path, primary_type: str, result: MediaMetadata) -> None:
    data = run_ffprobe(source)
    streams = data.get("streams") or []
    if not streams:
        return

    stream = streams[0]
    result.duration_seconds = (
        _positive_float(stream.get("duration"))
        or _positive_float((data.get("format") or {}).get("duration"))
    )
    if primary_type == PrimaryType.VIDEO.value:
        video = next((s for s in streams if s.get("codec_type") == "video"), stream)
        result.width = _positive_int(video.get("width"))
        result.height = _positive_int(video.get("height"))
    result.preview_available = True


def _probe_pdf(source: Path, result: MediaMetadata) -> None:
    try:
        reader = PdfReader(str(source))
        result.page_count = len(reader.pages) or None
    except (PyPdfError, ValueError, KeyError) as exc:
        raise ProbeError(f"pypdf could not read {source}: {exc}") from exc
    result.preview_available = True


def extract_metadata(source: Path, mime_type: str, primary_type: str) -> MediaMetadata:
    """Probe *source* and return whatever metadata could be read.

    Never raises: on any probe failure the fields the probe would have
    filled stay absent and the failure is logged.
    """
    result = MediaMetadata()
    try:
        if primary_type in (PrimaryType.AUDIO.value, PrimaryType.VIDEO.value):
            _probe_av(source, primary_type, result)
        elif primary_type == PrimaryType.TEXT.value and mime_type == "application/pdf":
            _probe_pdf(source, result)
        elif primary_type == PrimaryType.IMAGE.value:
            result.preview_available = True
        elif primary_type == PrimaryType.TEXT.value:
            result.preview_available = split_extension(source.name) in PREVIEWABLE_TEXT_FORMATS
    except (ProbeError, OSError) as exc:
        logger.warning(
            "Could not extract metadata",
            extra={"path": str(source), "primary_type": primary_type, "error": str(exc)},
        )
    return result
