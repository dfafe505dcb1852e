"""
Media helpers for the file processor.

Video frames and audio tracks come from the ffmpeg/ffprobe command line
tools. PDF pages are rasterised with PyMuPDF for OCR through the vision
model. Every helper works on in-memory bytes and cleans up its own
temporary files.
"""
import asyncio
import base64
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

import fitz  # PyMuPDF

from ..core.config import FFMPEG_PATH, FFPROBE_PATH, TEMP_DIR
from ..core.logging_config import get_logger

logger = get_logger(__name__)

FRAME_WIDTH = 640
FRAME_HEIGHT = 480
FRAME_POSITIONS = (0.25, 0.50, 0.75, 0.95)  # Fractions of duration, after the 1s frame
AUDIO_MAX_SECONDS = 300
COMMAND_TIMEOUT_SECONDS = 120


def _suffix_for(name: str, default: str) -> str:
    suffix = Path(name or "").suffix
    return suffix if suffix else default


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, capture_output=True, timeout=COMMAND_TIMEOUT_SECONDS)


def _probe_duration(video_path: Path) -> Optional[float]:
    result = _run([
        FFPROBE_PATH, "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(video_path),
    ])
    if result.returncode != 0:
        return None
    try:
        return float(result.stdout.decode().strip())
    except ValueError:
        return None


def frame_timestamps(duration: Optional[float]) -> List[float]:
    """Seconds to sample: 1s in, then 25/50/75/95% of the duration."""
    if not duration or duration <= 0:
        return [1.0]
    timestamps = [min(1.0, duration / 2)]
    timestamps.extend(round(duration * position, 3) for position in FRAME_POSITIONS)
    return timestamps


def _extract_frames_sync(video_bytes: bytes, name: str) -> List[str]:
    if shutil.which(FFMPEG_PATH) is None:
        logger.warning(f"ffmpeg not found (FFMPEG_PATH={FFMPEG_PATH}); skipping frame extraction")
        return []

    with tempfile.TemporaryDirectory(dir=TEMP_DIR) as tmp:
        video_path = Path(tmp) / f"input{_suffix_for(name, '.mp4')}"
        video_path.write_bytes(video_bytes)

        frames = []
        for index, timestamp in enumerate(frame_timestamps(_probe_duration(video_path))):
            frame_path = Path(tmp) / f"frame_{index}.jpg"
            result = _run([
                FFMPEG_PATH, "-y", "-ss", str(timestamp), "-i", str(video_path),
                "-frames:v", "1", "-s", f"{FRAME_WIDTH}x{FRAME_HEIGHT}",
                str(frame_path),
            ])
            if result.returncode == 0 and frame_path.exists():
                frames.append(base64.b64encode(frame_path.read_bytes()).decode("ascii"))
            else:
                logger.debug(f"No frame at {timestamp}s for {name}")
        return frames


def _extract_audio_sync(video_bytes: bytes, name: str) -> Optional[bytes]:
    if shutil.which(FFMPEG_PATH) is None:
        logger.warning(f"ffmpeg not found (FFMPEG_PATH={FFMPEG_PATH}); skipping audio extraction")
        return None

    with tempfile.TemporaryDirectory(dir=TEMP_DIR) as tmp:
        video_path = Path(tmp) / f"input{_suffix_for(name, '.mp4')}"
        audio_path = Path(tmp) / "audio.mp3"
        video_path.write_bytes(video_bytes)

        result = _run([
            FFMPEG_PATH, "-y", "-i", str(video_path),
            "-vn", "-acodec", "libmp3lame", "-ar", "16000", "-ac", "1",
            "-t", str(AUDIO_MAX_SECONDS),
            str(audio_path),
        ])
        if result.returncode != 0 or not audio_path.exists():
            logger.debug(f"ffmpeg audio extraction failed for {name}: {result.stderr.decode(errors='ignore')[-300:]}")
            return None
        audio = audio_path.read_bytes()
        return audio or None


async def extract_video_frames(video_bytes: bytes, name: str) -> List[str]:
    """
    Grab up to five 640x480 JPEG frames from a video.

    Returns:
        Base64-encoded JPEGs; an empty list when ffmpeg is unavailable or fails
    """
    try:
        return await asyncio.to_thread(_extract_frames_sync, video_bytes, name)
    except Exception as e:
        logger.warning(f"Frame extraction failed for {name}: {e}")
        return []


async def extract_audio_from_video(video_bytes: bytes, name: str) -> Optional[bytes]:
    """Extract the first five minutes of audio as mono 16 kHz MP3, or None."""
    try:
        return await asyncio.to_thread(_extract_audio_sync, video_bytes, name)
    except Exception as e:
        logger.warning(f"Audio extraction failed for {name}: {e}")
        return None


def _render_pages_sync(pdf_bytes: bytes, max_pages: int, dpi: int) -> List[str]:
    pages = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf:
        for page_index in range(min(max_pages, pdf.page_count)):
            pix = pdf[page_index].get_pixmap(dpi=dpi)
            pages.append(base64.b64encode(pix.tobytes("png")).decode("ascii"))
    return pages


async def render_pdf_pages(pdf_bytes: bytes, max_pages: int, dpi: int = 150) -> List[str]:
    """Rasterise the first ``max_pages`` pages to base64 PNG."""
    return await asyncio.to_thread(_render_pages_sync, pdf_bytes, max_pages, dpi)
