"""Reads and writes subtitle files as Cue sequences using pysubs2."""

import logging
import os
import tempfile
from typing import List, Optional, Sequence

import pysubs2
from pysubs2.exceptions import Pysubs2Error

from .exceptions import ConfigurationError, SubtitleIOError
from .models import Cue, CueType, Timing

logger = logging.getLogger(__name__)

# Output format name -> (pysubs2 format id, file extension)
OUTPUT_FORMATS = {
    "srt": ("srt", "srt"),
    "vtt": ("vtt", "vtt"),
}


def check_output_format(output_format: str) -> str:
    """Normalizes an output format name, raising ConfigurationError if unsupported."""
    name = (output_format or "").lower()
    if name == "webvtt":
        name = "vtt"
    if name not in OUTPUT_FORMATS:
        raise ConfigurationError(
            f"Unsupported output format '{output_format}'. Choose one of: {', '.join(OUTPUT_FORMATS)}."
        )
    return name


def output_extension(output_format: str) -> str:
    return OUTPUT_FORMATS[check_output_format(output_format)][1]


def _event_to_cue(event: pysubs2.SSAEvent) -> Cue:
    cue_type = CueType.COMMENT if event.is_comment else CueType.CUE
    return Cue(type=cue_type, timing=Timing(start_ms=event.start, end_ms=event.end), text=event.text)


def _cue_to_event(cue: Cue) -> pysubs2.SSAEvent:
    timing = cue.timing or Timing(0, 0)
    event_type = "Comment" if cue.type == CueType.COMMENT else "Dialogue"
    return pysubs2.SSAEvent(start=timing.start_ms, end=timing.end_ms, text=cue.text or "", type=event_type)


def _to_cues(subs: pysubs2.SSAFile) -> List[Cue]:
    return [_event_to_cue(event) for event in subs]


def _to_ssafile(cues: Sequence[Cue]) -> pysubs2.SSAFile:
    subs = pysubs2.SSAFile()
    subs.events = [_cue_to_event(cue) for cue in cues]
    return subs


def load_cues(path: str, encoding: str = "utf-8") -> List[Cue]:
    """
    Parses a subtitle file into cues, auto-detecting its format.

    Args:
        path: Path to the subtitle file.
        encoding: Text encoding of the file.

    Returns:
        Cues in file order. Line breaks inside a cue use pysubs2's ``\\N``.

    Raises:
        SubtitleIOError: If the file is missing, unreadable or not a subtitle file.
    """
    logger.debug(f"Reading subtitle file {path}...")
    try:
        subs = pysubs2.load(path, encoding=encoding)
    except (OSError, UnicodeDecodeError, Pysubs2Error) as e:
        logger.error(f"Could not read subtitle file {path}: {e}")
        raise SubtitleIOError(f"Could not read subtitle file {path}: {e}") from e
    cues = _to_cues(subs)
    logger.info(f"Loaded {len(cues)} cues from {path}")
    return cues


def cues_from_string(text: str, format_: Optional[str] = None) -> List[Cue]:
    """Parses subtitle text held in memory."""
    try:
        subs = pysubs2.SSAFile.from_string(text, format_=format_)
    except Pysubs2Error as e:
        raise SubtitleIOError(f"Could not parse subtitles: {e}") from e
    return _to_cues(subs)


def cues_to_string(cues: Sequence[Cue], output_format: str) -> str:
    """Serializes cues in the given output format ("srt" or "vtt")."""
    format_id = OUTPUT_FORMATS[check_output_format(output_format)][0]
    return _to_ssafile(cues).to_string(format_id)


def save_cues(cues: Sequence[Cue], path: str, output_format: str, encoding: str = "utf-8") -> None:
    """
    Writes cues to ``path``.

    The file is written next to its destination under a temporary name and
    moved into place once complete, so a failed write leaves no partial file.

    Raises:
        ConfigurationError: If the output format is unsupported.
        SubtitleIOError: If the file cannot be written.
    """
    content = cues_to_string(cues, output_format)
    directory = os.path.dirname(os.path.abspath(path))
    temp_path = None
    try:
        fd, temp_path = tempfile.mkstemp(prefix=".gptsub_", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
        os.replace(temp_path, path)
        temp_path = None
        logger.info(f"Wrote {len(cues)} cues to {path}")
    except (OSError, UnicodeEncodeError) as e:
        logger.error(f"Failed to write subtitle file {path}: {e}", exc_info=True)
        raise SubtitleIOError(f"Could not write subtitle file {path}: {e}") from e
    finally:
        if temp_path and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.warning(f"Could not remove temporary file {temp_path}: {e}")
