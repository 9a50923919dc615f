"""Utility functions for gptsub."""

import os
import re
import logging
from typing import Optional
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def language_slug(language: str) -> str:
    """
    Turns a language name into a file name fragment.

    "Brazilian Portuguese" -> "brazilian-portuguese", "en-US" -> "en-us".
    """
    slug = re.sub(r"[^a-z0-9 -]", "", language.lower())
    return re.sub(r"[ -]+", "-", slug)

def default_output_path(input_path: str, language: str, extension: str, output_dir: Optional[str] = None) -> str:
    """
    Builds ``<stem>.<language-slug>.<extension>`` next to the input file,
    or inside ``output_dir`` when given.
    """
    stem = os.path.splitext(os.path.basename(input_path))[0]
    directory = output_dir if output_dir else os.path.dirname(os.path.abspath(input_path))
    return os.path.join(directory, f"{stem}.{language_slug(language)}.{extension}")
