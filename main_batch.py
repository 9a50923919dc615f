#!/usr/bin/env python3
"""
gptsub Batch Processing Entry Point

Translates every SRT/WebVTT file in a directory, smallest first, writing the
results into an output directory.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, Tuple

# Progress bar library
from tqdm import tqdm

from gptsub.cli import create_transport, load_run_config
from gptsub.config_loader import TRANSPORTS
from gptsub.log_setup import setup_logging
from gptsub.reporting import LoggingReporter
from gptsub.subtitle_translator import SubtitleTranslator
from gptsub.exceptions import GptSubError, ConfigurationError, FileSystemError
from gptsub.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

SUBTITLE_EXTENSIONS = (".srt", ".vtt")

def find_and_sort_subtitles(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all subtitle files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for subtitle files.

    Returns:
        A list of (filepath, filesize) tuples, smallest first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    files = []
    logger.info(f"Scanning directory for subtitle files: {input_dir}")
    for filename in os.listdir(input_dir):
        if filename.lower().endswith(SUBTITLE_EXTENSIONS):
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath):
                    files.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    files.sort(key=lambda item: item[1])
    logger.info(f"Found {len(files)} subtitle files. Sorted by size (smallest first).")
    return files


def translate_directory(translator: SubtitleTranslator, input_dir: str, output_dir: str) -> Tuple[int, int]:
    """
    Translates every subtitle file in ``input_dir`` into ``output_dir``.

    A file that fails is logged and counted; the rest still run.

    Returns:
        (files translated, files failed)
    """
    paths = [path for path, _ in find_and_sort_subtitles(input_dir)]
    ensure_dir_exists(output_dir)
    files_processed = 0
    files_failed = 0

    with tqdm(total=len(paths), unit="file", desc="Starting Batch") as pbar:
        for path in paths:
            filename = os.path.basename(path)
            pbar.set_description(f"Translating: {filename[:30]}...")
            try:
                translator.translate_file(path, translator.output_path_for(path, output_dir))
                files_processed += 1
            except GptSubError as e:
                logger.error(f"Translation failed for '{filename}': {e}")
                files_failed += 1
            finally:
                pbar.update(1)

    return files_processed, files_failed


def run_batch_processing(argv: Optional[List[str]] = None) -> None:
    """Parses arguments, sets up, and translates a whole directory."""
    parser = argparse.ArgumentParser(
        description="gptsub Batch: translate all subtitle files in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("-i", "--input-dir", required=True, help="Directory containing .srt/.vtt files.")
    parser.add_argument("-o", "--output-dir", default=None, help="Where translated files go. Defaults to <input-dir>/<language>.")
    parser.add_argument("-c", "--config", default=None, help="Optional YAML configuration file.")
    parser.add_argument("-l", "--language", default=None, help="Target language.")
    parser.add_argument("-b", "--batch-size", type=int, default=None, help="Maximum number of cues per prompt.")
    parser.add_argument("--transport", default=None, choices=TRANSPORTS, help="Translation backend.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )
    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir=None)

    try:
        config = load_run_config(args.config, {
            "language": args.language,
            "batch_size": args.batch_size,
            "transport": args.transport,
        })
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(log_level=log_level, log_dir=config.log_dir, log_file=config.log_file)
    output_dir = args.output_dir or os.path.join(args.input_dir, config.language)

    try:
        translator = SubtitleTranslator(config, create_transport(config), reporter=LoggingReporter())
    except GptSubError as e:
        logger.critical(f"Failed to initialize the translator: {e}")
        sys.exit(1)

    batch_start_time = time.time()
    try:
        files_processed, files_failed = translate_directory(translator, args.input_dir, output_dir)
    except (FileNotFoundError, ValueError, FileSystemError) as e:
        logger.critical(f"Directory error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
        sys.exit(1)

    total_files = files_processed + files_failed
    logger.info("--- Batch Translation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully translated: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")
    sys.exit(1 if files_failed else 0)


if __name__ == "__main__":
    run_batch_processing()
