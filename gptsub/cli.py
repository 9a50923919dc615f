"""Command-Line Interface handler for gptsub."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader, TranslationConfig, build_config, TRANSPORTS
from .log_setup import setup_logging
from .reporting import LoggingReporter, TqdmReporter
from .subtitle_io import OUTPUT_FORMATS
from .subtitle_translator import SubtitleTranslator
from .translator import EchoTransport, OpenAIChatTransport, TranslationTransport
from .exceptions import GptSubError, ConfigurationError

logger = logging.getLogger(__name__)

def create_transport(config: TranslationConfig) -> TranslationTransport:
    """Instantiates the transport selected in the configuration."""
    if config.transport == "echo":
        return EchoTransport()
    if config.transport == "huggingface":
        # Imported here so torch is only loaded when the local model is used
        from .local_transport import HuggingFaceTransport
        return HuggingFaceTransport(
            model_name=config.hf_model,
            device=config.device,
            max_new_tokens=config.max_new_tokens
        )
    return OpenAIChatTransport(
        api_key=config.api_key,
        model=config.model,
        temperature=config.temperature,
        base_url=config.base_url
    )

def load_run_config(config_path: Optional[str], overrides: dict) -> TranslationConfig:
    """Reads the optional YAML file and merges environment and CLI overrides into it."""
    raw = ConfigLoader().load_config(config_path) if config_path else {}
    return build_config(raw, overrides=overrides)

class CLIHandler:
    """Parses arguments and runs the translation of one subtitle file."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="gptsub",
            description="gptsub: Translate subtitle files with a text-generation service, in batches.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        parser.add_argument("input_file", help="The subtitle file to translate (SRT, WebVTT, ASS...).")
        parser.add_argument(
            "output_file",
            nargs="?",
            default=None,
            help="Output path. Defaults to <name>.<language>.<format> next to the input file. Overwritten if it exists."
        )
        parser.add_argument("-c", "--config", default=None, help="Optional YAML configuration file.")
        parser.add_argument("-k", "--key", default=None, help="API key for the openai transport (env: GPTSUB_KEY or OPENAI_API_KEY).")
        parser.add_argument("-b", "--batch-size", type=int, default=None, help="Maximum number of cues sent in a single prompt (default 15).")
        parser.add_argument("-l", "--language", default=None, help="Target language inserted into the prompt (default en-us).")
        parser.add_argument("-p", "--prompt", default=None, help="Prompt template with [lang] and [text] placeholders.")
        parser.add_argument("-f", "--format", default=None, choices=sorted(OUTPUT_FORMATS), help="Output format (default srt).")
        parser.add_argument("-m", "--model", default=None, help="Chat model for the openai transport.")
        parser.add_argument("--temperature", type=float, default=None, help="Sampling temperature for the openai transport.")
        parser.add_argument("--base-url", default=None, help="Alternative OpenAI compatible endpoint.")
        parser.add_argument("--transport", default=None, choices=TRANSPORTS, help="Translation backend (default openai).")
        parser.add_argument("--device", default=None, choices=["cuda", "cpu"], help="Device for the huggingface transport.")
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
        return parser

    def _overrides(self, args: argparse.Namespace) -> dict:
        return {
            "api_key": args.key,
            "batch_size": args.batch_size,
            "language": args.language,
            "prompt_template": args.prompt,
            "output_format": args.format,
            "model": args.model,
            "temperature": args.temperature,
            "base_url": args.base_url,
            "transport": args.transport,
            "device": args.device,
        }

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and translates the file."""
        args = self.parser.parse_args(argv)
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)

        # Console only until the config tells us where the log file goes
        setup_logging(log_level=log_level, log_dir=None)

        try:
            config = load_run_config(args.config, self._overrides(args))
        except (ConfigurationError, FileNotFoundError) as e:
            logger.critical(f"Invalid configuration: {e}")
            sys.exit(1)

        setup_logging(log_level=log_level, log_dir=config.log_dir, log_file=config.log_file)

        if not os.path.isfile(args.input_file):
            logger.critical(f"Input file not found or is not a file: {args.input_file}")
            sys.exit(1)

        try:
            transport = create_transport(config)
            reporter = LoggingReporter() if args.no_progress else TqdmReporter()
            translator = SubtitleTranslator(config, transport, reporter=reporter)
            summary = translator.translate_file(args.input_file, args.output_file)
            logger.info(
                f"Done: {summary.translated_cues}/{summary.translatable_cues} cues translated, "
                f"{summary.failed_batches} failed batches."
            )
            sys.exit(0)
        except GptSubError as e:
            logger.error(f"A gptsub error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2)

def main() -> None:
    CLIHandler().run()
