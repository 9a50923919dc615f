"""Orchestrates the batch-correlate-reassemble translation pipeline."""

import logging
import random
import time
from typing import List, Optional, Sequence, Tuple

from .batch_planner import plan_batches
from .config_loader import TranslationConfig
from .correlator import attach_tokens
from .exceptions import GptSubError, TransportError
from .models import Batch, BatchOutcome, Cue, RunSummary, TranslationResult
from .prompt_builder import PromptBuilder, restore_line_breaks
from .reassembler import count_translated, reassemble
from .reply_parser import RegexReplyParser, ReplyParser
from .reporting import NullReporter, ProgressReporter
from .subtitle_io import load_cues, output_extension, save_cues
from .translator import TranslationTransport
from .utils import default_output_path

logger = logging.getLogger(__name__)

class SubtitleTranslator:
    """
    Translates a cue sequence batch by batch through a TranslationTransport.

    A failed batch never stops the run: its cues keep their original text and
    the remaining batches are still attempted.
    """

    def __init__(
        self,
        config: TranslationConfig,
        transport: TranslationTransport,
        reply_parser: Optional[ReplyParser] = None,
        reporter: Optional[ProgressReporter] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initializes the SubtitleTranslator.

        Args:
            config: Validated run configuration.
            transport: Sends prompts and returns replies.
            reply_parser: Extracts translations from replies. Defaults to RegexReplyParser.
            reporter: Receives progress events. Defaults to NullReporter.
            rng: Random source for correlation tokens.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        self.config = config.validate()
        self.transport = transport
        self.reply_parser = reply_parser or RegexReplyParser()
        self.reporter = reporter or NullReporter()
        self.rng = rng
        self.prompt_builder = PromptBuilder(config.language, config.prompt_template)

    def plan(self, cues: Sequence[Cue]) -> Tuple[List[Cue], List[Batch]]:
        """Attaches tokens and splits the translatable cues into batches."""
        tokenized = attach_tokens(cues, self.rng)
        return tokenized, plan_batches(tokenized, self.config.batch_size)

    def translate_batch(self, batch: Batch) -> BatchOutcome:
        """
        Runs one batch through prompt, transport and parser.

        Transport failures of any kind are recorded on the outcome instead of raised.
        """
        prompt = self.prompt_builder.build(batch)
        try:
            reply = self.transport.translate(prompt)
        except TransportError as e:
            return BatchOutcome(batch=batch, error=str(e))
        except Exception as e:
            logger.error(f"Transport raised an unexpected error on batch {batch.index + 1}: {e}", exc_info=True)
            return BatchOutcome(batch=batch, error=f"{type(e).__name__}: {e}")
        if not reply or not reply.strip():
            return BatchOutcome(batch=batch, error="empty reply")

        translations = self.reply_parser.parse(reply, expected_tokens=batch.tokens)
        translations = restore_line_breaks(batch, translations)
        missing = len(batch) - len(translations)
        if missing:
            logger.debug(f"Batch {batch.index + 1}: {missing} of {len(batch)} cues missing from reply.")
        return BatchOutcome(batch=batch, translations=translations)

    def run_batches(self, batches: Sequence[Batch]) -> Tuple[TranslationResult, List[BatchOutcome]]:
        """
        Processes batches strictly in order, one request in flight at a time.

        Each batch only produces its own mapping; the mappings are merged
        afterwards in batch order.
        """
        result: TranslationResult = {}
        outcomes: List[BatchOutcome] = []
        total = len(batches)
        for batch in batches:
            self.reporter.batch_started(batch, total)
            outcome = self.translate_batch(batch)
            if outcome.failed:
                logger.warning(f"Batch {batch.index + 1}/{total} failed: {outcome.error}. Skipping.")
                self.reporter.batch_failed(outcome, total)
            else:
                self.reporter.batch_finished(outcome, total)
            outcomes.append(outcome)
            result.update(outcome.translations)
        return result, outcomes

    def translate_cues(self, cues: Sequence[Cue]) -> Tuple[List[Cue], RunSummary]:
        """
        Translates cues and returns them in their original order.

        Args:
            cues: Parsed cues, without tokens.

        Returns:
            The output cues (same length and order) and a run summary.
        """
        tokenized, batches = self.plan(cues)
        summary = RunSummary(
            total_cues=len(cues),
            translatable_cues=sum(len(batch) for batch in batches),
            batches=len(batches),
        )
        self.reporter.run_started(summary.batches, summary.translatable_cues)
        try:
            translations, outcomes = self.run_batches(batches)
            summary.failed_batches = sum(1 for outcome in outcomes if outcome.failed)
            summary.translated_cues = count_translated(tokenized, translations)
            output = reassemble(tokenized, translations)
        finally:
            self.reporter.run_finished(summary)
        return output, summary

    def output_path_for(self, input_path: str, output_dir: Optional[str] = None) -> str:
        extension = output_extension(self.config.output_format)
        return default_output_path(input_path, self.config.language, extension, output_dir)

    def translate_file(self, input_path: str, output_path: Optional[str] = None) -> RunSummary:
        """
        Translates one subtitle file and writes the result.

        Args:
            input_path: Subtitle file to translate.
            output_path: Destination. Defaults to ``<stem>.<language>.<ext>``
                next to the input file.

        Returns:
            The run summary.

        Raises:
            SubtitleIOError: If the input cannot be read or the output cannot be written.
            GptSubError: For any other failure in the pipeline.
        """
        start_time = time.time()
        output_path = output_path or self.output_path_for(input_path)
        logger.info(f"--- Translating {input_path} into '{self.config.language}' ---")

        try:
            cues = load_cues(input_path, encoding=self.config.encoding)
            translated, summary = self.translate_cues(cues)
            save_cues(translated, output_path, self.config.output_format, encoding=self.config.encoding)
        except GptSubError as e:
            logger.error(f"Translation of {input_path} failed: {e}", exc_info=False)
            raise
        except Exception as e:
            logger.critical(f"An unexpected error occurred while translating {input_path}: {e}", exc_info=True)
            raise GptSubError(f"An unexpected error occurred: {e}") from e

        elapsed = time.time() - start_time
        logger.info(f"--- Wrote {output_path} in {elapsed:.2f} seconds ---")
        return summary
