"""Progress reporting hooks for the translation pipeline."""

import logging
from typing import Optional

from tqdm import tqdm

from .models import Batch, BatchOutcome, RunSummary

logger = logging.getLogger(__name__)

class ProgressReporter:
    """Receives pipeline events. The base class ignores all of them."""

    def run_started(self, total_batches: int, translatable_cues: int) -> None:
        pass

    def batch_started(self, batch: Batch, total_batches: int) -> None:
        pass

    def batch_finished(self, outcome: BatchOutcome, total_batches: int) -> None:
        pass

    def batch_failed(self, outcome: BatchOutcome, total_batches: int) -> None:
        pass

    def run_finished(self, summary: RunSummary) -> None:
        pass

class NullReporter(ProgressReporter):
    """Discards every event."""

class LoggingReporter(ProgressReporter):
    """Writes progress to the module logger."""

    def run_started(self, total_batches: int, translatable_cues: int) -> None:
        logger.info(f"Translating {translatable_cues} cues in {total_batches} batches...")

    def batch_started(self, batch: Batch, total_batches: int) -> None:
        logger.debug(f"Translating batch {batch.index + 1} of {total_batches} ({len(batch)} cues)...")

    def batch_finished(self, outcome: BatchOutcome, total_batches: int) -> None:
        logger.info(
            f"Batch {outcome.batch.index + 1}/{total_batches} done: "
            f"{len(outcome.translations)}/{len(outcome.batch)} cues recovered."
        )

    def batch_failed(self, outcome: BatchOutcome, total_batches: int) -> None:
        logger.warning(f"Batch {outcome.batch.index + 1}/{total_batches} failed ({outcome.error}). Keeping original text.")

    def run_finished(self, summary: RunSummary) -> None:
        logger.info(
            f"Translated {summary.translated_cues}/{summary.translatable_cues} cues "
            f"({summary.failed_batches} of {summary.batches} batches failed)."
        )

class TqdmReporter(LoggingReporter):
    """Logs like LoggingReporter and also draws a progress bar over batches."""

    def __init__(self, desc: str = "Translating", leave: bool = True):
        self.desc = desc
        self.leave = leave
        self.bar: Optional[tqdm] = None

    def run_started(self, total_batches: int, translatable_cues: int) -> None:
        super().run_started(total_batches, translatable_cues)
        self.bar = tqdm(total=total_batches, desc=self.desc, unit="batch", leave=self.leave)

    def batch_finished(self, outcome: BatchOutcome, total_batches: int) -> None:
        super().batch_finished(outcome, total_batches)
        self._advance()

    def batch_failed(self, outcome: BatchOutcome, total_batches: int) -> None:
        super().batch_failed(outcome, total_batches)
        self._advance()

    def run_finished(self, summary: RunSummary) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None
        super().run_finished(summary)

    def _advance(self) -> None:
        if self.bar is not None:
            self.bar.update(1)
