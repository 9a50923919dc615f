"""Splits tokenized cues into bounded, ordered batches."""

import logging
from typing import List, Sequence

from .exceptions import ConfigurationError
from .models import Batch, BatchItem, Cue

logger = logging.getLogger(__name__)


def validate_batch_size(batch_size: int) -> None:
    """Raises ConfigurationError unless ``batch_size`` is a positive integer."""
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ConfigurationError(f"Batch size must be a positive integer, got {batch_size!r}.")


def translatable_items(cues: Sequence[Cue]) -> List[BatchItem]:
    """
    Picks the cues that should be sent for translation.

    Only dialogue cues with non-blank text and an attached token qualify.
    Everything else is passed through untranslated later on.
    """
    items = []
    for cue in cues:
        if not cue.is_translatable:
            continue
        if not cue.token:
            raise ValueError("Cue has no correlation token; attach tokens before planning batches.")
        items.append(BatchItem(token=cue.token, text=cue.text))
    return items


def plan_batches(cues: Sequence[Cue], batch_size: int) -> List[Batch]:
    """
    Partitions translatable cues into contiguous batches.

    Args:
        cues: Cues in file order, already carrying tokens.
        batch_size: Maximum number of items per batch.

    Returns:
        Batches in file order. Every batch but the last holds exactly
        ``batch_size`` items.

    Raises:
        ConfigurationError: If ``batch_size`` is not a positive integer.
    """
    validate_batch_size(batch_size)
    items = translatable_items(cues)
    batches = [
        Batch(index=number, items=items[start:start + batch_size])
        for number, start in enumerate(range(0, len(items), batch_size))
    ]
    logger.debug(f"Planned {len(batches)} batches for {len(items)} translatable cues (batch size {batch_size}).")
    return batches
