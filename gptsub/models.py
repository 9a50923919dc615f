"""Data models for gptsub."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

class CueType(str, Enum):
    """Distinguishes translatable dialogue from structural entries."""
    CUE = "cue"
    COMMENT = "comment"

@dataclass(frozen=True)
class Timing:
    """Start and end of a cue in milliseconds. Passed through untouched."""
    start_ms: int
    end_ms: int

@dataclass(frozen=True)
class Cue:
    """One subtitle entry in file order."""
    type: CueType
    timing: Optional[Timing]
    text: Optional[str]
    token: Optional[str] = None # Correlation token, only set while translating

    @property
    def is_translatable(self) -> bool:
        return self.type == CueType.CUE and bool(self.text and self.text.strip())

@dataclass(frozen=True)
class BatchItem:
    token: str
    text: str

@dataclass(frozen=True)
class Batch:
    """An ordered group of cues sent together in one request."""
    index: int
    items: List[BatchItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def tokens(self) -> List[str]:
        return [item.token for item in self.items]

# Token -> translated text. Missing keys mean "keep the original text".
TranslationResult = Dict[str, str]

@dataclass
class BatchOutcome:
    """What came back for one batch."""
    batch: Batch
    translations: TranslationResult = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

@dataclass
class RunSummary:
    """Counters for one pipeline run."""
    total_cues: int = 0
    translatable_cues: int = 0
    batches: int = 0
    failed_batches: int = 0
    translated_cues: int = 0
