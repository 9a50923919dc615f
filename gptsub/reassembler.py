"""Merges translated texts back onto the original cue sequence."""

import dataclasses
from typing import List, Mapping, Sequence

from .models import Cue


def reassemble(cues: Sequence[Cue], translations: Mapping[str, str]) -> List[Cue]:
    """
    Applies translations to cues by token.

    The result has the same length and order as ``cues``. Dialogue cues whose
    token has a translation get the translated text. Blank and structural cues
    are never touched. Tokens are cleared on every returned cue.
    """
    output = []
    for cue in cues:
        text = cue.text
        if cue.is_translatable and cue.token in translations:
            text = translations[cue.token]
        output.append(dataclasses.replace(cue, text=text, token=None))
    return output


def count_translated(cues: Sequence[Cue], translations: Mapping[str, str]) -> int:
    """Number of translatable cues that have a translation available."""
    return sum(1 for cue in cues if cue.is_translatable and cue.token in translations)
