"""Attaches correlation tokens to cues so they can be found again in a reply."""

import dataclasses
import random
import string
from typing import List, Optional, Sequence

from .models import Cue

TOKEN_LETTERS = 3
TOKEN_DIGITS = 3
TOKEN_LENGTH = TOKEN_LETTERS + TOKEN_DIGITS
# Shape of a token as it appears between angle brackets in prompts and replies.
TOKEN_PATTERN = rf"[A-Z]{{{TOKEN_LETTERS}}}[0-9]{{{TOKEN_DIGITS}}}"


def generate_token(rng: Optional[random.Random] = None) -> str:
    """
    Generates a random token such as ``KQZ481``.

    Tokens are not checked for uniqueness. Two cues drawing the same token will
    end up sharing one translation.

    Args:
        rng: Random source. Defaults to the ``random`` module.

    Returns:
        A six character token: three uppercase letters, then three digits.
    """
    rng = rng or random
    letters = "".join(rng.choice(string.ascii_uppercase) for _ in range(TOKEN_LETTERS))
    digits = "".join(rng.choice(string.digits) for _ in range(TOKEN_DIGITS))
    return letters + digits


def attach_tokens(cues: Sequence[Cue], rng: Optional[random.Random] = None) -> List[Cue]:
    """Returns a copy of ``cues`` where every entry carries a fresh token."""
    return [dataclasses.replace(cue, token=generate_token(rng)) for cue in cues]
