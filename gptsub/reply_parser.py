"""Recovers (token, text) pairs from the free-text reply of the translation service."""

import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from .correlator import TOKEN_PATTERN
from .models import TranslationResult

logger = logging.getLogger(__name__)


class ReplyParser(ABC):
    """Abstract base class for reply parsers."""

    @abstractmethod
    def parse(self, reply: str, expected_tokens: Optional[Iterable[str]] = None) -> TranslationResult:
        """
        Extracts every recognisable (token, text) pair from a reply.

        Args:
            reply: Raw reply text. Lines may be reordered, merged, padded with
                commentary, or missing altogether.
            expected_tokens: Tokens that were sent in the request. Pairs for
                any other token are dropped. ``None`` accepts every token.

        Returns:
            Mapping of token to translated text. Never raises on bad input.
        """
        pass


class RegexReplyParser(ReplyParser):
    """
    Finds ``<TOKEN>`` markers and takes the first non-blank line after each one.

    The captured text ends at the next marker of any kind (including the
    separator) or at the end of its line, whichever comes first. The text may
    sit on the same line as the marker or on the following line. Markers with
    nothing after them are skipped. When a token shows up twice the first
    occurrence wins.
    """

    def __init__(self, token_pattern: str = TOKEN_PATTERN):
        self.token_re = re.compile(rf"<({token_pattern})>")
        # Any angle-bracketed six character code ends the current capture.
        self.boundary_re = re.compile(r"<[A-Z0-9]{6}>")

    def parse(self, reply: str, expected_tokens: Optional[Iterable[str]] = None) -> TranslationResult:
        if not reply:
            return {}
        expected = set(expected_tokens) if expected_tokens is not None else None
        result: TranslationResult = {}

        for match in self.token_re.finditer(reply):
            token = match.group(1)
            if expected is not None and token not in expected:
                logger.debug(f"Ignoring unexpected token <{token}> in reply.")
                continue
            if token in result:
                continue
            text = self._text_after(reply, match.end())
            if text:
                result[token] = text

        return result

    def _text_after(self, reply: str, start: int) -> str:
        boundary = self.boundary_re.search(reply, start)
        segment = reply[start:boundary.start()] if boundary else reply[start:]
        for line in segment.splitlines():
            line = line.strip()
            if line:
                return line
        return ""
