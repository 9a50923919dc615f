import random
import re

import pytest

from gptsub.config_loader import TranslationConfig
from gptsub.exceptions import TransportError
from gptsub.models import Cue, CueType, Timing
from gptsub.translator import TranslationTransport

SAMPLE_SRT = """1
00:00:01,000 --> 00:00:02,500
Hello

2
00:00:03,000 --> 00:00:04,000
World

3
00:00:05,000 --> 00:00:06,000
How are you?
"""


def make_cue(text, cue_type=CueType.CUE, start=0):
    return Cue(type=cue_type, timing=Timing(start, start + 1000), text=text)


class FailingTransport(TranslationTransport):
    def __init__(self):
        self.requests = []

    def translate(self, request_body):
        self.requests.append(request_body)
        raise TransportError("service unavailable")


class DictionaryTransport(TranslationTransport):
    """Replies with `<TOKEN>\\ntranslation` for every item it knows, in order."""

    def __init__(self, dictionary, reverse=False):
        self.dictionary = dictionary
        self.reverse = reverse
        self.requests = []

    def translate(self, request_body):
        self.requests.append(request_body)
        pairs = re.findall(r"<([A-Z]{3}[0-9]{3})>\n(.*)", request_body)
        items = [f"<{token}>\n{self.dictionary[text]}" for token, text in pairs if text in self.dictionary]
        if self.reverse:
            items.reverse()
        return "\n<000000>\n".join(items)


class ScriptedTransport(TranslationTransport):
    """Returns a reply computed from the request by ``script``; None means failure."""

    def __init__(self, script):
        self.script = script
        self.requests = []

    def translate(self, request_body):
        self.requests.append(request_body)
        reply = self.script(request_body, len(self.requests) - 1)
        if reply is None:
            raise TransportError("scripted failure")
        return reply


@pytest.fixture
def config():
    return TranslationConfig(batch_size=2, language="French", transport="echo")


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sample_srt(tmp_path):
    path = tmp_path / "movie.srt"
    path.write_text(SAMPLE_SRT, encoding="utf-8")
    return path
