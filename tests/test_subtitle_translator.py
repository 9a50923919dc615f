import re

import pytest

from gptsub.config_loader import TranslationConfig
from gptsub.exceptions import ConfigurationError, SubtitleIOError
from gptsub.models import CueType
from gptsub.reply_parser import RegexReplyParser
from gptsub.reporting import ProgressReporter
from gptsub.subtitle_io import load_cues
from gptsub.subtitle_translator import SubtitleTranslator
from gptsub.translator import EchoTransport

from conftest import DictionaryTransport, FailingTransport, ScriptedTransport, make_cue

FRENCH = {"Hello": "Bonjour", "World": "Monde", "How are you?": "Comment allez-vous ?"}


class RecordingReporter(ProgressReporter):
    def __init__(self):
        self.events = []

    def run_started(self, total_batches, translatable_cues):
        self.events.append(("run_started", total_batches, translatable_cues))

    def batch_started(self, batch, total_batches):
        self.events.append(("batch_started", batch.index))

    def batch_finished(self, outcome, total_batches):
        self.events.append(("batch_finished", outcome.batch.index))

    def batch_failed(self, outcome, total_batches):
        self.events.append(("batch_failed", outcome.batch.index))

    def run_finished(self, summary):
        self.events.append(("run_finished", summary.failed_batches))


def tokens_in(request):
    return re.findall(r"<([A-Z]{3}[0-9]{3})>", request)


def test_example_reply_is_mapped_in_original_order(config, rng):
    def reply(request, _):
        first, second = tokens_in(request)
        return f"<{first}>\nBonjour\n<000000>\n<{second}>\nMonde"

    translator = SubtitleTranslator(config, ScriptedTransport(reply), rng=rng)
    output, summary = translator.translate_cues([make_cue("Hello"), make_cue("World")])

    assert [cue.text for cue in output] == ["Bonjour", "Monde"]
    assert summary.translated_cues == 2
    assert summary.failed_batches == 0


def test_failed_transport_leaves_input_unchanged(config, rng):
    cues = [make_cue("Hello"), make_cue("World")]
    transport = FailingTransport()
    output, summary = SubtitleTranslator(config, transport, rng=rng).translate_cues(cues)

    assert output == cues
    assert len(transport.requests) == 1
    assert summary.failed_batches == 1
    assert summary.translated_cues == 0


def test_one_failed_batch_does_not_affect_the_others(rng):
    config = TranslationConfig(batch_size=1, language="fr", transport="echo")
    dictionary = DictionaryTransport(FRENCH)

    def reply(request, call):
        return None if call == 1 else dictionary.translate(request)

    cues = [make_cue("Hello"), make_cue("World"), make_cue("How are you?")]
    output, summary = SubtitleTranslator(config, ScriptedTransport(reply), rng=rng).translate_cues(cues)

    assert [cue.text for cue in output] == ["Bonjour", "World", "Comment allez-vous ?"]
    assert summary.batches == 3
    assert summary.failed_batches == 1


def test_partial_reply_updates_only_echoed_cues(config, rng):
    def reply(request, _):
        return f"<{tokens_in(request)[1]}>\nMonde"

    cues = [make_cue("Hello"), make_cue("World")]
    output, summary = SubtitleTranslator(config, ScriptedTransport(reply), rng=rng).translate_cues(cues)

    assert [cue.text for cue in output] == ["Hello", "Monde"]
    assert summary.failed_batches == 0
    assert summary.translated_cues == 1


def test_reordered_reply_is_still_matched(config, rng):
    transport = DictionaryTransport(FRENCH, reverse=True)
    cues = [make_cue("Hello"), make_cue("World"), make_cue("How are you?")]
    output, _ = SubtitleTranslator(config, transport, rng=rng).translate_cues(cues)

    assert [cue.text for cue in output] == ["Bonjour", "Monde", "Comment allez-vous ?"]
    assert len(transport.requests) == 2


def test_echo_round_trip_restores_original_text(config, rng):
    cues = [make_cue(f"Line number {i}") for i in range(7)]
    cues += [make_cue("Hello\nthere"), make_cue("first\nsecond\nthird"), make_cue("already\\Nencoded")]
    output, summary = SubtitleTranslator(config, EchoTransport(), rng=rng).translate_cues(cues)

    assert output == cues
    assert summary.translated_cues == 10
    assert summary.batches == 5


def test_multiline_translation_gets_its_line_breaks_back(config, rng):
    def reply(request, _):
        return f"<{tokens_in(request)[0]}>\nBonjour\\Nvous"

    output, _ = SubtitleTranslator(config, ScriptedTransport(reply), rng=rng).translate_cues(
        [make_cue("Hello\nthere")]
    )
    assert output[0].text == "Bonjour\nvous"


def test_unexpected_transport_exception_fails_only_its_batch(rng):
    config = TranslationConfig(batch_size=1, language="fr", transport="echo")

    def reply(request, call):
        if call == 0:
            raise RuntimeError("socket closed")
        return request

    cues = [make_cue("Hello"), make_cue("World")]
    output, summary = SubtitleTranslator(config, ScriptedTransport(reply), rng=rng).translate_cues(cues)

    assert output == cues
    assert summary.failed_batches == 1
    assert summary.translated_cues == 1


def test_run_finished_is_reported_even_when_parsing_blows_up(config, rng):
    class BrokenParser(RegexReplyParser):
        def parse(self, reply, expected_tokens=None):
            raise ValueError("parser bug")

    reporter = RecordingReporter()
    translator = SubtitleTranslator(config, EchoTransport(), reply_parser=BrokenParser(), reporter=reporter, rng=rng)
    with pytest.raises(ValueError):
        translator.translate_cues([make_cue("Hello")])
    assert reporter.events[-1][0] == "run_finished"


def test_blank_and_structural_cues_are_never_sent(config, rng):
    transport = DictionaryTransport(FRENCH)
    cues = [make_cue("note", CueType.COMMENT), make_cue(""), make_cue(None), make_cue("Hello")]
    output, summary = SubtitleTranslator(config, transport, rng=rng).translate_cues(cues)

    assert len(transport.requests) == 1
    assert "note" not in transport.requests[0]
    assert len(tokens_in(transport.requests[0])) == 1
    assert [cue.text for cue in output] == ["note", "", None, "Bonjour"]
    assert summary.translatable_cues == 1


def test_reply_with_foreign_token_is_ignored(config, rng):
    def reply(request, _):
        return "<QQQ000>\nIntrus"

    cues = [make_cue("Hello")]
    output, _ = SubtitleTranslator(config, ScriptedTransport(reply), rng=rng).translate_cues(cues)
    assert output == cues


def test_empty_reply_counts_as_failure(config, rng):
    output, summary = SubtitleTranslator(config, ScriptedTransport(lambda r, c: "   "), rng=rng).translate_cues(
        [make_cue("Hello")]
    )
    assert summary.failed_batches == 1
    assert output[0].text == "Hello"


def test_no_cues(config):
    transport = FailingTransport()
    output, summary = SubtitleTranslator(config, transport).translate_cues([])
    assert output == []
    assert summary.batches == 0
    assert transport.requests == []


def test_reporter_receives_events_in_order(rng):
    config = TranslationConfig(batch_size=1, language="fr", transport="echo")
    reporter = RecordingReporter()

    def reply(request, call):
        return None if call == 0 else request

    SubtitleTranslator(config, ScriptedTransport(reply), reporter=reporter, rng=rng).translate_cues(
        [make_cue("Hello"), make_cue("World")]
    )
    assert reporter.events == [
        ("run_started", 2, 2),
        ("batch_started", 0),
        ("batch_failed", 0),
        ("batch_started", 1),
        ("batch_finished", 1),
        ("run_finished", 1),
    ]


def test_invalid_batch_size_is_rejected_before_any_request():
    transport = FailingTransport()
    with pytest.raises(ConfigurationError):
        SubtitleTranslator(TranslationConfig(batch_size=0, transport="echo"), transport)
    assert transport.requests == []


def test_translate_file_writes_default_output(config, sample_srt, rng):
    translator = SubtitleTranslator(config, DictionaryTransport(FRENCH), rng=rng)
    summary = translator.translate_file(str(sample_srt))

    output = sample_srt.parent / "movie.french.srt"
    assert output.exists()
    assert [cue.text for cue in load_cues(str(output))] == ["Bonjour", "Monde", "Comment allez-vous ?"]
    assert summary.translated_cues == 3


def test_translate_file_vtt_output(sample_srt, tmp_path, rng):
    config = TranslationConfig(batch_size=5, language="fr", output_format="vtt", transport="echo")
    target = tmp_path / "out.vtt"
    SubtitleTranslator(config, EchoTransport(), rng=rng).translate_file(str(sample_srt), str(target))

    content = target.read_text(encoding="utf-8")
    assert content.startswith("WEBVTT")
    assert "How are you?" in content


def test_translate_file_missing_input(config, tmp_path):
    translator = SubtitleTranslator(config, EchoTransport())
    with pytest.raises(SubtitleIOError):
        translator.translate_file(str(tmp_path / "missing.srt"))
    assert list(tmp_path.iterdir()) == []
