from gptsub.models import Batch, BatchItem
from gptsub.prompt_builder import (
    DEFAULT_PROMPT_TEMPLATE,
    SEPARATOR_LINE,
    PromptBuilder,
    render_payload,
    restore_line_breaks,
)


def make_batch(*pairs):
    return Batch(index=0, items=[BatchItem(token=token, text=text) for token, text in pairs])


def test_payload_keeps_order_and_separates_items():
    batch = make_batch(("ABC123", "Hello"), ("DEF456", "World"))
    assert render_payload(batch) == "<ABC123>\nHello\n<000000>\n<DEF456>\nWorld"


def test_single_item_has_no_separator():
    assert SEPARATOR_LINE not in render_payload(make_batch(("ABC123", "Hi")))


def test_default_template_substitutes_language_and_payload():
    prompt = PromptBuilder("German").build(make_batch(("ABC123", "Hello")))
    assert prompt == (
        "Translate the following text into German but keep the 6 digit codes between < > intact:\n\n"
        "<ABC123>\nHello"
    )
    assert "[lang]" in DEFAULT_PROMPT_TEMPLATE


def test_placeholder_inside_subtitle_text_is_not_replaced():
    prompt = PromptBuilder("es", "To [lang]:\n[text]").build(make_batch(("ABC123", "say [lang] twice")))
    assert prompt == "To es:\n<ABC123>\nsay [lang] twice"


def test_custom_template_without_language():
    prompt = PromptBuilder("it", "[text]").build(make_batch(("ABC123", "Ciao")))
    assert prompt == "<ABC123>\nCiao"


def test_line_breaks_are_sent_as_backslash_n():
    batch = make_batch(("ABC123", "Hello\nthere"), ("DEF456", "one\r\ntwo"))
    assert render_payload(batch) == "<ABC123>\nHello\\Nthere\n<000000>\n<DEF456>\none\\Ntwo"


def test_restore_line_breaks_only_touches_multiline_items():
    batch = make_batch(("ABC123", "Hello\nthere"), ("DEF456", "keep\\Nliteral"))
    restored = restore_line_breaks(batch, {"ABC123": "Bonjour\\Nvous", "DEF456": "garder\\Nlittéral"})
    assert restored == {"ABC123": "Bonjour\nvous", "DEF456": "garder\\Nlittéral"}
