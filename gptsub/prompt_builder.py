"""Renders a batch into the free-text request sent to the translation service."""

from .models import Batch, BatchItem, TranslationResult

LANGUAGE_PLACEHOLDER = "[lang]"
TEXT_PLACEHOLDER = "[text]"
# All-zero marker; never produced by the token generator, which always starts with letters.
SEPARATOR_TOKEN = "000000"
SEPARATOR_LINE = f"<{SEPARATOR_TOKEN}>"

DEFAULT_PROMPT_TEMPLATE = (
    "Translate the following text into [lang] but keep the 6 digit codes between < > intact:\n\n[text]"
)


# Real line breaks travel as pysubs2-style "\N" so every item stays on one line.
LINE_BREAK = "\\N"


def encode_line_breaks(text: str) -> str:
    return LINE_BREAK.join(text.strip().splitlines())


def restore_line_breaks(batch: Batch, translations: TranslationResult) -> TranslationResult:
    """Turns "\\N" back into line breaks for items whose source text had real ones."""
    multiline = {item.token for item in batch.items if len(item.text.strip().splitlines()) > 1}
    return {
        token: text.replace(LINE_BREAK, "\n") if token in multiline else text
        for token, text in translations.items()
    }


def format_item(item: BatchItem) -> str:
    return f"<{item.token}>\n{encode_line_breaks(item.text)}"


def render_payload(batch: Batch) -> str:
    """Joins the batch items, in order, with the separator line between them."""
    return f"\n{SEPARATOR_LINE}\n".join(format_item(item) for item in batch.items)


class PromptBuilder:
    """Fills the prompt template with the target language and a batch payload."""

    def __init__(self, language: str, template: str = DEFAULT_PROMPT_TEMPLATE):
        self.language = language
        self.template = template

    def build(self, batch: Batch) -> str:
        # Language goes in first so a "[lang]" inside subtitle text is left alone.
        prompt = self.template.replace(LANGUAGE_PLACEHOLDER, self.language)
        return prompt.replace(TEXT_PLACEHOLDER, render_payload(batch))
