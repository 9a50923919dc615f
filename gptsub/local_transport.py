"""Runs prompts through a local Hugging Face text-to-text model."""

import logging
import torch
from transformers import AutoTokenizer, AutoModelForSeq2SeqLM

from .exceptions import TransportError
from .translator import TranslationTransport

logger = logging.getLogger(__name__)

class HuggingFaceTransport(TranslationTransport):
    """Implements the transport with an instruction-tuned seq2seq model."""

    def __init__(self, model_name: str = "bigscience/mt0-base", device: str = "cuda", max_new_tokens: int = 1024):
        """
        Loads the tokenizer and model.

        Args:
            model_name: The name of the Hugging Face model.
            device: The device to run the model on ("cuda" or "cpu").
            max_new_tokens: Upper bound on generated tokens per reply.

        Raises:
            ValueError: If the specified device is invalid.
            TransportError: If the model or tokenizer fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.max_new_tokens = max_new_tokens

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
            raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Initializing HuggingFaceTransport with model '{self.model_name}' on device '{self.device}'")
        try:
            self.tokenizer = AutoTokenizer.from_pretrained(self.model_name)
            self.model = AutoModelForSeq2SeqLM.from_pretrained(self.model_name)
            self.model.to(self.device)
            self.model.eval()
        except Exception as e:
            logger.error(f"Failed to load model or tokenizer '{self.model_name}': {e}", exc_info=True)
            raise TransportError(f"Failed to load model/tokenizer '{self.model_name}': {e}") from e

    def translate(self, request_body: str) -> str:
        try:
            inputs = self.tokenizer(request_body, return_tensors="pt", truncation=True)
            inputs = {k: v.to(self.device) for k, v in inputs.items()}
            with torch.no_grad():
                generated = self.model.generate(**inputs, max_new_tokens=self.max_new_tokens)
            reply = self.tokenizer.decode(generated[0], skip_special_tokens=True)
        except Exception as e:
            raise TransportError(f"Local generation with '{self.model_name}' failed: {e}") from e

        if not reply.strip():
            raise TransportError(f"Model '{self.model_name}' produced an empty reply.")
        return reply
