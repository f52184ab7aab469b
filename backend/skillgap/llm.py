# skillgap/llm.py
# ─────────────────────────────────────────────────────────────────────────────
# Generative-model collaborator.
#
# The pipeline only needs `generate(prompt) -> str`. ClaudeClient is the
# production implementation; tests pass any object with the same method.
# One request, one response: no streaming, no tools, no SDK-level retries.
# ─────────────────────────────────────────────────────────────────────────────

import logging
from typing import Optional, Protocol

import anthropic
from anthropic import Anthropic

from config import ANTHROPIC_API_KEY, CLAUDE_MODEL, MODEL_MAX_TOKENS, MODEL_TIMEOUT
from exceptions import ModelInvocationError

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class ClaudeClient:
    """Anthropic Messages API behind the TextGenerator interface."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = CLAUDE_MODEL,
        max_tokens: int = MODEL_MAX_TOKENS,
        timeout: float = MODEL_TIMEOUT,
        client: Optional[Anthropic] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        if client is None:
            api_key = api_key or ANTHROPIC_API_KEY
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not set. Add it to your .env file.")
            client = Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError as e:
            logger.error("Model call timed out (model=%s)", self.model)
            raise ModelInvocationError("request timed out", model=self.model, timeout=True) from e
        except anthropic.APIError as e:
            logger.error("Model call failed (model=%s): %s", self.model, e)
            raise ModelInvocationError(str(e), model=self.model) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.info("Model reply (model=%s): %d chars, stop_reason=%s",
                    self.model, len(text), response.stop_reason)
        return text
