import logging
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from personachat.core.errors import CompletionFailed

logger = logging.getLogger(__name__)

__all__ = ['Completion', 'CompletionClient']


class Completion(BaseModel):
    """Generated text plus the provider metadata that came with it."""
    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: Dict[str, Any] = Field(default_factory=dict)


class CompletionClient:
    """
    Thin wrapper around the OpenAI chat-completions API.

    One call to :meth:`complete` makes at most one generation request unless
    ``max_retries`` is raised; the SDK's own retries are off by default so a
    single user action never produces two generations.
    """
    def __init__(
        self,
        api_key: Optional[str],
        default_model: str,
        timeout: float = 60.0,
        max_retries: int = 0,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initializes the CompletionClient.

        Args:
            api_key (str): OpenAI API key.
            default_model (str): Model used when the caller does not name one.
            timeout (float): Per-request timeout in seconds.
            max_retries (int): Retries the SDK may perform on transient errors.
            base_url (str): Optional OpenAI-compatible endpoint.
            client (AsyncOpenAI): Pre-built SDK client, mainly for tests.

        Raises:
            ConnectionError: If the SDK client cannot be constructed.
        """
        self.default_model = default_model
        logger.info(f"Initializing CompletionClient with default_model='{self.default_model}', timeout={timeout}s, max_retries={max_retries}")

        if client is not None:
            self.client = client
            return
        try:
            self.client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=max_retries,
            )
        except openai.OpenAIError as e:
            logger.error(f"Failed to initialize OpenAI client: {e}", exc_info=True)
            raise ConnectionError(f"Failed to initialize OpenAI client: {e}") from e

    async def complete(self, messages: List[Dict[str, str]], model: Optional[str] = None) -> Completion:
        """
        Submit ordered role/content pairs (system message first) and return the reply.

        Raises:
            CompletionFailed: On any transport or provider error, or an empty reply.
        """
        effective_model = model or self.default_model
        logger.debug(f"Requesting completion with model={effective_model}, {len(messages)} messages")

        try:
            response = await self.client.chat.completions.create(
                model=effective_model,
                messages=messages,
            )
        except openai.APITimeoutError as e:
            logger.error(f"Completion timed out with {effective_model}: {e}")
            raise CompletionFailed("The AI provider timed out") from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error during completion with {effective_model}: {e}", exc_info=True)
            raise CompletionFailed("Failed to generate chat response") from e

        if not response.choices or not response.choices[0].message.content:
            logger.warning(f"Empty completion returned by {effective_model}")
            raise CompletionFailed("The AI provider returned an empty response")

        choice = response.choices[0]
        usage = response.usage.model_dump() if response.usage is not None else {}
        logger.info(f"Completion received from {response.model}: finish_reason={choice.finish_reason}, usage={usage}")
        return Completion(
            content=choice.message.content,
            model=response.model or effective_model,
            finish_reason=choice.finish_reason,
            usage=usage,
        )
