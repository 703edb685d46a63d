"""
Text generation provider - OpenAI chat completions.

Produces example phrases (strict JSON output) and prose explanations from
the prompt templates in ``wordlens.prompts``.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..config import Config, language_name
from ..errors import ProviderError
from ..models import AppSettings, ExamplePhrase, PhraseCategory
from ..prompts import (
    EXPLANATION_BILINGUAL,
    EXPLANATION_MONOLINGUAL,
    PHRASE_GENERATION,
    PromptTemplates,
)
from ..utils import is_present
from .base import Credentials, TextGenProvider

logger = logging.getLogger(__name__)


def parse_phrases(payload: Any) -> List[ExamplePhrase]:
    """
    Validate a ``{"phrases": [...]}`` payload.

    Keeps entries with non-empty text and translation whose category is
    one of the fixed labels, at most one per category, in category order.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("phrases"), list):
        raise ValueError("response has no 'phrases' list")

    by_category: Dict[PhraseCategory, ExamplePhrase] = {}
    for entry in payload["phrases"]:
        if not isinstance(entry, dict):
            continue
        text, translation = entry.get("text"), entry.get("translation")
        category = PhraseCategory.match(entry.get("category"))
        if category is None or category in by_category:
            continue
        if not (is_present(text) and is_present(translation)):
            continue
        if not (text.strip() and translation.strip()):
            continue
        by_category[category] = ExamplePhrase(text.strip(), translation.strip(), category.value)

    return [by_category[c] for c in PhraseCategory if c in by_category]


class OpenAITextProvider(TextGenProvider):
    """OpenAI API provider (also works with compatible APIs)."""

    name = "openai"

    def __init__(
        self,
        prompts: PromptTemplates,
        model: str = Config.OPENAI_MODEL,
        base_url: str = Config.OPENAI_BASE_URL,
        timeout: int = Config.HTTP_TIMEOUT,
    ):
        super().__init__(timeout=timeout)
        self.prompts = prompts
        self.model = model
        self.base_url = base_url.rstrip("/")

    def credentials_from(self, settings: AppSettings) -> Credentials:
        return Credentials(settings.openai_api_key)

    async def complete(
        self,
        credentials: Credentials,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 400,
        json_output: bool = False,
    ) -> str:
        """Generate a completion and return the message content."""
        self.require_credentials(credentials)

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_output:
            payload["response_format"] = {"type": "json_object"}

        headers = {
            "Authorization": f"Bearer {credentials.api_key}",
            "Content-Type": "application/json",
        }
        response = await self._request("POST", f"{self.base_url}/chat/completions",
                                       headers=headers, json=payload)
        if not response.ok:
            raise ProviderError(self.name, response.text()[:200], response.status)

        data = self._parse_json(response)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"unexpected completion format: {e}") from e
        if not is_present(content) or not content.strip():
            raise ProviderError(self.name, "empty completion")
        return content.strip()

    async def generate_phrases(self, word, target_language, output_language, credentials):
        # Language arguments are codes ("es", "en-US"); prompts use names
        prompt = self.prompts.render(PHRASE_GENERATION, {
            "word": word,
            "targetLanguage": language_name(target_language),
            "outputLanguage": language_name(output_language),
        })
        content = await self.complete(
            credentials,
            prompt.user,
            prompt.system,
            temperature=Config.PHRASE_TEMPERATURE,
            max_tokens=Config.PHRASE_MAX_TOKENS,
            json_output=True,
        )

        try:
            phrases = parse_phrases(json.loads(content))
        except ValueError as e:
            raise ProviderError(self.name, f"invalid phrase payload: {e}") from e

        if not phrases:
            raise ProviderError(self.name, "no valid phrases received")
        if len(phrases) < len(PhraseCategory):
            logger.info("OpenAI returned %d of %d phrase categories for %r",
                        len(phrases), len(PhraseCategory), word)
        return phrases

    async def generate_explanation(self, word, target_language, output_language, credentials):
        same_language = language_name(output_language) == language_name(target_language)
        template = EXPLANATION_MONOLINGUAL if same_language else EXPLANATION_BILINGUAL
        prompt = self.prompts.render(template, {
            "word": word,
            "targetLanguage": language_name(target_language),
            "outputLanguage": language_name(output_language),
        })
        return await self.complete(
            credentials,
            prompt.user,
            prompt.system,
            temperature=Config.EXPLANATION_TEMPERATURE,
            max_tokens=Config.EXPLANATION_MAX_TOKENS,
        )

    async def validate(self, credentials: Credentials) -> bool:
        if not self.is_ready(credentials):
            return False
        try:
            return bool(await self.complete(credentials, "Hi", max_tokens=5))
        except ProviderError as e:
            logger.warning("OpenAI API key validation failed: %s", e)
            return False
