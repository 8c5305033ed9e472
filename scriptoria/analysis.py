"""Manuscript analysis through an OpenAI-compatible multimodal endpoint."""

import logging
from typing import Any, Dict, List, Optional, cast

from openai import AsyncOpenAI, OpenAIError
from openai.types.chat import ChatCompletionMessageParam
from pydantic import ValidationError

from scriptoria.config import Config
from scriptoria.encoding import to_data_uri
from scriptoria.errors import AnalysisError
from scriptoria.models.analysis import ManuscriptAnalysis

log = logging.getLogger(__name__)


def build_messages(
    system_prompt: str, user_prompt: str, encoded: str, mime_type: str
) -> List[Dict[str, Any]]:
    return [
        {
            "role": "system",
            "content": system_prompt,
        },
        {
            "role": "user",
            "content": [
                {"type": "text", "text": user_prompt},
                {
                    "type": "image_url",
                    "image_url": {"url": to_data_uri(encoded, mime_type)},
                },
            ],
        },
    ]


class ManuscriptAnalyzer:
    """Sends one manuscript image to the model and parses the structured reply."""

    def __init__(
        self, config: Optional[Config] = None, client: Optional[AsyncOpenAI] = None
    ) -> None:
        self.config = config or Config()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # Config rebuilds its client when the key or base URL change
        return self._client or self.config.client

    async def analyze(self, encoded: str, mime_type: str) -> ManuscriptAnalysis:
        """Transcribe, translate and analyse a base64-encoded manuscript image."""
        messages = build_messages(
            self.config.SYSTEM_PROMPT, self.config.USER_PROMPT, encoded, mime_type
        )
        log.info(
            f"Requesting analysis from {self.config.MODEL_NAME} ({mime_type}, {len(encoded)} chars)"
        )

        try:
            response = await self.client.chat.completions.parse(
                model=self.config.MODEL_NAME,
                messages=cast(List[ChatCompletionMessageParam], messages),
                response_format=ManuscriptAnalysis,
                max_tokens=self.config.MAX_TOKENS,
                temperature=self.config.TEMPERATURE,
            )
        except OpenAIError as e:
            log.error(f"Analysis request failed: {e}")
            raise AnalysisError(str(e)) from e
        except ValidationError as e:
            log.error(f"Analysis response did not match the schema: {e}")
            raise AnalysisError("The model returned a malformed analysis") from e

        if not response.choices:
            raise AnalysisError("The model returned no choices")

        message = response.choices[0].message
        if message.parsed is None:
            refusal = getattr(message, "refusal", None)
            raise AnalysisError(refusal or "The model returned an unreadable analysis")

        log.debug(f"Analysis parsed, confidence {message.parsed.confidence_score}")
        return message.parsed
