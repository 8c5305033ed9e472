"""Configuration singleton for Scriptoria."""

import json
import os
from pathlib import Path
from typing import Optional
from openai import AsyncOpenAI

from scriptoria.errors import GENERIC_ERROR_MESSAGE


class Config:
    """Singleton configuration class."""

    _instance: Optional["Config"] = None
    _CONFIG_FILE_PATH = Path.home() / ".config" / "scriptoria" / "scriptoria.json"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _update_client(self) -> None:
        """Update the AsyncOpenAI client with current settings."""
        self._client = AsyncOpenAI(base_url=self._api_base_url, api_key=self._api_key)

    def _initialize(self):
        """Initialize all configuration values."""
        # API Configuration - read from environment variables with defaults
        self._api_base_url = os.environ.get(
            "SCRIPTORIA_API_BASE_URL",
            "https://generativelanguage.googleapis.com/v1beta/openai/",
        )
        self._model_name = os.environ.get("SCRIPTORIA_MODEL_NAME", "gemini-2.5-flash")
        self._api_key = os.environ.get("SCRIPTORIA_API_KEY")
        if not self._api_key:
            raise ValueError(
                "SCRIPTORIA_API_KEY environment variable is not set. "
                "Please set it with: export SCRIPTORIA_API_KEY='your-api-key'"
            )

        # Async OpenAI client
        self._update_client()

        # Analysis Configuration
        self.MAX_TOKENS = 8192
        self.TEMPERATURE = 0.2
        self.GENERIC_ERROR_MESSAGE = GENERIC_ERROR_MESSAGE
        self.DEFAULT_MIME_TYPE = "application/octet-stream"

        # Layout Configuration
        self.EXTENSION_BREAKPOINT: int = 850
        self.HISTORY_DISPLAY_LIMIT: int = 6

        # GUI settings
        self.GUI_WINDOW_WIDTH: int = 1100
        self.GUI_WINDOW_HEIGHT: int = 800
        self.GUI_THEME: str = "light"
        self.THUMBNAIL_WIDTH: int = 120
        self.THUMBNAIL_HEIGHT: int = 160
        self.PREVIEW_MAX_SIZE: int = 420

        # System Prompt
        self.SYSTEM_PROMPT = """You are a Digital Scribe specialising in historical manuscripts, palm-leaf texts and inscriptions. You receive a single photograph or scan of a manuscript page.

## Your Task

Read the script exactly as written, then render it for a modern reader. Return structured JSON matching the provided schema.

## Fields

- **original_transcription**: Faithful transcription in the original script. Preserve line breaks. Mark illegible passages with [...].
- **modern_english**: A fluent modern English rendering of the full text.
- **modern_tamil**: A fluent modern Tamil rendering of the full text.
- **historical_context**: Likely period, region, script family and the kind of document this is.
- **linguistic_analysis**: Notable spellings, archaic grammar, abbreviations and vocabulary.
- **cultural_significance**: What the text tells us about the people, beliefs or institutions behind it.
- **translation_notes**: Ambiguities, alternative readings and choices you made while translating.
- **confidence_score**: Your confidence in the transcription between 0 and 1.

## Critical Rules

- Never invent text that is not visible on the page
- If the image contains no readable script, say so in every text field and use a confidence_score of 0
- Do not wrap the JSON in code blocks
"""
        self.USER_PROMPT = (
            "Transcribe, modernise and analyse the manuscript in this image."
        )

    def load(self) -> None:
        """Load saved settings from the JSON file.

        Only plain settings are restored; the API key, base URL and model name
        always come from the environment.
        """
        if not self._CONFIG_FILE_PATH.exists():
            return

        with open(self._CONFIG_FILE_PATH, "r") as f:
            data = json.load(f)

        for key, value in data.items():
            if key in vars(self) and not key.startswith("_"):
                setattr(self, key, value)

    @property
    def MODEL_NAME(self) -> str:
        """Get the model name."""
        return self._model_name

    @property
    def API_KEY(self) -> Optional[str]:
        """Get the API key."""
        return self._api_key

    @property
    def client(self) -> AsyncOpenAI:
        """Get the AsyncOpenAI client instance."""
        return self._client
