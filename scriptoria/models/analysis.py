"""Structured output schema for manuscript analysis."""

from pydantic import BaseModel, Field


class ManuscriptAnalysis(BaseModel):
    """Structured output schema"""

    original_transcription: str = Field(
        description="""Faithful transcription of the manuscript in its original script.

        Preserve line breaks as they appear on the page. Mark illegible passages with [...].
        """
    )
    modern_english: str = Field(
        description="Full rendering of the text in fluent modern English."
    )
    modern_tamil: str = Field(
        description="Full rendering of the text in fluent modern Tamil."
    )
    historical_context: str = Field(
        description="""Likely period, region and script family, and the kind of document.

        Examples:
        - "historical_context": "Grantha-Tamil palm-leaf, probably 17th century Thanjavur, a temple land grant."
        - "historical_context": "Carolingian minuscule, 9th century, a monastic copy of a psalter."
        """
    )
    linguistic_analysis: str = Field(
        description="Notable spellings, archaic grammar, abbreviations and vocabulary."
    )
    cultural_significance: str = Field(
        description="What the text reveals about the people, beliefs or institutions behind it."
    )
    translation_notes: str = Field(
        description="Ambiguities, alternative readings and translation choices."
    )
    confidence_score: float = Field(
        description="""Confidence in the transcription, between 0 and 1.

        Examples:
        - "confidence_score": 0.92 (clear, complete page)
        - "confidence_score": 0.4 (damaged leaf, several gaps)
        - "confidence_score": 0 (no readable script in the image)
        """
    )
