import os

import pytest

# Config() refuses to start without a key; no request is ever sent in tests
os.environ.setdefault("SCRIPTORIA_API_KEY", "test-key")

from scriptoria.models.analysis import ManuscriptAnalysis  # noqa: E402


def make_analysis(confidence: float = 0.92, **overrides) -> ManuscriptAnalysis:
    fields = {
        "original_transcription": "ஸ்ரீ ராம ஜயம்",
        "modern_english": "Victory to Sri Rama",
        "modern_tamil": "ஸ்ரீ ராமருக்கு வெற்றி",
        "historical_context": "Palm-leaf invocation, 18th century",
        "linguistic_analysis": "Grantha ligatures in the opening word",
        "cultural_significance": "Customary opening of devotional copies",
        "translation_notes": "Jayam rendered as victory",
        "confidence_score": confidence,
    }
    fields.update(overrides)
    return ManuscriptAnalysis(**fields)


@pytest.fixture()
def analysis() -> ManuscriptAnalysis:
    return make_analysis()


@pytest.fixture()
def png_bytes() -> bytes:
    """A tiny valid PNG image."""
    import io

    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (8, 12), color="white").save(buf, format="PNG")
    return buf.getvalue()
