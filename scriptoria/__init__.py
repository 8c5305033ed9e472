"""Scriptoria: upload a manuscript image, get a transcription, translation and analysis."""

__version__ = "0.1.0"
