"""
Emotion Companion - emotion-aware chat companion service.

Live facial-emotion samples feed a short in-memory buffer; chat replies are
produced by an ordered chain of text-generation providers that always ends
in a local template provider.
"""

__version__ = "1.0.0"
