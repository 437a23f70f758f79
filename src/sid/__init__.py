"""Section identifier generation and validation."""

from .generator import SidGenerator, SidGeneratorConfig
from .grammar import is_valid_segment, is_word_char
from .validator import SidValidation, correct_sid, find_similar_sids, validate_sid

__all__ = [
    "SidGenerator",
    "SidGeneratorConfig",
    "SidValidation",
    "correct_sid",
    "find_similar_sids",
    "is_valid_segment",
    "is_word_char",
    "validate_sid",
]
