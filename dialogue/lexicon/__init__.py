"""
Lexicon resolution for grammar-based recognition.

Public exports:
    - LexiconResolver: Utterance -> canonical value lookups
    - get_resolver: Shared resolver over the default tables
    - GrammarEntry: TypedDict of canonical values per utterance
"""

from dialogue.lexicon.resolver import LexiconResolver, get_resolver
from dialogue.lexicon.tables import (
    BIOGRAPHIES,
    GRAMMAR,
    NO_PHRASES,
    WEEKDAYS,
    YES_PHRASES,
    GrammarEntry,
)

__all__ = [
    "BIOGRAPHIES",
    "GRAMMAR",
    "GrammarEntry",
    "LexiconResolver",
    "NO_PHRASES",
    "WEEKDAYS",
    "YES_PHRASES",
    "get_resolver",
]
