"""
LexiconResolver - maps recognised utterances onto canonical domain values.

All lookups are case-insensitive exact matches on a normalised utterance
(trimmed, case-folded, inner whitespace collapsed, trailing punctuation
added by the recogniser removed).
"""

import logging
import re

from dialogue.lexicon.tables import (
    BIOGRAPHIES,
    GRAMMAR,
    NO_PHRASES,
    WEEKDAYS,
    YES_PHRASES,
    GrammarEntry,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_TRAILING_PUNCTUATION = ".,!?;:"


class LexiconResolver:
    """
    Resolve utterances against static tables.

    Example:
        >>> resolver = LexiconResolver()
        >>> resolver.person("Vlad")
        'Vladislav Maraev'
        >>> resolver.person("xyz") is None
        True
    """

    def __init__(
        self,
        grammar: dict[str, GrammarEntry] | None = None,
        weekdays: frozenset[str] = WEEKDAYS,
        yes_phrases: frozenset[str] = YES_PHRASES,
        no_phrases: frozenset[str] = NO_PHRASES,
        biographies: dict[str, str] | None = None,
    ) -> None:
        if yes_phrases & no_phrases:
            raise ValueError(
                f"Affirmation and negation phrase sets overlap: {sorted(yes_phrases & no_phrases)}"
            )
        self._grammar = {
            self.normalize(key): entry for key, entry in (grammar or GRAMMAR).items()
        }
        self._weekdays = frozenset(self.normalize(d) for d in weekdays)
        self._yes = frozenset(self.normalize(p) for p in yes_phrases)
        self._no = frozenset(self.normalize(p) for p in no_phrases)
        self._biographies = {
            self.normalize(name): text for name, text in (biographies or BIOGRAPHIES).items()
        }

    @staticmethod
    def normalize(utterance: str) -> str:
        """Normalise an utterance for table lookup."""
        collapsed = _WHITESPACE.sub(" ", utterance).strip()
        return collapsed.rstrip(_TRAILING_PUNCTUATION).strip().casefold()

    def lookup(self, utterance: str) -> GrammarEntry | None:
        """Return the grammar entry for an utterance, or None if absent."""
        return self._grammar.get(self.normalize(utterance))

    def is_in_lexicon(self, utterance: str) -> bool:
        return self.lookup(utterance) is not None

    def person(self, utterance: str) -> str | None:
        return (self.lookup(utterance) or {}).get("person")

    def day(self, utterance: str) -> str | None:
        return (self.lookup(utterance) or {}).get("day")

    def time(self, utterance: str) -> str | None:
        return (self.lookup(utterance) or {}).get("time")

    def is_weekday(self, utterance: str) -> bool:
        """Weekday shape check, independent of bookability."""
        return self.normalize(utterance) in self._weekdays

    def is_yes(self, utterance: str) -> bool:
        return self.normalize(utterance) in self._yes

    def is_no(self, utterance: str) -> bool:
        return self.normalize(utterance) in self._no

    def yes_no(self, utterance: str) -> bool | None:
        """
        Resolve an affirmation/negation.

        Returns:
            True for a yes-phrase, False for a no-phrase, None when the
            utterance matches neither set (ambiguous)
        """
        if self.is_no(utterance):
            return False
        if self.is_yes(utterance):
            return True
        logger.debug(f"Ambiguous yes/no utterance: '{utterance}'")
        return None

    def biography(self, name: str) -> str | None:
        """Biography for a person name, or None when unknown or empty."""
        return self._biographies.get(self.normalize(name)) or None


_default_resolver: LexiconResolver | None = None


def get_resolver() -> LexiconResolver:
    """Shared resolver built from the default tables."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = LexiconResolver()
    return _default_resolver
