"""
Static lookup tables for grammar-based resolution.

GRAMMAR maps a normalised utterance onto canonical slot values. Weekday
shape, yes/no phrase sets and biographies are kept separate because they are
tested independently of bookability.
"""

from typing import TypedDict


class GrammarEntry(TypedDict, total=False):
    """Canonical values an utterance can resolve to."""

    person: str  # Full name of a bookable person
    day: str  # Bookable weekday
    time: str  # Bookable time of day (HH:MM)
    yesno: str  # "Yes" / "No"


GRAMMAR: dict[str, GrammarEntry] = {
    "vlad": {"person": "Vladislav Maraev"},
    "aya": {"person": "Nayat Astaiza Soriano"},
    "victoria": {"person": "Victoria Daniilidou"},
    "monday": {"day": "Monday"},
    "tuesday": {"day": "Tuesday"},
    "yes": {"yesno": "Yes"},
    "no": {"yesno": "No"},
    "10": {"time": "10:00"},
    "11": {"time": "11:00"},
}

# Weekday shape, independent of which days are bookable
WEEKDAYS: frozenset[str] = frozenset(
    {"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"}
)

YES_PHRASES: frozenset[str] = frozenset(
    {"yes", "sure", "of course", "absolutely", "indeed", "aye"}
)
NO_PHRASES: frozenset[str] = frozenset(
    {"no", "nope", "nah", "negative", "nay", "not really"}
)

BIOGRAPHIES: dict[str, str] = {
    "michael jackson": (
        "Michael Jackson is a singer, songwriter, and dancer. "
        "He is often referred to as the 'King of Pop'."
    ),
    "madonna": (
        "Madonna is a singer, songwriter, and actress. "
        "She is often referred to as the 'Queen of Pop'."
    ),
    "mother teresa": (
        "Mother Teresa was a Roman Catholic nun and missionary. She devoted her life "
        "to helping the poor and sick in India and was awarded the Nobel Peace Prize in 1979."
    ),
}
