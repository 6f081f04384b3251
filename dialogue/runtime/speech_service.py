"""
SpeechService - contract of the external Speech/NLU collaborator.

Implementations perform the actual synthesis/recognition and report back by
posting DialogueEvents to the EffectRunner they are attached to:

- initialize() → later posts SESSION_READY
- speak(utterance) → later posts SPEECH_OUTPUT_COMPLETE
- listen(mode) → later posts RECOGNITION_RESULT or NO_INPUT, then LISTEN_COMPLETE

A method returning does not mean the output finished; completion is only
ever signalled through events.
"""

from typing import Callable, Protocol, runtime_checkable

from dialogue.fsm.commands import ListenMode
from dialogue.fsm.models import DialogueEvent

EventSink = Callable[[DialogueEvent], None]


@runtime_checkable
class SpeechService(Protocol):
    """Speech synthesis / recognition / intent extraction collaborator."""

    def attach(self, sink: EventSink) -> None:
        """Register the callable that receives this service's events."""
        ...

    async def initialize(self) -> None:
        ...

    async def speak(self, utterance: str) -> None:
        ...

    async def listen(self, mode: ListenMode) -> None:
        ...
