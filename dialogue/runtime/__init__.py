"""Runtime: the speech service contract and the command/event loop."""

from dialogue.runtime.effect_runner import EffectRunner
from dialogue.runtime.speech_service import EventSink, SpeechService

__all__ = [
    "EffectRunner",
    "EventSink",
    "SpeechService",
]
