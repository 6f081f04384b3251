"""
Slot-filling dialogue engine for voice-driven appointment booking.

Public exports:
    - DialogueFSM: Stateful engine for one conversation
    - DialogueFlow: Pure flow controller (composition table + transition function)
    - EffectRunner: Executes commands against a SpeechService, serialises events
    - SpeechService: Contract of the external speech/NLU collaborator
    - IntentRouter: Opening-intent classification (NLU variant)
    - LexiconResolver: Utterance → canonical value lookups
"""

from dialogue.fsm.dialogue_fsm import DialogueFSM
from dialogue.fsm.flow import DialogueFlow
from dialogue.lexicon import LexiconResolver
from dialogue.routing import IntentRouter
from dialogue.runtime import EffectRunner, SpeechService

__all__ = [
    "DialogueFSM",
    "DialogueFlow",
    "EffectRunner",
    "IntentRouter",
    "LexiconResolver",
    "SpeechService",
]
