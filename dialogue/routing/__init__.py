"""
Routing layer for the NLU dialogue variant.

Architecture:
    Opening utterance → AskWhat (LISTEN in NLU mode)
        ↓
    IntentRouter.absorb(): intent + entities + slot pre-fill
        ↓
    ├─ CREATE_MEETING → AskPerson (pre-filled slots skip their prompts)
    ├─ WHO_IS → WhoIs → Done
    └─ NONE → AskWhat re-prompt
"""

from dialogue.routing.intent_router import IntentRouter

__all__ = [
    "IntentRouter",
]
