"""
FSM module for the appointment dialogue.

Public exports:
    - Command / CommandType / ListenMode: Outbound commands to the speech service
    - FlowStep / SlotPhase: Top-level steps and slot phases
    - EventType / DialogueEvent: Inbound events
    - Hypothesis / Entity / NLUResult / EntityCategory / IntentType: Recognition payloads
    - ConversationContext / DialogueState / TransitionResult: Reducer inputs and outputs
    - InputError: Recoverable conversational errors
    - SlotSpec / SlotCheck / SlotMachine: Generic slot-filling template

The flow controller (dialogue.fsm.flow) and the stateful DialogueFSM
(dialogue.fsm.dialogue_fsm) are exported from the top-level ``dialogue``
package, since they depend on the routing layer.
"""

from dialogue.fsm.commands import Command, CommandType, ListenMode
from dialogue.fsm.models import (
    TERMINAL_STEPS,
    UNKNOWN,
    WHOLE_DAY,
    ConversationContext,
    DialogueEvent,
    DialogueState,
    Entity,
    EntityCategory,
    EventType,
    FlowStep,
    Hypothesis,
    InputError,
    IntentType,
    NLUResult,
    SlotPhase,
    TransitionResult,
)
from dialogue.fsm.slot_template import SlotCheck, SlotMachine, SlotOutcome, SlotSpec

__all__ = [
    "Command",
    "CommandType",
    "ConversationContext",
    "DialogueEvent",
    "DialogueState",
    "Entity",
    "EntityCategory",
    "EventType",
    "FlowStep",
    "Hypothesis",
    "InputError",
    "IntentType",
    "ListenMode",
    "NLUResult",
    "SlotCheck",
    "SlotMachine",
    "SlotOutcome",
    "SlotPhase",
    "SlotSpec",
    "TERMINAL_STEPS",
    "TransitionResult",
    "UNKNOWN",
    "WHOLE_DAY",
]
