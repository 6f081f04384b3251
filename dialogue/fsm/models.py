"""
Dialogue data models.

This module defines the core data structures used by the dialogue engine:
- FlowStep / SlotPhase: Top-level steps and the phases of a slot sub-machine
- EventType / DialogueEvent: Inbound events from the Speech/NLU Service
- Hypothesis / Entity / NLUResult: Recognition payloads
- ConversationContext: Per-conversation slot values and last recognition
- DialogueState: Position of the machine (step + phase + matched branch)
- TransitionResult: Output of the pure transition function
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dialogue.fsm.commands import Command

# Slot sentinel for "recognised but not resolvable"
UNKNOWN = "Unknown"

# Reserved time slot value for full-day bookings
WHOLE_DAY = "whole day"


class FlowStep(str, Enum):
    """Top-level steps of the dialogue flow."""

    PREPARE = "prepare"  # Waiting for the speech service to initialise
    WAIT_TO_START = "wait_to_start"  # Idle until a session is started
    GREETING = "greeting"
    ASK_WHAT = "ask_what"  # NLU variant only: intent routing
    WHO_IS = "who_is"  # NLU variant only: biography answer
    ASK_PERSON = "ask_person"
    ASK_DAY = "ask_day"
    ASK_FULL_DAY = "ask_full_day"
    ASK_TIME = "ask_time"
    ASK_CONFIRM = "ask_confirm"
    DONE = "done"  # Session ended without booking
    BOOKED = "booked"  # Booking complete


TERMINAL_STEPS = frozenset({FlowStep.DONE, FlowStep.BOOKED})


class SlotPhase(str, Enum):
    """Phases of the slot-filling sub-machine."""

    PROMPT = "prompt"
    LISTEN = "listen"
    NO_INPUT = "no_input"
    VALIDATE = "validate"  # Zero-duration, resolved within the event that enters it
    VALID = "valid"
    INVALID = "invalid"


class EventType(str, Enum):
    """Inbound events delivered by the Speech/NLU Service or session trigger."""

    SESSION_READY = "session_ready"
    SESSION_START = "session_start"
    SPEECH_OUTPUT_COMPLETE = "speech_output_complete"
    LISTEN_COMPLETE = "listen_complete"
    RECOGNITION_RESULT = "recognition_result"
    NO_INPUT = "no_input"


class IntentType(str, Enum):
    """Closed set of intents recognised at the start of an NLU conversation."""

    CREATE_MEETING = "CreateMeeting"
    WHO_IS = "WhoIs"
    NONE = "None"


class EntityCategory(str, Enum):
    """Entity categories produced by the intent/entity extractor."""

    PERSON_NAME = "personName"
    APPOINTMENT_TIME = "apptTime"
    APPOINTMENT_DAY = "apptDay"


class InputError(str, Enum):
    """Recoverable conversational errors (every one leads to a re-prompt)."""

    NO_INPUT = "no_input"
    UNRESOLVED_VALUE = "unresolved_value"
    SYNTACTICALLY_INVALID = "syntactically_invalid"
    UNROUTABLE_INTENT = "unroutable_intent"


class Hypothesis(BaseModel):
    """Single recognition hypothesis (utterance + confidence)."""

    model_config = ConfigDict(frozen=True)

    utterance: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class Entity(BaseModel):
    """Typed text span extracted by the NLU service."""

    model_config = ConfigDict(frozen=True)

    category: EntityCategory
    text: str


class NLUResult(BaseModel):
    """
    Intent/entity extraction result.

    ``top_intent`` is kept as a free string because the service may classify
    outside the closed set; the IntentRouter maps it onto IntentType.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    top_intent: str = IntentType.NONE.value
    entities: list[Entity] = Field(default_factory=list)


class DialogueEvent(BaseModel):
    """
    Inbound event.

    RECOGNITION_RESULT carries either a non-empty hypothesis list, an NLU
    result, or both. Other event types carry no payload.

    Example:
        >>> DialogueEvent.recognised("vlad").top_utterance
        'vlad'
    """

    model_config = ConfigDict(frozen=True)

    type: EventType
    hypotheses: list[Hypothesis] | None = None
    nlu: NLUResult | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "DialogueEvent":
        if self.type == EventType.RECOGNITION_RESULT:
            if not self.hypotheses and self.nlu is None:
                raise ValueError("recognition_result requires hypotheses or an nlu result")
        elif self.hypotheses is not None or self.nlu is not None:
            raise ValueError(f"{self.type.value} does not carry a recognition payload")
        return self

    @property
    def top_utterance(self) -> str | None:
        """Utterance of the best hypothesis, falling back to the NLU query."""
        if self.hypotheses:
            return self.hypotheses[0].utterance
        if self.nlu is not None and self.nlu.query:
            return self.nlu.query
        return None

    @classmethod
    def of(cls, event_type: EventType) -> "DialogueEvent":
        return cls(type=event_type)

    @classmethod
    def recognised(cls, *utterances: str, confidence: float = 1.0) -> "DialogueEvent":
        return cls(
            type=EventType.RECOGNITION_RESULT,
            hypotheses=[Hypothesis(utterance=u, confidence=confidence) for u in utterances],
        )

    @classmethod
    def understood(
        cls,
        query: str,
        top_intent: str,
        entities: list[Entity] | None = None,
    ) -> "DialogueEvent":
        return cls(
            type=EventType.RECOGNITION_RESULT,
            hypotheses=[Hypothesis(utterance=query)] if query else None,
            nlu=NLUResult(query=query, top_intent=top_intent, entities=entities or []),
        )


@dataclass(frozen=True)
class ConversationContext:
    """
    Mutable-by-replacement record of one conversation.

    Slot fields are ``None`` while unset, hold the resolved value once
    validated, or hold UNKNOWN when resolution was attempted and failed.
    Transition functions never mutate a context; they return a new one
    built with ``dataclasses.replace``.

    Attributes:
        last_recognition: Hypotheses of the current turn (None = nothing heard)
        person: Person slot
        day: Day slot
        time: Time slot (WHOLE_DAY or a concrete time)
        intent: Last classified intent (NLU variant)
        entities: Last extracted entities (NLU variant)
        prefilled: Raw entity text waiting to be validated, keyed by slot name
        failed_turns: Consecutive failed turns on the current step
    """

    last_recognition: tuple[Hypothesis, ...] | None = None
    person: str | None = None
    day: str | None = None
    time: str | None = None
    intent: IntentType | None = None
    entities: tuple[Entity, ...] = ()
    prefilled: dict[str, str] = field(default_factory=dict)
    failed_turns: int = 0

    @property
    def top_utterance(self) -> str | None:
        if not self.last_recognition:
            return None
        return self.last_recognition[0].utterance

    def entity_text(self, category: EntityCategory) -> str | None:
        """Text of the first extracted entity of the given category."""
        for entity in self.entities:
            if entity.category == category:
                return entity.text
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation for logging and inspection."""
        return {
            "last_recognition": (
                [h.model_dump() for h in self.last_recognition]
                if self.last_recognition is not None
                else None
            ),
            "person": self.person,
            "day": self.day,
            "time": self.time,
            "intent": self.intent.value if self.intent else None,
            "entities": [e.model_dump(mode="json") for e in self.entities],
            "prefilled": dict(self.prefilled),
            "failed_turns": self.failed_turns,
        }


@dataclass(frozen=True)
class DialogueState:
    """
    Position of the dialogue machine.

    Attributes:
        step: Current top-level step
        phase: Slot phase when ``step`` is a slot step, otherwise None
        branch: Name of the validation branch that produced VALID/INVALID,
                or a terminal-step variant (e.g. "abandoned")
        last_error: Error recorded by the most recent failed turn
    """

    step: FlowStep
    phase: SlotPhase | None = None
    branch: str | None = None
    last_error: InputError | None = None

    @property
    def label(self) -> str:
        """Dotted label, e.g. ``ask_day.invalid.InvalidDay``."""
        parts = [self.step.value]
        if self.phase is not None:
            parts.append(self.phase.value)
        if self.branch:
            parts.append(self.branch)
        return ".".join(parts)


@dataclass
class TransitionResult:
    """
    Result of feeding one event to the transition function.

    Attributes:
        state: State after the event (unchanged if not accepted)
        context: Context after the event (unchanged if not accepted)
        commands: Commands to issue to the Speech/NLU Service, in order
        accepted: Whether the current state handles the event
    """

    state: DialogueState
    context: ConversationContext
    commands: list[Command] = field(default_factory=list)
    accepted: bool = True
