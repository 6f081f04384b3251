"""
Concrete slot definitions for the appointment dialogue.

Each builder returns a SlotSpec whose validation chain is evaluated in
declaration order (first match wins). Rejecting branches store the UNKNOWN
sentinel in their slot so "attempted and failed" stays distinguishable
from "not asked yet".

Slot sequence:
    AskWhat (NLU only) → AskPerson → AskDay → AskFullDay → AskTime (if not
    whole day) → AskConfirm → Booked | restart at AskPerson
"""

from dialogue.fsm.commands import ListenMode
from dialogue.fsm.models import (
    UNKNOWN,
    WHOLE_DAY,
    ConversationContext,
    FlowStep,
    InputError,
)
from dialogue.fsm.slot_template import SlotCheck, SlotSpec
from dialogue.lexicon import LexiconResolver
from dialogue.routing import IntentRouter


def _always(_utterance: str, _context: ConversationContext) -> bool:
    return True


def next_after_day(context: ConversationContext) -> FlowStep:
    """A pre-filled time makes the full-day question redundant."""
    if context.prefilled.get("time"):
        return FlowStep.ASK_TIME
    return FlowStep.ASK_FULL_DAY


def build_ask_what(router: IntentRouter) -> SlotSpec:
    """Opening step of the NLU variant: route on the classified intent."""
    return SlotSpec(
        step=FlowStep.ASK_WHAT,
        prompt="ask_what",
        listen_mode=ListenMode.NLU,
        absorb=router.absorb,
        next_step=lambda context: router.route(context.intent),
        checks=(
            SlotCheck(
                name="InvalidInput",
                guard=lambda _u, context: router.route(context.intent) is None,
                error=InputError.UNROUTABLE_INTENT,
                reply="ask_what_invalid",
            ),
            SlotCheck(name="ValidInput", guard=_always, reply="ask_what_valid"),
        ),
    )


def build_ask_person(resolver: LexiconResolver) -> SlotSpec:
    return SlotSpec(
        step=FlowStep.ASK_PERSON,
        prompt="ask_person",
        prefill_key="person",
        next_step=lambda _context: FlowStep.ASK_DAY,
        checks=(
            SlotCheck(
                name="InvalidInput",
                guard=lambda u, _c: not resolver.is_in_lexicon(u),
                error=InputError.UNRESOLVED_VALUE,
                commit=lambda _u, _c: {"person": UNKNOWN},
                reply="person_not_found",
            ),
            SlotCheck(
                name="UnrecognisedName",
                guard=lambda u, _c: resolver.person(u) is None,
                error=InputError.UNRESOLVED_VALUE,
                commit=lambda _u, _c: {"person": UNKNOWN},
                reply="person_unrecognised",
            ),
            SlotCheck(
                name="ValidInput",
                guard=_always,
                commit=lambda u, _c: {"person": resolver.person(u)},
                reply="person_valid",
            ),
        ),
    )


def build_ask_day(resolver: LexiconResolver) -> SlotSpec:
    return SlotSpec(
        step=FlowStep.ASK_DAY,
        prompt="ask_day",
        prefill_key="day",
        next_step=next_after_day,
        checks=(
            SlotCheck(
                name="InvalidDay",
                guard=lambda u, _c: not resolver.is_weekday(u),
                error=InputError.SYNTACTICALLY_INVALID,
                commit=lambda _u, _c: {"day": UNKNOWN},
                reply="day_not_weekday",
            ),
            SlotCheck(
                name="ValidInput",
                guard=lambda u, _c: resolver.day(u) is not None,
                commit=lambda u, _c: {"day": resolver.day(u)},
                reply="day_valid",
            ),
            # Weekday-shaped but not bookable
            SlotCheck(
                name="InvalidInput",
                guard=_always,
                error=InputError.UNRESOLVED_VALUE,
                commit=lambda _u, _c: {"day": UNKNOWN},
                reply="day_not_bookable",
            ),
        ),
    )


def build_ask_full_day(resolver: LexiconResolver) -> SlotSpec:
    return SlotSpec(
        step=FlowStep.ASK_FULL_DAY,
        prompt="ask_full_day",
        checks=(
            SlotCheck(
                name="NotWholeDay",
                guard=lambda u, _c: resolver.yes_no(u) is False,
                goto=FlowStep.ASK_TIME,
            ),
            SlotCheck(
                name="WholeDay",
                guard=lambda u, _c: resolver.yes_no(u) is True,
                commit=lambda _u, _c: {"time": WHOLE_DAY},
                reply="full_day_valid",
                goto=FlowStep.ASK_CONFIRM,
            ),
            SlotCheck(
                name="InvalidInput",
                guard=_always,
                error=InputError.SYNTACTICALLY_INVALID,
                reply="not_yes_no",
            ),
        ),
    )


def build_ask_time(resolver: LexiconResolver) -> SlotSpec:
    return SlotSpec(
        step=FlowStep.ASK_TIME,
        prompt="ask_time",
        prefill_key="time",
        checks=(
            SlotCheck(
                name="InvalidInput",
                guard=lambda u, _c: not resolver.is_in_lexicon(u),
                error=InputError.UNRESOLVED_VALUE,
                commit=lambda _u, _c: {"time": UNKNOWN},
                reply="time_not_bookable",
            ),
            SlotCheck(
                name="InvalidTime",
                guard=lambda u, _c: resolver.time(u) is None,
                error=InputError.SYNTACTICALLY_INVALID,
                commit=lambda _u, _c: {"time": UNKNOWN},
                reply="time_invalid",
            ),
            SlotCheck(
                name="ValidInput",
                guard=_always,
                commit=lambda u, _c: {"time": resolver.time(u)},
                reply="time_valid",
                goto=FlowStep.ASK_CONFIRM,
            ),
        ),
    )


def build_ask_confirm(resolver: LexiconResolver) -> SlotSpec:
    return SlotSpec(
        step=FlowStep.ASK_CONFIRM,
        prompt="ask_confirm",
        checks=(
            # Start over: every filled slot is discarded
            SlotCheck(
                name="Rejected",
                guard=lambda u, _c: resolver.yes_no(u) is False,
                goto=FlowStep.ASK_PERSON,
                restart=True,
            ),
            SlotCheck(
                name="Confirmed",
                guard=lambda u, _c: resolver.yes_no(u) is True,
                goto=FlowStep.BOOKED,
            ),
            SlotCheck(
                name="InvalidInput",
                guard=_always,
                error=InputError.SYNTACTICALLY_INVALID,
                reply="not_yes_no",
            ),
        ),
    )


def build_slot_specs(
    resolver: LexiconResolver,
    router: IntentRouter,
    nlu_enabled: bool,
) -> dict[FlowStep, SlotSpec]:
    """Composition table of slot steps for one dialogue variant."""
    specs = [
        build_ask_person(resolver),
        build_ask_day(resolver),
        build_ask_full_day(resolver),
        build_ask_time(resolver),
        build_ask_confirm(resolver),
    ]
    if nlu_enabled:
        specs.insert(0, build_ask_what(router))
    return {spec.step: spec for spec in specs}
