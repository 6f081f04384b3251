"""
DialogueFlow - top-level flow controller for the appointment dialogue.

The flow composes the slot sub-machines (see slots.py) with a handful of
simple steps into one hierarchical machine:

    PREPARE --SESSION_READY--> WAIT_TO_START --SESSION_START--> GREETING
    GREETING --SPEECH_OUTPUT_COMPLETE--> ASK_WHAT (NLU) | ASK_PERSON
    ASK_WHAT → ASK_PERSON | WHO_IS → DONE
    ASK_PERSON → ASK_DAY → ASK_FULL_DAY | ASK_TIME → ASK_CONFIRM
    ASK_CONFIRM → BOOKED | ASK_PERSON (restart, all slots cleared)
    DONE / BOOKED --SESSION_START--> GREETING

``transition()`` is a pure function of (state, context, event): it returns a
TransitionResult and never mutates its inputs. Command execution belongs to
the EffectRunner.
"""

import logging
from dataclasses import replace

from dialogue.fsm.commands import Command
from dialogue.fsm.models import (
    TERMINAL_STEPS,
    ConversationContext,
    DialogueEvent,
    DialogueState,
    EventType,
    FlowStep,
    TransitionResult,
)
from dialogue.fsm.slot_template import SlotMachine, SlotOutcome
from dialogue.fsm.slots import build_slot_specs
from dialogue.lexicon import LexiconResolver, get_resolver
from dialogue.prompts import render_utterance
from dialogue.routing import IntentRouter

logger = logging.getLogger(__name__)

ABANDONED = "abandoned"


class DialogueFlow:
    """
    Flow controller: composition table + pure transition function.

    Attributes:
        nlu_enabled: Open with intent routing (AskWhat) instead of AskPerson
        max_failed_turns: Consecutive failed turns tolerated on one step
                          before the session is abandoned (0 = unlimited)
        slots: FlowStep → SlotMachine for every slot step of this variant

    Example:
        >>> flow = DialogueFlow()
        >>> started = flow.start()
        >>> started.state.step
        <FlowStep.PREPARE: 'prepare'>
        >>> [c.command_type.value for c in started.commands]
        ['initialize']
    """

    def __init__(
        self,
        nlu_enabled: bool = False,
        max_failed_turns: int = 5,
        resolver: LexiconResolver | None = None,
        router: IntentRouter | None = None,
        assistant_name: str = "the appointment assistant",
    ) -> None:
        if max_failed_turns < 0:
            raise ValueError(f"max_failed_turns must be >= 0, got {max_failed_turns}")
        self.nlu_enabled = nlu_enabled
        self.max_failed_turns = max_failed_turns
        self.assistant_name = assistant_name
        self.resolver = resolver or get_resolver()
        self.router = router or IntentRouter(self.resolver)
        self.slots: dict[FlowStep, SlotMachine] = {
            step: SlotMachine(spec)
            for step, spec in build_slot_specs(self.resolver, self.router, nlu_enabled).items()
        }

    @property
    def first_step(self) -> FlowStep:
        return FlowStep.ASK_WHAT if self.nlu_enabled else FlowStep.ASK_PERSON

    def start(self) -> TransitionResult:
        """Initial state of a freshly created engine."""
        return TransitionResult(
            state=DialogueState(FlowStep.PREPARE),
            context=ConversationContext(),
            commands=[Command.initialize()],
        )

    def transition(
        self,
        state: DialogueState,
        context: ConversationContext,
        event: DialogueEvent,
    ) -> TransitionResult:
        """
        Apply one inbound event.

        Args:
            state: Current machine position
            context: Current conversation context
            event: Inbound event

        Returns:
            TransitionResult; ``accepted`` is False (and state, context are
            returned unchanged) when the current state ignores the event
        """
        machine = self.slots.get(state.step)
        if machine is not None:
            if state.phase is None:
                raise RuntimeError(f"Slot step {state.step.value} has no phase")
            outcome = machine.handle(state.phase, state.branch, context, event)
            if outcome is None:
                return self._ignored(state, context)
            return self._apply(state.step, outcome)

        step = state.step
        if step == FlowStep.PREPARE and event.type == EventType.SESSION_READY:
            return TransitionResult(DialogueState(FlowStep.WAIT_TO_START), context)

        if event.type == EventType.SESSION_START and (
            step == FlowStep.WAIT_TO_START or step in TERMINAL_STEPS
        ):
            return self._enter(FlowStep.GREETING, ConversationContext(), from_step=step)

        if event.type == EventType.SPEECH_OUTPUT_COMPLETE:
            if step == FlowStep.GREETING:
                return self._enter(self.first_step, context, from_step=step)
            if step == FlowStep.WHO_IS:
                return self._enter(FlowStep.DONE, context, from_step=step)
            if step in TERMINAL_STEPS:
                # Farewell finished playing; wait for the next session
                return TransitionResult(state, context)

        return self._ignored(state, context)

    def _ignored(self, state: DialogueState, context: ConversationContext) -> TransitionResult:
        return TransitionResult(state, context, accepted=False)

    def _apply(self, step: FlowStep, outcome: SlotOutcome) -> TransitionResult:
        """Turn a slot outcome into a flow-level result, following exits."""
        if outcome.exit_to is not None:
            entered = self._enter(
                outcome.exit_to, outcome.context, from_step=step, restart=outcome.restart
            )
            entered.commands = outcome.commands + entered.commands
            return entered

        if (
            outcome.error is not None
            and self.max_failed_turns
            and outcome.context.failed_turns >= self.max_failed_turns
        ):
            logger.warning(
                f"Abandoning session after {outcome.context.failed_turns} failed turns | "
                f"step={step.value} | last_error={outcome.error.value}"
            )
            return self._enter(FlowStep.DONE, outcome.context, from_step=step, abandoned=True)

        return TransitionResult(
            state=DialogueState(step, outcome.phase, outcome.branch, outcome.error),
            context=outcome.context,
            commands=outcome.commands,
        )

    def _enter(
        self,
        step: FlowStep,
        context: ConversationContext,
        from_step: FlowStep,
        restart: bool = False,
        abandoned: bool = False,
    ) -> TransitionResult:
        """Entry actions of a step."""
        if restart:
            logger.info(f"Restarting slot sequence from {step.value}; filled slots discarded")
            context = ConversationContext()
        if step != from_step:
            context = replace(context, failed_turns=0)

        machine = self.slots.get(step)
        if machine is not None:
            return self._apply(step, machine.enter(context))

        if step == FlowStep.GREETING:
            key = "greeting_nlu" if self.nlu_enabled else "greeting"
            utterance = render_utterance(key, assistant_name=self.assistant_name)
            return TransitionResult(
                DialogueState(step), context, [Command.speak(utterance)]
            )

        if step == FlowStep.WHO_IS:
            return TransitionResult(
                DialogueState(step), context, [Command.speak(self.router.who_is_reply(context))]
            )

        if step == FlowStep.DONE:
            key = ABANDONED if abandoned else "farewell"
            return TransitionResult(
                DialogueState(step, branch=ABANDONED if abandoned else None),
                ConversationContext(),
                [Command.speak(render_utterance(key, assistant_name=self.assistant_name))],
            )

        if step == FlowStep.BOOKED:
            logger.info(
                f"Booking confirmed | person={context.person} | day={context.day} | "
                f"time={context.time}"
            )
            key = "booked_nlu" if self.nlu_enabled else "booked"
            return TransitionResult(
                DialogueState(step),
                ConversationContext(),
                [Command.speak(render_utterance(key))],
            )

        raise KeyError(f"No entry action for step {step.value}")
