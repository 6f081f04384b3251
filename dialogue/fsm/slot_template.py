"""
Slot-Filling Template - generic Prompt -> Listen -> Validate sub-machine.

Every slot of the dialogue (and the NLU AskWhat step) is an instance of
SlotSpec driven by SlotMachine. The machine is a pure reducer: it takes the
current phase, the context and an event, and returns a SlotOutcome holding
the next phase, a new context and the commands to issue. It never mutates
the context it receives.

Phase graph:

    (enter) --prefilled--> VALIDATE
    (enter) -------------> PROMPT --SPEECH_OUTPUT_COMPLETE--> LISTEN
    LISTEN  --RECOGNITION_RESULT / NO_INPUT--> LISTEN (store / clear result)
    LISTEN  --LISTEN_COMPLETE--> VALIDATE (result stored) | NO_INPUT
    NO_INPUT --SPEECH_OUTPUT_COMPLETE--> PROMPT
    VALIDATE --first matching SlotCheck--> VALID | INVALID
    VALID   --SPEECH_OUTPUT_COMPLETE--> exit to next FlowStep
    INVALID --SPEECH_OUTPUT_COMPLETE--> PROMPT

VALIDATE has no user-visible action and is resolved inside the same call.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from dialogue.fsm.commands import Command, ListenMode
from dialogue.fsm.models import (
    ConversationContext,
    DialogueEvent,
    EventType,
    FlowStep,
    Hypothesis,
    InputError,
    SlotPhase,
)
from dialogue.prompts import render_utterance

logger = logging.getLogger(__name__)

Guard = Callable[[str, ConversationContext], bool]
Commit = Callable[[str, ConversationContext], dict[str, Any]]
Absorb = Callable[[ConversationContext, DialogueEvent], ConversationContext]


@dataclass(frozen=True)
class SlotCheck:
    """
    One branch of a slot's validation chain.

    Branches are evaluated in declaration order; the first whose guard
    returns True wins.

    Attributes:
        name: Branch label (e.g. "ValidInput", "InvalidDay")
        guard: Predicate over (candidate utterance, context)
        error: InputError for rejecting branches; None for accepting ones
        commit: Returns context field updates to apply when the branch wins
        reply: Utterance template key spoken on entry; accepting branches
               without a reply exit immediately
        goto: Exit target for accepting branches (defaults to SlotSpec.next_step)
        restart: Accepting branch discards every filled slot before exiting
    """

    name: str
    guard: Guard
    error: InputError | None = None
    commit: Commit | None = None
    reply: str | None = None
    goto: FlowStep | None = None
    restart: bool = False

    @property
    def accepts(self) -> bool:
        return self.error is None


def store_hypotheses(context: ConversationContext, event: DialogueEvent) -> ConversationContext:
    """Default recognition handler: keep the hypothesis list for this turn."""
    hypotheses = tuple(event.hypotheses or ())
    if not hypotheses and event.top_utterance:
        hypotheses = (Hypothesis(utterance=event.top_utterance),)
    return replace(context, last_recognition=hypotheses or None)


@dataclass(frozen=True)
class SlotSpec:
    """
    Parameters of one slot sub-machine.

    Attributes:
        step: FlowStep this slot implements
        prompt: Utterance template key for the question
        checks: Ordered validation chain (must be exhaustive)
        listen_mode: Recognition mode requested in LISTEN
        prefill_key: Key in ConversationContext.prefilled that skips prompting
        next_step: Chooses the FlowStep after an accepting branch without goto
        absorb: Folds a RECOGNITION_RESULT event into the context
    """

    step: FlowStep
    prompt: str
    checks: tuple[SlotCheck, ...]
    listen_mode: ListenMode = ListenMode.GRAMMAR
    prefill_key: str | None = None
    next_step: Callable[[ConversationContext], FlowStep] | None = None
    absorb: Absorb = store_hypotheses

    def check(self, name: str) -> SlotCheck:
        for check in self.checks:
            if check.name == name:
                return check
        raise KeyError(f"{self.step.value} has no validation branch '{name}'")


@dataclass
class SlotOutcome:
    """
    Result of a slot reducer call.

    Either ``phase`` is set (the machine stays inside the slot) or
    ``exit_to`` is set (the flow controller enters another step).
    """

    context: ConversationContext
    commands: list[Command] = field(default_factory=list)
    phase: SlotPhase | None = None
    branch: str | None = None
    error: InputError | None = None
    exit_to: FlowStep | None = None
    restart: bool = False


def template_vars(context: ConversationContext, utterance: str | None = None) -> dict[str, Any]:
    """Variables available to every slot utterance template."""
    return {
        "utterance": utterance or "",
        "person": context.person or "",
        "day": context.day or "",
        "time": context.time or "",
    }


class SlotMachine:
    """
    Pure reducer for one SlotSpec.

    Example:
        >>> machine = SlotMachine(person_spec)
        >>> outcome = machine.enter(ConversationContext())
        >>> outcome.phase
        <SlotPhase.PROMPT: 'prompt'>
    """

    def __init__(self, spec: SlotSpec) -> None:
        self.spec = spec

    def enter(self, context: ConversationContext) -> SlotOutcome:
        """Enter the slot, validating a pre-filled value instead of prompting."""
        key = self.spec.prefill_key
        if key and context.prefilled.get(key):
            prefilled = dict(context.prefilled)
            candidate = prefilled.pop(key)
            logger.info(
                f"Slot {self.spec.step.value}: validating pre-filled value '{candidate}'"
            )
            return self._validate(candidate, replace(context, prefilled=prefilled))
        return self._prompt(context)

    def handle(
        self,
        phase: SlotPhase,
        branch: str | None,
        context: ConversationContext,
        event: DialogueEvent,
    ) -> SlotOutcome | None:
        """
        Apply an event in the given phase.

        Returns:
            SlotOutcome, or None if the phase does not accept the event
        """
        if phase == SlotPhase.PROMPT:
            if event.type == EventType.SPEECH_OUTPUT_COMPLETE:
                return self._listen(context)

        elif phase == SlotPhase.LISTEN:
            if event.type == EventType.RECOGNITION_RESULT:
                return SlotOutcome(context=self.spec.absorb(context, event), phase=SlotPhase.LISTEN)
            if event.type == EventType.NO_INPUT:
                return SlotOutcome(
                    context=replace(context, last_recognition=None), phase=SlotPhase.LISTEN
                )
            if event.type == EventType.LISTEN_COMPLETE:
                if context.top_utterance:
                    return self._validate(context.top_utterance, context)
                return self._no_input(context)

        elif phase == SlotPhase.NO_INPUT:
            if event.type == EventType.SPEECH_OUTPUT_COMPLETE:
                return self._prompt(context)

        elif phase == SlotPhase.INVALID:
            if event.type == EventType.SPEECH_OUTPUT_COMPLETE:
                return self._prompt(context)

        elif phase == SlotPhase.VALID:
            if event.type == EventType.SPEECH_OUTPUT_COMPLETE and branch:
                return self._exit(self.spec.check(branch), context)

        return None

    def _prompt(self, context: ConversationContext) -> SlotOutcome:
        utterance = render_utterance(self.spec.prompt, **template_vars(context))
        return SlotOutcome(
            context=context,
            commands=[Command.speak(utterance)],
            phase=SlotPhase.PROMPT,
        )

    def _listen(self, context: ConversationContext) -> SlotOutcome:
        # A fresh turn never sees the previous turn's result
        return SlotOutcome(
            context=replace(context, last_recognition=None),
            commands=[Command.listen(self.spec.listen_mode)],
            phase=SlotPhase.LISTEN,
        )

    def _no_input(self, context: ConversationContext) -> SlotOutcome:
        logger.info(
            f"Slot {self.spec.step.value}: nothing heard | error={InputError.NO_INPUT.value}"
        )
        return SlotOutcome(
            context=replace(context, failed_turns=context.failed_turns + 1),
            commands=[Command.speak(render_utterance("no_input"))],
            phase=SlotPhase.NO_INPUT,
            error=InputError.NO_INPUT,
        )

    def _validate(self, candidate: str, context: ConversationContext) -> SlotOutcome:
        check = next((c for c in self.spec.checks if c.guard(candidate, context)), None)
        if check is None:
            raise RuntimeError(
                f"Validation chain of {self.spec.step.value} matched nothing for '{candidate}'"
            )

        if check.commit is not None:
            context = replace(context, **check.commit(candidate, context))

        if not check.accepts:
            context = replace(context, failed_turns=context.failed_turns + 1)
            logger.info(
                f"Slot {self.spec.step.value}: rejected '{candidate}' | "
                f"branch={check.name} | error={check.error.value}"
            )
            return SlotOutcome(
                context=context,
                commands=[
                    Command.speak(
                        render_utterance(check.reply, **template_vars(context, candidate))
                    )
                ],
                phase=SlotPhase.INVALID,
                branch=check.name,
                error=check.error,
            )

        context = replace(context, failed_turns=0)
        logger.info(f"Slot {self.spec.step.value}: accepted '{candidate}' | branch={check.name}")
        if check.reply is None:
            return self._exit(check, context)
        return SlotOutcome(
            context=context,
            commands=[
                Command.speak(render_utterance(check.reply, **template_vars(context, candidate)))
            ],
            phase=SlotPhase.VALID,
            branch=check.name,
        )

    def _exit(self, check: SlotCheck, context: ConversationContext) -> SlotOutcome:
        target = check.goto
        if target is None:
            if self.spec.next_step is None:
                raise RuntimeError(
                    f"{self.spec.step.value}.{check.name} has neither goto nor next_step"
                )
            target = self.spec.next_step(context)
        return SlotOutcome(context=context, exit_to=target, restart=check.restart)
