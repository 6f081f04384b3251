"""Shared test helpers: event shorthands, turn driver, scripted speech service."""

from dialogue import DialogueFlow, DialogueFSM
from dialogue.fsm import (
    Command,
    CommandType,
    DialogueEvent,
    EventType,
    ListenMode,
    SlotPhase,
)
from dialogue.runtime import EventSink

SESSION_READY = DialogueEvent.of(EventType.SESSION_READY)
SESSION_START = DialogueEvent.of(EventType.SESSION_START)
SPOKEN = DialogueEvent.of(EventType.SPEECH_OUTPUT_COMPLETE)
LISTENED = DialogueEvent.of(EventType.LISTEN_COMPLETE)
SILENCE = DialogueEvent.of(EventType.NO_INPUT)


def spoken_texts(commands: list[Command]) -> list[str]:
    """Utterances of the SPEAK commands, in order."""
    return [c.utterance for c in commands if c.command_type == CommandType.SPEAK]


def finish_speaking(fsm: DialogueFSM) -> list[Command]:
    """
    Complete speech output until the engine starts listening.

    Returns every command produced on the way (replies, prompts, LISTEN).
    """
    commands: list[Command] = []
    if fsm.state.phase == SlotPhase.LISTEN:
        return commands
    for _ in range(10):
        produced = fsm.handle(SPOKEN)
        commands += produced
        if any(c.command_type == CommandType.LISTEN for c in produced):
            return commands
        if not produced:
            break
    raise AssertionError(f"Engine is not heading for LISTEN in {fsm.state.label}")


def answer(fsm: DialogueFSM, reply: str | DialogueEvent | None) -> list[Command]:
    """
    Play one user turn.

    Finishes pending speech until LISTEN, then delivers ``reply`` (None = no
    input) and LISTEN_COMPLETE. Returns the commands produced by
    LISTEN_COMPLETE.
    """
    finish_speaking(fsm)
    return _deliver(fsm, reply)


def converse(fsm: DialogueFSM, replies: list[str | DialogueEvent | None]) -> list[str]:
    """Play several turns and return everything the assistant said after the first prompt."""
    said: list[str] = []
    for reply in replies:
        said += spoken_texts(finish_speaking(fsm))
        said += spoken_texts(_deliver(fsm, reply))
    # Let the last reply (and whatever it leads to) finish playing
    for _ in range(10):
        produced = fsm.handle(SPOKEN)
        if not produced:
            break
        said += spoken_texts(produced)
        if any(c.command_type == CommandType.LISTEN for c in produced):
            break
    return said


def _deliver(fsm: DialogueFSM, reply: str | DialogueEvent | None) -> list[Command]:
    if reply is None:
        fsm.handle(SILENCE)
    elif isinstance(reply, str):
        fsm.handle(DialogueEvent.recognised(reply))
    else:
        fsm.handle(reply)
    return fsm.handle(LISTENED)


def started_fsm(nlu_enabled: bool = False, max_failed_turns: int = 5) -> DialogueFSM:
    """FSM that has greeted the user and is prompting for the first slot."""
    fsm = DialogueFSM(
        "test-conv",
        flow=DialogueFlow(nlu_enabled=nlu_enabled, max_failed_turns=max_failed_turns),
    )
    fsm.start()
    fsm.handle(SESSION_READY)
    fsm.handle(SESSION_START)
    fsm.handle(SPOKEN)
    return fsm


class ScriptedSpeechService:
    """
    In-memory Speech/NLU Service.

    SPEAK completes immediately. Each LISTEN consumes the next scripted
    answer: a string (recognised utterance), a DialogueEvent (e.g. an NLU
    result) or None (no input). With no answers left, LISTEN never
    completes, which leaves the conversation waiting.
    ``calls`` records the command types served, in order.
    """

    def __init__(self, answers: list[str | DialogueEvent | None] | None = None) -> None:
        self.answers = list(answers or [])
        self.spoken: list[str] = []
        self.listens: list[ListenMode] = []
        self.calls: list[CommandType] = []
        self.initialized = False
        self._sink: EventSink | None = None

    def attach(self, sink: EventSink) -> None:
        self._sink = sink

    async def initialize(self) -> None:
        self.calls.append(CommandType.INITIALIZE)
        self.initialized = True
        self._sink(SESSION_READY)

    async def speak(self, utterance: str) -> None:
        self.calls.append(CommandType.SPEAK)
        self.spoken.append(utterance)
        self._sink(SPOKEN)

    async def listen(self, mode: ListenMode) -> None:
        self.calls.append(CommandType.LISTEN)
        self.listens.append(mode)
        if not self.answers:
            return
        reply = self.answers.pop(0)
        if reply is None:
            self._sink(SILENCE)
        elif isinstance(reply, str):
            self._sink(DialogueEvent.recognised(reply))
        else:
            self._sink(reply)
        self._sink(LISTENED)


