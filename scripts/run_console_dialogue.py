#!/usr/bin/env python3
"""
Manual console driver for the appointment dialogue.

A text-only stand-in for the Speech/NLU Service:
1. SPEAK commands are printed
2. LISTEN commands read one line from stdin (blank line = no input)
3. In NLU mode a toy keyword extractor produces intent + entities
   ("who is madonna", "meeting with vlad on monday at 10")

Run with: ./venv/bin/python scripts/run_console_dialogue.py [--nlu]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dialogue import DialogueFSM, EffectRunner  # noqa: E402
from dialogue.fsm import (  # noqa: E402
    DialogueEvent,
    Entity,
    EntityCategory,
    EventType,
    IntentType,
    ListenMode,
)
from dialogue.lexicon import get_resolver  # noqa: E402
from dialogue.runtime import EventSink  # noqa: E402
from shared.logging_config import configure_logging  # noqa: E402

logger = logging.getLogger(__name__)


def extract_intent(text: str) -> DialogueEvent:
    """Keyword-based intent/entity extraction for manual testing."""
    resolver = get_resolver()
    lowered = resolver.normalize(text)

    if lowered.startswith("who is "):
        name = text.strip().rstrip("?.! ")[len("who is "):]
        entities = [Entity(category=EntityCategory.PERSON_NAME, text=name)] if name else []
        return DialogueEvent.understood(text, IntentType.WHO_IS.value, entities)

    if any(word in lowered for word in ("meeting", "appointment", "book")):
        entities = []
        for token in lowered.replace(",", " ").split():
            if resolver.person(token):
                entities.append(Entity(category=EntityCategory.PERSON_NAME, text=token))
            elif resolver.is_weekday(token):
                entities.append(Entity(category=EntityCategory.APPOINTMENT_DAY, text=token))
            elif resolver.time(token):
                entities.append(Entity(category=EntityCategory.APPOINTMENT_TIME, text=token))
        return DialogueEvent.understood(text, IntentType.CREATE_MEETING.value, entities)

    return DialogueEvent.understood(text, IntentType.NONE.value)


class ConsoleSpeechService:
    """Prints prompts and reads answers from stdin."""

    def __init__(self) -> None:
        self._sink: EventSink | None = None

    def attach(self, sink: EventSink) -> None:
        self._sink = sink

    def _emit(self, event: DialogueEvent) -> None:
        if self._sink is None:
            raise RuntimeError("ConsoleSpeechService is not attached to a runner")
        self._sink(event)

    async def initialize(self) -> None:
        print("🔧 Speech service ready. Press Enter to start a session, Ctrl+C to quit.\n")
        self._emit(DialogueEvent.of(EventType.SESSION_READY))

    async def speak(self, utterance: str) -> None:
        print(f"🤖 ASSISTANT: {utterance}")
        self._emit(DialogueEvent.of(EventType.SPEECH_OUTPUT_COMPLETE))

    async def listen(self, mode: ListenMode) -> None:
        marker = "🧠" if mode == ListenMode.NLU else "👤"
        text = (await asyncio.to_thread(input, f"{marker} YOU: ")).strip()
        if not text:
            self._emit(DialogueEvent.of(EventType.NO_INPUT))
        elif mode == ListenMode.NLU:
            self._emit(extract_intent(text))
        else:
            self._emit(DialogueEvent.recognised(text))
        self._emit(DialogueEvent.of(EventType.LISTEN_COMPLETE))


async def main(nlu_enabled: bool) -> None:
    configure_logging()
    fsm = DialogueFSM("console-session", nlu_enabled=nlu_enabled)
    runner = EffectRunner(fsm, ConsoleSpeechService())
    await runner.start()

    try:
        while True:
            await runner.join()
            await asyncio.to_thread(input, "\n⏎  Press Enter to start a session... ")
            runner.post(DialogueEvent.of(EventType.SESSION_START))
            # Every turn posts its follow-up event before finishing, so the
            # queue only drains once the session reaches a terminal step
            await runner.join()
            logger.debug(f"Session finished in state {fsm.state.label}")
    finally:
        await runner.stop()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--nlu", action="store_true", help="Open with intent routing")
    args = parser.parse_args()
    try:
        asyncio.run(main(args.nlu))
    except (KeyboardInterrupt, EOFError):
        print("\n👋 Bye")
