"""
EffectRunner - executes engine commands and serialises inbound events.

The runner owns an asyncio.Queue of DialogueEvents and a single consumer
task. Each event is handled by the DialogueFSM to completion and its
commands are awaited on the SpeechService, in order, before the next event
is dequeued, so no two turns ever overlap.

Collaborator failures never stall the conversation:
- SPEAK failure → SPEECH_OUTPUT_COMPLETE is posted on the service's behalf
- LISTEN failure → NO_INPUT + LISTEN_COMPLETE (recoverable re-prompt)
- INITIALIZE failure → propagated to the caller of start()
"""

import asyncio
import logging

from dialogue.fsm.commands import Command, CommandType
from dialogue.fsm.dialogue_fsm import DialogueFSM
from dialogue.fsm.models import DialogueEvent, EventType
from dialogue.runtime.speech_service import SpeechService

logger = logging.getLogger(__name__)


class EffectRunner:
    """
    Drive a DialogueFSM against a SpeechService.

    Example:
        >>> runner = EffectRunner(DialogueFSM("conv-1"), service)
        >>> await runner.start()
        >>> runner.post(DialogueEvent.of(EventType.SESSION_START))
        >>> await runner.join()
    """

    def __init__(self, fsm: DialogueFSM, service: SpeechService) -> None:
        self.fsm = fsm
        self.service = service
        self._queue: asyncio.Queue[DialogueEvent] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        service.attach(self.post)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Issue the startup commands and begin consuming events."""
        if self.running:
            raise RuntimeError("EffectRunner already started")
        for command in self.fsm.start():
            # Startup failures are fatal: let them reach the caller
            await self._dispatch(command)
        self._task = asyncio.create_task(self._consume(), name=f"dialogue-{self.fsm.conversation_id}")

    def post(self, event: DialogueEvent) -> None:
        """Enqueue an inbound event (safe to call from service callbacks)."""
        self._queue.put_nowait(event)

    async def join(self) -> None:
        """Wait until every posted event (and the events they caused) is processed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Cancel the consumer task."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"EffectRunner stopped | conversation_id={self.fsm.conversation_id}")

    async def process(self, event: DialogueEvent) -> None:
        """Handle one event and execute the resulting commands."""
        for command in self.fsm.handle(event):
            await self._execute(command)

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.process(event)
            except Exception as e:
                logger.error(
                    f"Error processing dialogue event {event.type.value}: {e}",
                    exc_info=True,
                    extra={
                        "conversation_id": self.fsm.conversation_id,
                        "event_type": event.type.value,
                    },
                )
            finally:
                self._queue.task_done()

    async def _execute(self, command: Command) -> None:
        try:
            await self._dispatch(command)
        except Exception as e:
            logger.error(
                f"Speech service failed on {command.command_type.value}: {e}",
                exc_info=True,
                extra={
                    "conversation_id": self.fsm.conversation_id,
                    "command_type": command.command_type.value,
                },
            )
            if command.command_type == CommandType.SPEAK:
                self.post(DialogueEvent.of(EventType.SPEECH_OUTPUT_COMPLETE))
            elif command.command_type == CommandType.LISTEN:
                self.post(DialogueEvent.of(EventType.NO_INPUT))
                self.post(DialogueEvent.of(EventType.LISTEN_COMPLETE))
            else:
                raise

    async def _dispatch(self, command: Command) -> None:
        logger.debug(
            f"Executing command | {command.to_dict()}",
            extra={"command_type": command.command_type.value},
        )
        if command.command_type == CommandType.INITIALIZE:
            await self.service.initialize()
        elif command.command_type == CommandType.SPEAK:
            await self.service.speak(command.utterance)
        elif command.command_type == CommandType.LISTEN:
            await self.service.listen(command.mode)
