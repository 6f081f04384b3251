"""
DialogueFSM - owner of one conversation's state and context.

This module wraps the pure DialogueFlow reducer with the mutable bookkeeping
a running engine needs:
- Hold the current DialogueState and ConversationContext
- Feed inbound events through DialogueFlow.transition() one at a time
- Log all transitions (and ignored events) for debugging and monitoring
- Expose JSON-safe snapshots for state inspection
"""

import logging
from datetime import UTC, datetime
from typing import Any

from dialogue.fsm.commands import Command
from dialogue.fsm.flow import DialogueFlow
from dialogue.fsm.models import (
    TERMINAL_STEPS,
    ConversationContext,
    DialogueEvent,
    DialogueState,
    FlowStep,
)
from shared.config import get_settings

logger = logging.getLogger(__name__)


class DialogueFSM:
    """
    Stateful dialogue engine for a single conversation.

    Attributes:
        conversation_id: Unique identifier for the conversation
        state: Current DialogueState
        context: Current ConversationContext

    Example:
        >>> fsm = DialogueFSM("conv-123", nlu_enabled=False)
        >>> [c.command_type.value for c in fsm.start()]
        ['initialize']
        >>> fsm.handle(DialogueEvent.of(EventType.SESSION_READY))
        []
        >>> fsm.state.step
        <FlowStep.WAIT_TO_START: 'wait_to_start'>
    """

    def __init__(
        self,
        conversation_id: str,
        nlu_enabled: bool | None = None,
        max_failed_turns: int | None = None,
        flow: DialogueFlow | None = None,
    ) -> None:
        """
        Initialize DialogueFSM for a conversation.

        Args:
            conversation_id: Unique identifier for the conversation
            nlu_enabled: Dialogue variant (defaults to settings.NLU_ENABLED)
            max_failed_turns: Retry cap (defaults to settings.MAX_FAILED_TURNS)
            flow: Pre-built flow controller (overrides the two flags above)
        """
        if flow is None:
            settings = get_settings()
            flow = DialogueFlow(
                nlu_enabled=settings.NLU_ENABLED if nlu_enabled is None else nlu_enabled,
                max_failed_turns=(
                    settings.MAX_FAILED_TURNS if max_failed_turns is None else max_failed_turns
                ),
                assistant_name=settings.ASSISTANT_NAME,
            )
        self._conversation_id = conversation_id
        self._flow = flow
        self._state = DialogueState(FlowStep.PREPARE)
        self._context = ConversationContext()
        self._last_updated = datetime.now(UTC)

    @property
    def conversation_id(self) -> str:
        """Get the conversation ID."""
        return self._conversation_id

    @property
    def flow(self) -> DialogueFlow:
        return self._flow

    @property
    def state(self) -> DialogueState:
        """Get current machine position."""
        return self._state

    @property
    def context(self) -> ConversationContext:
        """Get current conversation context (immutable)."""
        return self._context

    @property
    def is_terminal(self) -> bool:
        return self._state.step in TERMINAL_STEPS

    def start(self) -> list[Command]:
        """
        Enter the initial PREPARE step.

        Returns:
            Startup commands (INITIALIZE)
        """
        result = self._flow.start()
        self._state = result.state
        self._context = result.context
        self._last_updated = datetime.now(UTC)

        logger.info(
            "Dialogue started: %s | nlu_enabled=%s | conversation_id=%s",
            self._state.label,
            self._flow.nlu_enabled,
            self._conversation_id,
            extra={"conversation_id": self._conversation_id, "flow_step": self._state.step.value},
        )
        return result.commands

    def handle(self, event: DialogueEvent) -> list[Command]:
        """
        Process one inbound event to completion.

        Args:
            event: Inbound event

        Returns:
            Commands to issue, in order (empty if the event was ignored)
        """
        from_state = self._state
        result = self._flow.transition(self._state, self._context, event)

        if not result.accepted:
            logger.warning(
                "Dialogue event ignored: %s | event=%s | conversation_id=%s",
                from_state.label,
                event.type.value,
                self._conversation_id,
                extra={
                    "conversation_id": self._conversation_id,
                    "flow_step": from_state.step.value,
                    "event_type": event.type.value,
                },
            )
            return []

        self._state = result.state
        self._context = result.context
        self._last_updated = datetime.now(UTC)

        logger.info(
            "Dialogue transition: %s -> %s | event=%s | conversation_id=%s",
            from_state.label,
            self._state.label,
            event.type.value,
            self._conversation_id,
            extra={
                "conversation_id": self._conversation_id,
                "flow_step": self._state.step.value,
                "slot_phase": self._state.phase.value if self._state.phase else None,
                "event_type": event.type.value,
            },
        )
        logger.debug("Dialogue snapshot: %s", self.to_dict())

        return result.commands

    def reset(self) -> None:
        """Return to WAIT_TO_START with an empty context, keeping the engine initialised."""
        from_state = self._state
        self._state = DialogueState(FlowStep.WAIT_TO_START)
        self._context = ConversationContext()
        self._last_updated = datetime.now(UTC)

        logger.info(
            "Dialogue reset: %s -> %s | conversation_id=%s",
            from_state.label,
            self._state.label,
            self._conversation_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize the engine position for inspection.

        Returns:
            Dictionary with keys: conversation_id, state, phase, branch,
            last_error, context, last_updated

        Example:
            >>> DialogueFSM("conv-123", nlu_enabled=False).to_dict()["state"]
            'prepare'
        """
        return {
            "conversation_id": self._conversation_id,
            "state": self._state.step.value,
            "phase": self._state.phase.value if self._state.phase else None,
            "branch": self._state.branch,
            "last_error": self._state.last_error.value if self._state.last_error else None,
            "context": self._context.to_dict(),
            "last_updated": self._last_updated.isoformat(),
        }
