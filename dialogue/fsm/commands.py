"""
Command - Outbound instructions from the dialogue engine to the speech service.

The transition function never talks to the Speech/NLU Service directly. It
returns a list of Commands and the EffectRunner executes them, which keeps
the state machine testable without a real recogniser or synthesiser.

Key components:
- CommandType: INITIALIZE, SPEAK, LISTEN
- ListenMode: Plain grammar recognition vs intent/entity extraction
- Command: Single command with its parameters

Usage:
    Command.speak("Who are you meeting with?")
    Command.listen(ListenMode.NLU)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class CommandType(str, Enum):
    """Types of commands the engine can issue."""

    INITIALIZE = "initialize"
    """Prepare recogniser and synthesiser."""

    SPEAK = "speak"
    """Synthesise and play an utterance."""

    LISTEN = "listen"
    """Start a recognition attempt."""


class ListenMode(str, Enum):
    """Recognition modes."""

    GRAMMAR = "grammar"
    NLU = "nlu"


@dataclass(frozen=True)
class Command:
    """
    Outbound command specification.

    Attributes:
        command_type: Type of command
        utterance: Text to speak (SPEAK only)
        mode: Recognition mode (LISTEN only)

    Example:
        >>> Command.speak("Hi! Let's create an appointment.")
        Command(command_type=<CommandType.SPEAK: 'speak'>, utterance="Hi! Let's create an appointment.", mode=None)
    """

    command_type: CommandType
    utterance: Optional[str] = None
    mode: Optional[ListenMode] = None

    def __post_init__(self):
        """Validate Command consistency."""
        if self.command_type == CommandType.SPEAK and not self.utterance:
            raise ValueError(f"command_type={CommandType.SPEAK} requires an utterance")

        if self.command_type != CommandType.SPEAK and self.utterance is not None:
            raise ValueError(
                f"command_type={self.command_type} should not have an utterance "
                f"(only {CommandType.SPEAK} speaks)"
            )

        if self.command_type == CommandType.LISTEN and self.mode is None:
            raise ValueError(f"command_type={CommandType.LISTEN} requires a mode")

        if self.command_type != CommandType.LISTEN and self.mode is not None:
            raise ValueError(
                f"command_type={self.command_type} should not have a mode "
                f"(only {CommandType.LISTEN} listens)"
            )

    @classmethod
    def initialize(cls) -> "Command":
        return cls(command_type=CommandType.INITIALIZE)

    @classmethod
    def speak(cls, utterance: str) -> "Command":
        return cls(command_type=CommandType.SPEAK, utterance=utterance)

    @classmethod
    def listen(cls, mode: ListenMode = ListenMode.GRAMMAR) -> "Command":
        return cls(command_type=CommandType.LISTEN, mode=mode)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize Command to dict for logging/debugging.

        Returns:
            Dict representation with all fields
        """
        return {
            "command_type": self.command_type.value,
            "utterance": self.utterance,
            "mode": self.mode.value if self.mode else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Command":
        """
        Deserialize Command from dict.

        Args:
            data: Dict with Command fields

        Returns:
            Command instance
        """
        mode = data.get("mode")
        return cls(
            command_type=CommandType(data["command_type"]),
            utterance=data.get("utterance"),
            mode=ListenMode(mode) if mode else None,
        )
