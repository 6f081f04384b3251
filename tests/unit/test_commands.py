"""
Unit tests for Command - outbound instructions to the speech service.

Tests:
- Command construction via the classmethod helpers
- Field consistency validation
- Serialization/deserialization
"""

import pytest

from dialogue.fsm.commands import Command, CommandType, ListenMode


class TestCommandType:
    """Test CommandType and ListenMode enums."""

    def test_command_types_exist(self):
        """Test all CommandType enum values exist."""
        assert CommandType.INITIALIZE == "initialize"
        assert CommandType.SPEAK == "speak"
        assert CommandType.LISTEN == "listen"

    def test_listen_modes_exist(self):
        assert {m.value for m in ListenMode} == {"grammar", "nlu"}


class TestCommand:
    """Test Command dataclass."""

    def test_speak(self):
        """Test creating a SPEAK command."""
        command = Command.speak("Who are you meeting with?")

        assert command.command_type == CommandType.SPEAK
        assert command.utterance == "Who are you meeting with?"
        assert command.mode is None

    def test_listen_defaults_to_grammar(self):
        """Test LISTEN uses grammar recognition unless told otherwise."""
        assert Command.listen().mode == ListenMode.GRAMMAR
        assert Command.listen(ListenMode.NLU).mode == ListenMode.NLU

    def test_initialize(self):
        command = Command.initialize()

        assert command.command_type == CommandType.INITIALIZE
        assert command.utterance is None
        assert command.mode is None

    def test_commands_are_immutable(self):
        """Test Command is frozen."""
        command = Command.speak("hello")
        with pytest.raises(AttributeError):
            command.utterance = "bye"


class TestCommandValidation:
    """Test Command validation rules."""

    def test_speak_requires_utterance(self):
        """Test SPEAK without utterance raises ValueError."""
        with pytest.raises(ValueError, match="requires an utterance"):
            Command(command_type=CommandType.SPEAK)

    def test_speak_rejects_empty_utterance(self):
        with pytest.raises(ValueError, match="requires an utterance"):
            Command.speak("")

    def test_listen_requires_mode(self):
        """Test LISTEN without mode raises ValueError."""
        with pytest.raises(ValueError, match="requires a mode"):
            Command(command_type=CommandType.LISTEN)

    def test_listen_rejects_utterance(self):
        with pytest.raises(ValueError, match="should not have an utterance"):
            Command(command_type=CommandType.LISTEN, utterance="hi", mode=ListenMode.GRAMMAR)

    def test_speak_rejects_mode(self):
        with pytest.raises(ValueError, match="should not have a mode"):
            Command(command_type=CommandType.SPEAK, utterance="hi", mode=ListenMode.NLU)

    def test_initialize_rejects_parameters(self):
        """Test INITIALIZE carries no parameters."""
        with pytest.raises(ValueError):
            Command(command_type=CommandType.INITIALIZE, mode=ListenMode.GRAMMAR)


class TestCommandSerialization:
    """Test Command serialization."""

    def test_to_dict(self):
        """Test to_dict uses plain values."""
        assert Command.listen(ListenMode.NLU).to_dict() == {
            "command_type": "listen",
            "utterance": None,
            "mode": "nlu",
        }

    def test_from_dict(self):
        """Test from_dict rebuilds an equal command."""
        data = {"command_type": "speak", "utterance": "ok, 10:00", "mode": None}

        assert Command.from_dict(data) == Command.speak("ok, 10:00")

    def test_from_dict_validates(self):
        """Test from_dict applies the same validation as the constructor."""
        with pytest.raises(ValueError):
            Command.from_dict({"command_type": "listen"})
