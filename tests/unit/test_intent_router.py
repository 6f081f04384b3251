"""
Unit tests for IntentRouter and the NLU dialogue variant.

Tests:
- Intent classification onto the closed set
- Route table
- Entity absorption and slot pre-filling
- WhoIs answers
- NLU conversations end to end (AskWhat → AskPerson / WhoIs)
"""

import pytest

from dialogue.fsm import (
    ConversationContext,
    DialogueEvent,
    Entity,
    EntityCategory,
    FlowStep,
    InputError,
    IntentType,
    ListenMode,
    SlotPhase,
)
from dialogue.routing import IntentRouter
from tests.helpers import (
    SPOKEN,
    answer,
    converse,
    finish_speaking,
    spoken_texts,
    started_fsm,
)


def _entity(category: EntityCategory, text: str) -> Entity:
    return Entity(category=category, text=text)


def create_meeting(query: str = "create a meeting", **slots: str) -> DialogueEvent:
    categories = {
        "person": EntityCategory.PERSON_NAME,
        "day": EntityCategory.APPOINTMENT_DAY,
        "time": EntityCategory.APPOINTMENT_TIME,
    }
    entities = [_entity(categories[name], text) for name, text in slots.items()]
    return DialogueEvent.understood(query, IntentType.CREATE_MEETING.value, entities)


def who_is(name: str | None) -> DialogueEvent:
    entities = [_entity(EntityCategory.PERSON_NAME, name)] if name else []
    return DialogueEvent.understood(f"who is {name or ''}".strip(), IntentType.WHO_IS.value, entities)


@pytest.fixture
def router() -> IntentRouter:
    return IntentRouter()


class TestIntentRouterConstants:
    """Tests for the route table."""

    def test_routes(self):
        assert IntentRouter.ROUTES == {
            IntentType.CREATE_MEETING: FlowStep.ASK_PERSON,
            IntentType.WHO_IS: FlowStep.WHO_IS,
        }

    def test_none_intent_has_no_route(self, router):
        assert router.route(IntentType.NONE) is None
        assert router.route(None) is None

    def test_every_prefill_slot_is_a_slot_step_key(self):
        assert set(IntentRouter.PREFILL_SLOTS.values()) == {"person", "day", "time"}


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "top_intent,expected",
        [
            ("CreateMeeting", IntentType.CREATE_MEETING),
            ("WhoIs", IntentType.WHO_IS),
            ("None", IntentType.NONE),
            ("BookFlight", IntentType.NONE),
            ("", IntentType.NONE),
            (None, IntentType.NONE),
        ],
    )
    def test_classify(self, top_intent, expected):
        assert IntentRouter.classify(top_intent) == expected


class TestAbsorb:
    """Tests for folding NLU results into the context."""

    def test_create_meeting_prefills_slots(self, router):
        event = create_meeting(person="vlad", day="monday", time="10")

        context = router.absorb(ConversationContext(), event)

        assert context.intent == IntentType.CREATE_MEETING
        assert context.prefilled == {"person": "vlad", "day": "monday", "time": "10"}
        assert context.top_utterance == "create a meeting"

    def test_first_entity_of_a_category_wins(self, router):
        event = DialogueEvent.understood(
            "meet vlad or aya",
            "CreateMeeting",
            [
                _entity(EntityCategory.PERSON_NAME, "vlad"),
                _entity(EntityCategory.PERSON_NAME, "aya"),
            ],
        )

        assert router.absorb(ConversationContext(), event).prefilled == {"person": "vlad"}

    def test_blank_entities_are_not_prefilled(self, router):
        event = create_meeting(person="  ")

        assert router.absorb(ConversationContext(), event).prefilled == {}

    def test_who_is_does_not_prefill(self, router):
        context = router.absorb(ConversationContext(), who_is("Madonna"))

        assert context.intent == IntentType.WHO_IS
        assert context.prefilled == {}
        assert context.entity_text(EntityCategory.PERSON_NAME) == "Madonna"

    def test_empty_query_keeps_intent_as_hypothesis(self, router):
        event = DialogueEvent.understood("", IntentType.WHO_IS.value)

        context = router.absorb(ConversationContext(), event)

        assert context.top_utterance == "WhoIs"
        assert context.intent == IntentType.WHO_IS

    def test_unknown_intent_absorbed_as_none(self, router):
        event = DialogueEvent.understood("book a flight", "BookFlight")

        assert router.absorb(ConversationContext(), event).intent == IntentType.NONE


class TestWhoIsReply:
    """Tests for who_is_reply()."""

    def test_known_person(self, router):
        context = router.absorb(ConversationContext(), who_is("Madonna"))

        assert router.who_is_reply(context) == (
            "ok, you want to know about Madonna. Madonna is a singer, songwriter, "
            "and actress. She is often referred to as the 'Queen of Pop'."
        )

    def test_unknown_person(self, router):
        context = router.absorb(ConversationContext(), who_is("Bob"))

        assert router.who_is_reply(context) == (
            "ok, you want to know about Bob. I couldn't find any information."
        )

    def test_missing_name(self, router):
        context = router.absorb(ConversationContext(), who_is(None))

        assert router.who_is_reply(context) == (
            "Sorry, I couldn't find any information. "
            "I can only give information if I have the name of a person."
        )


class TestNLUConversation:
    """End-to-end conversations of the NLU variant."""

    def test_greeting_and_opening_question(self):
        fsm = started_fsm(nlu_enabled=True)

        assert fsm.state.label == "ask_what.prompt"
        assert fsm.handle(SPOKEN)[0].mode == ListenMode.NLU

    def test_create_meeting_without_entities(self, nlu_fsm):
        said = converse(nlu_fsm, [create_meeting()])

        assert said == ["All right, let's go!", "Who are you meeting with?"]
        assert nlu_fsm.state.label == "ask_person.listen"

    def test_prefilled_person_skips_prompt(self, nlu_fsm):
        said = converse(nlu_fsm, [create_meeting(person="vlad")])

        assert said == [
            "All right, let's go!",
            "ok, you are meeting with Vladislav Maraev",
            "On which day is your meeting?",
        ]
        assert nlu_fsm.context.prefilled == {}

    def test_fully_prefilled_meeting(self, nlu_fsm):
        said = converse(nlu_fsm, [create_meeting(person="vlad", day="monday", time="10"), "yes"])

        assert said == [
            "All right, let's go!",
            "ok, you are meeting with Vladislav Maraev",
            "ok, your meeting is on Monday",
            "ok, 10:00",
            "Do you want me to create an appointment with Vladislav Maraev on Monday at 10:00?",
            "Ok, your meeting has been set up! Goodbye!",
        ]
        assert nlu_fsm.state.step == FlowStep.BOOKED

    def test_invalid_prefill_falls_back_to_prompt(self, nlu_fsm):
        said = converse(nlu_fsm, [create_meeting(person="bob")])

        assert said == [
            "All right, let's go!",
            "sorry, but there does not seem to be a person with the name bob in our system.",
            "Who are you meeting with?",
        ]
        assert nlu_fsm.state.label == "ask_person.listen"

    def test_who_is_ends_session(self, nlu_fsm):
        said = converse(nlu_fsm, [who_is("Madonna")])

        assert said[0] == "All right, let's go!"
        assert said[1].startswith("ok, you want to know about Madonna. Madonna is a singer")
        assert said[2] == "Thank you for using the appointment assistant! Goodbye!"
        assert nlu_fsm.state.step == FlowStep.DONE
        assert nlu_fsm.context == ConversationContext()

    def test_unroutable_intent_reprompts(self, nlu_fsm):
        commands = answer(nlu_fsm, DialogueEvent.understood("book a flight", "BookFlight"))

        assert nlu_fsm.state.label == "ask_what.invalid.InvalidInput"
        assert nlu_fsm.state.last_error == InputError.UNROUTABLE_INTENT
        assert spoken_texts(commands) == [
            "Sorry, I didn't understand that. "
            "You can ask to make an appointment or ask about a person."
        ]
        assert spoken_texts(finish_speaking(nlu_fsm)) == ["What can I help you with?"]

    def test_classified_result_without_query_is_validated(self, nlu_fsm):
        """An NLU result with no query text still counts as something heard."""
        event = DialogueEvent.understood(
            "", IntentType.CREATE_MEETING.value, [_entity(EntityCategory.PERSON_NAME, "vlad")]
        )

        said = converse(nlu_fsm, [event])

        assert said == [
            "All right, let's go!",
            "ok, you are meeting with Vladislav Maraev",
            "On which day is your meeting?",
        ]

    def test_unroutable_result_without_query_reprompts(self, nlu_fsm):
        answer(nlu_fsm, DialogueEvent.understood("", "BookFlight"))

        assert nlu_fsm.state.label == "ask_what.invalid.InvalidInput"

    def test_silence_at_opening_question(self, nlu_fsm):
        answer(nlu_fsm, None)

        assert nlu_fsm.state.phase == SlotPhase.NO_INPUT

    def test_confirm_rejection_does_not_return_to_intent_step(self, nlu_fsm):
        converse(nlu_fsm, [create_meeting(person="vlad", day="monday", time="10")])

        commands = answer(nlu_fsm, "no")

        assert nlu_fsm.state.label == "ask_person.prompt"
        assert spoken_texts(commands) == ["Who are you meeting with?"]
