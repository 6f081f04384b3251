"""
Intent Router - classifies the opening utterance of an NLU conversation.

The router is a stateless collaborator of the AskWhat step:
- maps the extractor's top intent onto the closed IntentType set
- for CreateMeeting, turns extracted entities into pre-filled slot values so
  the following slots can skip their prompts
- answers WhoIs questions from the static biography table

Key decision: Which step follows AskWhat?
- CREATE_MEETING → AskPerson (appointment flow, slots pre-filled)
- WHO_IS → WhoIs (informational flow, then the session ends)
- NONE → re-prompt AskWhat
"""

import logging
from dataclasses import replace

from dialogue.fsm.models import (
    ConversationContext,
    DialogueEvent,
    EntityCategory,
    FlowStep,
    Hypothesis,
    IntentType,
)
from dialogue.lexicon import LexiconResolver, get_resolver
from dialogue.prompts import render_utterance

logger = logging.getLogger(__name__)


class IntentRouter:
    """
    Routes a classified intent to the next flow step.

    Example:
        >>> router = IntentRouter()
        >>> router.classify("CreateMeeting")
        <IntentType.CREATE_MEETING: 'CreateMeeting'>
        >>> router.classify("BookFlight")
        <IntentType.NONE: 'None'>
    """

    ROUTES: dict[IntentType, FlowStep] = {
        IntentType.CREATE_MEETING: FlowStep.ASK_PERSON,
        IntentType.WHO_IS: FlowStep.WHO_IS,
    }

    # Entity category → ConversationContext.prefilled key
    PREFILL_SLOTS: dict[EntityCategory, str] = {
        EntityCategory.PERSON_NAME: "person",
        EntityCategory.APPOINTMENT_DAY: "day",
        EntityCategory.APPOINTMENT_TIME: "time",
    }

    def __init__(self, resolver: LexiconResolver | None = None) -> None:
        self.resolver = resolver or get_resolver()

    @staticmethod
    def classify(top_intent: str | None) -> IntentType:
        """Map an extractor intent onto the closed set; anything else is NONE."""
        if not top_intent:
            return IntentType.NONE
        try:
            intent = IntentType(top_intent)
        except ValueError:
            logger.info(f"Intent outside closed set treated as None | top_intent={top_intent}")
            return IntentType.NONE
        return intent

    def route(self, intent: IntentType | None) -> FlowStep | None:
        return self.ROUTES.get(intent) if intent else None

    def absorb(self, context: ConversationContext, event: DialogueEvent) -> ConversationContext:
        """
        Fold an NLU recognition event into the context.

        Stores the intent, the entity list and the hypotheses (the intent
        label stands in for the utterance when the query is empty). For
        CREATE_MEETING the first entity of each category pre-fills its slot.
        """
        nlu = event.nlu
        intent = self.classify(nlu.top_intent if nlu else None)
        entities = tuple(nlu.entities) if nlu else ()

        prefilled: dict[str, str] = {}
        if intent == IntentType.CREATE_MEETING:
            for entity in entities:
                slot = self.PREFILL_SLOTS.get(entity.category)
                if slot and slot not in prefilled and entity.text.strip():
                    prefilled[slot] = entity.text.strip()

        hypotheses = tuple(event.hypotheses or ())
        if not hypotheses and event.top_utterance:
            hypotheses = (Hypothesis(utterance=event.top_utterance),)
        elif not hypotheses and nlu is not None:
            # A classified result without query text still counts as heard
            hypotheses = (Hypothesis(utterance=intent.value),)

        logger.info(
            f"Routing intent | type={intent.value} | entities={len(entities)} | "
            f"prefilled={sorted(prefilled)}"
        )
        return replace(
            context,
            last_recognition=hypotheses or None,
            intent=intent,
            entities=entities,
            prefilled=prefilled,
        )

    def who_is_reply(self, context: ConversationContext) -> str:
        """Answer a WhoIs question from the extracted person name."""
        name = context.entity_text(EntityCategory.PERSON_NAME)
        biography = (self.resolver.biography(name) if name else None) or render_utterance(
            "no_biography"
        )
        return render_utterance("who_is", name=name or "", biography=biography)
