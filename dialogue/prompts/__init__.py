"""
System utterances for the appointment dialogue.

Every line the assistant speaks is a Jinja2 template keyed by name. Slot
specs and flow steps refer to templates by key; the values are rendered at
state-entry time with the current context (``person``, ``day``, ``time``)
and the current turn's ``utterance``.
"""

import logging
from typing import Any

from jinja2 import Environment, StrictUndefined, Template

logger = logging.getLogger(__name__)

UTTERANCES: dict[str, str] = {
    # Flow steps
    "greeting": "Hi! Let's create an appointment.",
    "greeting_nlu": "Hi! I am {{ assistant_name }}.",
    "farewell": "Thank you for using {{ assistant_name }}! Goodbye!",
    "booked": "Your appointment has been created!",
    "booked_nlu": "Ok, your meeting has been set up! Goodbye!",
    "abandoned": "Sorry, I'm having trouble understanding you. Please try again later. Goodbye!",
    # Shared slot lines
    "no_input": "Sorry, I didn't hear anything!",
    "not_yes_no": "sorry, but I heard {{ utterance }}. Please answer with yes or no.",
    # AskWhat
    "ask_what": "What can I help you with?",
    "ask_what_invalid": (
        "Sorry, I didn't understand that. "
        "You can ask to make an appointment or ask about a person."
    ),
    "ask_what_valid": "All right, let's go!",
    # WhoIs
    "who_is": (
        "{% if name %}ok, you want to know about {{ name }}. {{ biography }}"
        "{% else %}Sorry, {{ biography }} I can only give information "
        "if I have the name of a person.{% endif %}"
    ),
    "no_biography": "I couldn't find any information.",
    # AskPerson
    "ask_person": "Who are you meeting with?",
    "person_not_found": (
        "sorry, but there does not seem to be a person with the name "
        "{{ utterance }} in our system."
    ),
    "person_unrecognised": "Sorry, I did not recognise that name.",
    "person_valid": "ok, you are meeting with {{ person }}",
    # AskDay
    "ask_day": "On which day is your meeting?",
    "day_not_weekday": "sorry, but {{ utterance }} is not a valid weekday name.",
    "day_not_bookable": (
        "sorry, but {{ utterance }} does not seem to be a bookable day in our system."
    ),
    "day_valid": "ok, your meeting is on {{ day }}",
    # AskFullDay
    "ask_full_day": "Will it take the whole day?",
    "full_day_valid": "ok, {{ time }}",
    # AskTime
    "ask_time": "What time is your meeting?",
    "time_not_bookable": (
        "sorry, but {{ utterance }} does not seem to be a bookable time in our system."
    ),
    "time_invalid": "sorry, but {{ utterance }} is not a valid time.",
    "time_valid": "ok, {{ time }}",
    # AskConfirm
    "ask_confirm": (
        "Do you want me to create an appointment with {{ person }} on {{ day }} "
        "{% if time == 'whole day' %}for the whole day{% else %}at {{ time }}{% endif %}?"
    ),
}

_environment = Environment(undefined=StrictUndefined, autoescape=False)
_compiled: dict[str, Template] = {}


def render_utterance(key: str, **template_vars: Any) -> str:
    """
    Render a system utterance.

    Args:
        key: Template key in UTTERANCES
        **template_vars: Variables referenced by the template

    Returns:
        Rendered text

    Raises:
        KeyError: Unknown template key
        jinja2.UndefinedError: Template references a variable not supplied

    Example:
        >>> render_utterance("day_valid", day="Monday")
        'ok, your meeting is on Monday'
    """
    template = _compiled.get(key)
    if template is None:
        template = _environment.from_string(UTTERANCES[key])
        _compiled[key] = template
    return template.render(**template_vars)
