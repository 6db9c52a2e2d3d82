"""
Answer grading for single-select and fill-in-the-blank questions.

grade() is total: a missing question, an unknown type or a submission of the
wrong shape is graded as incorrect instead of raising.
"""

import json
import re
from collections.abc import Mapping

SINGLE_SELECT = 'single-select'
FILL_BLANK = 'fill-blank'
QUESTION_TYPES = [SINGLE_SELECT, FILL_BLANK]

# Older records and editor payloads use the short names.
TYPE_ALIASES = {
    SINGLE_SELECT: SINGLE_SELECT,
    'multiple': SINGLE_SELECT,
    FILL_BLANK: FILL_BLANK,
    'fill': FILL_BLANK,
}

BLANK_MARKER = re.compile(r'_{2,}')


def normalize_type(value):
    if not isinstance(value, str):
        return None
    return TYPE_ALIASES.get(value.strip().lower())


def count_blanks(text):
    return len(BLANK_MARKER.findall(text or ''))


def split_blanks(text):
    """Split question text into the segments around its blank markers."""
    return BLANK_MARKER.split(text or '')


def _field(question, *names):
    for name in names:
        if isinstance(question, Mapping):
            if name in question:
                return question[name]
        elif hasattr(question, name):
            return getattr(question, name)
    return None


def answer_key(question):
    """Return (question_type, correct_answer) of a model instance or a mapping."""
    if question is None:
        return None, None
    question_type = normalize_type(_field(question, 'question_type', 'type'))
    return question_type, _field(question, 'correct_answer', 'correct')


def _scalar(value):
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _answer_list(value):
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (ValueError, RecursionError):
            return None
    if not isinstance(value, (list, tuple)):
        return None

    answers = []
    for item in value:
        text = _scalar(item)
        if text is None:
            return None
        answers.append(text.strip().lower())
    return answers


def grade(question, submitted_answer):
    question_type, correct = answer_key(question)

    if question_type == SINGLE_SELECT:
        expected = _scalar(correct)
        given = _scalar(submitted_answer)
        if expected is None or given is None or not expected.strip():
            return False
        return given.strip() == expected.strip()

    if question_type == FILL_BLANK:
        expected = _answer_list(correct)
        given = _answer_list(submitted_answer)
        if not expected or given is None:
            return False
        return len(given) == len(expected) and all(g == e for g, e in zip(given, expected))

    return False


def correct_answer_text(question):
    """Human readable correct answer, shown once a question is locked."""
    question_type, correct = answer_key(question)

    if question_type == FILL_BLANK:
        answers = correct
        if isinstance(answers, str):
            try:
                answers = json.loads(answers)
            except (ValueError, RecursionError):
                return answers
        if isinstance(answers, (list, tuple)):
            return ', '.join(str(a) for a in answers)
        return str(answers or '')

    if question_type == SINGLE_SELECT:
        choices = _field(question, 'choices') or []
        index = _scalar(correct)
        if index is not None and index.strip().isdigit():
            position = int(index.strip()) - 1
            if 0 <= position < len(choices):
                return choices[position]
        return index or ''

    return ''
