from .grading import FILL_BLANK, QUESTION_TYPES, SINGLE_SELECT, count_blanks, normalize_type
from .models import Question

DIFFICULTIES = ['Easy', 'Medium', 'Hard']
# Category rows and question labels share this limit
MAX_CATEGORY_LENGTH = Question._meta.get_field('category').max_length


class ValidationError(Exception):
    pass


def _clean_text(value):
    return value.strip() if isinstance(value, str) else ''


def validate_question_type(qtype):
    normalized = normalize_type(qtype)
    if normalized is None:
        raise ValidationError(f"Invalid question type. Must be one of: {', '.join(QUESTION_TYPES)}")
    return normalized


def validate_difficulty(difficulty):
    if difficulty not in DIFFICULTIES:
        raise ValidationError(f"Invalid difficulty. Must be one of: {', '.join(DIFFICULTIES)}")
    return difficulty


def validate_category(name):
    name = _clean_text(name)
    if not name:
        raise ValidationError("Category name is required")
    if len(name) > MAX_CATEGORY_LENGTH:
        raise ValidationError(f"Category name is too long. Maximum length: {MAX_CATEGORY_LENGTH}")
    return name


def validate_text(text):
    if not _clean_text(text):
        raise ValidationError("Question text is required")
    return text


def validate_choices(choices):
    if not isinstance(choices, (list, tuple)):
        raise ValidationError("Answer options must be a list")
    cleaned = [_clean_text(choice) for choice in choices]
    if len(cleaned) < 2:
        raise ValidationError("A single-select question needs at least two answer options")
    if not all(cleaned):
        raise ValidationError("Answer options cannot be empty")
    return cleaned


def validate_correct_choice(index, choices):
    """Check a 0-based editor index and return the stored 1-based string."""
    try:
        index = int(index)
    except (TypeError, ValueError):
        raise ValidationError("Missing or invalid correct answer")
    if index < 0 or index >= len(choices):
        raise ValidationError("Correct answer must point to one of the answer options")
    return str(index + 1)


def validate_correct_position(position, choices):
    """Check a stored 1-based position such as "2" against the choices."""
    if isinstance(position, bool):
        raise ValidationError("Missing or invalid correct answer")
    try:
        index = int(str(position).strip()) - 1
    except (TypeError, ValueError):
        raise ValidationError("Missing or invalid correct answer")
    return validate_correct_choice(index, choices)


def validate_fill_answers(text, answers):
    if not isinstance(answers, (list, tuple)) or not answers:
        raise ValidationError("No fill-in-the-blank answers found")
    cleaned = [_clean_text(answer) for answer in answers]
    if not all(cleaned):
        raise ValidationError("Fill-in-the-blank answers cannot be empty")
    blanks = count_blanks(text)
    if blanks != len(cleaned):
        raise ValidationError(f"Question has {blanks} blank(s) but {len(cleaned)} answer(s) were given")
    return cleaned


def validate_question_payload(payload, codec):
    """Validate an editor payload and return data ready for QuestionsRepo.

    The payload uses the editor's field names: content, type, category,
    difficulty, answers and, for single-select, the 0-based correctAnswer
    (or the stored 1-based correct_answer when correctAnswer is absent).
    Editor HTML is converted back to storage form with the codec.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request data")

    text = codec.encode(validate_text(payload.get('content')))
    question_type = validate_question_type(payload.get('type'))
    data = {
        'text': text,
        'question_type': question_type,
        'category': validate_category(payload.get('category')),
        'difficulty': validate_difficulty(payload.get('difficulty')),
    }

    answers = payload.get('answers')
    if question_type == SINGLE_SELECT:
        choices = [codec.encode(choice) for choice in validate_choices(answers)]
        data['choices'] = choices
        if payload.get('correctAnswer') is None and 'correct_answer' in payload:
            data['correct_answer'] = validate_correct_position(payload['correct_answer'], choices)
        else:
            data['correct_answer'] = validate_correct_choice(payload.get('correctAnswer'), choices)
    elif question_type == FILL_BLANK:
        data['choices'] = []
        data['correct_answer'] = validate_fill_answers(text, answers)
    return data
