import pytest

from tutor.formulas import FormulaCodec
from tutor.models import Category, Question
from tutor.validators import (
    MAX_CATEGORY_LENGTH,
    ValidationError,
    validate_category,
    validate_choices,
    validate_correct_choice,
    validate_correct_position,
    validate_difficulty,
    validate_fill_answers,
    validate_question_payload,
    validate_question_type,
)


def test_question_type_aliases():
    assert validate_question_type('multiple') == 'single-select'
    assert validate_question_type('fill-blank') == 'fill-blank'
    with pytest.raises(ValidationError):
        validate_question_type('essay')


def test_difficulty():
    assert validate_difficulty('Hard') == 'Hard'
    with pytest.raises(ValidationError):
        validate_difficulty('hard')


def test_category_is_trimmed_and_bounded():
    assert validate_category('  Quadratics ') == 'Quadratics'
    with pytest.raises(ValidationError):
        validate_category('   ')
    with pytest.raises(ValidationError):
        validate_category('x' * 51)


def test_choices_need_two_non_empty_options():
    assert validate_choices([' 1 ', '2']) == ['1', '2']
    with pytest.raises(ValidationError):
        validate_choices(['only one'])
    with pytest.raises(ValidationError):
        validate_choices(['a', ''])
    with pytest.raises(ValidationError):
        validate_choices('a,b')


def test_correct_choice_is_stored_one_based():
    assert validate_correct_choice(0, ['a', 'b']) == '1'
    assert validate_correct_choice('1', ['a', 'b']) == '2'
    with pytest.raises(ValidationError):
        validate_correct_choice(2, ['a', 'b'])
    with pytest.raises(ValidationError):
        validate_correct_choice(None, ['a', 'b'])


def test_fill_answers_must_match_blank_count():
    assert validate_fill_answers('x = __, y = __', [' 1', '2 ']) == ['1', '2']
    with pytest.raises(ValidationError, match='2 blank'):
        validate_fill_answers('x = __, y = __', ['1'])
    with pytest.raises(ValidationError):
        validate_fill_answers('x = __', [])


class TestQuestionPayload:
    def test_single_select_payload(self):
        codec = FormulaCodec()
        payload = {
            'content': 'Pick <span class="algebra-tutor-math math-inline" data-latex="x^2">x²</span>',
            'type': 'multiple',
            'category': 'Powers',
            'difficulty': 'Easy',
            'answers': ['<span class="algebra-tutor-math" data-latex="1">1</span>', '2'],
            'correctAnswer': 1,
        }
        data = validate_question_payload(payload, codec)
        assert data == {
            'text': r'Pick \(x^2\)',
            'question_type': 'single-select',
            'category': 'Powers',
            'difficulty': 'Easy',
            'choices': [r'\(1\)', '2'],
            'correct_answer': '2',
        }

    def test_fill_blank_payload(self):
        payload = {
            'content': 'x + 1 = 3, so x = __',
            'type': 'fill-blank',
            'category': 'Linear',
            'difficulty': 'Medium',
            'answers': ['2'],
        }
        data = validate_question_payload(payload, FormulaCodec())
        assert data['correct_answer'] == ['2']
        assert data['choices'] == []

    def test_missing_text(self):
        with pytest.raises(ValidationError, match='text is required'):
            validate_question_payload({'content': '  ', 'type': 'fill'}, FormulaCodec())

    def test_payload_must_be_an_object(self):
        with pytest.raises(ValidationError):
            validate_question_payload(['content'], FormulaCodec())

    def test_stored_one_based_correct_answer(self):
        payload = {
            'content': 'Pick the even number',
            'type': 'single-select',
            'category': 'Numbers',
            'difficulty': 'Easy',
            'answers': ['3', '4', '5'],
            'correct_answer': '2',
        }
        assert validate_question_payload(payload, FormulaCodec())['correct_answer'] == '2'

    @pytest.mark.parametrize('stored', ['0', '4', 'two', None, True])
    def test_stored_correct_answer_must_address_a_choice(self, stored):
        payload = {
            'content': 'Pick one',
            'type': 'single-select',
            'category': 'Numbers',
            'difficulty': 'Easy',
            'answers': ['3', '4', '5'],
            'correct_answer': stored,
        }
        with pytest.raises(ValidationError):
            validate_question_payload(payload, FormulaCodec())

    def test_editor_index_takes_precedence(self):
        payload = {
            'content': 'Pick one',
            'type': 'multiple',
            'category': 'Numbers',
            'difficulty': 'Easy',
            'answers': ['3', '4'],
            'correctAnswer': 0,
            'correct_answer': '2',
        }
        assert validate_question_payload(payload, FormulaCodec())['correct_answer'] == '1'


def test_correct_position():
    assert validate_correct_position(' 3 ', ['a', 'b', 'c']) == '3'
    assert validate_correct_position(1, ['a', 'b']) == '1'
    with pytest.raises(ValidationError):
        validate_correct_position('3', ['a', 'b'])


def test_category_limit_matches_the_model_columns():
    assert MAX_CATEGORY_LENGTH == Question._meta.get_field('category').max_length
    assert MAX_CATEGORY_LENGTH == Category._meta.get_field('name').max_length
    assert validate_category('x' * MAX_CATEGORY_LENGTH) == 'x' * MAX_CATEGORY_LENGTH
