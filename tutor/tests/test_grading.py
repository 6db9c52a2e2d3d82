import pytest

from tutor.grading import correct_answer_text, count_blanks, grade, split_blanks
from tutor.models import Question

SINGLE = {'type': 'single-select', 'correct': '2'}
FILL = {'type': 'fill-blank', 'correct': ['4', 'x']}


class TestSingleSelect:
    def test_matching_index(self):
        assert grade(SINGLE, '2') is True

    def test_other_index(self):
        assert grade(SINGLE, '3') is False

    def test_whitespace_is_trimmed(self):
        assert grade({'type': 'single-select', 'correct': ' 2 '}, '2 ') is True

    def test_integer_submission(self):
        assert grade(SINGLE, 2) is True

    @pytest.mark.parametrize('answer', [None, '', ['2'], {'value': '2'}, True])
    def test_malformed_submission(self, answer):
        assert grade(SINGLE, answer) is False


class TestFillBlank:
    def test_exact_order(self):
        assert grade(FILL, ['4', 'x']) is True

    def test_order_matters(self):
        assert grade(FILL, ['x', '4']) is False

    def test_length_mismatch(self):
        assert grade(FILL, ['4']) is False
        assert grade(FILL, ['4', 'x', 'y']) is False

    def test_case_and_whitespace_insensitive(self):
        assert grade({'type': 'fill-blank', 'correct': ['Paris']}, [' paris ']) is True

    def test_json_encoded_lists(self):
        assert grade({'type': 'fill-blank', 'correct': '["4", "X"]'}, '["4", "x"]') is True

    def test_numbers_compare_as_text(self):
        assert grade({'type': 'fill-blank', 'correct': [4]}, ['4']) is True

    @pytest.mark.parametrize('answer', [None, '4', 'not json', '{"a": 1}', [None, 'x'], [['4'], 'x'], 4])
    def test_malformed_submission(self, answer):
        assert grade(FILL, answer) is False

    def test_deeply_nested_json_is_incorrect(self):
        assert grade(FILL, '[' * 100000) is False
        assert grade({'type': 'fill-blank', 'correct': '[' * 100000}, ['4']) is False

    def test_question_without_answers(self):
        assert grade({'type': 'fill-blank', 'correct': []}, []) is False


class TestQuestionShapes:
    def test_missing_question(self):
        assert grade(None, '2') is False

    def test_unknown_type(self):
        assert grade({'type': 'essay', 'correct': 'x'}, 'x') is False

    def test_short_type_names(self):
        assert grade({'type': 'multiple', 'correct': '1'}, '1') is True
        assert grade({'type': 'fill', 'correct': ['a']}, ['A']) is True

    def test_model_instance(self):
        question = Question(question_type='fill-blank', correct_answer=['4', '8'], text='__ and __')
        assert grade(question, ['4', '8']) is True
        assert grade(question, ['8', '4']) is False

    def test_column_style_mapping(self):
        assert grade({'question_type': 'single-select', 'correct_answer': '3'}, '3') is True


class TestBlanks:
    def test_count_blanks(self):
        assert count_blanks('x = __ and y = _____') == 2
        assert count_blanks('a_b has no blank') == 0
        assert count_blanks(None) == 0

    def test_split_blanks(self):
        assert split_blanks('x = __ and y = ___.') == ['x = ', ' and y = ', '.']


class TestCorrectAnswerText:
    def test_single_select_shows_choice_text(self):
        question = {'type': 'single-select', 'correct': '2', 'choices': ['3', '4', '5']}
        assert correct_answer_text(question) == '4'

    def test_single_select_out_of_range_falls_back_to_index(self):
        question = {'type': 'single-select', 'correct': '9', 'choices': ['3']}
        assert correct_answer_text(question) == '9'

    def test_fill_blank_joins_answers(self):
        assert correct_answer_text(FILL) == '4, x'
        assert correct_answer_text({'type': 'fill-blank', 'correct': '["a", "b"]'}) == 'a, b'

    def test_unparseable_fill_answer_is_shown_as_stored(self):
        nested = '[' * 100000
        assert correct_answer_text({'type': 'fill-blank', 'correct': nested}) == nested

    def test_unknown_question(self):
        assert correct_answer_text(None) == ''


def test_question_model_blank_helpers():
    fill = Question(question_type='fill-blank', text='x = __, y = ____')
    assert fill.is_fill_blank is True
    assert fill.blank_count == 2
    assert Question(question_type='single-select', text='Pick one').is_fill_blank is False
