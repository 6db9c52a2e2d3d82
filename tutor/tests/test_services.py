import pytest

from tutor.formulas import FormulaCodec
from tutor.models import Submission
from tutor.repositories import QuestionsRepo, ResultsRepo
from tutor.services import PracticeService
from tutor.validators import ValidationError

pytestmark = pytest.mark.django_db


@pytest.fixture
def service():
    return PracticeService(QuestionsRepo(), ResultsRepo(), FormulaCodec(), max_attempts=2, practice_count=5)


class TestPrepareQuestions:
    def test_single_select_is_decoded_without_answers(self, service, choice_question):
        [prepared] = service.prepare_questions()
        assert prepared['id'] == choice_question.pk
        assert 'data-latex="2 + 2"' in prepared['text']
        assert prepared['choices'][1]['value'] == '2'
        assert 'algebra-tutor-math' in prepared['choices'][1]['text']
        assert 'correct_answer' not in prepared
        assert prepared['blank_count'] == 0

    def test_fill_blank_segments(self, service, fill_question):
        [prepared] = service.prepare_questions()
        assert len(prepared['segments']) == 3
        assert 'data-latex="x + 1 = 5"' in prepared['segments'][0]
        assert prepared['choices'] == []
        assert prepared['blank_count'] == 2

    def test_category_filter(self, service, choice_question, fill_question):
        prepared = service.prepare_questions(category='Arithmetic')
        assert [q['id'] for q in prepared] == [choice_question.pk]


class TestSubmitAnswer:
    def test_correct_answer_locks_and_is_recorded(self, service, choice_question):
        result = service.submit_answer(choice_question.pk, '2')
        assert result == {'question_id': choice_question.pk, 'is_correct': True, 'attempt': 1, 'locked': True}
        assert Submission.objects.get().is_correct is True

    def test_first_wrong_attempt_allows_retry(self, service, choice_question):
        result = service.submit_answer(choice_question.pk, '1', attempt=1)
        assert result['locked'] is False
        assert 'correct_answer' not in result

    def test_last_wrong_attempt_reveals_answer(self, service, choice_question):
        result = service.submit_answer(choice_question.pk, '1', attempt=2)
        assert result['locked'] is True
        assert 'data-latex="4"' in result['correct_answer']
        assert Submission.objects.count() == 1

    def test_fill_blank(self, service, fill_question):
        assert service.submit_answer(fill_question.pk, [' 4', '8 '])['is_correct'] is True
        assert service.submit_answer(fill_question.pk, '4,8')['is_correct'] is False
        assert [s.answer for s in Submission.objects.order_by('id')] == [[' 4', '8 '], '4,8']

    def test_unknown_question_is_incorrect_and_not_recorded(self, service):
        result = service.submit_answer(404, '1')
        assert result['is_correct'] is False
        assert Submission.objects.count() == 0


def test_check_answers_does_not_record(service, choice_question, fill_question):
    outcome = service.check_answers({
        str(choice_question.pk): '2',
        str(fill_question.pk): ['4', '9'],
        '999': '1',
    })
    assert outcome['score'] == 1
    assert [s['is_correct'] for s in outcome['solutions']] == [True, False]
    assert outcome['solutions'][1]['correct_answer'] == '4, 8'
    assert Submission.objects.count() == 0


def test_save_question_encodes_editor_markup(service):
    question = service.save_question({
        'content': 'Solve <div class="algebra-tutor-math math-block" data-latex="x^2 = 4">rendered</div> x = __',
        'type': 'fill',
        'category': 'Quadratics',
        'difficulty': 'Hard',
        'answers': ['2'],
    })
    assert question.text == r'Solve \[x^2 = 4\] x = __'
    assert question.question_type == 'fill-blank'


def test_save_question_rejects_blank_mismatch(service):
    with pytest.raises(ValidationError):
        service.save_question({
            'content': 'x = __ and y = __',
            'type': 'fill',
            'category': 'Linear',
            'difficulty': 'Easy',
            'answers': ['1'],
        })
