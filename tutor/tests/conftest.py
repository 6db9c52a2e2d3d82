import pytest

from tutor.models import Question


@pytest.fixture
def choice_question(db):
    return Question.objects.create(
        text=r'What is \(2 + 2\)?',
        question_type='single-select',
        choices=['3', r'\(4\)', '5'],
        correct_answer='2',
        category='Arithmetic',
        difficulty='Easy',
    )


@pytest.fixture
def fill_question(db):
    return Question.objects.create(
        text=r'If \(x + 1 = 5\) then x = __ and \(2x\) = ___',
        question_type='fill-blank',
        choices=[],
        correct_answer=['4', '8'],
        category='Linear Equations',
        difficulty='Medium',
    )
