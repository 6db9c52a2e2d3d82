import logging

from .grading import correct_answer_text, grade, split_blanks
from .validators import validate_question_payload

logger = logging.getLogger(__name__)


class PracticeService:
    """Glue between the HTTP layer, the repositories, the codec and the grader."""

    def __init__(self, questions_repo, results_repo, codec, max_attempts=2, practice_count=5):
        self.questions = questions_repo
        self.results = results_repo
        self.codec = codec
        self.max_attempts = max_attempts
        self.practice_count = practice_count

    def prepare_questions(self, category=None, difficulty=None, count=None):
        """Pick random questions and convert them to display form.

        Correct answers are left out; grading happens server side.
        """
        questions = self.questions.random_questions(
            limit=count or self.practice_count,
            category=category or None,
            difficulty=difficulty or None,
        )
        return [self.display_question(q) for q in questions]

    def display_question(self, question):
        prepared = {
            'id': question.pk,
            'question_type': question.question_type,
            'category': question.category,
            'difficulty': question.difficulty,
            'text': self.codec.decode(question.text),
            'choices': [],
            'segments': [],
            'blank_count': 0,
        }
        if question.is_fill_blank:
            prepared['segments'] = [self.codec.decode(part) for part in split_blanks(question.text)]
            prepared['blank_count'] = question.blank_count
        else:
            prepared['choices'] = [
                {'value': str(position), 'text': self.codec.decode(choice)}
                for position, choice in enumerate(question.choices or [], start=1)
            ]
        return prepared

    def submit_answer(self, question_id, answer, attempt=1, user_id=0):
        question = self.questions.get_question(question_id)
        is_correct = grade(question, answer)

        if question is not None:
            self.results.record_submission(question.pk, answer, is_correct, user_id=user_id)
            logger.info(f"Recorded answer for question {question.pk}: {'correct' if is_correct else 'incorrect'}")
        else:
            logger.warning(f"Answer submitted for unknown question {question_id!r}")

        locked = is_correct or attempt >= self.max_attempts
        result = {
            'question_id': question_id,
            'is_correct': is_correct,
            'attempt': attempt,
            'locked': locked,
        }
        if locked and not is_correct and question is not None:
            result['correct_answer'] = self.codec.decode(correct_answer_text(question))
        return result

    def check_answers(self, answers):
        """Grade a batch of {question_id: answer} without recording anything."""
        score = 0
        solutions = []
        for question_id, answer in answers.items():
            question = self.questions.get_question(question_id)
            if question is None:
                continue
            is_correct = grade(question, answer)
            if is_correct:
                score += 1
            solutions.append({
                'question_id': question.pk,
                'question': question.text,
                'correct_answer': correct_answer_text(question),
                'is_correct': is_correct,
            })
        return {'score': score, 'solutions': solutions}

    def save_question(self, payload, question_id=None):
        data = validate_question_payload(payload, self.codec)
        return self.questions.save_question(data, question_id)
