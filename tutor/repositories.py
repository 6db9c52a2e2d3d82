"""
Persistence for questions, categories and submissions.

Views and the practice service receive these repositories instead of
querying the ORM directly.
"""

import logging
from datetime import timedelta

from django.db.models import Count, Q
from django.db.models.functions import TruncDate
from django.utils import timezone

from .grading import FILL_BLANK
from .models import Category, Question, Submission

logger = logging.getLogger(__name__)

ORDERABLE_COLUMNS = ['id', 'category', 'difficulty', 'created_at']
QUESTION_FIELDS = ['text', 'question_type', 'choices', 'correct_answer', 'category', 'difficulty']


def _success_rate(correct, attempts):
    return round(correct / attempts * 100, 1) if attempts else 0


class QuestionsRepo:
    def get_question(self, question_id):
        try:
            return Question.objects.filter(pk=int(question_id)).first()
        except (TypeError, ValueError):
            return None

    def list_questions(self, category=None, difficulty=None, question_type=None,
                       order_by='id', descending=True):
        questions = Question.objects.all()
        if category:
            questions = questions.filter(category=category)
        if difficulty:
            questions = questions.filter(difficulty=difficulty)
        if question_type:
            questions = questions.filter(question_type=question_type)

        column = order_by if order_by in ORDERABLE_COLUMNS else 'id'
        return list(questions.order_by(f"-{column}" if descending else column))

    def random_questions(self, limit=5, category=None, difficulty=None):
        questions = Question.objects.all()
        if category:
            questions = questions.filter(category=category)
        if difficulty:
            questions = questions.filter(difficulty=difficulty)
        return list(questions.order_by('?')[:limit])

    def save_question(self, data, question_id=None):
        """Insert a question, or update it when question_id is given.

        Returns the saved Question, or None when question_id does not exist.
        """
        values = {field: data[field] for field in QUESTION_FIELDS if field in data}
        if values.get('question_type') == FILL_BLANK:
            values['choices'] = []

        if question_id:
            question = self.get_question(question_id)
            if question is None:
                return None
            for field, value in values.items():
                setattr(question, field, value)
            question.save()
            logger.info(f"Updated question {question.pk}")
        else:
            question = Question.objects.create(**values)
            logger.info(f"Created question {question.pk} in category {question.category}")
        return question

    def delete_question(self, question_id):
        question = self.get_question(question_id)
        if question is None:
            return False
        question.delete()
        logger.info(f"Deleted question {question_id}")
        return True

    def get_categories(self):
        names = set(Category.objects.values_list('name', flat=True))
        names.update(Question.objects.values_list('category', flat=True).distinct())
        return sorted(names)

    def add_category(self, name, parent=None):
        if Category.objects.filter(name=name).exists():
            return None
        category = Category.objects.create(name=name, parent=parent)
        logger.info(f"Added category {name}")
        return category


class ResultsRepo:
    def record_submission(self, question_id, answer, is_correct, user_id=0):
        return Submission.objects.create(
            question_id=question_id,
            answer=answer,
            is_correct=bool(is_correct),
            user_id=user_id,
        )

    def recent_results(self, limit=10):
        return list(Submission.objects.select_related('question')[:limit])

    def results_by_user(self, user_id, limit=100):
        return list(Submission.objects.select_related('question').filter(user_id=user_id)[:limit])

    def performance_by_category(self):
        rows = (
            Submission.objects.order_by()
            .values('question__category')
            .annotate(attempts=Count('id'), correct=Count('id', filter=Q(is_correct=True)))
        )
        performance = [
            {
                'category': row['question__category'],
                'attempts': row['attempts'],
                'correct': row['correct'],
                'success_rate': _success_rate(row['correct'], row['attempts']),
            }
            for row in rows
        ]
        return sorted(performance, key=lambda row: (-row['success_rate'], row['category']))

    def popular_questions(self, limit=5):
        questions = (
            Question.objects.annotate(
                attempts=Count('submissions'),
                correct_attempts=Count('submissions', filter=Q(submissions__is_correct=True)),
            )
            .filter(attempts__gt=0)
            .order_by('-attempts', 'id')[:limit]
        )
        return [
            {
                'id': q.pk,
                'text': q.text,
                'category': q.category,
                'attempts': q.attempts,
                'correct_attempts': q.correct_attempts,
                'success_rate': _success_rate(q.correct_attempts, q.attempts),
            }
            for q in questions
        ]

    def daily_activity(self, days=7):
        today = timezone.localdate()
        first_day = today - timedelta(days=days - 1)
        rows = (
            Submission.objects.order_by()
            .annotate(day=TruncDate('timestamp'))
            .filter(day__gte=first_day)
            .values('day')
            .annotate(attempts=Count('id'))
        )
        counts = {row['day']: row['attempts'] for row in rows}
        return [
            {'date': day.isoformat(), 'attempts': counts.get(day, 0)}
            for day in (first_day + timedelta(days=offset) for offset in range(days))
        ]

    def summary(self):
        attempts = Submission.objects.count()
        correct = Submission.objects.filter(is_correct=True).count()
        return {
            'questions': Question.objects.count(),
            'categories': len(QuestionsRepo().get_categories()),
            'attempts': attempts,
            'students': Submission.objects.order_by().values('user_id').distinct().count(),
            'correct': correct,
            'success_rate': _success_rate(correct, attempts),
        }
