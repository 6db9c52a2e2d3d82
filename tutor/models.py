from django.db import models

from .grading import FILL_BLANK, SINGLE_SELECT, count_blanks


class Category(models.Model):
    name = models.CharField(max_length=50, unique=True)
    parent = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='children',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'categories'


class Question(models.Model):
    DIFFICULTY_CHOICES = [
        ('Easy', 'Easy'),
        ('Medium', 'Medium'),
        ('Hard', 'Hard'),
    ]

    QUESTION_TYPE_CHOICES = [
        (SINGLE_SELECT, 'Single Select'),
        (FILL_BLANK, 'Fill in the Blank'),
    ]

    # Storage form: LaTeX kept as \( ... \) / \[ ... \] spans.
    text = models.TextField()
    question_type = models.CharField(max_length=20, choices=QUESTION_TYPE_CHOICES, default=SINGLE_SELECT)
    choices = models.JSONField(default=list, blank=True)
    # 1-based choice index as a string, or one accepted answer per blank.
    correct_answer = models.JSONField()
    category = models.CharField(max_length=50)
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category} ({self.difficulty}) - {self.get_question_type_display()}"

    @property
    def is_fill_blank(self):
        return self.question_type == FILL_BLANK

    @property
    def blank_count(self):
        return count_blanks(self.text)

    def to_dict(self):
        return {
            'id': self.pk,
            'text': self.text,
            'question_type': self.question_type,
            'choices': self.choices,
            'correct_answer': self.correct_answer,
            'category': self.category,
            'difficulty': self.difficulty,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    class Meta:
        ordering = ['-id']


class Submission(models.Model):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name='submissions')
    # 0 for guests
    user_id = models.PositiveBigIntegerField(default=0, db_index=True)
    answer = models.JSONField()
    is_correct = models.BooleanField()
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        verdict = 'correct' if self.is_correct else 'incorrect'
        return f"Submission(question={self.question_id}, user={self.user_id}, {verdict})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Submissions are immutable once recorded")
        super().save(*args, **kwargs)

    def to_dict(self):
        return {
            'id': self.pk,
            'question_id': self.question_id,
            'user_id': self.user_id,
            'answer': self.answer,
            'is_correct': self.is_correct,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    class Meta:
        ordering = ['-timestamp', '-id']
