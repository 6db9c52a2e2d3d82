from django.contrib import admin

from .formulas import get_codec
from .models import Category, Question, Submission


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    # This displays columns in the admin list view
    list_display = ('id', 'category', 'difficulty', 'question_type', 'blank_count', 'created_at')
    # This adds a filter sidebar on the right
    list_filter = ('difficulty', 'category', 'question_type')
    search_fields = ('text',)

    def save_model(self, request, obj, form, change):
        # Text pasted from the editor may still carry display wrappers
        codec = get_codec()
        obj.text = codec.encode(obj.text)
        obj.choices = [codec.encode(choice) for choice in obj.choices or []]
        super().save_model(request, obj, form, change)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'parent', 'created_at')


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ('question', 'user_id', 'is_correct', 'timestamp')
    list_filter = ('is_correct',)
    readonly_fields = ('question', 'user_id', 'answer', 'is_correct', 'timestamp')

    def has_change_permission(self, request, obj=None):
        return False
