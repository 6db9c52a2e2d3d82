import json
import logging

from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .conf import get_setting
from .formulas import FORMULA_LIBRARY, get_codec
from .repositories import QuestionsRepo, ResultsRepo
from .services import PracticeService
from .utils import generate_pdf_file
from .validators import ValidationError, validate_category, validate_difficulty, validate_question_type

# Setup logging
logger = logging.getLogger(__name__)


def get_practice_service():
    return PracticeService(
        QuestionsRepo(),
        ResultsRepo(),
        get_codec(),
        max_attempts=get_setting('max_attempts'),
        practice_count=get_setting('practice_count'),
    )


def read_json(request):
    """Decode a JSON object request body or raise ValidationError."""
    try:
        data = json.loads(request.body or b'{}')
    except (ValueError, RecursionError):
        raise ValidationError("Invalid request data")
    if not isinstance(data, dict):
        raise ValidationError("Invalid request data")
    return data


def success(data, status=200):
    return JsonResponse({'success': True, 'data': data}, status=status)


def failure(message, status=400):
    return JsonResponse({'error': message}, status=status)


def parse_filters(params):
    filters = {}
    if params.get('category'):
        filters['category'] = validate_category(params['category'])
    if params.get('difficulty'):
        filters['difficulty'] = validate_difficulty(params['difficulty'])
    if params.get('type'):
        filters['question_type'] = validate_question_type(params['type'])
    return filters


@require_GET
def practice(request):
    """Practice page"""
    service = get_practice_service()
    category = request.GET.get('category', '').strip()
    difficulty = request.GET.get('difficulty', '').strip()

    questions = service.prepare_questions(category=category, difficulty=difficulty)

    return render(request, 'tutor/practice.html', {
        'questions': questions,
        'categories': service.questions.get_categories(),
        'selected_category': category,
        'max_attempts': service.max_attempts,
        'mathjax_cdn': get_setting('mathjax_cdn'),
    })


@require_GET
def question_list(request):
    try:
        filters = parse_filters(request.GET)
        questions = QuestionsRepo().list_questions(
            order_by=request.GET.get('orderby', 'id'),
            descending=request.GET.get('order', 'desc').lower() != 'asc',
            **filters
        )
        return success([q.to_dict() for q in questions])
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return failure(str(e))


@require_GET
def question_detail(request, question_id):
    question = QuestionsRepo().get_question(question_id)
    if question is None:
        return failure("Question not found", status=404)
    return success(question.to_dict())


@require_POST
def save_question(request):
    """Create or update a question from the editor payload"""
    try:
        payload = read_json(request)
        question_id = payload.get('question_id') or None
        question = get_practice_service().save_question(payload, question_id)
        if question is None:
            return failure("Question not found", status=404)

        if question_id:
            message = "Question updated successfully!"
        else:
            message = f"Question added successfully! (Question ID: {question.pk})"
        return success({'message': message, 'question_id': question.pk})

    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return failure(str(e))
    except Exception as e:
        logger.error(f"Error saving question: {e}", exc_info=True)
        return failure("Error saving the question.", status=500)


@require_POST
def delete_question(request, question_id):
    if not QuestionsRepo().delete_question(question_id):
        return failure("Question not found", status=404)
    return success({'message': "Question deleted successfully!"})


@require_http_methods(['GET', 'POST'])
def categories(request):
    repo = QuestionsRepo()
    if request.method == 'GET':
        return success(repo.get_categories())

    try:
        name = validate_category(read_json(request).get('category_name'))
        category = repo.add_category(name)
        if category is None:
            raise ValidationError("Error adding category. It may already exist.")
        return success({'category_id': category.pk, 'category_name': category.name}, status=201)
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return failure(str(e))


@require_POST
def submit_answer(request):
    """Grade one answer and record the attempt"""
    try:
        payload = read_json(request)
        if 'question_id' not in payload:
            raise ValidationError("Missing question ID")
        try:
            attempt = max(1, int(payload.get('attempt', 1)))
        except (TypeError, ValueError):
            raise ValidationError("Invalid attempt number")

        result = get_practice_service().submit_answer(payload['question_id'], payload.get('answer'), attempt=attempt)
        return success(result)

    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return failure(str(e))
    except Exception as e:
        logger.error(f"Error recording answer: {e}", exc_info=True)
        return failure("Error saving answer.", status=500)


@require_POST
def check_answers(request):
    try:
        answers = read_json(request).get('answers')
        if not isinstance(answers, dict):
            raise ValidationError("Answers data is missing or invalid.")
        return success(get_practice_service().check_answers(answers))
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return failure(str(e))


@require_GET
def formula_library(request):
    return success(FORMULA_LIBRARY)


@require_GET
def stats(request):
    results = ResultsRepo()
    return success({
        'summary': results.summary(),
        'categories': results.performance_by_category(),
        'popular_questions': results.popular_questions(5),
        'daily_activity': results.daily_activity(7),
    })


@require_GET
def export_pdf(request):
    """Download questions as a PDF worksheet"""
    try:
        filters = parse_filters(request.GET)
        questions = QuestionsRepo().list_questions(order_by='id', descending=False, **filters)
        include_answers = request.GET.get('answers', 'no') == 'yes'

        title = filters.get('category', 'Algebra Practice')
        pdf_buffer = generate_pdf_file(questions, title, include_answers=include_answers)

        suffix = "Questions_and_Answers" if include_answers else "Questions"
        filename = f"{title.replace(' ', '_')}_{suffix}.pdf"
        response = HttpResponse(pdf_buffer.getvalue(), content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response

    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return failure(str(e))
    except Exception as e:
        logger.error(f"Error generating worksheet PDF: {e}", exc_info=True)
        return HttpResponse(f'Error generating PDF: {str(e)}', status=500)
