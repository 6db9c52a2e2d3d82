from django.urls import path
from . import views

app_name = 'tutor'

urlpatterns = [
    path('', views.practice, name='practice'),
    path('api/questions/', views.question_list, name='question_list'),
    path('api/questions/save/', views.save_question, name='save_question'),
    path('api/questions/<int:question_id>/', views.question_detail, name='question_detail'),
    path('api/questions/<int:question_id>/delete/', views.delete_question, name='delete_question'),
    path('api/categories/', views.categories, name='categories'),
    path('api/submit/', views.submit_answer, name='submit_answer'),
    path('api/check/', views.check_answers, name='check_answers'),
    path('api/formulas/', views.formula_library, name='formula_library'),
    path('api/stats/', views.stats, name='stats'),
    path('export/pdf/', views.export_pdf, name='export_pdf'),
]
