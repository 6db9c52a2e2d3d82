import logging
import re
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from .grading import BLANK_MARKER, correct_answer_text

logger = logging.getLogger(__name__)

LATEX_SPAN = re.compile(r'\\\((.*?)\\\)|\\\[(.*?)\\\]', re.DOTALL)


def sanitize_text_for_pdf(text):
    """Make storage text safe for a reportlab Paragraph.

    LaTeX spans lose their delimiters and stay readable as source, XML
    special characters are escaped and blank markers become a fixed-width gap.
    """
    text = LATEX_SPAN.sub(lambda m: (m.group(1) if m.group(1) is not None else m.group(2)).strip(), text or '')
    text = text.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')
    text = BLANK_MARKER.sub('__________', text)
    return text.replace('\n', '<br/>')


def generate_pdf_file(questions, title, include_answers=False):
    try:
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=letter, leftMargin=50, rightMargin=50, topMargin=50, bottomMargin=50)

        styles = getSampleStyleSheet()

        title_style = ParagraphStyle(
            'WorksheetTitle',
            parent=styles['Heading1'],
            fontSize=22,
            textColor=colors.HexColor('#1e40af'),
            spaceAfter=24,
            alignment=0
        )

        question_style = ParagraphStyle(
            'WorksheetQuestion',
            parent=styles['BodyText'],
            fontSize=11,
            textColor=colors.black,
            spaceAfter=6,
            leading=16
        )

        option_style = ParagraphStyle(
            'WorksheetOption',
            parent=styles['BodyText'],
            fontSize=10,
            textColor=colors.black,
            spaceAfter=3,
            leading=14,
            leftIndent=20
        )

        answer_style = ParagraphStyle(
            'WorksheetAnswer',
            parent=styles['Italic'],
            fontSize=10,
            textColor=colors.HexColor('#2d5016'),
            spaceAfter=12,
            leading=14,
            leftIndent=20
        )

        meta_style = ParagraphStyle(
            'WorksheetMeta',
            parent=styles['BodyText'],
            fontSize=8,
            textColor=colors.HexColor('#6b7280'),
            spaceAfter=2
        )

        story = []

        label = "Questions & Answers" if include_answers else "Questions"
        story.append(Paragraph(sanitize_text_for_pdf(f"{title} - {label}"), title_style))
        story.append(Spacer(1, 0.2*inch))

        for i, q in enumerate(questions, 1):
            story.append(Paragraph(sanitize_text_for_pdf(f"{q.category} · {q.difficulty}"), meta_style))
            story.append(Paragraph(f"<b>{i}.</b> {sanitize_text_for_pdf(q.text)}", question_style))

            if not q.is_fill_blank:
                for letter_index, choice in enumerate(q.choices or []):
                    option = f"{chr(ord('A') + letter_index)}. {sanitize_text_for_pdf(choice)}"
                    story.append(Paragraph(option, option_style))

            if include_answers:
                answer_text = sanitize_text_for_pdf(correct_answer_text(q))
                story.append(Paragraph(f"<b>Answer:</b> {answer_text}", answer_style))

            story.append(Spacer(1, 0.25*inch))

            if (i % 5 == 0) and (i < len(questions)):
                story.append(PageBreak())

        doc.build(story)

        buffer.seek(0)
        logger.info(f"Worksheet PDF generated ({'with' if include_answers else 'without'} answers): {len(buffer.getvalue())} bytes")
        return buffer

    except Exception as e:
        logger.error(f"Error in generate_pdf_file: {str(e)}", exc_info=True)
        raise
