"""
LaTeX formula codec.

Converts question text between its storage form (plain text with \\( ... \\)
and \\[ ... \\] spans) and its display form (HTML wrapper elements that carry
the LaTeX for a MathJax typesetting pass).
"""

import hashlib
import html
import logging
import re

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .conf import get_setting

logger = logging.getLogger(__name__)

MATH_CLASS = 'algebra-tutor-math'

DEFAULT_CONFIG = {
    'enable_inline': True,
    'enable_block': True,
}

INLINE_SPAN = r'\\\((?P<inline>.*?)\\\)'
BLOCK_SPAN = r'\\\[(?P<block>.*?)\\\]'

OUTER_DELIMITERS = re.compile(r'^\\[\[(]|\\[\])]$')
START_TAG_END = re.compile(r'''(?:[^>"']|"[^"]*"|'[^']*')*>''')
WRAPPER_START = re.compile(r'''<(span|div)\b(?:[^>"']|"[^"]*"|'[^']*')*>''', re.IGNORECASE)

FORMULA_LIBRARY = [
    {
        'id': 'algebra',
        'name': 'Algebra',
        'formulas': [
            {'name': 'Quadratic Formula', 'latex': r'x = \frac{-b \pm \sqrt{b^2 - 4ac}}{2a}'},
            {'name': 'Binomial Expansion (a+b)²', 'latex': r'(a+b)^2 = a^2 + 2ab + b^2'},
            {'name': 'Binomial Expansion (a-b)²', 'latex': r'(a-b)^2 = a^2 - 2ab + b^2'},
            {'name': 'Difference of Squares', 'latex': r'(a+b)(a-b) = a^2 - b^2'},
        ],
    },
    {
        'id': 'geometry',
        'name': 'Geometry',
        'formulas': [
            {'name': 'Circle Area', 'latex': r'A = \pi r^2'},
            {'name': 'Triangle Area', 'latex': r'A = \frac{1}{2}bh'},
            {'name': 'Pythagorean Theorem', 'latex': r'a^2 + b^2 = c^2'},
        ],
    },
]


def _delimiters(block):
    return (r'\[', r'\]') if block else (r'\(', r'\)')


def _wrapper_element(start_tag, name):
    """Parse one start tag and return it if it is a math wrapper."""
    try:
        element = BeautifulSoup(start_tag, 'html.parser').find(name)
    except ParserRejectedMarkup as e:
        logger.warning(f"Could not parse editor markup {start_tag!r}, keeping it as is: {e}")
        return None
    if element is None or MATH_CLASS not in element.get('class', []):
        return None
    if not element.has_attr('data-latex'):
        return None
    return element


def _element_bounds(markup, start, name):
    """Locate the end of the start tag and the matching close tag.

    Returns (content_start, content_end, element_end) or None when the
    element is never closed.
    """
    head = START_TAG_END.match(markup, start)
    if head is None:
        return None
    content_start = head.end()
    if markup[content_start - 2] == '/':
        return content_start, content_start, content_start

    depth = 1
    tags = re.compile(r'<(/?)%s\b[^>]*>' % re.escape(name), re.IGNORECASE)
    for tag in tags.finditer(markup, content_start):
        if tag.group(1):
            depth -= 1
            if depth == 0:
                return content_start, tag.start(), tag.end()
        elif not tag.group(0).endswith('/>'):
            depth += 1
    return None


class FormulaCodec:
    def __init__(self, config=None):
        self.config = dict(DEFAULT_CONFIG)
        if config:
            self.config.update({k: v for k, v in config.items() if k in DEFAULT_CONFIG})
        self._cache = {}

        parts = []
        if self.config['enable_inline']:
            parts.append(INLINE_SPAN)
        if self.config['enable_block']:
            parts.append(BLOCK_SPAN)
        self._pattern = re.compile('|'.join(parts), re.DOTALL) if parts else None

    def decode(self, text):
        """Wrap every delimited LaTeX span of storage text in a display element."""
        if not text or self._pattern is None:
            return text or ''
        return self._pattern.sub(self._replace_span, text)

    def _replace_span(self, match):
        spans = match.groupdict()
        if spans.get('inline') is not None:
            return self._wrap(spans['inline'], block=False)
        return self._wrap(spans['block'], block=True)

    def _wrap(self, body, block):
        mode = 'math-block' if block else 'math-inline'
        cache_key = hashlib.md5(f'{mode}:{body}'.encode('utf-8')).hexdigest()
        if cache_key in self._cache:
            return self._cache[cache_key]

        tag = 'div' if block else 'span'
        opener, closer = _delimiters(block)
        latex = html.escape(body.strip(), quote=True)
        markup = f'<{tag} class="{MATH_CLASS} {mode}" data-latex="{latex}">{opener}{body}{closer}</{tag}>'

        self._cache[cache_key] = markup
        return markup

    def encode(self, markup):
        """Replace display wrapper elements with their delimited LaTeX.

        Text outside the wrappers is returned exactly as given, including a
        bare ``<`` that a document parser would read as the start of a tag.
        """
        if not markup or MATH_CLASS not in markup:
            return markup or ''

        pieces = []
        cursor = 0
        position = 0
        while True:
            tag = WRAPPER_START.search(markup, position)
            if tag is None:
                break
            position = tag.end()
            element = _wrapper_element(tag.group(0), tag.group(1).lower())
            if element is None:
                continue
            bounds = _element_bounds(markup, tag.start(), element.name)
            if bounds is None:
                continue
            content_start, content_end, end = bounds
            pieces.append(markup[cursor:tag.start()])
            pieces.append(self._storage_form(element, markup[content_start:content_end]))
            # wrappers nested in the replaced content go with it
            cursor = position = end

        pieces.append(markup[cursor:])
        return ''.join(pieces)

    def _storage_form(self, element, content):
        latex = element['data-latex']
        if isinstance(latex, list):
            latex = ' '.join(latex)
        latex = latex.strip()
        block = element.name == 'div' or element.get('data-display') == 'block'
        opener, closer = _delimiters(block)

        for candidate in (content, html.unescape(content)):
            if candidate.startswith(opener) and candidate.endswith(closer) and len(candidate) >= 4:
                if candidate[2:-2].strip() == latex:
                    return candidate
        return f'{opener}{latex}{closer}'

    def sanitize(self, latex, display_mode=False):
        """Clean submitted LaTeX and return it wrapped in one pair of delimiters.

        Unbalanced braces are repaired by padding the short side, which keeps
        the formula typesettable but may not be what the author meant.
        """
        original = latex or ''
        latex = original.replace("\\'", "'").replace('\\"', '"')
        latex = OUTER_DELIMITERS.sub('', latex.strip()).strip()

        opened = latex.count('{')
        closed = latex.count('}')
        if opened > closed:
            latex += '}' * (opened - closed)
        elif closed > opened:
            latex = '{' * (closed - opened) + latex
        if opened != closed:
            logger.warning(f"Repaired unbalanced braces in LaTeX {original!r} -> {latex!r}")

        opener, closer = _delimiters(display_mode)
        return f'{opener}{latex}{closer}'

    def render_formula(self, latex, display='inline', align='', color='', size=''):
        latex = (latex or '').strip()
        if not latex:
            return ''

        block = display == 'block'
        styles = [
            f'{prop}: {value}'
            for prop, value in (('text-align', align), ('color', color), ('font-size', size))
            if value
        ]
        style = f' style="{html.escape("; ".join(styles))};"' if styles else ''

        tag = 'div' if block else 'span'
        mode = 'math-block' if block else 'math-inline'
        opener, closer = _delimiters(block)
        return (
            f'<{tag} class="{MATH_CLASS} {mode}" data-latex="{html.escape(latex)}" '
            f'data-display="{"block" if block else "inline"}"{style}>{opener}{latex}{closer}</{tag}>'
        )


_codec = None


def get_codec():
    """Codec configured from settings.ALGEBRA_TUTOR, built on first use."""
    global _codec
    if _codec is None:
        _codec = FormulaCodec({
            'enable_inline': get_setting('enable_inline'),
            'enable_block': get_setting('enable_block'),
        })
    return _codec


def decode(text):
    return get_codec().decode(text)


def encode(markup):
    return get_codec().encode(markup)


def sanitize(latex, display_mode=False):
    return get_codec().sanitize(latex, display_mode)


def render_formula(latex, display='inline', align='', color='', size=''):
    return get_codec().render_formula(latex, display, align, color, size)
