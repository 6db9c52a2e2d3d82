from django.conf import settings

DEFAULTS = {
    'enable_inline': True,
    'enable_block': True,
    'mathjax_version': '3.2.2',
    'mathjax_cdn': 'https://cdn.jsdelivr.net/npm/mathjax@3.2.2/es5/tex-mml-chtml.js',
    'practice_count': 5,
    'max_attempts': 2,
}


def get_setting(name):
    """Read one key of settings.ALGEBRA_TUTOR, falling back to DEFAULTS."""
    overrides = getattr(settings, 'ALGEBRA_TUTOR', None) or {}
    return overrides.get(name, DEFAULTS[name])
