from django import template
from django.utils.safestring import mark_safe

from ..formulas import decode, render_formula

register = template.Library()


@register.filter(name='latex')
def latex(value):
    """Render storage text with its LaTeX spans wrapped for MathJax."""
    return mark_safe(decode(str(value) if value is not None else ''))


class FormulaNode(template.Node):
    def __init__(self, nodelist, options):
        self.nodelist = nodelist
        self.options = options

    def render(self, context):
        options = {name: value.resolve(context) for name, value in self.options.items()}
        return mark_safe(render_formula(self.nodelist.render(context), **options))


@register.tag(name='formula')
def do_formula(parser, token):
    """
    {% formula display="block" align="center" %}x^2 + 1{% endformula %}

    Accepted options: display, align, color, size.
    """
    bits = token.split_contents()[1:]
    options = {}
    for bit in bits:
        name, sep, value = bit.partition('=')
        if not sep or name not in ('display', 'align', 'color', 'size'):
            raise template.TemplateSyntaxError(f"Unknown formula option: {bit}")
        options[name] = parser.compile_filter(value)

    nodelist = parser.parse(('endformula',))
    parser.delete_first_token()
    return FormulaNode(nodelist, options)
