"""Body rendering: the constrained markup dialect to safe HTML via markdown-it"""

from functools import lru_cache

from markdown_it import MarkdownIt

from blogpub.core.utils.slug import slugify


# Only these rules run; anything else (lists, quotes, raw HTML, images) stays literal text.
ENABLED_RULES = ['heading', 'emphasis', 'backticks', 'link', 'newline', 'escape']


def _heading_open(self, tokens, idx, options, env):
    """Render <hN id="..."> with the id that extract_headings() derives for the same title."""
    inline = tokens[idx + 1] if idx + 1 < len(tokens) else None
    if inline is not None and inline.type == 'inline':
        anchor = slugify(inline.content)
        if anchor:
            tokens[idx].attrSet('id', anchor)
    return self.renderToken(tokens, idx, options, env)


@lru_cache(maxsize=1)
def _make_parser() -> MarkdownIt:
    """Build the shared MarkdownIt instance: 'zero' preset plus the dialect's rules, raw HTML off."""
    md = MarkdownIt('zero', options_update={'html': False, 'linkify': False, 'typographer': False})
    md.enable(ENABLED_RULES)
    md.add_render_rule('heading_open', _heading_open)
    return md


def render_markup(text: str) -> str:
    """Render body text to an HTML fragment.

    Headings (#, ##, ###), **strong**, *emphasis*, `code`, [links](url) and
    blank-line separated paragraphs are converted. Literal '<' and '>' are
    escaped and unsupported syntax is passed through as text.
    """
    if not text or not text.strip():
        return ''
    return _make_parser().render(text)
