"""
Custom Pygments lexer for orfalius sources

Highlights the authoring syntax itself when notes show their own markup
(code blocks tagged ``orfalius`` or ``orf``).

Token types:
- Keyword.Declaration: directive block markers (!!!, ;;;, +++... )
- Name.Decorator: paragraph sigils (^ ! : ; @ % &)
- Generic.Heading: headings
- Name.Builtin: {{ snippet }} includes
- Name.Tag: [[Key]] keyboard keys
- Literal: $math$
"""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Whitespace,
    Keyword,
    Name,
    String,
    Generic,
    Literal,
    Comment,
)


class OrfaliusLexer(RegexLexer):
    """
    Lexer for orfalius annotated markdown

    Example:
        ;;; Setup
        :lecture.mp4
        ;;;

    Tokens:
        ;;; → Keyword.Declaration
        Setup → String
        : → Name.Decorator
    """

    name = 'Orfalius'
    aliases = ['orfalius', 'orf']
    filenames = ['*.md', '*.mds']

    tokens = {
        'root': [
            # HTML comments
            (r'<!--.*?-->', Comment),

            # Directive block markers with optional title
            (r'^(!{3,}|\?{3,}|:{3,}|´{3,}|;{3,}|\|{3,}|/{21,}|\+{42,})([^\n]*)(\n)',
             bygroups(Keyword.Declaration, String, Whitespace)),

            # Headings
            (r'^#{1,6}[^\n]*\n', Generic.Heading),

            # Escaped sigils render literally
            (r'^(\^\^|!!|::|;;|@@|%%|&&)', Text),

            # Paragraph sigils
            (r'^[\^!:;@%&]', Name.Decorator, 'sigil'),

            (r'\{\{[^}]*\}\}', Name.Builtin),
            (r'\[\[[^\]\n]*\]\]', Name.Tag),
            (r'\$[^$\n]+\$', Literal),

            (r'[^\n{\[$<]+', Text),
            (r'\n', Whitespace),
            (r'.', Text),
        ],

        'sigil': [
            # Sigil remainder up to end of line (folder, video, anchor id...)
            (r'[^\n]+', Name.Attribute),
            (r'\n', Whitespace, '#pop'),
        ],
    }

