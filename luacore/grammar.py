"""
Lua Lexical Grammar.

This module contains the Lark grammar for Lua tokens. Only the lexer is used:
the scanner needs comments and string contents skipped reliably, not a full
parse tree of the language.
"""

# Long brackets match by level ([[ ]], [=[ ]=], ...). Lark terminals cannot use
# backreferences, so every level gets its own alternative. The scanner builds a
# grammar deep enough for the deepest opener found in each source.
DEFAULT_LONG_BRACKET_LEVEL = 8


def _long_bracket(max_level, prefix=""):
    levels = []
    for level in range(max_level + 1):
        eq = "=" * level
        levels.append(rf"{prefix}\[{eq}\[[\s\S]*?\]{eq}\]")
    return "|".join(levels)


_GRAMMAR_TEMPLATE = r"""
    start: _token*

    _token: NAME | NUMBER | STRING | LONG_STRING | OP

    // --- Comments (checked before operators so '--' never lexes as minus) ---
    LONG_COMMENT.5: /%(long_comment)s/
    COMMENT.4: /--[^\r\n]*/

    // --- Literals ---
    LONG_STRING.3: /%(long_string)s/
    STRING.2: /"(?:[^"\\\n]|\\z\s*|\\(?:\r\n|\n\r|[\s\S]))*"|'(?:[^'\\\n]|\\z\s*|\\(?:\r\n|\n\r|[\s\S]))*'/
    NUMBER.2: /0[xX][0-9a-fA-F]*(?:\.[0-9a-fA-F]*)?(?:[pP][-+]?\d+)?|(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?/

    // --- Names and punctuation ---
    NAME.1: /[A-Za-z_][A-Za-z0-9_]*/
    OP: /\.\.\.|\.\.|==|~=|<=|>=|<<|>>|\/\/|::|[-+*\/%%^#&~|<>=(){}\[\];:,.]/

    WS: /[ \t\r\n\f\v]+/

    %%ignore WS
    %%ignore COMMENT
    %%ignore LONG_COMMENT
"""


def build_grammar(max_level=DEFAULT_LONG_BRACKET_LEVEL):
    """Lua token grammar recognising long brackets up to max_level."""
    return _GRAMMAR_TEMPLATE % {
        "long_comment": _long_bracket(max_level, "--"),
        "long_string": _long_bracket(max_level),
    }


lua_grammar = build_grammar()
