"""
Reference Scanner.

Finds the require() calls of one Lua module. The source is tokenized with a
real Lua lexer, so occurrences inside comments and string contents never
count. Each reference keeps the exact span of the call for rewriting.
"""
import re

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import DynamicReferenceError, LuaSyntaxError, get_line_context
from .grammar import DEFAULT_LONG_BRACKET_LEVEL, build_grammar
from .models import Reference

REQUIRE = "require"
STRING_TYPES = ("STRING", "LONG_STRING")

# Tokens after which 'require' is a field, a method or a definition
_NOT_A_CALL_AFTER = {(".", "OP"), (":", "OP"), ("function", "NAME"), ("local", "NAME")}

_ESCAPES = {
    'a': '\a', 'b': '\b', 'f': '\f', 'n': '\n', 'r': '\r', 't': '\t', 'v': '\v',
    '\\': '\\', '"': '"', "'": "'", '\n': '\n', '\r': '\n', '\r\n': '\n', '\n\r': '\n',
}
_ESCAPE_RE = re.compile(r'\\(?:(\d{1,3})|x([0-9a-fA-F]{2})|u\{([0-9a-fA-F]+)\}|(z\s*)|(\r\n|\n\r|[\s\S]))')
_LONG_OPEN_RE = re.compile(r'\[(=*)\[')


def _decode_escape(match):
    decimal, hexa, codepoint, skip, other = match.groups()
    if decimal is not None:
        return chr(int(decimal))
    if hexa is not None:
        return chr(int(hexa, 16))
    if codepoint is not None:
        return chr(int(codepoint, 16))
    if skip is not None:
        return ""
    return _ESCAPES.get(other, other)


def string_value(token):
    """Decode a STRING or LONG_STRING token into the Python string it denotes."""
    text = str(token)
    if token.type == "LONG_STRING":
        level = len(_LONG_OPEN_RE.match(text).group(1))
        body = text[level + 2:len(text) - level - 2]
        # Lua skips a newline directly after the opening bracket
        for newline in ("\r\n", "\n\r", "\n", "\r"):
            if body.startswith(newline):
                return body[len(newline):]
        return body
    return _ESCAPE_RE.sub(_decode_escape, text[1:-1])


def blank_preamble(source_text):
    """
    Hide what the Lua loader skips before the first token: a UTF-8 byte order
    mark and a '#' first line. Offsets are preserved.
    """
    text = source_text
    offset = 0
    if text.startswith("\ufeff"):
        text = " " + text[1:]
        offset = 1
    if text.startswith("#", offset):
        end = text.find("\n")
        if end == -1:
            end = len(text)
        text = " " * end + text[end:]
    return text


class ReferenceScanner:
    """
    Extracts require references from Lua source.

    One scanner holds its lark lexers, keyed by the deepest long bracket level
    they recognise; the graph builder creates one per build so that no lexer
    state is shared between bundles.
    """

    def __init__(self):
        self._lexers = {}

    def lexer_for(self, source_text):
        """A lexer that recognises every long bracket level used in the source."""
        levels = [len(eq) for eq in _LONG_OPEN_RE.findall(source_text)]
        level = max(levels + [DEFAULT_LONG_BRACKET_LEVEL])
        if level not in self._lexers:
            self._lexers[level] = Lark(build_grammar(level), parser='lalr', lexer='basic')
        return self._lexers[level]

    def tokens(self, source_text, origin=None):
        """Tokenize Lua source, skipping whitespace and comments."""
        try:
            return list(self.lexer_for(source_text).lex(blank_preamble(source_text)))
        except UnexpectedCharacters as e:
            raise LuaSyntaxError(
                f"Unexpected character {source_text[e.pos_in_stream]!r}",
                path=origin,
                line_number=e.line,
                column=e.column,
                context=get_line_context(source_text, e.line),
                suggestion="Check for an unterminated string or a stray character",
            ) from e

    def scan(self, source_text, origin=None):
        """
        Return the require references of a module in source order.

        Args:
            source_text: Lua source of one module
            origin: Path of the module, used in error messages

        Raises:
            DynamicReferenceError: If a require call has a non-literal argument
            LuaSyntaxError: If the source cannot be tokenized
        """
        toks = self.tokens(source_text, origin)
        references = []

        for i, tok in enumerate(toks):
            if tok.type != "NAME" or tok != REQUIRE:
                continue
            if i > 0 and (str(toks[i - 1]), toks[i - 1].type) in _NOT_A_CALL_AFTER:
                continue
            if i + 1 >= len(toks):
                continue

            nxt = toks[i + 1]
            if nxt.type in STRING_TYPES:
                arg, last = nxt, nxt
            elif nxt.type == "OP" and nxt == "(":
                arg = toks[i + 2] if i + 2 < len(toks) else None
                close = toks[i + 3] if i + 3 < len(toks) else None
                if arg is None or arg.type not in STRING_TYPES or close is None or close != ")":
                    end = _balanced_end(toks, i + 1, "(", ")", source_text)
                    raise self._dynamic(source_text, tok, end, origin)
                last = close
            elif nxt.type == "OP" and nxt == "{":
                end = _balanced_end(toks, i + 1, "{", "}", source_text)
                raise self._dynamic(source_text, tok, end, origin)
            else:
                # 'require' used as a value, e.g. pcall(require, name)
                continue

            references.append(Reference(
                literal=string_value(arg),
                raw=source_text[tok.start_pos:last.end_pos],
                start=tok.start_pos,
                end=last.end_pos,
                line=tok.line,
                column=tok.column,
            ))

        return references

    @staticmethod
    def _dynamic(source_text, tok, end, origin):
        return DynamicReferenceError(
            origin,
            source_text[tok.start_pos:end],
            line_number=tok.line,
            column=tok.column,
            context=get_line_context(source_text, tok.line),
        )


def _balanced_end(toks, open_index, opener, closer, source_text):
    """End offset of the bracket group starting at toks[open_index]."""
    depth = 0
    for tok in toks[open_index:]:
        if tok.type != "OP":
            continue
        if tok == opener:
            depth += 1
        elif tok == closer:
            depth -= 1
            if depth == 0:
                return tok.end_pos
    # Unbalanced: report up to the end of the line
    start = toks[open_index].start_pos
    line_end = source_text.find("\n", start)
    return len(source_text) if line_end == -1 else line_end


def scan(source_text, origin=None):
    """Scan a single module with a fresh scanner."""
    return ReferenceScanner().scan(source_text, origin)
