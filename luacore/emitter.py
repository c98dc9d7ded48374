"""
Emitter: turns a dependency graph into one self-contained Lua source.

Layout of a bundle:
    header comment
    runtime prelude (module registry, define/require functions)
    one __luapack_define(id, function(...) <module body> end) per module
    return __luapack_main(<entry id>, ...)

Module bodies are copied verbatim except for the require calls, which are
replaced span by span with calls keyed by ModuleId.
"""
from .runtime import DEFINE_FUNCTION, MAIN_FUNCTION, REQUIRE_FUNCTION, get_prelude

HEADER = "-- Bundled by luapack from {entry}. Do not edit.\n"

_LUA_ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


def lua_string(value):
    """Quote a Python string as a double-quoted Lua string literal."""
    out = []
    for ch in value:
        if ch in _LUA_ESCAPES:
            out.append(_LUA_ESCAPES[ch])
        elif ord(ch) < 32 or ord(ch) == 127:
            out.append(f"\\{ord(ch):03d}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def require_call(module_id):
    return f"{REQUIRE_FUNCTION}({lua_string(module_id)})"


def rewrite_references(record, graph):
    """
    Replace every require call of a module with a registry lookup.

    Only the bytes inside reference spans change; references are ordered and
    never overlap because the scanner reports them in token order.
    """
    pieces = []
    cursor = 0
    for ref in record.references:
        pieces.append(record.source[cursor:ref.start])
        pieces.append(require_call(graph.id_for_path(ref.target)))
        cursor = ref.end
    pieces.append(record.source[cursor:])
    return "".join(pieces)


def loader_body(record, graph):
    """Module source ready to sit inside a function body."""
    body = rewrite_references(record, graph)
    # The Lua loader skips these at the start of a file, a function body does not
    if body.startswith("\ufeff"):
        body = body[1:]
    if body.startswith("#"):
        body = "--" + body
    if not body.endswith("\n"):
        # A trailing line comment would otherwise swallow the closing 'end'
        body += "\n"
    return body


def emit_module(record, graph):
    return (
        f"{DEFINE_FUNCTION}({lua_string(record.id)}, function(...)\n"
        f"{loader_body(record, graph)}"
        f"end)\n"
    )


def emit(graph):
    """
    Emit the bundle for a dependency graph.

    Modules appear in first-discovery order, so the same files always give
    the same bundle.
    """
    parts = [HEADER.format(entry=graph.entry_id), get_prelude()]
    for record in graph.modules.values():
        parts.append(emit_module(record, graph))
    # The entry module gets the chunk arguments, as when run with lua main.lua
    parts.append(f"return {MAIN_FUNCTION}({lua_string(graph.entry_id)}, ...)\n")
    return "\n".join(parts)
