"""
Bundler for Lua modules.

Resolves every require() reachable from an entry file and emits a single Lua
source in which each module is a lazily loaded unit of a module registry.
"""
from .emitter import emit
from .graph import build
from .log import debug_log


def bundle(file_path, config=None):
    """
    Bundle an entry module and everything it requires.

    Args:
        file_path: Path to the entry .lua file
        config: Optional BundlerConfig (search templates, externals)

    Returns:
        Bundled Lua source. Nothing is written to disk. The entry module
        receives the arguments the bundle is run with as '...'; every other
        module receives its ModuleId (such as "lib/name.lua"), where native
        require would pass the name as written ("lib.name").

    Raises:
        ResolutionError: If a required module doesn't exist
        DynamicReferenceError: If a require argument is not a string literal
    """
    graph = build(file_path, config)
    bundled_code = emit(graph)
    debug_log(f"Emitted {len(bundled_code)} characters for {len(graph.modules)} module(s)")
    return bundled_code
