# luapack - Core Bundler Components
"""
Core modules for the luapack bundler:
- errors: Error types with file/line context
- config: Bundler configuration (search templates, externals)
- grammar: Lark grammar for Lua tokens
- locator: Module path resolution
- scanner: require() reference extraction
- graph: Dependency closure computation
- emitter: Bundle generation
- runtime: Module registry prelude injected into bundles
"""

from .errors import (
    BundleError,
    ConfigError,
    DynamicReferenceError,
    LuaSyntaxError,
    ResolutionError,
)
from .config import BundlerConfig, load_config
from .grammar import lua_grammar
from .locator import locate
from .scanner import ReferenceScanner, scan
from .graph import build
from .emitter import emit
from .bundler import bundle

__all__ = [
    'BundleError',
    'ConfigError',
    'DynamicReferenceError',
    'LuaSyntaxError',
    'ResolutionError',
    'BundlerConfig',
    'load_config',
    'lua_grammar',
    'locate',
    'ReferenceScanner',
    'scan',
    'build',
    'emit',
    'bundle',
]
