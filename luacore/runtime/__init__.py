# luapack Runtime Components
"""
Runtime code that gets injected into every bundle.

The prelude is a real Lua file so it can be read, linted and tested on its
own, but it is copied verbatim to the top of each bundle.
"""

import os

PRELUDE_FILE = 'prelude.lua'

# Names the prelude defines; rewritten require calls use REQUIRE_FUNCTION and
# the bundle starts its entry module through MAIN_FUNCTION
DEFINE_FUNCTION = '__luapack_define'
REQUIRE_FUNCTION = '__luapack_require'
MAIN_FUNCTION = '__luapack_main'


def get_prelude():
    """Read the module registry prelude."""
    path = os.path.join(os.path.dirname(__file__), PRELUDE_FILE)
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()
