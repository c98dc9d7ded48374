import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def lua_tree():
    """
    Write a tree of Lua files into a temporary directory.

    Usage: root = lua_tree({"main.lua": "...", "lib/util.lua": "..."})
    Returns the real path of the directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        root = os.path.realpath(tmpdir)

        def write(files):
            for rel_path, content in files.items():
                path = os.path.join(root, rel_path)
                os.makedirs(os.path.dirname(path), exist_ok=True)
                with open(path, 'w', encoding='utf-8', newline='') as f:
                    f.write(content)
            return root

        yield write


@pytest.fixture
def isolated_config(lua_tree, monkeypatch):
    """Run in an empty directory with no user-level config file."""
    root = lua_tree({})
    monkeypatch.chdir(root)
    monkeypatch.setenv("HOME", root)
    return root
