"""
Bundler configuration.

Settings live in a small JSON file, looked up the same way the model registry
of the compiler CLI is: the working directory first, then the user's home.
"""
import json
import os
from typing import Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigError

CONFIG_FILE = "luapack.json"
CONFIG_PATHS = [CONFIG_FILE, os.path.join("~", ".luapack", "config.json")]


class BundlerConfig(BaseModel):
    """How module references are resolved and which ones stay external."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    # '?' is replaced by the module name, as in Lua's package.path
    search_templates: Tuple[str, ...] = ("?", "?.lua", "?/init.lua")
    # Modules provided by the host runtime; never resolved, never rewritten
    externals: Tuple[str, ...] = ()

    @field_validator('search_templates')
    @classmethod
    def _templates_have_placeholder(cls, value):
        if not value:
            raise ValueError("at least one search template is required")
        for template in value:
            if "?" not in template:
                raise ValueError(f"search template {template!r} has no '?' placeholder")
        return value

    def is_external(self, reference_text):
        return reference_text in self.externals


def load_config(path=None):
    """
    Load the bundler configuration.

    Args:
        path: Explicit config file. When omitted, the first existing file of
              CONFIG_PATHS is used, falling back to the defaults.

    Raises:
        ConfigError: If the file is not valid JSON or has invalid settings.
        FileNotFoundError: If an explicit path does not exist.
    """
    if path is None:
        for candidate in CONFIG_PATHS:
            candidate = os.path.expanduser(candidate)
            if os.path.exists(candidate):
                path = candidate
                break
        else:
            return BundlerConfig()

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON: {e.msg}",
                path=path,
                line_number=e.lineno,
                column=e.colno,
            ) from e

    try:
        return BundlerConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(
            f"Invalid configuration: {problems}",
            path=path,
            suggestion="Known settings are 'search_templates' and 'externals'",
        ) from e
