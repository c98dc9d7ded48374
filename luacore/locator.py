"""
Module Locator.

Turns the string passed to require() into a file on disk, searching relative
to the requiring module the way Lua's package.path templates do.
"""
import os

from .config import BundlerConfig
from .errors import ResolutionError


def name_candidates(reference_text):
    """
    Spellings of a module name to try, in order.

    The reference is tried as written first. Plain Lua module names such as
    'lib.util' are also tried in their directory form 'lib/util'.
    """
    names = [reference_text]
    is_pathlike = reference_text.startswith((".", "/")) or "/" in reference_text or "\\" in reference_text
    if not is_pathlike and "." in reference_text:
        names.append(reference_text.replace(".", "/"))
    return names


def candidate_paths(reference_text, requesting_path, config=None):
    """All file paths the locator would check, in search order."""
    config = config or BundlerConfig()
    base_dir = os.path.dirname(os.path.abspath(requesting_path))

    paths = []
    for name in name_candidates(reference_text):
        for template in config.search_templates:
            filename = template.replace("?", name)
            path = os.path.normpath(os.path.join(base_dir, filename))
            if path not in paths:
                paths.append(path)
    return paths


def locate(reference_text, requesting_path, config=None):
    """
    Resolve a module reference to an absolute path.

    Args:
        reference_text: The string literal given to require(), e.g. "./a"
        requesting_path: Path of the module containing the require call
        config: BundlerConfig with the search templates to apply

    Returns:
        Real path of the first existing file among the candidates

    Raises:
        ResolutionError: If none of the candidates is a file
    """
    if not reference_text:
        raise ResolutionError(reference_text, requesting_path)

    tried = candidate_paths(reference_text, requesting_path, config)
    for path in tried:
        if os.path.isfile(path):
            return os.path.realpath(path)
    raise ResolutionError(reference_text, requesting_path, candidates=tried)


def locate_entry(entry_path):
    """Resolve the entry module given on the command line or by the caller."""
    path = os.path.abspath(entry_path)
    if not os.path.isfile(path):
        raise ResolutionError(entry_path, None, candidates=[path])
    return os.path.realpath(path)


def module_id_for(path, root_dir):
    """
    Stable identifier of a module: its path relative to the entry directory,
    always with forward slashes so bundles match across platforms.
    """
    rel = os.path.relpath(path, root_dir)
    return rel.replace(os.sep, "/")
