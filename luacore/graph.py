"""
Dependency Graph Builder.

Computes the closure of modules reachable from an entry file. Modules are
identified by their resolved path, so different spellings of the same file
collapse to one module, and already discovered modules are never read again,
which is what makes cyclic requires terminate.
"""
import os
from collections import deque

from .config import BundlerConfig
from .errors import ResolutionError, get_line_context
from .locator import locate, locate_entry, module_id_for
from .log import debug_log
from .models import DependencyGraph, ModuleRecord
from .scanner import ReferenceScanner


def read_source(path):
    """Read a module exactly as stored: no newline translation, undecodable bytes kept."""
    with open(path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
        return f.read()


def build(entry_path, config=None):
    """
    Build the dependency graph of an entry module.

    Args:
        entry_path: Path to the entry .lua file
        config: BundlerConfig; defaults apply when omitted

    Returns:
        DependencyGraph with every reachable module, in first-discovery order

    Raises:
        ResolutionError: If the entry or a required module does not exist
        DynamicReferenceError: If a require call has a non-literal argument
        LuaSyntaxError: If a module cannot be tokenized
    """
    config = config or BundlerConfig()
    scanner = ReferenceScanner()

    entry = locate_entry(entry_path)
    root_dir = os.path.dirname(entry)

    discovered = {entry: module_id_for(entry, root_dir)}
    pending = deque([entry])
    records = {}

    debug_log(f"Bundling entry {entry}")

    while pending:
        path = pending.popleft()
        module_id = discovered[path]
        source = read_source(path)

        references = scanner.scan(source, origin=path)

        resolved = []
        for ref in references:
            if config.is_external(ref.literal):
                debug_log(f"  {module_id}: '{ref.literal}' is external, left as is")
                continue
            try:
                target = locate(ref.literal, path, config)
            except ResolutionError as e:
                raise e.with_location(ref.line, ref.column, get_line_context(source, ref.line)) from None

            if target not in discovered:
                discovered[target] = module_id_for(target, root_dir)
                pending.append(target)
                debug_log(f"  discovered {discovered[target]}")
            debug_log(f"  {module_id} -> {discovered[target]} via '{ref.literal}'")
            resolved.append(ref.resolved(target))

        records[module_id] = ModuleRecord(
            id=module_id,
            path=path,
            source=source,
            references=tuple(resolved),
        )

    debug_log(f"Dependency closure has {len(records)} module(s)")
    return DependencyGraph(entry_id=discovered[entry], modules=records)
