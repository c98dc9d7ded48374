"""
Data model for a bundle: references, module records and the dependency graph.

The records are frozen pydantic models. The graph checks its own closure
property on construction, so an incomplete graph cannot reach the emitter.
"""
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator


class Reference(BaseModel):
    """One require call found in a module's source."""
    model_config = ConfigDict(frozen=True)

    literal: str            # Decoded string argument, e.g. ./a
    raw: str                # Call text exactly as written, e.g. require("./a")
    start: int              # Character offsets of the whole call
    end: int
    line: int
    column: int
    target: Optional[str] = None  # Resolved absolute path

    def resolved(self, target):
        return self.model_copy(update={"target": target})


class ModuleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    path: str
    source: str
    references: Tuple[Reference, ...] = ()

    @property
    def dependencies(self):
        """Resolved target paths in source order, without repeats."""
        seen = []
        for ref in self.references:
            if ref.target not in seen:
                seen.append(ref.target)
        return seen


class DependencyGraph(BaseModel):
    """ModuleId -> ModuleRecord in first-discovery order, plus the entry id."""
    model_config = ConfigDict(frozen=True)

    entry_id: str
    modules: Dict[str, ModuleRecord]

    @model_validator(mode='after')
    def _check_closure(self):
        if self.entry_id not in self.modules:
            raise ValueError(f"entry module {self.entry_id!r} is missing from the graph")
        paths = {record.path for record in self.modules.values()}
        for record in self.modules.values():
            for ref in record.references:
                if ref.target is None:
                    raise ValueError(f"unresolved reference {ref.raw!r} in {record.id}")
                if ref.target not in paths:
                    raise ValueError(f"{record.id} requires {ref.target}, which is not in the graph")
        return self

    @property
    def entry(self):
        return self.modules[self.entry_id]

    def id_for_path(self, path):
        for module_id, record in self.modules.items():
            if record.path == path:
                return module_id
        raise KeyError(path)

    def edges(self):
        """Yield (module id, dependency id) pairs in emission order."""
        for module_id, record in self.modules.items():
            for target in record.dependencies:
                yield module_id, self.id_for_path(target)
