"""
Error types for the luapack bundler.

Every failure that aborts a bundle derives from BundleError, which renders the
offending file, position, source line and a fix hint the same way for all kinds.
"""
import difflib
import os


class BundleError(Exception):
    """Base exception for bundling errors with file, line numbers and hints."""
    def __init__(self, message, path=None, line_number=None, column=None, context=None, suggestion=None):
        self.message = message
        self.path = path
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = ["\n❌ Bundle Error"]
        if self.path:
            lines.append(f" in {self.path}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}\n")

        return "".join(lines)


class ResolutionError(BundleError):
    """A required module could not be found on disk."""
    def __init__(self, reference_text, requesting_path, candidates=(), line_number=None, column=None,
                 context=None, suggestion=None):
        self.reference_text = reference_text
        self.requesting_path = requesting_path
        self.candidates = tuple(candidates)
        if requesting_path is None:
            message = f"Entry module '{reference_text}' not found"
        else:
            message = f"Cannot resolve module '{reference_text}' required from {requesting_path}"
        if suggestion is None and requesting_path is not None:
            suggestion = suggest_reference(reference_text, requesting_path)
        super().__init__(
            message,
            path=requesting_path,
            line_number=line_number,
            column=column,
            context=context,
            suggestion=suggestion,
        )

    def with_location(self, line_number, column, context):
        """Return a copy of this error pointing at the require call."""
        return ResolutionError(
            self.reference_text,
            self.requesting_path,
            candidates=self.candidates,
            line_number=line_number,
            column=column,
            context=context,
            suggestion=self.suggestion,
        )


class DynamicReferenceError(BundleError):
    """A require call whose target is only known at run time."""
    def __init__(self, requesting_path, raw_call_text, line_number=None, column=None, context=None):
        self.requesting_path = requesting_path
        self.raw_call_text = raw_call_text
        super().__init__(
            f"Cannot bundle non-literal require: {raw_call_text}",
            path=requesting_path,
            line_number=line_number,
            column=column,
            context=context,
            suggestion="Pass a single string literal, e.g. require(\"./module\")",
        )


class LuaSyntaxError(BundleError):
    """The module source could not be tokenized as Lua."""


class ConfigError(BundleError):
    """The bundler configuration file is invalid."""


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


def suggest_reference(reference_text, requesting_path):
    """Propose a sibling module name close to a reference that failed to resolve."""
    base_dir = os.path.dirname(requesting_path)
    name = reference_text.replace("\\", "/")
    prefix, _, stem = name.rpartition("/")
    search_dir = os.path.normpath(os.path.join(base_dir, prefix)) if prefix else base_dir
    try:
        entries = os.listdir(search_dir)
    except OSError:
        return None

    stems = sorted({os.path.splitext(e)[0] for e in entries if e.endswith(".lua")})
    matches = difflib.get_close_matches(os.path.splitext(stem)[0], stems, n=1)
    if not matches:
        return None
    guess = f"{prefix}/{matches[0]}" if prefix else matches[0]
    return f"Did you mean '{guess}'?"
