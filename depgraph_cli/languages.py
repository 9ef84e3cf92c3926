"""Per-language knowledge used by the call resolver and the front ends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional

# ---------------------------------------------------------------------------
# Language <-> file-extension mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".py": "python",
    ".go": "go",
}

# Marker for an already-resolved sub-expression inside a reduced call string.
PLACEHOLDER_PREFIX = "$ref"
UNRESOLVED_TOKEN = "?"
SUPER_TOKEN = "super"

PYTHON_BUILTINS: FrozenSet[str] = frozenset({
    "__import__", "abs", "aiter", "all", "anext", "any", "ascii", "bin", "bool",
    "breakpoint", "bytearray", "bytes", "callable", "chr", "classmethod",
    "compile", "complex", "delattr", "dict", "dir", "divmod", "enumerate",
    "eval", "exec", "exit", "filter", "float", "format", "frozenset", "getattr",
    "globals", "hasattr", "hash", "help", "hex", "id", "input", "int",
    "isinstance", "issubclass", "iter", "len", "list", "locals", "map", "max",
    "memoryview", "min", "next", "object", "oct", "open", "ord", "pow", "print",
    "property", "quit", "range", "repr", "reversed", "round", "set", "setattr",
    "slice", "sorted", "staticmethod", "str", "sum", "tuple", "type", "vars",
    "zip",
})

GO_BUILTINS: FrozenSet[str] = frozenset({
    "append", "cap", "clear", "close", "complex", "copy", "delete", "imag",
    "len", "make", "max", "min", "new", "panic", "print", "println", "real",
    "recover",
    # conversions look like calls
    "any", "bool", "byte", "complex64", "complex128", "error", "float32",
    "float64", "int", "int8", "int16", "int32", "int64", "rune", "string",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
})


@dataclass(frozen=True)
class LanguageProfile:
    name: str
    builtins: FrozenSet[str]
    super_keyword: Optional[str] = None
    self_keyword: Optional[str] = None

    def with_extra_builtins(self, names: Iterable[str]) -> "LanguageProfile":
        extra = frozenset(names)
        if not extra:
            return self
        return LanguageProfile(
            name=self.name,
            builtins=self.builtins | extra,
            super_keyword=self.super_keyword,
            self_keyword=self.self_keyword,
        )


PROFILES: Dict[str, LanguageProfile] = {
    "python": LanguageProfile(
        name="python",
        builtins=PYTHON_BUILTINS,
        super_keyword="super",
        self_keyword="self",
    ),
    "go": LanguageProfile(name="go", builtins=GO_BUILTINS),
}


def get_profile(language: str) -> LanguageProfile:
    """Return the profile for *language*; unknown languages get an empty one."""
    profile = PROFILES.get(language)
    if profile is None:
        return LanguageProfile(name=language, builtins=frozenset())
    return profile
