"""
`using` namespace directives for the script engine.

    using math;            merge the public names of math into scope
    using dt = datetime;   bind the datetime module to `dt`

A namespace resolves only when its top-level package is an implicit library
or a referenced one.
"""

import importlib
import re
from dataclasses import dataclass
from types import ModuleType
from typing import Any

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class UsingDirective:
    path: str
    alias: str | None = None

    @property
    def top_level(self) -> str:
        return self.path.split(".", 1)[0]


def split_directives(snippet: str, keyword: str, terminator: str) -> list[str] | None:
    """
    Split snippet into directive bodies (text after the keyword).

    Returns None when any statement in snippet is not a directive, so the
    caller falls back to compiling it as code.
    """
    kw_re = re.compile(rf"^{re.escape(keyword)}(?:\s+|$)")
    parts = [p.strip() for p in snippet.split(terminator)]
    # Text after the last terminator is empty for well-formed input
    if parts and parts[-1] == "" and len(parts) > 1:
        parts.pop()
    if not parts or parts == [""]:
        return None
    bodies: list[str] = []
    for part in parts:
        m = kw_re.match(part)
        if m is None:
            return None
        bodies.append(part[m.end():].strip())
    return bodies


def parse_directive(body: str) -> UsingDirective:
    """Parse `a.b` or `alias = a.b`. Raises ValueError on a malformed body."""
    alias: str | None = None
    path = body
    if "=" in body:
        alias, _, path = (s.strip() for s in body.partition("="))
        if not _IDENT_RE.match(alias) or alias.startswith("_"):
            raise ValueError(f"invalid alias name '{alias}'")
    path = re.sub(r"\s*\.\s*", ".", path.strip())
    if not path:
        raise ValueError("identifier expected")
    for segment in path.split("."):
        if not _IDENT_RE.match(segment) or segment.startswith("_"):
            raise ValueError(f"invalid namespace name '{path}'")
    return UsingDirective(path=path, alias=alias)


def public_names(module: ModuleType) -> dict[str, Any]:
    """Names a star import of module would bind."""
    names = getattr(module, "__all__", None)
    if names is None:
        names = [n for n in vars(module) if not n.startswith("_")]
    return {n: getattr(module, n) for n in names if hasattr(module, n)}


def apply_directive(
    directive: UsingDirective,
    scope: dict[str, Any],
    allowed: frozenset[str] | set[str],
) -> None:
    """
    Import directive into scope.

    Raises LookupError when the namespace is not referenced or cannot be imported.
    """
    if directive.top_level not in allowed:
        raise LookupError(
            f"The type or namespace name '{directive.top_level}' could not be found "
            "(are you missing a library reference?)"
        )
    try:
        module = importlib.import_module(directive.path)
    except ImportError as e:
        raise LookupError(
            f"The type or namespace name '{directive.path}' could not be found: {e}"
        ) from e
    if directive.alias is not None:
        scope[directive.alias] = module
    else:
        scope.update(public_names(module))
