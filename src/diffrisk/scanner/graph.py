"""Import dependency graph and blast radius over the analyzed file set.

Relationships come from static import statements only; specifiers that do
not resolve to a file in the set (packages, aliases, generated code) are
dropped without error, so results are an approximation.
"""

from __future__ import annotations

import posixpath
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from diffrisk.constants.graph import (
    DISABLED_CONFIDENCE_REASON,
    FALLBACK_CONFIDENCE,
    FALLBACK_CONFIDENCE_REASON,
    FALLBACK_STRIP_EXTENSIONS,
    GRAPH_CONFIDENCE,
    GRAPH_CONFIDENCE_REASON,
    IMPORT_PATTERNS,
    RESOLVE_SUFFIXES,
)
from diffrisk.model import BlastRadiusResult
from diffrisk.utils.globs import normalize_path


@dataclass
class DependencyGraph:
    """Adjacency maps keyed by normalized path; read-only once built."""

    dependents: dict[str, set[str]] = field(default_factory=dict)
    dependencies: dict[str, set[str]] = field(default_factory=dict)

    def add_edge(self, importer: str, imported: str) -> None:
        self.dependencies.setdefault(importer, set()).add(imported)
        self.dependents.setdefault(imported, set()).add(importer)


def extract_imports(content: str) -> list[str]:
    """Return relative or absolute import specifiers in source order per syntax."""
    specifiers: list[str] = []
    for pattern in IMPORT_PATTERNS:
        specifiers.extend(match.group(1) for match in pattern.finditer(content))
    return [spec for spec in specifiers if spec.startswith((".", "/"))]


def resolve_import(specifier: str, importer: str, known_files: set[str]) -> str | None:
    """Resolve ``specifier`` from ``importer`` against ``known_files``."""
    if specifier.startswith("/"):
        base = posixpath.normpath(specifier.lstrip("/"))
    else:
        base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), specifier))
    if base.startswith(".."):
        return None
    for suffix in RESOLVE_SUFFIXES:
        candidate = f"{base}{suffix}"
        if candidate in known_files:
            return candidate
    return None


def build_graph(files: Mapping[str, Iterable[str]]) -> DependencyGraph:
    """Build a graph from ``{path: import specifiers}``.

    Every path in ``files`` becomes a node even when it has no edges.
    """
    normalized = {normalize_path(path): list(specifiers) for path, specifiers in files.items()}
    known_files = set(normalized)
    graph = DependencyGraph()
    for path in sorted(normalized):
        graph.dependents.setdefault(path, set())
        graph.dependencies.setdefault(path, set())
        for specifier in normalized[path]:
            target = resolve_import(specifier, path, known_files)
            if target is not None and target != path:
                graph.add_edge(path, target)
    return graph


def build_graph_from_sources(sources: Mapping[str, str]) -> DependencyGraph:
    """Build a graph from ``{path: file content}``."""
    return build_graph({path: extract_imports(content) for path, content in sources.items()})


def blast_radius(path: str, graph: DependencyGraph) -> BlastRadiusResult:
    """Breadth-first walk over dependents of ``path``.

    ``path`` itself is never counted, including when an import cycle leads
    back to it.
    """
    origin = normalize_path(path)
    direct = set(graph.dependents.get(origin, set()))
    direct.discard(origin)

    visited: set[str] = {origin}
    queue: deque[str] = deque(sorted(direct))
    visited.update(direct)
    while queue:
        current = queue.popleft()
        for dependent in sorted(graph.dependents.get(current, set())):
            if dependent not in visited:
                visited.add(dependent)
                queue.append(dependent)

    reachable = visited - {origin}
    return BlastRadiusResult(
        direct=tuple(sorted(direct)),
        indirect=tuple(sorted(reachable - direct)),
        total=len(reachable),
        confidence=GRAPH_CONFIDENCE,
        confidence_reason=GRAPH_CONFIDENCE_REASON,
    )


def _strip_module_suffix(path: str) -> str:
    stripped = normalize_path(path)
    for extension in FALLBACK_STRIP_EXTENSIONS:
        if stripped.endswith(extension):
            stripped = stripped[: -len(extension)]
            break
    if stripped.endswith("/index"):
        stripped = stripped[: -len("/index")]
    return stripped


def _strip_relative_prefix(specifier: str) -> str:
    stripped = normalize_path(specifier)
    while stripped.startswith("../"):
        stripped = stripped[3:]
    return _strip_module_suffix(stripped)


def fallback_blast_radius(path: str, files: Mapping[str, Iterable[str]]) -> BlastRadiusResult:
    """Count files whose raw import list appears to reference ``path``.

    No graph and no transitive closure: only direct dependents, matched by
    substring, reported with low confidence.
    """
    origin = normalize_path(path)
    target = _strip_module_suffix(origin)
    dependents: list[str] = []
    for other, specifiers in files.items():
        other_path = normalize_path(other)
        if other_path == origin:
            continue
        for specifier in specifiers:
            needle = _strip_relative_prefix(specifier)
            if needle and (needle in target or target in needle):
                dependents.append(other_path)
                break
    direct = tuple(sorted(set(dependents)))
    return BlastRadiusResult(
        direct=direct,
        indirect=(),
        total=len(direct),
        confidence=FALLBACK_CONFIDENCE,
        confidence_reason=FALLBACK_CONFIDENCE_REASON,
    )


def empty_blast_radius() -> BlastRadiusResult:
    return BlastRadiusResult(
        direct=(),
        indirect=(),
        total=0,
        confidence="low",
        confidence_reason=DISABLED_CONFIDENCE_REASON,
    )
