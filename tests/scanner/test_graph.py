"""Tests for import extraction, graph construction and blast radius."""

from __future__ import annotations

from diffrisk.scanner.graph import (
    blast_radius,
    build_graph,
    build_graph_from_sources,
    empty_blast_radius,
    extract_imports,
    fallback_blast_radius,
)


def test_extract_imports_covers_es_commonjs_and_dynamic() -> None:
    content = "\n".join(
        [
            "import React from 'react';",
            "import { a, b } from './util';",
            "import * as api from \"../api/client\";",
            "export { thing } from './thing';",
            "import './side-effect';",
            "const fs = require('fs');",
            "const local = require('./local');",
            "const lazy = import('./lazy');",
        ]
    )

    imports = extract_imports(content)

    assert set(imports) == {"./util", "../api/client", "./thing", "./side-effect", "./local", "./lazy"}


def test_build_graph_resolves_extensions_and_index_files() -> None:
    graph = build_graph(
        {
            "src/app.ts": ["./lib", "./util", "react"],
            "src/lib/index.ts": ["../util"],
            "src/util.ts": [],
        }
    )

    assert graph.dependencies["src/app.ts"] == {"src/lib/index.ts", "src/util.ts"}
    assert graph.dependents["src/util.ts"] == {"src/app.ts", "src/lib/index.ts"}


def test_unresolved_imports_are_dropped() -> None:
    graph = build_graph({"src/a.ts": ["./missing", "../../outside", "lodash"]})

    assert graph.dependencies["src/a.ts"] == set()


def test_blast_radius_splits_direct_and_indirect() -> None:
    graph = build_graph(
        {
            "core.ts": [],
            "service.ts": ["./core"],
            "page.ts": ["./service"],
            "other.ts": ["./core"],
        }
    )

    result = blast_radius("core.ts", graph)

    assert result.direct == ("other.ts", "service.ts")
    assert result.indirect == ("page.ts",)
    assert result.total == 3
    assert result.confidence == "medium"


def test_blast_radius_terminates_on_cycles() -> None:
    graph = build_graph({"a.ts": ["./b"], "b.ts": ["./c"], "c.ts": ["./a"]})

    result = blast_radius("a.ts", graph)

    assert result.total == 2
    assert "a.ts" not in result.direct + result.indirect


def test_blast_radius_of_unknown_file_is_zero() -> None:
    result = blast_radius("nowhere.ts", build_graph({}))

    assert result.total == 0
    assert result.direct == ()


def test_build_graph_from_sources() -> None:
    graph = build_graph_from_sources(
        {
            "src/a.ts": "import { b } from './b';",
            "src/b.ts": "export const b = 1;",
        }
    )

    assert blast_radius("src/b.ts", graph).direct == ("src/a.ts",)


def test_fallback_matches_substrings_without_transitivity() -> None:
    files = {
        "src/utils/format.ts": [],
        "src/view.ts": ["./utils/format"],
        "src/page.ts": ["./view"],
    }

    result = fallback_blast_radius("src/utils/format.ts", files)

    assert result.direct == ("src/view.ts",)
    assert result.indirect == ()
    assert result.total == 1
    assert result.confidence == "low"


def test_empty_blast_radius() -> None:
    result = empty_blast_radius()

    assert result.total == 0
    assert result.confidence == "low"
