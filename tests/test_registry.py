from __future__ import annotations

from typeclash.extractor import TypeDeclaration
from typeclash.registry import TypeRegistry


def _decl(name: str, filepath: str, line: int = 1, fp: str = "f") -> TypeDeclaration:
    return TypeDeclaration(
        name=name,
        filepath=filepath,
        line=line,
        is_exported=True,
        fingerprint=fp,
        shape=fp,
    )


def test_empty_registry() -> None:
    registry = TypeRegistry()
    assert len(registry) == 0
    assert registry.names_with_duplicates() == []
    assert registry.declaration_count() == 0
    assert registry.occurrences("Missing") == ()
    assert "Missing" not in registry


def test_record_keeps_first_seen_name_order() -> None:
    registry = TypeRegistry()
    registry.record("B", _decl("B", "a.ts"))
    registry.record("A", _decl("A", "a.ts"))
    registry.record("B", _decl("B", "b.ts"))

    assert list(registry) == ["B", "A"]
    assert len(registry) == 2
    assert "A" in registry


def test_occurrences_keep_insertion_order() -> None:
    registry = TypeRegistry()
    first = _decl("User", "b.ts", 3)
    second = _decl("User", "a.ts", 1)
    registry.record("User", first)
    registry.record("User", second)

    assert registry.occurrences("User") == (first, second)


def test_identical_declarations_are_not_merged() -> None:
    registry = TypeRegistry()
    decl = _decl("User", "a.ts")
    registry.record_all([decl, decl])
    assert registry.occurrences("User") == (decl, decl)
    assert registry.declaration_count() == 2


def test_names_with_duplicates() -> None:
    registry = TypeRegistry()
    registry.record_all(
        [
            _decl("Once", "a.ts"),
            _decl("Twice", "a.ts"),
            _decl("Thrice", "a.ts"),
            _decl("Twice", "b.ts"),
            _decl("Thrice", "b.ts"),
            _decl("Thrice", "c.ts"),
        ]
    )
    assert registry.names_with_duplicates() == ["Twice", "Thrice"]
    assert registry.declaration_count() == 6


def test_every_declaration_is_listed_once() -> None:
    registry = TypeRegistry()
    decls = [_decl(n, f"{i}.ts", i) for i, n in enumerate("ABAB")]
    registry.record_all(decls)
    listed = [d for name in registry for d in registry.occurrences(name)]
    assert sorted(listed, key=lambda d: d.line) == decls


def test_registries_are_independent() -> None:
    first = TypeRegistry()
    second = TypeRegistry()
    first.record("A", _decl("A", "a.ts"))
    assert len(second) == 0
