"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from .extractor import TypeDeclaration
from .registry import TypeRegistry


class Classification(str, Enum):
    IDENTICAL_SHAPE = "identical_shape"
    NAME_COLLISION = "name_collision"


class CollisionPolicy(str, Enum):
    """
    How export status takes part in classification.

    ALL reports every same-name pair. EXPORTED drops name collisions in
    which neither side is exported or ambient: two module-local aliases in
    different files can never meet at compile time.
    """

    ALL = "all"
    EXPORTED = "exported"


@dataclass(frozen=True, slots=True)
class DuplicateFinding:
    name: str
    first: TypeDeclaration
    second: TypeDeclaration
    classification: Classification


@dataclass(frozen=True, slots=True)
class DuplicateReport:
    findings: tuple[DuplicateFinding, ...]
    unique_names: int
    declaration_count: int
    duplicated_names: int
    identical_count: int
    collision_count: int


def classify_pair(first: TypeDeclaration, second: TypeDeclaration) -> Classification:
    if first.fingerprint == second.fingerprint:
        return Classification.IDENTICAL_SHAPE
    return Classification.NAME_COLLISION


def _is_reported(finding: DuplicateFinding, policy: CollisionPolicy) -> bool:
    if policy is CollisionPolicy.ALL:
        return True
    if finding.classification is Classification.IDENTICAL_SHAPE:
        return True
    return finding.first.is_exported or finding.second.is_exported


def iter_pairs(
    occurrences: tuple[TypeDeclaration, ...],
) -> list[tuple[TypeDeclaration, TypeDeclaration]]:
    # combinations() keeps insertion order: (i, j) with i < j, each pair once.
    return list(combinations(occurrences, 2))


def analyze_duplicates(
    registry: TypeRegistry, *, policy: CollisionPolicy = CollisionPolicy.ALL
) -> DuplicateReport:
    """
    Classify every same-name pair of a fully populated registry.

    For a name with k occurrences all k*(k-1)/2 pairs are produced, names in
    first-seen order and pairs ordered by insertion index. Pure function of
    the registry.
    """
    findings: list[DuplicateFinding] = []
    duplicated = registry.names_with_duplicates()
    for name in duplicated:
        for first, second in iter_pairs(registry.occurrences(name)):
            finding = DuplicateFinding(
                name=name,
                first=first,
                second=second,
                classification=classify_pair(first, second),
            )
            if _is_reported(finding, policy):
                findings.append(finding)

    identical = sum(
        1 for f in findings if f.classification is Classification.IDENTICAL_SHAPE
    )
    return DuplicateReport(
        findings=tuple(findings),
        unique_names=len(registry),
        declaration_count=registry.declaration_count(),
        duplicated_names=len(duplicated),
        identical_count=identical,
        collision_count=len(findings) - identical,
    )
