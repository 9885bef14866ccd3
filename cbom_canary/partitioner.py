"""
Splitting a CBOM into disjoint per-module CBOMs.

Every occurrence is attributed to the deepest module whose directory
contains its location. Modules are processed deepest first, and each
occurrence can be claimed only once, so a nested module takes its own
findings before any ancestor sees them.
"""

import threading
from collections import Counter
from pathlib import Path, PurePath, PurePosixPath
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from .models import (
    Bom, Component, Dependency, Evidence, Occurrence, ProjectModule,
    new_serial_number,
)


class ClaimPool:
    """Multiset of occurrence locations that have not been claimed yet.

    A location is present once per occurrence, so several findings in the
    same file can each be claimed.
    """

    def __init__(self, locations: Iterable[str]):
        self._remaining = Counter(locations)
        self._lock = threading.Lock()

    @classmethod
    def from_bom(cls, bom: Bom) -> "ClaimPool":
        return cls(bom.locations())

    def claim(self, location: str) -> bool:
        """Claim one occurrence of a location.

        Returns:
            True if the location was still available
        """
        with self._lock:
            if self._remaining[location] <= 0:
                return False
            self._remaining[location] -= 1
            return True

    def __contains__(self, location: str) -> bool:
        return self._remaining[location] > 0

    def __len__(self) -> int:
        return sum(self._remaining.values())


class _ComponentDraft:
    def __init__(self, source: Component):
        self.source = source
        self.occurrences: List[Occurrence] = []

    def build(self) -> Component:
        return Component(
            ref=self.source.ref,
            name=self.source.name,
            type=self.source.type,
            crypto_properties=self.source.crypto_properties,
            evidence=Evidence(occurrences=list(self.occurrences)),
        )


class ComponentBuilder:
    """Collects claimed occurrences into one clone per component ref."""

    def __init__(self):
        self._drafts: Dict[str, _ComponentDraft] = {}

    def add(self, component: Component, occurrence: Occurrence):
        draft = self._drafts.get(component.ref)
        if draft is None:
            draft = _ComponentDraft(component)
            self._drafts[component.ref] = draft
        draft.occurrences.append(occurrence)

    def __contains__(self, ref: str) -> bool:
        return ref in self._drafts

    def __bool__(self) -> bool:
        return bool(self._drafts)

    def build(self) -> List[Component]:
        return [draft.build() for draft in self._drafts.values()]


def _is_under(location: str, prefix: PurePath) -> bool:
    """Check whether a location lies inside a directory, segment by segment."""
    prefix_parts = PurePosixPath(prefix.as_posix()).parts
    location_parts = PurePosixPath(location.replace("\\", "/")).parts
    return location_parts[:len(prefix_parts)] == prefix_parts


def project_dependencies(dependencies: List[Dependency], refs: ComponentBuilder) -> List[Dependency]:
    """Restrict a dependency graph to a set of component refs.

    Edges whose source is absent are dropped, targets that are absent are
    removed, and edges left without targets are dropped. Edges sharing a
    source are merged.
    """
    projected: Dict[str, List[str]] = {}
    for dependency in dependencies:
        if dependency.ref not in refs:
            continue
        targets = projected.get(dependency.ref, [])
        for target in dependency.depends_on:
            if target in refs and target not in targets:
                targets.append(target)
        if targets:
            projected[dependency.ref] = targets

    return [Dependency(ref=ref, depends_on=targets) for ref, targets in projected.items()]


class ModulePartitioner:
    """Splits a CBOM into one CBOM per project module."""

    def __init__(self, project_dir: Path):
        """Initialize partitioner.

        Args:
            project_dir: Project root that occurrence locations are relative to
        """
        self.project_dir = project_dir.resolve()

    @staticmethod
    def sort_modules(modules: List[ProjectModule]) -> List[ProjectModule]:
        """Drop the project root and order modules deepest first."""
        candidates = [module for module in modules if not module.is_root]
        return sorted(candidates, key=lambda m: m.depth, reverse=True)

    def partition(self, bom: Bom, modules: List[ProjectModule]) -> List[Tuple[ProjectModule, Bom]]:
        """Split a CBOM by module.

        Args:
            bom: Consolidated CBOM to split
            modules: Project modules, in any order

        Returns:
            (module, CBOM) pairs in processing order; modules without findings are omitted
        """
        pool = ClaimPool.from_bom(bom)
        results = []

        for module in self.sort_modules(modules):
            module_bom = self.extract(bom, module, pool)
            if module_bom is None:
                logger.debug(f"No findings for module {module.identifier}")
                continue
            results.append((module, module_bom))

        logger.info(
            f"Partitioned {bom.finding_count} findings into {len(results)} module CBOMs, "
            f"{len(pool)} left to the project root"
        )
        return results

    def extract(self, bom: Bom, module: ProjectModule, pool: ClaimPool) -> Optional[Bom]:
        """Claim every unclaimed occurrence inside a module's directory.

        Args:
            bom: CBOM to extract from
            module: Module to extract
            pool: Locations still available; claimed ones are removed

        Returns:
            Module CBOM, or None if the module claimed nothing
        """
        relative_path = module.relative_to(self.project_dir)
        builder = ComponentBuilder()

        for component in bom.components:
            for occurrence in component.occurrences:
                if _is_under(occurrence.location, relative_path) and pool.claim(occurrence.location):
                    builder.add(component, occurrence)

        if not builder:
            return None

        return Bom(
            serial_number=new_serial_number(),
            components=builder.build(),
            dependencies=project_dependencies(bom.dependencies, builder),
        )
