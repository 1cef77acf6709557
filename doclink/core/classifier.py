"""Element classification: exclusion, deprecation and usage indexes."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from doclink.core.exceptions import MalformedModelError
from doclink.core.graph import ElementGraph, RelationKind
from doclink.core.graph.analysis import find_cycles, topological_sort
from doclink.core.models import (
    Deprecation,
    Element,
    ElementKind,
    ElementQualities,
    ExecutableElement,
    TypeElement,
    TypeKind,
    TypeRef,
)
from doclink.core.universe import SymbolUniverse

logger = logging.getLogger(__name__)

TypeIndex = Mapping[TypeElement, frozenset[Element]]

_EMPTY: frozenset = frozenset()


@dataclass(frozen=True)
class Classification:
    """Read-only results of classifying a universe."""

    qualities: Mapping[Element, ElementQualities]
    producers: TypeIndex = field(default_factory=lambda: MappingProxyType({}))
    consumers: TypeIndex = field(default_factory=lambda: MappingProxyType({}))
    transformers: TypeIndex = field(default_factory=lambda: MappingProxyType({}))
    pseudo_constructors: TypeIndex = field(default_factory=lambda: MappingProxyType({}))
    known_subtypes: Mapping[TypeElement, frozenset[TypeElement]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    known_direct_subtypes: Mapping[TypeElement, frozenset[TypeElement]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get_qualities(self, element: Element) -> ElementQualities | None:
        """Qualities of a classified element, None for anything else."""
        return self.qualities.get(element)

    def is_excluded(self, element: Element) -> bool:
        q = self.qualities.get(element)
        return q is not None and q.excluded

    @property
    def excluded_elements(self) -> frozenset[Element]:
        return frozenset(e for e, q in self.qualities.items() if q.excluded)

    @property
    def deprecated_elements(self) -> dict[Element, Deprecation]:
        """Deprecated elements that are not excluded."""
        return {
            e: q.deprecation
            for e, q in self.qualities.items()
            if not q.excluded and q.deprecation.is_deprecated
        }

    @property
    def deprecation_causes(self) -> dict[Element, frozenset[Element]]:
        """Cause sets of implicitly deprecated elements."""
        return {
            e: q.causes
            for e, q in self.qualities.items()
            if q.deprecation == Deprecation.IMPLIED
        }

    def lookup(self, index: TypeIndex, t: TypeElement) -> frozenset[Element]:
        return index.get(t, _EMPTY)


class ElementClassifier:
    """Compute qualities and indexes for every documented element.

    Classification runs in two phases. The first orders the classified
    elements so that each comes after its enclosing elements, its direct
    supertypes and the methods it overrides. The second computes qualities
    in that order, so every lookup of a prerequisite finds a finished result.
    """

    def __init__(self, universe: SymbolUniverse) -> None:
        self.universe = universe
        self.config = universe.config
        self._bases: dict[int, list[TypeElement]] = {}

    def classify(self) -> Classification:
        targets = self._targets()
        order = self._order(targets)

        qualities: dict[Element, ElementQualities] = {}
        for element in order:
            qualities[element] = self._qualities(element, qualities)

        excluded = sum(1 for q in qualities.values() if q.excluded)
        deprecated = sum(1 for q in qualities.values() if q.deprecation.is_deprecated)
        logger.info(
            "Classified %d elements: %d excluded, %d deprecated",
            len(qualities),
            excluded,
            deprecated,
        )
        frozen = MappingProxyType(qualities)
        return self._index(Classification(frozen))

    # Phase 1

    def _targets(self) -> list[Element]:
        """Elements that receive qualities, in model order."""
        result: list[Element] = []
        for m in self.universe.modules:
            if m.included:
                result.append(m)
        for p in self.universe.packages:
            if p.included:
                result.append(p)
        for t in self.universe.types:
            if not t.included:
                continue
            if t.is_visible:
                result.append(t)
            for member in t.members:
                if member.kind.is_member and member.is_visible:
                    result.append(member)
        return result

    def _bases_of(self, t: TypeElement) -> list[TypeElement]:
        """Included direct supertypes."""
        bases = self._bases.get(t.id)
        if bases is None:
            bases = [s for s in self.universe.direct_supertypes(t) if s.included]
            self._bases[t.id] = bases
        return bases

    def _overridden(self, method: ExecutableElement) -> list[list[ExecutableElement]]:
        """Per included direct supertype of the owner, the methods ``method`` overrides."""
        owner = method.enclosing
        if not isinstance(owner, TypeElement):
            return []
        return [
            [c for c in self.universe.methods_in(base) if self.universe.overrides(method, c, owner)]
            for base in self._bases_of(owner)
        ]

    def _order(self, targets: list[Element]) -> list[Element]:
        graph = ElementGraph()
        for element in targets:
            graph.add_element(element)

        for element in targets:
            container = element.enclosing
            while container is not None:
                if container in graph:
                    graph.add_relation(container, element, RelationKind.ENCLOSES)
                container = container.enclosing
            if isinstance(element, TypeElement):
                for base in self._bases_of(element):
                    if base in graph:
                        graph.add_relation(base, element, RelationKind.SUPERTYPE_OF)
            elif element.kind == ElementKind.METHOD:
                for group in self._overridden(element):
                    for overridden in group:
                        if overridden in graph:
                            graph.add_relation(overridden, element, RelationKind.OVERRIDDEN_BY)

        order = topological_sort(graph)
        if order is None:
            cycle = next(iter(find_cycles(graph, max_cycles=1)), [])
            names = [e.qualified_name for e in cycle]
            raise MalformedModelError(
                f"Cyclic enclosing, supertype or override relation: {' -> '.join(names)}",
                names,
            )
        return order

    # Phase 2

    def _qualities(
        self, element: Element, done: Mapping[Element, ElementQualities]
    ) -> ElementQualities:
        excluded = self._is_excluded(element, done)
        causes: set[Element] = set()
        deprecation = self._deprecation(element, done, causes)
        return ElementQualities(excluded, deprecation, frozenset(causes))

    def _is_excluded(self, element: Element, done: Mapping[Element, ElementQualities]) -> bool:
        if element.doc is not None and element.doc.has_tag(self.config.exclude_tag):
            return True

        container = element.enclosing
        if container is not None:
            q = done.get(container)
            if q is not None and q.excluded:
                return True

        if isinstance(element, TypeElement):
            return any(
                (q := done.get(base)) is not None and q.excluded
                for base in self._bases_of(element)
            )
        if element.kind == ElementKind.METHOD:
            return any(
                (q := done.get(overridden)) is not None and q.excluded
                for group in self._overridden(element)
                for overridden in group
            )
        return False

    def _explicit_deprecation(self, element: Element) -> Deprecation | None:
        if element.doc is not None:
            tags = list(element.doc.tags_of(self.config.deprecated_tag))
            if any(t.text.strip() for t in tags):
                return Deprecation.ADVISED
            if tags:
                return Deprecation.MARKED
        if self.config.deprecated_annotation in element.annotations:
            return Deprecation.MARKED
        return None

    def _deprecation(
        self,
        element: Element,
        done: Mapping[Element, ElementQualities],
        causes: set[Element],
    ) -> Deprecation:
        explicit = self._explicit_deprecation(element)
        if explicit is not None:
            return explicit

        container = element.enclosing
        while container is not None:
            if _absorb(container, done.get(container), causes):
                break
            container = container.enclosing

        if isinstance(element, TypeElement):
            for base in self._bases_of(element):
                if _absorb(base, done.get(base), causes):
                    break
        elif element.kind == ElementKind.METHOD:
            for group in self._overridden(element):
                for overridden in group:
                    if _absorb(overridden, done.get(overridden), causes):
                        break

        return Deprecation.IMPLIED if causes else Deprecation.NONE

    # Indexes

    def _assignable_to(self, type_ref: TypeRef | None, context: Element) -> list[TypeElement]:
        """The declared type behind ``type_ref`` and all of its supertypes."""
        if type_ref is None:
            return []
        erased = type_ref.component().erasure()
        if erased.kind != TypeKind.DECLARED:
            return []
        decl = self.universe.as_element(erased.component(), context)
        if decl is None:
            return []
        return [decl, *self.universe.supertype_closure(decl)]

    def _index(self, result: Classification) -> Classification:
        universe = self.universe
        subtypes: dict[TypeElement, set[TypeElement]] = defaultdict(set)
        producers: dict[TypeElement, set[Element]] = defaultdict(set)
        consumers: dict[TypeElement, set[Element]] = defaultdict(set)
        pseudo: dict[TypeElement, set[Element]] = defaultdict(set)

        def usable(member: Element) -> bool:
            return member.is_visible and not result.is_excluded(member)

        for t in universe.types:
            if not t.included or result.is_excluded(t):
                continue

            for sup in universe.supertype_closure(t):
                if sup.included and not result.is_excluded(sup):
                    subtypes[sup].add(t)

            for f in universe.fields_in(t):
                if usable(f):
                    _add(producers, self._assignable_to(f.type, f), f)

            for m in universe.methods_in(t):
                if not usable(m):
                    continue
                keys = self._assignable_to(m.return_type, m)
                if m.doc is not None and m.doc.has_tag(self.config.constructor_tag):
                    _add(pseudo, keys, m)
                else:
                    _add(producers, keys, m)
                for p in m.parameters:
                    _add(consumers, self._assignable_to(p.type, m), m)

        transformers: dict[TypeElement, set[Element]] = defaultdict(set)
        for key in set(producers) | set(consumers):
            both = producers.get(key, set()) & consumers.get(key, set())
            if not both:
                continue
            producers[key] -= both
            consumers[key] -= both
            transformers[key] |= both

        direct = {
            key: {s for s in subs if key in universe.direct_supertypes(s)}
            for key, subs in subtypes.items()
        }

        logger.debug(
            "Indexed %d producer keys, %d consumer keys, %d transformer keys",
            len(producers),
            len(consumers),
            len(transformers),
        )
        return Classification(
            qualities=result.qualities,
            producers=_freeze(producers),
            consumers=_freeze(consumers),
            transformers=_freeze(transformers),
            pseudo_constructors=_freeze(pseudo),
            known_subtypes=_freeze(subtypes),
            known_direct_subtypes=_freeze(direct),
        )


def _absorb(
    ancestor: Element, q: ElementQualities | None, causes: set[Element]
) -> bool:
    """Collect deprecation causes from an ancestor; True once one was deprecated."""
    if q is None or not q.deprecation.is_deprecated:
        return False
    if q.deprecation.is_explicit:
        causes.add(ancestor)
    else:
        causes.update(q.causes)
    return True


def _add(index: dict, keys: Iterable[TypeElement], element: Element) -> None:
    for key in keys:
        index[key].add(element)


def _freeze(index: Mapping) -> Mapping:
    return MappingProxyType({k: frozenset(v) for k, v in index.items() if v})
