"""Diagnostics collected while resolving references and inheriting docs."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from doclink.core.models import Element

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Kinds of recoverable problems."""

    AMBIGUOUS_TYPE = "ambiguous_type"
    AMBIGUOUS_PACKAGE = "ambiguous_package"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    MEMBER_OF_NON_TYPE = "member_of_non_type"
    UNRESOLVED_PARAMETER_TYPE = "unresolved_parameter_type"
    MALFORMED_SIGNATURE = "malformed_signature"

    @property
    def level(self) -> int:
        if self in (DiagnosticKind.AMBIGUOUS_TYPE, DiagnosticKind.AMBIGUOUS_PACKAGE):
            return logging.WARNING
        return logging.INFO


@dataclass(frozen=True)
class Diagnostic:
    """One recorded problem. ``origin`` names the element whose docs triggered it."""

    kind: DiagnosticKind
    subject: str
    message: str
    origin: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind.value,
            "subject": self.subject,
            "message": self.message,
            "origin": self.origin,
        }


class ResolutionStats:
    """Counts of recorded diagnostics."""

    def __init__(self) -> None:
        self.ambiguities: int = 0
        self.unresolved: int = 0
        self.non_type_members: int = 0
        self.unresolved_parameters: int = 0
        self.malformed: int = 0
        self.undocumented: int = 0

    def to_dict(self) -> dict[str, int]:
        return dict(vars(self))

    def __repr__(self) -> str:
        return (
            f"ResolutionStats(ambiguities={self.ambiguities}, "
            f"unresolved={self.unresolved}, non_type_members={self.non_type_members}, "
            f"unresolved_parameters={self.unresolved_parameters}, "
            f"malformed={self.malformed}, undocumented={self.undocumented})"
        )


class DiagnosticLog:
    """Append-only, thread-safe collector of diagnostics.

    Each ``(kind, subject)`` pair is recorded and logged once; repeats are
    ignored. Elements that end up with no documentation at all are kept in a
    separate set so a report can list them.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[DiagnosticKind, str], Diagnostic] = {}
        self._undocumented: dict[int, Element] = {}

    def record(
        self,
        kind: DiagnosticKind,
        subject: str,
        message: str,
        origin: Element | None = None,
    ) -> bool:
        """Record a diagnostic. Returns False when it was already known."""
        key = (kind, subject)
        with self._lock:
            if key in self._records:
                return False
            self._records[key] = Diagnostic(
                kind, subject, message, origin.qualified_name if origin else None
            )
        logger.log(kind.level, "%s", message)
        return True

    def mark_undocumented(self, element: Element) -> None:
        with self._lock:
            if element.id in self._undocumented:
                return
            self._undocumented[element.id] = element
        logger.debug("No documentation for %s", element.qualified_name)

    @property
    def undocumented_elements(self) -> frozenset[Element]:
        with self._lock:
            return frozenset(self._undocumented.values())

    def records(self, kind: DiagnosticKind | None = None) -> list[Diagnostic]:
        """Recorded diagnostics, sorted by kind then subject."""
        with self._lock:
            found = [d for d in self._records.values() if kind is None or d.kind == kind]
        return sorted(found, key=lambda d: (d.kind.value, d.subject))

    def stats(self) -> ResolutionStats:
        stats = ResolutionStats()
        for diag in self.records():
            if diag.kind in (DiagnosticKind.AMBIGUOUS_TYPE, DiagnosticKind.AMBIGUOUS_PACKAGE):
                stats.ambiguities += 1
            elif diag.kind == DiagnosticKind.UNRESOLVED_REFERENCE:
                stats.unresolved += 1
            elif diag.kind == DiagnosticKind.MEMBER_OF_NON_TYPE:
                stats.non_type_members += 1
            elif diag.kind == DiagnosticKind.UNRESOLVED_PARAMETER_TYPE:
                stats.unresolved_parameters += 1
            elif diag.kind == DiagnosticKind.MALFORMED_SIGNATURE:
                stats.malformed += 1
        stats.undocumented = len(self.undocumented_elements)
        return stats

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
