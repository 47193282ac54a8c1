from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..models.roster import SubjectRoster, SubjectStudent

"""Subject reshaper: per-subject accumulators -> ordered SubjectRoster list."""

__all__ = [
    "build_subject_rosters",
    "find_roster",
    "enrollment_counts",
]


def build_subject_rosters(
    accumulators: Mapping[str, Sequence[SubjectStudent]],
) -> list[SubjectRoster]:
    """Build rosters in mapping (first-appearance) order.

    Subjects with no enrolled student are dropped.
    """
    return [
        SubjectRoster(subject_code=code, students=list(students))
        for code, students in accumulators.items()
        if students
    ]


def find_roster(rosters: Sequence[SubjectRoster], subject_code: str) -> SubjectRoster | None:
    for roster in rosters:
        if roster.subject_code == subject_code:
            return roster
    return None


def enrollment_counts(rosters: Sequence[SubjectRoster]) -> dict[str, int]:
    return {r.subject_code: r.student_count for r in rosters}
