"""Ontology-aware patient counting per term and group"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import pandas as pd

from ..core.exceptions import EmptyGroupError, UnresolvableTermError
from ..patients import Patient, PatientGroup

logger = logging.getLogger(__name__)


class CountEntries:
    """Restartable view over a CountTable, ascending by term id"""

    def __init__(self, table: 'CountTable'):
        self._table = table

    def __iter__(self) -> Iterator[Tuple[str, Tuple[int, ...]]]:
        for term_id in sorted(self._table._counts):
            yield term_id, tuple(self._table._counts[term_id])

    def __len__(self) -> int:
        return len(self._table)


class CountTable:
    """Term id -> per-group patient counts.

    Terms are only materialised on their first increment, so no entry is ever
    all zero.
    """

    def __init__(self, num_groups: int):
        if num_groups < 1:
            raise ValueError(f"num_groups must be positive, got {num_groups}")
        self.num_groups = num_groups
        self._counts: Dict[str, List[int]] = {}

    def get(self, term_id: str) -> List[int]:
        """Counts of *term_id*, created zeroed on first access"""
        counts = self._counts.get(term_id)
        if counts is None:
            counts = [0] * self.num_groups
            self._counts[term_id] = counts
        return counts

    def increment(self, term_id: str, group: int):
        self.get(term_id)[group] += 1

    def counts(self, term_id: str) -> Tuple[int, ...]:
        """Read-only counts; absent terms are all zero and stay absent"""
        counts = self._counts.get(term_id)
        if counts is None:
            return (0,) * self.num_groups
        return tuple(counts)

    def entries(self) -> CountEntries:
        return CountEntries(self)

    def merge(self, other: 'CountTable'):
        """Add *other*'s counts element-wise into this table"""
        if other.num_groups != self.num_groups:
            raise ValueError(
                f"Cannot merge tables of {other.num_groups} and {self.num_groups} groups"
            )
        for term_id, counts in other._counts.items():
            mine = self.get(term_id)
            for g, value in enumerate(counts):
                mine[g] += value

    def __contains__(self, term_id) -> bool:
        return term_id in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def to_dataframe(self, hierarchy=None, group_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """One row per term, ascending by term id.

        Args:
            hierarchy: Optional TermHierarchy supplying a ``label`` column
            group_names: Column names for the count columns
        """
        if group_names is None:
            group_names = [f"group{chr(ord('A') + i)}" for i in range(self.num_groups)]
        if len(group_names) != self.num_groups:
            raise ValueError(f"{len(group_names)} group names for {self.num_groups} groups")

        rows = []
        for term_id, counts in self.entries():
            row = {"term_id": term_id}
            if hierarchy is not None:
                row["label"] = hierarchy.label(term_id)
            row.update(zip(group_names, counts))
            rows.append(row)

        columns = ["term_id"] + (["label"] if hierarchy is not None else []) + list(group_names)
        return pd.DataFrame(rows, columns=columns)


def validate_groups(groups: Sequence[PatientGroup]):
    """Reject cohorts without patients before any counting happens"""
    if not groups:
        raise EmptyGroupError("<none>", "no groups to compare")
    for group in groups:
        if len(group) == 0:
            raise EmptyGroupError(group.name, f"no patients loaded from {group.source or 'input'}")


def patient_closure(hierarchy, patient: Patient) -> Set[str]:
    """Union of the ancestor closures of all of *patient*'s annotated terms"""
    closure = set()
    for term_id in sorted(patient.terms):
        try:
            closure |= hierarchy.ancestor_closure(term_id)
        except UnresolvableTermError as e:
            raise UnresolvableTermError(term_id, patient.patient_id) from e
    return closure


def count_patients(hierarchy, patients: Sequence[Patient], group: int, num_groups: int) -> CountTable:
    """Partial table for *patients*, all belonging to group index *group*"""
    table = CountTable(num_groups)
    for patient in patients:
        for term_id in patient_closure(hierarchy, patient):
            table.increment(term_id, group)
    return table


class TermCountAggregator:
    """Builds the CountTable for a list of patient groups.

    With ``max_workers > 1`` patients are split into chunks counted on a
    thread pool; each chunk fills its own table and the partial tables are
    summed once every chunk has finished.
    """

    def __init__(self, hierarchy, max_workers: int = 1, chunk_size: int = 250):
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.hierarchy = hierarchy
        self.max_workers = max_workers
        self.chunk_size = max(1, chunk_size)

    def _chunks(self, groups: Sequence[PatientGroup]):
        for g, group in enumerate(groups):
            patients = list(group)
            for start in range(0, len(patients), self.chunk_size):
                yield g, patients[start:start + self.chunk_size]

    def aggregate(self, groups: Sequence[PatientGroup]) -> CountTable:
        """Count, for every term, the patients per group whose closure contains it.

        Raises:
            EmptyGroupError: if any group has no patients
            UnresolvableTermError: if a patient's term is not in the hierarchy
        """
        validate_groups(groups)
        num_groups = len(groups)
        logger.info(
            f"Counting {sum(len(g) for g in groups)} patients in {num_groups} groups "
            f"({self.max_workers} worker{'s' if self.max_workers > 1 else ''})"
        )

        if self.max_workers == 1:
            table = CountTable(num_groups)
            for g, group in enumerate(groups):
                table.merge(count_patients(self.hierarchy, list(group), g, num_groups))
            logger.info(f"Counted {len(table)} terms")
            return table

        table = CountTable(num_groups)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(count_patients, self.hierarchy, chunk, g, num_groups)
                for g, chunk in self._chunks(groups)
            ]
            try:
                for future in as_completed(futures):
                    table.merge(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        logger.info(f"Counted {len(table)} terms")
        return table


def aggregate(hierarchy, groups: Sequence[PatientGroup], workers: int = 1) -> CountTable:
    """Convenience wrapper around TermCountAggregator"""
    return TermCountAggregator(hierarchy, max_workers=workers).aggregate(groups)
