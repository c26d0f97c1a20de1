"""Alternate grouping of patients by biochemical-pathway genes.

A gene file holds two tab-separated lines: the genes of the early part of the
pathway, then the genes of the late part. Patients carrying an early gene form
the first group, patients carrying a late gene the second.
"""
import logging
from pathlib import Path
from typing import Iterable, Sequence, Set, Tuple

from .core.exceptions import DataSourceError, EmptyGroupError
from .patients import Patient, PatientGroup

logger = logging.getLogger(__name__)


def _read_gene_names(line: str) -> Set[str]:
    return {name.strip() for name in line.rstrip('\r\n').split('\t') if name.strip()}


class GeneGroups:
    """Early and late pathway gene sets"""

    def __init__(self, early_genes: Iterable[str], late_genes: Iterable[str], source: str = ""):
        self.early_genes = frozenset(early_genes)
        self.late_genes = frozenset(late_genes)
        self.source = source
        if not self.early_genes or not self.late_genes:
            raise EmptyGroupError(
                "early" if not self.early_genes else "late",
                f"empty group of genes from {source or 'input'}",
            )

    @classmethod
    def from_file(cls, path) -> 'GeneGroups':
        """Read the two gene lists from *path*.

        Raises:
            DataSourceError: if the file cannot be read
            EmptyGroupError: if either list is empty
        """
        path = Path(path)
        if not path.exists():
            raise DataSourceError(str(path), "cannot find genes file")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise DataSourceError(str(path), str(e)) from e

        early = _read_gene_names(lines[0]) if len(lines) > 0 else set()
        late = _read_gene_names(lines[1]) if len(lines) > 1 else set()
        return cls(early, late, source=str(path))

    def is_early_gene(self, gene_name: str) -> bool:
        return gene_name in self.early_genes

    def is_late_gene(self, gene_name: str) -> bool:
        return gene_name in self.late_genes


class GeneGroupSelector:
    """Produces two named patient groups from one pool using GeneGroups"""

    def __init__(self, gene_groups: GeneGroups):
        self.gene_groups = gene_groups

    def partition(self, patients: Iterable[Patient],
                  names: Sequence[str] = ("early", "late")) -> Tuple[PatientGroup, PatientGroup]:
        """Split *patients* into (early, late) groups.

        A patient with genes on both lists belongs to both groups; one with
        neither is left out.
        """
        if len(names) != 2:
            raise ValueError(f"Gene grouping needs exactly two group names, got {len(names)}")

        early = PatientGroup(name=names[0], source=self.gene_groups.source)
        late = PatientGroup(name=names[1], source=self.gene_groups.source)
        for patient in patients:
            in_early = any(self.gene_groups.is_early_gene(g) for g in patient.genes)
            in_late = any(self.gene_groups.is_late_gene(g) for g in patient.genes)
            if in_early:
                early.patients.append(patient)
            if in_late:
                late.patients.append(patient)
            if in_early and in_late:
                logger.warning(f"Patient {patient.patient_id} carries early and late genes; counted in both groups")
            elif not (in_early or in_late):
                logger.debug(f"Patient {patient.patient_id} has no pathway gene; skipped")

        logger.info(f"Gene grouping: {len(early)} {early.name}, {len(late)} {late.name}")
        return early, late
