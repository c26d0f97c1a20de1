"""Shared fixtures for the PhenoCompare tests"""
import os
import sys
from pathlib import Path

import pytest

# Add src to path for testing without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), os.pardir, 'src'))

from phenocompare.ontology import Term, TermHierarchy
from phenocompare.patients import Patient, PatientGroup


HP_OBO = """format-version: 1.2
data-version: hp/releases/2024-01-01
ontology: hp

[Term]
id: HP:0000001
name: All

[Term]
id: HP:0000118
name: Phenotypic abnormality
is_a: HP:0000001 ! All

[Term]
id: HP:0000707
name: Abnormality of the nervous system
is_a: HP:0000118 ! Phenotypic abnormality

[Term]
id: HP:0000152
name: Abnormality of head or neck
is_a: HP:0000118 ! Phenotypic abnormality

[Term]
id: HP:0001250
name: Seizure
def: "An intermittent abnormality of nervous system physiology." [HPO:probinson]
is_a: HP:0000707 ! Abnormality of the nervous system

[Term]
id: HP:0000234
name: Abnormality of the head
is_a: HP:0000152 ! Abnormality of head or neck

[Term]
id: HP:0002373
name: Febrile seizure
is_a: HP:0001250 ! Seizure
is_a: HP:0000234 {source="test"} ! Abnormality of the head

[Typedef]
id: part_of
name: part of
is_a: HP:0000001
"""


@pytest.fixture
def obo_file(tmp_path):
    path = tmp_path / "hp.obo"
    path.write_text(HP_OBO, encoding="utf-8")
    return path


@pytest.fixture
def chain_hierarchy():
    """R <- C <- G"""
    return TermHierarchy([
        Term("R", "root", ()),
        Term("C", "child", ("R",)),
        Term("G", "grandchild", ("C",)),
    ])


@pytest.fixture
def diamond_hierarchy():
    """X has parents A and B, both children of R; S is a sibling of X under A"""
    return TermHierarchy([
        Term("R", "root", ()),
        Term("A", "left", ("R",)),
        Term("B", "right", ("R",)),
        Term("X", "bottom", ("A", "B")),
        Term("S", "sibling", ("A",)),
    ])


def make_group(name, *term_sets):
    """PatientGroup with one patient per term set"""
    return PatientGroup(
        name=name,
        patients=[
            Patient(f"{name}-{i}", frozenset(terms))
            for i, terms in enumerate(term_sets)
        ],
    )


@pytest.fixture
def write_patient():
    """Write a tab-separated patient file"""
    def _write(directory: Path, patient_id: str, terms=(), genes=()):
        directory.mkdir(parents=True, exist_ok=True)
        lines = ["# patient " + patient_id]
        lines.extend(f"{t}\tobserved" for t in terms)
        if genes:
            lines.append("gene\t" + "\t".join(genes))
        path = directory / f"{patient_id}.txt"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def group_factory():
    return make_group
