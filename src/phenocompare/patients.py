"""Patient records and cohort loading"""
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional

from tqdm import tqdm

from .core.exceptions import DataSourceError

logger = logging.getLogger(__name__)

# Ontology accessions such as HP:0001250
TERM_ID_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*:\d+$")

TEXT_SUFFIXES = {'', '.txt', '.tsv'}
JSON_SUFFIXES = {'.json'}


@dataclass(frozen=True)
class Patient:
    """A patient and the terms observed directly for them"""
    patient_id: str
    terms: FrozenSet[str] = frozenset()
    genes: FrozenSet[str] = frozenset()
    source: str = ""


@dataclass
class PatientGroup:
    """An ordered, named cohort"""
    name: str
    patients: List[Patient] = field(default_factory=list)
    source: str = ""

    def __len__(self) -> int:
        return len(self.patients)

    def __iter__(self) -> Iterator[Patient]:
        return iter(self.patients)

    @property
    def is_empty(self) -> bool:
        return not self.patients


def _read_text_patient(path: Path) -> Patient:
    terms = set()
    genes = set()
    # utf-8-sig strips a leading byte-order mark
    with open(path, 'r', encoding='utf-8-sig') as f:
        for line_number, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            # Tab-separated, or whitespace-separated when the line has no tab
            parts = line.split('\t') if '\t' in line else line.split()
            fields = [part.strip() for part in parts]
            if TERM_ID_PATTERN.match(fields[0]):
                terms.add(fields[0])
            elif fields[0].lower() == 'gene':
                genes.update(g for g in fields[1:] if g)
            else:
                logger.warning(f"{path.name}:{line_number}: unrecognised line {line!r} ignored")
    return Patient(path.stem, frozenset(terms), frozenset(genes), str(path))


def _object(value, where: str) -> dict:
    """*value* as a JSON object, {} when absent"""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where}: expected a JSON object, got {type(value).__name__}")
    return value


def _array(value, where: str) -> list:
    """*value* as a JSON array, [] when absent"""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a JSON array, got {type(value).__name__}")
    return value


def _phenopacket_genes(packet: dict) -> set:
    genes = set()
    for i, item in enumerate(_array(packet.get("interpretations"), "interpretations")):
        interpretation = _object(item, f"interpretations[{i}]")
        diagnosis = _object(interpretation.get("diagnosis"), f"interpretations[{i}].diagnosis")
        for j, entry in enumerate(_array(diagnosis.get("genomicInterpretations"),
                                         f"interpretations[{i}].diagnosis.genomicInterpretations")):
            where = f"interpretations[{i}].diagnosis.genomicInterpretations[{j}]"
            gi = _object(entry, where)
            symbol = _object(gi.get("gene"), f"{where}.gene").get("symbol")
            if not symbol:
                variant = _object(gi.get("variantInterpretation"), f"{where}.variantInterpretation")
                descriptor = _object(variant.get("variationDescriptor"), f"{where}.variationDescriptor")
                symbol = _object(descriptor.get("geneContext"), f"{where}.geneContext").get("symbol")
            if symbol:
                genes.add(str(symbol))
    return genes


def _read_json_patient(path: Path) -> Patient:
    with open(path, 'r', encoding='utf-8-sig') as f:
        packet = json.load(f)
    if not isinstance(packet, dict):
        raise ValueError("expected a JSON object")

    terms = set()
    for i, item in enumerate(_array(packet.get("phenotypicFeatures"), "phenotypicFeatures")):
        feature = _object(item, f"phenotypicFeatures[{i}]")
        if feature.get("excluded"):
            continue
        term_id = _object(feature.get("type"), f"phenotypicFeatures[{i}].type").get("id")
        if term_id:
            terms.add(str(term_id))

    patient_id = packet.get("id") or path.stem
    return Patient(str(patient_id), frozenset(terms), frozenset(_phenopacket_genes(packet)), str(path))


def read_patient_file(path) -> Patient:
    """Read one patient file (tab-separated text or phenopacket JSON).

    Raises:
        DataSourceError: if the file cannot be read or parsed
    """
    path = Path(path)
    try:
        if path.suffix.lower() in JSON_SUFFIXES:
            return _read_json_patient(path)
        return _read_text_patient(path)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise DataSourceError(str(path), str(e)) from e


class CohortLoader:
    """Loads every patient file of a directory into a PatientGroup"""

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress

    def _collect_patient_files(self, directory: Path) -> List[Path]:
        """Collect patient files, sorted for consistent ordering"""
        files = [
            p for p in directory.iterdir()
            if p.is_file()
            and not p.name.startswith('.')
            and p.suffix.lower() in TEXT_SUFFIXES | JSON_SUFFIXES
        ]
        files.sort()
        return files

    def load(self, source, name: Optional[str] = None) -> PatientGroup:
        """Read the patients of *source* directory.

        Raises:
            DataSourceError: if the directory or one of its files cannot be read
        """
        directory = Path(source)
        if not directory.is_dir():
            raise DataSourceError(str(directory), "not a directory")

        try:
            files = self._collect_patient_files(directory)
        except OSError as e:
            raise DataSourceError(str(directory), str(e)) from e

        group = PatientGroup(name=name or directory.name, source=str(directory))
        for path in tqdm(files, desc=f"Reading {group.name}", unit="patient",
                         disable=not self.show_progress):
            group.patients.append(read_patient_file(path))

        logger.info(f"Loaded {len(group)} patients for {group.name} from {directory}")
        return group
