"""Information content of ontology terms from term-to-object associations.

IC(t) = -ln(objects annotated with t / all annotated objects)
"""
import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .core.exceptions import DataSourceError, OutputWriteError

logger = logging.getLogger(__name__)

# Accepted spellings of the two columns we need, normalised to lower case without "_"
OBJECT_COLUMNS = {"databaseid", "dbobjectid", "object"}
TERM_COLUMNS = {"hpoid", "termid", "term"}


def _header_row(path: Path) -> int:
    """Index of the header line; leading "#" metadata lines are skipped.

    Older annotation files start their header itself with "#".
    """
    with open(path, 'r', encoding='utf-8') as f:
        for index, line in enumerate(f):
            if not line.startswith('#') or '\t' in line:
                return index
    raise DataSourceError(str(path), "no header line found")


def _find_column(columns, accepted) -> Optional[str]:
    for column in columns:
        if column.lstrip('#').lower().replace('_', '') in accepted:
            return column
    return None


def load_associations(path) -> List[Tuple[str, str]]:
    """Read (term id, object id) pairs from an HPO annotation file.

    Rows qualified as ``NOT`` are dropped.

    Raises:
        DataSourceError: if the file cannot be read or lacks the needed columns
    """
    path = Path(path)
    try:
        skip = _header_row(path)
        frame = pd.read_csv(path, sep='\t', skiprows=skip, dtype=str)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataSourceError(str(path), str(e)) from e

    object_col = _find_column(frame.columns, OBJECT_COLUMNS)
    term_col = _find_column(frame.columns, TERM_COLUMNS)
    if object_col is None or term_col is None:
        raise DataSourceError(str(path), f"expected database_id and hpo_id columns, found {list(frame.columns)}")

    qualifier_col = _find_column(frame.columns, {"qualifier"})
    if qualifier_col is not None:
        frame = frame[frame[qualifier_col].fillna('').str.upper() != 'NOT']

    frame = frame[[term_col, object_col]].dropna()
    pairs = list(frame.itertuples(index=False, name=None))
    logger.info(f"Read {len(pairs)} associations from {path}")
    return pairs


def compute_information_content(associations: Iterable[Tuple[str, str]]) -> Dict[str, float]:
    """Map each annotated term to its information content, ascending by term id"""
    term_to_objects = defaultdict(set)
    all_objects = set()
    for term_id, object_id in associations:
        term_to_objects[term_id].add(object_id)
        all_objects.add(object_id)

    total = len(all_objects)
    return {
        term_id: -math.log(len(term_to_objects[term_id]) / total)
        for term_id in sorted(term_to_objects)
    }


def write_information_content(path, information_content: Dict[str, float]) -> Path:
    """Write ``term<TAB>value`` lines.

    Raises:
        OutputWriteError: if the file cannot be written
    """
    path = Path(path)
    logger.info(f"Writing information content to {path} ...")
    try:
        with open(path, 'w', encoding='utf-8') as out:
            for term_id, value in information_content.items():
                out.write(f"{term_id}\t{value}\n")
    except OSError as e:
        raise OutputWriteError(str(path), str(e)) from e
    logger.info("=> done writing information content")
    return path
