"""Rendering and writing of the count table"""
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from .core.config import default_group_names
from .core.exceptions import OutputWriteError
from .processing.aggregator import CountTable

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("txt", "tsv", "csv", "xlsx")


class ResultFormatter:
    """Renders a CountTable as text, one line per term"""

    def __init__(self, hierarchy, group_names: Optional[Sequence[str]] = None):
        self.hierarchy = hierarchy
        self.group_names = list(group_names) if group_names else None

    def _names(self, table: CountTable):
        names = self.group_names or default_group_names(table.num_groups)
        if len(names) != table.num_groups:
            raise ValueError(f"{len(names)} group names for {table.num_groups} groups")
        return names

    def format_line(self, term_id: str, counts, names) -> str:
        fields = [term_id, self.hierarchy.label(term_id)]
        fields.extend(f"{name}: {count}" for name, count in zip(names, counts))
        return "\t".join(fields)

    def render(self, table: CountTable) -> str:
        names = self._names(table)
        lines = [self.format_line(term_id, counts, names) for term_id, counts in table.entries()]
        return "".join(line + "\n" for line in lines)

    def to_dataframe(self, table: CountTable) -> pd.DataFrame:
        return table.to_dataframe(self.hierarchy, self._names(table))


def _write_payload(handle_path: str, table: CountTable, formatter: ResultFormatter, fmt: str):
    if fmt == "txt":
        with open(handle_path, 'w', encoding='utf-8') as f:
            f.write(formatter.render(table))
    elif fmt == "tsv":
        formatter.to_dataframe(table).to_csv(handle_path, sep="\t", index=False)
    elif fmt == "csv":
        formatter.to_dataframe(table).to_csv(handle_path, index=False)
    elif fmt == "xlsx":
        with pd.ExcelWriter(handle_path, engine='openpyxl') as writer:
            formatter.to_dataframe(table).to_excel(writer, sheet_name='Counts', index=False)


def _output_mode(target: Path) -> int:
    """Permission bits for a new result file: the existing file's, else 0666 less umask"""
    if target.exists():
        return stat.S_IMODE(target.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_results(path, table: CountTable, formatter: ResultFormatter, fmt: str = "txt") -> Path:
    """Write *table* to *path* atomically.

    The payload goes to a temporary file next to the target which then
    replaces it, so an existing output is left untouched on failure.

    Raises:
        OutputWriteError: if the output cannot be written
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format '{fmt}'")

    target = Path(path)
    tmp_path = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
        os.close(fd)
        _write_payload(tmp_path, table, formatter, fmt)
        # mkstemp creates the file 0600
        os.chmod(tmp_path, _output_mode(target))
        os.replace(tmp_path, target)
        tmp_path = None
    except OSError as e:
        raise OutputWriteError(str(target), str(e)) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info(f"Wrote {len(table)} terms to {target}")
    return target


def most_divergent_terms(table: CountTable, group_sizes: Sequence[int], top: int = 20) -> pd.DataFrame:
    """Terms whose per-group patient fractions differ most, long format"""
    if len(group_sizes) != table.num_groups:
        raise ValueError(f"{len(group_sizes)} group sizes for {table.num_groups} groups")

    spreads = []
    for term_id, counts in table.entries():
        fractions = [c / n if n else 0.0 for c, n in zip(counts, group_sizes)]
        spreads.append((max(fractions) - min(fractions), term_id, fractions))
    # Largest spread first, term id breaks ties
    spreads.sort(key=lambda item: (-item[0], item[1]))

    rows = []
    for _, term_id, fractions in spreads[:top]:
        for g, fraction in enumerate(fractions):
            rows.append({"term_id": term_id, "group": g, "fraction": fraction})
    return pd.DataFrame(rows, columns=["term_id", "group", "fraction"])


def plot_counts(table: CountTable, hierarchy, group_sizes: Sequence[int], output_file,
                group_names: Optional[Sequence[str]] = None, top: int = 20) -> Path:
    """Grouped bar chart of the *top* most divergent terms"""
    names = list(group_names) if group_names else default_group_names(table.num_groups)
    data = most_divergent_terms(table, group_sizes, top)
    data["group"] = data["group"].map(dict(enumerate(names)))
    data["label"] = [f"{hierarchy.label(t) or t} ({t})" for t in data["term_id"]]

    output_file = Path(output_file)
    plt.figure(figsize=(12, max(4, 0.4 * max(1, data["term_id"].nunique()) + 2)))
    sns.barplot(data=data, x="fraction", y="label", hue="group")
    plt.xlabel('Fraction of patients')
    plt.ylabel('')
    plt.title(f'Top {top} terms by difference between groups', fontsize=14, fontweight='bold')
    plt.tight_layout()
    try:
        plt.savefig(output_file, dpi=300, bbox_inches='tight')
    except OSError as e:
        raise OutputWriteError(str(output_file), str(e)) from e
    finally:
        plt.close()

    logger.info(f"Saved plot to {output_file}")
    return output_file
