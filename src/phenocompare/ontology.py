#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Human Phenotype Ontology loading and ancestor queries.

Only the parts of the OBO format the comparison needs are read: the ``id``,
``name`` and ``is_a`` tags of ``[Term]`` stanzas. Obsolete flags, ``alt_id``
and ``replaced_by`` are not interpreted.
"""

import collections
import logging
import threading
from collections import deque
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Optional

from .core.exceptions import DataSourceError, UnresolvableTermError

logger = logging.getLogger(__name__)


class Term(collections.namedtuple("Term", ["id", "name", "parents"])):
    """One ontology node; ``parents`` holds the ids of its direct ``is_a`` targets"""

    @classmethod
    def from_stanza(cls, tags):
        return cls(
            id=tags["id"],
            name=tags.get("name", ""),
            parents=tuple(dict.fromkeys(tags.get("is_a", ()))),
        )


class TermHierarchy:
    """Read-only term DAG answering ancestor-closure queries.

    Closures are computed lazily and cached; the cache is lock-guarded so one
    hierarchy can be shared between aggregation workers.
    """

    def __init__(self, terms: Iterable[Term], name: str = ""):
        self.name = name
        self._terms: Dict[str, Term] = {}
        for term in terms:
            self._terms[term.id] = term

        # Parents referenced without a stanza of their own
        for term in list(self._terms.values()):
            for parent in term.parents:
                if parent not in self._terms:
                    logger.debug(f"Term {parent} referenced by {term.id} has no stanza")
                    self._terms[parent] = Term(parent, "", ())

        self._closure_cache: Dict[str, FrozenSet[str]] = {}
        self._lock = threading.Lock()

    def __contains__(self, term_id) -> bool:
        return term_id in self._terms

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._terms))

    def term(self, term_id: str) -> Term:
        try:
            return self._terms[term_id]
        except KeyError:
            raise UnresolvableTermError(term_id) from None

    def label(self, term_id: str) -> str:
        """Human-readable name of *term_id*"""
        return self.term(term_id).name

    def parents(self, term_id: str) -> tuple:
        return self.term(term_id).parents

    def ancestor_closure(self, term_id: str) -> FrozenSet[str]:
        """All terms reachable upward through ``is_a`` edges, *term_id* included.

        Raises:
            UnresolvableTermError: if *term_id* is not in the hierarchy
        """
        with self._lock:
            cached = self._closure_cache.get(term_id)
        if cached is not None:
            return cached

        if term_id not in self._terms:
            raise UnresolvableTermError(term_id)

        # Breadth-first walk; the seen set stops revisits through multiple parents
        seen = {term_id}
        queue = deque([term_id])
        while queue:
            current = queue.popleft()
            for parent in self._terms[current].parents:
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)

        closure = frozenset(seen)
        with self._lock:
            self._closure_cache[term_id] = closure
        return closure


def _split_tag(line: str):
    tag, _, value = line.partition(":")
    value = value.strip()
    # Drop trailing "! comment"
    if " !" in value:
        value = value.split(" !", 1)[0].strip()
    return tag.strip(), value


def parse_obo(path, name: Optional[str] = None) -> TermHierarchy:
    """Parse an OBO file into a TermHierarchy.

    Args:
        path: Path to ``hp.obo`` (or any OBO ontology)
        name: Optional display name, defaults to the file name

    Raises:
        DataSourceError: if the file cannot be read or holds no terms
    """
    path = Path(path)
    logger.info(f"Reading ontology from OBO file {path} ...")

    terms = []
    current = None
    in_term = False

    try:
        with open(path, 'r', encoding='utf-8') as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith("!"):
                    continue

                if line.startswith("[") and line.endswith("]"):
                    if in_term and current and current.get("id"):
                        terms.append(Term.from_stanza(current))
                    in_term = line == "[Term]"
                    current = {} if in_term else None
                    continue

                if not in_term:
                    continue

                tag, value = _split_tag(line)
                if tag == "id":
                    current["id"] = value
                elif tag == "name":
                    current["name"] = value
                elif tag == "is_a" and value:
                    # "is_a: HP:0000118 {source=...}" carries trailing qualifiers
                    current.setdefault("is_a", []).append(value.split()[0])

            if in_term and current and current.get("id"):
                terms.append(Term.from_stanza(current))
    except (OSError, UnicodeDecodeError) as e:
        raise DataSourceError(str(path), str(e)) from e

    if not terms:
        raise DataSourceError(str(path), "no [Term] stanzas found")

    hierarchy = TermHierarchy(terms, name=name or path.name)
    logger.info(f"=> done reading OBO file: {len(hierarchy)} terms")
    return hierarchy
