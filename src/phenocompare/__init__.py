#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
import sys

# Configure root logger
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    stream=sys.stderr
)

# Import main components
from .ontology import Term, TermHierarchy, parse_obo
from .patients import Patient, PatientGroup, CohortLoader, read_patient_file
from .gene_groups import GeneGroups, GeneGroupSelector
from .information_content import (
    load_associations,
    compute_information_content,
    write_information_content,
)
from .report import ResultFormatter, write_results, plot_counts

from .core import (
    PhenoCompareConfig,
    Config,
    PhenoCompareError,
    UnresolvableTermError,
    UnknownTermError,
    EmptyGroupError,
    DataSourceError,
    OutputWriteError,
    ConfigurationError,
)

from .processing import (
    CountTable,
    TermCountAggregator,
    aggregate,
    validate_groups,
)

__version__ = "0.1.0"

__all__ = [
    # Ontology and patients
    'Term',
    'TermHierarchy',
    'parse_obo',
    'Patient',
    'PatientGroup',
    'CohortLoader',
    'read_patient_file',
    'GeneGroups',
    'GeneGroupSelector',

    # Counting
    'CountTable',
    'TermCountAggregator',
    'aggregate',
    'validate_groups',

    # Output
    'ResultFormatter',
    'write_results',
    'plot_counts',

    # Information content
    'load_associations',
    'compute_information_content',
    'write_information_content',

    # Core components
    'PhenoCompareConfig',
    'Config',
    'PhenoCompareError',
    'UnresolvableTermError',
    'UnknownTermError',
    'EmptyGroupError',
    'DataSourceError',
    'OutputWriteError',
    'ConfigurationError',
]
