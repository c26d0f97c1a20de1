"""Processing module for PhenoCompare"""
from .aggregator import (
    CountTable,
    TermCountAggregator,
    aggregate,
    count_patients,
    patient_closure,
    validate_groups,
)

__all__ = [
    'CountTable',
    'TermCountAggregator',
    'aggregate',
    'count_patients',
    'patient_closure',
    'validate_groups',
]
