"""Core modules for PhenoCompare"""
from .config import PhenoCompareConfig, Config, default_group_names
from .exceptions import (
    PhenoCompareError,
    UnresolvableTermError,
    UnknownTermError,
    EmptyGroupError,
    DataSourceError,
    OutputWriteError,
    ConfigurationError,
)

__all__ = [
    'PhenoCompareConfig',
    'Config',
    'default_group_names',
    'PhenoCompareError',
    'UnresolvableTermError',
    'UnknownTermError',
    'EmptyGroupError',
    'DataSourceError',
    'OutputWriteError',
    'ConfigurationError',
]
