"""Command line interface for PhenoCompare"""
from .main import cli, main

__all__ = ['cli', 'main']
