"""Configuration management for PhenoCompare"""
import json
import os
import sys
from pathlib import Path
from typing import Optional, Any, Dict, List
from dataclasses import dataclass, field

import psutil

from .exceptions import ConfigurationError


def default_group_names(count: int) -> List[str]:
    """groupA, groupB, ... for *count* groups"""
    return [f"group{chr(ord('A') + i)}" for i in range(count)]


@dataclass
class Config:
    """Settings for a single comparison run"""
    # Ontology
    hpo_path: str = ""

    # Groups
    num_groups: int = 2
    group_names: List[str] = field(default_factory=lambda: default_group_names(2))
    grouping: str = "directories"
    gene_groups_path: str = ""

    # Performance options
    max_workers: int = 1

    # Output options
    output_format: str = "txt"
    progress_bar: bool = True

    @classmethod
    def from_phenocompare_config(cls, pc_config) -> 'Config':
        """Create Config from PhenoCompareConfig instance"""
        config = cls()

        config.hpo_path = pc_config.get("hpo_path") or ""
        config.num_groups = pc_config.get("num_groups", 2)
        config.group_names = pc_config.get("group_names") or default_group_names(config.num_groups)
        config.grouping = pc_config.get("grouping", "directories")
        config.gene_groups_path = pc_config.get("gene_groups_path") or ""
        config.max_workers = pc_config.get("max_workers", 1)
        config.output_format = pc_config.get("output_format", "txt")
        config.progress_bar = pc_config.get("progress_bar", True)

        config.validate()
        return config

    def validate(self):
        """Raise ConfigurationError on inconsistent settings"""
        if self.num_groups < 1:
            raise ConfigurationError(f"num_groups must be positive, got {self.num_groups}")
        if len(self.group_names) != self.num_groups:
            raise ConfigurationError(
                f"{len(self.group_names)} group names given for {self.num_groups} groups"
            )
        if self.grouping not in ("directories", "genes"):
            raise ConfigurationError(f"Unknown grouping '{self.grouping}'")
        if self.grouping == "genes" and self.num_groups != 2:
            raise ConfigurationError("Gene grouping produces exactly two groups")
        if self.output_format not in ("txt", "tsv", "csv", "xlsx"):
            raise ConfigurationError(f"Unknown output format '{self.output_format}'")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be positive, got {self.max_workers}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "hpo_path": self.hpo_path,
            "num_groups": self.num_groups,
            "group_names": list(self.group_names),
            "grouping": self.grouping,
            "gene_groups_path": self.gene_groups_path,
            "max_workers": self.max_workers,
            "output_format": self.output_format,
            "progress_bar": self.progress_bar,
        }


class PhenoCompareConfig:
    """Centralized configuration management for PhenoCompare"""

    CONFIG_FILE = Path.home() / ".phenocompare_config.json"
    CONFIG_ENV_VAR = "PHENOCOMPARE_CONFIG"

    DEFAULTS = {
        "hpo_path": None,
        "num_groups": 2,
        "group_names": None,  # Derived from num_groups
        "max_workers": None,  # Auto-detect based on CPU
        "output_format": "txt",
        "grouping": "directories",
        "gene_groups_path": None,
        "progress_bar": True,
    }

    NUMERIC_FIELDS = {"num_groups", "max_workers"}
    BOOLEAN_FIELDS = {"progress_bar"}
    LIST_FIELDS = {"group_names"}

    def __init__(self, config_file: Optional[str] = None):
        if config_file is None:
            config_file = os.getenv(self.CONFIG_ENV_VAR)
        self.config_file = Path(config_file) if config_file else self.CONFIG_FILE
        self._file_keys = set()
        self._config = self._load_config()
        self._apply_auto_defaults()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, merge with defaults"""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    user_config = json.load(f)
                if not isinstance(user_config, dict):
                    raise ValueError("expected a JSON object")
                self._file_keys = set(user_config)
                return {**self.DEFAULTS, **user_config}
            except (OSError, ValueError) as e:
                print(f"Warning: Config load error: {e}, using defaults", file=sys.stderr)
        return self.DEFAULTS.copy()

    def _apply_auto_defaults(self):
        """Apply automatic defaults based on system capabilities"""
        if self._config.get('max_workers') is None and not os.getenv('MAX_WORKERS'):
            cores = psutil.cpu_count(logical=False) or 1
            self._config['max_workers'] = max(1, cores)

    def save(self):
        """Save the user-set values to the config file"""
        self.config_file.parent.mkdir(exist_ok=True, parents=True)
        user_config = {key: self._config[key] for key in sorted(self._file_keys) if key in self._config}
        with open(self.config_file, 'w') as f:
            json.dump(user_config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with fallback to environment variable"""
        value = self._config.get(key)
        if value is None:
            env_value = os.getenv(key.upper())
            if env_value is not None:
                value = env_value

        if value is None:
            return default

        if key in self.NUMERIC_FIELDS and isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return default
        if key in self.BOOLEAN_FIELDS and isinstance(value, str):
            return value.lower() in ('yes', 'true', '1')
        if key in self.LIST_FIELDS and isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]

        return value

    def set(self, key: str, value: Any):
        """Set configuration value and save"""
        self._config[key] = value
        self._file_keys.add(key)
        self.save()
        print(f"Configuration updated: '{key}' = {value}", file=sys.stderr)

    def remove(self, key: str):
        """Remove configuration key"""
        if key in self._config:
            del self._config[key]
            self._file_keys.discard(key)
            self.save()
            print(f"Config value '{key}' removed", file=sys.stderr)

    def reset(self, keys: Optional[list] = None):
        """Reset configuration to defaults"""
        if keys:
            for key in keys:
                self._file_keys.discard(key)
                if key in self._config:
                    if key in self.DEFAULTS:
                        self._config[key] = self.DEFAULTS[key]
                    else:
                        del self._config[key]
        else:
            self._config = self.DEFAULTS.copy()
            self._file_keys = set()
        self._apply_auto_defaults()
        self.save()

    def snapshot(self) -> Config:
        """Validated Config for one run"""
        return Config.from_phenocompare_config(self)

    def from_file(self, key: str) -> bool:
        """True if *key* is set in the config file"""
        return key in self._file_keys

    def __getattr__(self, name: str) -> Any:
        """Allow attribute-style access to config values"""
        if name.startswith('_'):
            raise AttributeError(name)
        return self.get(name)
