#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

entry_points = {
    'console_scripts': [
        'phenocompare = phenocompare.cli.main:main',
    ]
}

def setup_package():
    setup(
        name="phenocompare",
        version="0.1.0",
        description="Compare two patient cohorts over the Human Phenotype Ontology hierarchy",
        long_description=long_description,
        long_description_content_type="text/markdown",
        packages=find_packages(where="src"),
        package_dir={"": "src"},
        classifiers=[
            "Development Status :: 3 - Alpha",
            "Intended Audience :: Healthcare Industry",
            "Intended Audience :: Science/Research",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.8",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Topic :: Scientific/Engineering :: Bio-Informatics",
            "Topic :: Scientific/Engineering :: Medical Science Apps.",
        ],
        python_requires=">=3.8",
        install_requires=[
            "click>=8.0.0",
            "rich>=12.0.0",
            "psutil>=5.9.0",
            "tqdm>=4.60.0",
            "pandas>=1.3.0",  # For table export
            "matplotlib>=3.4.0",  # For visualizations
            "seaborn>=0.11.0",  # For enhanced visualizations
            "openpyxl>=3.0.0",  # For Excel export
        ],
        extras_require={
            "test": ["pytest>=7.0"],
        },
        entry_points=entry_points,
        include_package_data=True,
        zip_safe=False,
    )

if __name__ == "__main__":
    setup_package()
