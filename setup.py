"""
setup.py configuration script for bq_replication project.

Replicates date-sharded BigQuery tables through a Cloud Storage staging
area into any target sling can load.
"""

import datetime
import re
from pathlib import Path

from setuptools import find_packages, setup

# Read the version without importing the package and its dependencies
init_py = Path("src/bq_replication/__init__.py").read_text(encoding="utf-8")
version = re.search(r'^__version__ = "([^"]+)"', init_py, re.M).group(1)

local_version = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d.%H%M%S")

setup(
    name="bq_replication",
    version=version + "+" + local_version,
    description="BigQuery export, sling load and staging cleanup replication pipeline",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="./src"),
    package_dir={"": "src"},
    entry_points={
        "console_scripts": [
            "bq-replicator=bq_replication.main:main",
        ],
    },
    install_requires=[
        "google-api-core>=2.0.0",
        "google-cloud-bigquery>=3.0.0",
        "google-cloud-storage>=2.0.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "sling>=1.2.0",
        "structlog>=22.0.0",
        "tzdata>=2023.3",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
            "coverage>=7.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "coverage>=7.0.0",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
