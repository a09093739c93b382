#!/usr/bin/env python3
"""
snapcache Setup Script
======================
Allows installation of the snapcache package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="snapcache",
    version="1.0.0",
    description="Thread-safe in-process key-value cache with expiration and snapshots",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
)
