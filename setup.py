#!/usr/bin/python3
# Setup file for reftrack
# Copyright (C) 2025 The reftrack developers
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

setup(
    name="reftrack",
    version="0.1.0",
    description="Reference tracking for terminal Git repository browsers",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["reftrack"],
    package_data={"": ["py.typed"]},
    install_requires=[],
    extras_require={"dev": ["pytest"]},
    entry_points={"console_scripts": ["reftrack=reftrack.cli:_main"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "License :: OSI Approved :: GNU General Public License v2 or later (GPLv2+)",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
