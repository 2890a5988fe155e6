#!/usr/bin/python3
# Setup file for gitdag
# Copyright (C) 2026 The gitdag authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

import os
import re

from setuptools import setup

with open(os.path.join(os.path.dirname(__file__), "gitdag", "__init__.py")) as f:
    version_match = re.search(r"^__version__ = \((\d+), (\d+), (\d+)\)", f.read(), re.M)
    assert version_match is not None
    version = ".".join(version_match.groups())

tests_require = ["pytest"]


setup(
    name="gitdag",
    version=version,
    description="Push git object graphs into content-addressed DAG stores",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["gitdag"],
    package_data={"": ["py.typed"]},
    install_requires=[
        "dulwich>=0.22",
        "urllib3>=2.0",
    ],
    extras_require={"test": tests_require},
    entry_points={
        "console_scripts": [
            "gitdag=gitdag.cli:_main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
