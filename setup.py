#!/usr/bin/env/python

"""
setup.py

===============================================================================

    Copyright (C) 2019 Rudolf Cardinal (rudolf@pobox.com).

    This file is part of lp_project_allocation.

    This is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This software is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
    GNU General Public License for more details.

    You should have received a copy of the GNU General Public License
    along with this software. If not, see <https://www.gnu.org/licenses/>.

===============================================================================

Python package configuration.

"""

from setuptools import setup, find_packages

from lp_project_allocation.version import VERSION

setup(
    name="lp_project_allocation",
    version=VERSION,
    description=(
        "Allocate students to projects by solving a binary integer program"
    ),
    author="Rudolf Cardinal",
    author_email="rudolf@pobox.com",
    license="GNU General Public License v3 or later (GPLv3+)",
    # See https://pypi.org/classifiers/
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",  # noqa
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Education",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    # Python code:
    packages=find_packages(),
    python_requires=">=3.8",
    # Requirements:
    install_requires=[
        "cardinal_pythonlib>=1.1.23",
        "mip>=1.15.0",  # MIP solver interface, bundling CBC
        "openpyxl>=3.0.10",
        "lxml>=4.9.1",  # Will speed up openpyxl export
        # -------------------------------------------------------------------------
        # For development:
        # -------------------------------------------------------------------------
        "black>=24.3.0",  # auto code formatter
        "flake8>=3.8.3",  # code checks
        "pytest>=7.1.1",  # automatic testing
    ],
    # Launch scripts:
    entry_points={
        "console_scripts": [
            # Format is 'script=module:function".
            "lp_project_allocation=lp_project_allocation.main:main",
            "lp_project_allocation_run_tests=lp_project_allocation.run_tests:main",  # noqa
        ],
    },
)
