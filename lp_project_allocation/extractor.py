#!/usr/bin/env python

"""
lp_project_allocation/extractor.py

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

Extracts a student-by-project weight matrix from raw rows.

"""

import collections.abc
import logging
from typing import Any, List, Optional, Sequence

from cardinal_pythonlib.reprfunc import auto_repr

from lp_project_allocation.cell import EMPTY, make_cell, to_name, to_weight
from lp_project_allocation.errors import (
    DimensionMismatch,
    InvalidRow,
    NoValidRows,
)

log = logging.getLogger(__name__)


# =============================================================================
# PreferenceMatrix
# =============================================================================


class PreferenceMatrix(object):
    """
    Parallel lists of student names and their weight rows.
    """

    def __init__(self, names: List[str], weights: List[List[float]]) -> None:
        assert len(names) == len(weights), "Names/weights length mismatch"
        self.names = names
        self.weights = weights

    def __repr__(self) -> str:
        return auto_repr(self)

    def n_students(self) -> int:
        """
        Number of students.
        """
        return len(self.names)

    def n_projects(self) -> int:
        """
        Number of projects (weight columns).
        """
        return len(self.weights[0]) if self.weights else 0


# =============================================================================
# Extraction
# =============================================================================


def extract_preference_matrix(
    rows: Sequence[Optional[Sequence[Any]]], n_columns: int
) -> PreferenceMatrix:
    """
    Reads student names (column 0) and weights (columns 1 to
    ``n_columns - 1``) from data rows. The header row should not be included.

    Rows that are absent or empty, or whose name is blank after trimming, are
    skipped. Weight cells that are missing or non-numeric count as 0. Duplicate
    names are kept as separate students.

    Args:
        rows:
            Data rows; each a sequence of primitive values or cells.
        n_columns:
            Number of columns in the header (i.e. 1 + number of projects).

    Raises:
        :exc:`NoValidRows` if no students remain;
        :exc:`InvalidRow` if a row is not a sequence;
        :exc:`DimensionMismatch` if there is not a name column and at least
        one project column.
    """
    if n_columns < 2:
        raise DimensionMismatch(
            f"Need a name column and at least one project column; header has "
            f"{n_columns} column(s)"
        )
    names = []  # type: List[str]
    weights = []  # type: List[List[float]]
    for row_number, row in enumerate(rows, start=1):
        if row is None:
            continue
        if (isinstance(row, (str, bytes))
                or not isinstance(row, collections.abc.Sequence)):
            raise InvalidRow(
                f"Data row {row_number} is not a sequence of cells: {row!r}"
            )
        if not row:
            continue
        name = to_name(make_cell(row[0])).strip()
        if not name:
            log.debug(f"Skipping data row {row_number}: no student name")
            continue
        cells = [
            make_cell(row[col]) if col < len(row) else EMPTY
            for col in range(1, n_columns)
        ]
        names.append(name)
        weights.append([to_weight(c) for c in cells])
    if not names:
        raise NoValidRows("No rows with a student name were found")
    log.info(
        f"Extracted {len(names)} students x {n_columns - 1} projects"
    )
    return PreferenceMatrix(names=names, weights=weights)
