#!/usr/bin/env python

"""
lp_project_allocation/helperfunc.py

===============================================================================

    Copyright (C) 2019-2021 Rudolf Cardinal (rudolf@pobox.com).

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

Helper functions.

"""

import logging
from typing import Any, List, Sequence, TYPE_CHECKING

from openpyxl.cell import Cell
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

if TYPE_CHECKING:
    from lp_project_allocation.solver import RawResult

log = logging.getLogger(__name__)


# =============================================================================
# Helper functions
# =============================================================================

def mismatch(actual: List[Any], expected: List[Any]) -> str:
    """
    Provides text to locate a mismatch between two lists.
    """
    n_actual = len(actual)
    n_intended = len(expected)
    if n_actual != n_intended:
        return (
            f"Wrong length: actual has length {n_actual}, "
            f"intended has length {n_intended}"
        )
    for i in range(n_actual):
        if actual[i] != expected[i]:
            return f"Found {actual[i]!r} where {expected[i]!r} was expected"
    return ""


def is_empty_row(row: Sequence[Cell]) -> bool:
    """
    Is this an empty spreadsheet row?
    """
    return all(cell.value is None for cell in row)


def read_until_empty_row(ws: Worksheet) -> List[List[Any]]:
    """
    Reads a spreadsheet until the first empty line.
    (Helpful because Excel spreadsheets are sometimes seen as having 1048576
    rows when they don't really).
    """
    rows = []  # type: List[List[Any]]
    for row in ws.iter_rows():
        if is_empty_row(row):
            break
        rows.append([cell.value for cell in row])
    return rows


def report_on_model(document: str,
                    result: "RawResult" = None,
                    loglevel: int = logging.WARNING) -> None:
    """
    Shows detail of an LP model, and optionally the solver's result, to the
    log.
    """
    lines = ["Model:", "", document]
    if result is not None:
        lines += ["- Result:", "", str(result)]
    log.log(loglevel, "\n".join(lines))


def autosize_openpyxl_column(ws: Worksheet, col_number: int) -> None:
    """
    Automatically resize a single column to its contents. See below.
    """
    col_width = 0
    for row in ws.rows:
        cell = row[col_number]
        if cell.value:
            text = str(cell.value)
            text_width = len(text)
            col_width = max(col_width, text_width)
    ws.column_dimensions[get_column_letter(col_number + 1)].width = col_width


def autosize_openpyxl_worksheet_columns(ws: Worksheet) -> None:
    """
    Automatically resize column sizes to their contents. See

    - https://stackoverflow.com/questions/13197574/openpyxl-adjust-column-width-size
    """  # noqa

    # OK but overestimates size.
    dims = {}
    for row in ws.rows:
        for cell in row:
            if cell.value:
                text = str(cell.value)
                text_width = len(text)  # the poor approximation
                dims[cell.column_letter] = max(
                    dims.get(cell.column_letter, 0), text_width)
    for col, value in dims.items():
        ws.column_dimensions[col].width = value


def bold_cell(cell: Cell) -> None:
    """
    Makes a spreadsheet cell bold.
    """
    cell.font = Font(bold=True)


def bold_first_row(ws: Worksheet) -> None:
    """
    Makes the first row of a worksheet bold (for headings).
    """
    for cell in ws[1]:
        bold_cell(cell)
