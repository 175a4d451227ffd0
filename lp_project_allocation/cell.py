#!/usr/bin/env python

"""
lp_project_allocation/cell.py

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

Cells of raw tabular input.

A cell is one of :class:`EmptyCell`, :class:`NumberCell` or :class:`TextCell`.
The coercions :func:`to_weight` and :func:`to_name` are total: they never
raise, whatever the cell holds.

"""

import math
from typing import Any, Union

from cardinal_pythonlib.reprfunc import auto_repr


# =============================================================================
# Cell types
# =============================================================================


class EmptyCell(object):
    """
    A blank cell (``None``, or absent because the row was short).
    """

    def __repr__(self) -> str:
        return auto_repr(self)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, EmptyCell)

    def __hash__(self) -> int:
        return hash(EmptyCell)


class NumberCell(object):
    """
    A cell holding a number.
    """

    def __init__(self, value: float) -> None:
        self.value = value

    def __repr__(self) -> str:
        return auto_repr(self)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, NumberCell) and other.value == self.value

    def __hash__(self) -> int:
        return hash((NumberCell, self.value))


class TextCell(object):
    """
    A cell holding text.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return auto_repr(self)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, TextCell) and other.text == self.text

    def __hash__(self) -> int:
        return hash((TextCell, self.text))


Cell = Union[EmptyCell, NumberCell, TextCell]

EMPTY = EmptyCell()


# =============================================================================
# Construction and coercion
# =============================================================================


def make_cell(value: Any) -> Cell:
    """
    Wraps a primitive value from a spreadsheet/CSV/JSON row as a cell.
    Booleans are treated as text (so they coerce to a weight of 0).
    """
    if isinstance(value, (EmptyCell, NumberCell, TextCell)):
        return value
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return TextCell(str(value))
    if isinstance(value, (int, float)):
        return NumberCell(value)
    return TextCell(str(value))


def to_weight(cell: Cell) -> float:
    """
    Numeric weight of a cell. Anything that isn't a finite number (including
    text that doesn't parse as one) counts as 0.
    """
    if isinstance(cell, NumberCell):
        value = cell.value
    elif isinstance(cell, TextCell):
        try:
            value = float(cell.text.strip())
        except ValueError:
            return 0
    else:
        return 0
    if not math.isfinite(value):
        return 0
    return value


def to_name(cell: Cell) -> str:
    """
    Text of a cell, for use as a name (untrimmed). Empty cells give ``""``;
    integral numbers are written without a decimal point.
    """
    if isinstance(cell, TextCell):
        return cell.text
    if isinstance(cell, NumberCell):
        value = cell.value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return ""
