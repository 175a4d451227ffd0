#!/usr/bin/env python

"""
lp_project_allocation/tests/test_cell.py

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

Tests cell coercion.

"""

import unittest

from lp_project_allocation.cell import (
    EMPTY,
    EmptyCell,
    make_cell,
    NumberCell,
    TextCell,
    to_name,
    to_weight,
)


class MakeCellTests(unittest.TestCase):
    def test_make_cell(self) -> None:
        self.assertEqual(make_cell(None), EMPTY)
        self.assertIsInstance(make_cell(None), EmptyCell)
        self.assertEqual(make_cell(3), NumberCell(3))
        self.assertEqual(make_cell(2.5), NumberCell(2.5))
        self.assertEqual(make_cell("Ana"), TextCell("Ana"))
        self.assertEqual(make_cell(True), TextCell("True"))
        self.assertEqual(make_cell(TextCell("x")), TextCell("x"))

    def test_cells_of_different_types_differ(self) -> None:
        self.assertNotEqual(NumberCell(1), TextCell("1"))
        self.assertNotEqual(EMPTY, TextCell(""))


class CoercionTests(unittest.TestCase):
    def test_to_weight(self) -> None:
        self.assertEqual(to_weight(NumberCell(2.5)), 2.5)
        self.assertEqual(to_weight(NumberCell(-3)), -3)
        self.assertEqual(to_weight(TextCell(" 4 ")), 4.0)
        self.assertEqual(to_weight(TextCell("1e1")), 10.0)
        self.assertEqual(to_weight(EMPTY), 0)

    def test_to_weight_never_fails(self) -> None:
        for cell in (
            TextCell("abc"),
            TextCell(""),
            TextCell("   "),
            TextCell("nan"),
            TextCell("inf"),
            NumberCell(float("nan")),
            NumberCell(float("-inf")),
            make_cell(True),
        ):
            self.assertEqual(to_weight(cell), 0, f"cell {cell!r}")

    def test_to_name(self) -> None:
        self.assertEqual(to_name(TextCell(" Ana ")), " Ana ")
        self.assertEqual(to_name(NumberCell(12)), "12")
        self.assertEqual(to_name(NumberCell(12.0)), "12")
        self.assertEqual(to_name(NumberCell(1.5)), "1.5")
        self.assertEqual(to_name(EMPTY), "")
