#!/usr/bin/env python

"""
lp_project_allocation/tests/test_lp_format.py

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

Tests LP-format encoding.

"""

import os
import tempfile
import unittest

from lp_project_allocation.lp_format import (
    encode_lp,
    format_number,
    signed_terms,
    write_lp,
)
from lp_project_allocation.problem import AssignmentProblem
from lp_project_allocation.student import Student


ANA_BO_LP = """Minimize
 obj: 5 x_0_0 + 3 x_1_1
Subject To
 student_0: x_0_0 + x_0_1 = 1
 student_1: x_1_0 + x_1_1 = 1
 project_0_max: x_0_0 + x_1_0 <= 1
 project_1_max: x_0_1 + x_1_1 <= 1
Bounds
 0 <= x_0_0 <= 1
 0 <= x_0_1 <= 1
 0 <= x_1_0 <= 1
 0 <= x_1_1 <= 1
Binary
 x_0_0
 x_0_1
 x_1_0
 x_1_1
End
"""


def ana_bo(**kwargs) -> AssignmentProblem:
    students = [
        Student("Ana", 0, [5, 0]),
        Student("Bo", 1, [0, 3]),
    ]
    return AssignmentProblem.build(
        students, 2, [{"min": 0, "max": 1}, {"min": 0, "max": 1}], **kwargs
    )


class FormattingTests(unittest.TestCase):
    def test_format_number(self) -> None:
        self.assertEqual(format_number(5), "5")
        self.assertEqual(format_number(5.0), "5")
        self.assertEqual(format_number(-3), "-3")
        self.assertEqual(format_number(2.5), "2.5")
        self.assertEqual(format_number(0.1), "0.1")

    def test_signed_terms(self) -> None:
        self.assertEqual(
            signed_terms([(5, "a"), (-2.5, "b"), (1, "c")]),
            ["5 a", "- 2.5 b", "+ c"],
        )
        self.assertEqual(signed_terms([(-1, "a"), (2, "b")]),
                         ["- a", "+ 2 b"])
        self.assertEqual(signed_terms([]), [])


class EncoderTests(unittest.TestCase):
    def test_ana_bo(self) -> None:
        self.assertEqual(encode_lp(ana_bo()), ANA_BO_LP)

    def test_deterministic(self) -> None:
        self.assertEqual(encode_lp(ana_bo()), encode_lp(ana_bo()))
        problem = ana_bo()
        self.assertEqual(encode_lp(problem), encode_lp(problem))

    def test_negated_objective(self) -> None:
        text = encode_lp(ana_bo(negate_weights=True))
        self.assertIn(" obj: - 5 x_0_0 - 3 x_1_1\n", text)

    def test_all_zero_objective(self) -> None:
        students = [Student("A", 0, [0, 0]), Student("B", 1, [0, 0])]
        problem = AssignmentProblem.build(students, 2, [(0, None)] * 2)
        text = encode_lp(problem)
        self.assertTrue(text.startswith("Minimize\n obj: 0\nSubject To\n"))
        # No capacity rows for unconstrained projects
        self.assertNotIn("project_", text)

    def test_min_constraint(self) -> None:
        students = [Student("A", 0, [1, 2]), Student("B", 1, [1, 2])]
        problem = AssignmentProblem.build(students, 2, [(0, None), (1.5, 2)])
        text = encode_lp(problem)
        self.assertIn(" project_1_min: x_0_1 + x_1_1 >= 1.5\n", text)
        self.assertIn(" project_1_max: x_0_1 + x_1_1 <= 2\n", text)

    def test_section_order(self) -> None:
        lines = encode_lp(ana_bo()).splitlines()
        sections = [
            line for line in lines
            if line and not line.startswith(" ")
        ]
        self.assertEqual(
            sections, ["Minimize", "Subject To", "Bounds", "Binary", "End"]
        )

    def test_long_rows_wrap(self) -> None:
        students = [Student("A", 0, [1] * 10)]
        problem = AssignmentProblem.build(students, 10, [(0, None)] * 10)
        lines = encode_lp(problem).splitlines()
        self.assertEqual(
            lines[1],
            " obj: x_0_0 + x_0_1 + x_0_2 + x_0_3 + x_0_4 + x_0_5 + x_0_6 "
            "+ x_0_7",
        )
        self.assertEqual(lines[2], "   + x_0_8 + x_0_9")
        self.assertEqual(lines[3], "Subject To")
        self.assertEqual(lines[5], "   + x_0_8 + x_0_9 = 1")

    def test_write_lp(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, "model.lp")
            write_lp(ana_bo(), filename)
            with open(filename) as f:
                self.assertEqual(f.read(), ANA_BO_LP)
