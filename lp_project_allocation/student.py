#!/usr/bin/env python

"""
lp_project_allocation/student.py

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

Student class.

"""

from typing import List, Sequence, TYPE_CHECKING

from cardinal_pythonlib.reprfunc import auto_repr

if TYPE_CHECKING:
    from lp_project_allocation.extractor import PreferenceMatrix


# =============================================================================
# Student
# =============================================================================


class Student(object):
    """
    Represents a single student, with their weight for each project.
    """

    def __init__(self, name: str, number: int, weights: Sequence[float]) -> None:
        """
        Args:
            name:
                Student's name.
            number:
                Zero-based position of the student among the usable input rows.
            weights:
                One weight per project, in project order.
        """
        assert name, "Missing student name"
        assert number >= 0, "Bad student number"
        self.name = name
        self.number = number
        self.weights = tuple(weights)

    def __str__(self) -> str:
        """
        String representation.
        """
        return f"{self.name} (St#{self.number})"

    def __repr__(self) -> str:
        return auto_repr(self)

    def description(self) -> str:
        """
        Verbose description.
        """
        return f"{self}: {list(self.weights)}"

    def n_weights(self) -> int:
        return len(self.weights)

    def weight(self, project_index: int) -> float:
        """
        This student's weight for a project.
        """
        return self.weights[project_index]


def students_from_matrix(matrix: "PreferenceMatrix") -> List[Student]:
    """
    Makes :class:`Student` objects from an extracted preference matrix.
    """
    return [
        Student(name=name, number=i, weights=weights)
        for i, (name, weights) in enumerate(zip(matrix.names, matrix.weights))
    ]
