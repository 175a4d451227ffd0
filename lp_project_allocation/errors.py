#!/usr/bin/env python

"""
lp_project_allocation/errors.py

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

Exceptions raised while compiling, solving, or decoding an allocation problem.
Infeasibility and unboundedness are not exceptions; they are solution
statuses.

"""

from lp_project_allocation.constants import FailureKind


class AllocationError(Exception):
    """
    Base class for anything that stops us producing a usable allocation.
    """

    failure_kind = None  # type: FailureKind


class NoValidRows(AllocationError):
    """
    The input data contained no rows with a usable student name.
    """

    failure_kind = FailureKind.NO_VALID_ROWS


class InvalidRow(AllocationError):
    """
    A data row is neither absent nor a sequence of cells.
    """

    failure_kind = FailureKind.INVALID_ROW


class DimensionMismatch(AllocationError):
    """
    The number of capacity limits, or the length of a weight row, does not
    match the number of projects.
    """

    failure_kind = FailureKind.DIMENSION_MISMATCH


class InvalidCapacity(AllocationError):
    """
    A capacity limit is nonsensical (negative, or min > max).
    """

    failure_kind = FailureKind.INVALID_CAPACITY


class SolverUnavailable(AllocationError):
    """
    The external solver could not be invoked.
    """

    failure_kind = FailureKind.SOLVER_UNAVAILABLE


class InconsistentSolution(AllocationError):
    """
    The solver reported success, but the decoded variables do not give each
    student exactly one project.
    """

    failure_kind = FailureKind.INCONSISTENT_SOLUTION
