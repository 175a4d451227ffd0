#!/usr/bin/env python

"""
lp_project_allocation/constants.py

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

Constants and enums.

"""

from enum import Enum

from cardinal_pythonlib.enumlike import CaseInsensitiveEnumMeta


# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_SECONDS = 1e100  # the default in mip
DEFAULT_SOLVER_NAME = "cbc"
DEFAULT_MIN_CAPACITY = 0
DEFAULT_MAX_CAPACITY = None  # unbounded

ASSIGNED_THRESHOLD = 0.5  # primal value above which a binary variable is "1"
LARGE_COEFFICIENT = 1e20  # CBC treats coefficients this large as infinite

EXT_LP = ".lp"
EXT_XLSX = ".xlsx"
EXIT_FAILURE = 1
EXIT_SUCCESS = 0

INPUT_TYPES_SUPPORTED = [EXT_XLSX]
OUTPUT_TYPES_SUPPORTED = INPUT_TYPES_SUPPORTED

SOLVER_NAMES = ["cbc", "gurobi"]


class LpNames:
    """
    Names used within the LP interchange document.
    """

    OBJECTIVE = "obj"
    VARIABLE_PREFIX = "x"
    STUDENT_CONSTRAINT_PREFIX = "student"
    PROJECT_CONSTRAINT_PREFIX = "project"
    MIN_SUFFIX = "min"
    MAX_SUFFIX = "max"
    TERMS_PER_LINE = 8  # continuation lines for long rows


class LpSections:
    """
    Section headings within the LP interchange document, in order.
    """

    MINIMIZE = "Minimize"
    SUBJECT_TO = "Subject To"
    BOUNDS = "Bounds"
    BINARY = "Binary"
    END = "End"


class SolverStatusText:
    """
    Status strings reported by solver gateways.
    """

    OPTIMAL = "Optimal"
    FEASIBLE = "Feasible"
    INFEASIBLE = "Infeasible"
    INT_INFEASIBLE = "Integer infeasible"
    UNBOUNDED = "Unbounded"
    NO_SOLUTION_FOUND = "No solution found"
    LOADED = "Loaded"
    CUTOFF = "Cutoff"
    OTHER = "Other"
    ERROR = "Error"


class SheetNames:
    """
    Sheet names within the input/output spreadsheet file.
    """

    CAPACITIES = "Capacities"  # input, output
    INFORMATION = "Information"  # output
    PREFERENCES = "Preferences"  # input, output
    PROJECT_ALLOCATIONS = "Project_allocations"  # output
    STUDENT_ALLOCATIONS = "Student_allocations"  # output


class SheetHeadings:
    """
    Column headings within the input/output spreadsheets.
    """

    # Input:
    MAX_NUMBER_OF_STUDENTS = "Max_students"
    MIN_NUMBER_OF_STUDENTS = "Min_students"
    PROJECT = "Project"

    # Additional for output:
    N_STUDENTS_ALLOCATED = "N_students_allocated"
    STUDENT = "Student"
    STUDENTS = "Student(s)"
    WEIGHT = "Weight"
    WEIGHTS = "Weight(s)"


class CsvHeadings:
    """
    Equivalently for simple CSV output.
    """

    PROJECT_NAME = "Project_name"
    PROJECT_NUMBER = "Project_number"
    STUDENT_NAME = "Student_name"
    STUDENT_NUMBER = "Student_number"
    WEIGHT = "Weight"


# =============================================================================
# Enum classes
# =============================================================================


class SolutionStatus(Enum, metaclass=CaseInsensitiveEnumMeta):
    """
    Classified outcome of a solve.
    """

    OPTIMAL = "Optimal"
    FEASIBLE = "Feasible"
    INFEASIBLE = "Infeasible"
    UNBOUNDED = "Unbounded"
    ERROR = "Error"

    @property
    def accepted(self) -> bool:
        """
        Does this status carry a usable assignment?
        """
        return self in (SolutionStatus.OPTIMAL, SolutionStatus.FEASIBLE)


class FailureKind(Enum, metaclass=CaseInsensitiveEnumMeta):
    """
    Why a pipeline run produced no usable solution (beyond plain
    infeasibility/unboundedness, which are statuses in their own right).
    """

    NO_VALID_ROWS = "No usable student rows"
    INVALID_ROW = "A data row is not a sequence of cells"
    DIMENSION_MISMATCH = "Capacity/weight dimensions disagree"
    INVALID_CAPACITY = "Invalid capacity limits"
    SOLVER_UNAVAILABLE = "Solver could not be run"
    INCONSISTENT_SOLUTION = "Solver output violates one-project-per-student"
    INTERNAL_ERROR = "Unexpected failure"
