#!/usr/bin/env python

"""
lp_project_allocation/solution.py

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

Solution class, and decoding of raw solver results into solutions. (The actual
solving is done by a solver; see :mod:`lp_project_allocation.solver`.)

"""

import csv
import datetime
import logging
import os
from statistics import mean, median, variance
import sys
from typing import (
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    TYPE_CHECKING,
)

from cardinal_pythonlib.cmdline import cmdline_quote
from openpyxl.workbook.workbook import Workbook

from lp_project_allocation.constants import (
    ASSIGNED_THRESHOLD,
    CsvHeadings,
    EXT_XLSX,
    FailureKind,
    SheetHeadings,
    SheetNames,
    SolutionStatus,
    SolverStatusText,
)
from lp_project_allocation.errors import (
    DimensionMismatch,
    InconsistentSolution,
)
from lp_project_allocation.helperfunc import (
    autosize_openpyxl_column,
    autosize_openpyxl_worksheet_columns,
    bold_cell,
    bold_first_row,
)
from lp_project_allocation.problem import variable_name
from lp_project_allocation.solver import RawResult
from lp_project_allocation.version import VERSION, VERSION_DATE

if TYPE_CHECKING:
    from lp_project_allocation.problem import AssignmentProblem
    from lp_project_allocation.project import Project

log = logging.getLogger(__name__)


# =============================================================================
# Assignment
# =============================================================================


class Assignment(NamedTuple):
    """
    One student allocated to one project, with the original weight for that
    pairing.
    """

    student_name: str
    student_index: int
    project_index: int
    weight: float


# =============================================================================
# Solution
# =============================================================================


class Solution(object):
    """
    Represents the outcome of a solve. Immutable: when inputs change, make a
    new one.
    """

    def __init__(
        self,
        status: SolutionStatus,
        objective_value: Optional[float] = None,
        assignments: Sequence[Assignment] = (),
        message: str = "",
        failure: FailureKind = None,
    ) -> None:
        """
        Args:
            status:
                Classified outcome.
            objective_value:
                Value of the objective function, if the solver gave one.
            assignments:
                One per student for accepted statuses; otherwise empty.
            message:
                Human-readable description of the outcome.
            failure:
                For ``ERROR`` solutions from the pipeline: what went wrong.
        """
        self._status = status
        self._objective_value = objective_value
        self._assignments = tuple(assignments)
        self._message = message
        self._failure = failure

    @classmethod
    def failed(cls, failure: FailureKind, message: str) -> "Solution":
        """
        A solution representing a failure to get as far as a usable solver
        result.
        """
        return cls(
            status=SolutionStatus.ERROR, message=message, failure=failure
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def status(self) -> SolutionStatus:
        return self._status

    @property
    def objective_value(self) -> Optional[float]:
        return self._objective_value

    @property
    def assignments(self) -> Tuple[Assignment, ...]:
        return self._assignments

    @property
    def message(self) -> str:
        return self._message

    @property
    def failure(self) -> Optional[FailureKind]:
        return self._failure

    def is_accepted(self) -> bool:
        """
        Did we get a usable allocation?
        """
        return self._status.accepted

    def __bool__(self) -> bool:
        return self.is_accepted()

    # -------------------------------------------------------------------------
    # Representations
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """
        String representation.
        """
        lines = [
            f"Solution: {self._status.value}; "
            f"objective {self._objective_value}; {self._message}"
        ]
        for a in self._assignments:
            lines.append(
                f"{a.student_name} (St#{a.student_index}) -> "
                f"P#{a.project_index} (weight {a.weight})"
            )
        return "\n".join(lines)

    def shortdesc(self) -> str:
        """
        Very short description, e.g. ``{0: 1, 1: 0}``.
        """
        parts = [f"{a.student_index}: {a.project_index}"
                 for a in self._assignments]
        return "{" + ", ".join(parts) + "}"

    # -------------------------------------------------------------------------
    # Allocations
    # -------------------------------------------------------------------------

    def allocated_project_index(self, student_index: int) -> Optional[int]:
        """
        Which project was allocated to this student?
        """
        for a in self._assignments:
            if a.student_index == student_index:
                return a.project_index
        return None

    def assignments_for_project(self, project_index: int) -> List[Assignment]:
        """
        Assignments to one project, in student order.
        """
        return [a for a in self._assignments if a.project_index == project_index]

    def n_students_allocated_to_project(self, project_index: int) -> int:
        return len(self.assignments_for_project(project_index))

    def capacity_violations(self, projects: Sequence["Project"]) -> List[str]:
        """
        Descriptions of any projects whose allocation count is outside their
        capacity. Should always be empty for accepted solutions.
        """
        problems = []  # type: List[str]
        for project in projects:
            n = self.n_students_allocated_to_project(project.index)
            if not project.admits(n):
                problems.append(
                    f"{project} has {n} students; capacity is "
                    f"[{project.min_capacity}, {project.max_capacity}]"
                )
        return problems

    # -------------------------------------------------------------------------
    # Weights
    # -------------------------------------------------------------------------

    def weights(self) -> List[float]:
        """
        Weights of all allocated pairings.
        """
        return [a.weight for a in self._assignments]

    def weight_total(self) -> float:
        return sum(self.weights())

    def weight_median(self) -> Optional[float]:
        scores = self.weights()
        return median(scores) if scores else None

    def weight_mean(self) -> Optional[float]:
        scores = self.weights()
        return mean(scores) if scores else None

    def weight_variance(self) -> Optional[float]:
        scores = self.weights()
        # variance() needs at least two data points
        return variance(scores) if len(scores) >= 2 else None

    def weight_min(self) -> Optional[float]:
        scores = self.weights()
        return min(scores) if scores else None

    def weight_max(self) -> Optional[float]:
        scores = self.weights()
        return max(scores) if scores else None

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def write_xlsx(self, filename: str, problem: "AssignmentProblem") -> None:
        """
        Writes the solution to an Excel XLSX file (and its problem, for data
        safety).

        Args:
            filename:
                Name of file to write.
            problem:
                The problem that this solves.
        """
        log.info(f"Writing output to: {filename}")

        wb = Workbook()
        wb.remove(wb.worksheets[0])

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Allocations, by student
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        ss = wb.create_sheet(SheetNames.STUDENT_ALLOCATIONS)
        ss.append(
            [
                SheetHeadings.STUDENT,
                SheetHeadings.PROJECT,
                SheetHeadings.WEIGHT,
            ]
        )
        for a in self._assignments:
            ss.append(
                [
                    a.student_name,
                    problem.projects[a.project_index].title,
                    a.weight,
                ]
            )
        autosize_openpyxl_worksheet_columns(ss)
        bold_first_row(ss)

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Allocations, by project
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        ps = wb.create_sheet(SheetNames.PROJECT_ALLOCATIONS)
        ps.append(
            [
                SheetHeadings.PROJECT,
                SheetHeadings.MIN_NUMBER_OF_STUDENTS,
                SheetHeadings.MAX_NUMBER_OF_STUDENTS,
                SheetHeadings.N_STUDENTS_ALLOCATED,
                SheetHeadings.STUDENTS,
                SheetHeadings.WEIGHTS,
            ]
        )
        for project in problem.projects:
            allocated = self.assignments_for_project(project.index)
            ps.append(
                [
                    project.title,
                    project.min_capacity,
                    (
                        project.max_capacity
                        if project.has_upper_bound()
                        else None
                    ),
                    len(allocated),
                    ", ".join(a.student_name for a in allocated),
                    ", ".join(str(a.weight) for a in allocated),
                ]
            )
        autosize_openpyxl_worksheet_columns(ps)
        bold_first_row(ps)

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Software, settings, and summary information
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        zs = wb.create_sheet(SheetNames.INFORMATION)
        zs_rows = [
            ["SOFTWARE DETAILS"],
            [],
            ["Software", "lp_project_allocation"],
            ["Version", VERSION],
            ["Version date", VERSION_DATE],
            ["Author", "Rudolf Cardinal (rudolf@pobox.com)"],
            [],
            ["RUN INFORMATION"],
            [],
            ["Date/time", datetime.datetime.now()],
            ["Command-line parameters", cmdline_quote(sys.argv)],
            ["Status", self._status.value],
            ["Message", self._message],
            ["Objective value (minimized)", self._objective_value],
            [],
            ["SUMMARY STATISTICS"],
            [],
            ["Weight total", self.weight_total()],
            ["Weight median", self.weight_median()],
            ["Weight mean", self.weight_mean()],
            ["Weight variance", self.weight_variance()],
            ["Weight minimum", self.weight_min()],
            ["Weight maximum", self.weight_max()],
        ]
        for row in zs_rows:
            zs.append(row)
        autosize_openpyxl_column(zs, 0)
        zs.column_dimensions["B"].width = 20
        bold_first_row(zs)
        bold_cell(zs["A8"])
        bold_cell(zs["A16"])

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Problem definition
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        problem.write_to_xlsx_workbook(wb)

        wb.save(filename)
        wb.close()

    def write_data(self, filename: str, problem: "AssignmentProblem") -> None:
        """
        Autodetects the file type from the extension and writes data to that
        file.
        """
        _, ext = os.path.splitext(filename)
        if ext == EXT_XLSX:
            self.write_xlsx(filename, problem)
        else:
            raise ValueError(
                f"Don't know how to write file type {ext!r} for {filename!r}"
            )

    def write_student_csv(self, filename: str,
                          problem: "AssignmentProblem") -> None:
        """
        Writes just the "per student" mapping to a CSV file, for comparisons
        (e.g. via ``meld``).
        """
        log.info(f"Writing student allocation data to: {filename}")
        with open(filename, "w", newline="") as file:
            writer = csv.writer(file)
            writer.writerow(
                [
                    CsvHeadings.STUDENT_NUMBER,
                    CsvHeadings.STUDENT_NAME,
                    CsvHeadings.PROJECT_NUMBER,
                    CsvHeadings.PROJECT_NAME,
                    CsvHeadings.WEIGHT,
                ]
            )
            for a in self._assignments:
                writer.writerow(
                    [
                        a.student_index,
                        a.student_name,
                        a.project_index,
                        problem.projects[a.project_index].title,
                        a.weight,
                    ]
                )


# =============================================================================
# Decoding solver output
# =============================================================================


def classify_status(status_text: str) -> SolutionStatus:
    """
    Classifies a solver's status string.

    Exactly ``"Optimal"`` is optimal. Otherwise, anything mentioning
    "infeasible" is infeasible, anything mentioning "unbounded" is unbounded,
    and anything else mentioning "feasible" is a feasible (accepted) solution.
    Everything else is an error.
    """
    if status_text == SolverStatusText.OPTIMAL:
        return SolutionStatus.OPTIMAL
    lowered = (status_text or "").lower()
    if "infeasible" in lowered:
        return SolutionStatus.INFEASIBLE
    if "unbounded" in lowered:
        return SolutionStatus.UNBOUNDED
    if "feasible" in lowered:
        return SolutionStatus.FEASIBLE
    return SolutionStatus.ERROR


def _describe(status: SolutionStatus, raw: RawResult) -> str:
    if status == SolutionStatus.OPTIMAL:
        return f"Optimal allocation found (objective {raw.objective_value})"
    if status == SolutionStatus.FEASIBLE:
        return (
            f"Feasible but not proven optimal allocation found "
            f"(objective {raw.objective_value})"
        )
    if status == SolutionStatus.INFEASIBLE:
        return (
            "No allocation satisfies the capacity limits "
            f"(solver status {raw.status!r})"
        )
    if status == SolutionStatus.UNBOUNDED:
        return f"The model is unbounded (solver status {raw.status!r})"
    return f"The solver did not produce a solution (status {raw.status!r})"


def decode_solution(
    raw: RawResult,
    students: Sequence[str],
    weights: Sequence[Sequence[float]],
) -> Solution:
    """
    Converts a raw solver result into a :class:`Solution`.

    Args:
        raw:
            The solver's result.
        students:
            Student names, in model order.
        weights:
            Original weights, indexed ``[student][project]``; these (not
            anything recomputed from the objective) go into the assignments.

    Raises:
        :exc:`InconsistentSolution` if the solver claims success but a student
        does not end up with exactly one project;
        :exc:`DimensionMismatch` if ``students`` and ``weights`` disagree.
    """
    if len(students) != len(weights):
        raise DimensionMismatch(
            f"Have {len(students)} students but {len(weights)} weight rows"
        )
    status = classify_status(raw.status)
    message = _describe(status, raw)
    if not status.accepted:
        log.warning(message)
        return Solution(
            status=status,
            objective_value=None,
            assignments=(),
            message=message,
        )

    assignments = []  # type: List[Assignment]
    for s, name in enumerate(students):
        mine = [
            Assignment(
                student_name=name,
                student_index=s,
                project_index=p,
                weight=weight,
            )
            for p, weight in enumerate(weights[s])
            if raw.primal(variable_name(s, p)) > ASSIGNED_THRESHOLD
        ]
        if len(mine) != 1:
            raise InconsistentSolution(
                f"Solver reported {raw.status!r}, but student {name!r} "
                f"(St#{s}) was allocated {len(mine)} projects: "
                f"{[a.project_index for a in mine]}"
            )
        assignments.extend(mine)
    log.info(message)
    return Solution(
        status=status,
        objective_value=raw.objective_value,
        assignments=assignments,
        message=message,
    )

