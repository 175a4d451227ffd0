#!/usr/bin/env python

"""
lp_project_allocation/problem.py

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

Problem class: the binary integer program that allocates students to
projects.

The model is:

- one binary variable ``x_s_p`` per (student, project) pair;
- objective: minimize the sum of ``weight[s][p] * x_s_p`` (zero weights are
  left out);
- each student gets exactly one project;
- each project gets at least its minimum number of students (if that is more
  than zero) and at most its maximum (if it has one).

Note that the objective is MINIMIZED. A weight is therefore a cost (e.g. a rank
of 1 for a first choice). To treat weights as preferences to be maximized,
build with ``negate_weights=True``.

"""

import logging
import re
from typing import Any, Generator, List, Optional, Sequence, Tuple

from cardinal_pythonlib.reprfunc import auto_repr
from openpyxl.workbook.workbook import Workbook

from lp_project_allocation.constants import (
    LARGE_COEFFICIENT,
    LpNames,
    SheetHeadings,
    SheetNames,
)
from lp_project_allocation.errors import DimensionMismatch
from lp_project_allocation.helperfunc import (
    autosize_openpyxl_worksheet_columns,
    bold_first_row,
)
from lp_project_allocation.project import Project
from lp_project_allocation.student import Student

log = logging.getLogger(__name__)


# =============================================================================
# Variable and constraint names
# =============================================================================

VARIABLE_NAME_REGEX = re.compile(
    r"^" + LpNames.VARIABLE_PREFIX + r"_(\d+)_(\d+)$"
)


def variable_name(student_index: int, project_index: int) -> str:
    """
    Name of the decision variable for a (student, project) pair, e.g.
    ``x_0_2``.
    """
    return f"{LpNames.VARIABLE_PREFIX}_{student_index}_{project_index}"


def parse_variable_name(name: str) -> Optional[Tuple[int, int]]:
    """
    Opposite of :func:`variable_name`. Returns ``student_index,
    project_index``, or ``None`` if the name isn't one of ours.
    """
    m = VARIABLE_NAME_REGEX.match(name)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def student_constraint_name(student_index: int) -> str:
    return f"{LpNames.STUDENT_CONSTRAINT_PREFIX}_{student_index}"


def project_constraint_name(project_index: int, suffix: str) -> str:
    return f"{LpNames.PROJECT_CONSTRAINT_PREFIX}_{project_index}_{suffix}"


def negated_weights(weights: Sequence[Sequence[float]]) -> List[List[float]]:
    """
    Returns a negated copy of a weight matrix, so that minimizing cost
    maximizes preference.
    """
    return [[-w for w in row] for row in weights]


# =============================================================================
# Model parts
# =============================================================================


class Sense(object):
    """
    Constraint senses, as written in LP format.
    """

    EQ = "="
    GE = ">="
    LE = "<="


class Constraint(object):
    """
    A named linear constraint whose variables all have coefficient 1:
    ``sum(variables) <sense> rhs``.
    """

    def __init__(self, name: str, variables: Sequence[str], sense: str,
                 rhs: float) -> None:
        assert sense in (Sense.EQ, Sense.GE, Sense.LE), f"Bad sense {sense!r}"
        self.name = name
        self.variables = tuple(variables)
        self.sense = sense
        self.rhs = rhs

    def __repr__(self) -> str:
        return auto_repr(self)

    def __str__(self) -> str:
        return (
            f"{self.name}: {' + '.join(self.variables)} "
            f"{self.sense} {self.rhs}"
        )


class ObjectiveTerm(object):
    """
    A term ``coefficient * variable`` of the objective function.
    """

    def __init__(self, coefficient: float, variable: str) -> None:
        self.coefficient = coefficient
        self.variable = variable

    def __repr__(self) -> str:
        return auto_repr(self)

    def __str__(self) -> str:
        return f"{self.coefficient} {self.variable}"


# =============================================================================
# AssignmentProblem
# =============================================================================


class AssignmentProblem(object):
    """
    Represents the compiled problem: students, projects, objective, and
    constraints. Built afresh for every solve; use :meth:`build`.
    """

    def __init__(
        self,
        students: List[Student],
        projects: List[Project],
        objective: List[ObjectiveTerm],
        constraints: List[Constraint],
    ) -> None:
        """
        Args:
            students:
                Students, in input order.
            projects:
                Projects, in capacity-list order.
            objective:
                Non-zero terms of the (minimized) objective.
            constraints:
                All constraints, in the order they are to be written.
        """
        self.students = students
        self.projects = projects
        self.objective = objective
        self.constraints = constraints

    # -------------------------------------------------------------------------
    # Representations
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        projects = "\n".join(p.description() for p in self.projects)
        students = "\n".join(s.description() for s in self.students)
        return (
            f"Problem:\n"
            f"\n"
            f"- Projects:\n\n{projects}\n"
            f"\n"
            f"- Students:\n\n{students}\n"
        )

    # -------------------------------------------------------------------------
    # Information
    # -------------------------------------------------------------------------

    def n_students(self) -> int:
        """
        Number of students.
        """
        return len(self.students)

    def n_projects(self) -> int:
        """
        Number of projects.
        """
        return len(self.projects)

    def gen_variable_pairs(
        self,
    ) -> Generator[Tuple[int, int], None, None]:
        """
        Generates ``student_index, project_index`` for every decision variable,
        students in the outer loop.
        """
        for s in range(self.n_students()):
            for p in range(self.n_projects()):
                yield s, p

    def variable_names(self) -> List[str]:
        """
        All decision variable names, in canonical order.
        """
        return [variable_name(s, p) for s, p in self.gen_variable_pairs()]

    def weight_matrix(self) -> List[List[float]]:
        """
        The original weights, indexed ``[student][project]``.
        """
        return [list(s.weights) for s in self.students]

    def student_names(self) -> List[str]:
        return [s.name for s in self.students]

    # -------------------------------------------------------------------------
    # Save data
    # -------------------------------------------------------------------------

    def write_to_xlsx_workbook(self, wb: Workbook) -> None:
        """
        Writes the problem data to a spreadsheet (so it can be saved alongside
        the solution), in the same format as the input.

        Args:
            wb:
                A :class:`openpyxl.workbook.workbook.Workbook` to which to
                write.
        """

        # ---------------------------------------------------------------------
        # Preferences
        # ---------------------------------------------------------------------

        pref_sheet = wb.create_sheet(SheetNames.PREFERENCES)
        pref_sheet.append([""] + [p.title for p in self.projects])
        for s in self.students:
            pref_sheet.append([s.name] + list(s.weights))
        autosize_openpyxl_worksheet_columns(pref_sheet)
        bold_first_row(pref_sheet)

        # ---------------------------------------------------------------------
        # Capacities
        # ---------------------------------------------------------------------

        cap_sheet = wb.create_sheet(SheetNames.CAPACITIES)
        cap_sheet.append(
            [
                SheetHeadings.PROJECT,
                SheetHeadings.MIN_NUMBER_OF_STUDENTS,
                SheetHeadings.MAX_NUMBER_OF_STUDENTS,
            ]
        )
        for p in self.projects:
            cap_sheet.append(
                [
                    p.title,
                    p.min_capacity,
                    p.max_capacity if p.has_upper_bound() else None,
                ]
            )
        autosize_openpyxl_worksheet_columns(cap_sheet)
        bold_first_row(cap_sheet)

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        students: Sequence[Student],
        project_count: int,
        limits: Sequence[Any],
        project_titles: Sequence[str] = None,
        negate_weights: bool = False,
    ) -> "AssignmentProblem":
        """
        Compiles students and project capacities into a problem.

        Args:
            students:
                Students with their weights.
            project_count:
                Number of projects.
            limits:
                One capacity limit per project; anything accepted by
                :meth:`lp_project_allocation.project.CapacityLimit.coerce`.
            project_titles:
                Optional project names (cosmetic only).
            negate_weights:
                Use ``-weight`` as the objective coefficient (so that high
                weights are preferred)?

        Raises:
            :exc:`DimensionMismatch` if there are no projects, or if the number
            of limits, or the length of any student's weights, differs from
            ``project_count``;
            :exc:`InvalidCapacity` for nonsensical limits.
        """
        if project_count < 1:
            raise DimensionMismatch(
                f"Need at least one project; have {project_count}"
            )
        if len(limits) != project_count:
            raise DimensionMismatch(
                f"Have {len(limits)} capacity limits but {project_count} "
                f"projects"
            )
        for student in students:
            if student.n_weights() != project_count:
                raise DimensionMismatch(
                    f"Student {student} has {student.n_weights()} weights but "
                    f"there are {project_count} projects"
                )
        if project_titles is not None and len(project_titles) != project_count:
            raise DimensionMismatch(
                f"Have {len(project_titles)} project titles but "
                f"{project_count} projects"
            )
        projects = [
            Project.from_limit(
                index=p,
                limit=limits[p],
                title=project_titles[p] if project_titles else None,
            )
            for p in range(project_count)
        ]
        students = list(students)
        n_students = len(students)
        log.info(
            f"Building model: {n_students} students, {project_count} "
            f"projects, negate_weights={negate_weights}"
        )

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Objective: minimize weighted cost
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        costs = [list(student.weights) for student in students]
        if negate_weights:
            costs = negated_weights(costs)
        objective = [
            ObjectiveTerm(costs[s][p], variable_name(s, p))
            for s in range(n_students)  # first index
            for p in range(project_count)  # second index
            if costs[s][p] != 0
        ]
        for term in objective:
            if abs(term.coefficient) >= LARGE_COEFFICIENT:
                log.warning(
                    f"Weight {term.coefficient} for {term.variable} is at or "
                    f"above {LARGE_COEFFICIENT}; solvers such as CBC treat "
                    f"this as infinite, so the objective will be unreliable"
                )

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Constraint: For each student, exactly one project.
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        constraints = [
            Constraint(
                name=student_constraint_name(s),
                variables=[variable_name(s, p) for p in range(project_count)],
                sense=Sense.EQ,
                rhs=1,
            )
            for s in range(n_students)
        ]

        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        # Constraint: For each project, capacity.
        # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
        for project in projects:
            p = project.index
            column = [variable_name(s, p) for s in range(n_students)]
            if project.has_lower_bound():
                constraints.append(
                    Constraint(
                        name=project_constraint_name(p, LpNames.MIN_SUFFIX),
                        variables=column,
                        sense=Sense.GE,
                        rhs=project.min_capacity,
                    )
                )
            if project.has_upper_bound():
                constraints.append(
                    Constraint(
                        name=project_constraint_name(p, LpNames.MAX_SUFFIX),
                        variables=column,
                        sense=Sense.LE,
                        rhs=project.max_capacity,
                    )
                )

        log.debug(
            f"Model has {n_students * project_count} variables, "
            f"{len(objective)} objective terms, "
            f"{len(constraints)} constraints"
        )
        return cls(
            students=students,
            projects=projects,
            objective=objective,
            constraints=constraints,
        )
