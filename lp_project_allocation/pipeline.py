#!/usr/bin/env python

"""
lp_project_allocation/pipeline.py

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

The whole pipeline: raw rows -> weight matrix -> model -> LP text -> solver ->
solution.

:func:`run_pipeline` never raises an :exc:`Exception`; every failure
comes back as an ``ERROR`` :class:`Solution` saying what went wrong.

:class:`AllocationSession` holds the current inputs and the current solution.
Changing the inputs clears the solution (see :meth:`invalidate`), and only one
solve may be in progress at a time.

"""

import asyncio
import functools
import logging
import traceback
from typing import Any, List, Optional, Sequence

from lp_project_allocation.config import Config
from lp_project_allocation.constants import FailureKind
from lp_project_allocation.errors import (
    AllocationError,
    InconsistentSolution,
    SolverUnavailable,
)
from lp_project_allocation.extractor import extract_preference_matrix
from lp_project_allocation.helperfunc import report_on_model
from lp_project_allocation.lp_format import encode_lp
from lp_project_allocation.problem import AssignmentProblem
from lp_project_allocation.solution import Solution, decode_solution
from lp_project_allocation.solver import MipSolver, SolverPort
from lp_project_allocation.student import students_from_matrix

log = logging.getLogger(__name__)


# =============================================================================
# Pipeline stages
# =============================================================================


def compile_problem(
    rows: Sequence[Optional[Sequence[Any]]],
    n_columns: int,
    limits: Sequence[Any],
    project_titles: Sequence[str] = None,
    negate_weights: bool = False,
) -> AssignmentProblem:
    """
    Extracts the weight matrix from raw rows and builds the model.

    Args:
        rows:
            Data rows (no header): student name, then one weight per project.
        n_columns:
            Number of header columns (1 + number of projects).
        limits:
            One capacity limit per project.
        project_titles:
            Optional project names.
        negate_weights:
            Prefer high weights rather than low ones?

    Raises:
        :exc:`AllocationError` subclasses.
    """
    matrix = extract_preference_matrix(rows, n_columns)
    students = students_from_matrix(matrix)
    return AssignmentProblem.build(
        students=students,
        project_count=n_columns - 1,
        limits=limits,
        project_titles=project_titles,
        negate_weights=negate_weights,
    )


def solve_problem(
    problem: AssignmentProblem, solver: SolverPort, config: Config
) -> Solution:
    """
    Encodes a problem, solves it, and decodes and checks the result.

    Raises:
        :exc:`SolverUnavailable` if the solver fails;
        :exc:`InconsistentSolution` if the result is nonsensical.
    """
    document = encode_lp(problem)
    if config.debug_model:
        report_on_model(document)
    try:
        raw = solver.solve(document, config.solver_options())
    except SolverUnavailable:
        raise
    except Exception as e:
        raise SolverUnavailable(f"Solver failed: {e}") from e
    if config.debug_model:
        report_on_model(document, raw)
    solution = decode_solution(
        raw, problem.student_names(), problem.weight_matrix()
    )
    if solution.is_accepted():
        violations = solution.capacity_violations(problem.projects)
        if violations:
            raise InconsistentSolution(
                "Solver result breaks capacity limits: "
                + "; ".join(violations)
            )
    return solution


def run_pipeline(
    rows: Sequence[Optional[Sequence[Any]]],
    n_columns: int,
    limits: Sequence[Any],
    solver: SolverPort = None,
    config: Config = None,
    project_titles: Sequence[str] = None,
) -> Solution:
    """
    Runs the whole pipeline. Never raises an :exc:`Exception`; failures are
    returned as ``ERROR`` solutions (with :attr:`Solution.failure` set;
    ``INTERNAL_ERROR`` for anything unexpected). Infeasible and unbounded
    problems give solutions with those statuses and no assignments.

    Args:
        rows:
            Data rows (no header).
        n_columns:
            Number of header columns (1 + number of projects).
        limits:
            One capacity limit per project.
        solver:
            The solver; default is :class:`MipSolver`.
        config:
            Options; default is a default :class:`Config`.
        project_titles:
            Optional project names.
    """
    config = config or Config()
    solver = solver or MipSolver()
    try:
        problem = compile_problem(
            rows,
            n_columns,
            limits,
            project_titles=project_titles,
            negate_weights=config.negate_weights,
        )
        return solve_problem(problem, solver, config)
    except AllocationError as e:
        log.error(f"Cannot solve: {e}")
        return Solution.failed(e.failure_kind, str(e))
    except Exception as e:
        log.error(f"Unexpected failure while solving: {e!r}")
        log.error(traceback.format_exc())
        return Solution.failed(
            FailureKind.INTERNAL_ERROR, f"Unexpected failure: {e!r}"
        )


# =============================================================================
# AllocationSession
# =============================================================================


class AllocationSession(object):
    """
    Holds the inputs to an allocation and the most recent solution.

    Any change to the inputs bumps a version number and clears the solution.
    A solution produced from inputs that have since changed is discarded.
    """

    def __init__(self, solver: SolverPort = None,
                 config: Config = None) -> None:
        self.solver = solver or MipSolver()
        self.config = config or Config()
        self._rows = []  # type: List[Optional[Sequence[Any]]]
        self._n_columns = 0
        self._limits = []  # type: List[Any]
        self._project_titles = None  # type: Optional[List[str]]
        self._version = 0
        self._solution = None  # type: Optional[Solution]
        self._solution_version = -1
        self._busy = False

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def set_data(
        self,
        rows: Sequence[Optional[Sequence[Any]]],
        n_columns: int,
        project_titles: Sequence[str] = None,
    ) -> None:
        """
        Replaces the preference data.
        """
        self._rows = list(rows)
        self._n_columns = n_columns
        self._project_titles = (
            list(project_titles) if project_titles is not None else None
        )
        self.invalidate()

    def set_limits(self, limits: Sequence[Any]) -> None:
        """
        Replaces the capacity limits.
        """
        self._limits = list(limits)
        self.invalidate()

    def invalidate(self) -> None:
        """
        Marks the inputs as changed, clearing any solution.
        """
        self._version += 1
        self._solution = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def busy(self) -> bool:
        """
        Is a solve in progress?
        """
        return self._busy

    @property
    def solution(self) -> Optional[Solution]:
        """
        The solution for the current inputs, or ``None``.
        """
        if self._solution_version != self._version:
            return None
        return self._solution

    # -------------------------------------------------------------------------
    # Solving
    # -------------------------------------------------------------------------

    def _start(self) -> bool:
        if self._busy:
            log.warning("A solve is already in progress; ignoring request")
            return False
        self._busy = True
        self._solution = None
        return True

    def _make_call(self) -> functools.partial:
        return functools.partial(
            run_pipeline,
            list(self._rows),
            self._n_columns,
            list(self._limits),
            solver=self.solver,
            config=self.config,
            project_titles=self._project_titles,
        )

    def _finish(self, solution: Solution, version: int) -> Optional[Solution]:
        if version != self._version:
            log.info(
                "Inputs changed while solving; discarding the solution"
            )
            return None
        self._solution = solution
        self._solution_version = version
        return solution

    def solve(self) -> Optional[Solution]:
        """
        Solves for the current inputs. Returns ``None`` if a solve is already
        in progress, or if the inputs changed during the solve.
        """
        if not self._start():
            return None
        version = self._version
        try:
            solution = self._make_call()()
        finally:
            self._busy = False
        return self._finish(solution, version)

    async def solve_async(self) -> Optional[Solution]:
        """
        As for :meth:`solve`, but runs the solver in the event loop's default
        executor so the loop isn't blocked.
        """
        if not self._start():
            return None
        version = self._version
        loop = asyncio.get_running_loop()
        try:
            solution = await loop.run_in_executor(None, self._make_call())
        finally:
            self._busy = False
        return self._finish(solution, version)
