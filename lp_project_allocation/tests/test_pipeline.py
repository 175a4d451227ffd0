#!/usr/bin/env python

"""
lp_project_allocation/tests/test_pipeline.py

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

Tests the pipeline and the allocation session, using a stand-in solver.

"""

from typing import Callable, Dict, List, Optional
import unittest

from lp_project_allocation.config import Config
from lp_project_allocation.constants import FailureKind, SolutionStatus
from lp_project_allocation.errors import SolverUnavailable
from lp_project_allocation.pipeline import AllocationSession, run_pipeline
from lp_project_allocation.solver import (
    ColumnResult,
    RawResult,
    SolverOptions,
    SolverPort,
)

ROWS = [["Ana", 5, 0], ["Bo", 0, 3]]
N_COLUMNS = 3
LIMITS = [{"min": 0, "max": 1}, {"min": 0, "max": 1}]


# =============================================================================
# Stand-in solver
# =============================================================================


class CannedSolver(SolverPort):
    """
    Returns a fixed result, and records what it was asked to solve.
    """

    def __init__(
        self,
        status: str = "Optimal",
        values: Dict[str, float] = None,
        objective_value: Optional[float] = None,
        side_effect: Callable[[], None] = None,
    ) -> None:
        self.status = status
        self.values = values or {}
        self.objective_value = objective_value
        self.side_effect = side_effect
        self.documents = []  # type: List[str]
        self.options = []  # type: List[SolverOptions]

    def solve(self, document: str, options: SolverOptions) -> RawResult:
        self.documents.append(document)
        self.options.append(options)
        if self.side_effect:
            self.side_effect()
        return RawResult(
            status=self.status,
            objective_value=self.objective_value,
            columns={k: ColumnResult(v) for k, v in self.values.items()},
        )


class BrokenSolver(SolverPort):
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def solve(self, document: str, options: SolverOptions) -> RawResult:
        raise self.exc


def swapped_solver(**kwargs) -> CannedSolver:
    """
    Ana to project 1, Bo to project 0.
    """
    return CannedSolver(
        values={"x_0_1": 1, "x_1_0": 1}, objective_value=0, **kwargs
    )


# =============================================================================
# run_pipeline
# =============================================================================


class PipelineTests(unittest.TestCase):
    def test_success(self) -> None:
        solver = swapped_solver()
        solution = run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver)
        self.assertEqual(solution.status, SolutionStatus.OPTIMAL)
        self.assertEqual(solution.objective_value, 0)
        self.assertEqual(
            [(a.student_name, a.project_index, a.weight)
             for a in solution.assignments],
            [("Ana", 1, 0), ("Bo", 0, 0)],
        )
        self.assertEqual(len(solver.documents), 1)
        self.assertTrue(solver.documents[0].startswith("Minimize\n"))

    def test_options_reach_solver(self) -> None:
        solver = swapped_solver()
        config = Config(max_time_s=7, solver_name="gurobi")
        run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver, config=config)
        options = solver.options[0]
        self.assertEqual(options.max_seconds, 7)
        self.assertEqual(options.solver_name, "gurobi")

    def test_no_valid_rows(self) -> None:
        solver = swapped_solver()
        solution = run_pipeline([[None, 1, 2], [" "]], N_COLUMNS, LIMITS,
                                solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.NO_VALID_ROWS)
        self.assertEqual(solution.assignments, ())
        self.assertEqual(solver.documents, [])

    def test_dimension_mismatch(self) -> None:
        solver = swapped_solver()
        rows = [["Ana", 1, 2, 3]]
        solution = run_pipeline(rows, 4, LIMITS, solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.DIMENSION_MISMATCH)
        self.assertEqual(solver.documents, [])

    def test_no_project_columns(self) -> None:
        solver = swapped_solver()
        solution = run_pipeline([["A"]], 1, [], solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.DIMENSION_MISMATCH)
        self.assertEqual(solver.documents, [])

    def test_row_that_is_not_a_sequence(self) -> None:
        solver = swapped_solver()
        solution = run_pipeline([5, ["A", 1]], 2, [(0, None)],
                                solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.INVALID_ROW)
        self.assertEqual(solver.documents, [])

    def test_unexpected_failure_becomes_solution(self) -> None:
        # A solver reporting non-numeric values breaks decoding
        solver = CannedSolver(values={"x_0_1": "yes", "x_1_0": "yes"})
        with self.assertLogs("lp_project_allocation.pipeline",
                             level="ERROR"):
            solution = run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.INTERNAL_ERROR)
        self.assertIn("TypeError", solution.message)
        self.assertEqual(solution.assignments, ())

    def test_invalid_capacity(self) -> None:
        solver = swapped_solver()
        solution = run_pipeline(ROWS, N_COLUMNS, [(0, 1), (-1, 2)],
                                solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.INVALID_CAPACITY)
        self.assertEqual(solver.documents, [])

    def test_solver_unavailable(self) -> None:
        for exc in (SolverUnavailable("no CBC"), RuntimeError("crash")):
            solution = run_pipeline(ROWS, N_COLUMNS, LIMITS,
                                    solver=BrokenSolver(exc))
            self.assertEqual(solution.status, SolutionStatus.ERROR)
            self.assertEqual(solution.failure,
                             FailureKind.SOLVER_UNAVAILABLE)
            self.assertTrue(solution.message)

    def test_infeasible(self) -> None:
        solver = CannedSolver(status="Infeasible", values={"x_0_0": 1})
        solution = run_pipeline(ROWS, N_COLUMNS, [(0, 0), (0, 0)],
                                solver=solver)
        self.assertEqual(solution.status, SolutionStatus.INFEASIBLE)
        self.assertIsNone(solution.failure)
        self.assertEqual(solution.assignments, ())
        self.assertIsNone(solution.objective_value)

    def test_unbounded(self) -> None:
        solver = CannedSolver(status="Unbounded")
        solution = run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver)
        self.assertEqual(solution.status, SolutionStatus.UNBOUNDED)
        self.assertEqual(solution.assignments, ())

    def test_inconsistent(self) -> None:
        solver = CannedSolver(values={"x_0_0": 1, "x_0_1": 1, "x_1_1": 1})
        solution = run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.INCONSISTENT_SOLUTION)
        self.assertEqual(solution.assignments, ())

    def test_capacity_breach_is_inconsistent(self) -> None:
        # Both students on project 0, which takes at most one
        solver = CannedSolver(values={"x_0_0": 1, "x_1_0": 1})
        solution = run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver)
        self.assertEqual(solution.status, SolutionStatus.ERROR)
        self.assertEqual(solution.failure, FailureKind.INCONSISTENT_SOLUTION)

    def test_all_zero_weights(self) -> None:
        rows = [["A", 0, 0], ["B", 0, 0]]
        solver = CannedSolver(values={"x_0_0": 1, "x_1_1": 1},
                              objective_value=0)
        solution = run_pipeline(rows, N_COLUMNS, [(0, None)] * 2,
                                solver=solver)
        self.assertIn(" obj: 0\n", solver.documents[0])
        self.assertEqual(solution.status, SolutionStatus.OPTIMAL)
        self.assertEqual(solution.objective_value, 0)
        self.assertEqual(solution.weight_total(), 0)

    def test_negated_weights(self) -> None:
        solver = CannedSolver(values={"x_0_0": 1, "x_1_1": 1},
                              objective_value=-8)
        config = Config(negate_weights=True)
        solution = run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver,
                                config=config)
        self.assertIn(" obj: - 5 x_0_0 - 3 x_1_1\n", solver.documents[0])
        self.assertEqual(solution.objective_value, -8)
        self.assertEqual([a.weight for a in solution.assignments], [5, 3])

    def test_debug_model(self) -> None:
        solver = swapped_solver()
        with self.assertLogs("lp_project_allocation.helperfunc") as cm:
            run_pipeline(ROWS, N_COLUMNS, LIMITS, solver=solver,
                         config=Config(debug_model=True))
        self.assertTrue(any("student_0" in line for line in cm.output))

    def test_inputs_not_mutated(self) -> None:
        rows = [list(r) for r in ROWS]
        limits = [dict(x) for x in LIMITS]
        run_pipeline(rows, N_COLUMNS, limits, solver=swapped_solver())
        self.assertEqual(rows, ROWS)
        self.assertEqual(limits, LIMITS)


# =============================================================================
# AllocationSession
# =============================================================================


class SessionTests(unittest.TestCase):
    def make_session(self, solver: SolverPort = None) -> AllocationSession:
        session = AllocationSession(solver=solver or swapped_solver())
        session.set_data(ROWS, N_COLUMNS, project_titles=["Alpha", "Beta"])
        session.set_limits(LIMITS)
        return session

    def test_solve(self) -> None:
        session = self.make_session()
        self.assertIsNone(session.solution)
        solution = session.solve()
        self.assertIsNotNone(solution)
        self.assertIs(session.solution, solution)
        self.assertFalse(session.busy)

    def test_changes_clear_solution(self) -> None:
        session = self.make_session()
        session.solve()
        v = session.version
        session.set_limits([(0, 2), (0, 2)])
        self.assertIsNone(session.solution)
        self.assertEqual(session.version, v + 1)
        session.solve()
        self.assertIsNotNone(session.solution)
        session.set_data(ROWS, N_COLUMNS)
        self.assertIsNone(session.solution)
        session.solve()
        session.invalidate()
        self.assertIsNone(session.solution)

    def test_reentrant_solve_is_refused(self) -> None:
        inner = []  # type: List[object]
        session = None  # type: Optional[AllocationSession]

        def reenter() -> None:
            self.assertTrue(session.busy)
            inner.append(session.solve())

        solver = swapped_solver(side_effect=reenter)
        session = self.make_session(solver)
        outer = session.solve()
        self.assertEqual(inner, [None])
        self.assertIsNotNone(outer)
        self.assertEqual(len(solver.documents), 1)

    def test_change_during_solve_discards_result(self) -> None:
        session = None  # type: Optional[AllocationSession]

        def change_limits() -> None:
            session.set_limits([(0, 2), (0, 2)])

        session = self.make_session(swapped_solver(side_effect=change_limits))
        self.assertIsNone(session.solve())
        self.assertIsNone(session.solution)
        self.assertFalse(session.busy)

    def test_failed_resolve_leaves_no_stale_solution(self) -> None:
        session = self.make_session()
        self.assertTrue(session.solve())
        session.solver = BrokenSolver(RuntimeError("gone"))
        session.invalidate()
        solution = session.solve()
        self.assertEqual(solution.failure, FailureKind.SOLVER_UNAVAILABLE)
        self.assertIs(session.solution, solution)
        self.assertEqual(session.solution.assignments, ())

    def test_unexpected_failure_is_a_solution(self) -> None:
        session = self.make_session(
            CannedSolver(values={"x_0_1": "yes", "x_1_0": "yes"})
        )
        solution = session.solve()
        self.assertEqual(solution.failure, FailureKind.INTERNAL_ERROR)
        self.assertIs(session.solution, solution)
        self.assertFalse(session.busy)

    def test_solver_exception_clears_busy(self) -> None:
        class Abort(BaseException):
            pass

        class Exploding(SolverPort):
            def solve(self, document: str,
                      options: SolverOptions) -> RawResult:
                raise Abort()

        session = self.make_session(Exploding())
        with self.assertRaises(Abort):
            session.solve()
        self.assertFalse(session.busy)
        self.assertIsNone(session.solution)


class AsyncSessionTests(unittest.IsolatedAsyncioTestCase):
    async def test_solve_async(self) -> None:
        session = AllocationSession(solver=swapped_solver())
        session.set_data(ROWS, N_COLUMNS)
        session.set_limits(LIMITS)
        solution = await session.solve_async()
        self.assertEqual(solution.status, SolutionStatus.OPTIMAL)
        self.assertIs(session.solution, solution)
        self.assertFalse(session.busy)

    async def test_solve_async_stale(self) -> None:
        session = None  # type: Optional[AllocationSession]

        def change_data() -> None:
            session.invalidate()

        session = AllocationSession(
            solver=swapped_solver(side_effect=change_data)
        )
        session.set_data(ROWS, N_COLUMNS)
        session.set_limits(LIMITS)
        self.assertIsNone(await session.solve_async())
        self.assertIsNone(session.solution)
