#!/usr/bin/env python

"""
lp_project_allocation/solver.py

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

Solver gateway. The rest of the package talks to a solver only through
:class:`SolverPort`: LP text in, :class:`RawResult` out. The production
implementation, :class:`MipSolver`, uses the MIP package
(https://python-mip.readthedocs.io/), i.e. CBC by default.

"""

from abc import ABC, abstractmethod
import logging
import os
import tempfile
from typing import Dict, Mapping, Optional

from cardinal_pythonlib.reprfunc import auto_repr
from mip import CBC, GUROBI, Model, OptimizationStatus
from mip.exceptions import MipBaseException

from lp_project_allocation.constants import (
    DEFAULT_MAX_SECONDS,
    DEFAULT_SOLVER_NAME,
    EXT_LP,
    SolverStatusText,
)
from lp_project_allocation.errors import SolverUnavailable

log = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

MIP_SOLVER_NAMES = {
    "cbc": CBC,
    "gurobi": GUROBI,
}

MIP_STATUS_TEXT = {
    OptimizationStatus.OPTIMAL: SolverStatusText.OPTIMAL,
    OptimizationStatus.FEASIBLE: SolverStatusText.FEASIBLE,
    OptimizationStatus.INFEASIBLE: SolverStatusText.INFEASIBLE,
    OptimizationStatus.INT_INFEASIBLE: SolverStatusText.INT_INFEASIBLE,
    OptimizationStatus.UNBOUNDED: SolverStatusText.UNBOUNDED,
    OptimizationStatus.NO_SOLUTION_FOUND: SolverStatusText.NO_SOLUTION_FOUND,
    OptimizationStatus.LOADED: SolverStatusText.LOADED,
    OptimizationStatus.CUTOFF: SolverStatusText.CUTOFF,
    OptimizationStatus.OTHER: SolverStatusText.OTHER,
    OptimizationStatus.ERROR: SolverStatusText.ERROR,
}


# =============================================================================
# Options and results
# =============================================================================


class SolverOptions(object):
    """
    Options passed to a solver.
    """

    def __init__(
        self,
        max_seconds: float = DEFAULT_MAX_SECONDS,
        solver_name: str = DEFAULT_SOLVER_NAME,
        verbose: bool = False,
    ) -> None:
        """
        Args:
            max_seconds:
                Time limit for the optimizer (s).
            solver_name:
                Backend name, e.g. ``"cbc"``.
            verbose:
                Let the backend print its progress?
        """
        self.max_seconds = max_seconds
        self.solver_name = solver_name
        self.verbose = verbose

    def __repr__(self) -> str:
        return auto_repr(self)


class ColumnResult(object):
    """
    The solver's result for one variable (column).
    """

    def __init__(self, primal: Optional[float]) -> None:
        self.primal = primal

    def __repr__(self) -> str:
        return auto_repr(self)


class RawResult(object):
    """
    What a solver returns: a status string, the objective value if there is
    one, and the value of each variable it reported. Variables may be missing
    from ``columns``; a missing column means a value of 0.
    """

    def __init__(
        self,
        status: str,
        objective_value: Optional[float] = None,
        columns: Mapping[str, ColumnResult] = None,
    ) -> None:
        self.status = status
        self.objective_value = objective_value
        self.columns = dict(columns or {})  # type: Dict[str, ColumnResult]

    def __repr__(self) -> str:
        return auto_repr(self)

    def __str__(self) -> str:
        lines = [
            f"Solver result: status={self.status!r}, "
            f"objective={self.objective_value}"
        ]
        for name in sorted(self.columns):
            lines.append(f"{name} == {self.columns[name].primal}")
        return "\n".join(lines)

    def primal(self, name: str) -> float:
        """
        Value of a named variable; 0 if the solver didn't report it.
        """
        column = self.columns.get(name)
        if column is None or column.primal is None:
            return 0
        return column.primal


# =============================================================================
# Solver interface
# =============================================================================


class SolverPort(ABC):
    """
    Anything that can solve an LP-format document.
    """

    @abstractmethod
    def solve(self, document: str, options: SolverOptions) -> RawResult:
        """
        Solves the model described by ``document`` (CPLEX LP format).

        Raises:
            :exc:`SolverUnavailable` if the solver can't be run at all.
        """
        raise NotImplementedError


# =============================================================================
# MIP implementation
# =============================================================================


class MipSolver(SolverPort):
    """
    Solves via the MIP package.
    """

    def solve(self, document: str, options: SolverOptions) -> RawResult:
        solver_name = options.solver_name.lower()
        if solver_name not in MIP_SOLVER_NAMES:
            raise SolverUnavailable(
                f"Unknown solver {options.solver_name!r}; "
                f"use one of {sorted(MIP_SOLVER_NAMES)}"
            )
        log.info(
            f"Solving with MIP/{solver_name}, "
            f"max_seconds={options.max_seconds}"
        )
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=EXT_LP, delete=False
        ) as f:
            f.write(document)
            filename = f.name
        try:
            try:
                m = Model(solver_name=MIP_SOLVER_NAMES[solver_name])
                m.verbose = 1 if options.verbose else 0
                m.read(filename)
            except (MipBaseException, OSError, ImportError) as e:
                raise SolverUnavailable(
                    f"Could not load model into MIP/{solver_name}: {e}"
                ) from e
            status = m.optimize(max_seconds=options.max_seconds)
        finally:
            os.remove(filename)

        status_text = MIP_STATUS_TEXT.get(status, SolverStatusText.ERROR)
        log.info(f"MIP status: {status_text}")
        if not m.num_solutions:
            return RawResult(status=status_text)
        # ... note that the value of a solved variable is var.x
        columns = {v.name: ColumnResult(primal=v.x) for v in m.vars}
        return RawResult(
            status=status_text,
            objective_value=m.objective_value,
            columns=columns,
        )
