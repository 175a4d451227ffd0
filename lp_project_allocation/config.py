#!/usr/bin/env python

"""
lp_project_allocation/config.py

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

Master config class.

"""

from typing import Any, Dict

from lp_project_allocation.constants import (
    DEFAULT_MAX_SECONDS,
    DEFAULT_SOLVER_NAME,
)
from lp_project_allocation.solver import SolverOptions


# =============================================================================
# Master config
# =============================================================================


class Config(object):
    """
    Master config object.
    """

    def __init__(
        self,
        filename: str = None,
        cmd_args: Dict[str, Any] = None,
        debug_model: bool = False,
        max_time_s: float = DEFAULT_MAX_SECONDS,
        negate_weights: bool = False,
        solver_name: str = DEFAULT_SOLVER_NAME,
        solver_verbose: bool = False,
    ) -> None:
        """
        Args:
            filename:
                Source data file to read (command-line use only).
            cmd_args:
                Copy of command-line arguments
            debug_model:
                Report the LP model before solving it, and the raw solver
                result afterwards?
            max_time_s:
                Time limit for MIP optimizer (s).
            negate_weights:
                Build the (minimizing) objective from negated weights, so that
                higher weights are preferred? Assignments still report the
                original weights.
            solver_name:
                Which MIP backend to use (see
                :data:`lp_project_allocation.constants.SOLVER_NAMES`).
            solver_verbose:
                Let the solver write its own progress output?
        """
        self.filename = filename
        self.debug_model = debug_model
        self.max_time_s = max_time_s
        self.negate_weights = negate_weights
        self.solver_name = solver_name
        self.solver_verbose = solver_verbose

        self.cmd_args = cmd_args

    def __str__(self) -> str:
        if self.cmd_args is not None:
            return str(self.cmd_args)
        return (
            f"Config(debug_model={self.debug_model}, "
            f"max_time_s={self.max_time_s}, "
            f"negate_weights={self.negate_weights}, "
            f"solver_name={self.solver_name!r})"
        )

    def solver_options(self) -> SolverOptions:
        """
        Options to pass to a :class:`SolverPort`.
        """
        return SolverOptions(
            max_seconds=self.max_time_s,
            solver_name=self.solver_name,
            verbose=self.solver_verbose,
        )
