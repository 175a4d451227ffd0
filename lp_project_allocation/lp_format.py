#!/usr/bin/env python

"""
lp_project_allocation/lp_format.py

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

Writes an :class:`AssignmentProblem` in CPLEX LP format, which CBC, Gurobi,
HiGHS, GLPK and others can all read. For example:

.. code-block:: none

    Minimize
     obj: 5 x_0_0 + 3 x_1_1
    Subject To
     student_0: x_0_0 + x_0_1 = 1
     student_1: x_1_0 + x_1_1 = 1
     project_0_max: x_0_0 + x_1_0 <= 1
     project_1_max: x_0_1 + x_1_1 <= 1
    Bounds
     0 <= x_0_0 <= 1
     ...
    Binary
     x_0_0
     ...
    End

Output is deterministic: the same problem always gives the same text.

Coefficients are written exactly, but CBC (and others) read any coefficient of
magnitude 1e20 or more as infinite; the model builder warns about such
weights.

"""

import logging
from typing import Iterable, List, Sequence, Tuple

from lp_project_allocation.constants import LpNames, LpSections
from lp_project_allocation.problem import AssignmentProblem

log = logging.getLogger(__name__)

INDENT = " "
CONTINUATION_INDENT = "   "


# =============================================================================
# Formatting helpers
# =============================================================================


def format_number(x: float) -> str:
    """
    Formats a coefficient or right-hand side. Integral values are written
    without a decimal point; others use Python's shortest round-trip form.
    """
    x = float(x)
    if x.is_integer():
        return str(int(x))
    return repr(x)


def signed_terms(terms: Iterable[Tuple[float, str]]) -> List[str]:
    """
    Converts ``coefficient, variable`` pairs into LP text fragments, e.g.
    ``["5 x_0_0", "- 2.5 x_0_1", "+ x_1_0"]``. Coefficients of 1 are implicit.
    """
    parts = []  # type: List[str]
    for coefficient, variable in terms:
        magnitude = abs(coefficient)
        text = (
            variable
            if magnitude == 1
            else f"{format_number(magnitude)} {variable}"
        )
        if coefficient < 0:
            parts.append(f"- {text}")
        elif parts:
            parts.append(f"+ {text}")
        else:
            parts.append(text)
    return parts


def wrap_row(label: str, parts: Sequence[str], suffix: str = "") -> List[str]:
    """
    Lays out a labelled row, putting at most
    :attr:`LpNames.TERMS_PER_LINE` terms on each line.
    """
    n = LpNames.TERMS_PER_LINE
    chunks = [parts[i:i + n] for i in range(0, len(parts), n)] or [[]]
    lines = []  # type: List[str]
    for i, chunk in enumerate(chunks):
        start = f"{INDENT}{label}: " if i == 0 else CONTINUATION_INDENT
        lines.append(start + " ".join(chunk))
    if suffix:
        lines[-1] += f" {suffix}"
    return lines


# =============================================================================
# Encoder
# =============================================================================


def encode_lp(problem: AssignmentProblem) -> str:
    """
    Returns the LP-format text for a problem.
    """
    lines = []  # type: List[str]

    # Objective
    lines.append(LpSections.MINIMIZE)
    objective_parts = signed_terms(
        (term.coefficient, term.variable) for term in problem.objective
    )
    if not objective_parts:
        objective_parts = ["0"]
    lines += wrap_row(LpNames.OBJECTIVE, objective_parts)

    # Constraints
    lines.append(LpSections.SUBJECT_TO)
    for constraint in problem.constraints:
        parts = signed_terms((1, v) for v in constraint.variables)
        lines += wrap_row(
            constraint.name,
            parts,
            suffix=f"{constraint.sense} {format_number(constraint.rhs)}",
        )

    # Bounds
    variables = problem.variable_names()
    lines.append(LpSections.BOUNDS)
    for v in variables:
        lines.append(f"{INDENT}0 <= {v} <= 1")

    # Binaries
    lines.append(LpSections.BINARY)
    for v in variables:
        lines.append(f"{INDENT}{v}")

    lines.append(LpSections.END)
    return "\n".join(lines) + "\n"


def write_lp(problem: AssignmentProblem, filename: str) -> None:
    """
    Writes the LP-format text for a problem to a file.
    """
    log.info(f"Writing LP model to: {filename}")
    with open(filename, "w") as file:
        file.write(encode_lp(problem))
