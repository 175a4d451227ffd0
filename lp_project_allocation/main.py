#!/usr/bin/env python

"""
lp_project_allocation/main.py

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

Command-line entry point.

"""

import argparse
import logging
import os
import sys
import traceback
from typing import Any, List, Optional, Tuple

from cardinal_pythonlib.argparse_func import (
    RawDescriptionArgumentDefaultsHelpFormatter,
)
from cardinal_pythonlib.cmdline import cmdline_quote
from cardinal_pythonlib.logs import main_only_quicksetup_rootlogger
from openpyxl.reader.excel import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from lp_project_allocation.config import Config
from lp_project_allocation.constants import (
    DEFAULT_MAX_CAPACITY,
    DEFAULT_MAX_SECONDS,
    DEFAULT_MIN_CAPACITY,
    DEFAULT_SOLVER_NAME,
    EXIT_FAILURE,
    EXIT_SUCCESS,
    EXT_XLSX,
    INPUT_TYPES_SUPPORTED,
    OUTPUT_TYPES_SUPPORTED,
    SheetHeadings,
    SheetNames,
    SOLVER_NAMES,
)
from lp_project_allocation.errors import AllocationError
from lp_project_allocation.helperfunc import mismatch, read_until_empty_row
from lp_project_allocation.lp_format import write_lp
from lp_project_allocation.pipeline import compile_problem, solve_problem
from lp_project_allocation.project import CapacityLimit
from lp_project_allocation.solver import MipSolver

log = logging.getLogger(__name__)


# =============================================================================
# Read data
# =============================================================================


def header_width(header: List[Any]) -> int:
    """
    Number of columns up to and including the last non-blank header cell.
    """
    width = 0
    for i, value in enumerate(header):
        if value is not None and str(value).strip():
            width = i + 1
    return width


def project_titles_from_header(header: List[Any],
                               n_columns: int) -> List[str]:
    """
    Project titles from header columns 1 to ``n_columns - 1``. A blank title
    becomes ``Project <index>`` (with a zero-based project index).
    """
    titles = []  # type: List[str]
    for col in range(1, n_columns):
        value = header[col] if col < len(header) else None
        title = str(value).strip() if value is not None else ""
        if not title:
            title = f"Project {col - 1}"
            log.warning(
                f"Blank project title in header column {col + 1}; "
                f"using {title!r}"
            )
        titles.append(title)
    return titles


def read_xlsx(
    filename: str,
    default_min: float = DEFAULT_MIN_CAPACITY,
    default_max: Optional[float] = DEFAULT_MAX_CAPACITY,
) -> Tuple[List[List[Any]], int, List[CapacityLimit], List[str]]:
    """
    Reads raw preference rows and capacity limits from an Excel XLSX file.

    Returns:
        tuple: ``rows, n_columns, limits, project_titles``, where ``rows``
        excludes the header row.
    """
    log.info(f"Reading XLSX file: {filename}")
    wb = load_workbook(
        filename,
        read_only=True,
        keep_vba=False,
        data_only=True,
        keep_links=False,
    )

    # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
    # Preferences
    # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
    log.info("... reading preferences...")
    # This will raise an error if the named sheet does not exist:
    ws_prefs = wb[SheetNames.PREFERENCES]  # type: Worksheet
    pref_rows = read_until_empty_row(ws_prefs)
    assert pref_rows, f"Sheet {SheetNames.PREFERENCES} is empty"
    n_columns = header_width(pref_rows[0])
    project_titles = project_titles_from_header(pref_rows[0], n_columns)
    log.info(f"Number of projects: {n_columns - 1}")

    # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
    # Capacities
    # ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
    if SheetNames.CAPACITIES in wb.sheetnames:
        log.info("... reading capacities...")
        cap_rows = read_until_empty_row(wb[SheetNames.CAPACITIES])
        expected_headings = [
            SheetHeadings.PROJECT,
            SheetHeadings.MIN_NUMBER_OF_STUDENTS,
            SheetHeadings.MAX_NUMBER_OF_STUDENTS,
        ]
        obtained_headings = cap_rows[0][:3] if cap_rows else []
        assert obtained_headings == expected_headings, (
            f"Bad headings to worksheet {SheetNames.CAPACITIES}; expected "
            f"{expected_headings!r}, got {obtained_headings!r}"
        )
        cap_titles = [str(row[0]).strip() for row in cap_rows[1:]]
        assert cap_titles == project_titles, (
            f"First column of {SheetNames.CAPACITIES} sheet must contain all "
            f"project names in the same order as the first row of the "
            f"{SheetNames.PREFERENCES} sheet. Mismatch is: "
            f"{mismatch(cap_titles, project_titles)}"
        )
        limits = [
            CapacityLimit(
                min=row[1] if len(row) > 1 else None,
                max=row[2] if len(row) > 2 else None,
            )
            for row in cap_rows[1:]
        ]
    else:
        log.info(
            f"No {SheetNames.CAPACITIES} sheet; using min={default_min}, "
            f"max={default_max} for every project"
        )
        limits = [
            CapacityLimit(min=default_min, max=default_max)
            for _ in project_titles
        ]

    wb.close()
    log.info("... finished reading")
    return pref_rows[1:], n_columns, limits, project_titles


# =============================================================================
# main
# =============================================================================


def main() -> None:
    """
    Command-line entry point.
    """
    # noinspection PyTypeChecker
    parser = argparse.ArgumentParser(
        formatter_class=RawDescriptionArgumentDefaultsHelpFormatter,
        description=f"""
Allocate students to projects, minimizing total weight (cost) subject to
project capacity limits, via a binary integer program solved by an external
MIP solver.

The input spreadsheet should have the following format (in each case, the
first row is the title row):

    Sheet name:
        {SheetNames.PREFERENCES}
    Description:
        List of students (one per row) and their weight for each project (one
        per column). Blank or non-numeric weights count as 0. Rows with a
        blank student name are ignored. By default LOW weights are preferred
        (e.g. ranks: 1 = top choice); use --negate if HIGH weights are
        preferred (e.g. scores).
    Format:
        <ignored>       Project One     Project Two     Project Three   ...
        Miss Smith      1               2                               ...
        Mr Jones        2               1               3               ...
        ...             ...             ...             ...             ...

    Sheet name:
        {SheetNames.CAPACITIES}
    Description:
        OPTIONAL sheet with the minimum and maximum number of students per
        project, projects in the same order as the {SheetNames.PREFERENCES}
        columns. Blank minimum means 0; blank maximum means "no maximum". If
        absent, --default_min and --default_max apply to every project.
    Format:
        {SheetHeadings.PROJECT}         {SheetHeadings.MIN_NUMBER_OF_STUDENTS}     {SheetHeadings.MAX_NUMBER_OF_STUDENTS}
        Project One     1               2
        Project Two                     1
        ...             ...             ...

""",  # noqa
    )
    parser.add_argument("--verbose", action="store_true", help="Be verbose")

    file_group = parser.add_argument_group("Files")
    file_group.add_argument(
        "filename",
        type=str,
        help="Spreadsheet filename to read. "
        "Input file types supported: " + str(INPUT_TYPES_SUPPORTED),
    )
    file_group.add_argument(
        "--output",
        type=str,
        help="Optional filename to write output to. "
        "Output types supported: " + str(OUTPUT_TYPES_SUPPORTED),
    )
    file_group.add_argument(
        "--output_student_csv",
        type=str,
        help="Optional filename to write student CSV output to.",
    )
    file_group.add_argument(
        "--output_lp",
        type=str,
        help="Optional filename to write the LP-format model to.",
    )

    data_group = parser.add_argument_group("Data")
    data_group.add_argument(
        "--default_min",
        type=float,
        default=DEFAULT_MIN_CAPACITY,
        help=f"Minimum students per project, if there is no "
        f"{SheetNames.CAPACITIES} sheet",
    )
    data_group.add_argument(
        "--default_max",
        type=float,
        default=DEFAULT_MAX_CAPACITY,
        help=f"Maximum students per project, if there is no "
        f"{SheetNames.CAPACITIES} sheet (default: no maximum)",
    )

    method_group = parser.add_argument_group("Method")
    method_group.add_argument(
        "--negate",
        action="store_true",
        help="Prefer HIGH weights (the model minimizes the negated weights).",
    )

    technical_group = parser.add_argument_group("Technicalities")
    technical_group.add_argument(
        "--solver",
        type=str,
        choices=SOLVER_NAMES,
        default=DEFAULT_SOLVER_NAME,
        help="MIP solver backend",
    )
    technical_group.add_argument(
        "--maxtime",
        type=float,
        default=DEFAULT_MAX_SECONDS,
        help="Maximum time (in seconds) to run MIP optimizer for",
    )
    technical_group.add_argument(
        "--debug_model",
        action="store_true",
        help="Report the details of the MIP model before solving.",
    )

    args = parser.parse_args()
    main_only_quicksetup_rootlogger(
        level=logging.DEBUG if args.verbose else logging.INFO
    )

    # Go
    config = Config(
        cmd_args=vars(args),
        debug_model=args.debug_model,
        filename=args.filename,
        max_time_s=args.maxtime,
        negate_weights=args.negate,
        solver_name=args.solver,
        solver_verbose=args.verbose,
    )
    log.info(f"Command: {cmdline_quote(sys.argv)}")
    log.info(f"Config: {config}")

    _, ext = os.path.splitext(config.filename)
    if ext != EXT_XLSX:
        raise ValueError(
            f"Don't know how to read file type {ext!r} "
            f"for {config.filename!r}"
        )
    rows, n_columns, limits, project_titles = read_xlsx(
        config.filename,
        default_min=args.default_min,
        default_max=args.default_max,
    )
    try:
        problem = compile_problem(
            rows,
            n_columns,
            limits,
            project_titles=project_titles,
            negate_weights=config.negate_weights,
        )
    except AllocationError as e:
        log.error(f"Cannot solve: {e}")
        sys.exit(EXIT_FAILURE)
    if args.output:
        log.debug(problem)
    else:
        log.info(problem)
    if args.output_lp:
        write_lp(problem, args.output_lp)

    try:
        solution = solve_problem(problem, MipSolver(), config)
    except AllocationError as e:
        log.error(f"Cannot solve: {e}")
        sys.exit(EXIT_FAILURE)
    if solution:
        if args.output:
            log.debug(solution)
        else:
            log.info(solution)
        if args.output:
            solution.write_data(args.output, problem)
        else:
            log.warning(
                "Output not saved. Specify the --output option for that."
            )
        if args.output_student_csv:
            solution.write_student_csv(args.output_student_csv, problem)
        sys.exit(EXIT_SUCCESS)
    else:
        log.error(f"No solution found! {solution.message}")
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    try:
        main()
    except Exception as _top_level_exception:
        log.critical(str(_top_level_exception))
        log.critical(traceback.format_exc())
        sys.exit(EXIT_FAILURE)
