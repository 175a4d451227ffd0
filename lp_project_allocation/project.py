#!/usr/bin/env python

"""
lp_project_allocation/project.py

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

Project class, and the capacity limits that define projects.

"""

import logging
import math
from typing import Any, Mapping, Optional

from cardinal_pythonlib.reprfunc import auto_repr

from lp_project_allocation.errors import InvalidCapacity

log = logging.getLogger(__name__)


# =============================================================================
# CapacityLimit
# =============================================================================


class CapacityLimit(object):
    """
    A caller's ``{min, max}`` capacity record for one project. A ``max`` of
    ``None`` (or infinity) means "no upper bound"; a ``min`` of ``None`` means
    zero.
    """

    # noinspection PyShadowingBuiltins
    def __init__(self, min: Optional[float] = None,
                 max: Optional[float] = None) -> None:
        self.min = 0 if min is None else min
        self.max = math.inf if max is None else max

    def __repr__(self) -> str:
        return auto_repr(self)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, CapacityLimit)
            and self.min == other.min
            and self.max == other.max
        )

    @classmethod
    def coerce(cls, value: Any) -> "CapacityLimit":
        """
        Accepts a :class:`CapacityLimit`, a mapping with ``min``/``max`` keys,
        or a ``(min, max)`` pair.
        """
        if isinstance(value, CapacityLimit):
            return value
        if isinstance(value, Mapping):
            return cls(min=value.get("min"), max=value.get("max"))
        try:
            lower, upper = value
        except (TypeError, ValueError):
            raise InvalidCapacity(f"Can't interpret capacity limit {value!r}")
        return cls(min=lower, max=upper)


# =============================================================================
# Project
# =============================================================================


class Project(object):
    """
    Simple representation of a project: its position and its capacity.
    """

    def __init__(
        self,
        index: int,
        min_capacity: float = 0,
        max_capacity: float = math.inf,
        title: str = None,
    ) -> None:
        """
        Args:
            index:
                Zero-based position of the project in the capacity list.
            min_capacity:
                Minimum number of students.
            max_capacity:
                Maximum number of students; ``math.inf`` for no maximum.
            title:
                Project name (cosmetic only).

        Raises:
            :exc:`InvalidCapacity` for nonsensical capacities.
        """
        assert index >= 0, "Bad project index"
        for value in (min_capacity, max_capacity):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCapacity(
                    f"Project {index}: capacity {value!r} is not a number"
                )
        if not math.isfinite(min_capacity) or min_capacity < 0:
            raise InvalidCapacity(
                f"Project {index}: invalid minimum capacity {min_capacity!r}; "
                f"must be a finite number >= 0"
            )
        if math.isnan(max_capacity) or min_capacity > max_capacity:
            raise InvalidCapacity(
                f"Project {index}: maximum capacity {max_capacity!r} is less "
                f"than minimum capacity {min_capacity!r}"
            )
        self.index = index
        self.min_capacity = min_capacity
        self.max_capacity = max_capacity
        self.title = title or f"Project {index}"

    @classmethod
    def from_limit(cls, index: int, limit: Any,
                   title: str = None) -> "Project":
        """
        Creates a project from anything :meth:`CapacityLimit.coerce` accepts.
        """
        limit = CapacityLimit.coerce(limit)
        return cls(
            index=index,
            min_capacity=limit.min,
            max_capacity=limit.max,
            title=title,
        )

    def __str__(self) -> str:
        """
        String representation.
        """
        return f"{self.title} (P#{self.index})"

    def __repr__(self) -> str:
        return auto_repr(self)

    def description(self) -> str:
        """
        Describes the project.
        """
        return (
            f"{self} (min {self.min_capacity}, "
            f"max {self.max_capacity} students)"
        )

    def has_lower_bound(self) -> bool:
        """
        Does this project need a minimum-capacity constraint?
        """
        return self.min_capacity > 0

    def has_upper_bound(self) -> bool:
        """
        Does this project need a maximum-capacity constraint?
        """
        return math.isfinite(self.max_capacity)

    def admits(self, n_students: int) -> bool:
        """
        Is this number of students within capacity?
        """
        return self.min_capacity <= n_students <= self.max_capacity
