# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Vector maths and field-relative coordinate helpers.

Everything in this module is stateless. Positions are three dimensional with
Y pointing up; the tactical reasoning happens on the X (length) and Z (width)
axes while Y is carried through for the physics collaborator.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from pitchmind.engine.config import FieldConfig

TEAMS = ("red", "blue")
EPSILON = 1e-6


@dataclass
class Vector3:
    """Three-dimensional vector with the handful of operations the AI needs.

    Parameters
    ----------
    x : float
        Position along the length of the field.
    y : float
        Height above the ground.
    z : float
        Position across the width of the field.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vector3") -> "Vector3":
        """Return the component-wise sum of ``self`` and ``other``."""
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        """Return the component-wise difference ``self - other``."""
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        """Scale every component by ``scalar``."""
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def magnitude(self) -> float:
        """Return the Euclidean length of the vector.

        Returns
        -------
        float
            Length including the vertical component.
        """
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def horizontal_magnitude(self) -> float:
        """Return the length of the vector projected on the ground plane.

        Returns
        -------
        float
            Length of the ``(x, z)`` components.
        """
        return math.sqrt(self.x * self.x + self.z * self.z)

    def normalize(self) -> "Vector3":
        """Return a unit vector pointing in the same direction.

        Returns
        -------
        Vector3
            Normalised vector, or the zero vector when ``self`` is degenerate.
        """
        mag = self.magnitude()
        if mag < EPSILON:
            return Vector3()
        return Vector3(self.x / mag, self.y / mag, self.z / mag)

    def distance_to(self, other: "Vector3") -> float:
        """Return the straight-line distance to ``other``.

        Parameters
        ----------
        other : Vector3
            Point to measure to.

        Returns
        -------
        float
            Three-dimensional distance between the points.
        """
        return (other - self).magnitude()

    def horizontal_distance_to(self, other: "Vector3") -> float:
        """Return the ground-plane distance to ``other``.

        Parameters
        ----------
        other : Vector3
            Point to measure to.

        Returns
        -------
        float
            Distance ignoring the height difference.
        """
        return (other - self).horizontal_magnitude()

    def copy(self) -> "Vector3":
        """Return an independent copy.

        Returns
        -------
        Vector3
            New vector with the same components.
        """
        return Vector3(self.x, self.y, self.z)

    def is_finite(self) -> bool:
        """Return whether every component is a finite number.

        Returns
        -------
        bool
            ``False`` when any component is NaN or infinite.
        """
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)


def validate_team(team: str) -> str:
    """Return ``team`` unchanged or raise when it is not a known side.

    Parameters
    ----------
    team : str
        Team name to check.

    Returns
    -------
    str
        The validated team name.

    Raises
    ------
    ValueError
        If ``team`` is not ``"red"`` or ``"blue"``.
    """
    if team not in TEAMS:
        raise ValueError(f"Unknown team '{team}'. Known teams: {', '.join(TEAMS)}")
    return team


def opponent_team(team: str) -> str:
    """Return the name of the side playing against ``team``.

    Parameters
    ----------
    team : str
        Team name.

    Returns
    -------
    str
        The other team.
    """
    return "blue" if validate_team(team) == "red" else "red"


def attack_direction(team: str) -> float:
    """Return +1 when ``team`` attacks towards positive X and -1 otherwise.

    Parameters
    ----------
    team : str
        Team name.

    Returns
    -------
    float
        Sign of the attacking direction along X.
    """
    return 1.0 if validate_team(team) == "red" else -1.0


def own_goal_line_x(team: str, pitch: FieldConfig) -> float:
    """Return the X coordinate of the goal ``team`` defends.

    Parameters
    ----------
    team : str
        Team name.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    float
        Goal line X coordinate.
    """
    return pitch.red_goal_line_x if validate_team(team) == "red" else pitch.blue_goal_line_x


def opponent_goal_line_x(team: str, pitch: FieldConfig) -> float:
    """Return the X coordinate of the goal ``team`` attacks.

    Parameters
    ----------
    team : str
        Team name.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    float
        Goal line X coordinate.
    """
    return pitch.blue_goal_line_x if validate_team(team) == "red" else pitch.red_goal_line_x


def goal_target(team: str, pitch: FieldConfig) -> Vector3:
    """Return the centre of the goal ``team`` attacks at reference height 1.

    Parameters
    ----------
    team : str
        Attacking team.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    Vector3
        Goal centre point.
    """
    return Vector3(opponent_goal_line_x(team, pitch), 1.0, pitch.center_z)


def field_center(pitch: FieldConfig, y: float = 0.0) -> Vector3:
    """Return the centre spot at height ``y``.

    Parameters
    ----------
    pitch : FieldConfig
        Field geometry.
    y : float, default=0.0
        Height of the returned point.

    Returns
    -------
    Vector3
        Centre spot.
    """
    return Vector3(pitch.center_x, y, pitch.center_z)


def clamp(value: float, low: float, high: float) -> float:
    """Return ``value`` limited to ``[low, high]``.

    Parameters
    ----------
    value : float
        Value to clamp.
    low : float
        Lower bound.
    high : float
        Upper bound.

    Returns
    -------
    float
        Clamped value.
    """
    return max(low, min(high, value))


def clamp_to_field(point: Vector3, pitch: FieldConfig, margin: float = 0.0) -> Vector3:
    """Return ``point`` clamped inside the field, optionally inset by ``margin``.

    Parameters
    ----------
    point : Vector3
        Point to clamp.
    pitch : FieldConfig
        Field geometry.
    margin : float, default=0.0
        Inset applied to the X and Z extents.

    Returns
    -------
    Vector3
        New clamped point; Y is limited to the field's vertical extent.
    """
    return Vector3(
        clamp(point.x, pitch.min_x + margin, pitch.max_x - margin),
        clamp(point.y, pitch.min_y, pitch.max_y),
        clamp(point.z, pitch.min_z + margin, pitch.max_z - margin),
    )


def is_in_attacking_half(team: str, x: float, pitch: FieldConfig) -> bool:
    """Return whether ``x`` lies in the half ``team`` attacks.

    Parameters
    ----------
    team : str
        Team name.
    x : float
        X coordinate to test.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    bool
        ``True`` past the midpoint of the two goal lines.
    """
    midpoint = (pitch.red_goal_line_x + pitch.blue_goal_line_x) / 2.0
    return (x - midpoint) * attack_direction(team) > 0


def forward_progress(team: str, origin: Vector3, point: Vector3) -> float:
    """Return how far ``point`` is ahead of ``origin`` in ``team``'s attacking direction.

    Parameters
    ----------
    team : str
        Team name.
    origin : Vector3
        Reference point.
    point : Vector3
        Point being compared.

    Returns
    -------
    float
        Signed forward distance along X.
    """
    return (point.x - origin.x) * attack_direction(team)
