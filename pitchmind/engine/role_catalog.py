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
"""Static catalogue of the six AI roles and their field geometry.

Role boxes are stored in role-local coordinates: the goalkeeper's X range is
measured from its own goal line, every other role's from the centre spot along
the attacking direction. Z is always measured from the lateral centre. The
helpers here turn those boxes into world coordinates for a given team.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from pitchmind.engine.config import AIConfig, FieldConfig
from pitchmind.engine.spatial import Vector3, attack_direction, clamp, own_goal_line_x, validate_team

if TYPE_CHECKING:
    from pitchmind.utils.debug import MatchDebugger

GOALKEEPER = "goalkeeper"
LEFT_BACK = "left-back"
RIGHT_BACK = "right-back"
CENTRAL_MIDFIELDER_1 = "central-midfielder-1"
CENTRAL_MIDFIELDER_2 = "central-midfielder-2"
STRIKER = "striker"

ROLES: Tuple[str, ...] = (
    GOALKEEPER,
    LEFT_BACK,
    RIGHT_BACK,
    CENTRAL_MIDFIELDER_1,
    CENTRAL_MIDFIELDER_2,
    STRIKER,
)


@dataclass(frozen=True)
class AreaBox:
    """Axis-aligned rectangle on the ground plane.

    Parameters
    ----------
    min_x : float
        Lower X bound.
    max_x : float
        Upper X bound.
    min_z : float
        Lower Z bound.
    max_z : float
        Upper Z bound.
    """

    min_x: float
    max_x: float
    min_z: float
    max_z: float

    def contains(self, point: Vector3) -> bool:
        """Return whether ``point`` lies inside the box (edges included).

        Parameters
        ----------
        point : Vector3
            Point to test; its height is ignored.

        Returns
        -------
        bool
            ``True`` when both ground coordinates are within bounds.
        """
        return self.min_x <= point.x <= self.max_x and self.min_z <= point.z <= self.max_z

    def distance_outside(self, point: Vector3) -> float:
        """Return the largest per-axis distance from ``point`` to the box.

        Parameters
        ----------
        point : Vector3
            Point to measure.

        Returns
        -------
        float
            Zero inside the box, otherwise the largest axis overshoot.
        """
        return max(
            self.min_x - point.x,
            point.x - self.max_x,
            self.min_z - point.z,
            point.z - self.max_z,
            0.0,
        )


@dataclass(frozen=True)
class RoleDefinition:
    """Descriptive and behavioural parameters of one role.

    Parameters
    ----------
    name : str
        Human-readable role name used in logs.
    description : str
        One-sentence summary of the role.
    primary_duties : Tuple[str, ...]
        Main responsibilities, for logs only.
    defensive_contribution : int
        Defensive focus on a 0-10 scale.
    offensive_contribution : int
        Offensive focus on a 0-10 scale; feeds the spacing jitter.
    preferred_area : AreaBox
        Operating box in role-local coordinates.
    pursuit_tendency : float
        Probability weight for joining a pursuit.
    position_recovery_speed : float
        How quickly the role returns to its anchor.
    support_distance : float
        Preferred distance from a teammate in possession.
    intercept_distance : float
        How far the role moves to intercept passes.
    possession_limit_ms : float
        Longest time the role may hold the ball.
    """

    name: str
    description: str
    primary_duties: Tuple[str, ...]
    defensive_contribution: int
    offensive_contribution: int
    preferred_area: AreaBox
    pursuit_tendency: float
    position_recovery_speed: float
    support_distance: float
    intercept_distance: float
    possession_limit_ms: float


ROLE_DEFINITIONS: Dict[str, RoleDefinition] = {
    GOALKEEPER: RoleDefinition(
        name="Goalkeeper",
        description="Defends the goal, organises the defence and starts counterattacks",
        primary_duties=("Block shots on goal", "Command the defensive line", "Distribute after saves"),
        defensive_contribution=10,
        offensive_contribution=1,
        preferred_area=AreaBox(-12.0, 12.0, -15.0, 9.0),
        pursuit_tendency=0.7,
        position_recovery_speed=1.2,
        support_distance=0.5,
        intercept_distance=18.0,
        possession_limit_ms=3000.0,
    ),
    LEFT_BACK: RoleDefinition(
        name="Left Back",
        description="Defends the left flank and supports attacks down the left",
        primary_duties=("Track the opposing right winger", "Support build-up play", "Provide width in attack"),
        defensive_contribution=8,
        offensive_contribution=5,
        preferred_area=AreaBox(-25.0, 30.0, -30.0, -8.0),
        pursuit_tendency=0.6,
        position_recovery_speed=0.7,
        support_distance=10.0,
        intercept_distance=15.0,
        possession_limit_ms=4000.0,
    ),
    RIGHT_BACK: RoleDefinition(
        name="Right Back",
        description="Defends the right flank and supports attacks down the right",
        primary_duties=("Track the opposing left winger", "Support build-up play", "Provide width in attack"),
        defensive_contribution=8,
        offensive_contribution=5,
        preferred_area=AreaBox(-25.0, 30.0, 2.0, 23.0),
        pursuit_tendency=0.6,
        position_recovery_speed=0.7,
        support_distance=10.0,
        intercept_distance=15.0,
        possession_limit_ms=4000.0,
    ),
    CENTRAL_MIDFIELDER_1: RoleDefinition(
        name="Left Central Midfielder",
        description="Controls the left of central midfield and links defence to attack",
        primary_duties=("Link defence to attack", "Control the centre", "Support both phases"),
        defensive_contribution=6,
        offensive_contribution=7,
        preferred_area=AreaBox(-20.0, 35.0, -20.0, 5.0),
        pursuit_tendency=0.75,
        position_recovery_speed=0.6,
        support_distance=15.0,
        intercept_distance=18.0,
        possession_limit_ms=5000.0,
    ),
    CENTRAL_MIDFIELDER_2: RoleDefinition(
        name="Right Central Midfielder",
        description="Controls the right of central midfield and links defence to attack",
        primary_duties=("Link defence to attack", "Control the centre", "Support both phases"),
        defensive_contribution=6,
        offensive_contribution=7,
        preferred_area=AreaBox(-20.0, 35.0, -11.0, 20.0),
        pursuit_tendency=0.75,
        position_recovery_speed=0.6,
        support_distance=15.0,
        intercept_distance=18.0,
        possession_limit_ms=5000.0,
    ),
    STRIKER: RoleDefinition(
        name="Striker",
        description="Main goal threat who leads the press and creates space",
        primary_duties=("Score goals", "Hold up play", "Press defenders", "Create space for midfielders"),
        defensive_contribution=3,
        offensive_contribution=10,
        preferred_area=AreaBox(-10.0, 45.0, -18.0, 12.0),
        pursuit_tendency=0.85,
        position_recovery_speed=0.5,
        support_distance=15.0,
        intercept_distance=15.0,
        possession_limit_ms=4000.0,
    ),
}

_ROLE_FAMILIES: Dict[str, str] = {
    GOALKEEPER: "goalkeeper",
    LEFT_BACK: "back",
    RIGHT_BACK: "back",
    CENTRAL_MIDFIELDER_1: "midfielder",
    CENTRAL_MIDFIELDER_2: "midfielder",
    STRIKER: "striker",
}


def get_role_definition(role: str) -> RoleDefinition:
    """Return the catalogue entry for ``role``.

    Parameters
    ----------
    role : str
        Role name.

    Returns
    -------
    RoleDefinition
        Static definition of the role.

    Raises
    ------
    ValueError
        If ``role`` is not one of :data:`ROLES`.
    """
    try:
        return ROLE_DEFINITIONS[role]
    except KeyError as exc:
        raise ValueError(f"Unknown role '{role}'. Known roles: {', '.join(ROLES)}") from exc


def role_family(role: str) -> str:
    """Return the broad family of ``role``.

    Parameters
    ----------
    role : str
        Role name.

    Returns
    -------
    str
        One of ``"goalkeeper"``, ``"back"``, ``"midfielder"`` or ``"striker"``.
    """
    get_role_definition(role)
    return _ROLE_FAMILIES[role]


def preferred_area(role: str, team: str, pitch: FieldConfig) -> AreaBox:
    """Return the role's operating box in world coordinates for ``team``.

    Parameters
    ----------
    role : str
        Role name.
    team : str
        Team name.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    AreaBox
        World-space box.
    """
    local = get_role_definition(role).preferred_area
    direction = attack_direction(team)
    origin = own_goal_line_x(team, pitch) if role == GOALKEEPER else pitch.center_x
    x1 = origin + direction * local.min_x
    x2 = origin + direction * local.max_x
    return AreaBox(
        min(x1, x2),
        max(x1, x2),
        pitch.center_z + local.min_z,
        pitch.center_z + local.max_z,
    )


def is_in_preferred_area(point: Vector3, role: str, team: str, pitch: FieldConfig) -> bool:
    """Return whether ``point`` lies in the role's operating box.

    Parameters
    ----------
    point : Vector3
        Point to test.
    role : str
        Role name.
    team : str
        Team name.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    bool
        ``True`` inside the box.
    """
    return preferred_area(role, team, pitch).contains(point)


def constrain_to_preferred_area(point: Vector3, role: str, team: str, pitch: FieldConfig) -> Vector3:
    """Clamp ``point`` to the role box and then to the field.

    The two-stage projection is idempotent: constraining an already
    constrained point returns an equal point.

    Parameters
    ----------
    point : Vector3
        Proposed position.
    role : str
        Role name.
    team : str
        Team name.
    pitch : FieldConfig
        Field geometry.

    Returns
    -------
    Vector3
        Constrained position.
    """
    box = preferred_area(role, team, pitch)
    x = clamp(point.x, box.min_x, box.max_x)
    z = clamp(point.z, box.min_z, box.max_z)
    return Vector3(
        clamp(x, pitch.min_x, pitch.max_x),
        clamp(point.y, pitch.min_y, pitch.max_y),
        clamp(z, pitch.min_z, pitch.max_z),
    )


def formation_anchor(
    role: str,
    team: str,
    pitch: FieldConfig,
    debugger: Optional["MatchDebugger"] = None,
) -> Vector3:
    """Return the static formation position of ``role`` for ``team``.

    Parameters
    ----------
    role : str
        Role name; unknown roles fall back to the midfield centre.
    team : str
        Team name.
    pitch : FieldConfig
        Field geometry.
    debugger : MatchDebugger, optional
        Receives an error entry for unknown roles or non-finite results.

    Returns
    -------
    Vector3
        Anchor position at the safe spawn height.
    """
    validate_team(team)
    line = own_goal_line_x(team, pitch)
    direction = attack_direction(team)
    y = pitch.safe_spawn_y
    cz = pitch.center_z

    if role == GOALKEEPER:
        x, z = line + direction, cz
    elif role == LEFT_BACK:
        x, z = line + pitch.defensive_offset_x * direction, cz + (pitch.wide_z_min - cz) * 0.6
    elif role == RIGHT_BACK:
        x, z = line + pitch.defensive_offset_x * direction, cz + (pitch.wide_z_max - cz) * 0.6
    elif role == CENTRAL_MIDFIELDER_1:
        x, z = line + pitch.midfield_offset_x * direction, cz + (pitch.midfield_z_min - cz) * 0.5
    elif role == CENTRAL_MIDFIELDER_2:
        x, z = line + pitch.midfield_offset_x * direction, cz + (pitch.midfield_z_max - cz) * 0.5
    elif role == STRIKER:
        x, z = line + pitch.forward_offset_x * direction, cz
    else:
        if debugger is not None:
            debugger.log_error("UNKNOWN_ROLE", f"{team} '{role}' has no anchor, using midfield centre")
        x, z = line + pitch.midfield_offset_x * direction, cz

    if not (math.isfinite(x) and math.isfinite(z)):
        if debugger is not None:
            debugger.log_error("NAN_ANCHOR", f"{team} {role} anchor is not finite, using origin")
        return Vector3(0.0, y, 0.0)
    return Vector3(x, y, z)


def possession_limit_ms(role: str, config: AIConfig) -> float:
    """Return how long ``role`` may keep the ball before a forced release.

    Parameters
    ----------
    role : str
        Role name.
    config : AIConfig
        Supplies the default ceiling for roles without one.

    Returns
    -------
    float
        Ceiling in milliseconds.
    """
    definition = ROLE_DEFINITIONS.get(role)
    if definition is None:
        return config.timing.default_possession_limit_ms
    return definition.possession_limit_ms
