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
"""Ball prediction, shot detection and save-point geometry.

All functions are pure. Velocities near zero are treated as "not a threat"
and never divided by.
"""
from __future__ import annotations

import math
from typing import Optional

from pitchmind.engine.config import FieldConfig, GoalkeeperConfig, TreeConfig
from pitchmind.engine.spatial import EPSILON, Vector3, attack_direction, clamp


def predict_position(current: Vector3, velocity: Vector3, dt: float) -> Vector3:
    """Linearly extrapolate ``current`` along ``velocity`` for ``dt`` seconds.

    Parameters
    ----------
    current : Vector3
        Current position.
    velocity : Vector3
        Current velocity.
    dt : float
        Horizon in seconds.

    Returns
    -------
    Vector3
        Predicted position.
    """
    return current + velocity * dt


def is_heading_toward_own_goal(
    ball_pos: Vector3,
    ball_vel: Vector3,
    own_goal_line_x: float,
    goal_center_z: float,
    keeper: GoalkeeperConfig,
    pitch: FieldConfig,
) -> bool:
    """Return whether the ball is travelling towards the goal at ``own_goal_line_x``.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    ball_vel : Vector3
        Ball velocity.
    own_goal_line_x : float
        X coordinate of the defended goal line.
    goal_center_z : float
        Lateral centre of the goal.
    keeper : GoalkeeperConfig
        Supplies the velocity threshold and prediction horizon.
    pitch : FieldConfig
        Supplies the field centre and shot band half width.

    Returns
    -------
    bool
        ``True`` when the X velocity points at the line faster than the
        threshold and the short-horizon lateral prediction is inside the band.
    """
    towards_sign = -1.0 if own_goal_line_x < pitch.center_x else 1.0
    moving_towards = ball_vel.x * towards_sign > keeper.threat_min_velocity

    predicted_z = ball_pos.z + ball_vel.z * keeper.threat_horizon
    band = pitch.shot_band_half_width
    in_band = goal_center_z - band <= predicted_z <= goal_center_z + band
    return moving_towards and in_band


def time_to_line(ball_pos: Vector3, ball_vel: Vector3, line_x: float) -> Optional[float]:
    """Return the seconds until the ball crosses ``line_x``.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    ball_vel : Vector3
        Ball velocity.
    line_x : float
        X coordinate of the line.

    Returns
    -------
    Optional[float]
        Signed time to the crossing, or ``None`` when the ball has no X velocity.
    """
    if abs(ball_vel.x) < EPSILON:
        return None
    return (line_x - ball_pos.x) / ball_vel.x


def compute_interception_point(
    ball_pos: Vector3,
    ball_vel: Vector3,
    goal_line_x: float,
    agent_pos: Vector3,
    agent_speed: float,
    team: str,
    pitch: FieldConfig,
    keeper: GoalkeeperConfig,
) -> Optional[Vector3]:
    """Return a reachable save point in front of ``goal_line_x``.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    ball_vel : Vector3
        Ball velocity.
    goal_line_x : float
        Goal line being defended.
    agent_pos : Vector3
        Current position of the defending agent.
    agent_speed : float
        Speed used for the reachability test.
    team : str
        Defending team, which decides which side of the line is "in front".
    pitch : FieldConfig
        Supplies the goal centre and half width.
    keeper : GoalkeeperConfig
        Supplies the time limit and intercept depth.

    Returns
    -------
    Optional[Vector3]
        Save point at the agent's height, or ``None`` when the trajectory is
        not a genuine shot or the point cannot be reached in time.
    """
    arrival = time_to_line(ball_pos, ball_vel, goal_line_x)
    if arrival is None or arrival <= 0 or arrival > keeper.max_time_to_goal:
        return None

    crossing_z = ball_pos.z + ball_vel.z * arrival
    point = Vector3(
        goal_line_x + keeper.intercept_depth * attack_direction(team),
        agent_pos.y,
        clamp(crossing_z, pitch.center_z - pitch.goal_half_width, pitch.center_z + pitch.goal_half_width),
    )
    if agent_pos.distance_to(point) <= agent_speed * arrival:
        return point
    return None


def anticipate_ball_position(ball_pos: Vector3, ball_vel: Vector3, factor: float) -> Vector3:
    """Lead the ball by ``factor`` seconds on the ground plane.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    ball_vel : Vector3
        Ball velocity.
    factor : float
        Seconds of travel to anticipate.

    Returns
    -------
    Vector3
        Anticipated position; height is left unchanged.
    """
    return Vector3(ball_pos.x + ball_vel.x * factor, ball_pos.y, ball_pos.z + ball_vel.z * factor)


def predictive_keeper_position(
    ball_pos: Vector3,
    ball_vel: Vector3,
    team: str,
    own_goal_line_x: float,
    keeper_y: float,
    pitch: FieldConfig,
    keeper: GoalkeeperConfig,
) -> Vector3:
    """Place the keeper off the line towards where the ball is heading.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    ball_vel : Vector3
        Ball velocity.
    team : str
        Keeper's team.
    own_goal_line_x : float
        Defended goal line.
    keeper_y : float
        Height to keep.
    pitch : FieldConfig
        Field geometry.
    keeper : GoalkeeperConfig
        Prediction horizon, depth and weight.

    Returns
    -------
    Vector3
        Target position.
    """
    predicted = predict_position(ball_pos, ball_vel, keeper.predict_horizon)
    center = pitch.center_z
    z = center + (predicted.z - center) * keeper.predict_weight
    return Vector3(
        own_goal_line_x + keeper.predict_depth * attack_direction(team),
        keeper_y,
        clamp(z, center - pitch.goal_half_width, center + pitch.goal_half_width),
    )


def angle_keeper_position(
    ball_pos: Vector3,
    team: str,
    own_goal_line_x: float,
    keeper_y: float,
    pitch: FieldConfig,
    keeper: GoalkeeperConfig,
) -> Vector3:
    """Place the keeper on the line along the ball's angle to goal.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    team : str
        Keeper's team.
    own_goal_line_x : float
        Defended goal line.
    keeper_y : float
        Height to keep.
    pitch : FieldConfig
        Field geometry.
    keeper : GoalkeeperConfig
        Angle depth and scale.

    Returns
    -------
    Vector3
        Target position.
    """
    angle = math.atan2(ball_pos.z - pitch.center_z, ball_pos.x - own_goal_line_x)
    return Vector3(
        own_goal_line_x + keeper.angle_depth * attack_direction(team),
        keeper_y,
        pitch.center_z + math.sin(angle) * keeper.angle_scale,
    )


def anticipation_factor(role: str, ball_speed: float, tree: TreeConfig) -> float:
    """Return how many seconds ahead ``role`` reads a ball at ``ball_speed``.

    Parameters
    ----------
    role : str
        Role name.
    ball_speed : float
        Horizontal ball speed.
    tree : TreeConfig
        Per-role anticipation and speed bands.

    Returns
    -------
    float
        Anticipation in seconds.
    """
    factor = tree.anticipation.get(role, 1.5)
    if ball_speed > tree.fast_ball:
        factor *= tree.fast_boost
    elif ball_speed <= tree.medium_ball:
        factor *= tree.slow_damping
    return factor
