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
"""Pursuit coordination: which agents may chase the ball this tick.

Teammates are ranked by distance to the ball. Equal distances go to whichever
agent appears first in the team roster, so a rank is unique and at most
``cap`` agents ever rank inside the cap.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

from pitchmind.engine.role_catalog import is_in_preferred_area, preferred_area
from pitchmind.engine.spatial import Vector3

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext


def _rank_against_teammates(agent: "AIAgent", point: Vector3, ctx: "MatchContext") -> Optional[int]:
    """Return how many spawned AI teammates outrank ``agent`` for ``point``.

    Parameters
    ----------
    agent : AIAgent
        Agent being ranked.
    point : Vector3
        Reference point, usually the ball.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Optional[int]
        Number of teammates strictly closer, plus those at the same distance
        that come earlier in the roster; ``None`` when ``agent`` is not spawned.
    """
    my_position = ctx.position_of(agent)
    if my_position is None:
        return None
    my_distance = my_position.distance_to(point)

    rank = 0
    seen_self = False
    for teammate in ctx.state.ai_team(agent.team):
        if teammate is agent:
            seen_self = True
            continue
        position = ctx.position_of(teammate)
        if position is None:
            continue
        distance = position.distance_to(point)
        if distance < my_distance or (distance == my_distance and not seen_self):
            rank += 1
    return rank


def count_closer_teammates(agent: "AIAgent", point: Vector3, ctx: "MatchContext") -> int:
    """Return the number of spawned AI teammates ahead of ``agent`` for ``point``.

    Parameters
    ----------
    agent : AIAgent
        Reference agent.
    point : Vector3
        Reference point.
    ctx : MatchContext
        Match context.

    Returns
    -------
    int
        Teammates ranked ahead; a despawned agent counts the whole roster.
    """
    rank = _rank_against_teammates(agent, point, ctx)
    if rank is None:
        return len(ctx.state.ai_team(agent.team))
    return rank


def is_closest_teammate(agent: "AIAgent", point: Vector3, ctx: "MatchContext") -> bool:
    """Return whether ``agent`` is the single closest AI teammate to ``point``.

    Parameters
    ----------
    agent : AIAgent
        Reference agent.
    point : Vector3
        Reference point.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when no teammate outranks the agent.
    """
    return _rank_against_teammates(agent, point, ctx) == 0


def teammate_has_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether someone else on ``agent``'s team holds the ball.

    Parameters
    ----------
    agent : AIAgent
        Reference agent.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` for a teammate possessor.
    """
    possessor = ctx.state.get_possessor()
    return possessor is not None and possessor is not agent and possessor.team == agent.team


def opponent_has_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether the opposing team holds the ball.

    Parameters
    ----------
    agent : AIAgent
        Reference agent.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` for an opposing possessor.
    """
    possessor = ctx.state.get_possessor()
    return possessor is not None and possessor.team != agent.team


def pursuer_cap(ctx: "MatchContext") -> int:
    """Return how many teammates may chase the ball at once.

    Parameters
    ----------
    ctx : MatchContext
        Match context.

    Returns
    -------
    int
        Baseline cap, raised while the ball is stationary.
    """
    cfg = ctx.config.pursuit
    state = ctx.state
    if not state.is_ball_stationary():
        return cfg.baseline_cap
    duration = state.stationary_duration_ms
    if duration > cfg.very_long_stationary_ms:
        return cfg.very_long_stationary_cap
    if duration > cfg.long_stationary_ms:
        return cfg.long_stationary_cap
    return cfg.stationary_cap


def max_pursuit_distance(role: str, ctx: "MatchContext") -> float:
    """Return how far ``role`` chases, extended for a stationary ball.

    Parameters
    ----------
    role : str
        Role name.
    ctx : MatchContext
        Match context.

    Returns
    -------
    float
        Pursuit distance.
    """
    cfg = ctx.config.pursuit
    distance = cfg.max_distance.get(role, 0.0)
    if ctx.state.is_ball_stationary():
        if ctx.state.stationary_duration_ms > cfg.long_stationary_ms:
            distance *= cfg.long_stationary_extension
        else:
            distance *= cfg.stationary_extension
    return distance


def boundary_proximity(ball_pos: Vector3, ctx: "MatchContext", threshold: float) -> Tuple[bool, bool]:
    """Return whether ``ball_pos`` is near a field edge and whether it is in a corner.

    Parameters
    ----------
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.
    threshold : float
        Distance from an edge that counts as near.

    Returns
    -------
    Tuple[bool, bool]
        ``(near_boundary, in_corner)``.
    """
    pitch = ctx.config.pitch
    near_x = abs(ball_pos.x - pitch.min_x) < threshold or abs(ball_pos.x - pitch.max_x) < threshold
    near_z = abs(ball_pos.z - pitch.min_z) < threshold or abs(ball_pos.z - pitch.max_z) < threshold
    return near_x or near_z, near_x and near_z


def is_ball_stuck(ctx: "MatchContext") -> bool:
    """Return whether the ball is barely moving.

    Parameters
    ----------
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the horizontal ball speed is below the stuck threshold.
    """
    velocity = ctx.ball_velocity()
    if velocity is None:
        return False
    return velocity.horizontal_magnitude() < ctx.config.pursuit.stuck_speed


def is_loose_ball_in_area(agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> bool:
    """Return whether a loose ball is this agent's responsibility.

    Checks, in order: nobody possesses the ball; a stationary ball within
    the stationary reach with fewer than three teammates closer; a stuck
    boundary or corner ball within reach and inside the boundary cap; and
    finally a ball inside the preferred area (or nearest to this agent)
    within the role's pursuit distance.

    Parameters
    ----------
    agent : AIAgent
        Agent evaluating the ball.
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the agent should treat the ball as its loose ball.
    """
    if ctx.state.get_possessor() is not None:
        return False
    my_position = ctx.position_of(agent)
    if my_position is None:
        return False

    cfg = ctx.config.pursuit
    state = ctx.state
    distance = my_position.distance_to(ball_pos)

    if state.is_ball_stationary():
        duration = state.stationary_duration_ms
        reach = cfg.stationary_distance
        if duration > cfg.very_long_stationary_ms:
            reach = cfg.very_long_stationary_distance
        elif duration > cfg.long_stationary_ms:
            reach = cfg.long_stationary_distance
        if count_closer_teammates(agent, ball_pos, ctx) < cfg.stationary_pursuer_cap and distance < reach:
            return True

    near_boundary, in_corner = boundary_proximity(ball_pos, ctx, cfg.boundary_threshold)
    if near_boundary and is_ball_stuck(ctx):
        reach = cfg.corner_distance if in_corner else cfg.boundary_distance
        cap = cfg.corner_pursuer_cap if in_corner else cfg.boundary_pursuer_cap
        if count_closer_teammates(agent, ball_pos, ctx) < cap and distance < reach:
            return True

    in_area = is_in_preferred_area(ball_pos, agent.role, agent.team, ctx.config.pitch)
    relevant = in_area or is_closest_teammate(agent, ball_pos, ctx)
    return relevant and distance < max_pursuit_distance(agent.role, ctx)


def is_too_far_to_chase(agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> bool:
    """Return whether the ball has left the range this agent should cover.

    Parameters
    ----------
    agent : AIAgent
        Agent evaluating the ball.
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``False`` inside the preferred area or for one of the nearest agents
        to a ball near an edge; otherwise compares both the distance from the
        area and the distance from the agent against the allowance.
    """
    pitch = ctx.config.pitch
    if is_in_preferred_area(ball_pos, agent.role, agent.team, pitch):
        return False
    my_position = ctx.position_of(agent)
    if my_position is None:
        return True

    cfg = ctx.config.pursuit
    pursuit_distance = max_pursuit_distance(agent.role, ctx)
    distance_to_ball = my_position.distance_to(ball_pos)
    distance_from_area = preferred_area(agent.role, agent.team, pitch).distance_outside(ball_pos)

    near_boundary, in_corner = boundary_proximity(ball_pos, ctx, cfg.near_edge_band)
    if near_boundary:
        cap = cfg.corner_pursuer_cap if in_corner else cfg.boundary_pursuer_cap
        if count_closer_teammates(agent, ball_pos, ctx) < cap:
            return False

    allowance = pursuit_distance * cfg.too_far_margin
    if in_corner:
        allowance = pursuit_distance * cfg.corner_margin
    elif near_boundary:
        allowance = pursuit_distance * cfg.boundary_margin
    return distance_from_area > allowance or distance_to_ball > allowance


def should_stop_pursuit(agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> bool:
    """Return whether an agent currently chasing the ball should give up.

    Parameters
    ----------
    agent : AIAgent
        Agent evaluating the ball.
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the agent's target is on the ball and the ball is too far.
    """
    target = agent.target_position
    if target is None:
        return False
    pursuing = target.distance_to(ball_pos) < ctx.config.pursuit.pursuing_target_radius
    return pursuing and is_too_far_to_chase(agent, ball_pos, ctx)


def should_pursue(agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> bool:
    """Return whether team coordination lets ``agent`` chase the ball.

    The closest teammate always may. Everyone else needs a distance rank
    inside :func:`pursuer_cap`. Nobody chases a ball a teammate holds.

    Parameters
    ----------
    agent : AIAgent
        Agent evaluating the ball.
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the agent may join the pursuit.
    """
    if teammate_has_ball(agent, ctx):
        return False
    rank = _rank_against_teammates(agent, ball_pos, ctx)
    if rank is None:
        return False
    if rank == 0:
        return True
    return rank < pursuer_cap(ctx)


def is_pursuit_permitted(agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> bool:
    """Return whether ``agent`` may chase a loose ball this tick.

    Parameters
    ----------
    agent : AIAgent
        Agent evaluating the ball.
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        Loose ball in the agent's area and a coordination slot available.
    """
    return is_loose_ball_in_area(agent, ball_pos, ctx) and should_pursue(agent, ball_pos, ctx)
