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
"""Kicking actions shared by the behaviour tree and the role strategies.

Both :func:`shoot_ball` and :func:`force_pass` release possession, apply a
capped impulse with a distance-scaled arc and then keep re-zeroing the ball's
spin for a few hundred milliseconds through the scheduler.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pitchmind.engine.collaborators import Participant
from pitchmind.engine.match_state import participant_label
from pitchmind.engine.role_catalog import GOALKEEPER, STRIKER, role_family
from pitchmind.engine.spatial import Vector3, attack_direction, clamp, forward_progress, is_in_attacking_half, opponent_goal_line_x

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext

ZERO = Vector3()


def _schedule_spin_resets(agent: "AIAgent", count: int, ctx: "MatchContext") -> None:
    """Zero the ball's spin now and ``count`` more times afterwards.

    Parameters
    ----------
    agent : AIAgent
        Kicker; owns the scheduled callbacks.
    count : int
        Number of delayed resets.
    ctx : MatchContext
        Match context.
    """
    ball = ctx.state.get_ball()
    ctx.engine.set_angular_velocity(ball, ZERO)

    def reset_spin() -> None:
        if ctx.is_spawned(ball):
            ctx.engine.set_angular_velocity(ball, ZERO)

    ctx.scheduler.call_repeating(ctx.config.timing.spin_reset_interval_ms, count, reset_spin, owner=agent)


def shoot_ball(agent: "AIAgent", target: Vector3, power: float, ctx: "MatchContext") -> bool:
    """Shoot at ``target``.

    Parameters
    ----------
    agent : AIAgent
        Shooter; must be the current possessor.
    target : Vector3
        Aim point.
    power : float
        Requested power multiplier, capped by configuration.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the shot was taken.
    """
    ball = ctx.state.get_ball()
    if ball is None or ctx.state.get_possessor() is not agent:
        return False
    origin = ctx.position_of(agent)
    if origin is None:
        return False

    kick = ctx.config.kick
    dx = target.x - origin.x
    dz = target.z - origin.z
    horizontal = Vector3(dx, 0.0, dz).horizontal_magnitude()
    arc = horizontal * kick.shot_arc_factor + min(horizontal / kick.long_shot_distance, 1.0) * kick.long_shot_bonus
    direction = Vector3(dx, arc, dz).normalize()
    if direction.magnitude() == 0:
        return False

    ctx.state.set_possessor(None)

    force = min(kick.shot_force * min(power, kick.shot_multiplier_cap), kick.shot_force_cap)
    vertical = min(direction.y * force, kick.shot_vertical_cap)
    ctx.engine.apply_impulse(ball, Vector3(direction.x * force, vertical, direction.z * force))
    _schedule_spin_resets(agent, ctx.config.timing.shot_spin_resets, ctx)

    ctx.engine.play_animation(agent.entity, ["kick"], False)
    agent.drain_stamina(ctx.config.stamina.shot_cost)
    agent.shots += 1
    ctx.log_event(
        "SHOT",
        f"{agent.label} shoots at ({target.x:.1f}, {target.z:.1f}) force={force:.2f} vertical={vertical:.2f}",
    )
    return True


def ensure_target_in_bounds(point: Vector3, ctx: "MatchContext") -> Vector3:
    """Pull a kick target inside the field, biased towards the centre when clamped.

    Parameters
    ----------
    point : Vector3
        Proposed target.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Vector3
        Safe target.
    """
    pitch = ctx.config.pitch
    kick = ctx.config.kick
    x = clamp(point.x, pitch.min_x + kick.bounds_margin, pitch.max_x - kick.bounds_margin)
    z = clamp(point.z, pitch.min_z + kick.bounds_margin, pitch.max_z - kick.bounds_margin)
    if x != point.x or z != point.z:
        bias = kick.center_bias
        return Vector3(
            x * (1 - bias) + pitch.center_x * bias,
            point.y,
            z * (1 - bias) + pitch.center_z * bias,
        )
    return Vector3(x, point.y, z)


def is_pass_direction_safe(origin: Vector3, direction: Vector3, distance: float, ctx: "MatchContext") -> bool:
    """Return whether a pass along ``direction`` stays well inside the field.

    Parameters
    ----------
    origin : Vector3
        Passer position.
    direction : Vector3
        Unit pass direction on the ground plane.
    distance : float
        Pass length.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the landing point is inside the safety margin.
    """
    pitch = ctx.config.pitch
    margin = ctx.config.kick.safety_margin
    x = origin.x + direction.x * distance
    z = origin.z + direction.z * distance
    return pitch.min_x + margin <= x <= pitch.max_x - margin and pitch.min_z + margin <= z <= pitch.max_z - margin


def force_pass(
    agent: "AIAgent",
    receiver: Optional[Participant],
    point: Vector3,
    power: float,
    ctx: "MatchContext",
) -> bool:
    """Kick the ball towards ``point``, optionally aimed at ``receiver``.

    Parameters
    ----------
    agent : AIAgent
        Passer; must be the current possessor.
    receiver : Participant, optional
        Intended receiver, used for logging; ``None`` passes into space.
    point : Vector3
        Target point, corrected to stay in bounds.
    power : float
        Requested power multiplier, capped globally and per role.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the pass was made.
    """
    ball = ctx.state.get_ball()
    if ball is None or ctx.state.get_possessor() is not agent:
        return False

    origin = ctx.position_of(agent)
    if origin is None or not point.is_finite():
        return False

    kick = ctx.config.kick
    safe_target = ensure_target_in_bounds(point, ctx)
    dx = safe_target.x - origin.x
    dz = safe_target.z - origin.z
    horizontal = Vector3(dx, 0.0, dz).horizontal_magnitude()
    raw = Vector3(dx, horizontal * kick.pass_arc_factor, dz)
    if raw.magnitude() < 0.001:
        return False
    direction = raw.normalize()

    agent.possession_start_ms = None
    ctx.state.set_possessor(None)

    multiplier = min(power, kick.pass_multiplier_cap)
    multiplier = min(multiplier, kick.role_pass_caps.get(agent.role, kick.pass_multiplier_cap))
    force = min(kick.pass_force * multiplier, kick.pass_force_cap)
    vertical = min(direction.y * force, kick.pass_vertical_cap)
    ctx.engine.apply_impulse(ball, Vector3(direction.x * force, vertical, direction.z * force))
    _schedule_spin_resets(agent, ctx.config.timing.pass_spin_resets, ctx)

    ctx.engine.play_animation(agent.entity, ["kick"], False)
    agent.drain_stamina(ctx.config.stamina.pass_cost)
    agent.passes += 1
    destination = participant_label(receiver) if receiver is not None else "space"
    ctx.log_event(
        "PASS",
        f"{agent.label} -> {destination} at ({safe_target.x:.1f}, {safe_target.z:.1f}) force={force:.2f}",
    )
    return True


def space_score(point: Vector3, agent: "AIAgent", ctx: "MatchContext") -> float:
    """Return how open ``point`` is from ``agent``'s opponents.

    Parameters
    ----------
    point : Vector3
        Candidate receiver position.
    agent : AIAgent
        Passer, whose opponents are counted.
    ctx : MatchContext
        Match context.

    Returns
    -------
    float
        Starts at 10, loses points per nearby opponent, never negative.
    """
    kick = ctx.config.kick
    score = 10.0
    for opponent in ctx.opponents(agent):
        position = ctx.position_of(opponent)
        if position is None:
            continue
        distance = point.distance_to(position)
        if distance < kick.crowded_radius:
            score -= kick.crowded_penalty
        elif distance < kick.pressured_radius:
            score -= kick.pressured_penalty
    return max(0.0, score)


def _receiver_role_bonus(receiver: Participant, is_forward: bool, ctx: "MatchContext") -> float:
    """Return the role-dependent score for passing to ``receiver``.

    Parameters
    ----------
    receiver : Participant
        Candidate receiver.
    is_forward : bool
        Whether the receiver is ahead of the passer.
    ctx : MatchContext
        Match context.

    Returns
    -------
    float
        Bonus, large for humans and negative for the goalkeeper.
    """
    kick = ctx.config.kick
    if not receiver.is_ai:
        return kick.human_bonus
    if role_family(receiver.role) == "back":
        return kick.forward_back_bonus if is_forward else 0.0
    return kick.role_bonus.get(receiver.role, 0.0)


def pass_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Choose the best receiver and pass, or pass into space ahead.

    Parameters
    ----------
    agent : AIAgent
        Passer; must be the current possessor.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a pass was made.
    """
    if ctx.state.get_ball() is None or ctx.state.get_possessor() is not agent:
        return False
    origin = ctx.position_of(agent)
    if origin is None:
        return False

    pitch = ctx.config.pitch
    kick = ctx.config.kick
    goal_x = opponent_goal_line_x(agent.team, pitch)

    best: Optional[Participant] = None
    best_position: Optional[Vector3] = None
    best_score = float("-inf")
    for teammate in ctx.teammates(agent):
        position = ctx.position_of(teammate)
        if position is None:
            continue
        distance = origin.distance_to(position)
        if distance > kick.pass_range:
            continue

        heading = Vector3(position.x - origin.x, 0.0, position.z - origin.z)
        if heading.horizontal_magnitude() > 0:
            if not is_pass_direction_safe(origin, heading.normalize(), distance, ctx):
                continue

        is_forward = forward_progress(agent.team, origin, position) > 0
        score = (
            (kick.pass_range - min(kick.pass_range, distance))
            + space_score(position, agent, ctx) * 2
            + (kick.forward_bonus if is_forward else 0.0)
            + (20 - min(20.0, abs(position.x - goal_x) / 2))
            + _receiver_role_bonus(teammate, is_forward, ctx)
            + ctx.rng.random() * 2
        )
        if score > best_score:
            best, best_position, best_score = teammate, position, score

    if best is not None and best_position is not None:
        span = origin.horizontal_distance_to(best_position)
        target = lead_point(origin, best_position, min(kick.lead_max, kick.lead_base + span / 10))
        agent.log_decision("pass", receiver=participant_label(best), score=f"{best_score:.1f}")
    else:
        length = kick.generic_pass_distance
        if not is_in_attacking_half(agent.team, origin.x, pitch):
            length = kick.own_half_pass_distance
        target = Vector3(
            origin.x + attack_direction(agent.team) * length,
            origin.y,
            origin.z + (ctx.rng.random() * 2 - 1) * kick.generic_pass_lateral,
        )
        agent.log_decision("pass", receiver="space")

    power = min(kick.power_cap, kick.power_base + origin.distance_to(target) / 50)
    width_x = abs(pitch.max_x - pitch.min_x)
    width_z = abs(pitch.max_z - pitch.min_z)
    if (
        abs(target.x - pitch.center_x) > width_x * kick.edge_fraction
        or abs(target.z - pitch.center_z) > width_z * kick.edge_fraction
    ):
        power *= kick.edge_damping

    return force_pass(agent, best, target, power, ctx)


def lead_point(origin: Vector3, receiver_position: Vector3, lead: float) -> Vector3:
    """Return a point ``lead`` beyond ``receiver_position`` along the pass line.

    Parameters
    ----------
    origin : Vector3
        Passer position.
    receiver_position : Vector3
        Receiver position.
    lead : float
        Distance to lead the receiver by.

    Returns
    -------
    Vector3
        Led target; the receiver's position when the two points coincide.
    """
    heading = Vector3(receiver_position.x - origin.x, 0.0, receiver_position.z - origin.z)
    if heading.horizontal_magnitude() == 0:
        return receiver_position.copy()
    unit = heading.normalize()
    return Vector3(receiver_position.x + unit.x * lead, receiver_position.y, receiver_position.z + unit.z * lead)
