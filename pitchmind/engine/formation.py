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
"""Formation keeping: spacing corrections, kickoff shape and support spots."""
from __future__ import annotations

from typing import TYPE_CHECKING

from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    GOALKEEPER,
    LEFT_BACK,
    RIGHT_BACK,
    STRIKER,
    constrain_to_preferred_area,
    formation_anchor,
    get_role_definition,
    role_family,
)
from pitchmind.engine.spatial import Vector3, attack_direction

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext


def _jitter(ctx: "MatchContext") -> float:
    """Return a centred random draw in ``[-0.5, 0.5)``.

    Parameters
    ----------
    ctx : MatchContext
        Supplies the random source.

    Returns
    -------
    float
        Random offset.
    """
    return ctx.rng.random() - 0.5


def anchor_for(agent: "AIAgent", ctx: "MatchContext") -> Vector3:
    """Return ``agent``'s formation anchor.

    Parameters
    ----------
    agent : AIAgent
        Agent to place.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Vector3
        Static formation position.
    """
    return formation_anchor(agent.role, agent.team, ctx.config.pitch, ctx.debugger)


def adjust_position_for_spacing(agent: "AIAgent", point: Vector3, ctx: "MatchContext") -> Vector3:
    """Spread a proposed target away from teammates and back into shape.

    Three corrections are summed: quadratic repulsion from nearby AI
    teammates, a push out of the centre circle and a pull back towards the
    formation anchor once the target strays too far from it. A small jitter
    is added last and the result is clamped to the role box, then the field.

    Parameters
    ----------
    agent : AIAgent
        Agent whose target is adjusted.
    point : Vector3
        Proposed target.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Vector3
        Adjusted target.
    """
    spacing = ctx.config.spacing
    pitch = ctx.config.pitch
    dx = 0.0
    dz = 0.0

    for teammate in ctx.state.ai_teammates(agent):
        position = ctx.position_of(teammate)
        if position is None:
            continue
        distance = point.distance_to(position)
        if distance >= spacing.repulsion_distance:
            continue
        away_x = point.x - position.x
        away_z = point.z - position.z
        length = (away_x * away_x + away_z * away_z) ** 0.5
        if length <= 0.01:
            continue
        scale = spacing.repulsion_strength * (1 - distance / spacing.repulsion_distance) ** 2
        if teammate.role == agent.role:
            scale *= spacing.same_role_multiplier
        if agent.kickoff_active:
            scale *= spacing.kickoff_multiplier
        dx += away_x / length * scale
        dz += away_z / length * scale

    center = Vector3(pitch.center_x, point.y, pitch.center_z)
    center_distance = point.distance_to(center)
    if center_distance < spacing.center_avoidance_radius:
        strength = spacing.center_strength.get(agent.role, 0.3)
        if agent.kickoff_active and role_family(agent.role) in ("midfielder", "striker"):
            strength = max(strength, spacing.kickoff_center_strength)
        away_x = point.x - pitch.center_x
        away_z = point.z - pitch.center_z
        length = (away_x * away_x + away_z * away_z) ** 0.5
        if length > 0.1:
            push = (spacing.center_avoidance_radius - center_distance) / spacing.center_avoidance_radius
            dx += away_x / length * push * strength * spacing.center_push_scale
            dz += away_z / length * push * strength * spacing.center_push_scale

    anchor = anchor_for(agent, ctx)
    if point.distance_to(anchor) > spacing.discipline_threshold:
        back_x = anchor.x - point.x
        back_z = anchor.z - point.z
        length = (back_x * back_x + back_z * back_z) ** 0.5
        if length > 0.1:
            discipline = ctx.config.pursuit.discipline.get(agent.role, 0.5)
            dx += back_x / length * discipline * spacing.discipline_gain
            dz += back_z / length * discipline * spacing.discipline_gain

    base = spacing.kickoff_jitter if agent.kickoff_active else spacing.jitter
    offensive = get_role_definition(agent.role).offensive_contribution
    jitter = (base + offensive / spacing.jitter_offense_divisor) * spacing.jitter_scale
    dx += _jitter(ctx) * jitter
    dz += _jitter(ctx) * jitter

    adjusted = Vector3(point.x + dx, point.y, point.z + dz)
    return constrain_to_preferred_area(adjusted, agent.role, agent.team, pitch)


def kickoff_position(agent: "AIAgent", ctx: "MatchContext") -> Vector3:
    """Return the spot ``agent`` holds until the ball first moves.

    Parameters
    ----------
    agent : AIAgent
        Agent to place.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Vector3
        Constrained and spaced kickoff target.
    """
    kickoff = ctx.config.kickoff
    pitch = ctx.config.pitch
    spacing = ctx.config.spacing
    anchor = anchor_for(agent, ctx)
    direction = attack_direction(agent.team)
    spread = kickoff.spread
    discipline = ctx.config.pursuit.discipline.get(agent.role, 0.5)

    x, z = anchor.x, anchor.z
    center_distance = anchor.distance_to(Vector3(pitch.center_x, anchor.y, pitch.center_z))
    if center_distance < spacing.center_avoidance_radius:
        away_x = anchor.x - pitch.center_x
        away_z = anchor.z - pitch.center_z
        length = (away_x * away_x + away_z * away_z) ** 0.5
        if length > 0.1:
            push = (spacing.center_avoidance_radius - center_distance) / spacing.center_avoidance_radius
            x += away_x / length * push * kickoff.center_push
            z += away_z / length * push * kickoff.center_push

    # Outfield players drop goal-side of their anchors.
    family = role_family(agent.role)
    if agent.role == GOALKEEPER:
        x, z = anchor.x, anchor.z
    elif family == "midfielder":
        side = -1.0 if agent.role == CENTRAL_MIDFIELDER_1 else 1.0
        z += side * kickoff.midfielder_lateral * spread * discipline
        x -= direction * kickoff.midfielder_depth * spread
    elif agent.role == STRIKER:
        x -= direction * kickoff.striker_depth * spread
        z += _jitter(ctx) * 2 * kickoff.striker_lateral_jitter
    elif agent.role in (LEFT_BACK, RIGHT_BACK):
        side = -1.0 if agent.role == LEFT_BACK else 1.0
        x -= direction * kickoff.back_depth * spread
        z += side * kickoff.back_width * spread * discipline

    variation = (1.0 - kickoff.discipline) * kickoff.random_offset_scale
    x += _jitter(ctx) * variation
    z += _jitter(ctx) * variation

    target = constrain_to_preferred_area(Vector3(x, anchor.y, z), agent.role, agent.team, pitch)
    return adjust_position_for_spacing(agent, target, ctx)


def support_position(agent: "AIAgent", ctx: "MatchContext") -> Vector3:
    """Return a passing-option spot for ``agent`` near a teammate carrier.

    Parameters
    ----------
    agent : AIAgent
        Supporting agent.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Vector3
        Spaced support target built from the formation anchor.
    """
    kickoff = ctx.config.kickoff
    anchor = anchor_for(agent, ctx)
    direction = attack_direction(agent.team)
    family = role_family(agent.role)

    x, z = anchor.x, anchor.z
    if agent.role == STRIKER:
        x += direction * kickoff.striker_support_forward
        z += kickoff.striker_support_lateral if ctx.rng.random() > 0.5 else -kickoff.striker_support_lateral
    elif family == "midfielder":
        side = -1.0 if agent.role == CENTRAL_MIDFIELDER_1 else 1.0
        x += direction * kickoff.midfielder_support_forward
        z += side * kickoff.midfielder_support_lateral
    elif family == "back":
        x += direction * kickoff.back_support_forward

    return adjust_position_for_spacing(agent, Vector3(x, anchor.y, z), ctx)


def restart_hold_position(agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> Vector3:
    """Return where a restart taker waits when no pass is on.

    Parameters
    ----------
    agent : AIAgent
        Restart taker.
    ball_pos : Vector3
        Ball position.
    ctx : MatchContext
        Match context.

    Returns
    -------
    Vector3
        Point just behind the ball with a little lateral variation.
    """
    offset = ctx.config.kickoff.restart_hold_offset
    return Vector3(
        ball_pos.x - attack_direction(agent.team) * offset,
        ball_pos.y,
        ball_pos.z + _jitter(ctx) * 2 * offset,
    )
