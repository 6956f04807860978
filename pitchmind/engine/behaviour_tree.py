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
"""Declarative behaviour tree used as the alternative decision system.

Nodes are immutable values: a kind tag, a name, child nodes and, for
leaves, a plain module-level function taking ``(agent, ctx)``. The same tree
is shared by every agent; all state lives on the agent or in the context.

The default tree encodes the priority order attack, defend, position::

    root (selector)
      attack (sequence): has ball -> shoot | pass | dribble
      defend (sequence): opponent has ball -> mark | retrieve | intercept
      position (selector): open space in attacking half | fall back
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from pitchmind.engine.ball_actions import force_pass, lead_point, shoot_ball, space_score
from pitchmind.engine.formation import adjust_position_for_spacing, anchor_for
from pitchmind.engine.interception import anticipation_factor
from pitchmind.engine.pursuit import (
    boundary_proximity,
    count_closer_teammates,
    is_ball_stuck,
    is_closest_teammate,
    opponent_has_ball,
)
from pitchmind.engine.role_catalog import GOALKEEPER, LEFT_BACK, STRIKER, constrain_to_preferred_area, role_family
from pitchmind.engine.spatial import (
    Vector3,
    attack_direction,
    clamp,
    forward_progress,
    goal_target,
    is_in_attacking_half,
    opponent_goal_line_x,
    own_goal_line_x,
)

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext

SELECTOR = "selector"
SEQUENCE = "sequence"
CONDITION = "condition"
ACTION = "action"
NODE_KINDS = (SELECTOR, SEQUENCE, CONDITION, ACTION)

LeafFunction = Callable[["AIAgent", "MatchContext"], bool]


@dataclass(frozen=True)
class BehaviourNode:
    """One node of a behaviour tree.

    Parameters
    ----------
    kind : str
        One of :data:`NODE_KINDS`.
    name : str
        Label used in decision logs.
    children : Tuple[BehaviourNode, ...], optional
        Child nodes of a selector or sequence.
    fn : LeafFunction, optional
        Predicate or effect of a condition or action.
    """

    kind: str
    name: str
    children: Tuple["BehaviourNode", ...] = ()
    fn: Optional[LeafFunction] = None


def selector(name: str, *children: BehaviourNode) -> BehaviourNode:
    """Return a node that succeeds on the first succeeding child.

    Parameters
    ----------
    name : str
        Node label.
    *children : BehaviourNode
        Children in priority order.

    Returns
    -------
    BehaviourNode
        Selector node.
    """
    return BehaviourNode(SELECTOR, name, tuple(children))


def sequence(name: str, *children: BehaviourNode) -> BehaviourNode:
    """Return a node that succeeds only when every child succeeds.

    Parameters
    ----------
    name : str
        Node label.
    *children : BehaviourNode
        Children evaluated in order.

    Returns
    -------
    BehaviourNode
        Sequence node.
    """
    return BehaviourNode(SEQUENCE, name, tuple(children))


def condition(fn: LeafFunction, name: Optional[str] = None) -> BehaviourNode:
    """Wrap a predicate as a leaf.

    Parameters
    ----------
    fn : LeafFunction
        Predicate taking ``(agent, ctx)``.
    name : str, optional
        Label; defaults to the function name.

    Returns
    -------
    BehaviourNode
        Condition node.
    """
    return BehaviourNode(CONDITION, name or fn.__name__, (), fn)


def action(fn: LeafFunction, name: Optional[str] = None) -> BehaviourNode:
    """Wrap an effect as a leaf.

    Parameters
    ----------
    fn : LeafFunction
        Effect taking ``(agent, ctx)``; returns success.
    name : str, optional
        Label; defaults to the function name.

    Returns
    -------
    BehaviourNode
        Action node.
    """
    return BehaviourNode(ACTION, name or fn.__name__, (), fn)


def evaluate(node: BehaviourNode, agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Walk ``node`` for ``agent`` and return whether it succeeded.

    Parameters
    ----------
    node : BehaviourNode
        Root of the (sub)tree.
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        Success of the node.

    Raises
    ------
    ValueError
        If the node kind is unknown or a leaf has no function.
    """
    if node.kind == SELECTOR:
        return any(evaluate(child, agent, ctx) for child in node.children)
    if node.kind == SEQUENCE:
        return all(evaluate(child, agent, ctx) for child in node.children)
    if node.kind in (CONDITION, ACTION):
        if node.fn is None:
            raise ValueError(f"Leaf '{node.name}' has no function")
        result = bool(node.fn(agent, ctx))
        if node.kind == ACTION and result:
            agent.log_decision(node.name, tree="behaviour_tree")
        return result
    raise ValueError(f"Unknown node kind '{node.kind}'. Known kinds: {', '.join(NODE_KINDS)}")


# Conditions ----------------------------------------------------------------


def has_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether ``agent`` is the possessor.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` in possession.
    """
    return ctx.state.get_possessor() is agent


def shooting_range(agent: "AIAgent", ctx: "MatchContext") -> float:
    """Return the stamina-scaled shooting range for ``agent``.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    float
        Range in world units.
    """
    tree = ctx.config.tree
    distance = tree.striker_shooting_range if agent.role == STRIKER else tree.shooting_range
    stamina = agent.stamina_percentage()
    if stamina < tree.low_stamina:
        distance *= tree.low_stamina_range
    elif stamina < tree.moderate_stamina:
        distance *= tree.moderate_stamina_range
    return distance


def in_shooting_range(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether the opponent goal is within shooting range.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when close enough to shoot.
    """
    position = ctx.position_of(agent)
    if position is None:
        return False
    goal = goal_target(agent.team, ctx.config.pitch)
    return position.distance_to(goal) < shooting_range(agent, ctx)


def teammate_better_positioned(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether an AI teammate ahead is noticeably closer to goal.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a pass forward is worth considering.
    """
    position = ctx.position_of(agent)
    if position is None:
        return False
    goal = goal_target(agent.team, ctx.config.pitch)
    my_distance = position.distance_to(goal)
    factor = ctx.config.tree.better_positioned_factor
    for teammate in ctx.state.ai_teammates(agent):
        other = ctx.position_of(teammate)
        if other is None or forward_progress(agent.team, position, other) <= 0:
            continue
        if other.distance_to(goal) < my_distance * factor:
            return True
    return False


def closest_to_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether ``agent`` is the closest AI teammate to the ball.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` for the closest teammate.
    """
    ball_pos = ctx.ball_position()
    if ball_pos is None:
        return False
    return is_closest_teammate(agent, ball_pos, ctx)


def ball_stuck_near_boundary(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether a stuck boundary ball should be retrieved by ``agent``.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` for a slow ball near an edge with ``agent`` among the two
        closest teammates and within retrieval distance.
    """
    ball_pos = ctx.ball_position()
    position = ctx.position_of(agent)
    if ball_pos is None or position is None:
        return False
    cfg = ctx.config.pursuit
    near_boundary, in_corner = boundary_proximity(ball_pos, ctx, cfg.boundary_threshold)
    if not near_boundary or not is_ball_stuck(ctx):
        return False
    reach = cfg.corner_distance if in_corner else cfg.boundary_distance
    return count_closer_teammates(agent, ball_pos, ctx) < cfg.baseline_cap and position.distance_to(ball_pos) < reach


def ball_within_intercept_reach(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether the ball is within the role's intercept reach.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when close enough to intercept.
    """
    ball_pos = ctx.ball_position()
    position = ctx.position_of(agent)
    if ball_pos is None or position is None:
        return False
    reach = ctx.config.tree.intercept_reach.get(agent.role, 5.0)
    return position.distance_to(ball_pos) < reach


def ball_in_attacking_half(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Return whether the ball is in the half ``agent`` attacks.

    Parameters
    ----------
    agent : AIAgent
        Agent deciding.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` in the attacking half.
    """
    ball_pos = ctx.ball_position()
    if ball_pos is None:
        return False
    return is_in_attacking_half(agent.team, ball_pos.x, ctx.config.pitch)


# Actions -------------------------------------------------------------------


def shoot_at_goal(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Shoot at the centre of the opponent goal.

    Parameters
    ----------
    agent : AIAgent
        Shooter.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when the shot was taken.
    """
    target = goal_target(agent.team, ctx.config.pitch)
    return shoot_ball(agent, target, ctx.config.tree.shot_power, ctx)


def pass_forward(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Pass to the best teammate ahead, humans strongly preferred.

    Parameters
    ----------
    agent : AIAgent
        Passer.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a pass was made.
    """
    position = ctx.position_of(agent)
    if position is None:
        return False
    tree = ctx.config.tree
    goal = goal_target(agent.team, ctx.config.pitch)

    best = None
    best_position: Optional[Vector3] = None
    best_score = float("-inf")
    for teammate in ctx.teammates(agent):
        other = ctx.position_of(teammate)
        if other is None or position.distance_to(other) < tree.pass_min_distance:
            continue
        progress = forward_progress(agent.team, position, other)
        if progress < tree.pass_min_progress:
            continue
        score = (
            (50 - other.distance_to(goal))
            + progress * 2
            + space_score(other, agent, ctx)
            + ctx.rng.random() * tree.pass_random
        )
        if not teammate.is_ai:
            score += tree.human_bonus
        if score > best_score:
            best, best_position, best_score = teammate, other, score

    if best is None or best_position is None:
        return False
    target = best_position.copy()
    if position.horizontal_distance_to(best_position) > 0.1:
        target = lead_point(position, best_position, tree.pass_lead)
    return force_pass(agent, best, target, 1.0, ctx)


def dribble_forward(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Run at the opponent goal line with a little lateral randomness.

    Parameters
    ----------
    agent : AIAgent
        Ball carrier.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a target was set.
    """
    position = ctx.position_of(agent)
    if position is None:
        return False
    lateral = (ctx.rng.random() * 2 - 1) * ctx.config.tree.dribble_lateral
    agent.target_position = Vector3(
        opponent_goal_line_x(agent.team, ctx.config.pitch),
        position.y,
        position.z + lateral,
    )
    return True


def mark_carrier(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Stand goal-side of the opposing carrier.

    Parameters
    ----------
    agent : AIAgent
        Marker.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a target was set.
    """
    carrier = ctx.state.get_possessor()
    position = ctx.position_of(agent)
    if carrier is None or carrier.team == agent.team or position is None:
        return False
    carrier_position = ctx.position_of(carrier)
    if carrier_position is None:
        return False
    offset = ctx.config.tree.mark_goal_side * attack_direction(agent.team)
    agent.target_position = Vector3(carrier_position.x - offset, position.y, carrier_position.z)
    return True


def retrieve_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Head straight for the ball.

    Parameters
    ----------
    agent : AIAgent
        Retriever.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a target was set.
    """
    ball_pos = ctx.ball_position()
    position = ctx.position_of(agent)
    if ball_pos is None or position is None:
        return False
    agent.target_position = Vector3(ball_pos.x, position.y, ball_pos.z)
    return True


def intercept_ball(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Move to where the ball will be, cutting the lane near an opponent.

    Parameters
    ----------
    agent : AIAgent
        Interceptor.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a target was set.
    """
    ball_pos = ctx.ball_position()
    ball_vel = ctx.ball_velocity()
    position = ctx.position_of(agent)
    if ball_pos is None or ball_vel is None or position is None:
        return False
    tree = ctx.config.tree
    pitch = ctx.config.pitch

    if abs(ball_vel.x) > tree.moving_threshold or abs(ball_vel.z) > tree.moving_threshold:
        factor = anticipation_factor(agent.role, ball_vel.horizontal_magnitude(), tree)
        y = ball_pos.y if ball_pos.y > tree.airborne_height else position.y
        target = Vector3(ball_pos.x + ball_vel.x * factor, y, ball_pos.z + ball_vel.z * factor)
        if agent.role == GOALKEEPER:
            direction = attack_direction(agent.team)
            limit = own_goal_line_x(agent.team, pitch) + tree.keeper_intercept_depth * direction
            x = min(target.x, limit) if direction > 0 else max(target.x, limit)
            z = clamp(target.z, pitch.center_z - pitch.goal_mouth_width, pitch.center_z + pitch.goal_mouth_width)
            target = Vector3(x, target.y, z)
    else:
        lead = tree.striker_lead * attack_direction(agent.team) if agent.role == STRIKER else 0.0
        target = Vector3(ball_pos.x + lead, position.y, ball_pos.z)

    nearest = None
    nearest_distance = float("inf")
    for opponent in ctx.opponents(agent):
        other = ctx.position_of(opponent)
        if other is None:
            continue
        distance = target.distance_to(other)
        if distance < nearest_distance:
            nearest, nearest_distance = other, distance
    if nearest is not None and nearest_distance < tree.lane_cut_radius:
        to_opponent = Vector3(nearest.x - ball_pos.x, 0.0, nearest.z - ball_pos.z).normalize()
        target = Vector3(ball_pos.x - to_opponent.z, position.y, ball_pos.z + to_opponent.x)

    agent.target_position = target
    return True


def _open_space_x(agent: "AIAgent", base: Vector3, ball_pos: Vector3, ball_vel: Vector3, ctx: "MatchContext") -> float:
    """Return the depth of ``agent``'s open-space run.

    Parameters
    ----------
    agent : AIAgent
        Agent positioning.
    base : Vector3
        Formation anchor.
    ball_pos : Vector3
        Ball position.
    ball_vel : Vector3
        Ball velocity.
    ctx : MatchContext
        Match context.

    Returns
    -------
    float
        Target x coordinate.
    """
    tree = ctx.config.tree
    pitch = ctx.config.pitch
    direction = attack_direction(agent.team)
    family = role_family(agent.role)
    if family == "back":
        if is_in_attacking_half(agent.team, ball_pos.x, pitch):
            return base.x + tree.back_advance * direction
        return base.x
    if family == "midfielder":
        midpoint = (pitch.red_goal_line_x + pitch.blue_goal_line_x) / 2
        return base.x + (ball_pos.x - midpoint) * tree.midfielder_follow * direction
    if family == "striker":
        if ball_vel.x * direction > 0:
            return base.x + tree.striker_run * direction
        return base.x - tree.striker_run * direction
    return base.x


def move_to_open_space(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Take up an attacking position shifted towards the ball's side.

    Parameters
    ----------
    agent : AIAgent
        Agent positioning.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a target was set.
    """
    ball_pos = ctx.ball_position()
    ball_vel = ctx.ball_velocity()
    position = ctx.position_of(agent)
    if ball_pos is None or ball_vel is None or position is None:
        return False
    tree = ctx.config.tree
    pitch = ctx.config.pitch
    base = anchor_for(agent, ctx)

    if role_family(agent.role) == "back":
        ball_on_left = ball_pos.z <= pitch.center_z
        same_side = ball_on_left == (agent.role == LEFT_BACK)
        overload = tree.back_same_side_overload if same_side else tree.back_far_side_overload
    else:
        overload = tree.overload.get(agent.role, 0.4)

    x = _open_space_x(agent, base, ball_pos, ball_vel, ctx)
    z = base.z + (ball_pos.z - pitch.center_z) * overload

    neighbours = [p for p in (ctx.position_of(t) for t in ctx.state.ai_teammates(agent)) if p is not None]
    gap = tree.min_teammate_distance

    def crowded(candidate_z: float) -> bool:
        candidate = Vector3(x, position.y, candidate_z)
        return any(candidate.distance_to(other) < gap for other in neighbours)

    if crowded(z):
        for offset in (-gap, gap, -gap * 1.5, gap * 1.5):
            if not crowded(z + offset):
                z += offset
                break

    margin = tree.open_space_margin
    agent.target_position = Vector3(
        clamp(x, pitch.min_x + margin, pitch.max_x - margin),
        position.y,
        clamp(z, pitch.min_z + margin, pitch.max_z - margin),
    )
    return True


def fall_back(agent: "AIAgent", ctx: "MatchContext") -> bool:
    """Retreat to a defensive spot for the role.

    Parameters
    ----------
    agent : AIAgent
        Agent positioning.
    ctx : MatchContext
        Match context.

    Returns
    -------
    bool
        ``True`` when a target was set.
    """
    position = ctx.position_of(agent)
    if position is None:
        return False
    tree = ctx.config.tree
    pitch = ctx.config.pitch
    line = own_goal_line_x(agent.team, pitch)
    direction = attack_direction(agent.team)

    if agent.role == GOALKEEPER:
        target = Vector3(line + direction, position.y, pitch.center_z)
    elif role_family(agent.role) == "back":
        side = -1.0 if agent.role == LEFT_BACK else 1.0
        target = Vector3(
            line + tree.fallback_back_depth * direction,
            position.y,
            pitch.center_z + side * tree.fallback_back_width,
        )
    else:
        target = anchor_for(agent, ctx)

    target = constrain_to_preferred_area(target, agent.role, agent.team, pitch)
    agent.target_position = adjust_position_for_spacing(agent, target, ctx)
    return True


def build_behaviour_tree() -> BehaviourNode:
    """Build the default attack, defend and position tree.

    Returns
    -------
    BehaviourNode
        Root selector.
    """
    return selector(
        "root",
        sequence(
            "attack",
            condition(has_ball),
            selector(
                "attack_options",
                sequence("shoot", condition(in_shooting_range), action(shoot_at_goal)),
                sequence("pass", condition(teammate_better_positioned), action(pass_forward)),
                action(dribble_forward),
            ),
        ),
        sequence(
            "defend",
            condition(opponent_has_ball),
            selector(
                "defend_options",
                sequence("mark", condition(closest_to_ball), action(mark_carrier)),
                sequence("retrieve", condition(ball_stuck_near_boundary), action(retrieve_ball)),
                sequence("intercept", condition(ball_within_intercept_reach), action(intercept_ball)),
            ),
        ),
        selector(
            "position",
            sequence("attack_shape", condition(ball_in_attacking_half), action(move_to_open_space)),
            action(fall_back),
        ),
    )


DEFAULT_TREE = build_behaviour_tree()
