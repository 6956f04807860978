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
"""Goalkeeper decision strategy: shot stopping first, distribution second."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pitchmind.engine.ball_actions import ensure_target_in_bounds, force_pass, pass_ball
from pitchmind.engine.interception import (
    angle_keeper_position,
    compute_interception_point,
    is_heading_toward_own_goal,
    predictive_keeper_position,
)
from pitchmind.engine.pursuit import is_closest_teammate, is_too_far_to_chase, should_stop_pursuit
from pitchmind.engine.role_catalog import GOALKEEPER, get_role_definition, possession_limit_ms
from pitchmind.engine.spatial import Vector3, clamp
from .base import RoleStrategy

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext

ZERO = Vector3()


class GoalkeeperStrategy(RoleStrategy):
    """Keeper logic layered by urgency.

    In priority order: rapid response to shots, near interceptions, corner
    retrieval, distribution when holding the ball, penalty-area handling and
    finally predictive or angle positioning on the line.
    """

    def __init__(self) -> None:
        super().__init__(GOALKEEPER, "central")

    def decide_with_state(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        has_ball: bool,
        ctx: "MatchContext",
    ) -> bool:
        """Choose the keeper's target and distribution for this tick.

        Parameters
        ----------
        agent : AIAgent
            The keeper.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Keeper position.
        has_ball : bool
            Whether the keeper holds the ball.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Always ``True`` once the ball and keeper exist.
        """
        keeper = ctx.config.goalkeeper
        pitch = ctx.config.pitch
        ball_vel = ctx.ball_velocity() or ZERO
        speed = ball_vel.horizontal_magnitude()
        line = self.own_goal_line(agent, ctx)
        distance = my_pos.distance_to(ball_pos)
        shot = is_heading_toward_own_goal(ball_pos, ball_vel, line, pitch.center_z, keeper, pitch)

        if shot and speed > keeper.rapid_speed_threshold:
            if self.rapid_response(agent, ball_pos, ball_vel, my_pos, ctx):
                return True

        if speed > keeper.near_intercept_speed and distance < keeper.near_intercept_distance:
            point = compute_interception_point(
                ball_pos, ball_vel, line, my_pos, keeper.reach_speed, agent.team, pitch, keeper
            )
            if point is not None:
                agent.target_position = point
                self._log_decision(agent, ctx, "intercept", x=f"{point.x:.1f}", z=f"{point.z:.1f}")
                return True

        if self._is_own_corner(ball_pos, line, ctx) and is_closest_teammate(agent, ball_pos, ctx):
            if distance < keeper.corner_reach:
                agent.target_position = ball_pos.copy()
                if has_ball:
                    self._distribute_from_corner(agent, my_pos, ctx)
                self._log_decision(agent, ctx, "corner_retrieval", has_ball=has_ball)
                return True

        if has_ball:
            self._distribute(agent, my_pos, ctx)

        radius = pitch.penalty_area_radius
        depth = abs(ball_pos.x - line)
        if depth < radius and distance < radius:
            if self.teammate_has_ball(agent, ctx) or should_stop_pursuit(agent, ball_pos, ctx):
                target = self.line_position(agent, ball_pos, my_pos, ctx)
            else:
                danger = 1 - depth / radius
                tendency = get_role_definition(GOALKEEPER).pursuit_tendency
                come_out = danger > keeper.come_out_threshold or ctx.rng.random() < tendency * danger
                if come_out and not is_too_far_to_chase(agent, ball_pos, ctx):
                    target = ball_pos.copy()
                    self._log_decision(agent, ctx, "come_out", danger=f"{danger:.2f}")
                else:
                    target = self.line_position(agent, ball_pos, my_pos, ctx)
        elif (shot and speed > keeper.rapid_speed_threshold) or (
            speed > keeper.fast_ball_speed and distance < keeper.fast_ball_distance
        ):
            target = predictive_keeper_position(ball_pos, ball_vel, agent.team, line, my_pos.y, pitch, keeper)
        else:
            target = angle_keeper_position(ball_pos, agent.team, line, my_pos.y, pitch, keeper)

        return self.finalise(agent, target, ctx)

    def line_position(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Return a spot just off the line tracking the ball laterally.

        Parameters
        ----------
        agent : AIAgent
            The keeper.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Keeper position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Line-holding target.
        """
        keeper = ctx.config.goalkeeper
        pitch = ctx.config.pitch
        cz = pitch.center_z
        half = pitch.goal_mouth_width / 2
        weight = keeper.line_ball_weight
        z = clamp(ball_pos.z * weight + cz * (1 - weight), cz - half, cz + half)
        return Vector3(self.own_goal_line(agent, ctx) + keeper.angle_depth * self.forward_sign(agent), my_pos.y, z)

    def rapid_response(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        ball_vel: Vector3,
        my_pos: Vector3,
        ctx: "MatchContext",
    ) -> bool:
        """Throw the keeper at a reachable save point.

        Parameters
        ----------
        agent : AIAgent
            The keeper.
        ball_pos : Vector3
            Ball position.
        ball_vel : Vector3
            Ball velocity.
        my_pos : Vector3
            Keeper position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` when a save point was found.
        """
        keeper = ctx.config.goalkeeper
        point = compute_interception_point(
            ball_pos,
            ball_vel,
            self.own_goal_line(agent, ctx),
            my_pos,
            keeper.reach_speed,
            agent.team,
            ctx.config.pitch,
            keeper,
        )
        if point is None:
            return False
        agent.target_position = point

        dx = point.x - my_pos.x
        dz = point.z - my_pos.z
        gap = (dx * dx + dz * dz) ** 0.5
        if gap > keeper.rapid_arrive_radius:
            current = ctx.engine.get_velocity(agent.entity) or ZERO
            ctx.engine.set_linear_velocity(
                agent.entity,
                Vector3(dx / gap * keeper.rapid_velocity, current.y, dz / gap * keeper.rapid_velocity),
            )
            ctx.engine.play_animation(agent.entity, ["kick"], False)

            def stop_dive() -> None:
                if ctx.is_spawned(agent.entity):
                    ctx.engine.stop_animation(agent.entity, ["kick"])

            ctx.scheduler.call_later(ctx.config.timing.keeper_kick_animation_ms, stop_dive, owner=agent)

        self._log_decision(agent, ctx, "rapid_response", x=f"{point.x:.1f}", z=f"{point.z:.1f}")
        return True

    def _is_own_corner(self, ball_pos: Vector3, line: float, ctx: "MatchContext") -> bool:
        """Return whether the ball sits in a corner at the keeper's end.

        Parameters
        ----------
        ball_pos : Vector3
            Ball position.
        line : float
            Keeper's goal line x.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` for a corner ball near the own goal line.
        """
        pitch = ctx.config.pitch
        zone = ctx.config.goalkeeper.corner_zone
        near_end = abs(ball_pos.x - line) < zone
        near_side = abs(ball_pos.z - pitch.min_z) < zone or abs(ball_pos.z - pitch.max_z) < zone
        return near_end and near_side

    def _distribute_from_corner(self, agent: "AIAgent", my_pos: Vector3, ctx: "MatchContext") -> bool:
        """Pass to a central teammate from a corner, or clear to midfield.

        Parameters
        ----------
        agent : AIAgent
            The keeper.
        my_pos : Vector3
            Keeper position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Whether the ball was played.
        """
        keeper = ctx.config.goalkeeper
        pitch = ctx.config.pitch
        best = None
        best_position: Optional[Vector3] = None
        best_score = float("-inf")
        for teammate in ctx.teammates(agent):
            position = ctx.position_of(teammate)
            if position is None:
                continue
            distance = my_pos.distance_to(position)
            if distance < keeper.corner_pass_min or distance > keeper.corner_pass_max:
                continue
            sideline = min(abs(position.z - pitch.min_z), abs(position.z - pitch.max_z))
            if sideline < keeper.sideline_margin:
                continue
            centrality = 15 - min(15.0, abs(position.z - pitch.center_z) / 2)
            score = centrality + (20 - min(20.0, distance / 2))
            if score > best_score:
                best, best_position, best_score = teammate, position, score

        if best is not None and best_position is not None and best_score > keeper.release_score_threshold:
            return force_pass(agent, best, best_position, keeper.clear_power, ctx)
        clearance = Vector3(
            pitch.center_x - self.forward_sign(agent) * keeper.corner_clear_spread,
            my_pos.y,
            pitch.center_z,
        )
        return force_pass(agent, None, ensure_target_in_bounds(clearance, ctx), keeper.clear_power, ctx)

    def _clear_to_midfield(self, agent: "AIAgent", my_pos: Vector3, ctx: "MatchContext") -> bool:
        """Clear to just inside the keeper's half near the centre.

        Parameters
        ----------
        agent : AIAgent
            The keeper.
        my_pos : Vector3
            Keeper position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Whether the ball was played.
        """
        keeper = ctx.config.goalkeeper
        pitch = ctx.config.pitch
        target = Vector3(
            pitch.center_x - self.forward_sign(agent) * ctx.rng.random() * keeper.midfield_jitter_x,
            my_pos.y,
            pitch.center_z + (ctx.rng.random() * 2 - 1) * keeper.midfield_jitter_z,
        )
        return force_pass(agent, None, ensure_target_in_bounds(target, ctx), keeper.clear_power, ctx)

    def _distribute(self, agent: "AIAgent", my_pos: Vector3, ctx: "MatchContext") -> None:
        """Release the ball: clear long after the ceiling, otherwise pass at once.

        Parameters
        ----------
        agent : AIAgent
            The keeper.
        my_pos : Vector3
            Keeper position.
        ctx : MatchContext
            Match context.
        """
        keeper = ctx.config.goalkeeper
        started = agent.possession_start_ms
        held = ctx.now_ms - started if started is not None else 0.0

        if held >= possession_limit_ms(GOALKEEPER, ctx.config):
            target = Vector3(
                my_pos.x + self.forward_sign(agent) * keeper.clear_forward,
                my_pos.y,
                ctx.config.pitch.center_z + (ctx.rng.random() * 2 - 1) * keeper.clear_lateral,
            )
            force_pass(agent, None, target, keeper.clear_power, ctx)
            self._log_decision(agent, ctx, "clear", held_ms=int(held))
        elif ctx.teammates(agent):
            if not pass_ball(agent, ctx):
                self._clear_to_midfield(agent, my_pos, ctx)
            self._log_decision(agent, ctx, "distribute")
        else:
            self._clear_to_midfield(agent, my_pos, ctx)
            self._log_decision(agent, ctx, "clear", reason="no_teammates")
        agent.possession_start_ms = None
