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
"""Decision strategy for the lone striker."""
from __future__ import annotations

from typing import TYPE_CHECKING

from pitchmind.engine.ball_actions import pass_ball, shoot_ball
from pitchmind.engine.pursuit import is_closest_teammate
from pitchmind.engine.role_catalog import STRIKER, get_role_definition, is_in_preferred_area
from pitchmind.engine.spatial import Vector3, goal_target, is_in_attacking_half
from .base import RoleStrategy

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext


class StrikerStrategy(RoleStrategy):
    """Main goal threat: shoots readily, attacks the box and holds high."""

    def __init__(self) -> None:
        super().__init__(STRIKER, "central")

    def decide_with_state(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        has_ball: bool,
        ctx: "MatchContext",
    ) -> bool:
        """Shoot or carry in possession, otherwise make a run or hold high.

        Parameters
        ----------
        agent : AIAgent
            The striker.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Striker position.
        has_ball : bool
            Whether the striker holds the ball.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Always ``True``.
        """
        if has_ball:
            return self.finalise(agent, self.in_possession(agent, my_pos, ctx), ctx)

        target = self.off_ball_position(agent, ball_pos, my_pos, ctx)
        if self.should_chase(agent, ball_pos, my_pos, ctx):
            target = self.anticipated_ball(ball_pos, ctx)
            self._log_decision(agent, ctx, "pursue", x=f"{target.x:.1f}", z=f"{target.z:.1f}")
        return self.finalise(agent, target, ctx)

    def in_possession(self, agent: "AIAgent", my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Shoot inside range, otherwise occasionally pass and drive at goal.

        Parameters
        ----------
        agent : AIAgent
            The striker.
        my_pos : Vector3
            Striker position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Movement target after the action.
        """
        strategy = ctx.config.strategy
        pitch = ctx.config.pitch
        goal = goal_target(agent.team, pitch)
        distance = my_pos.distance_to(goal)
        prime = distance < strategy.striker_prime_range
        decent = distance < strategy.striker_decent_range
        central = abs(my_pos.z - pitch.center_z) < strategy.striker_central_band

        probability = strategy.striker_shot_base
        if prime:
            probability += strategy.striker_shot_prime_bonus
        if central:
            probability += strategy.striker_shot_central_bonus

        if (prime or (decent and central)) and ctx.rng.random() < probability:
            power = (
                strategy.striker_long_power
                if distance > strategy.striker_long_distance
                else strategy.striker_short_power
            )
            shoot_ball(agent, self.shot_target(agent, ctx, strategy.striker_shot_spread), power, ctx)
            return Vector3(my_pos.x - self.forward_sign(agent) * strategy.striker_recoil, my_pos.y, my_pos.z)

        if ctx.rng.random() < strategy.striker_pass_probability:
            pass_ball(agent, ctx)
        else:
            self._log_decision(agent, ctx, "dribble")
        pull = strategy.striker_centralising
        return Vector3(goal.x, my_pos.y, my_pos.z * (1 - pull) + pitch.center_z * pull)

    def off_ball_position(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Return the run or holding position without the ball.

        Parameters
        ----------
        agent : AIAgent
            The striker.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Striker position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Off-ball target.
        """
        strategy = ctx.config.strategy
        pitch = ctx.config.pitch
        direction = self.forward_sign(agent)
        cz = pitch.center_z
        goal_line = self.opponent_goal_line(agent, ctx)

        if is_in_attacking_half(agent.team, ball_pos.x, pitch):
            if abs(ball_pos.z - cz) > strategy.striker_cross_width:
                far_post = cz - strategy.striker_far_post if ball_pos.z > cz else cz + strategy.striker_far_post
                self._log_decision(agent, ctx, "far_post")
                return Vector3(goal_line - direction * strategy.striker_box_depth, my_pos.y, far_post)
            run_x = ball_pos.x + direction * strategy.striker_run_ahead
            limit = goal_line - direction * strategy.striker_line_gap
            if (run_x - limit) * direction > 0:
                run_x = limit
            lateral = strategy.striker_run_lateral if ctx.rng.random() > 0.5 else -strategy.striker_run_lateral
            return Vector3(run_x, my_pos.y, cz + lateral)

        if self.teammate_has_ball(agent, ctx):
            carrier = ctx.position_of(ctx.state.get_possessor())
            if carrier is not None:
                lateral = strategy.striker_support_lateral if ctx.rng.random() > 0.5 else -strategy.striker_support_lateral
                return Vector3((goal_line + carrier.x) / 2, my_pos.y, cz + lateral)

        anchor = self.anchor(agent, ctx)
        follow = strategy.striker_hold_follow / ctx.config.pursuit.recovery_multiplier[agent.role]
        return Vector3(
            anchor.x + (ball_pos.x - anchor.x) * follow,
            my_pos.y,
            anchor.z + (ball_pos.z - anchor.z) * follow,
        )

    def should_chase(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> bool:
        """Return whether the striker presses the ball.

        The random draw only applies while the ball is inside the striker's
        preferred area.

        Parameters
        ----------
        agent : AIAgent
            The striker.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Striker position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` to chase.
        """
        strategy = ctx.config.strategy
        pursuit = ctx.config.pursuit
        pitch = ctx.config.pitch

        bonus = 0.0
        if abs(ball_pos.x - self.opponent_goal_line(agent, ctx)) < pitch.forward_offset_x:
            bonus += strategy.striker_third_bonus
        if abs(ball_pos.z - pitch.center_z) < strategy.striker_center_band:
            bonus += strategy.striker_center_bonus
        if is_closest_teammate(agent, ball_pos, ctx):
            bonus += strategy.striker_closest_bonus
        recovery = get_role_definition(agent.role).position_recovery_speed * pursuit.recovery_multiplier[agent.role]
        probability = min(strategy.striker_probability_cap, pursuit.probability[agent.role] * (1 - recovery) + bonus)
        if not is_in_preferred_area(ball_pos, agent.role, agent.team, pitch):
            probability = 0.0
        return self.wants_pursuit(agent, ball_pos, my_pos, probability, ctx)
