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
"""Decision strategies for the two full-backs."""
from __future__ import annotations

from typing import TYPE_CHECKING

from pitchmind.engine.ball_actions import pass_ball
from pitchmind.engine.pursuit import is_closest_teammate
from pitchmind.engine.role_catalog import LEFT_BACK, RIGHT_BACK, get_role_definition
from pitchmind.engine.spatial import Vector3, clamp, is_in_attacking_half
from .base import RoleStrategy

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext


class FullBackStrategy(RoleStrategy):
    """Wide defender that holds its flank and supports attacks from behind.

    Parameters
    ----------
    role : str
        Full-back role name.
    side : str
        ``"left"`` for the low-z flank, ``"right"`` for the high-z flank.
    """

    def __init__(self, role: str, side: str) -> None:
        super().__init__(role, side)

    def wide_boundary(self, ctx: "MatchContext") -> float:
        """Return the z of the touchline on this full-back's flank.

        Parameters
        ----------
        ctx : MatchContext
            Match context.

        Returns
        -------
        float
            Wide boundary z.
        """
        pitch = ctx.config.pitch
        return pitch.wide_z_min if self.side == "left" else pitch.wide_z_max

    def base_z(self, ctx: "MatchContext") -> float:
        """Return the default lateral position on the flank.

        Parameters
        ----------
        ctx : MatchContext
            Match context.

        Returns
        -------
        float
            Base z.
        """
        cz = ctx.config.pitch.center_z
        return cz + (self.wide_boundary(ctx) - cz) * ctx.config.strategy.back_pass_width

    def is_on_my_flank(self, ball_pos: Vector3, ctx: "MatchContext") -> bool:
        """Return whether the ball is on this full-back's half of the pitch width.

        Parameters
        ----------
        ball_pos : Vector3
            Ball position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` for a ball on the flank.
        """
        return (ball_pos.z - ctx.config.pitch.center_z) * self.side_sign > 0

    def decide_with_state(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        has_ball: bool,
        ctx: "MatchContext",
    ) -> bool:
        """Pass or carry in possession, otherwise hold the defensive shape.

        Parameters
        ----------
        agent : AIAgent
            The full-back.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Full-back position.
        has_ball : bool
            Whether the full-back holds the ball.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Always ``True``.
        """
        if has_ball:
            target = self.in_possession(agent, my_pos, ctx)
        else:
            target = self.defensive_position(agent, ball_pos, my_pos, ctx)
            if self.should_chase(agent, ball_pos, my_pos, ctx):
                target = self.chase_point(agent, ball_pos, ctx)
                self._log_decision(agent, ctx, "pursue", x=f"{target.x:.1f}", z=f"{target.z:.1f}")
        return self.finalise(agent, target, ctx)

    def in_possession(self, agent: "AIAgent", my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Pass most of the time, otherwise carry the ball up the flank.

        Parameters
        ----------
        agent : AIAgent
            The full-back.
        my_pos : Vector3
            Full-back position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Movement target after the action.
        """
        strategy = ctx.config.strategy
        direction = self.forward_sign(agent)
        base_z = self.base_z(ctx)
        midfield = Vector3(
            self.own_goal_line(agent, ctx) + direction * ctx.config.pitch.midfield_offset_x,
            my_pos.y,
            base_z,
        )
        has_space = my_pos.distance_to(midfield) > strategy.back_min_advance_space

        if ctx.rng.random() < strategy.back_pass_probability or not has_space:
            pass_ball(agent, ctx)
            self._log_decision(agent, ctx, "pass", space=has_space)
            return Vector3(my_pos.x + direction * strategy.back_pass_lead, my_pos.y, base_z)

        goal_line = self.opponent_goal_line(agent, ctx)
        self._log_decision(agent, ctx, "advance")
        return Vector3(my_pos.x + (goal_line - my_pos.x) * strategy.back_advance_fraction, my_pos.y, base_z)

    def defensive_position(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        ctx: "MatchContext",
    ) -> Vector3:
        """Return the shape position for the current ball location.

        Blocks in the defensive third on the own flank, tracks the ball
        with the back line in the own half and provides width behind the
        ball in the opponent half.

        Parameters
        ----------
        agent : AIAgent
            The full-back.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Full-back position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Shape target.
        """
        pitch = ctx.config.pitch
        strategy = ctx.config.strategy
        direction = self.forward_sign(agent)
        line = self.own_goal_line(agent, ctx)
        cz = pitch.center_z
        base_x = line + direction * pitch.defensive_offset_x
        in_defensive_third = abs(ball_pos.x - line) < pitch.defensive_offset_x

        if in_defensive_third and self.is_on_my_flank(ball_pos, ctx):
            x = ball_pos.x - direction * strategy.back_block_offset
            if (x - base_x) * direction > 0:
                x = base_x
            z = ball_pos.z + (cz - ball_pos.z) * strategy.back_center_shift
            self._log_decision(agent, ctx, "block")
            return Vector3(x, my_pos.y, z)

        if not is_in_attacking_half(agent.team, ball_pos.x, pitch):
            recovery = ctx.config.pursuit.recovery_multiplier[agent.role]
            tracking_z = cz + (ball_pos.z - cz) * (strategy.back_tracking / recovery)
            wide = self.wide_boundary(ctx)
            base_z = self.base_z(ctx)
            z = clamp(tracking_z, min(wide, base_z), max(wide, base_z))
            x = base_x + (ball_pos.x - base_x) * strategy.back_tracking
            if (x - line) * direction < strategy.back_min_depth:
                x = line + direction * strategy.back_min_depth
            return Vector3(x, my_pos.y, z)

        forward_limit = pitch.center_x + direction * pitch.defensive_offset_x
        x = ball_pos.x - direction * strategy.back_support_distance
        x = clamp(x, min(line, forward_limit), max(line, forward_limit))
        lateral = min(strategy.back_lateral_limit, abs(self.wide_boundary(ctx) - cz) - 3)
        return Vector3(x, my_pos.y, cz + self.side_sign * lateral)

    def should_chase(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> bool:
        """Return whether the full-back leaves its shape for the ball.

        Parameters
        ----------
        agent : AIAgent
            The full-back.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Full-back position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` to chase.
        """
        strategy = ctx.config.strategy
        pursuit = ctx.config.pursuit
        line = self.own_goal_line(agent, ctx)
        on_flank = self.is_on_my_flank(ball_pos, ctx)
        in_third = abs(ball_pos.x - line) < ctx.config.pitch.defensive_offset_x

        bonus = 0.0
        if on_flank:
            bonus += strategy.back_flank_bonus
        if in_third:
            bonus += strategy.back_third_bonus
        if is_closest_teammate(agent, ball_pos, ctx):
            bonus += strategy.back_closest_bonus
        recovery = get_role_definition(agent.role).position_recovery_speed * pursuit.recovery_multiplier[agent.role]
        probability = min(
            strategy.back_probability_cap,
            pursuit.probability[agent.role] * (1 - recovery) + bonus,
        )
        return self.wants_pursuit(agent, ball_pos, my_pos, probability, ctx, forced=in_third and on_flank)

    def chase_point(self, agent: "AIAgent", ball_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Return the ball position nudged forward and towards the centre.

        Parameters
        ----------
        agent : AIAgent
            The full-back.
        ball_pos : Vector3
            Ball position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Chase target.
        """
        cz = ctx.config.pitch.center_z
        return Vector3(
            ball_pos.x + self.forward_sign(agent),
            ball_pos.y,
            ball_pos.z + (cz - ball_pos.z) * ctx.config.strategy.back_pursuit_shift,
        )


class LeftBackStrategy(FullBackStrategy):
    """Full-back on the low-z flank."""

    def __init__(self) -> None:
        super().__init__(LEFT_BACK, "left")


class RightBackStrategy(FullBackStrategy):
    """Full-back on the high-z flank."""

    def __init__(self) -> None:
        super().__init__(RIGHT_BACK, "right")
