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
"""Decision strategy shared by both central midfielders."""
from __future__ import annotations

from typing import TYPE_CHECKING

from pitchmind.engine.ball_actions import pass_ball, shoot_ball
from pitchmind.engine.pursuit import is_closest_teammate
from pitchmind.engine.role_catalog import CENTRAL_MIDFIELDER_1, CENTRAL_MIDFIELDER_2
from pitchmind.engine.spatial import Vector3, goal_target
from .base import RoleStrategy

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext


class CentralMidfielderStrategy(RoleStrategy):
    """Link player that covers in defence and arrives late in attack.

    Parameters
    ----------
    role : str
        ``central-midfielder-1`` plays left of centre, ``central-midfielder-2`` right.
    """

    def __init__(self, role: str) -> None:
        super().__init__(role, "left" if role == CENTRAL_MIDFIELDER_1 else "right")

    def decide_with_state(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        has_ball: bool,
        ctx: "MatchContext",
    ) -> bool:
        """Shoot, pass or dribble in possession, otherwise pick a phase position.

        Parameters
        ----------
        agent : AIAgent
            The midfielder.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Midfielder position.
        has_ball : bool
            Whether the midfielder holds the ball.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Always ``True``.
        """
        if has_ball:
            return self.finalise(agent, self.in_possession(agent, my_pos, ctx), ctx)

        target = self.phase_position(agent, ball_pos, my_pos, ctx)
        if self.should_chase(agent, ball_pos, my_pos, ctx):
            target = self.anticipated_ball(ball_pos, ctx)
            self._log_decision(agent, ctx, "pursue", x=f"{target.x:.1f}", z=f"{target.z:.1f}")
        return self.finalise(agent, target, ctx)

    def in_possession(self, agent: "AIAgent", my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Shoot from good positions, otherwise usually pass and drive on.

        Parameters
        ----------
        agent : AIAgent
            The midfielder.
        my_pos : Vector3
            Midfielder position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Movement target after the action.
        """
        strategy = ctx.config.strategy
        goal = goal_target(agent.team, ctx.config.pitch)
        distance = my_pos.distance_to(goal)
        prime = distance < strategy.mid_shot_range
        central = abs(my_pos.z - ctx.config.pitch.center_z) < strategy.mid_central_band
        decent = distance < strategy.mid_central_shot_range

        probability = strategy.mid_shot_base
        if prime:
            probability += strategy.mid_shot_close_bonus
        if central:
            probability += strategy.mid_shot_central_bonus

        if (prime or (decent and central)) and ctx.rng.random() < probability:
            shoot_ball(agent, self.shot_target(agent, ctx, strategy.mid_shot_spread), strategy.mid_shot_power, ctx)
            return Vector3(goal.x, my_pos.y, my_pos.z)

        if ctx.rng.random() < strategy.mid_pass_probability:
            pass_ball(agent, ctx)
        else:
            self._log_decision(agent, ctx, "dribble")
        return Vector3(goal.x, my_pos.y, my_pos.z + self.side_sign * strategy.mid_dribble_drift)

    def is_on_my_side(self, ball_pos: Vector3, ctx: "MatchContext") -> bool:
        """Return whether the ball is on this midfielder's side of centre.

        Parameters
        ----------
        ball_pos : Vector3
            Ball position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` for a ball on the preferred side.
        """
        return (ball_pos.z - ctx.config.pitch.center_z) * self.side_sign > 0

    def phase_position(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Return the target for the current phase of play.

        Parameters
        ----------
        agent : AIAgent
            The midfielder.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Midfielder position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Phase target.
        """
        pitch = ctx.config.pitch
        strategy = ctx.config.strategy
        direction = self.forward_sign(agent)
        cz = pitch.center_z
        own_line = self.own_goal_line(agent, ctx)
        goal_line = self.opponent_goal_line(agent, ctx)

        if abs(ball_pos.x - own_line) < pitch.midfield_offset_x:
            if self.is_on_my_side(ball_pos, ctx):
                weight = strategy.mid_track_weight
                return Vector3(
                    own_line + direction * pitch.defensive_offset_x * strategy.mid_cover_depth,
                    my_pos.y,
                    ball_pos.z * weight + cz * (1 - weight),
                )
            return Vector3(
                own_line + direction * pitch.defensive_offset_x * strategy.mid_screen_depth,
                my_pos.y,
                cz + self.side_sign * strategy.mid_screen_lateral,
            )

        possessor = ctx.state.get_possessor()
        if possessor is not None and possessor is not agent and getattr(possessor, "team", None) == agent.team:
            carrier = ctx.position_of(possessor)
            if carrier is not None:
                return Vector3(
                    carrier.x + direction * strategy.mid_support_ahead,
                    my_pos.y,
                    carrier.z + self.side_sign * strategy.mid_support_lateral,
                )

        if abs(ball_pos.x - goal_line) < pitch.midfield_offset_x:
            if (ball_pos.z - cz) * self.side_sign < 0:
                self._log_decision(agent, ctx, "late_run")
                return Vector3(
                    goal_line - direction * strategy.mid_late_run_depth,
                    my_pos.y,
                    cz - self.side_sign * strategy.mid_late_run_offset,
                )
            return Vector3(
                ball_pos.x + direction * strategy.mid_push_ahead,
                my_pos.y,
                cz + self.side_sign * strategy.mid_wide_offset,
            )

        return self.hold_position(agent, ball_pos, my_pos, ctx)

    def hold_position(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Hold the anchor with a slight ball follow, apart from the partner midfielder.

        Parameters
        ----------
        agent : AIAgent
            The midfielder.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Midfielder position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Holding target kept out of the centre circle.
        """
        pitch = ctx.config.pitch
        strategy = ctx.config.strategy
        anchor = self.anchor(agent, ctx)
        looseness = 1 - ctx.config.pursuit.discipline[agent.role]

        x = anchor.x + (ball_pos.x - anchor.x) * strategy.mid_ball_follow * looseness
        z = anchor.z + (ball_pos.z - anchor.z) * strategy.mid_lateral_follow * looseness

        partner_role = CENTRAL_MIDFIELDER_2 if agent.role == CENTRAL_MIDFIELDER_1 else CENTRAL_MIDFIELDER_1
        for teammate in ctx.state.ai_teammates(agent):
            if teammate.role != partner_role:
                continue
            partner = ctx.position_of(teammate)
            if partner is None:
                continue
            gap = abs(z - partner.z)
            if gap < strategy.mid_min_separation:
                z = anchor.z + self.side_sign * (strategy.mid_min_separation - gap) / 2
            break

        dx = x - pitch.center_x
        dz = z - pitch.center_z
        if (dx * dx + dz * dz) ** 0.5 < strategy.mid_center_keep_out:
            ax = anchor.x - pitch.center_x
            az = anchor.z - pitch.center_z
            length = (ax * ax + az * az) ** 0.5
            if length > 0.1:
                x = pitch.center_x + ax / length * strategy.mid_center_push
                z = pitch.center_z + az / length * strategy.mid_center_push
        return Vector3(x, my_pos.y, z)

    def should_chase(self, agent: "AIAgent", ball_pos: Vector3, my_pos: Vector3, ctx: "MatchContext") -> bool:
        """Return whether the midfielder leaves its position for the ball.

        Parameters
        ----------
        agent : AIAgent
            The midfielder.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Midfielder position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` to chase.
        """
        pitch = ctx.config.pitch
        strategy = ctx.config.strategy
        discipline = ctx.config.pursuit.discipline[agent.role]

        penalty = 0.0
        if my_pos.distance_to(self.anchor(agent, ctx)) > strategy.mid_formation_penalty_distance:
            penalty = strategy.mid_formation_penalty * discipline

        dx = ball_pos.x - pitch.center_x
        dz = ball_pos.z - pitch.center_z
        near_center = (dx * dx + dz * dz) ** 0.5 < strategy.mid_cluster_radius

        bonus = 0.0
        if self.is_on_my_side(ball_pos, ctx):
            bonus += strategy.mid_side_bonus
        if abs(ball_pos.z - pitch.center_z) < strategy.mid_central_band and not near_center:
            bonus += strategy.mid_central_bonus
        if is_closest_teammate(agent, ball_pos, ctx):
            bonus += strategy.mid_closest_bonus

        base = ctx.config.pursuit.probability[agent.role] * (1 - discipline * 0.3)
        probability = max(0.0, base + bonus - penalty)

        if near_center:
            crowd = 0
            for teammate in ctx.state.ai_teammates(agent):
                position = ctx.position_of(teammate)
                if position is not None and position.distance_to(ball_pos) < strategy.mid_cluster_radius:
                    crowd += 1
            if crowd >= strategy.mid_cluster_count:
                self._log_decision(agent, ctx, "hold", reason="center_cluster")
                return False
        return self.wants_pursuit(agent, ball_pos, my_pos, probability, ctx)



class LeftCentralMidfielderStrategy(CentralMidfielderStrategy):
    """Central midfielder playing left of centre."""

    def __init__(self) -> None:
        super().__init__(CENTRAL_MIDFIELDER_1)


class RightCentralMidfielderStrategy(CentralMidfielderStrategy):
    """Central midfielder playing right of centre."""

    def __init__(self) -> None:
        super().__init__(CENTRAL_MIDFIELDER_2)
