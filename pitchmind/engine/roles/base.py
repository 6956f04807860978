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
"""Shared scaffolding for the per-role decision strategies."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pitchmind.engine.formation import adjust_position_for_spacing, anchor_for
from pitchmind.engine.interception import anticipate_ball_position
from pitchmind.engine.pursuit import (
    is_closest_teammate,
    is_pursuit_permitted,
    is_too_far_to_chase,
    max_pursuit_distance,
    should_pursue,
    should_stop_pursuit,
    teammate_has_ball,
)
from pitchmind.engine.role_catalog import constrain_to_preferred_area
from pitchmind.engine.spatial import Vector3, attack_direction, goal_target, opponent_goal_line_x, own_goal_line_x

if TYPE_CHECKING:
    from pitchmind.utils.debug import MatchDebugger
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext


class RoleStrategy:
    """Base decision procedure for one formation role.

    Parameters
    ----------
    role : str
        Role name controlled by this strategy.
    side : str
        Side of the pitch the role favours (``"left"``, ``"right"`` or ``"central"``).
    """

    def __init__(self, role: str, side: str = "central") -> None:
        """Store metadata describing the role being controlled.

        Parameters
        ----------
        role : str
            Role name controlled by this strategy.
        side : str
            Side of the pitch the role favours.
        """
        self.role = role
        self.side = side

    @property
    def side_sign(self) -> float:
        """Return ``-1`` for the left side, ``1`` for the right and ``0`` centrally.

        Returns
        -------
        float
            Lateral sign relative to the field centre.
        """
        return {"left": -1.0, "right": 1.0}.get(self.side, 0.0)

    def _player_debugger(self, ctx: "MatchContext") -> Optional["MatchDebugger"]:
        """Return the debugger attached to the match when available.

        Parameters
        ----------
        ctx : MatchContext
            Match context.

        Returns
        -------
        Optional[MatchDebugger]
            Debugger or ``None`` when logging is off.
        """
        return ctx.debugger

    def _player_label(self, agent: "AIAgent") -> str:
        """Return a compact label used in debug output for the agent.

        Parameters
        ----------
        agent : AIAgent
            Agent being labelled.

        Returns
        -------
        str
            ``"<team> <role>"``.
        """
        return f"{agent.team} {agent.role}"

    def _log_decision(self, agent: "AIAgent", ctx: "MatchContext", action: str, **context: object) -> None:
        """Log a role decision along with optional context key-value pairs.

        Parameters
        ----------
        agent : AIAgent
            Agent making the decision.
        ctx : MatchContext
            Match context.
        action : str
            Verb summarising the decision, such as ``"pursue"``.
        **context : object
            Structured telemetry appended as ``key=value`` pairs.
        """
        debugger = self._player_debugger(ctx)
        if not debugger:
            return
        if not context:
            detail = action
        else:
            kv = " ".join(f"{key}={value}" for key, value in context.items())
            detail = f"{action} {kv}"
        debugger.log_decision(ctx.match_time, self._player_label(agent), detail)

    def decide(self, agent: "AIAgent", ctx: "MatchContext") -> bool:
        """Run the strategy for one decision tick.

        Parameters
        ----------
        agent : AIAgent
            Agent deciding.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``False`` when the ball or the agent is missing, so the caller
            falls back to the formation anchor.
        """
        ball_pos = ctx.ball_position()
        my_pos = ctx.position_of(agent)
        if ball_pos is None or my_pos is None:
            return False
        has_ball = ctx.state.get_possessor() is agent
        return self.decide_with_state(agent, ball_pos, my_pos, has_ball, ctx)

    def decide_with_state(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        has_ball: bool,
        ctx: "MatchContext",
    ) -> bool:
        """Role-specific decision body.

        Parameters
        ----------
        agent : AIAgent
            Agent deciding.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Agent position.
        has_ball : bool
            Whether the agent is the possessor.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Whether a target was produced.
        """
        raise NotImplementedError

    # ==================== HELPER METHODS ====================

    def own_goal_line(self, agent: "AIAgent", ctx: "MatchContext") -> float:
        """Return the x coordinate of the goal line ``agent`` defends.

        Parameters
        ----------
        agent : AIAgent
            Reference agent.
        ctx : MatchContext
            Match context.

        Returns
        -------
        float
            Goal line x.
        """
        return own_goal_line_x(agent.team, ctx.config.pitch)

    def opponent_goal_line(self, agent: "AIAgent", ctx: "MatchContext") -> float:
        """Return the x coordinate of the goal line ``agent`` attacks.

        Parameters
        ----------
        agent : AIAgent
            Reference agent.
        ctx : MatchContext
            Match context.

        Returns
        -------
        float
            Goal line x.
        """
        return opponent_goal_line_x(agent.team, ctx.config.pitch)

    def shot_target(self, agent: "AIAgent", ctx: "MatchContext", spread: float) -> Vector3:
        """Return a goal-mouth aim point with a random lateral offset.

        Parameters
        ----------
        agent : AIAgent
            Shooter.
        ctx : MatchContext
            Match context.
        spread : float
            Largest lateral offset either side of the goal centre.

        Returns
        -------
        Vector3
            Aim point.
        """
        goal = goal_target(agent.team, ctx.config.pitch)
        return Vector3(goal.x, goal.y, goal.z + (ctx.rng.random() * 2 - 1) * spread)

    def forward_sign(self, agent: "AIAgent") -> float:
        """Return the x sign of ``agent``'s attack.

        Parameters
        ----------
        agent : AIAgent
            Reference agent.

        Returns
        -------
        float
            ``1`` or ``-1``.
        """
        return attack_direction(agent.team)

    def anchor(self, agent: "AIAgent", ctx: "MatchContext") -> Vector3:
        """Return ``agent``'s formation anchor.

        Parameters
        ----------
        agent : AIAgent
            Reference agent.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Anchor position.
        """
        return anchor_for(agent, ctx)

    def teammate_has_ball(self, agent: "AIAgent", ctx: "MatchContext") -> bool:
        """Return whether a teammate of ``agent`` holds the ball.

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
        return teammate_has_ball(agent, ctx)

    def wants_pursuit(
        self,
        agent: "AIAgent",
        ball_pos: Vector3,
        my_pos: Vector3,
        probability: float,
        ctx: "MatchContext",
        forced: bool = False,
    ) -> bool:
        """Return whether ``agent`` should abandon its shape and chase the ball.

        Pursuit never happens during the kickoff, before the ball has moved,
        while a teammate has the ball or once the ball is too far to chase.
        Within those limits the agent chases when the coordinator permits a
        loose ball, when it is the closest teammate, when ``forced`` is set,
        or on a successful ``probability`` draw. In every case it must also
        rank inside the pursuer cap.

        Parameters
        ----------
        agent : AIAgent
            Agent considering pursuit.
        ball_pos : Vector3
            Ball position.
        my_pos : Vector3
            Agent position.
        probability : float
            Chance to pursue when no deterministic trigger fires.
        ctx : MatchContext
            Match context.
        forced : bool, default=False
            Role-specific deterministic trigger.

        Returns
        -------
        bool
            ``True`` to chase.
        """
        if agent.kickoff_active or not ctx.state.has_ball_moved():
            return False
        if self.teammate_has_ball(agent, ctx) or should_stop_pursuit(agent, ball_pos, ctx):
            return False
        permitted = is_pursuit_permitted(agent, ball_pos, ctx)
        if not permitted and my_pos.distance_to(ball_pos) >= max_pursuit_distance(agent.role, ctx):
            return False
        if is_too_far_to_chase(agent, ball_pos, ctx) or not should_pursue(agent, ball_pos, ctx):
            return False
        return forced or permitted or is_closest_teammate(agent, ball_pos, ctx) or ctx.rng.random() < probability

    def anticipated_ball(self, ball_pos: Vector3, ctx: "MatchContext") -> Vector3:
        """Return where a moving ball is heading, or the ball itself when slow.

        Parameters
        ----------
        ball_pos : Vector3
            Ball position.
        ctx : MatchContext
            Match context.

        Returns
        -------
        Vector3
            Chase point.
        """
        velocity = ctx.ball_velocity()
        if velocity is None or velocity.horizontal_magnitude() <= ctx.config.tree.moving_threshold:
            return ball_pos.copy()
        return anticipate_ball_position(ball_pos, velocity, ctx.config.pursuit.anticipation_factor)

    def finalise(self, agent: "AIAgent", target: Vector3, ctx: "MatchContext") -> bool:
        """Constrain ``target`` to the role box, space it and store it.

        Parameters
        ----------
        agent : AIAgent
            Agent deciding.
        target : Vector3
            Proposed target.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            Always ``True``.
        """
        constrained = constrain_to_preferred_area(target, agent.role, agent.team, ctx.config.pitch)
        agent.target_position = adjust_position_for_spacing(agent, constrained, ctx)
        return True
