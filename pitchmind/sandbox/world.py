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
"""Minimal kinematic world used to run the decision core without a game host.

The sandbox implements :class:`~pitchmind.engine.collaborators.EngineAdapter`
with point bodies, impulse integration and a rolling-friction ball model. It
also plays the host's part in the match loop: handing the ball to the nearest
player, carrying it in front of its possessor, feeding the ball trackers and
restarting play after a goal. Heights are relative to each body's spawn
height, so the ball rests at the kickoff spot's height and players at the safe
spawn height.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from pitchmind.engine.agent import AIAgent
from pitchmind.engine.collaborators import EngineAdapter, EntityHandle, Participant
from pitchmind.engine.config import AI_CONFIG, AIConfig
from pitchmind.engine.formation import anchor_for
from pitchmind.engine.match_state import DECISION_SYSTEMS, ROLE_STRATEGY, MatchContext, participant_label
from pitchmind.engine.role_catalog import ROLES, STRIKER
from pitchmind.engine.spatial import TEAMS, Vector3, attack_direction, clamp, opponent_team
from pitchmind.utils.debug import MatchDebugger

ZERO = Vector3(0.0, 0.0, 0.0)


@dataclass(slots=True)
class SandboxConfig:
    """Physical constants of the sandbox world.

    Parameters
    ----------
    tick_ms : float, default=16.0
        Frame length used by :meth:`DemoMatch.run`.
    player_mass : float, default=70.0
        Mass of every player body.
    ball_mass : float, default=0.45
        Mass of the ball.
    player_drag : float, default=2.0
        Linear drag applied to player bodies per second.
    ball_friction : float, default=0.95
        Air resistance base, applied as ``friction ** (dt * (1 + speed / 20))``.
    ground_drag : float, default=0.6
        Rolling resistance per second while the ball is on the ground.
    stop_threshold : float, default=0.1
        Ball speed below which it is treated as settled.
    gravity : float, default=9.81
        Downward acceleration applied to an airborne ball.
    bounce_damping : float, default=0.55
        Fraction of speed kept when the ball bounces off the ground or an edge.
    bounce_stop_speed : float, default=1.1
        Vertical speed below which a landing ball stops bouncing.
    pickup_radius : float, default=1.0
        Horizontal distance at which a player takes a loose ball.
    pickup_height : float, default=1.5
        Ball height above its rest height at which it can still be taken.
    pickup_cooldown_ms : float, default=400.0
        Time a player who just released the ball must wait to retake it.
    dribble_offset : float, default=0.8
        Distance the carried ball sits ahead of its possessor.
    ball_log_interval_ms : float, default=500.0
        Interval between ball state log lines.
    """

    tick_ms: float = 16.0
    player_mass: float = 70.0
    ball_mass: float = 0.45
    player_drag: float = 2.0
    ball_friction: float = 0.95
    ground_drag: float = 0.6
    stop_threshold: float = 0.1
    gravity: float = 9.81
    bounce_damping: float = 0.55
    bounce_stop_speed: float = 1.1
    pickup_radius: float = 1.0
    pickup_height: float = 1.5
    pickup_cooldown_ms: float = 400.0
    dribble_offset: float = 0.8
    ball_log_interval_ms: float = 500.0


@dataclass
class Body:
    """Kinematic state of one simulated entity.

    Parameters
    ----------
    position : Vector3
        Current position.
    mass : float
        Body mass used to turn impulses into velocity changes.
    rest_y : float
        Height the body rests at.
    is_ball : bool, default=False
        Whether the body follows the ball model.
    velocity : Vector3
        Current velocity.
    spin : Vector3
        Angular velocity; stored only.
    yaw : float, default=0.0
        Facing angle in radians.
    animations : Set[str]
        Animations currently playing.
    spawned : bool, default=True
        Whether the body exists.
    """

    position: Vector3
    mass: float
    rest_y: float
    is_ball: bool = False
    velocity: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, 0.0))
    spin: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, 0.0))
    yaw: float = 0.0
    animations: Set[str] = field(default_factory=set)
    spawned: bool = True


class SandboxWorld(EngineAdapter):
    """Point-body world implementing the engine adapter.

    Adapter methods inherit their documentation from :class:`EngineAdapter`.

    Parameters
    ----------
    config : AIConfig, optional
        Supplies the field extents, goal lines and ball spawn.
    sandbox : SandboxConfig, optional
        Physical constants.
    """

    def __init__(self, config: AIConfig = AI_CONFIG, sandbox: Optional[SandboxConfig] = None) -> None:
        self.config = config
        self.sandbox = sandbox if sandbox is not None else SandboxConfig()
        self.score: Dict[str, int] = {team: 0 for team in TEAMS}
        self._bodies: Dict[int, Body] = {}
        self._next_handle = 1
        self._released_by: Optional[Participant] = None
        self._released_ms = 0.0
        self._seen_possessor: Optional[Participant] = None
        self._last_ball_log_ms: Optional[float] = None

    # ==================== BODIES ====================

    def spawn(self, position: Vector3, mass: float, is_ball: bool = False) -> int:
        """Create a body and return its handle.

        Parameters
        ----------
        position : Vector3
            Spawn position; its height becomes the rest height.
        mass : float
            Body mass.
        is_ball : bool, default=False
            Whether the body follows the ball model.

        Returns
        -------
        int
            New entity handle.
        """
        handle = self._next_handle
        self._next_handle += 1
        self._bodies[handle] = Body(position=position.copy(), mass=mass, rest_y=position.y, is_ball=is_ball)
        return handle

    def despawn(self, entity: EntityHandle) -> None:
        """Mark ``entity`` as removed from the world.

        Parameters
        ----------
        entity : EntityHandle
            Body to remove.
        """
        body = self._bodies.get(entity)
        if body is not None:
            body.spawned = False

    def body(self, entity: EntityHandle) -> Optional[Body]:
        """Return the body behind ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Handle to look up.

        Returns
        -------
        Optional[Body]
            The body, or ``None`` for unknown handles.
        """
        return self._bodies.get(entity)

    def _live(self, entity: EntityHandle) -> Optional[Body]:
        """Return the body behind ``entity`` when it is spawned.

        Parameters
        ----------
        entity : EntityHandle
            Handle to look up.

        Returns
        -------
        Optional[Body]
            Spawned body, or ``None``.
        """
        body = self._bodies.get(entity)
        if body is None or not body.spawned:
            return None
        return body

    # ==================== ENGINE ADAPTER ====================

    def get_position(self, entity: EntityHandle) -> Optional[Vector3]:
        body = self._live(entity)
        return body.position.copy() if body is not None else None

    def get_velocity(self, entity: EntityHandle) -> Optional[Vector3]:
        body = self._live(entity)
        return body.velocity.copy() if body is not None else None

    def set_position(self, entity: EntityHandle, position: Vector3) -> None:
        body = self._live(entity)
        if body is not None:
            body.position = position.copy()

    def apply_impulse(self, entity: EntityHandle, impulse: Vector3) -> None:
        body = self._live(entity)
        if body is None or body.mass <= 0:
            return
        body.velocity = body.velocity + impulse * (1.0 / body.mass)

    def set_linear_velocity(self, entity: EntityHandle, velocity: Vector3) -> None:
        body = self._live(entity)
        if body is not None:
            body.velocity = velocity.copy()

    def set_angular_velocity(self, entity: EntityHandle, velocity: Vector3) -> None:
        body = self._live(entity)
        if body is not None:
            body.spin = velocity.copy()

    def set_rotation(self, entity: EntityHandle, yaw: float) -> None:
        body = self._live(entity)
        if body is not None:
            body.yaw = yaw

    def is_spawned(self, entity: EntityHandle) -> bool:
        return self._live(entity) is not None

    def play_animation(self, entity: EntityHandle, names: Sequence[str], looped: bool) -> None:
        body = self._live(entity)
        if body is not None:
            body.animations.update(names)

    def stop_animation(self, entity: EntityHandle, names: Sequence[str]) -> None:
        body = self._live(entity)
        if body is not None:
            body.animations.difference_update(names)

    def get_mass(self, entity: EntityHandle) -> float:
        body = self._live(entity)
        return body.mass if body is not None else 0.0

    # ==================== SIMULATION ====================

    def step(self, dt_ms: float, ctx: MatchContext) -> None:
        """Integrate every body and run the host's ball bookkeeping.

        Parameters
        ----------
        dt_ms : float
            Frame length in milliseconds.
        ctx : MatchContext
            Match whose ball and possession the world maintains.
        """
        dt = max(0.0, dt_ms) / 1000.0
        ball = ctx.state.get_ball()
        for handle, body in self._bodies.items():
            if not body.spawned or handle == ball:
                continue
            self._integrate_player(body, dt)

        self._note_release(ctx)
        if ctx.state.get_possessor() is not None:
            self._carry_ball(ctx)
        else:
            ball_body = self._live(ball) if ball is not None else None
            if ball_body is not None:
                self._integrate_ball(ball_body, dt)
                if self._check_goal(ball_body, ctx):
                    return
                self._try_pickup(ctx)

        ball_pos = ctx.ball_position()
        if ball_pos is None:
            return
        ctx.state.track_ball_moved(ball_pos)
        ctx.state.update_ball_stationary(ball_pos)
        self._log_ball(ctx, ball_pos)

    def _integrate_player(self, body: Body, dt: float) -> None:
        """Move a player body and keep it on the field.

        Parameters
        ----------
        body : Body
            Player body.
        dt : float
            Step length in seconds.
        """
        pitch = self.config.pitch
        position = body.position + body.velocity * dt
        drag = max(0.0, 1.0 - self.sandbox.player_drag * dt)
        velocity = Vector3(body.velocity.x * drag, 0.0, body.velocity.z * drag)

        x = clamp(position.x, pitch.min_x, pitch.max_x)
        z = clamp(position.z, pitch.min_z, pitch.max_z)
        if x != position.x:
            velocity.x = 0.0
        if z != position.z:
            velocity.z = 0.0
        body.position = Vector3(x, body.rest_y, z)
        body.velocity = velocity

    def _integrate_ball(self, body: Body, dt: float) -> None:
        """Advance the ball with air friction, gravity, bounces and rolling drag.

        Parameters
        ----------
        body : Body
            Ball body.
        dt : float
            Step length in seconds.
        """
        sandbox = self.sandbox
        pitch = self.config.pitch
        velocity = body.velocity
        airborne = body.position.y > body.rest_y + 1e-3 or velocity.y > 0.0
        if airborne:
            velocity = Vector3(velocity.x, velocity.y - sandbox.gravity * dt, velocity.z)

        position = body.position + velocity * dt

        speed = velocity.magnitude()
        if speed > 0:
            velocity = velocity * (sandbox.ball_friction ** (dt * (1 + speed / 20)))

        if position.y <= body.rest_y:
            position.y = body.rest_y
            if airborne and abs(velocity.y) > sandbox.bounce_stop_speed:
                velocity.y = -velocity.y * sandbox.bounce_damping
            else:
                velocity.y = 0.0
                airborne = False

        if not airborne:
            drag = max(0.0, 1.0 - sandbox.ground_drag * dt)
            velocity = Vector3(velocity.x * drag, velocity.y, velocity.z * drag)

        if position.x < pitch.min_x or position.x > pitch.max_x:
            position.x = clamp(position.x, pitch.min_x, pitch.max_x)
            velocity.x = -velocity.x * sandbox.bounce_damping
        if position.z < pitch.min_z or position.z > pitch.max_z:
            position.z = clamp(position.z, pitch.min_z, pitch.max_z)
            velocity.z = -velocity.z * sandbox.bounce_damping

        if velocity.magnitude() < sandbox.stop_threshold and position.y <= body.rest_y:
            velocity = Vector3(0.0, 0.0, 0.0)

        body.position = position
        body.velocity = velocity

    def _carry_ball(self, ctx: MatchContext) -> None:
        """Keep the ball just ahead of its possessor.

        Parameters
        ----------
        ctx : MatchContext
            Match context.
        """
        ball = ctx.state.get_ball()
        ball_body = self._live(ball) if ball is not None else None
        possessor = ctx.state.get_possessor()
        if ball_body is None or possessor is None:
            return
        carrier = self._live(possessor.entity)
        if carrier is None:
            ctx.state.set_possessor(None)
            return
        offset = attack_direction(possessor.team) * self.sandbox.dribble_offset
        ball_body.position = Vector3(carrier.position.x + offset, ball_body.rest_y, carrier.position.z)
        ball_body.velocity = Vector3(carrier.velocity.x, 0.0, carrier.velocity.z)

    def _note_release(self, ctx: MatchContext) -> None:
        """Remember who last let go of the ball, for the pickup cooldown.

        Parameters
        ----------
        ctx : MatchContext
            Match context.
        """
        possessor = ctx.state.get_possessor()
        if self._seen_possessor is not None and possessor is not self._seen_possessor:
            self._released_by = self._seen_possessor
            self._released_ms = ctx.now_ms
        self._seen_possessor = possessor

    def _try_pickup(self, ctx: MatchContext) -> Optional[Participant]:
        """Give a loose ball to the nearest eligible player in reach.

        Parameters
        ----------
        ctx : MatchContext
            Match context.

        Returns
        -------
        Optional[Participant]
            New possessor, or ``None`` when nobody is in reach.
        """
        ball = ctx.state.get_ball()
        ball_body = self._live(ball) if ball is not None else None
        if ball_body is None or ball_body.position.y - ball_body.rest_y > self.sandbox.pickup_height:
            return None

        cooling = ctx.now_ms - self._released_ms < self.sandbox.pickup_cooldown_ms
        best: Optional[Participant] = None
        best_distance = self.sandbox.pickup_radius
        for player in ctx.state.participants():
            if player.is_frozen or (cooling and player is self._released_by):
                continue
            body = self._live(player.entity)
            if body is None:
                continue
            distance = body.position.horizontal_distance_to(ball_body.position)
            if distance <= best_distance:
                best, best_distance = player, distance

        if best is not None:
            ctx.state.set_possessor(best)
            self._seen_possessor = best
        return best

    def _check_goal(self, ball_body: Body, ctx: MatchContext) -> bool:
        """Score and restart when the ball crosses a goal line inside the mouth.

        Parameters
        ----------
        ball_body : Body
            Ball body after integration.
        ctx : MatchContext
            Match context.

        Returns
        -------
        bool
            ``True`` when a goal was scored.
        """
        pitch = self.config.pitch
        position = ball_body.position
        if abs(position.z - pitch.center_z) > pitch.goal_half_width:
            return False
        if position.x <= pitch.red_goal_line_x:
            scorer = "blue"
        elif position.x >= pitch.blue_goal_line_x:
            scorer = "red"
        else:
            return False

        self.score[scorer] += 1
        ctx.log_event(
            "GOAL",
            f"{scorer} scores off {participant_label(ctx.state.last_possessor)} "
            f"({self.score['red']}-{self.score['blue']})",
        )
        self.kickoff(ctx, opponent_team(scorer))
        return True

    def kickoff(self, ctx: MatchContext, team: str) -> None:
        """Reset the ball and every agent, then hand the ball to ``team``'s striker.

        Parameters
        ----------
        ctx : MatchContext
            Match context.
        team : str
            Team taking the kickoff.
        """
        state = ctx.state
        pitch = self.config.pitch
        spawn = Vector3(*pitch.ball_spawn)
        ball = state.get_ball()
        state.set_possessor(None)
        if ball is not None:
            self.set_position(ball, spawn)
            self.set_linear_velocity(ball, ZERO)
        state.reset_ball_moved()
        state.reset_stationary_tracking()

        taker: Optional[AIAgent] = None
        for side in TEAMS:
            for agent in state.ai_team(side):
                agent.kickoff_active = True
                agent.set_restart_behavior("pass-to-teammates" if side == team else None)
                agent.target_position = anchor_for(agent, ctx)
                if self.is_spawned(agent.entity):
                    self.set_position(agent.entity, agent.target_position)
                    self.set_linear_velocity(agent.entity, ZERO)
                if side == team and agent.role == STRIKER:
                    taker = agent

        if taker is not None and self.is_spawned(taker.entity):
            direction = attack_direction(team)
            spot = Vector3(spawn.x - direction * self.sandbox.dribble_offset, pitch.safe_spawn_y, spawn.z)
            self.set_position(taker.entity, spot)
            taker.target_position = spot
            state.set_possessor(taker)
            self._seen_possessor = taker
            self._released_by = None
        ctx.log_event("KICKOFF", f"{team} kicks off")

    def _log_ball(self, ctx: MatchContext, position: Vector3) -> None:
        """Write a throttled ball state line.

        Parameters
        ----------
        ctx : MatchContext
            Match context.
        position : Vector3
            Current ball position.
        """
        if ctx.debugger is None:
            return
        now = ctx.now_ms
        if self._last_ball_log_ms is not None and now - self._last_ball_log_ms < self.sandbox.ball_log_interval_ms:
            return
        self._last_ball_log_ms = now
        velocity = ctx.ball_velocity() or ZERO
        possessor = ctx.state.get_possessor()
        ctx.debugger.log_ball_state(
            ctx.match_time, position, velocity, participant_label(possessor) if possessor is not None else None
        )


@dataclass
class DemoMatch:
    """A sandbox world wired to a match context and two AI teams.

    Parameters
    ----------
    world : SandboxWorld
        Simulated world.
    ctx : MatchContext
        Match context driving the agents.
    agents : List[AIAgent]
        Every AI agent, red first.
    """

    world: SandboxWorld
    ctx: MatchContext
    agents: List[AIAgent]

    def step(self, dt_ms: float) -> None:
        """Run one frame: physics first, then decisions and movement.

        Parameters
        ----------
        dt_ms : float
            Frame length in milliseconds.
        """
        self.world.step(dt_ms, self.ctx)
        self.ctx.scheduler.tick(dt_ms)

    def run(self, seconds: float, dt_ms: Optional[float] = None) -> None:
        """Step the match for ``seconds`` of simulated time.

        Parameters
        ----------
        seconds : float
            Simulated duration.
        dt_ms : float, optional
            Frame length; defaults to the sandbox tick.
        """
        tick = dt_ms if dt_ms is not None else self.world.sandbox.tick_ms
        end_ms = self.ctx.now_ms + seconds * 1000.0
        while self.ctx.now_ms < end_ms:
            self.step(tick)

    def team_stats(self, team: str) -> Dict[str, int]:
        """Return shot, pass and goal totals for ``team``.

        Parameters
        ----------
        team : str
            Team to summarise.

        Returns
        -------
        Dict[str, int]
            ``shots``, ``passes`` and ``goals``.
        """
        members = [agent for agent in self.agents if agent.team == team]
        return {
            "shots": sum(agent.shots for agent in members),
            "passes": sum(agent.passes for agent in members),
            "goals": self.world.score[team],
        }

    def stop(self) -> None:
        """Deactivate every agent and close the debugger."""
        for agent in self.agents:
            agent.deactivate()
        if self.ctx.debugger is not None:
            self.ctx.debugger.close()


def build_demo_match(
    seed: int = 0,
    config: AIConfig = AI_CONFIG,
    debugger: Optional[MatchDebugger] = None,
    decision_system: str = ROLE_STRATEGY,
    kickoff_team: Optional[str] = "red",
) -> DemoMatch:
    """Create a sandbox match with two full AI teams.

    Parameters
    ----------
    seed : int, default=0
        Seed for the match's random source.
    config : AIConfig, optional
        Tuning values shared by the world and the agents.
    debugger : MatchDebugger, optional
        Structured log sink.
    decision_system : str, default="role_strategy"
        ``"role_strategy"`` or ``"behaviour_tree"``.
    kickoff_team : str, optional
        Team handed the ball at the start; ``None`` leaves it on the spot.

    Returns
    -------
    DemoMatch
        Activated match ready to be stepped.

    Raises
    ------
    ValueError
        If ``decision_system`` is unknown.
    """
    if decision_system not in DECISION_SYSTEMS:
        raise ValueError(f"Unknown decision system '{decision_system}'. Known systems: {', '.join(DECISION_SYSTEMS)}")

    world = SandboxWorld(config)
    ctx = MatchContext(world, random.Random(seed), config, debugger=debugger)
    ctx.state.set_decision_system(decision_system)
    ball = world.spawn(Vector3(*config.pitch.ball_spawn), world.sandbox.ball_mass, is_ball=True)
    ctx.state.set_ball(ball)

    agents: List[AIAgent] = []
    for team in TEAMS:
        for role in ROLES:
            entity = world.spawn(
                Vector3(config.pitch.center_x, config.pitch.safe_spawn_y, config.pitch.center_z),
                world.sandbox.player_mass,
            )
            agents.append(AIAgent(team, role, entity, ctx))

    for agent in agents:
        agent.activate()
    if kickoff_team is not None:
        world.kickoff(ctx, kickoff_team)
    return DemoMatch(world, ctx, agents)
