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
"""Controller for one AI-driven player.

An :class:`AIAgent` owns the decision cadence (through the match
:class:`~pitchmind.engine.scheduler.Scheduler`), the velocity-seeking
movement applied every frame, the stamina model and the possession ceiling.
Decisions themselves are delegated either to the agent's role strategy or to
the shared behaviour tree, as selected on the shared match state.
"""

from __future__ import annotations

import math
from typing import Optional

from pitchmind.engine.ball_actions import ensure_target_in_bounds, force_pass, lead_point, pass_ball, shoot_ball
from pitchmind.engine.behaviour_tree import DEFAULT_TREE, evaluate
from pitchmind.engine.collaborators import EntityHandle
from pitchmind.engine.formation import anchor_for, kickoff_position, restart_hold_position, support_position
from pitchmind.engine.match_state import BEHAVIOUR_TREE, MatchContext
from pitchmind.engine.pursuit import is_closest_teammate
from pitchmind.engine.role_catalog import GOALKEEPER, get_role_definition, possession_limit_ms
from pitchmind.engine.roles import create_role_strategy
from pitchmind.engine.spatial import Vector3, attack_direction, goal_target, validate_team

RESTART_BEHAVIOURS = ("pass-to-teammates", "normal", None)
ANIMATION_STATES = ("idle", "walk", "run")

_ROTATION_THRESHOLD = 0.1
_POSSESSION_ROTATION_THRESHOLD = 0.3
_POSSESSION_TURN_RATE = 0.15

ZERO = Vector3()


class AIAgent:
    """AI-controlled player bound to a host entity.

    Parameters
    ----------
    team : str
        ``"red"`` or ``"blue"``.
    role : str
        Formation role from the role catalogue.
    entity : EntityHandle
        Host handle of the player's body.
    ctx : MatchContext
        Match the agent plays in; the agent joins its team's AI roster.
    """

    def __init__(self, team: str, role: str, entity: EntityHandle, ctx: MatchContext) -> None:
        self.team = validate_team(team)
        get_role_definition(role)
        self.role = role
        self.entity = entity
        self.ctx = ctx
        self.strategy = create_role_strategy(role)

        self.has_ball = False
        self.is_frozen = False
        self.kickoff_active = True
        self.restart_behavior: Optional[str] = None
        self.possession_start_ms: Optional[float] = None
        self.stamina = ctx.config.stamina.max_stamina
        self.shots = 0
        self.passes = 0

        self._animation_state: Optional[str] = None
        self._last_position: Optional[Vector3] = None
        self._last_rotation_ms: Optional[float] = None
        self._yaw = 0.0

        ctx.state.add_ai_player(self)
        self.target_position = anchor_for(self, ctx)
        if ctx.is_spawned(entity):
            ctx.engine.set_position(entity, self.target_position)

    @property
    def is_ai(self) -> bool:
        """Return ``True``; agents are always AI driven.

        Returns
        -------
        bool
            Always ``True``.
        """
        return True

    @property
    def label(self) -> str:
        """Return ``"<team> <role>"`` for log lines.

        Returns
        -------
        str
            Agent label.
        """
        return f"{self.team} {self.role}"

    @property
    def decision_interval_ms(self) -> float:
        """Return the decision cadence for this agent's role.

        Returns
        -------
        float
            Milliseconds between decisions; keepers decide faster.
        """
        timing = self.ctx.config.timing
        if self.role == GOALKEEPER:
            return timing.goalkeeper_decision_interval_ms
        return timing.decision_interval_ms

    def __repr__(self) -> str:
        return f"AIAgent({self.team!r}, {self.role!r})"

    # ==================== LIFECYCLE ====================

    def activate(self) -> None:
        """Start deciding at the role cadence and hold the kickoff shape."""
        ctx = self.ctx
        if not ctx.is_spawned(self.entity):
            ctx.log_error("ACTIVATE_SKIPPED", f"{self.label} is not spawned")
            return
        self.kickoff_active = True
        self._last_position = ctx.position_of(self)
        self._animation_state = "idle"
        ctx.scheduler.register(self, self.decision_interval_ms)
        ctx.engine.play_animation(self.entity, ["idle"], True)
        ctx.log_event("AI_ACTIVATED", self.label)

    def deactivate(self) -> None:
        """Stop deciding, clear movement state and return the target to the anchor."""
        ctx = self.ctx
        ctx.scheduler.unregister(self)
        self.kickoff_active = False
        self._animation_state = None
        self._last_position = None
        self._last_rotation_ms = None
        if ctx.is_spawned(self.entity):
            ctx.engine.stop_animation(self.entity, ["idle", "walk", "run", "kick"])
        self.target_position = anchor_for(self, ctx)

    def set_restart_behavior(self, mode: Optional[str]) -> None:
        """Set how the agent acts when it holds the ball at a restart.

        Parameters
        ----------
        mode : str, optional
            ``"pass-to-teammates"``, ``"normal"`` or ``None``.

        Raises
        ------
        ValueError
            If ``mode`` is not one of those values.
        """
        if mode not in RESTART_BEHAVIOURS:
            raise ValueError(f"Unknown restart behaviour '{mode}'. Known behaviours: pass-to-teammates, normal")
        self.restart_behavior = mode

    def get_role_based_position(self) -> Vector3:
        """Return the agent's formation anchor.

        Returns
        -------
        Vector3
            Anchor for the agent's team and role.
        """
        return anchor_for(self, self.ctx)

    # ==================== DECISIONS ====================

    def make_decision(self) -> None:
        """Choose a new target position; run by the scheduler at the role cadence.

        Any failure inside a decision procedure is logged and replaced by the
        formation anchor, as is a non-finite target.
        """
        ctx = self.ctx
        state = ctx.state
        if self.kickoff_active and state.has_ball_moved():
            self.kickoff_active = False

        if not ctx.is_spawned(self.entity):
            self.deactivate()
            return
        ball_pos = ctx.ball_position()
        if ball_pos is None:
            return

        try:
            self._decide(ball_pos)
        except Exception as exc:
            ctx.log_error("DECISION_FAILED", f"{self.label}: {exc!r}")
            self.target_position = anchor_for(self, ctx)

        if self.target_position is None or not self.target_position.is_finite():
            ctx.log_error("INVALID_TARGET", f"{self.label}: {self.target_position}")
            self.target_position = anchor_for(self, ctx)

        if ctx.debugger is not None:
            position = ctx.position_of(self)
            if position is not None:
                ctx.debugger.log_agent_state(
                    ctx.match_time,
                    self.label,
                    position,
                    self.target_position,
                    self.stamina_percentage(),
                    self.has_ball,
                )

    def _decide(self, ball_pos: Vector3) -> None:
        """Run one decision step in priority order.

        Parameters
        ----------
        ball_pos : Vector3
            Ball position at the start of the step.
        """
        ctx = self.ctx
        state = ctx.state
        has_ball = state.get_possessor() is self

        if self.should_conserve_stamina():
            self._conserve_stamina(ball_pos, has_ball)
            return

        possessor = state.get_possessor()
        if possessor is not None and possessor is not self and possessor.team == self.team:
            my_pos = ctx.position_of(self)
            carrier = ctx.position_of(possessor)
            if my_pos is not None and carrier is not None:
                if my_pos.distance_to(carrier) < ctx.config.kickoff.support_radius:
                    self.target_position = support_position(self, ctx)
                    return

        if self.kickoff_active:
            if self.restart_behavior == "pass-to-teammates" and has_ball:
                if not pass_ball(self, ctx):
                    self.target_position = restart_hold_position(self, ball_pos, ctx)
                return
            self.target_position = kickoff_position(self, ctx)
            return

        if state.decision_system == BEHAVIOUR_TREE:
            success = evaluate(DEFAULT_TREE, self, ctx)
        else:
            success = self.strategy.decide(self, ctx)
        if not success:
            self.target_position = anchor_for(self, ctx)

    def should_conserve_stamina(self) -> bool:
        """Return whether stamina is below the role's conservation threshold.

        Returns
        -------
        bool
            ``True`` while conserving.
        """
        threshold = self.ctx.config.stamina.conservation_thresholds[self.role]
        return self.stamina_percentage() < threshold

    def _conserve_stamina(self, ball_pos: Vector3, has_ball: bool) -> None:
        """Play cautiously: pass at once, chase only nearby balls, drift home.

        Parameters
        ----------
        ball_pos : Vector3
            Ball position.
        has_ball : bool
            Whether the agent holds the ball.
        """
        ctx = self.ctx
        stamina = ctx.config.stamina
        my_pos = ctx.position_of(self)
        if my_pos is None:
            return

        if has_ball:
            if not pass_ball(self, ctx):
                self.target_position = my_pos.copy()
            return

        factor = max(stamina.conservation_factor_floor, self.stamina_percentage() / 100)
        tendency = get_role_definition(self.role).pursuit_tendency * factor
        near = my_pos.distance_to(ball_pos) < stamina.conservation_pursuit_radius
        if near and ctx.rng.random() < tendency and is_closest_teammate(self, ball_pos, ctx):
            self.target_position = ball_pos.copy()
            self.log_decision("conserve_pursue")
            return

        anchor = anchor_for(self, ctx)
        dx = anchor.x - my_pos.x
        dz = anchor.z - my_pos.z
        distance = math.hypot(dx, dz)
        if distance < stamina.conservation_hold_radius:
            self.target_position = my_pos.copy()
        elif distance > 0.1:
            step = min(stamina.conservation_max_step, distance)
            self.target_position = Vector3(my_pos.x + dx / distance * step, my_pos.y, my_pos.z + dz / distance * step)

    def log_decision(self, action: str, **context: object) -> None:
        """Write a decision line for this agent when a debugger is attached.

        Parameters
        ----------
        action : str
            Verb describing the decision.
        **context : object
            Extra ``key=value`` pairs appended to the line.
        """
        debugger = self.ctx.debugger
        if debugger is None:
            return
        detail = action
        if context:
            detail = f"{action} " + " ".join(f"{key}={value}" for key, value in context.items())
        debugger.log_decision(self.ctx.match_time, self.label, detail)

    # ==================== MOVEMENT TICK ====================

    def handle_tick(self, dt_ms: float) -> None:
        """Advance possession, stamina, animation and movement by one frame.

        Parameters
        ----------
        dt_ms : float
            Frame length in milliseconds; non-positive values fall back to
            the configured tick.
        """
        ctx = self.ctx
        if self.is_frozen or not ctx.is_spawned(self.entity):
            return

        has_ball = ctx.state.get_possessor() is self
        if has_ball and self.possession_start_ms is None:
            self.possession_start_ms = ctx.now_ms
        elif not has_ball and self.possession_start_ms is not None:
            self.possession_start_ms = None
        if has_ball and self.possession_start_ms is not None:
            held = ctx.now_ms - self.possession_start_ms
            if held >= possession_limit_ms(self.role, ctx.config):
                self.force_release(held)

        position = ctx.position_of(self)
        if position is None:
            return
        if self._last_position is None:
            self._last_position = position.copy()
            return

        dt = dt_ms / 1000.0 if dt_ms > 0 else ctx.config.movement.fallback_tick_ms / 1000.0
        speed = position.horizontal_distance_to(self._last_position) / dt
        self.update_stamina(speed, dt)
        self._update_animation(speed)
        self._move_toward_target(position)
        self._last_position = position.copy()

    def max_speed(self) -> float:
        """Return the top speed after the stamina penalty.

        Returns
        -------
        float
            Units per second.
        """
        movement = self.ctx.config.movement
        base = movement.goalkeeper_run_speed if self.role == GOALKEEPER else movement.run_speed
        return base * self.speed_multiplier()

    def _update_animation(self, speed: float) -> None:
        """Switch between idle, walk and run loops on threshold crossings.

        Parameters
        ----------
        speed : float
            Measured ground speed.
        """
        movement = self.ctx.config.movement
        if speed >= movement.run_threshold:
            wanted = "run"
        elif speed >= movement.walk_threshold:
            wanted = "walk"
        else:
            wanted = "idle"
        if wanted == self._animation_state:
            return
        engine = self.ctx.engine
        if self._animation_state is not None:
            engine.stop_animation(self.entity, [self._animation_state])
        engine.play_animation(self.entity, [wanted], True)
        self._animation_state = wanted

    def _move_toward_target(self, position: Vector3) -> None:
        """Push the body towards the target with a velocity-seeking impulse.

        Parameters
        ----------
        position : Vector3
            Current position.
        """
        ctx = self.ctx
        movement = ctx.config.movement
        engine = ctx.engine
        target = self.target_position
        max_speed = self.max_speed()
        if target is None or max_speed <= 0:
            return

        mass = engine.get_mass(self.entity)
        if mass <= 0:
            mass = movement.default_mass

        dx = target.x - position.x
        dz = target.z - position.z
        distance = math.hypot(dx, dz)
        desired_x = desired_z = 0.0
        if distance > movement.arrive_radius:
            nx, nz = dx / distance, dz / distance
            speed = max_speed if distance > movement.slow_radius else max_speed * movement.slow_factor
            desired_x, desired_z = nx * speed, nz * speed
            self._update_rotation(nx, nz)

        velocity = engine.get_velocity(self.entity) or ZERO
        current = velocity.horizontal_magnitude()
        accel = max(movement.min_accel_scale, 1.0 - (current / max_speed) * movement.accel_falloff)
        gain = mass * movement.impulse_gain * accel
        engine.apply_impulse(
            self.entity,
            Vector3((desired_x - velocity.x) * gain, 0.0, (desired_z - velocity.z) * gain),
        )

        velocity = engine.get_velocity(self.entity) or ZERO
        current = velocity.horizontal_magnitude()
        if current > max_speed:
            scale = max_speed / current
            engine.set_linear_velocity(self.entity, Vector3(velocity.x * scale, velocity.y, velocity.z * scale))

    def _update_rotation(self, nx: float, nz: float) -> None:
        """Face the direction of travel, at most once per cooldown.

        Parameters
        ----------
        nx : float
            Unit heading x.
        nz : float
            Unit heading z.
        """
        ctx = self.ctx
        has_ball = ctx.state.get_possessor() is self
        movement = ctx.config.movement
        cooldown = movement.possession_rotation_cooldown_ms if has_ball else movement.rotation_cooldown_ms
        now = ctx.now_ms
        if self._last_rotation_ms is not None and now - self._last_rotation_ms <= cooldown:
            return

        target_yaw = math.atan2(nx, nz) + math.pi
        diff = (target_yaw - self._yaw + math.pi) % (2 * math.pi) - math.pi
        threshold = _POSSESSION_ROTATION_THRESHOLD if has_ball else _ROTATION_THRESHOLD
        if abs(diff) <= threshold:
            return
        self._yaw = self._yaw + diff * _POSSESSION_TURN_RATE if has_ball else target_yaw
        ctx.engine.set_rotation(self.entity, self._yaw)
        self._last_rotation_ms = now

    # ==================== FORCED RELEASE ====================

    def force_release(self, held_ms: float) -> None:
        """Get rid of the ball once the possession ceiling is reached.

        Parameters
        ----------
        held_ms : float
            How long the ball has been held.
        """
        self.log_decision("forced_release", held_ms=int(held_ms))
        if self.role == GOALKEEPER:
            self._goalkeeper_release()
        else:
            self._field_player_release()
        self.possession_start_ms = None

    def _goalkeeper_release(self) -> bool:
        """Play a safe lead pass to a medium-range teammate or clear to midfield.

        Returns
        -------
        bool
            Whether the ball was played.
        """
        ctx = self.ctx
        keeper = ctx.config.goalkeeper
        pitch = ctx.config.pitch
        my_pos = ctx.position_of(self)
        if my_pos is None:
            return False
        direction = attack_direction(self.team)

        best = None
        best_position: Optional[Vector3] = None
        best_score = float("-inf")
        for teammate in ctx.teammates(self):
            position = ctx.position_of(teammate)
            if position is None:
                continue
            distance = my_pos.distance_to(position)
            if distance < keeper.release_min_distance or distance > keeper.release_max_distance:
                continue
            safety = 10.0
            if (position.x - my_pos.x) * direction < 0:
                safety -= keeper.backward_penalty
            sideline = min(abs(position.z - pitch.min_z), abs(position.z - pitch.max_z))
            if sideline < keeper.sideline_penalty_margin:
                safety -= keeper.sideline_penalty
            score = (
                safety
                + (20 - min(20.0, distance / 2))
                + (10 - min(10.0, abs(position.z - pitch.center_z) / 2))
            )
            if score > best_score:
                best, best_position, best_score = teammate, position, score

        if best is not None and best_position is not None and best_score > keeper.release_score_threshold:
            point = lead_point(my_pos, best_position, keeper.release_lead)
            return force_pass(self, best, point, keeper.release_power, ctx)

        clearance = Vector3(
            pitch.center_x - direction * ctx.rng.random() * keeper.midfield_jitter_x,
            my_pos.y,
            pitch.center_z + (ctx.rng.random() * 2 - 1) * keeper.midfield_jitter_z,
        )
        return force_pass(self, None, ensure_target_in_bounds(clearance, ctx), keeper.clear_power, ctx)

    def _field_player_release(self) -> bool:
        """Shoot from a central position in range, otherwise pass or play it forward.

        Returns
        -------
        bool
            Whether the ball was played.
        """
        ctx = self.ctx
        strategy = ctx.config.strategy
        pitch = ctx.config.pitch
        my_pos = ctx.position_of(self)
        if my_pos is None:
            return False

        goal = goal_target(self.team, pitch)
        in_range = my_pos.distance_to(goal) < strategy.release_shot_distance
        central = abs(my_pos.z - pitch.center_z) < strategy.release_central_band
        chance = strategy.release_shot_chance.get(self.role, 0.0)
        if in_range and central and ctx.rng.random() < chance:
            spread = (ctx.rng.random() * 2 - 1) * strategy.release_shot_spread
            return shoot_ball(self, Vector3(goal.x, goal.y, goal.z + spread), strategy.release_shot_power, ctx)

        if pass_ball(self, ctx):
            return True

        target = Vector3(
            my_pos.x + attack_direction(self.team) * strategy.release_forward,
            my_pos.y,
            my_pos.z + (pitch.center_z - my_pos.z) * strategy.release_center_pull,
        )
        return force_pass(self, None, target, strategy.release_power, ctx)

    # ==================== STAMINA ====================

    def update_stamina(self, speed: float, dt: float) -> None:
        """Regenerate or drain stamina from the current movement speed.

        Parameters
        ----------
        speed : float
            Ground speed in units per second.
        dt : float
            Elapsed time in seconds.
        """
        stamina = self.ctx.config.stamina
        if speed < stamina.standing_speed:
            rate = stamina.standing_regen
        elif speed < stamina.walking_speed:
            rate = stamina.walking_regen
        else:
            rate = -stamina.running_drain
        self.stamina = min(stamina.max_stamina, max(0.0, self.stamina + rate * dt))

    def stamina_percentage(self) -> float:
        """Return stamina as a percentage of the maximum.

        Returns
        -------
        float
            Value in ``[0, 100]``.
        """
        return self.stamina / self.ctx.config.stamina.max_stamina * 100.0

    def speed_multiplier(self) -> float:
        """Return the movement speed multiplier for the current stamina tier.

        Returns
        -------
        float
            Multiplier in ``(0, 1]``.
        """
        stamina = self.ctx.config.stamina
        percentage = self.stamina_percentage()
        for floor, multiplier in stamina.speed_tiers:
            if percentage >= floor:
                return multiplier
        return stamina.exhausted_multiplier

    def drain_stamina(self, amount: float) -> None:
        """Spend ``amount`` stamina, never dropping below zero.

        Parameters
        ----------
        amount : float
            Stamina to remove.
        """
        self.stamina = max(0.0, self.stamina - amount)

    def reset_stamina(self) -> None:
        """Restore full stamina."""
        self.stamina = self.ctx.config.stamina.max_stamina
