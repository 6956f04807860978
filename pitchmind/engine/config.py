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
"""Central configuration for the AI decision core.

Every numeric constant used by the decision procedures lives here as the
default of a slotted dataclass field. The values were tuned by playtesting
rather than derived, so treat them as knobs: a :class:`MatchContext` carries
its own :class:`AIConfig` and tests routinely inject modified copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


def _per_role(goalkeeper: float, back: float, midfielder: float, striker: float) -> Dict[str, float]:
    """Expand a four-family value table into a per-role dictionary.

    Parameters
    ----------
    goalkeeper : float
        Value used for the goalkeeper.
    back : float
        Value shared by both full-backs.
    midfielder : float
        Value shared by both central midfielders.
    striker : float
        Value used for the striker.

    Returns
    -------
    Dict[str, float]
        Mapping keyed by every role name.
    """
    return {
        "goalkeeper": goalkeeper,
        "left-back": back,
        "right-back": back,
        "central-midfielder-1": midfielder,
        "central-midfielder-2": midfielder,
        "striker": striker,
    }


@dataclass(slots=True)
class FieldConfig:
    """Field extents, goal lines and reference lines in world units.

    Red defends the goal at ``red_goal_line_x`` and attacks towards positive
    X; blue mirrors that. The lateral axis is Z and Y points up.

    Parameters
    ----------
    min_x : float, default=-37.0
        Lowest playable X coordinate.
    max_x : float, default=52.0
        Highest playable X coordinate.
    min_y : float, default=0.0
        Ground level.
    max_y : float, default=15.0
        Ceiling applied when clamping targets.
    min_z : float, default=-33.0
        Lowest playable Z coordinate.
    max_z : float, default=26.0
        Highest playable Z coordinate.
    red_goal_line_x : float, default=-37.0
        X coordinate of the goal defended by red.
    blue_goal_line_x : float, default=52.0
        X coordinate of the goal defended by blue.
    center_x : float, default=7.0
        X coordinate of the centre spot.
    center_z : float, default=-3.0
        Lateral centre of the field.
    defensive_offset_x : float, default=12.0
        Distance of the defensive line from the own goal line.
    midfield_offset_x : float, default=34.0
        Distance of the midfield line from the own goal line.
    forward_offset_x : float, default=43.0
        Distance of the forward line from the own goal line.
    wide_z_max : float, default=26.0
        Right-hand wide boundary used for full-back anchors.
    wide_z_min : float, default=-33.0
        Left-hand wide boundary used for full-back anchors.
    midfield_z_max : float, default=20.0
        Right-hand boundary used for midfielder anchors.
    midfield_z_min : float, default=-27.0
        Left-hand boundary used for midfielder anchors.
    safe_spawn_y : float, default=2.0
        Height used when placing agents.
    ball_spawn : Tuple[float, float, float], default=(7.0, 6.0, -3.0)
        Ball position at kickoff.
    ball_moved_epsilon : float, default=0.1
        Displacement from the spawn that latches the ball-moved flag.
    goal_half_width : float, default=8.0
        Lateral half width used to clamp keeper save points.
    goal_mouth_width : float, default=10.0
        Width of the goal mouth a keeper covers while holding the line.
    shot_band_half_width : float, default=12.0
        Lateral half width of the band that counts as "on target".
    penalty_area_radius : float, default=18.0
        Radius around the goal centre treated as the penalty area.
    """

    min_x: float = -37.0
    max_x: float = 52.0
    min_y: float = 0.0
    max_y: float = 15.0
    min_z: float = -33.0
    max_z: float = 26.0
    red_goal_line_x: float = -37.0
    blue_goal_line_x: float = 52.0
    center_x: float = 7.0
    center_z: float = -3.0
    defensive_offset_x: float = 12.0
    midfield_offset_x: float = 34.0
    forward_offset_x: float = 43.0
    wide_z_max: float = 26.0
    wide_z_min: float = -33.0
    midfield_z_max: float = 20.0
    midfield_z_min: float = -27.0
    safe_spawn_y: float = 2.0
    ball_spawn: Tuple[float, float, float] = (7.0, 6.0, -3.0)
    ball_moved_epsilon: float = 0.1
    goal_half_width: float = 8.0
    goal_mouth_width: float = 10.0
    shot_band_half_width: float = 12.0
    penalty_area_radius: float = 18.0


@dataclass(slots=True)
class TimingConfig:
    """Decision cadence and timed follow-ups.

    Parameters
    ----------
    decision_interval_ms : float, default=500.0
        Time between decisions for outfield agents.
    goalkeeper_decision_interval_ms : float, default=150.0
        Time between decisions for goalkeepers.
    spin_reset_interval_ms : float, default=50.0
        Period between angular-velocity resets after a kick.
    pass_spin_resets : int, default=6
        Number of delayed resets after a pass.
    shot_spin_resets : int, default=10
        Number of delayed resets after a shot.
    keeper_kick_animation_ms : float, default=800.0
        How long the keeper's dive animation plays before being stopped.
    default_possession_limit_ms : float, default=5000.0
        Possession ceiling used when a role does not define one.
    stationary_threshold : float, default=1.0
        Ball displacement that counts as movement for stationary tracking.
    stationary_time_limit_ms : float, default=5000.0
        Time without movement after which the ball is flagged stationary.
    """

    decision_interval_ms: float = 500.0
    goalkeeper_decision_interval_ms: float = 150.0
    spin_reset_interval_ms: float = 50.0
    pass_spin_resets: int = 6
    shot_spin_resets: int = 10
    keeper_kick_animation_ms: float = 800.0
    default_possession_limit_ms: float = 5000.0
    stationary_threshold: float = 1.0
    stationary_time_limit_ms: float = 5000.0


@dataclass(slots=True)
class MovementConfig:
    """Velocity-seeking steering applied every physics tick.

    Parameters
    ----------
    run_speed : float, default=5.5
        Maximum speed for outfield agents.
    goalkeeper_run_speed : float, default=6.5
        Maximum speed for goalkeepers.
    arrive_radius : float, default=0.3
        Distance below which the agent stops steering.
    slow_radius : float, default=2.0
        Distance below which the agent slows down.
    slow_factor : float, default=0.7
        Fraction of max speed used inside ``slow_radius``.
    walk_threshold : float, default=0.5
        Speed at which the walk animation starts.
    run_threshold : float, default=4.0
        Speed at which the run animation starts.
    min_accel_scale : float, default=0.3
        Lower bound on the acceleration scale at high speed.
    accel_falloff : float, default=0.7
        How strongly current speed reduces acceleration.
    impulse_gain : float, default=1.2
        Multiplier converting velocity change into impulse.
    default_mass : float, default=1.0
        Mass used when the host reports none or a non-positive value.
    rotation_cooldown_ms : float, default=250.0
        Minimum time between facing updates.
    possession_rotation_cooldown_ms : float, default=500.0
        Minimum time between facing updates while holding the ball.
    fallback_tick_ms : float, default=16.0
        Tick length assumed when the host reports zero.
    """

    run_speed: float = 5.5
    goalkeeper_run_speed: float = 6.5
    arrive_radius: float = 0.3
    slow_radius: float = 2.0
    slow_factor: float = 0.7
    walk_threshold: float = 0.5
    run_threshold: float = 4.0
    min_accel_scale: float = 0.3
    accel_falloff: float = 0.7
    impulse_gain: float = 1.2
    default_mass: float = 1.0
    rotation_cooldown_ms: float = 250.0
    possession_rotation_cooldown_ms: float = 500.0
    fallback_tick_ms: float = 16.0


@dataclass(slots=True)
class StaminaConfig:
    """Stamina drain, recovery and the conservation state.

    Parameters
    ----------
    max_stamina : float, default=100.0
        Stamina at full fitness.
    standing_regen : float, default=2.5
        Recovery per second below ``standing_speed``.
    walking_regen : float, default=1.2
        Recovery per second below ``walking_speed``.
    running_drain : float, default=1.0
        Drain per second at running speed.
    standing_speed : float, default=0.5
        Speed under which the agent counts as standing.
    walking_speed : float, default=4.0
        Speed under which the agent counts as walking.
    pass_cost : float, default=2.0
        Stamina spent on a pass.
    shot_cost : float, default=8.0
        Stamina spent on a shot.
    speed_tiers : Tuple[Tuple[float, float], ...], default=((75, 1.0), (50, 0.9), (25, 0.75), (10, 0.6))
        ``(minimum percentage, speed multiplier)`` pairs checked in order.
    exhausted_multiplier : float, default=0.4
        Speed multiplier below the last tier.
    conservation_thresholds : Dict[str, float]
        Stamina percentage per role below which the agent conserves energy.
    conservation_pursuit_radius : float, default=8.0
        Ball distance within which a tired agent may still chase.
    conservation_factor_floor : float, default=0.3
        Lower bound on the stamina factor scaling pursuit probability.
    conservation_hold_radius : float, default=3.0
        Distance from the formation anchor treated as "in position".
    conservation_max_step : float, default=2.0
        Largest step a tired agent takes towards its anchor per decision.
    """

    max_stamina: float = 100.0
    standing_regen: float = 2.5
    walking_regen: float = 1.2
    running_drain: float = 1.0
    standing_speed: float = 0.5
    walking_speed: float = 4.0
    pass_cost: float = 2.0
    shot_cost: float = 8.0
    speed_tiers: Tuple[Tuple[float, float], ...] = ((75.0, 1.0), (50.0, 0.9), (25.0, 0.75), (10.0, 0.6))
    exhausted_multiplier: float = 0.4
    conservation_thresholds: Dict[str, float] = field(default_factory=lambda: _per_role(20.0, 25.0, 35.0, 40.0))
    conservation_pursuit_radius: float = 8.0
    conservation_factor_floor: float = 0.3
    conservation_hold_radius: float = 3.0
    conservation_max_step: float = 2.0


@dataclass(slots=True)
class PursuitConfig:
    """Limits that stop every agent converging on the ball at once.

    Parameters
    ----------
    max_distance : Dict[str, float]
        Role pursuit distance (goalkeeper 8, backs 20, midfielders 25, striker 30).
    probability : Dict[str, float]
        Base probability that a role joins a pursuit.
    discipline : Dict[str, float]
        How strongly each role is held to its formation anchor.
    recovery_multiplier : Dict[str, float]
        Scaling on the role's position recovery speed.
    baseline_cap : int, default=2
        Simultaneous pursuers allowed in normal play.
    stationary_cap : int, default=3
        Pursuers allowed once the ball is flagged stationary.
    long_stationary_cap : int, default=3
        Pursuers allowed after ``long_stationary_ms``.
    very_long_stationary_cap : int, default=4
        Pursuers allowed after ``very_long_stationary_ms``.
    long_stationary_ms : float, default=7000.0
        First stationary escalation threshold.
    very_long_stationary_ms : float, default=10000.0
        Second stationary escalation threshold.
    pursuing_target_radius : float, default=3.0
        A target this close to the ball means the agent is pursuing.
    stationary_distance : float, default=40.0
        Reach for stationary loose balls.
    long_stationary_distance : float, default=50.0
        Reach after ``long_stationary_ms``.
    very_long_stationary_distance : float, default=60.0
        Reach after ``very_long_stationary_ms``.
    stationary_pursuer_cap : int, default=3
        Agents allowed on a stationary loose ball.
    stationary_extension : float, default=2.0
        Multiplier on role pursuit distance while the ball is stationary.
    long_stationary_extension : float, default=2.5
        Multiplier after ``long_stationary_ms``.
    boundary_threshold : float, default=12.0
        Distance from a field edge that counts as "near the boundary".
    stuck_speed : float, default=0.5
        Ball speed under which a boundary ball is considered stuck.
    boundary_distance : float, default=35.0
        Reach for a stuck boundary ball.
    corner_distance : float, default=45.0
        Reach for a stuck corner ball.
    boundary_pursuer_cap : int, default=3
        Agents allowed on a stuck boundary ball.
    corner_pursuer_cap : int, default=2
        Agents allowed on a stuck corner ball.
    near_edge_band : float, default=15.0
        Edge band used by the too-far-to-chase check.
    too_far_margin : float, default=1.5
        Allowance multiplier on pursuit distance away from the edges.
    boundary_margin : float, default=2.0
        Allowance multiplier near a boundary.
    corner_margin : float, default=3.0
        Allowance multiplier in a corner.
    anticipation_factor : float, default=1.5
        Seconds of ball travel anticipated when chasing.
    """

    max_distance: Dict[str, float] = field(default_factory=lambda: _per_role(8.0, 20.0, 25.0, 30.0))
    probability: Dict[str, float] = field(default_factory=lambda: _per_role(0.15, 0.3, 0.4, 0.5))
    discipline: Dict[str, float] = field(default_factory=lambda: _per_role(0.95, 0.8, 0.6, 0.5))
    recovery_multiplier: Dict[str, float] = field(default_factory=lambda: _per_role(1.5, 1.4, 1.3, 1.2))
    baseline_cap: int = 2
    stationary_cap: int = 3
    long_stationary_cap: int = 3
    very_long_stationary_cap: int = 4
    long_stationary_ms: float = 7000.0
    very_long_stationary_ms: float = 10000.0
    pursuing_target_radius: float = 3.0
    stationary_distance: float = 40.0
    long_stationary_distance: float = 50.0
    very_long_stationary_distance: float = 60.0
    stationary_pursuer_cap: int = 3
    stationary_extension: float = 2.0
    long_stationary_extension: float = 2.5
    boundary_threshold: float = 12.0
    stuck_speed: float = 0.5
    boundary_distance: float = 35.0
    corner_distance: float = 45.0
    boundary_pursuer_cap: int = 3
    corner_pursuer_cap: int = 2
    near_edge_band: float = 15.0
    too_far_margin: float = 1.5
    boundary_margin: float = 2.0
    corner_margin: float = 3.0
    anticipation_factor: float = 1.5


@dataclass(slots=True)
class SpacingConfig:
    """Corrections applied to every proposed target position.

    Parameters
    ----------
    repulsion_distance : float, default=9.0
        Teammates closer than this push the target away.
    repulsion_strength : float, default=0.8
        Peak repulsion for a coincident teammate.
    same_role_multiplier : float, default=2.0
        Extra repulsion between agents sharing a role.
    kickoff_multiplier : float, default=2.0
        Extra repulsion while the kickoff formation is held.
    center_avoidance_radius : float, default=12.0
        Radius around the centre spot that pushes targets outwards.
    center_push_scale : float, default=6.0
        Scale applied to the centre push.
    center_strength : Dict[str, float]
        Centre avoidance strength per role (keeper strongest, striker weakest).
    kickoff_center_strength : float, default=0.7
        Minimum centre avoidance for outfield agents during kickoff.
    discipline_threshold : float, default=8.0
        Distance from the anchor beyond which the target is pulled back.
    discipline_gain : float, default=1.2
        Pull applied per unit of role discipline.
    jitter : float, default=0.2
        Base jitter amplitude in open play.
    kickoff_jitter : float, default=0.1
        Base jitter amplitude during kickoff.
    jitter_offense_divisor : float, default=80.0
        Offensive contribution is divided by this and added to the jitter.
    jitter_scale : float, default=1.5
        Final jitter multiplier.
    """

    repulsion_distance: float = 9.0
    repulsion_strength: float = 0.8
    same_role_multiplier: float = 2.0
    kickoff_multiplier: float = 2.0
    center_avoidance_radius: float = 12.0
    center_push_scale: float = 6.0
    center_strength: Dict[str, float] = field(default_factory=lambda: _per_role(0.8, 0.6, 0.3, 0.2))
    kickoff_center_strength: float = 0.7
    discipline_threshold: float = 8.0
    discipline_gain: float = 1.2
    jitter: float = 0.2
    kickoff_jitter: float = 0.1
    jitter_offense_divisor: float = 80.0
    jitter_scale: float = 1.5


@dataclass(slots=True)
class KickoffConfig:
    """Formation held until the ball first moves, plus carrier support.

    Parameters
    ----------
    spread : float, default=2.0
        Multiplier on the role offsets below.
    discipline : float, default=0.9
        Restart discipline; ``1 - discipline`` scales the random offset.
    center_push : float, default=8.0
        Push away from the centre spot for anchors inside the avoidance radius.
    midfielder_lateral : float, default=8.0
        Lateral separation for midfielders.
    midfielder_depth : float, default=3.0
        How far midfielders drop back.
    striker_depth : float, default=8.0
        How far the striker drops back from its anchor, out of the centre circle.
    striker_lateral_jitter : float, default=3.0
        Lateral random offset for the striker.
    back_depth : float, default=2.0
        How far full-backs drop back.
    back_width : float, default=10.0
        How far full-backs move wide.
    random_offset_scale : float, default=3.0
        Scale of the random offset applied to every kickoff spot.
    restart_hold_offset : float, default=1.0
        Distance behind the ball a restart taker holds when no pass exists.
    support_radius : float, default=8.0
        Agents this close to a teammate carrier switch to support positions.
    striker_support_forward : float, default=10.0
        Forward offset for a supporting striker.
    striker_support_lateral : float, default=5.0
        Lateral offset for a supporting striker.
    midfielder_support_forward : float, default=5.0
        Forward offset for supporting midfielders.
    midfielder_support_lateral : float, default=8.0
        Lateral offset for supporting midfielders.
    back_support_forward : float, default=3.0
        Forward offset for supporting full-backs.
    """

    spread: float = 2.0
    discipline: float = 0.9
    center_push: float = 8.0
    midfielder_lateral: float = 8.0
    midfielder_depth: float = 3.0
    striker_depth: float = 8.0
    striker_lateral_jitter: float = 3.0
    back_depth: float = 2.0
    back_width: float = 10.0
    random_offset_scale: float = 3.0
    restart_hold_offset: float = 1.0
    support_radius: float = 8.0
    striker_support_forward: float = 10.0
    striker_support_lateral: float = 5.0
    midfielder_support_forward: float = 5.0
    midfielder_support_lateral: float = 8.0
    back_support_forward: float = 3.0


@dataclass(slots=True)
class KickConfig:
    """Pass and shot impulses, target correction and pass selection.

    Parameters
    ----------
    pass_force : float, default=3.5
        Base pass impulse.
    pass_arc_factor : float, default=0.05
        Vertical lift per unit of horizontal pass distance.
    pass_multiplier_cap : float, default=1.0
        Global cap on the pass power multiplier.
    role_pass_caps : Dict[str, float]
        Further per-role cap on the pass multiplier.
    pass_force_cap : float, default=8.0
        Absolute cap on the pass impulse.
    pass_vertical_cap : float, default=2.5
        Cap on the vertical pass impulse.
    shot_force : float, default=2.5
        Base shot impulse.
    shot_arc_factor : float, default=0.18
        Vertical lift per unit of horizontal shot distance.
    long_shot_distance : float, default=30.0
        Distance at which the long-shot lift bonus saturates.
    long_shot_bonus : float, default=0.8
        Maximum extra lift for long shots.
    shot_multiplier_cap : float, default=1.0
        Cap on the shot power multiplier.
    shot_force_cap : float, default=10.0
        Absolute cap on the shot impulse.
    shot_vertical_cap : float, default=4.0
        Cap on the vertical shot impulse.
    bounds_margin : float, default=8.0
        Inset from the field edge applied to pass targets.
    center_bias : float, default=0.4
        Blend towards the centre for targets that needed clamping.
    safety_margin : float, default=10.0
        Inset used when rejecting unsafe pass directions.
    pass_range : float, default=30.0
        Teammates further away are not considered as receivers.
    crowded_radius : float, default=5.0
        Opponents this close to a receiver cost ``crowded_penalty``.
    crowded_penalty : float, default=4.0
        Space score lost per crowding opponent.
    pressured_radius : float, default=10.0
        Opponents this close to a receiver cost ``pressured_penalty``.
    pressured_penalty : float, default=2.0
        Space score lost per pressuring opponent.
    forward_bonus : float, default=5.0
        Score added for receivers ahead of the passer.
    human_bonus : float, default=50.0
        Score added for human receivers.
    role_bonus : Dict[str, float]
        Score added per receiver role.
    forward_back_bonus : float, default=3.0
        Score added for full-backs ahead of the passer.
    lead_base : float, default=2.0
        Minimum lead ahead of the receiver.
    lead_max : float, default=4.0
        Maximum lead ahead of the receiver.
    generic_pass_distance : float, default=12.0
        Length of a pass into space when no receiver qualifies.
    own_half_pass_distance : float, default=18.0
        Length of that pass from the own half.
    generic_pass_lateral : float, default=5.0
        Lateral random spread of a pass into space.
    power_base : float, default=0.4
        Pass power before the distance term.
    power_cap : float, default=0.8
        Maximum automatic pass power.
    edge_fraction : float, default=0.35
        Fraction of the field width beyond which a target is near the edge.
    edge_damping : float, default=0.7
        Power multiplier for near-edge targets.
    """

    pass_force: float = 3.5
    pass_arc_factor: float = 0.05
    pass_multiplier_cap: float = 1.0
    role_pass_caps: Dict[str, float] = field(default_factory=lambda: _per_role(0.8, 0.85, 0.85, 0.9))
    pass_force_cap: float = 8.0
    pass_vertical_cap: float = 2.5
    shot_force: float = 2.5
    shot_arc_factor: float = 0.18
    long_shot_distance: float = 30.0
    long_shot_bonus: float = 0.8
    shot_multiplier_cap: float = 1.0
    shot_force_cap: float = 10.0
    shot_vertical_cap: float = 4.0
    bounds_margin: float = 8.0
    center_bias: float = 0.4
    safety_margin: float = 10.0
    pass_range: float = 30.0
    crowded_radius: float = 5.0
    crowded_penalty: float = 4.0
    pressured_radius: float = 10.0
    pressured_penalty: float = 2.0
    forward_bonus: float = 5.0
    human_bonus: float = 50.0
    role_bonus: Dict[str, float] = field(default_factory=lambda: _per_role(-15.0, 0.0, 5.0, 10.0))
    forward_back_bonus: float = 3.0
    lead_base: float = 2.0
    lead_max: float = 4.0
    generic_pass_distance: float = 12.0
    own_half_pass_distance: float = 18.0
    generic_pass_lateral: float = 5.0
    power_base: float = 0.4
    power_cap: float = 0.8
    edge_fraction: float = 0.35
    edge_damping: float = 0.7


@dataclass(slots=True)
class GoalkeeperConfig:
    """Shot stopping, distribution and positioning for the keeper.

    Parameters
    ----------
    reach_speed : float, default=8.0
        Speed assumed when testing whether a save point is reachable.
    max_time_to_goal : float, default=3.0
        Trajectories arriving later than this are not treated as shots.
    intercept_depth : float, default=2.0
        Distance in front of the line where saves are attempted.
    rapid_speed_threshold : float, default=2.0
        Ball speed that triggers the urgent response.
    rapid_velocity : float, default=10.0
        Speed applied directly during an urgent response.
    rapid_arrive_radius : float, default=0.5
        Distance below which no velocity is forced.
    threat_horizon : float, default=0.3
        Seconds ahead used by the heading-towards-goal check.
    threat_min_velocity : float, default=1.0
        X velocity towards goal required for a threat.
    predict_horizon : float, default=0.5
        Seconds ahead used for predictive positioning.
    predict_depth : float, default=3.0
        Distance from the line for predictive positioning.
    predict_weight : float, default=0.4
        Fraction of the predicted lateral offset the keeper follows.
    near_intercept_speed : float, default=1.0
        Minimum ball speed for a near interception.
    near_intercept_distance : float, default=15.0
        Maximum ball distance for a near interception.
    corner_zone : float, default=8.0
        Distance from both edges that marks a corner ball.
    corner_reach : float, default=25.0
        Maximum distance the keeper travels for a corner ball.
    corner_pass_min : float, default=8.0
        Shortest pass considered from a corner.
    corner_pass_max : float, default=30.0
        Longest pass considered from a corner.
    sideline_margin : float, default=8.0
        Receivers this close to a sideline are skipped.
    corner_clear_spread : float, default=2.0
        Lateral spread of the corner clearance.
    clear_forward : float, default=10.0
        Forward distance of the forced clearance.
    clear_lateral : float, default=3.0
        Lateral spread of the forced clearance.
    clear_power : float, default=0.7
        Power used for clearances.
    midfield_jitter_x : float, default=5.0
        Random X spread of a distribution fallback.
    midfield_jitter_z : float, default=4.0
        Random lateral spread of a distribution fallback.
    come_out_threshold : float, default=0.7
        Danger level above which the keeper always comes out.
    line_ball_weight : float, default=0.7
        Ball share of the lateral position when holding the line.
    fast_ball_speed : float, default=3.0
        Ball speed that triggers predictive positioning when close.
    fast_ball_distance : float, default=20.0
        Distance for the fast-ball rule.
    angle_depth : float, default=1.0
        Distance from the line for angle positioning.
    angle_scale : float, default=4.0
        Lateral scale for angle positioning.
    release_min_distance : float, default=6.0
        Closest receiver on a forced release.
    release_max_distance : float, default=25.0
        Furthest receiver on a forced release.
    release_score_threshold : float, default=5.0
        Minimum score for a forced-release pass.
    release_lead : float, default=2.0
        Lead ahead of the forced-release receiver.
    release_power : float, default=0.6
        Power of the forced-release pass.
    backward_penalty : float, default=8.0
        Safety penalty for a pass towards the own goal.
    sideline_penalty : float, default=5.0
        Safety penalty for a receiver near a sideline.
    sideline_penalty_margin : float, default=5.0
        Sideline distance that triggers ``sideline_penalty``.
    """

    reach_speed: float = 8.0
    max_time_to_goal: float = 3.0
    intercept_depth: float = 2.0
    rapid_speed_threshold: float = 2.0
    rapid_velocity: float = 10.0
    rapid_arrive_radius: float = 0.5
    threat_horizon: float = 0.3
    threat_min_velocity: float = 1.0
    predict_horizon: float = 0.5
    predict_depth: float = 3.0
    predict_weight: float = 0.4
    near_intercept_speed: float = 1.0
    near_intercept_distance: float = 15.0
    corner_zone: float = 8.0
    corner_reach: float = 25.0
    corner_pass_min: float = 8.0
    corner_pass_max: float = 30.0
    sideline_margin: float = 8.0
    corner_clear_spread: float = 2.0
    clear_forward: float = 10.0
    clear_lateral: float = 3.0
    clear_power: float = 0.7
    midfield_jitter_x: float = 5.0
    midfield_jitter_z: float = 4.0
    come_out_threshold: float = 0.7
    line_ball_weight: float = 0.7
    fast_ball_speed: float = 3.0
    fast_ball_distance: float = 20.0
    angle_depth: float = 1.0
    angle_scale: float = 4.0
    release_min_distance: float = 6.0
    release_max_distance: float = 25.0
    release_score_threshold: float = 5.0
    release_lead: float = 2.0
    release_power: float = 0.6
    backward_penalty: float = 8.0
    sideline_penalty: float = 5.0
    sideline_penalty_margin: float = 5.0


@dataclass(slots=True)
class TreeConfig:
    """Thresholds used by the behaviour tree conditions and actions.

    Parameters
    ----------
    striker_shooting_range : float, default=20.0
        Shooting range for strikers.
    shooting_range : float, default=15.0
        Shooting range for every other role.
    low_stamina : float, default=30.0
        Stamina percentage under which range shrinks to ``low_stamina_range``.
    low_stamina_range : float, default=0.7
        Range multiplier at low stamina.
    moderate_stamina : float, default=50.0
        Stamina percentage under which range shrinks to ``moderate_stamina_range``.
    moderate_stamina_range : float, default=0.85
        Range multiplier at moderate stamina.
    shot_power : float, default=1.2
        Power requested for tree shots.
    better_positioned_factor : float, default=0.9
        A teammate is better placed when closer to goal by this factor.
    pass_min_distance : float, default=2.0
        Receivers closer than this are ignored.
    pass_min_progress : float, default=1.0
        Minimum forward progress for a tree pass.
    pass_random : float, default=5.0
        Random score spread for tree passes.
    pass_lead : float, default=2.5
        Lead ahead of the tree pass receiver.
    human_bonus : float, default=200.0
        Score added for human receivers of a tree pass.
    dribble_lateral : float, default=4.0
        Lateral random spread while dribbling.
    mark_goal_side : float, default=2.0
        Goal-side offset when marking the carrier.
    intercept_reach : Dict[str, float]
        Ball distance per role within which the agent intercepts.
    anticipation : Dict[str, float]
        Anticipation factor per role.
    fast_ball : float, default=10.0
        Ball speed above which anticipation is boosted.
    medium_ball : float, default=5.0
        Ball speed above which anticipation is unchanged.
    fast_boost : float, default=1.2
        Anticipation multiplier for fast balls.
    slow_damping : float, default=0.8
        Anticipation multiplier for slow balls.
    moving_threshold : float, default=0.5
        Velocity component that counts as a moving ball.
    airborne_height : float, default=1.0
        Ball height above which the intercept keeps the ball's height.
    keeper_intercept_depth : float, default=12.0
        Furthest a keeper's intercept point may be from the line.
    striker_lead : float, default=0.5
        Forward lead a striker takes on a slow ball.
    lane_cut_radius : float, default=3.0
        Opponent distance to the intercept point that triggers a lane cut.
    overload : Dict[str, float]
        Ball-side overload per role.
    back_same_side_overload : float, default=0.7
        Overload for a full-back when the ball is on their side.
    back_far_side_overload : float, default=0.3
        Overload for a full-back when the ball is on the far side.
    back_advance : float, default=10.0
        How far full-backs push up in the attacking half.
    midfielder_follow : float, default=0.3
        Fraction of the ball's advance midfielders follow.
    striker_run : float, default=5.0
        Striker run length with or against the ball's direction.
    min_teammate_distance : float, default=5.0
        Minimum spacing for open-space targets.
    open_space_margin : float, default=2.0
        Inset from the field edges for open-space targets.
    fallback_back_depth : float, default=5.0
        Depth from the line for full-backs falling back.
    fallback_back_width : float, default=10.0
        Width from the centre for full-backs falling back.
    """

    striker_shooting_range: float = 20.0
    shooting_range: float = 15.0
    low_stamina: float = 30.0
    low_stamina_range: float = 0.7
    moderate_stamina: float = 50.0
    moderate_stamina_range: float = 0.85
    shot_power: float = 1.2
    better_positioned_factor: float = 0.9
    pass_min_distance: float = 2.0
    pass_min_progress: float = 1.0
    pass_random: float = 5.0
    pass_lead: float = 2.5
    human_bonus: float = 200.0
    dribble_lateral: float = 4.0
    mark_goal_side: float = 2.0
    intercept_reach: Dict[str, float] = field(default_factory=lambda: _per_role(4.0, 6.0, 8.0, 10.0))
    anticipation: Dict[str, float] = field(default_factory=lambda: _per_role(1.2, 1.4, 1.7, 2.0))
    fast_ball: float = 10.0
    medium_ball: float = 5.0
    fast_boost: float = 1.2
    slow_damping: float = 0.8
    moving_threshold: float = 0.5
    airborne_height: float = 1.0
    keeper_intercept_depth: float = 12.0
    striker_lead: float = 0.5
    lane_cut_radius: float = 3.0
    overload: Dict[str, float] = field(default_factory=lambda: _per_role(0.2, 0.5, 0.6, 0.5))
    back_same_side_overload: float = 0.7
    back_far_side_overload: float = 0.3
    back_advance: float = 10.0
    midfielder_follow: float = 0.3
    striker_run: float = 5.0
    min_teammate_distance: float = 5.0
    open_space_margin: float = 2.0
    fallback_back_depth: float = 5.0
    fallback_back_width: float = 10.0


@dataclass(slots=True)
class StrategyConfig:
    """Thresholds used by the per-role decision strategies.

    Parameters
    ----------
    back_pass_probability : float, default=0.7
        Chance a full-back in possession passes rather than advances.
    back_pass_lead : float, default=5.0
        Forward lead on a full-back's pass.
    back_pass_width : float, default=0.75
        Fraction of the wide boundary targeted by that pass.
    back_advance_fraction : float, default=0.3
        Fraction of the distance to goal a full-back carries the ball.
    back_min_advance_space : float, default=6.0
        Space ahead required before a full-back carries the ball.
    back_tracking : float, default=0.2
        Fraction of the ball's movement a full-back tracks.
    back_block_offset : float, default=2.0
        Goal-side offset when blocking in the defensive third.
    back_center_shift : float, default=0.3
        Shift towards the centre while blocking.
    back_min_depth : float, default=5.0
        Closest a full-back sits to its own goal line.
    back_support_distance : float, default=10.0
        Distance behind the ball when supporting an attack.
    back_lateral_limit : float, default=12.0
        Largest lateral distance from centre while supporting.
    back_pursuit_shift : float, default=0.2
        Shift towards the centre on a full-back's pursuit target.
    back_flank_bonus : float, default=0.2
        Pursuit bonus for a ball on the full-back's flank.
    back_third_bonus : float, default=0.2
        Pursuit bonus for a ball in the defensive third.
    back_closest_bonus : float, default=0.3
        Pursuit bonus for the closest teammate.
    back_probability_cap : float, default=0.8
        Upper bound on the full-back's pursuit probability.
    mid_shot_range : float, default=12.0
        Distance at which a midfielder always considers shooting.
    mid_central_shot_range : float, default=18.0
        Distance at which a central midfielder considers shooting.
    mid_central_band : float, default=10.0
        Lateral band that counts as central.
    mid_shot_base : float, default=0.4
        Base shooting probability.
    mid_shot_close_bonus : float, default=0.3
        Bonus inside ``mid_shot_range``.
    mid_shot_central_bonus : float, default=0.2
        Bonus when central.
    mid_shot_spread : float, default=2.0
        Lateral spread on midfielder shots.
    mid_shot_power : float, default=1.2
        Power of midfielder shots.
    mid_pass_probability : float, default=0.7
        Chance a midfielder passes rather than dribbles.
    mid_dribble_drift : float, default=3.0
        Lateral drift while dribbling.
    mid_support_ahead : float, default=10.0
        Distance ahead of a teammate carrier.
    mid_support_lateral : float, default=8.0
        Lateral offset from a teammate carrier.
    mid_ball_follow : float, default=0.15
        Ball-follow scale for holding midfielders.
    mid_lateral_follow : float, default=0.1
        Lateral follow scale for holding midfielders.
    mid_min_separation : float, default=12.0
        Minimum lateral separation between the midfielders.
    mid_center_keep_out : float, default=8.0
        Radius around the centre spot midfielders avoid while holding.
    mid_center_push : float, default=10.0
        Distance from the centre spot a pushed-out target lands at.
    mid_side_bonus : float, default=0.15
        Pursuit bonus for a ball on the midfielder's side.
    mid_central_bonus : float, default=0.1
        Pursuit bonus for a central ball.
    mid_closest_bonus : float, default=0.2
        Pursuit bonus for the closest teammate.
    mid_formation_penalty_distance : float, default=15.0
        Distance from the anchor beyond which pursuit is penalised.
    mid_formation_penalty : float, default=0.3
        Penalty per unit of discipline.
    mid_cluster_radius : float, default=8.0
        Radius used by the centre clustering guard.
    mid_cluster_count : int, default=2
        Teammates inside that radius that block a pursuit.
    mid_late_run_depth : float, default=8.0
        Distance from the goal line for a late run into the box.
    mid_late_run_offset : float, default=4.0
        Lateral offset of the late run.
    mid_wide_offset : float, default=14.0
        Lateral offset when staying wide in the attacking third.
    mid_cover_depth : float, default=0.5
        Fraction of the defensive offset a midfielder covers at when the
        ball is in the defensive third on their side.
    mid_screen_depth : float, default=0.7
        Fraction of the defensive offset used when screening the far side.
    mid_screen_lateral : float, default=5.0
        Lateral offset from centre while screening.
    mid_track_weight : float, default=0.7
        Ball share of the lateral position while covering.
    mid_push_ahead : float, default=5.0
        Distance ahead of the ball when staying wide in the attacking third.
    striker_prime_range : float, default=15.0
        Distance where a striker is in prime shooting range.
    striker_decent_range : float, default=22.0
        Distance where a central striker still shoots.
    striker_central_band : float, default=12.0
        Lateral band that counts as central for a striker.
    striker_shot_base : float, default=0.6
        Base shooting probability.
    striker_shot_prime_bonus : float, default=0.3
        Bonus in prime range.
    striker_shot_central_bonus : float, default=0.2
        Bonus when central.
    striker_long_power : float, default=1.2
        Power beyond ``striker_long_distance``.
    striker_short_power : float, default=1.1
        Power inside ``striker_long_distance``.
    striker_long_distance : float, default=20.0
        Distance that selects the long shot power.
    striker_shot_spread : float, default=2.5
        Lateral spread on striker shots.
    striker_recoil : float, default=2.0
        Step back after shooting.
    striker_pass_probability : float, default=0.2
        Chance a striker out of range passes.
    striker_centralising : float, default=0.3
        Pull towards the centre while dribbling.
    striker_cross_width : float, default=10.0
        Ball width that switches the striker to cross positioning.
    striker_far_post : float, default=4.0
        Lateral offset of the far post run.
    striker_box_depth : float, default=6.0
        Distance from the goal line for the far post run.
    striker_run_ahead : float, default=6.0
        Distance ahead of the ball on a central attack.
    striker_line_gap : float, default=3.0
        Closest the striker runs to the goal line.
    striker_run_lateral : float, default=3.0
        Lateral offset of a central run.
    striker_support_lateral : float, default=6.0
        Lateral offset when supporting a carrier.
    striker_hold_follow : float, default=0.15
        Ball-follow scale while holding high.
    striker_third_bonus : float, default=0.15
        Pursuit bonus in the attacking third.
    striker_center_bonus : float, default=0.1
        Pursuit bonus for a central ball.
    striker_closest_bonus : float, default=0.25
        Pursuit bonus for the closest teammate.
    striker_center_band : float, default=8.0
        Lateral band for the central pursuit bonus.
    striker_probability_cap : float, default=0.7
        Upper bound on the striker's pursuit probability.
    release_shot_distance : float, default=20.0
        Goal distance within which a forced release may shoot.
    release_central_band : float, default=12.0
        Lateral band within which a forced release may shoot.
    release_shot_chance : Dict[str, float]
        Forced-release shooting chance per role.
    release_forward : float, default=10.0
        Forward distance of the forced-release fallback pass.
    release_center_pull : float, default=0.3
        Pull towards the centre on that pass.
    release_power : float, default=0.6
        Power of the forced-release fallback pass.
    release_shot_spread : float, default=2.0
        Lateral spread of forced-release shots.
    release_shot_power : float, default=1.2
        Power of forced-release shots.
    """

    back_pass_probability: float = 0.7
    back_pass_lead: float = 5.0
    back_pass_width: float = 0.75
    back_advance_fraction: float = 0.3
    back_min_advance_space: float = 6.0
    back_tracking: float = 0.2
    back_block_offset: float = 2.0
    back_center_shift: float = 0.3
    back_min_depth: float = 5.0
    back_support_distance: float = 10.0
    back_lateral_limit: float = 12.0
    back_pursuit_shift: float = 0.2
    back_flank_bonus: float = 0.2
    back_third_bonus: float = 0.2
    back_closest_bonus: float = 0.3
    back_probability_cap: float = 0.8
    mid_shot_range: float = 12.0
    mid_central_shot_range: float = 18.0
    mid_central_band: float = 10.0
    mid_shot_base: float = 0.4
    mid_shot_close_bonus: float = 0.3
    mid_shot_central_bonus: float = 0.2
    mid_shot_spread: float = 2.0
    mid_shot_power: float = 1.2
    mid_pass_probability: float = 0.7
    mid_dribble_drift: float = 3.0
    mid_support_ahead: float = 10.0
    mid_support_lateral: float = 8.0
    mid_ball_follow: float = 0.15
    mid_lateral_follow: float = 0.1
    mid_min_separation: float = 12.0
    mid_center_keep_out: float = 8.0
    mid_center_push: float = 10.0
    mid_side_bonus: float = 0.15
    mid_central_bonus: float = 0.1
    mid_closest_bonus: float = 0.2
    mid_formation_penalty_distance: float = 15.0
    mid_formation_penalty: float = 0.3
    mid_cluster_radius: float = 8.0
    mid_cluster_count: int = 2
    mid_late_run_depth: float = 8.0
    mid_late_run_offset: float = 4.0
    mid_wide_offset: float = 14.0
    mid_cover_depth: float = 0.5
    mid_screen_depth: float = 0.7
    mid_screen_lateral: float = 5.0
    mid_track_weight: float = 0.7
    mid_push_ahead: float = 5.0
    striker_prime_range: float = 15.0
    striker_decent_range: float = 22.0
    striker_central_band: float = 12.0
    striker_shot_base: float = 0.6
    striker_shot_prime_bonus: float = 0.3
    striker_shot_central_bonus: float = 0.2
    striker_long_power: float = 1.2
    striker_short_power: float = 1.1
    striker_long_distance: float = 20.0
    striker_shot_spread: float = 2.5
    striker_recoil: float = 2.0
    striker_pass_probability: float = 0.2
    striker_centralising: float = 0.3
    striker_cross_width: float = 10.0
    striker_far_post: float = 4.0
    striker_box_depth: float = 6.0
    striker_run_ahead: float = 6.0
    striker_line_gap: float = 3.0
    striker_run_lateral: float = 3.0
    striker_support_lateral: float = 6.0
    striker_hold_follow: float = 0.15
    striker_third_bonus: float = 0.15
    striker_center_bonus: float = 0.1
    striker_closest_bonus: float = 0.25
    striker_center_band: float = 8.0
    striker_probability_cap: float = 0.7
    release_shot_distance: float = 20.0
    release_central_band: float = 12.0
    release_shot_chance: Dict[str, float] = field(default_factory=lambda: _per_role(0.0, 0.3, 0.5, 0.7))
    release_forward: float = 10.0
    release_center_pull: float = 0.3
    release_power: float = 0.6
    release_shot_spread: float = 2.0
    release_shot_power: float = 1.2


@dataclass(slots=True)
class AIConfig:
    """Container aggregating every tuning group used by the AI core.

    Parameters
    ----------
    pitch : FieldConfig
        Field geometry.
    timing : TimingConfig
        Decision cadence and timed follow-ups.
    movement : MovementConfig
        Steering parameters.
    stamina : StaminaConfig
        Stamina model and conservation behaviour.
    pursuit : PursuitConfig
        Pursuit coordination limits.
    spacing : SpacingConfig
        Formation and spacing corrections.
    kickoff : KickoffConfig
        Kickoff formation and carrier support.
    kick : KickConfig
        Pass and shot mechanics.
    goalkeeper : GoalkeeperConfig
        Goalkeeper behaviour.
    tree : TreeConfig
        Behaviour tree thresholds.
    strategy : StrategyConfig
        Role strategy thresholds.
    """

    pitch: FieldConfig = field(default_factory=FieldConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    stamina: StaminaConfig = field(default_factory=StaminaConfig)
    pursuit: PursuitConfig = field(default_factory=PursuitConfig)
    spacing: SpacingConfig = field(default_factory=SpacingConfig)
    kickoff: KickoffConfig = field(default_factory=KickoffConfig)
    kick: KickConfig = field(default_factory=KickConfig)
    goalkeeper: GoalkeeperConfig = field(default_factory=GoalkeeperConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)


AI_CONFIG = AIConfig()
