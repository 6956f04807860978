"""Tests for shooting, passing and kick target correction."""

import math

import pytest

from pitchmind.engine.ball_actions import (
    ensure_target_in_bounds,
    force_pass,
    is_pass_direction_safe,
    lead_point,
    pass_ball,
    shoot_ball,
    space_score,
)
from pitchmind.engine.match_state import MatchContext
from pitchmind.engine.role_catalog import CENTRAL_MIDFIELDER_1, LEFT_BACK, STRIKER
from pitchmind.engine.spatial import Vector3


@pytest.fixture
def striker(ctx: MatchContext, make_agent):
    """Return a red striker ten units from goal holding the ball."""
    agent = make_agent("red", STRIKER, Vector3(42.0, 2.0, -3.0))
    ctx.state.set_possessor(agent)
    return agent


class TestShooting:
    """Shot impulses and bookkeeping."""

    def test_shot_releases_ball_and_kicks_towards_goal(self, ctx: MatchContext, world, striker) -> None:
        """A shot hands the ball back and pushes it at the goal."""
        ball = ctx.state.get_ball()
        assert shoot_ball(striker, Vector3(52.0, 1.0, -3.0), 1.1, ctx)

        assert ctx.state.get_possessor() is None
        assert not striker.has_ball
        impulse = world.impulses_for(ball)[-1]
        assert impulse.x > 0
        assert impulse.z == pytest.approx(0.0)
        assert 0 < impulse.y <= ctx.config.kick.shot_vertical_cap
        assert striker.shots == 1
        assert striker.stamina == ctx.config.stamina.max_stamina - ctx.config.stamina.shot_cost
        assert ctx.scheduler.pending_callbacks == ctx.config.timing.shot_spin_resets

    def test_shot_force_and_height_are_capped(self, ctx: MatchContext, world, striker) -> None:
        """Oversized force and arc settings are limited by the caps."""
        kick = ctx.config.kick
        kick.shot_force = 100.0
        kick.shot_arc_factor = 5.0
        ball = ctx.state.get_ball()
        assert shoot_ball(striker, Vector3(52.0, 1.0, 10.0), 5.0, ctx)

        impulse = world.impulses_for(ball)[-1]
        horizontal = math.hypot(impulse.x, impulse.z)
        assert horizontal <= kick.shot_force_cap
        assert impulse.y == pytest.approx(kick.shot_vertical_cap)

    def test_only_possessor_can_shoot(self, ctx: MatchContext, world, make_agent, striker) -> None:
        """Agents without the ball cannot shoot."""
        other = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(30.0, 2.0, -3.0))
        assert not shoot_ball(other, Vector3(52.0, 1.0, -3.0), 1.0, ctx)
        assert world.impulses_for(ctx.state.get_ball()) == []
        assert ctx.state.get_possessor() is striker

    def test_spin_is_reset_after_shot(self, ctx: MatchContext, world, striker) -> None:
        """Scheduled resets keep the ball's spin at zero."""
        ball = ctx.state.get_ball()
        shoot_ball(striker, Vector3(52.0, 1.0, -3.0), 1.0, ctx)
        world.set_angular_velocity(ball, Vector3(3.0, 3.0, 3.0))
        ctx.scheduler.advance(1000.0)
        assert world.body(ball).spin == Vector3()
        assert ctx.scheduler.pending_callbacks == 0


class TestPassing:
    """Receiver selection and pass impulses."""

    def test_pass_to_teammate(self, ctx: MatchContext, world, make_agent) -> None:
        """A midfielder passes forward to an open striker."""
        passer = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(0.0, 2.0, -3.0))
        make_agent("red", STRIKER, Vector3(12.0, 2.0, -3.0))
        ctx.state.set_possessor(passer)
        ctx.state.now_ms = 1000.0
        passer.possession_start_ms = 0.0

        assert pass_ball(passer, ctx)
        assert ctx.state.get_possessor() is None
        assert passer.possession_start_ms is None
        assert passer.passes == 1
        impulse = world.impulses_for(ctx.state.get_ball())[-1]
        assert impulse.x > 0
        assert math.hypot(impulse.x, impulse.z) <= ctx.config.kick.pass_force_cap
        assert impulse.y <= ctx.config.kick.pass_vertical_cap

    def test_pass_into_space_without_teammates(self, ctx: MatchContext, world, make_agent) -> None:
        """With nobody to find the ball is played ahead in the attack direction."""
        passer = make_agent("blue", LEFT_BACK, Vector3(30.0, 2.0, -3.0))
        ctx.state.set_possessor(passer)
        assert pass_ball(passer, ctx)
        impulse = world.impulses_for(ctx.state.get_ball())[-1]
        assert impulse.x < 0

    def test_pass_requires_possession(self, ctx: MatchContext, make_agent) -> None:
        """Agents without the ball cannot pass."""
        passer = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(0.0, 2.0, -3.0))
        assert not pass_ball(passer, ctx)

    def test_non_finite_target_keeps_possession(self, ctx: MatchContext, make_agent) -> None:
        """A NaN pass target is refused without releasing the ball or its clock."""
        passer = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(0.0, 2.0, -3.0))
        ctx.state.set_possessor(passer)
        passer.possession_start_ms = 250.0
        assert not force_pass(passer, None, Vector3(math.nan, 0.0, 0.0), 1.0, ctx)
        assert ctx.state.get_possessor() is passer
        assert passer.possession_start_ms == 250.0

    def test_space_score_penalises_crowding(self, ctx: MatchContext, make_agent) -> None:
        """Opponents near a receiver reduce its score."""
        passer = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(0.0, 2.0, -3.0))
        point = Vector3(10.0, 2.0, -3.0)
        assert space_score(point, passer, ctx) == 10.0
        make_agent("blue", CENTRAL_MIDFIELDER_1, Vector3(12.0, 2.0, -3.0))
        make_agent("blue", STRIKER, Vector3(17.0, 2.0, -3.0))
        kick = ctx.config.kick
        assert space_score(point, passer, ctx) == 10.0 - kick.crowded_penalty - kick.pressured_penalty

    def test_unsafe_direction_near_touchline(self, ctx: MatchContext) -> None:
        """Passes landing within the safety margin of an edge are unsafe."""
        origin = Vector3(0.0, 2.0, 10.0)
        assert is_pass_direction_safe(origin, Vector3(1.0, 0.0, 0.0), 10.0, ctx)
        assert not is_pass_direction_safe(origin, Vector3(0.0, 0.0, 1.0), 10.0, ctx)


class TestTargets:
    """Kick target helpers."""

    def test_in_bounds_target_unchanged(self, ctx: MatchContext) -> None:
        """Targets well inside the field are left alone."""
        point = Vector3(10.0, 1.0, 0.0)
        assert ensure_target_in_bounds(point, ctx) == point

    def test_out_of_bounds_target_pulled_towards_centre(self, ctx: MatchContext) -> None:
        """Targets outside the margin are clamped and biased to the centre."""
        pitch = ctx.config.pitch
        kick = ctx.config.kick
        corrected = ensure_target_in_bounds(Vector3(100.0, 1.0, 100.0), ctx)
        clamped_x = pitch.max_x - kick.bounds_margin
        clamped_z = pitch.max_z - kick.bounds_margin
        assert corrected.x == pytest.approx(clamped_x * (1 - kick.center_bias) + pitch.center_x * kick.center_bias)
        assert corrected.z == pytest.approx(clamped_z * (1 - kick.center_bias) + pitch.center_z * kick.center_bias)
        assert corrected.x < clamped_x

    def test_lead_point(self) -> None:
        """Lead points extend the pass line past the receiver."""
        assert lead_point(Vector3(0.0, 0.0, 0.0), Vector3(10.0, 2.0, 0.0), 2.0) == Vector3(12.0, 2.0, 0.0)
        assert lead_point(Vector3(1.0, 0.0, 1.0), Vector3(1.0, 5.0, 1.0), 2.0) == Vector3(1.0, 5.0, 1.0)
