"""Tests for the per-role decision strategies."""

from typing import List

import pytest

import pitchmind.engine.roles.forwards as forwards
from conftest import place_ball
from pitchmind.engine.match_state import MatchContext
from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    CENTRAL_MIDFIELDER_2,
    GOALKEEPER,
    LEFT_BACK,
    RIGHT_BACK,
    ROLES,
    STRIKER,
)
from pitchmind.engine.roles import (
    ROLE_STRATEGY_CLASSES,
    FullBackStrategy,
    GoalkeeperStrategy,
    LeftCentralMidfielderStrategy,
    StrikerStrategy,
    create_role_strategy,
)
from pitchmind.engine.spatial import Vector3


class TestStrategyFactory:
    """Mapping from roles to strategy classes."""

    def test_every_role_has_a_strategy(self) -> None:
        """All catalogued roles are covered."""
        assert set(ROLE_STRATEGY_CLASSES) == set(ROLES)

    @pytest.mark.parametrize(
        "role, expected",
        [
            (GOALKEEPER, GoalkeeperStrategy),
            (LEFT_BACK, FullBackStrategy),
            (RIGHT_BACK, FullBackStrategy),
            (CENTRAL_MIDFIELDER_1, LeftCentralMidfielderStrategy),
            (STRIKER, StrikerStrategy),
        ],
    )
    def test_create_role_strategy(self, role: str, expected: type) -> None:
        """Factories return a fresh instance of the mapped class."""
        strategy = create_role_strategy(role)
        assert isinstance(strategy, expected)
        assert strategy.role == role
        assert strategy is not create_role_strategy(role)

    def test_unknown_role_raises(self) -> None:
        """Unknown roles are rejected with the known ones listed."""
        with pytest.raises(ValueError, match="Known roles"):
            create_role_strategy("libero")

    def test_midfielders_favour_opposite_sides(self) -> None:
        """The two central midfielders lean to different flanks."""
        left = create_role_strategy(CENTRAL_MIDFIELDER_1)
        right = create_role_strategy(CENTRAL_MIDFIELDER_2)
        assert left.side_sign == -1.0
        assert right.side_sign == 1.0


class TestStriker:
    """Striker shooting behaviour."""

    def test_shoots_in_prime_range(self, ctx: MatchContext, make_agent, rng, world, monkeypatch) -> None:
        """Ten units out the striker shoots near the goal centre with a capped lift."""
        striker = make_agent("red", STRIKER, Vector3(42.0, 2.0, -3.0))
        ctx.state.set_possessor(striker)
        targets: List[Vector3] = []
        real_shoot = forwards.shoot_ball

        def recording_shoot(agent, target, power, context) -> bool:
            targets.append(target)
            return real_shoot(agent, target, power, context)

        monkeypatch.setattr(forwards, "shoot_ball", recording_shoot)
        rng.queue(0.0, 0.999)

        assert striker.strategy.decide(striker, ctx)

        assert len(targets) == 1
        pitch = ctx.config.pitch
        assert targets[0].x == pitch.blue_goal_line_x
        assert abs(targets[0].z - pitch.center_z) <= ctx.config.strategy.striker_shot_spread
        impulses = world.impulses_for(ctx.state.get_ball())
        assert len(impulses) == 1
        assert 0.0 < impulses[0].y <= ctx.config.kick.shot_vertical_cap
        assert ctx.state.get_possessor() is None
        assert striker.shots == 1

    def test_carries_ball_outside_shooting_range(
        self, ctx: MatchContext, make_agent, rng, monkeypatch
    ) -> None:
        """Out of range with a missed pass roll the striker carries the ball at goal."""
        my_pos = Vector3(10.0, 2.0, -3.0)
        striker = make_agent("red", STRIKER, my_pos)
        ctx.state.set_possessor(striker)
        monkeypatch.setattr(forwards, "shoot_ball", pytest.fail)
        rng.queue(0.999)

        target = striker.strategy.in_possession(striker, my_pos, ctx)

        assert target.x == ctx.config.pitch.blue_goal_line_x
        assert ctx.state.get_possessor() is striker


class TestGoalkeeper:
    """Keeper shot stopping and distribution."""

    def test_rapid_response_dives_at_save_point(self, ctx: MatchContext, make_agent, world) -> None:
        """A fast shot sends the keeper to the save point with a dive velocity."""
        keeper = make_agent("red", GOALKEEPER)
        my_pos = ctx.position_of(keeper)
        ball_pos = Vector3(-27.0, 1.0, -3.0)
        ball_vel = Vector3(-10.0, 0.0, 0.0)
        place_ball(ctx, ball_pos, ball_vel)
        pending = ctx.scheduler.pending_callbacks

        assert keeper.strategy.rapid_response(keeper, ball_pos, ball_vel, my_pos, ctx)

        assert keeper.target_position == Vector3(-35.0, my_pos.y, -3.0)
        dives = [velocity for handle, velocity in world.velocities if handle == keeper.entity]
        assert len(dives) == 1
        assert dives[0].x == pytest.approx(ctx.config.goalkeeper.rapid_velocity)
        assert ctx.scheduler.pending_callbacks == pending + 1

    def test_rapid_response_ignores_slow_shots(self, ctx: MatchContext, make_agent) -> None:
        """A shot that will not arrive in time is left to normal positioning."""
        keeper = make_agent("red", GOALKEEPER)
        before = keeper.target_position
        ball_pos = Vector3(-5.0, 1.0, -3.0)
        ball_vel = Vector3(-10.0, 0.0, 0.0)
        assert not keeper.strategy.rapid_response(keeper, ball_pos, ball_vel, ctx.position_of(keeper), ctx)
        assert keeper.target_position == before

    def test_distribution_without_teammates_clears(self, ctx: MatchContext, make_agent) -> None:
        """A lone keeper clears towards midfield and resets the possession clock."""
        keeper = make_agent("red", GOALKEEPER)
        ctx.state.set_possessor(keeper)
        keeper.possession_start_ms = 0.0

        keeper.strategy._distribute(keeper, ctx.position_of(keeper), ctx)

        assert ctx.state.get_possessor() is None
        assert keeper.possession_start_ms is None
        assert keeper.passes == 1

    def test_distribution_after_limit_clears_long(self, ctx: MatchContext, make_agent, world) -> None:
        """Past the holding limit the keeper hoofs the ball upfield."""
        keeper = make_agent("red", GOALKEEPER)
        make_agent("red", CENTRAL_MIDFIELDER_1)
        ctx.state.set_possessor(keeper)
        keeper.possession_start_ms = 0.0
        ctx.state.now_ms = 3500.0

        keeper.strategy._distribute(keeper, ctx.position_of(keeper), ctx)

        assert ctx.state.get_possessor() is None
        impulse = world.impulses_for(ctx.state.get_ball())[-1]
        assert impulse.x > 0


class TestFullBack:
    """Full-back shape."""

    def test_blocks_ball_in_defensive_third_on_flank(self, ctx: MatchContext, make_agent) -> None:
        """Goal-side of the ball and shifted towards the centre."""
        back = make_agent("red", LEFT_BACK)
        my_pos = ctx.position_of(back)
        target = back.strategy.defensive_position(back, Vector3(-30.0, 1.0, -20.0), my_pos, ctx)
        assert target.x == pytest.approx(-32.0)
        assert target.z == pytest.approx(-14.9)

    def test_block_never_steps_past_base_line(self, ctx: MatchContext, make_agent) -> None:
        """A ball at the edge of the third does not pull the back beyond its base line."""
        back = make_agent("red", LEFT_BACK)
        pitch = ctx.config.pitch
        ball = Vector3(pitch.red_goal_line_x + 11.5, 1.0, -20.0)
        target = back.strategy.defensive_position(back, ball, ctx.position_of(back), ctx)
        assert target.x <= pitch.red_goal_line_x + pitch.defensive_offset_x

    def test_attacking_half_gives_width(self, ctx: MatchContext, make_agent) -> None:
        """Upfield the right-back stays wide on its own flank."""
        back = make_agent("blue", RIGHT_BACK)
        pitch = ctx.config.pitch
        target = back.strategy.defensive_position(back, Vector3(0.0, 1.0, -3.0), ctx.position_of(back), ctx)
        assert target.z > pitch.center_z
        assert target.x == pytest.approx(ctx.config.strategy.back_support_distance)


class TestMidfielder:
    """Central midfielder possession play."""

    def test_passes_when_out_of_range(self, ctx: MatchContext, make_agent, rng) -> None:
        """Far from goal a successful pass roll releases the ball."""
        mid = make_agent("red", CENTRAL_MIDFIELDER_1)
        ctx.state.set_possessor(mid)
        rng.queue(0.1)

        target = mid.strategy.in_possession(mid, ctx.position_of(mid), ctx)

        assert mid.passes == 1
        assert ctx.state.get_possessor() is None
        assert target.x == ctx.config.pitch.blue_goal_line_x

    def test_dribbles_on_failed_pass_roll(self, ctx: MatchContext, make_agent, rng) -> None:
        """A failed pass roll keeps the ball and drifts to the favoured side."""
        mid = make_agent("red", CENTRAL_MIDFIELDER_1)
        ctx.state.set_possessor(mid)
        rng.queue(0.9)
        my_pos = ctx.position_of(mid)

        target = mid.strategy.in_possession(mid, my_pos, ctx)

        assert ctx.state.get_possessor() is mid
        assert target.z == pytest.approx(my_pos.z - ctx.config.strategy.mid_dribble_drift)
