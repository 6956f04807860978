"""Tests for interception geometry and pursuit coordination."""

import math

import pytest

from conftest import hold_ball_still, place_ball
from pitchmind.engine.config import FieldConfig, GoalkeeperConfig, TreeConfig
from pitchmind.engine.interception import (
    angle_keeper_position,
    anticipation_factor,
    compute_interception_point,
    is_heading_toward_own_goal,
    predictive_keeper_position,
    time_to_line,
)
from pitchmind.engine.match_state import MatchContext
from pitchmind.engine.pursuit import (
    count_closer_teammates,
    is_closest_teammate,
    is_loose_ball_in_area,
    is_pursuit_permitted,
    is_too_far_to_chase,
    max_pursuit_distance,
    pursuer_cap,
    should_pursue,
)
from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    CENTRAL_MIDFIELDER_2,
    GOALKEEPER,
    LEFT_BACK,
    RIGHT_BACK,
    STRIKER,
)
from pitchmind.engine.spatial import Vector3

PITCH = FieldConfig()
KEEPER = GoalkeeperConfig()


class TestInterception:
    """Trajectory prediction for saves and interceptions."""

    def test_time_to_line_without_x_velocity(self) -> None:
        """A ball with no X velocity never reaches a line."""
        assert time_to_line(Vector3(0.0, 1.0, 0.0), Vector3(0.0, 0.0, 5.0), -37.0) is None

    def test_time_to_line_is_signed(self) -> None:
        """Moving away from the line gives a negative time."""
        assert time_to_line(Vector3(0.0, 1.0, 0.0), Vector3(-10.0, 0.0, 0.0), -37.0) == pytest.approx(3.7)
        assert time_to_line(Vector3(0.0, 1.0, 0.0), Vector3(10.0, 0.0, 0.0), -37.0) < 0

    def test_reachable_save_point(self) -> None:
        """A shot arriving within the time limit yields a point in front of the line."""
        point = compute_interception_point(
            Vector3(-17.0, 1.0, -3.0),
            Vector3(-10.0, 0.0, 0.0),
            PITCH.red_goal_line_x,
            Vector3(-36.0, 2.0, -3.0),
            KEEPER.reach_speed,
            "red",
            PITCH,
            KEEPER,
        )
        assert point is not None
        assert point.x == pytest.approx(PITCH.red_goal_line_x + KEEPER.intercept_depth)
        assert point.y == 2.0

    @pytest.mark.parametrize(
        "ball_x, velocity_x",
        [(-17.0, 10.0), (-5.0, -10.0), (-37.5, -10.0)],
        ids=["moving-away", "too-slow", "already-past"],
    )
    def test_no_point_outside_time_window(self, ball_x: float, velocity_x: float) -> None:
        """Arrival times that are not positive or exceed three seconds give nothing."""
        point = compute_interception_point(
            Vector3(ball_x, 1.0, -3.0),
            Vector3(velocity_x, 0.0, 0.0),
            PITCH.red_goal_line_x,
            Vector3(-36.0, 2.0, -3.0),
            KEEPER.reach_speed,
            "red",
            PITCH,
            KEEPER,
        )
        assert point is None

    def test_reachability_is_respected(self) -> None:
        """The returned point is never farther than speed times arrival time."""
        ball = Vector3(-27.0, 1.0, 4.0)
        velocity = Vector3(-20.0, 0.0, 2.0)
        agent = Vector3(-36.0, 2.0, -10.0)
        for speed in (0.5, 2.0, 8.0, 20.0, 40.0):
            point = compute_interception_point(
                ball, velocity, PITCH.red_goal_line_x, agent, speed, "red", PITCH, KEEPER
            )
            arrival = time_to_line(ball, velocity, PITCH.red_goal_line_x)
            if point is not None:
                assert agent.distance_to(point) <= speed * arrival + 1e-9
        assert compute_interception_point(ball, velocity, PITCH.red_goal_line_x, agent, 0.5, "red", PITCH, KEEPER) is None

    def test_save_point_clamped_to_goal_mouth(self) -> None:
        """Crossings wide of the goal are clamped to the goal width."""
        point = compute_interception_point(
            Vector3(-27.0, 1.0, 10.0),
            Vector3(-10.0, 0.0, 20.0),
            PITCH.red_goal_line_x,
            Vector3(-36.0, 2.0, -3.0),
            50.0,
            "red",
            PITCH,
            KEEPER,
        )
        assert point is not None
        assert point.z == pytest.approx(PITCH.center_z + PITCH.goal_half_width)

    def test_heading_toward_own_goal(self) -> None:
        """Direction and lateral band decide whether a ball is a threat."""
        line = PITCH.red_goal_line_x
        assert is_heading_toward_own_goal(Vector3(-20.0, 1.0, -3.0), Vector3(-5.0, 0.0, 0.0), line, PITCH.center_z, KEEPER, PITCH)
        assert not is_heading_toward_own_goal(Vector3(-20.0, 1.0, -3.0), Vector3(5.0, 0.0, 0.0), line, PITCH.center_z, KEEPER, PITCH)
        assert not is_heading_toward_own_goal(Vector3(-20.0, 1.0, 20.0), Vector3(-5.0, 0.0, 0.0), line, PITCH.center_z, KEEPER, PITCH)

    def test_keeper_positions_stay_near_goal(self) -> None:
        """Angle and predictive positions stay within the goal mouth."""
        angled = angle_keeper_position(Vector3(0.0, 1.0, 20.0), "red", PITCH.red_goal_line_x, 2.0, PITCH, KEEPER)
        assert angled.x == pytest.approx(PITCH.red_goal_line_x + KEEPER.angle_depth)
        assert abs(angled.z - PITCH.center_z) <= KEEPER.angle_scale
        predicted = predictive_keeper_position(
            Vector3(-20.0, 1.0, 20.0), Vector3(-10.0, 0.0, 30.0), "red", PITCH.red_goal_line_x, 2.0, PITCH, KEEPER
        )
        assert abs(predicted.z - PITCH.center_z) <= PITCH.goal_half_width

    def test_anticipation_factor_bands(self) -> None:
        """Fast balls are read further ahead and slow balls less."""
        tree = TreeConfig()
        base = tree.anticipation[STRIKER]
        assert anticipation_factor(STRIKER, 12.0, tree) == pytest.approx(base * tree.fast_boost)
        assert anticipation_factor(STRIKER, 7.0, tree) == pytest.approx(base)
        assert anticipation_factor(STRIKER, 2.0, tree) == pytest.approx(base * tree.slow_damping)


class TestPursuitCoordination:
    """Rank, cap and distance rules for chasing a loose ball."""

    def test_closest_tie_goes_to_roster_order(self, ctx: MatchContext, make_agent) -> None:
        """Of two agents at the same distance the earlier one is closest."""
        first = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(-5.0, 2.0, 0.0))
        second = make_agent("red", CENTRAL_MIDFIELDER_2, Vector3(5.0, 2.0, 0.0))
        ball = Vector3(0.0, 2.0, 0.0)
        assert is_closest_teammate(first, ball, ctx)
        assert not is_closest_teammate(second, ball, ctx)
        assert count_closer_teammates(second, ball, ctx) == 1

    def test_cap_holds_for_loose_ball(self, ctx: MatchContext, make_agent) -> None:
        """Never more than the baseline cap may pursue a moving loose ball."""
        ball = Vector3(0.0, 2.0, 0.0)
        place_ball(ctx, ball, Vector3(3.0, 0.0, 0.0))
        agents = [
            make_agent("red", role, Vector3(distance, 2.0, 0.0))
            for role, distance in (
                (STRIKER, 3.0),
                (CENTRAL_MIDFIELDER_1, -3.0),
                (CENTRAL_MIDFIELDER_2, 6.0),
                (LEFT_BACK, -6.0),
                (RIGHT_BACK, 9.0),
            )
        ]
        pursuing = [agent for agent in agents if should_pursue(agent, ball, ctx)]
        assert len(pursuing) == pursuer_cap(ctx) == ctx.config.pursuit.baseline_cap
        assert pursuing == agents[:2]

    def test_cap_rises_while_ball_stationary(self, ctx: MatchContext) -> None:
        """Stationary balls raise the cap in stages."""
        place_ball(ctx, Vector3(0.0, 1.0, 0.0))
        assert pursuer_cap(ctx) == 2
        hold_ball_still(ctx, 6000.0)
        assert pursuer_cap(ctx) == 3
        hold_ball_still(ctx, 5000.0)
        assert pursuer_cap(ctx) == ctx.config.pursuit.very_long_stationary_cap

    def test_nobody_chases_a_teammates_ball(self, ctx: MatchContext, make_agent) -> None:
        """A teammate in possession stops every pursuit."""
        carrier = make_agent("red", STRIKER, Vector3(0.0, 2.0, 0.0))
        helper = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(2.0, 2.0, 0.0))
        ctx.state.set_possessor(carrier)
        assert not should_pursue(helper, Vector3(0.5, 2.0, 0.0), ctx)

    def test_despawned_agent_never_pursues(self, ctx: MatchContext, make_agent, world) -> None:
        """Agents without a body are excluded from ranking."""
        agent = make_agent("red", STRIKER, Vector3(0.0, 2.0, 0.0))
        world.despawn(agent.entity)
        assert not should_pursue(agent, Vector3(1.0, 2.0, 0.0), ctx)

    def test_max_distance_extends_when_stationary(self, ctx: MatchContext) -> None:
        """Role pursuit distances double for a stationary ball."""
        place_ball(ctx, Vector3(0.0, 1.0, 0.0))
        assert max_pursuit_distance(STRIKER, ctx) == 30.0
        hold_ball_still(ctx, 6000.0)
        assert max_pursuit_distance(STRIKER, ctx) == 60.0
        assert max_pursuit_distance(GOALKEEPER, ctx) == 16.0

    def test_too_far_outside_area(self, ctx: MatchContext, make_agent) -> None:
        """A keeper does not chase a ball deep in the opposing half."""
        keeper = make_agent("red", GOALKEEPER, Vector3(-36.0, 2.0, -3.0))
        assert is_too_far_to_chase(keeper, Vector3(30.0, 1.0, -3.0), ctx)
        assert not is_too_far_to_chase(keeper, Vector3(-34.0, 1.0, -3.0), ctx)


class TestStationaryBallScenario:
    """Ball at rest at (0, 1, 0) for six seconds with teammates at 5, 12 and 40 units."""

    BALL = Vector3(0.0, 1.0, 0.0)

    def _setup(self, ctx: MatchContext, make_agent, far_role: str):
        place_ball(ctx, self.BALL)
        near = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(5.0, 1.0, 0.0))
        middle = make_agent("red", CENTRAL_MIDFIELDER_2, Vector3(-12.0, 1.0, 0.0))
        far = make_agent("red", far_role, Vector3(40.0, 1.0, 0.0))
        hold_ball_still(ctx, 6000.0)
        assert ctx.state.is_ball_stationary()
        return near, middle, far

    @pytest.mark.parametrize("far_role", [GOALKEEPER, LEFT_BACK, STRIKER])
    def test_closer_teammates_are_permitted(self, ctx: MatchContext, make_agent, far_role: str) -> None:
        """The 5 and 12 unit teammates may pursue whatever the third role is."""
        near, middle, _ = self._setup(ctx, make_agent, far_role)
        assert is_pursuit_permitted(near, self.BALL, ctx)
        assert is_pursuit_permitted(middle, self.BALL, ctx)

    @pytest.mark.parametrize("far_role", [GOALKEEPER, LEFT_BACK])
    def test_far_defender_is_not_permitted(self, ctx: MatchContext, make_agent, far_role: str) -> None:
        """A keeper or full-back 40 units away exceeds its extended pursuit distance."""
        _, _, far = self._setup(ctx, make_agent, far_role)
        assert max_pursuit_distance(far_role, ctx) <= 40.0
        assert not is_pursuit_permitted(far, self.BALL, ctx)

    def test_far_striker_is_permitted(self, ctx: MatchContext, make_agent) -> None:
        """A striker's extended distance of 60 covers the 40 unit gap."""
        _, _, far = self._setup(ctx, make_agent, STRIKER)
        assert max_pursuit_distance(STRIKER, ctx) == 60.0
        assert math.isclose(ctx.position_of(far).distance_to(self.BALL), 40.0)
        assert is_pursuit_permitted(far, self.BALL, ctx)

    def test_permitted_count_within_cap(self, ctx: MatchContext, make_agent) -> None:
        """Even with the striker included the stationary cap holds."""
        agents = self._setup(ctx, make_agent, STRIKER)
        permitted = [agent for agent in agents if is_pursuit_permitted(agent, self.BALL, ctx)]
        assert len(permitted) <= pursuer_cap(ctx)


class TestEdgeBalls:
    """Relaxed reach and caps for a ball stuck against a boundary or in a corner."""

    def _keeper_and_helpers(self, make_agent, keeper_at: Vector3, helpers_at):
        keeper = make_agent("red", GOALKEEPER, keeper_at)
        roles = (STRIKER, CENTRAL_MIDFIELDER_1, CENTRAL_MIDFIELDER_2)
        for role, position in zip(roles, helpers_at):
            make_agent("red", role, position)
        return keeper

    def test_stuck_boundary_ball_extends_reach(self, ctx: MatchContext, make_agent) -> None:
        """A keeper 30 units from a stuck touchline ball may take it; 36 units is too far."""
        ball = Vector3(7.0, 1.0, 24.0)
        place_ball(ctx, ball)
        keeper = make_agent("red", GOALKEEPER, Vector3(7.0, 1.0, -6.0))
        assert is_loose_ball_in_area(keeper, ball, ctx)

        ctx.engine.set_position(keeper.entity, Vector3(7.0, 1.0, -12.0))
        assert not is_loose_ball_in_area(keeper, ball, ctx)

    def test_moving_boundary_ball_is_not_stuck(self, ctx: MatchContext, make_agent) -> None:
        """The relaxed reach only applies while the ball is barely moving."""
        ball = Vector3(7.0, 1.0, 24.0)
        place_ball(ctx, ball, Vector3(3.0, 0.0, 0.0))
        keeper = make_agent("red", GOALKEEPER, Vector3(7.0, 1.0, -6.0))
        assert not is_loose_ball_in_area(keeper, ball, ctx)

    def test_boundary_cap_is_three(self, ctx: MatchContext, make_agent) -> None:
        """With two teammates closer the keeper still joins, with three it does not."""
        ball = Vector3(7.0, 1.0, 24.0)
        place_ball(ctx, ball)
        keeper = self._keeper_and_helpers(
            make_agent,
            Vector3(7.0, 1.0, -6.0),
            [Vector3(7.0, 1.0, 20.0), Vector3(7.0, 1.0, 16.0)],
        )
        assert count_closer_teammates(keeper, ball, ctx) == 2
        assert is_loose_ball_in_area(keeper, ball, ctx)

        make_agent("red", CENTRAL_MIDFIELDER_2, Vector3(7.0, 1.0, 12.0))
        assert count_closer_teammates(keeper, ball, ctx) == 3
        assert not is_loose_ball_in_area(keeper, ball, ctx)

    def test_stuck_corner_ball_extends_reach(self, ctx: MatchContext, make_agent) -> None:
        """Corner balls reach 45 units, beyond the 35 allowed on a touchline."""
        ball = Vector3(48.0, 1.0, 22.0)
        place_ball(ctx, ball)
        keeper = make_agent("red", GOALKEEPER, Vector3(8.0, 1.0, 22.0))
        assert is_loose_ball_in_area(keeper, ball, ctx)

        ctx.engine.set_position(keeper.entity, Vector3(2.0, 1.0, 22.0))
        assert not is_loose_ball_in_area(keeper, ball, ctx)

    def test_corner_cap_is_two(self, ctx: MatchContext, make_agent) -> None:
        """Only two agents crowd a corner ball."""
        ball = Vector3(48.0, 1.0, 22.0)
        place_ball(ctx, ball)
        keeper = self._keeper_and_helpers(make_agent, Vector3(8.0, 1.0, 22.0), [Vector3(44.0, 1.0, 22.0)])
        assert is_loose_ball_in_area(keeper, ball, ctx)

        make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(40.0, 1.0, 22.0))
        assert not is_loose_ball_in_area(keeper, ball, ctx)


class TestChaseAllowance:
    """Margins on pursuit distance used to call off a chase."""

    def test_open_play_margin(self, ctx: MatchContext, make_agent) -> None:
        """Away from the edges a keeper covers 1.5 times its distance of 8."""
        keeper = make_agent("red", GOALKEEPER, Vector3(-25.0, 1.0, -3.0))
        assert not is_too_far_to_chase(keeper, Vector3(-15.0, 1.0, -3.0), ctx)
        assert is_too_far_to_chase(keeper, Vector3(-11.0, 1.0, -3.0), ctx)

    def test_boundary_margin(self, ctx: MatchContext, make_agent) -> None:
        """Within the edge band the allowance doubles."""
        keeper = make_agent("red", GOALKEEPER, Vector3(-25.0, 1.0, 6.0))
        for role, position in (
            (STRIKER, Vector3(-15.0, 1.0, 13.0)),
            (CENTRAL_MIDFIELDER_1, Vector3(-16.0, 1.0, 14.0)),
            (CENTRAL_MIDFIELDER_2, Vector3(-14.0, 1.0, 14.0)),
        ):
            make_agent("red", role, position)

        near = Vector3(-15.0, 1.0, 14.0)
        assert ctx.position_of(keeper).distance_to(near) > 12.0
        assert not is_too_far_to_chase(keeper, near, ctx)
        assert is_too_far_to_chase(keeper, Vector3(-8.0, 1.0, 14.0), ctx)

    def test_corner_margin(self, ctx: MatchContext, make_agent) -> None:
        """In a corner the allowance triples."""
        keeper = make_agent("red", GOALKEEPER, Vector3(-30.0, 1.0, 0.0))
        make_agent("red", STRIKER, Vector3(-30.0, 1.0, 19.0))
        make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(-29.0, 1.0, 20.0))

        near = Vector3(-30.0, 1.0, 20.0)
        assert ctx.position_of(keeper).distance_to(near) > 16.0
        assert not is_too_far_to_chase(keeper, near, ctx)
        assert is_too_far_to_chase(keeper, Vector3(-30.0, 1.0, 25.0), ctx)

    def test_nearest_agents_always_cover_edge_balls(self, ctx: MatchContext, make_agent) -> None:
        """One of the nearest agents is never too far from a ball near an edge."""
        keeper = make_agent("red", GOALKEEPER, Vector3(-30.0, 1.0, -20.0))
        assert not is_too_far_to_chase(keeper, Vector3(45.0, 1.0, 24.0), ctx)
