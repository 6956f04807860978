"""Tests for formation anchors, kickoff shape and spacing."""

import pytest

from pitchmind.engine.formation import (
    adjust_position_for_spacing,
    anchor_for,
    kickoff_position,
    restart_hold_position,
    support_position,
)
from pitchmind.engine.match_state import MatchContext
from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    CENTRAL_MIDFIELDER_2,
    ROLES,
    STRIKER,
    is_in_preferred_area,
)
from pitchmind.engine.spatial import Vector3, attack_direction, is_in_attacking_half


class TestKickoffShape:
    """Positions held until the ball first moves."""

    @pytest.mark.parametrize("team", ["red", "blue"])
    def test_everyone_stays_in_own_half(self, ctx: MatchContext, make_agent, team: str) -> None:
        """No agent lines up in the opponent half for the kickoff."""
        agents = [make_agent(team, role) for role in ROLES]
        for agent in agents:
            target = kickoff_position(agent, ctx)
            assert not is_in_attacking_half(team, target.x, ctx.config.pitch), agent.role
            assert is_in_preferred_area(target, agent.role, team, ctx.config.pitch), agent.role

    @pytest.mark.parametrize("team", ["red", "blue"])
    def test_midfielder_drops_behind_anchor(self, ctx: MatchContext, make_agent, team: str) -> None:
        """At kickoff a midfielder lines up goal-side of its formation anchor."""
        midfielder = make_agent(team, CENTRAL_MIDFIELDER_1)
        anchor = anchor_for(midfielder, ctx)
        target = kickoff_position(midfielder, ctx)
        assert (target.x - anchor.x) * attack_direction(team) < 0

    def test_midfielders_split_either_side(self, ctx: MatchContext, make_agent) -> None:
        """The two central midfielders take opposite sides at kickoff."""
        left = make_agent("red", CENTRAL_MIDFIELDER_1)
        right = make_agent("red", CENTRAL_MIDFIELDER_2)
        cz = ctx.config.pitch.center_z
        assert kickoff_position(left, ctx).z < cz < kickoff_position(right, ctx).z


class TestSpacing:
    """Repulsion, centre avoidance and discipline corrections."""

    def test_repulsion_from_close_teammate(self, ctx: MatchContext, make_agent) -> None:
        """A target next to a teammate is pushed away from it."""
        agent = make_agent("red", CENTRAL_MIDFIELDER_1)
        anchor = anchor_for(agent, ctx)
        make_agent("red", CENTRAL_MIDFIELDER_2, Vector3(anchor.x + 1.0, anchor.y, anchor.z))
        adjusted = adjust_position_for_spacing(agent, anchor, ctx)
        assert adjusted.x < anchor.x
        assert adjusted.z == pytest.approx(anchor.z)

    def test_same_role_repulsion_is_stronger(self, ctx: MatchContext, make_agent) -> None:
        """Two agents in the same role push apart twice as hard."""
        agent = make_agent("red", CENTRAL_MIDFIELDER_1)
        anchor = anchor_for(agent, ctx)
        other = make_agent("red", CENTRAL_MIDFIELDER_2, Vector3(anchor.x + 1.0, anchor.y, anchor.z))
        mixed = adjust_position_for_spacing(agent, anchor, ctx)
        other.role = CENTRAL_MIDFIELDER_1
        same = adjust_position_for_spacing(agent, anchor, ctx)
        assert anchor.x - same.x == pytest.approx(2 * (anchor.x - mixed.x))

    def test_discipline_pulls_back_to_anchor(self, ctx: MatchContext, make_agent) -> None:
        """A target far from the anchor is pulled towards it."""
        agent = make_agent("red", STRIKER)
        anchor = anchor_for(agent, ctx)
        wandering = Vector3(anchor.x + 20.0, anchor.y, anchor.z)
        adjusted = adjust_position_for_spacing(agent, wandering, ctx)
        assert anchor.x < adjusted.x < wandering.x

    def test_result_stays_in_role_area(self, ctx: MatchContext, make_agent) -> None:
        """Spacing never leaves the preferred area."""
        agent = make_agent("blue", STRIKER)
        adjusted = adjust_position_for_spacing(agent, Vector3(-90.0, 2.0, 90.0), ctx)
        assert is_in_preferred_area(adjusted, STRIKER, "blue", ctx.config.pitch)

    def test_jitter_is_bounded(self, ctx: MatchContext, make_agent, rng) -> None:
        """Extreme random draws shift a target only slightly."""
        agent = make_agent("red", CENTRAL_MIDFIELDER_1)
        agent.kickoff_active = False
        anchor = anchor_for(agent, ctx)
        rng.queue(0.0, 0.0)
        low = adjust_position_for_spacing(agent, anchor, ctx)
        rng.queue(0.999, 0.999)
        high = adjust_position_for_spacing(agent, anchor, ctx)
        assert low.x < anchor.x < high.x
        assert high.x - low.x < 1.0


class TestSupport:
    """Positions offered to a teammate in possession."""

    def test_striker_offers_forward_option(self, ctx: MatchContext, make_agent) -> None:
        """The striker moves ahead of its anchor to support the carrier."""
        striker = make_agent("red", STRIKER)
        anchor = anchor_for(striker, ctx)
        target = support_position(striker, ctx)
        assert target.x > anchor.x + 5.0

    def test_restart_hold_is_behind_ball(self, ctx: MatchContext, make_agent) -> None:
        """A restart taker with no pass waits on its own side of the ball."""
        striker = make_agent("blue", STRIKER)
        ball = Vector3(7.0, 6.0, -3.0)
        target = restart_hold_position(striker, ball, ctx)
        assert target.x > ball.x
        assert target.z == pytest.approx(ball.z)
