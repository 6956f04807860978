"""Tests for shared match state, the match context and the scheduler."""

from typing import List

import pytest

from conftest import hold_ball_still, place_ball
from pitchmind.engine.collaborators import HumanPlayer
from pitchmind.engine.match_state import BEHAVIOUR_TREE, MatchContext, SharedMatchState
from pitchmind.engine.role_catalog import CENTRAL_MIDFIELDER_1, GOALKEEPER, LEFT_BACK, STRIKER
from pitchmind.engine.spatial import Vector3


class TestPossession:
    """Exclusive possession bookkeeping."""

    def test_set_possessor_is_exclusive(self, ctx: MatchContext, make_agent) -> None:
        """Handing the ball on clears the previous holder first."""
        first = make_agent("red", STRIKER)
        second = make_agent("blue", LEFT_BACK)
        human = HumanPlayer(team="red", role=CENTRAL_MIDFIELDER_1, entity=None)
        state = ctx.state

        for holder in (first, second, human, first, None, second):
            state.set_possessor(holder)
            holders = [p for p in (first, second, human) if p.has_ball]
            assert holders == ([holder] if holder is not None else [])
            assert state.get_possessor() is holder

    def test_last_possessor_is_sticky(self, ctx: MatchContext, make_agent) -> None:
        """Releasing the ball keeps the last holder for attribution."""
        striker = make_agent("red", STRIKER)
        ctx.state.set_possessor(striker)
        ctx.state.set_possessor(None)
        assert ctx.state.get_possessor() is None
        assert ctx.state.last_possessor is striker

    def test_removing_holder_releases_ball(self, ctx: MatchContext, make_agent) -> None:
        """An agent leaving the roster drops the ball."""
        striker = make_agent("red", STRIKER)
        ctx.state.set_possessor(striker)
        ctx.state.remove_ai_player(striker)
        assert ctx.state.get_possessor() is None
        assert not striker.has_ball


class TestRosters:
    """AI rosters and participant lists."""

    def test_rosters_keep_registration_order(self, ctx: MatchContext, make_agent) -> None:
        """Agents join their team's roster in creation order."""
        keeper = make_agent("red", GOALKEEPER)
        striker = make_agent("red", STRIKER)
        opponent = make_agent("blue", STRIKER)
        assert ctx.state.ai_team("red") == [keeper, striker]
        assert ctx.state.ai_teammates(keeper) == [striker]
        assert ctx.state.participants() == [keeper, striker, opponent]

    def test_teammates_skip_frozen_and_despawned(self, ctx: MatchContext, make_agent, world) -> None:
        """Frozen or despawned teammates are invisible to decisions."""
        keeper = make_agent("red", GOALKEEPER)
        frozen = make_agent("red", LEFT_BACK)
        gone = make_agent("red", STRIKER)
        frozen.is_frozen = True
        world.despawn(gone.entity)
        assert ctx.teammates(keeper) == []

    def test_humans_are_visible(self, ctx: MatchContext, make_agent, world) -> None:
        """Registered human players count as teammates."""
        keeper = make_agent("red", GOALKEEPER)
        entity = world.spawn(Vector3(0.0, 2.0, 0.0), 70.0)
        human = HumanPlayer(team="red", role=STRIKER, entity=entity)
        ctx.state.register_human(human)
        assert ctx.teammates(keeper) == [human]
        assert not human.is_ai


class TestBallTracking:
    """Ball-moved latch and stationary detection."""

    def test_ball_moved_latches(self, ctx: MatchContext) -> None:
        """Leaving the spawn point sets the flag until a restart clears it."""
        state = ctx.state
        spawn = Vector3(*ctx.config.pitch.ball_spawn)
        assert not state.track_ball_moved(spawn)
        assert state.track_ball_moved(spawn + Vector3(1.0, 0.0, 0.0))
        assert state.track_ball_moved(spawn)
        state.reset_ball_moved()
        assert not state.has_ball_moved()

    def test_stationary_after_time_limit(self, ctx: MatchContext) -> None:
        """A loose ball idle for five seconds is stationary."""
        place_ball(ctx, Vector3(0.0, 1.0, 0.0))
        hold_ball_still(ctx, 4999.0)
        assert not ctx.state.is_ball_stationary()
        ctx.state.now_ms += 1.0
        ctx.state.update_ball_stationary(Vector3(0.5, 1.0, 0.0))
        assert ctx.state.is_ball_stationary()
        assert ctx.state.stationary_duration_ms == pytest.approx(5000.0)

    def test_movement_resets_stationary(self, ctx: MatchContext) -> None:
        """Moving beyond the threshold clears the flag within one sample."""
        place_ball(ctx, Vector3(0.0, 1.0, 0.0))
        hold_ball_still(ctx, 6000.0)
        assert ctx.state.is_ball_stationary()
        ctx.state.update_ball_stationary(Vector3(2.0, 1.0, 0.0))
        assert not ctx.state.is_ball_stationary()

    def test_possession_resets_stationary(self, ctx: MatchContext, make_agent) -> None:
        """A held ball is never stationary."""
        striker = make_agent("red", STRIKER)
        place_ball(ctx, Vector3(0.0, 1.0, 0.0))
        hold_ball_still(ctx, 6000.0)
        ctx.state.set_possessor(striker)
        assert not ctx.state.is_ball_stationary()

    def test_stopped_play_resets_stationary(self, ctx: MatchContext) -> None:
        """Tracking pauses outside open play."""
        ctx.state.status = "goal-scored"
        place_ball(ctx, Vector3(0.0, 1.0, 0.0))
        hold_ball_still(ctx, 6000.0)
        assert not ctx.state.is_ball_stationary()


class TestContext:
    """Match context configuration and collaborator guards."""

    def test_unknown_decision_system_raises(self) -> None:
        """Only the two decision systems may be selected."""
        state = SharedMatchState()
        with pytest.raises(ValueError):
            state.set_decision_system("neural")
        state.set_decision_system(BEHAVIOUR_TREE)
        assert state.decision_system == BEHAVIOUR_TREE

    def test_missing_ball_is_none(self, world, rng) -> None:
        """Queries on a context without a ball return None."""
        ctx = MatchContext(world, rng)
        assert ctx.ball_position() is None
        assert ctx.ball_velocity() is None


class TestScheduler:
    """Decision cadence and delayed callbacks."""

    def test_agents_decide_at_role_cadence(self, ctx: MatchContext, make_agent, monkeypatch) -> None:
        """Keepers decide every 150 ms, outfield players every 500 ms."""
        keeper = make_agent("red", GOALKEEPER)
        striker = make_agent("red", STRIKER)
        calls: List[str] = []
        monkeypatch.setattr(keeper, "make_decision", lambda: calls.append("keeper"))
        monkeypatch.setattr(striker, "make_decision", lambda: calls.append("striker"))
        ctx.scheduler.register(keeper, keeper.decision_interval_ms)
        ctx.scheduler.register(striker, striker.decision_interval_ms)

        for _ in range(63):
            ctx.scheduler.advance(16.0)

        assert calls.count("keeper") == 6
        assert calls.count("striker") == 2

    def test_callbacks_run_in_time_order(self, ctx: MatchContext) -> None:
        """Delayed callbacks fire in due order regardless of queue order."""
        fired: List[str] = []
        ctx.scheduler.call_later(300.0, lambda: fired.append("late"))
        ctx.scheduler.call_later(100.0, lambda: fired.append("early"))
        ctx.scheduler.advance(200.0)
        assert fired == ["early"]
        ctx.scheduler.advance(200.0)
        assert fired == ["early", "late"]
        assert ctx.now_ms == pytest.approx(400.0)

    def test_call_repeating(self, ctx: MatchContext) -> None:
        """Repeating callbacks run the requested number of times."""
        fired: List[float] = []
        ctx.scheduler.call_repeating(50.0, 4, lambda: fired.append(ctx.now_ms))
        ctx.scheduler.advance(1000.0)
        assert fired == [50.0, 100.0, 150.0, 200.0]

    def test_unregister_drops_owned_callbacks(self, ctx: MatchContext, make_agent) -> None:
        """Removing an agent cancels its decisions and pending callbacks."""
        striker = make_agent("red", STRIKER)
        fired: List[str] = []
        ctx.scheduler.register(striker, 500.0)
        ctx.scheduler.call_later(100.0, lambda: fired.append("owned"), owner=striker)
        ctx.scheduler.call_later(100.0, lambda: fired.append("free"))
        ctx.scheduler.unregister(striker)
        ctx.scheduler.advance(200.0)
        assert fired == ["free"]
        assert not ctx.scheduler.is_registered(striker)

    def test_failing_callback_is_contained(self, ctx: MatchContext) -> None:
        """A raising callback does not stop later ones."""
        fired: List[str] = []

        def explode() -> None:
            raise RuntimeError("boom")

        ctx.scheduler.call_later(10.0, explode)
        ctx.scheduler.call_later(20.0, lambda: fired.append("after"))
        ctx.scheduler.advance(50.0)
        assert fired == ["after"]

    def test_non_positive_interval_raises(self, ctx: MatchContext, make_agent) -> None:
        """Zero intervals are rejected at registration."""
        striker = make_agent("red", STRIKER)
        with pytest.raises(ValueError):
            ctx.scheduler.register(striker, 0.0)
