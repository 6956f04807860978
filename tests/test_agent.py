"""Tests for the AI agent lifecycle, decisions, movement and stamina."""

import math

import pytest

from conftest import place_ball
import pitchmind.engine.agent as agent_module
from pitchmind.engine.agent import AIAgent
from pitchmind.engine.match_state import BEHAVIOUR_TREE, MatchContext
from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    GOALKEEPER,
    LEFT_BACK,
    STRIKER,
    formation_anchor,
    possession_limit_ms,
)
from pitchmind.engine.spatial import Vector3
from pitchmind.utils.debug import MatchDebugger


class TestConstruction:
    """Agent creation and lifecycle."""

    def test_unknown_team_raises(self, ctx: MatchContext, world) -> None:
        """Only red and blue agents can be built."""
        entity = world.spawn(Vector3(), 1.0)
        with pytest.raises(ValueError):
            AIAgent("green", STRIKER, entity, ctx)

    def test_unknown_role_raises(self, ctx: MatchContext, world) -> None:
        """Roles must come from the catalogue."""
        entity = world.spawn(Vector3(), 1.0)
        with pytest.raises(ValueError):
            AIAgent("red", "sweeper", entity, ctx)
        assert ctx.state.ai_team("red") == []

    def test_starts_at_formation_anchor(self, ctx: MatchContext, make_agent) -> None:
        """New agents stand on their anchor and join their team roster."""
        agent = make_agent("blue", LEFT_BACK)
        anchor = formation_anchor(LEFT_BACK, "blue", ctx.config.pitch)
        assert agent.target_position == anchor
        assert ctx.position_of(agent) == anchor
        assert ctx.state.ai_team("blue") == [agent]
        assert agent.kickoff_active
        assert agent.restart_behavior is None

    def test_keeper_decides_faster(self, make_agent) -> None:
        """Keepers use the shorter decision interval."""
        keeper = make_agent("red", GOALKEEPER)
        striker = make_agent("red", STRIKER)
        assert keeper.decision_interval_ms < striker.decision_interval_ms

    def test_activate_and_deactivate(self, ctx: MatchContext, make_agent) -> None:
        """Activation registers with the scheduler and deactivation undoes it."""
        agent = make_agent("red", STRIKER)
        agent.activate()
        assert ctx.scheduler.is_registered(agent)
        agent.target_position = Vector3(30.0, 2.0, 0.0)

        agent.deactivate()

        assert not ctx.scheduler.is_registered(agent)
        assert not agent.kickoff_active
        assert agent.target_position == agent.get_role_based_position()

    def test_restart_behaviour_values(self, make_agent) -> None:
        """Only the documented restart behaviours are accepted."""
        agent = make_agent("red", STRIKER)
        agent.set_restart_behavior("pass-to-teammates")
        assert agent.restart_behavior == "pass-to-teammates"
        agent.set_restart_behavior(None)
        assert agent.restart_behavior is None
        with pytest.raises(ValueError):
            agent.set_restart_behavior("long-ball")


class TestStamina:
    """Stamina tiers, regeneration and drain."""

    @pytest.mark.parametrize(
        "stamina, multiplier",
        [(100.0, 1.0), (75.0, 1.0), (60.0, 0.9), (30.0, 0.75), (12.0, 0.6), (5.0, 0.4), (0.0, 0.4)],
    )
    def test_speed_tiers(self, make_agent, stamina: float, multiplier: float) -> None:
        """Speed drops in steps as stamina falls."""
        agent = make_agent("red", STRIKER)
        agent.stamina = stamina
        assert agent.speed_multiplier() == multiplier

    def test_standing_regenerates(self, make_agent) -> None:
        """Standing still regains stamina faster than walking."""
        agent = make_agent("red", STRIKER)
        agent.stamina = 50.0
        agent.update_stamina(0.0, 2.0)
        assert agent.stamina == pytest.approx(55.0)
        agent.update_stamina(2.0, 1.0)
        assert agent.stamina == pytest.approx(56.2)

    def test_running_drains(self, make_agent) -> None:
        """Running costs stamina per second."""
        agent = make_agent("red", STRIKER)
        agent.stamina = 50.0
        agent.update_stamina(6.0, 3.0)
        assert agent.stamina == pytest.approx(47.0)

    def test_stamina_is_clamped(self, make_agent) -> None:
        """Stamina stays within zero and the maximum."""
        agent = make_agent("red", STRIKER)
        agent.update_stamina(0.0, 10.0)
        assert agent.stamina == agent.ctx.config.stamina.max_stamina
        agent.stamina = 0.5
        agent.update_stamina(6.0, 5.0)
        assert agent.stamina == 0.0
        agent.drain_stamina(10.0)
        assert agent.stamina == 0.0

    def test_conservation_threshold_depends_on_role(self, make_agent) -> None:
        """Strikers start conserving earlier than keepers."""
        keeper = make_agent("red", GOALKEEPER)
        striker = make_agent("red", STRIKER)
        keeper.stamina = striker.stamina = 30.0
        assert striker.should_conserve_stamina()
        assert not keeper.should_conserve_stamina()


class TestStaminaConservation:
    """Cautious play while stamina is below the role threshold."""

    def test_conserving_carrier_passes_at_once(self, ctx: MatchContext, make_agent) -> None:
        """A tired striker gives the ball away on its next decision."""
        striker = make_agent("red", STRIKER, Vector3(0.0, 2.0, -3.0))
        striker.stamina = 20.0
        ctx.state.set_possessor(striker)
        striker.make_decision()
        assert striker.passes == 1
        assert ctx.state.get_possessor() is None

    @pytest.mark.parametrize(
        ("stamina", "draw", "pursues"),
        [
            (36.0, 0.30, True),
            (36.0, 0.31, False),
            (10.0, 0.25, True),
            (10.0, 0.26, False),
        ],
    )
    def test_pursuit_chance_scales_with_stamina(
        self, ctx: MatchContext, make_agent, rng, stamina: float, draw: float, pursues: bool
    ) -> None:
        """Pursuit tendency is scaled by stamina, never below 0.3 of the role's."""
        striker = make_agent("red", STRIKER, Vector3(0.0, 2.0, -3.0))
        striker.stamina = stamina
        ball = Vector3(4.0, 2.0, -3.0)
        place_ball(ctx, ball)
        rng.queue(draw)
        striker.make_decision()
        target = striker.target_position
        if pursues:
            assert target.x == pytest.approx(ball.x)
            assert target.z == pytest.approx(ball.z)
        else:
            assert target.distance_to(ball) > 1.5

    def test_recovered_agent_leaves_conservation(self, make_agent, monkeypatch) -> None:
        """Once stamina climbs back over the threshold normal decisions resume."""
        striker = make_agent("red", STRIKER, Vector3(0.0, 2.0, -3.0))
        striker.kickoff_active = False
        calls = []
        monkeypatch.setattr(striker.strategy, "decide", lambda me, context: calls.append(me) or True)

        striker.stamina = 38.0
        striker.make_decision()
        assert striker.should_conserve_stamina()
        assert calls == []

        striker.update_stamina(0.0, 2.0)
        assert not striker.should_conserve_stamina()
        striker.make_decision()
        assert calls == [striker]


class TestDecisions:
    """The guarded decision step."""

    def test_kickoff_flag_clears_once_ball_moves(self, ctx: MatchContext, make_agent) -> None:
        """The first decision after the ball leaves the spot ends the kickoff shape."""
        agent = make_agent("red", STRIKER)
        agent.make_decision()
        assert agent.kickoff_active

        ctx.state.track_ball_moved(Vector3(20.0, 1.0, -3.0))
        agent.make_decision()

        assert not agent.kickoff_active

    def test_invalid_target_falls_back_to_anchor(self, ctx: MatchContext, make_agent, monkeypatch, tmp_path) -> None:
        """A non-finite target is logged and replaced by the anchor."""
        debugger = MatchDebugger(str(tmp_path))
        ctx.debugger = debugger
        agent = make_agent("red", STRIKER)
        agent.kickoff_active = False

        def broken(me, context) -> bool:
            me.target_position = Vector3(math.nan, 2.0, 0.0)
            return True

        monkeypatch.setattr(agent.strategy, "decide", broken)
        agent.make_decision()
        debugger.close()

        assert agent.target_position == agent.get_role_based_position()
        assert any("INVALID_TARGET" in line for line in debugger.get_recent_events(50))

    def test_failing_strategy_is_contained(self, ctx: MatchContext, make_agent, monkeypatch, tmp_path) -> None:
        """An exception inside a strategy is logged rather than raised."""
        debugger = MatchDebugger(str(tmp_path))
        ctx.debugger = debugger
        agent = make_agent("red", STRIKER)
        agent.kickoff_active = False
        agent.target_position = Vector3(30.0, 2.0, 0.0)

        def explode(me, context) -> bool:
            raise RuntimeError("boom")

        monkeypatch.setattr(agent.strategy, "decide", explode)
        agent.make_decision()
        debugger.close()

        assert agent.target_position == agent.get_role_based_position()
        assert any("DECISION_FAILED" in line for line in debugger.get_recent_events(50))
        assert "DECISION_FAILED" in debugger.log_path.read_text(encoding="utf-8")

    def test_unsuccessful_strategy_returns_to_anchor(self, make_agent, monkeypatch) -> None:
        """A strategy that produces nothing leaves the agent on its anchor."""
        agent = make_agent("red", STRIKER)
        agent.kickoff_active = False
        agent.target_position = Vector3(30.0, 2.0, 0.0)
        monkeypatch.setattr(agent.strategy, "decide", lambda me, context: False)
        agent.make_decision()
        assert agent.target_position == agent.get_role_based_position()

    def test_behaviour_tree_system_is_used_when_selected(self, ctx: MatchContext, make_agent, monkeypatch) -> None:
        """Selecting the tree routes decisions away from the role strategy."""
        agent = make_agent("red", STRIKER)
        agent.kickoff_active = False
        ctx.state.set_decision_system(BEHAVIOUR_TREE)
        seen = []

        def fake_evaluate(node, me, context) -> bool:
            seen.append(node.name)
            return True

        monkeypatch.setattr(agent_module, "evaluate", fake_evaluate)
        monkeypatch.setattr(agent.strategy, "decide", pytest.fail)
        agent.make_decision()
        assert seen == ["root"]

    def test_despawned_agent_deactivates(self, ctx: MatchContext, make_agent, world) -> None:
        """Deciding without a body unregisters the agent."""
        agent = make_agent("red", STRIKER)
        agent.activate()
        world.despawn(agent.entity)
        agent.make_decision()
        assert not ctx.scheduler.is_registered(agent)


class TestTick:
    """Per-frame movement and possession handling."""

    def test_moves_towards_target(self, ctx: MatchContext, make_agent, world) -> None:
        """The movement impulse points at the target."""
        agent = make_agent("red", STRIKER)
        start = ctx.position_of(agent)
        agent.target_position = Vector3(start.x + 10.0, start.y, start.z)
        agent.handle_tick(16.0)
        agent.handle_tick(16.0)
        impulses = world.impulses_for(agent.entity)
        assert impulses
        assert impulses[-1].x > 0
        assert impulses[-1].z == pytest.approx(0.0)

    def test_frozen_agent_does_nothing(self, make_agent, world) -> None:
        """Frozen agents receive no movement."""
        agent = make_agent("red", STRIKER)
        agent.is_frozen = True
        agent.target_position = Vector3(30.0, 2.0, -3.0)
        agent.handle_tick(16.0)
        agent.handle_tick(16.0)
        assert world.impulses_for(agent.entity) == []

    def test_keeper_forced_release_after_limit(self, ctx: MatchContext, make_agent) -> None:
        """A keeper holding the ball for three seconds must release it."""
        keeper = make_agent("red", GOALKEEPER)
        ctx.state.set_possessor(keeper)
        keeper.handle_tick(16.0)
        assert keeper.possession_start_ms == 0.0

        ctx.state.now_ms = 3000.0
        keeper.handle_tick(16.0)

        assert ctx.state.get_possessor() is None
        assert keeper.possession_start_ms is None
        assert keeper.passes == 1

    def test_striker_forced_to_shoot_after_limit(self, ctx: MatchContext, make_agent, rng) -> None:
        """A striker in range that overstays its possession limit shoots."""
        striker = make_agent("red", STRIKER, Vector3(40.0, 2.0, -3.0))
        ctx.state.set_possessor(striker)
        striker.handle_tick(16.0)

        ctx.state.now_ms = 3999.0
        striker.handle_tick(16.0)
        assert ctx.state.get_possessor() is striker

        rng.queue(0.1, 0.5)
        ctx.state.now_ms = possession_limit_ms(STRIKER, ctx.config)
        striker.handle_tick(16.0)

        assert striker.shots == 1
        assert ctx.state.get_possessor() is None
        assert striker.possession_start_ms is None

    def test_midfielder_forced_to_pass_after_limit(self, ctx: MatchContext, make_agent) -> None:
        """Out of shooting range the overdue carrier passes instead."""
        midfielder = make_agent("red", CENTRAL_MIDFIELDER_1, Vector3(0.0, 2.0, -3.0))
        ctx.state.set_possessor(midfielder)
        midfielder.handle_tick(16.0)

        ctx.state.now_ms = possession_limit_ms(CENTRAL_MIDFIELDER_1, ctx.config)
        midfielder.handle_tick(16.0)

        assert midfielder.passes == 1
        assert midfielder.shots == 0
        assert ctx.state.get_possessor() is None
        assert midfielder.possession_start_ms is None

    def test_losing_the_ball_clears_possession_clock(self, ctx: MatchContext, make_agent) -> None:
        """The possession timer stops when someone else takes the ball."""
        striker = make_agent("red", STRIKER)
        ctx.state.set_possessor(striker)
        striker.handle_tick(16.0)
        ctx.state.set_possessor(None)
        striker.handle_tick(16.0)
        assert striker.possession_start_ms is None
