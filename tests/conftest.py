"""Shared fakes and factories for the decision core tests."""

from typing import Callable, Iterable, List, Optional, Tuple

import pytest

from pitchmind.engine.agent import AIAgent
from pitchmind.engine.collaborators import EntityHandle
from pitchmind.engine.config import AIConfig
from pitchmind.engine.match_state import MatchContext
from pitchmind.engine.spatial import Vector3
from pitchmind.sandbox.world import SandboxWorld


class ScriptedRandom:
    """Random source that replays queued draws, then a fixed default."""

    def __init__(self, values: Iterable[float] = (), default: float = 0.5) -> None:
        self.values: List[float] = list(values)
        self.default = default
        self.calls = 0

    def queue(self, *values: float) -> None:
        """Append draws to be returned in order."""
        self.values.extend(values)

    def random(self) -> float:
        """Return the next queued draw or the default."""
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


class RecordingWorld(SandboxWorld):
    """Sandbox world that remembers every impulse and velocity override."""

    def __init__(self, config: AIConfig) -> None:
        super().__init__(config)
        self.impulses: List[Tuple[EntityHandle, Vector3]] = []
        self.velocities: List[Tuple[EntityHandle, Vector3]] = []

    def apply_impulse(self, entity: EntityHandle, impulse: Vector3) -> None:
        self.impulses.append((entity, impulse.copy()))
        super().apply_impulse(entity, impulse)

    def set_linear_velocity(self, entity: EntityHandle, velocity: Vector3) -> None:
        self.velocities.append((entity, velocity.copy()))
        super().set_linear_velocity(entity, velocity)

    def impulses_for(self, entity: EntityHandle) -> List[Vector3]:
        """Return the impulses applied to ``entity`` in order."""
        return [impulse for handle, impulse in self.impulses if handle == entity]


@pytest.fixture
def config() -> AIConfig:
    """Return a fresh configuration that tests may modify."""
    return AIConfig()


@pytest.fixture
def rng() -> ScriptedRandom:
    """Return a scripted random source defaulting to 0.5."""
    return ScriptedRandom()


@pytest.fixture
def world(config: AIConfig) -> RecordingWorld:
    """Return an empty recording world."""
    return RecordingWorld(config)


@pytest.fixture
def ctx(world: RecordingWorld, rng: ScriptedRandom, config: AIConfig) -> MatchContext:
    """Return a match context with a ball resting on the kickoff spot."""
    context = MatchContext(world, rng, config)
    ball = world.spawn(Vector3(*config.pitch.ball_spawn), world.sandbox.ball_mass, is_ball=True)
    context.state.set_ball(ball)
    return context


AgentFactory = Callable[..., AIAgent]


@pytest.fixture
def make_agent(ctx: MatchContext, world: RecordingWorld) -> AgentFactory:
    """Return a factory creating spawned agents, optionally moved to ``position``."""

    def factory(team: str, role: str, position: Optional[Vector3] = None) -> AIAgent:
        entity = world.spawn(Vector3(0.0, ctx.config.pitch.safe_spawn_y, 0.0), world.sandbox.player_mass)
        agent = AIAgent(team, role, entity, ctx)
        if position is not None:
            world.set_position(entity, position)
        return agent

    return factory


def place_ball(ctx: MatchContext, position: Vector3, velocity: Optional[Vector3] = None) -> None:
    """Move the ball to ``position`` with an optional velocity."""
    ball = ctx.state.get_ball()
    ctx.engine.set_position(ball, position)
    ctx.engine.set_linear_velocity(ball, velocity if velocity is not None else Vector3())


def hold_ball_still(ctx: MatchContext, idle_ms: float) -> None:
    """Sample the resting ball, then again after ``idle_ms`` of match time."""
    position = ctx.ball_position()
    assert position is not None
    ctx.state.update_ball_stationary(position)
    ctx.state.now_ms += idle_ms
    ctx.state.update_ball_stationary(position)
