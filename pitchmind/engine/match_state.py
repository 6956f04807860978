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
"""Shared match state and the context object handed to every decision.

:class:`SharedMatchState` is the only data shared between agents. It owns the
ball handle, the exclusive possession slot, the AI rosters and the
stationary-ball tracker. :class:`MatchContext` bundles that state with the
engine collaborator, configuration, random source, debugger and scheduler so
that no decision procedure reaches for a global.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from pitchmind.engine.collaborators import EngineAdapter, EntityHandle, Participant, RandomSource
from pitchmind.engine.config import AI_CONFIG, AIConfig
from pitchmind.engine.scheduler import Scheduler
from pitchmind.engine.spatial import TEAMS, Vector3, validate_team

if TYPE_CHECKING:
    from pitchmind.utils.debug import MatchDebugger

    from pitchmind.engine.agent import AIAgent

ROLE_STRATEGY = "role_strategy"
BEHAVIOUR_TREE = "behaviour_tree"
DECISION_SYSTEMS = (ROLE_STRATEGY, BEHAVIOUR_TREE)


def participant_label(participant: Optional[Participant]) -> str:
    """Return the ``"<team> <role>"`` label used in log lines.

    Parameters
    ----------
    participant : Participant, optional
        Player to describe.

    Returns
    -------
    str
        Label, or ``"nobody"`` for ``None``.
    """
    if participant is None:
        return "nobody"
    return f"{participant.team} {participant.role}"


class SharedMatchState:
    """Per-match store for possession, rosters and ball tracking.

    Parameters
    ----------
    config : AIConfig, optional
        Supplies the spawn point and stationary thresholds.
    debugger : MatchDebugger, optional
        Receives possession change events.
    """

    def __init__(self, config: AIConfig = AI_CONFIG, debugger: Optional["MatchDebugger"] = None) -> None:
        self.config = config
        self.debugger = debugger
        self.now_ms = 0.0
        self.status = "playing"
        self.is_halftime = False
        self.decision_system = ROLE_STRATEGY
        self._ball: Optional[EntityHandle] = None
        self._possessor: Optional[Participant] = None
        self._last_possessor: Optional[Participant] = None
        self._ai_rosters: Dict[str, List["AIAgent"]] = {team: [] for team in TEAMS}
        self._humans: List[Participant] = []
        self._ball_has_moved = False
        self._last_ball_sample: Optional[Vector3] = None
        self._last_move_ms = 0.0
        self._stationary = False
        self._stationary_duration_ms = 0.0

    # ==================== BALL ====================

    def get_ball(self) -> Optional[EntityHandle]:
        """Return the ball handle.

        Returns
        -------
        Optional[EntityHandle]
            Ball handle, or ``None`` before one is set.
        """
        return self._ball

    def set_ball(self, handle: Optional[EntityHandle]) -> None:
        """Store the ball handle.

        Parameters
        ----------
        handle : EntityHandle, optional
            New ball handle; ``None`` removes it.
        """
        self._ball = handle

    # ==================== POSSESSION ====================

    @property
    def last_possessor(self) -> Optional[Participant]:
        """Return the most recent player to have held the ball.

        Returns
        -------
        Optional[Participant]
            Sticky last possessor.
        """
        return self._last_possessor

    def get_possessor(self) -> Optional[Participant]:
        """Return the player currently holding the ball.

        Returns
        -------
        Optional[Participant]
            Possessor, or ``None`` for a loose ball.
        """
        return self._possessor

    def set_possessor(self, participant: Optional[Participant]) -> None:
        """Hand possession to ``participant`` or release it with ``None``.

        The previous holder's flag is cleared before the new holder's is set,
        so at most one participant reports ``has_ball`` at any time. The
        stationary tracker restarts on every change.

        Parameters
        ----------
        participant : Participant, optional
            New possessor.
        """
        previous = self._possessor
        if participant is previous:
            return

        if previous is not None:
            previous.has_ball = False
            self._last_possessor = previous

        self._possessor = participant
        if participant is not None:
            participant.has_ball = True
            if self._last_possessor is None:
                self._last_possessor = participant

        self.reset_stationary_tracking()
        if self.debugger is not None:
            self.debugger.log_match_event(
                self.now_ms / 1000.0,
                "POSSESSION",
                f"{participant_label(previous)} -> {participant_label(participant)}",
            )

    # ==================== ROSTERS ====================

    def add_ai_player(self, agent: "AIAgent") -> None:
        """Append ``agent`` to its team's AI roster.

        Parameters
        ----------
        agent : AIAgent
            Agent to add; duplicates are ignored.
        """
        roster = self._ai_rosters[validate_team(agent.team)]
        if agent not in roster:
            roster.append(agent)

    def remove_ai_player(self, agent: "AIAgent") -> None:
        """Remove ``agent`` from its roster and release the ball if it holds it.

        Parameters
        ----------
        agent : AIAgent
            Agent to remove.
        """
        roster = self._ai_rosters.get(agent.team, [])
        if agent in roster:
            roster.remove(agent)
        if self._possessor is agent:
            self.set_possessor(None)

    def ai_team(self, team: str) -> List["AIAgent"]:
        """Return the AI roster of ``team`` in registration order.

        Parameters
        ----------
        team : str
            Team name.

        Returns
        -------
        List[AIAgent]
            Copy of the roster.
        """
        return list(self._ai_rosters[validate_team(team)])

    def ai_teammates(self, agent: "AIAgent") -> List["AIAgent"]:
        """Return the other AI agents on ``agent``'s team.

        Parameters
        ----------
        agent : AIAgent
            Reference agent.

        Returns
        -------
        List[AIAgent]
            Roster without ``agent``.
        """
        return [other for other in self._ai_rosters[agent.team] if other is not agent]

    def register_human(self, player: Participant) -> None:
        """Make a human player visible to the AI.

        Parameters
        ----------
        player : Participant
            Human participant.
        """
        if player not in self._humans:
            self._humans.append(player)

    def participants(self) -> List[Participant]:
        """Return every known participant, AI rosters first.

        Returns
        -------
        List[Participant]
            Red AI, blue AI, then humans.
        """
        players: List[Participant] = []
        for team in TEAMS:
            players.extend(self._ai_rosters[team])
        players.extend(self._humans)
        return players

    # ==================== PLAY STATUS ====================

    def is_play_active(self) -> bool:
        """Return whether the match is in open play.

        Returns
        -------
        bool
            ``True`` while status is ``"playing"`` outside half time.
        """
        return self.status == "playing" and not self.is_halftime

    def set_decision_system(self, name: str) -> None:
        """Select the decision procedure used by every agent.

        Parameters
        ----------
        name : str
            ``"role_strategy"`` or ``"behaviour_tree"``.
        """
        if name not in DECISION_SYSTEMS:
            raise ValueError(f"Unknown decision system '{name}'. Known systems: {', '.join(DECISION_SYSTEMS)}")
        self.decision_system = name

    # ==================== BALL MOVEMENT ====================

    def has_ball_moved(self) -> bool:
        """Return whether the ball has left its spawn point since the last restart.

        Returns
        -------
        bool
            Latched flag.
        """
        return self._ball_has_moved

    def mark_ball_moved(self) -> None:
        """Latch the ball-moved flag."""
        self._ball_has_moved = True

    def reset_ball_moved(self) -> None:
        """Clear the ball-moved flag at a restart."""
        self._ball_has_moved = False

    def track_ball_moved(self, position: Vector3) -> bool:
        """Latch the ball-moved flag once ``position`` is away from the spawn.

        Parameters
        ----------
        position : Vector3
            Current ball position.

        Returns
        -------
        bool
            Flag value after the update.
        """
        if not self._ball_has_moved:
            spawn = Vector3(*self.config.pitch.ball_spawn)
            if position.distance_to(spawn) > self.config.pitch.ball_moved_epsilon:
                self._ball_has_moved = True
        return self._ball_has_moved

    # ==================== STATIONARY TRACKING ====================

    def update_ball_stationary(self, position: Vector3) -> None:
        """Sample the ball position for stationary detection.

        Called every physics tick. Tracking restarts while the ball is held
        or play is stopped.

        Parameters
        ----------
        position : Vector3
            Current ball position.
        """
        if self._possessor is not None or not self.is_play_active():
            self.reset_stationary_tracking()
            return

        if self._last_ball_sample is None:
            self._last_ball_sample = position.copy()
            self._last_move_ms = self.now_ms
            self._stationary = False
            self._stationary_duration_ms = 0.0
            return

        if position.distance_to(self._last_ball_sample) > self.config.timing.stationary_threshold:
            self._last_ball_sample = position.copy()
            self._last_move_ms = self.now_ms
            self._stationary = False
            self._stationary_duration_ms = 0.0
            return

        self._stationary_duration_ms = self.now_ms - self._last_move_ms
        if self._stationary_duration_ms >= self.config.timing.stationary_time_limit_ms and not self._stationary:
            self._stationary = True
            if self.debugger is not None:
                self.debugger.log_match_event(
                    self.now_ms / 1000.0,
                    "BALL_STATIONARY",
                    f"idle for {self._stationary_duration_ms:.0f}ms at ({position.x:.1f}, {position.z:.1f})",
                )

    def is_ball_stationary(self) -> bool:
        """Return whether the loose ball has been idle past the time limit.

        Returns
        -------
        bool
            Stationary flag.
        """
        return self._stationary

    @property
    def stationary_duration_ms(self) -> float:
        """Return how long the ball has been idle.

        Returns
        -------
        float
            Milliseconds since the last significant movement.
        """
        return self._stationary_duration_ms

    def reset_stationary_tracking(self) -> None:
        """Forget the last sample and clear the stationary flag."""
        self._last_ball_sample = None
        self._last_move_ms = self.now_ms
        self._stationary = False
        self._stationary_duration_ms = 0.0


class MatchContext:
    """Everything a decision procedure may touch, passed explicitly.

    Parameters
    ----------
    engine : EngineAdapter
        Physics and animation collaborator.
    rng : RandomSource
        Source of every random draw.
    config : AIConfig, optional
        Tuning values; defaults to :data:`AI_CONFIG`.
    state : SharedMatchState, optional
        Shared state; a fresh one is created when omitted.
    debugger : MatchDebugger, optional
        Structured log sink; logging is skipped when ``None``.
    """

    def __init__(
        self,
        engine: EngineAdapter,
        rng: RandomSource,
        config: AIConfig = AI_CONFIG,
        state: Optional[SharedMatchState] = None,
        debugger: Optional["MatchDebugger"] = None,
    ) -> None:
        self.engine = engine
        self.rng = rng
        self.config = config
        self.debugger = debugger
        self.state = state if state is not None else SharedMatchState(config, debugger)
        if self.state.debugger is None:
            self.state.debugger = debugger
        self.scheduler = Scheduler(self)

    @property
    def now_ms(self) -> float:
        """Return the match clock.

        Returns
        -------
        float
            Milliseconds of simulated time.
        """
        return self.state.now_ms

    @property
    def match_time(self) -> float:
        """Return the match clock in seconds.

        Returns
        -------
        float
            Seconds of simulated time.
        """
        return self.state.now_ms / 1000.0

    def is_spawned(self, entity: Optional[EntityHandle]) -> bool:
        """Return whether ``entity`` exists in the world.

        Parameters
        ----------
        entity : EntityHandle, optional
            Host handle.

        Returns
        -------
        bool
            ``False`` for ``None`` or despawned entities.
        """
        return entity is not None and self.engine.is_spawned(entity)

    def position_of(self, participant: Participant) -> Optional[Vector3]:
        """Return the position of ``participant`` when spawned.

        Parameters
        ----------
        participant : Participant
            Player to locate.

        Returns
        -------
        Optional[Vector3]
            Position, or ``None`` when not spawned.
        """
        if not self.is_spawned(participant.entity):
            return None
        return self.engine.get_position(participant.entity)

    def velocity_of(self, participant: Participant) -> Optional[Vector3]:
        """Return the velocity of ``participant`` when spawned.

        Parameters
        ----------
        participant : Participant
            Player to query.

        Returns
        -------
        Optional[Vector3]
            Velocity, or ``None`` when not spawned.
        """
        if not self.is_spawned(participant.entity):
            return None
        return self.engine.get_velocity(participant.entity)

    def ball_position(self) -> Optional[Vector3]:
        """Return the ball position, or ``None`` without a spawned ball.

        Returns
        -------
        Optional[Vector3]
            Ball position.
        """
        ball = self.state.get_ball()
        if not self.is_spawned(ball):
            return None
        return self.engine.get_position(ball)

    def ball_velocity(self) -> Optional[Vector3]:
        """Return the ball velocity, or ``None`` without a spawned ball.

        Returns
        -------
        Optional[Vector3]
            Ball velocity.
        """
        ball = self.state.get_ball()
        if not self.is_spawned(ball):
            return None
        return self.engine.get_velocity(ball)

    def teammates(self, player: Participant) -> List[Participant]:
        """Return spawned, unfrozen teammates of ``player`` (AI and human).

        Parameters
        ----------
        player : Participant
            Reference player.

        Returns
        -------
        List[Participant]
            Teammates in roster order, humans last.
        """
        return [
            other
            for other in self.state.participants()
            if other is not player
            and other.team == player.team
            and not other.is_frozen
            and self.is_spawned(other.entity)
        ]

    def opponents(self, player: Participant) -> List[Participant]:
        """Return spawned opponents of ``player``.

        Parameters
        ----------
        player : Participant
            Reference player.

        Returns
        -------
        List[Participant]
            Opponents in roster order, humans last.
        """
        return [
            other
            for other in self.state.participants()
            if other.team != player.team and self.is_spawned(other.entity)
        ]

    def log_event(self, event_type: str, description: str) -> None:
        """Forward a match event to the debugger when one is attached.

        Parameters
        ----------
        event_type : str
            Event label.
        description : str
            Event details.
        """
        if self.debugger is not None:
            self.debugger.log_match_event(self.match_time, event_type, description)

    def log_error(self, error_type: str, description: str) -> None:
        """Forward a contained failure to the debugger when one is attached.

        Parameters
        ----------
        error_type : str
            Error label.
        description : str
            Error details.
        """
        if self.debugger is not None:
            self.debugger.log_error(error_type, description)
