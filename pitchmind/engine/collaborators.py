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
"""Interfaces the decision core consumes from its host.

The core never talks to a physics engine directly. It goes through
:class:`EngineAdapter`, reasons about players through :class:`Participant`
and draws every random number from a :class:`RandomSource`. ``random.Random``
satisfies the latter, which keeps tests deterministic with a fixed seed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional, Protocol, Sequence

from pitchmind.engine.spatial import Vector3, validate_team

EntityHandle = Hashable


class EngineAdapter(Protocol):
    """Physics and animation operations provided by the host engine."""

    def get_position(self, entity: EntityHandle) -> Optional[Vector3]:
        """Return the current position of ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.

        Returns
        -------
        Optional[Vector3]
            Position, or ``None`` when the entity is unknown.
        """
        ...

    def get_velocity(self, entity: EntityHandle) -> Optional[Vector3]:
        """Return the current linear velocity of ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.

        Returns
        -------
        Optional[Vector3]
            Velocity, or ``None`` when the entity is unknown.
        """
        ...

    def set_position(self, entity: EntityHandle, position: Vector3) -> None:
        """Teleport ``entity`` to ``position``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        position : Vector3
            New position.
        """
        ...

    def apply_impulse(self, entity: EntityHandle, impulse: Vector3) -> None:
        """Apply an instantaneous impulse to ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        impulse : Vector3
            Impulse vector.
        """
        ...

    def set_linear_velocity(self, entity: EntityHandle, velocity: Vector3) -> None:
        """Overwrite the linear velocity of ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        velocity : Vector3
            New velocity.
        """
        ...

    def set_angular_velocity(self, entity: EntityHandle, velocity: Vector3) -> None:
        """Overwrite the angular velocity of ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        velocity : Vector3
            New angular velocity.
        """
        ...

    def set_rotation(self, entity: EntityHandle, yaw: float) -> None:
        """Face ``entity`` along ``yaw`` radians around the vertical axis.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        yaw : float
            Heading in radians.
        """
        ...

    def is_spawned(self, entity: EntityHandle) -> bool:
        """Return whether ``entity`` currently exists in the world.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.

        Returns
        -------
        bool
            ``True`` while the entity is spawned.
        """
        ...

    def play_animation(self, entity: EntityHandle, names: Sequence[str], looped: bool) -> None:
        """Start the named animations on ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        names : Sequence[str]
            Animation names.
        looped : bool
            Whether the animations repeat.
        """
        ...

    def stop_animation(self, entity: EntityHandle, names: Sequence[str]) -> None:
        """Stop the named animations on ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.
        names : Sequence[str]
            Animation names.
        """
        ...

    def get_mass(self, entity: EntityHandle) -> float:
        """Return the mass of ``entity``.

        Parameters
        ----------
        entity : EntityHandle
            Opaque host handle.

        Returns
        -------
        float
            Mass; non-positive values are replaced by a default.
        """
        ...


class Participant(Protocol):
    """Anything that plays in the match, human or AI.

    ``has_ball`` is written only by the shared match state so that possession
    stays exclusive.
    """

    team: str
    role: str
    entity: EntityHandle
    has_ball: bool
    is_frozen: bool

    @property
    def is_ai(self) -> bool:
        """Return whether the participant is controlled by the core.

        Returns
        -------
        bool
            ``True`` for AI agents.
        """
        ...


class RandomSource(Protocol):
    """Minimal pseudo-random interface."""

    def random(self) -> float:
        """Return the next float in ``[0, 1)``.

        Returns
        -------
        float
            Uniform draw.
        """
        ...


@dataclass
class HumanPlayer:
    """Human-controlled participant known to the AI for passing and marking.

    Parameters
    ----------
    team : str
        Team the human plays for.
    entity : EntityHandle
        Host handle of the player's body.
    role : str, default="human"
        Tactical label; humans do not follow a catalogue role.
    has_ball : bool, default=False
        Possession flag maintained by the shared match state.
    is_frozen : bool, default=False
        Whether the player is currently immobilised.
    """

    team: str
    entity: EntityHandle
    role: str = "human"
    has_ball: bool = False
    is_frozen: bool = False

    def __post_init__(self) -> None:
        validate_team(self.team)

    @property
    def is_ai(self) -> bool:
        """Return ``False``; humans are never driven by the core.

        Returns
        -------
        bool
            Always ``False``.
        """
        return False
