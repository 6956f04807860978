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
from __future__ import annotations

from typing import Dict, Type

from pitchmind.engine.role_catalog import (
    CENTRAL_MIDFIELDER_1,
    CENTRAL_MIDFIELDER_2,
    GOALKEEPER,
    LEFT_BACK,
    RIGHT_BACK,
    STRIKER,
)
from .base import RoleStrategy
from .defenders import FullBackStrategy, LeftBackStrategy, RightBackStrategy
from .forwards import StrikerStrategy
from .goalkeeper import GoalkeeperStrategy
from .midfielders import (
    CentralMidfielderStrategy,
    LeftCentralMidfielderStrategy,
    RightCentralMidfielderStrategy,
)

ROLE_STRATEGY_CLASSES: Dict[str, Type[RoleStrategy]] = {
    GOALKEEPER: GoalkeeperStrategy,
    LEFT_BACK: LeftBackStrategy,
    RIGHT_BACK: RightBackStrategy,
    CENTRAL_MIDFIELDER_1: LeftCentralMidfielderStrategy,
    CENTRAL_MIDFIELDER_2: RightCentralMidfielderStrategy,
    STRIKER: StrikerStrategy,
}


def create_role_strategy(role: str) -> RoleStrategy:
    """Instantiate the strategy for ``role``.

    Parameters
    ----------
    role : str
        Role name from the role catalogue.

    Returns
    -------
    RoleStrategy
        Fresh strategy instance.

    Raises
    ------
    ValueError
        If ``role`` is not a known role.
    """
    try:
        strategy_cls = ROLE_STRATEGY_CLASSES[role]
    except KeyError as exc:
        known_roles = ", ".join(sorted(ROLE_STRATEGY_CLASSES))
        raise ValueError(f"Unknown role '{role}'. Known roles: {known_roles}") from exc
    return strategy_cls()


__all__ = [
    "RoleStrategy",
    "GoalkeeperStrategy",
    "FullBackStrategy",
    "LeftBackStrategy",
    "RightBackStrategy",
    "CentralMidfielderStrategy",
    "LeftCentralMidfielderStrategy",
    "RightCentralMidfielderStrategy",
    "StrikerStrategy",
    "ROLE_STRATEGY_CLASSES",
    "create_role_strategy",
]
