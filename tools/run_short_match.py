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
"""Run a short headless sandbox match and write a debug log."""
import sys

from pitchmind.engine.match_state import ROLE_STRATEGY
from pitchmind.sandbox.world import build_demo_match
from pitchmind.utils.debug import MatchDebugger


def run_short_match(duration_seconds: float = 20.0, seed: int = 0, decision_system: str = ROLE_STRATEGY) -> None:
    """Run a short match with a fixed seed and print the totals.

    Parameters
    ----------
    duration_seconds : float
        How long to simulate in match time (default 20 seconds).
    seed : int
        Seed for the match random source.
    decision_system : str
        ``"role_strategy"`` or ``"behaviour_tree"``.
    """
    debugger = MatchDebugger()
    match = build_demo_match(seed=seed, debugger=debugger, decision_system=decision_system)
    match.run(duration_seconds)
    match.stop()

    for team in ("red", "blue"):
        stats = match.team_stats(team)
        print(f"{team}: goals={stats['goals']} shots={stats['shots']} passes={stats['passes']}")
    print(f"Done running {duration_seconds}s simulation; log at {debugger.log_path}")


if __name__ == "__main__":
    system = sys.argv[1] if len(sys.argv) > 1 else ROLE_STRATEGY
    run_short_match(180.0, decision_system=system)
