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
"""Entry point for sandbox matches and the optional visualiser."""
import time

from pitchmind.engine.spatial import TEAMS
from pitchmind.sandbox.world import DemoMatch, build_demo_match
from pitchmind.utils.debug import MatchDebugger

HEADLESS_SECONDS = 180.0
STATUS_INTERVAL_SECONDS = 30.0


def print_match_status(match: DemoMatch) -> None:
    """Print the clock, score and shot counts.

    Parameters
    ----------
    match : DemoMatch
        Match whose state should be printed.
    """
    ctx = match.ctx
    score = match.world.score
    print(f"\nMatch Time: {int(ctx.match_time // 60):02d}:{int(ctx.match_time % 60):02d}")
    print(f"Score: Red {score['red']} - {score['blue']} Blue")
    holder = ctx.state.get_possessor()
    print(f"Possession: {holder.team + ' ' + holder.role if holder is not None else 'loose ball'}")


def run_headless(match: DemoMatch, seconds: float = HEADLESS_SECONDS) -> None:
    """Step ``match`` without graphics, printing a status line periodically.

    Parameters
    ----------
    match : DemoMatch
        Match to run.
    seconds : float, default=180.0
        Simulated duration.
    """
    elapsed = 0.0
    while elapsed < seconds:
        chunk = min(STATUS_INTERVAL_SECONDS, seconds - elapsed)
        match.run(chunk)
        elapsed += chunk
        print_match_status(match)


def main() -> None:
    """Spin up a demo match, drawing it when pygame is available."""
    seed = int(time.time())
    debugger = MatchDebugger()
    match = build_demo_match(seed=seed, debugger=debugger)
    print(f"Sandbox match seeded with {seed}; logging to {debugger.log_path}")

    try:
        from pitchmind.visualizer.visualizer import pygame, start_visualizer

        if pygame is None:
            print("pygame not installed; running headless.")
            run_headless(match)
        else:
            print("Visualizer started. Press space to pause, q to quit.")
            start_visualizer(match)
    except KeyboardInterrupt:
        print("\nMatch simulation interrupted.")
    finally:
        match.stop()

    print(f"\nFinal Score: Red {match.world.score['red']} - {match.world.score['blue']} Blue")
    print("\nMatch Statistics:")
    for team in TEAMS:
        stats = match.team_stats(team)
        print(f"{team.capitalize()}: Shots: {stats['shots']}  Passes: {stats['passes']}")


if __name__ == "__main__":
    main()
