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
"""Central cadence for agent decisions and delayed callbacks.

The host drives everything through :meth:`Scheduler.tick` once per frame.
Agents are registered with their decision interval; timed follow-ups such as
re-zeroing ball spin after a kick are queued with :meth:`Scheduler.call_later`.
Dropping an agent from the schedule cancels both.
"""
from __future__ import annotations

import heapq
import itertools
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from pitchmind.engine.agent import AIAgent
    from pitchmind.engine.match_state import MatchContext

Callback = Callable[[], None]


class Scheduler:
    """Time-ordered queue of agent decisions and one-shot callbacks.

    Parameters
    ----------
    ctx : MatchContext
        Context whose clock the scheduler advances.
    """

    def __init__(self, ctx: "MatchContext") -> None:
        self.ctx = ctx
        self._intervals: Dict["AIAgent", float] = {}
        self._next_due: Dict["AIAgent", float] = {}
        self._callbacks: List[Tuple[float, int, Callback, Optional[object]]] = []
        self._sequence = itertools.count()

    def register(self, agent: "AIAgent", interval_ms: float) -> None:
        """Schedule ``agent`` to decide every ``interval_ms``.

        Re-registering an agent only updates its interval.

        Parameters
        ----------
        agent : AIAgent
            Agent whose ``make_decision`` should run.
        interval_ms : float
            Time between decisions.
        """
        if interval_ms <= 0:
            raise ValueError(f"Decision interval must be positive, got {interval_ms}")
        self._intervals[agent] = interval_ms
        self._next_due.setdefault(agent, self.ctx.now_ms + interval_ms)

    def unregister(self, agent: "AIAgent") -> None:
        """Remove ``agent`` and every callback it owns from the schedule.

        Parameters
        ----------
        agent : AIAgent
            Agent to drop; unknown agents are ignored.
        """
        self._intervals.pop(agent, None)
        self._next_due.pop(agent, None)
        before = len(self._callbacks)
        self._callbacks = [entry for entry in self._callbacks if entry[3] is not agent]
        if len(self._callbacks) != before:
            heapq.heapify(self._callbacks)

    def is_registered(self, agent: "AIAgent") -> bool:
        """Return whether ``agent`` currently has a decision slot.

        Parameters
        ----------
        agent : AIAgent
            Agent to look up.

        Returns
        -------
        bool
            ``True`` when registered.
        """
        return agent in self._intervals

    @property
    def registered_agents(self) -> List["AIAgent"]:
        """Return the registered agents in registration order.

        Returns
        -------
        List[AIAgent]
            Snapshot of the registered agents.
        """
        return list(self._intervals)

    def call_later(self, delay_ms: float, fn: Callback, owner: Optional[object] = None) -> None:
        """Run ``fn`` once after ``delay_ms`` of match time.

        Parameters
        ----------
        delay_ms : float
            Delay from the current clock.
        fn : Callable[[], None]
            Callback to run.
        owner : object, optional
            Agent the callback belongs to; unregistering it drops the callback.
        """
        due = self.ctx.now_ms + max(0.0, delay_ms)
        heapq.heappush(self._callbacks, (due, next(self._sequence), fn, owner))

    def call_repeating(
        self,
        interval_ms: float,
        count: int,
        fn: Callback,
        owner: Optional[object] = None,
    ) -> None:
        """Run ``fn`` ``count`` times, ``interval_ms`` apart.

        Parameters
        ----------
        interval_ms : float
            Spacing between runs; the first run happens after one interval.
        count : int
            Number of runs.
        fn : Callable[[], None]
            Callback to run.
        owner : object, optional
            Agent the callbacks belong to.
        """
        for index in range(count):
            self.call_later(interval_ms * (index + 1), fn, owner)

    @property
    def pending_callbacks(self) -> int:
        """Return the number of queued callbacks.

        Returns
        -------
        int
            Callbacks not yet run.
        """
        return len(self._callbacks)

    def advance(self, dt_ms: float) -> None:
        """Move the clock forward, firing everything that falls due.

        Callbacks and decisions run in time order. A callback and a decision
        due at the same instant run callback first. Each decision is
        rescheduled one interval after its due time so overshoot carries over.

        Parameters
        ----------
        dt_ms : float
            Elapsed time since the previous call.
        """
        state = self.ctx.state
        end = state.now_ms + max(0.0, dt_ms)

        while True:
            callback_due = self._callbacks[0][0] if self._callbacks else None
            agent, agent_due = self._earliest_agent()

            if callback_due is not None and callback_due <= end and (agent_due is None or callback_due <= agent_due):
                due, _, fn, owner = heapq.heappop(self._callbacks)
                state.now_ms = max(state.now_ms, due)
                self._run_callback(fn, owner)
            elif agent is not None and agent_due is not None and agent_due <= end:
                state.now_ms = max(state.now_ms, agent_due)
                interval = self._intervals[agent]
                next_due = agent_due + interval
                if next_due <= state.now_ms:
                    next_due = state.now_ms + interval
                self._next_due[agent] = next_due
                agent.make_decision()
            else:
                break

        state.now_ms = end

    def tick(self, dt_ms: float) -> None:
        """Advance the clock and run every registered agent's movement tick.

        Parameters
        ----------
        dt_ms : float
            Frame length reported by the host.
        """
        self.advance(dt_ms)
        for agent in self.registered_agents:
            agent.handle_tick(dt_ms)

    def _earliest_agent(self) -> Tuple[Optional["AIAgent"], Optional[float]]:
        """Return the agent whose decision is due first.

        Returns
        -------
        Tuple[Optional[AIAgent], Optional[float]]
            The agent and its due time, or ``(None, None)`` when none is registered.
        """
        best: Optional["AIAgent"] = None
        best_due: Optional[float] = None
        for agent, due in self._next_due.items():
            if best_due is None or due < best_due:
                best, best_due = agent, due
        return best, best_due

    def _run_callback(self, fn: Callback, owner: Optional[object]) -> None:
        """Run ``fn`` and log rather than propagate any failure.

        Parameters
        ----------
        fn : Callable[[], None]
            Callback to run.
        owner : object, optional
            Owner used to label the error entry.
        """
        try:
            fn()
        except Exception as exc:
            label = getattr(owner, "label", "scheduler")
            self.ctx.log_error("CALLBACK_FAILED", f"{label}: {exc!r}")
