"""
Move Coordinator - Plays the opponent's moves after a thinking delay.

The coordinator:
1. Watches the engine's transitions
2. When the opponent is to move, schedules ONE delayed task
3. When the task fires, asks the policy and applies the move
4. Cancels the pending task on any reset

States:
    IDLE     no opponent move pending
    PENDING  a task is scheduled and has not applied its move yet

A task is tied to the state snapshot (and its generation) it was scheduled
for. If the engine has moved on by the time it fires, the task drops itself.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable
import asyncio
import logging

from ..engine_core.state import GameState, Mark, OPPONENT_MARK
from ..engine_core.action import ActionResult, ActionType
from ..bots.policy import BotPolicy, HeuristicPolicy
from .engine import GameEngine

logger = logging.getLogger(__name__)

THINKING_DELAY_SECONDS = 1.0


class CoordinatorState(Enum):
    """State of the move coordinator."""
    IDLE = "idle"
    PENDING = "pending"


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class MoveCoordinator:
    """
    Schedules and applies the opponent's delayed moves.

    Usage:
        engine = GameEngine()
        coordinator = MoveCoordinator(engine, delay=1.0)

        engine.apply_move(0, Mark.X)     # coordinator goes PENDING
        await coordinator.wait_idle()    # opponent has answered
        coordinator.close()

    Scheduling needs an event loop: either pass `loop`, or construct the
    coordinator from code running inside one (RuntimeError otherwise).
    Transitions made on other threads are handed to the loop with
    call_soon_threadsafe.
    """

    def __init__(
        self,
        engine: GameEngine,
        policy: BotPolicy | None = None,
        opponent_mark: Mark = OPPONENT_MARK,
        delay: float = THINKING_DELAY_SECONDS,
        loop: asyncio.AbstractEventLoop | None = None,
        on_thinking: Callable[[GameState], None] | None = None,
    ):
        self.engine = engine
        self.policy = policy or HeuristicPolicy()
        self.opponent_mark = opponent_mark
        self.delay = delay
        self.on_thinking = on_thinking
        self._loop = loop or asyncio.get_running_loop()
        self._task: asyncio.Task | None = None
        self._unsubscribe = engine.subscribe(self._on_transition)

    @property
    def state(self) -> CoordinatorState:
        if self._task is not None and not self._task.done():
            return CoordinatorState.PENDING
        return CoordinatorState.IDLE

    @property
    def pending(self) -> bool:
        return self.state == CoordinatorState.PENDING

    # =========================================================================
    # Engine subscription
    # =========================================================================

    def _on_transition(self, result: ActionResult) -> None:
        if _running_loop() is not self._loop:
            self._loop.call_soon_threadsafe(self._handle_transition, result)
            return
        self._handle_transition(result)

    def _handle_transition(self, result: ActionResult) -> None:
        if result.action.action_type != ActionType.MOVE:
            self.cancel()
        self.maybe_schedule(self.engine.state)

    # =========================================================================
    # Scheduling
    # =========================================================================

    def maybe_schedule(self, state: GameState) -> bool:
        """
        Schedule the opponent's move if it is the opponent's turn.

        Returns True if a task is pending afterwards because of this call.
        """
        if not state.is_turn_of(self.opponent_mark):
            return False
        if self.pending:
            return False

        self._task = self._loop.create_task(self._think_and_move(state))
        logger.debug(
            "Opponent move scheduled in %.2fs (generation %d, move %d)",
            self.delay, state.generation, state.move_count,
        )
        if self.on_thinking:
            # Next loop iteration, after the current notification round
            self._loop.call_soon(self.on_thinking, state)
        return True

    def cancel(self) -> bool:
        """
        Cancel the pending move, if any.

        Returns True if a task was cancelled.
        """
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("Pending opponent move cancelled")
        return True

    async def _think_and_move(self, expected: GameState) -> None:
        await asyncio.sleep(self.delay)

        with self.engine.lock:
            current = self.engine.state
            if current.generation != expected.generation or current != expected:
                logger.debug("Dropping stale opponent move for generation %d", expected.generation)
                return

            decision = self.policy.select_move(current.board, self.opponent_mark)
            if not decision.has_move:
                logger.debug("Opponent has no legal move")
                return

            # Back to IDLE before the move is emitted
            if self._task is asyncio.current_task():
                self._task = None
            logger.debug(
                "Opponent plays cell %d (%s)", decision.cell, decision.rule.value
            )
            self.engine.apply_move(decision.cell, self.opponent_mark)

    async def wait_idle(self) -> None:
        """Wait until no opponent move is pending."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def close(self) -> None:
        """Stop watching the engine and cancel any pending move."""
        self._unsubscribe()
        self.cancel()
