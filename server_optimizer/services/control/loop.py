"""
Control Loop

Owns the control state and decides, on every timer tick and every
player join/leave, whether fps.limit has to change.

State machine:
    STOPPED -> RUNNING_ENABLED     start() with enabled=True (evaluates at once)
    STOPPED -> RUNNING_DISABLED    start() with enabled=False
    RUNNING_ENABLED <-> RUNNING_DISABLED   toggle()
    any -> STOPPED                 stop() (applies neutral_fps)

All evaluations run inside one asyncio.Lock and the critical section has
no await in it, so read -> compute -> compare -> apply -> update is atomic
with respect to timer ticks, load events and toggles.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Protocol

from server_optimizer.common.config import OptimizerConfig
from server_optimizer.common.exceptions import ConfigError, ControlError
from server_optimizer.common.logging_setup import get_service_logger, log_fps_adjustment
from server_optimizer.common.scheduler import ScheduledLoop
from server_optimizer.services.host import HostAdapter
from server_optimizer.services.notify import Notifier

from .policy import compute_target
from .state import ControlState, LoopState, StatusSnapshot

logger = get_service_logger("control")

# Delay of the extra evaluation scheduled by force_initialization
INIT_REEVALUATION_DELAY_S = 1.0


class ConfigSaver(Protocol):
    def save(self, config: OptimizerConfig) -> None: ...


class ControlLoop:
    """
    Dynamic FPS control loop.

    Construct one per host process and hand it to the command layer;
    the service owning it calls start() and stop().
    """

    def __init__(
        self,
        config: OptimizerConfig,
        host: HostAdapter,
        notifier: Notifier,
        config_store: ConfigSaver | None = None,
    ):
        self.config = config
        self.host = host
        self.notifier = notifier
        self.config_store = config_store

        self._state: ControlState | None = None
        self._lock = asyncio.Lock()
        self._save_lock = asyncio.Lock()
        self._accepting = False
        self._scheduler: ScheduledLoop | None = None
        self._init_task: asyncio.Task | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────

    @property
    def state(self) -> LoopState:
        if self._state is None:
            return LoopState.STOPPED
        if self._state.enabled:
            return LoopState.RUNNING_ENABLED
        return LoopState.RUNNING_DISABLED

    async def start(self) -> None:
        """Start the timer and, when enabled, apply the first value at once"""
        if self._state is not None:
            logger.warning("Control loop already running")
            return

        self._state = ControlState(
            enabled=self.config.enabled,
            started_at=datetime.now(timezone.utc),
        )
        self._accepting = True

        self._scheduler = ScheduledLoop(
            self.config.check_interval_s,
            self._on_tick,
            name="fps-check",
        )
        await self._scheduler.start()

        # First evaluation is forced by the unset current_value
        await self.evaluate()

        if self.config.force_initialization:
            self._init_task = asyncio.create_task(self._delayed_initialization())

        logger.info(
            f"Control loop started ({self.state.value}, "
            f"interval: {self.config.check_interval_s}s)",
            extra={
                "loop_state": self.state.value,
                "interval_s": self.config.check_interval_s,
            },
        )

        if self.config.show_init_message:
            logger.info(f"ServerOptimizer initialized - Current FPS: {self._state.current_value}")

    async def stop(self) -> None:
        """Stop evaluating and leave the host at neutral_fps"""
        if self._state is None:
            return

        # No new timer ticks, load events or toggles from here on
        self._accepting = False

        if self._scheduler:
            self._scheduler.stop()
            self._scheduler = None

        if self._init_task:
            self._init_task.cancel()
            try:
                await self._init_task
            except asyncio.CancelledError:
                pass
            self._init_task = None

        # Wait for an in-flight evaluation to finish
        async with self._lock:
            neutral = self.config.neutral_fps
            self._apply(neutral)
            self._state = None

        logger.info(f"Control loop stopped, FPS restored to {neutral}")

    # ── Events ────────────────────────────────────────────────────────

    async def on_load_changed(self) -> bool:
        """
        Hook for player join/leave.

        Every call produces its own evaluation; nothing is batched.

        Returns:
            True if fps.limit changed
        """
        if self.state is not LoopState.RUNNING_ENABLED:
            return False
        return await self.evaluate()

    async def toggle(self) -> bool:
        """
        Flip dynamic adjustment on/off.

        Off applies max_fps directly; on re-evaluates through the policy.
        The new flag is persisted through the config store when present.

        Returns:
            The new enabled state

        Raises:
            ControlError: If the loop is not running
        """
        async with self._lock:
            if not self._accepting or self._state is None:
                raise ControlError("cannot toggle a stopped control loop")

            state = self._state
            enabled = not state.enabled
            state.enabled = enabled
            self.config = replace(self.config, enabled=enabled)

            if enabled:
                logger.info("Dynamic FPS adjustment enabled")
                self._evaluate_locked()
            else:
                max_fps = self.config.max_fps
                logger.info(f"Dynamic FPS adjustment disabled, FPS restored to {max_fps}")
                self._commit(max_fps)

        # File I/O stays outside the evaluation lock
        await self._persist_config()
        return enabled

    async def evaluate(self) -> bool:
        """
        Run one evaluation step when enabled.

        Returns:
            True if a new value was applied
        """
        async with self._lock:
            if not self._accepting or self._state is None or not self._state.enabled:
                return False
            return self._evaluate_locked()

    # ── Read-only views ───────────────────────────────────────────────

    def status_snapshot(self) -> StatusSnapshot:
        """Current value, enabled flag and live player count"""
        state = self._state
        load = self._read_load()

        if state is None:
            return StatusSnapshot(
                current_value=None,
                enabled=self.config.enabled,
                current_load=load,
                state=LoopState.STOPPED,
            )

        return StatusSnapshot(
            current_value=state.current_value,
            enabled=state.enabled,
            current_load=load,
            state=self.state,
        )

    def get_stats(self) -> dict[str, Any]:
        """State dict plus scheduler statistics"""
        stats: dict[str, Any] = {"loop_state": self.state.value}
        if self._state is not None:
            stats.update(self._state.to_dict())
        if self._scheduler is not None:
            stats["scheduler"] = self._scheduler.get_stats()
        return stats

    # ── Internals ─────────────────────────────────────────────────────

    async def _on_tick(self) -> None:
        await self.evaluate()

    async def _delayed_initialization(self) -> None:
        await asyncio.sleep(INIT_REEVALUATION_DELAY_S)
        await self.evaluate()
        if self._state is not None:
            logger.info(f"FPS initialized again: {self._state.current_value}")

    def _evaluate_locked(self) -> bool:
        """Caller must hold self._lock"""
        state = self._state
        config = self.config

        load = self._read_load()
        target = compute_target(load, config)

        state.evaluation_count += 1
        state.last_load = load
        state.last_evaluated_at = datetime.now(timezone.utc)

        if target == state.current_value:
            logger.debug(f"FPS unchanged at {target} (Players: {load})")
            return False

        log_fps_adjustment(
            logger,
            state.current_value,
            target,
            load,
            verbose=config.show_debug_messages,
        )
        self._commit(target)

        # Idle transitions are silent
        if config.notify_on_change and load > 0:
            self._notify("FPS Adjusted", fps=target, players=load)

        return True

    def _commit(self, value: int) -> None:
        """Record value as current, then hand it to the host"""
        state = self._state
        # Optimistic: current_value is updated even if the host rejects it
        state.current_value = value
        state.change_count += 1
        state.last_change_at = datetime.now(timezone.utc)

        error = self._apply(value)
        state.write_success = error is None
        state.write_error = error

    def _apply(self, value: int) -> str | None:
        """Send fps.limit to the host; returns the error message on failure"""
        try:
            self.host.apply_output_value(value)
        except Exception as e:
            logger.error(
                f"Failed to apply fps.limit {value}: {e}",
                extra={"value": value},
            )
            return str(e)
        return None

    def _read_load(self) -> int:
        """Connected player count; 0 when the host cannot tell"""
        try:
            load = self.host.get_current_load()
        except Exception as e:
            logger.warning(f"Player count unavailable ({e}), treating as 0")
            return 0

        if load is None:
            return 0

        try:
            load = int(load)
        except (TypeError, ValueError):
            logger.warning(f"Invalid player count {load!r}, treating as 0")
            return 0

        return max(0, load)

    def _notify(self, key: str, **params: Any) -> None:
        try:
            self.notifier.notify_privileged(key, **params)
        except Exception as e:
            logger.error(f"Failed to send '{key}' notification: {e}")

    async def _persist_config(self) -> None:
        """Write the current config in a worker thread, one save at a time"""
        if self.config_store is None:
            return

        async with self._save_lock:
            # Latest config, so a save that waited never writes a stale flag
            config = self.config
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self.config_store.save, config)
            except ConfigError as e:
                logger.error(f"Failed to persist enabled={config.enabled}: {e}")
