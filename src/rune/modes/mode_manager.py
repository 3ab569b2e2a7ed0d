"""Mode manager: the active mode, mode switches and the pending-key timer."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable, Dict, Optional, Type

from rune.keymaps import KeymapRegistry, KeymapResolver, load_default_keymaps
from rune.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult

Clock = Callable[[], float]


@dataclass(frozen=True)
class PendingTimeout:
    """Deadline for the keys the active mode is still buffering."""

    mode: str
    deadline: float
    timeout_ms: int

    def expired(self, now: float) -> bool:
        return now >= self.deadline


class ModeManager:
    """Routes keys to the active mode and applies the switches it asks for.

    Only one mode is active, so at most one timer is armed: a mode that
    answers ``pending`` with a ``timeout_ms`` gets one, any other answer or
    any mode switch drops it. The driver polls :meth:`process_timeouts`.
    """

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
        clock: Clock = time.monotonic,
    ) -> None:
        self.context = context
        self.logger = telemetry.get_logger("rune.modes")
        self._clock = clock
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        self._timer: Optional[PendingTimeout] = None

        if keymap_registry is None:
            keymap_registry = KeymapRegistry(logger_name="rune.keymaps")
            if load_defaults:
                load_default_keymaps(keymap_registry)
        self.keymap_registry = keymap_registry
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            keymap_registry, logger_name="rune.keymaps"
        )
        extras = self.context.extras
        extras.setdefault("keymap_registry", self.keymap_registry)
        extras.setdefault("keymap_resolver", self.keymap_resolver)
        extras.setdefault("mode_manager", self)

    @property
    def active_mode(self) -> Optional[Mode]:
        return self._modes.get(self._active) if self._active else None

    @property
    def active_name(self) -> Optional[str]:
        return self._active

    @property
    def pending_timeout(self) -> Optional[PendingTimeout]:
        return self._timer

    def get_mode(self, name: str) -> Mode:
        return self._modes[name]

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        """Instantiate ``mode_cls`` on the shared context; the first mode
        registered becomes active."""

        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self._active
        if previous == name:
            return
        self._timer = None
        if previous is not None:
            self._modes[previous].on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous)
        telemetry.record_event(
            "mode.switch",
            data={"from": previous, "to": name},
            logger_name="rune.modes",
        )

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            f"mode::{mode.name}",
            logger_name="rune.modes",
            component="modes",
            metadata={"key": key.key, "mode": mode.name},
        ):
            result = mode.handle_key(key)
        return self._apply(mode, result)

    def arm_timeout(self, mode_name: str, timeout_ms: int) -> None:
        deadline = self._clock() + timeout_ms / 1000.0
        self._timer = PendingTimeout(mode=mode_name, deadline=deadline, timeout_ms=timeout_ms)

    def cancel_timeout(self) -> None:
        self._timer = None

    def process_timeouts(self) -> Dict[str, ModeResult]:
        """Fire the timer if its deadline has passed."""

        timer = self._timer
        if timer is None or not timer.expired(self._clock()):
            return {}
        return {timer.mode: self._fire(timer)}

    def _fire(self, timer: PendingTimeout) -> ModeResult:
        self._timer = None
        mode = self._modes.get(timer.mode)
        if mode is None:
            return ModeResult(consumed=False, status="timeout")
        with telemetry.span(
            f"mode_timeout::{timer.mode}",
            logger_name="rune.modes",
            component="modes",
            metadata={"mode": timer.mode, "timeout_ms": timer.timeout_ms},
        ):
            result = mode.handle_timeout()
        return self._apply(mode, result)

    def _apply(self, mode: Mode, result: ModeResult) -> ModeResult:
        if result.timeout_ms:
            self.arm_timeout(mode.name, result.timeout_ms)
        else:
            self.cancel_timeout()
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result


__all__ = ["Clock", "ModeManager", "PendingTimeout"]
