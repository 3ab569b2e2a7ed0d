"""The binding table: registered actions and the keys bound to them."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional

from rune.errors import RuneError
from rune.runtime import telemetry

from .models import ActionRef, Binding

Keys = tuple[str, ...]


class KeymapConflictError(RuneError, RuntimeError):
    """A binding claims keys another binding in the same mode already owns."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        owners = ", ".join(conflict.id for conflict in self.conflicts)
        super().__init__(f"Binding '{binding.id}' conflicts with {owners}")


def _mode_name(mode: object) -> str:
    return str(getattr(mode, "value", mode))


class KeymapRegistry:
    """Maps ``(mode, key tokens)`` to bindings and binding action ids to
    handlers.

    Every change bumps :meth:`revision`, which the resolver uses to know
    when its tries are stale. Within a mode a key sequence has exactly one
    owner; registering a second one needs ``replace=True``, which evicts the
    first.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self.logger = telemetry.get_logger(logger_name or "rune.keymaps")
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._owners: Dict[str, Dict[Keys, str]] = {}
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def has_action(self, action_id: str) -> bool:
        return action_id in self._actions

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        if action.id in self._actions and not replace:
            raise ValueError(f"Action '{action.id}' already registered")
        self._actions[action.id] = action
        self.logger.debug("action %s: %s", action.id, action.description or "-")
        return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        """Bind ``binding.sequence`` in ``binding.mode``.

        Raises ``KeyError`` for an unregistered action and
        :class:`KeymapConflictError` when the keys are taken.
        """

        if not self.has_action(binding.action_id):
            raise KeyError(
                f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
            )
        owners = self._owners.setdefault(binding.mode, {})
        keys = binding.sequence.tokens
        holder = owners.get(keys)
        taken = holder is not None and holder != binding.id
        if not replace and (taken or binding.id in self._bindings):
            if taken:
                raise KeymapConflictError(binding, [self.get_binding(holder)])
            raise ValueError(f"Binding id '{binding.id}' already registered")

        if holder is not None:
            self._drop(self._bindings[holder])
        if binding.id in self._bindings:
            self._drop(self._bindings[binding.id])
        self._bindings[binding.id] = binding
        self._owners.setdefault(binding.mode, {})[keys] = binding.id
        self._revision += 1
        self.logger.debug(
            "bound %s %s -> %s from %s%s",
            binding.mode,
            binding.key_signature,
            binding.action_id,
            binding.source or "code",
            f" (replacing {holder})" if taken else "",
        )
        return binding

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for binding_id in self._owners.get(_mode_name(mode), {}).values():
            yield self._bindings[binding_id]

    def _drop(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        owners = self._owners.get(binding.mode, {})
        keys = binding.sequence.tokens
        if owners.get(keys) == binding.id:
            del owners[keys]


__all__ = [
    "KeymapConflictError",
    "KeymapRegistry",
]
