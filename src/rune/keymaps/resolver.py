"""Per-mode prefix trie over the binding table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from rune.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry


@dataclass(slots=True)
class TrieNode:
    """One key position; ``binding`` is the winner for the keys so far."""

    binding: Optional[Binding] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)
    # Shortest sequence timeout of any binding below this node.
    timeout_ms: Optional[int] = None

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))


@dataclass(slots=True)
class KeymapTrie:
    mode: str
    revision: int
    root: TrieNode = field(default_factory=TrieNode)

    def add_binding(self, binding: Binding) -> None:
        timeout = binding.sequence.timeout_ms
        node = self.root
        for token in binding.sequence.tokens:
            if node.timeout_ms is None or timeout < node.timeout_ms:
                node.timeout_ms = timeout
            node = node.children.setdefault(token, TrieNode())
        # The registry allows one binding per key sequence and mode.
        node.binding = binding

    def walk(self, tokens: Sequence[str]) -> Optional[TrieNode]:
        node = self.root
        for token in tokens:
            child = node.children.get(token)
            if child is None:
                return None
            node = child
        return node


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """What the buffered keys amount to.

    ``match`` wins as soon as the keys reach a bound node, even if longer
    sequences share the prefix; ``pending`` means a pure prefix and carries
    the timeout after which the mode should give up on it.
    """

    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


class KeymapResolver:
    """Resolves key tokens against the registry, one cached trie per mode.

    A trie is rebuilt lazily when the registry revision moves on.
    """

    def __init__(self, registry: KeymapRegistry, *, logger_name: str | None = None) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, KeymapTrie] = {}

    def resolve(self, mode: str, tokens: Sequence[str]) -> ResolutionResult:
        mode = str(getattr(mode, "value", mode))
        keys = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "keys": " ".join(keys)},
        ) as handle:
            result = self._lookup(self._trie(mode), keys)
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            return result

    def _lookup(self, trie: KeymapTrie, keys: tuple[str, ...]) -> ResolutionResult:
        node = trie.walk(keys)
        if node is None:
            return ResolutionResult(status="miss")
        if node.binding is not None:
            action = self._registry.get_action(node.binding.action_id)
            return ResolutionResult(
                status="match",
                match=ResolutionMatch(binding=node.binding, action=action),
                consumed=len(keys),
            )
        if node.children:
            return ResolutionResult(
                status="pending",
                consumed=len(keys),
                next_expected=node.next_tokens(),
                timeout_ms=self._pending_timeout(node),
            )
        return ResolutionResult(status="miss", consumed=len(keys))

    def _pending_timeout(self, node: TrieNode) -> Optional[int]:
        return node.timeout_ms

    def _trie(self, mode: str) -> KeymapTrie:
        revision = self._registry.revision()
        trie = self._tries.get(mode)
        if trie is None or trie.revision != revision:
            trie = KeymapTrie(mode=mode, revision=revision)
            for binding in self._registry.iter_bindings(mode):
                trie.add_binding(binding)
            self._tries[mode] = trie
        return trie


__all__ = [
    "KeymapResolver",
    "KeymapTrie",
    "ResolutionMatch",
    "ResolutionResult",
    "TrieNode",
]
