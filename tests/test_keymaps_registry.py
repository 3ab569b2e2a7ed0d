import pytest

from rune.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapConflictError,
    KeymapRegistry,
    load_default_keymaps,
    make_binding,
)


def make_action(action_id: str = "test_action") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_raw_binding(
    *,
    binding_id: str,
    mode: str = "normal",
    notation: str = "gg",
    action_id: str = "test_action",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.parse(notation),
        action_id=action_id,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_raw_binding(binding_id="normal.g-g")
    before = registry.revision()

    registry.register_binding(binding)

    assert list(registry.iter_bindings(mode="normal")) == [binding]
    assert registry.revision() == before + 1


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_raw_binding(binding_id="normal.g-g"))

    with pytest.raises(KeymapConflictError) as info:
        registry.register_binding(make_raw_binding(binding_id="normal.g-g.duplicate"))

    assert [conflict.id for conflict in info.value.conflicts] == ["normal.g-g"]


def test_duplicate_binding_id_needs_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_raw_binding(binding_id="normal.g-g"))

    with pytest.raises(ValueError):
        registry.register_binding(make_raw_binding(binding_id="normal.g-g", notation="G"))


def test_same_keys_in_other_mode_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_raw_binding(binding_id="normal.g-g"))
    registry.register_binding(make_raw_binding(binding_id="insert.g-g", mode="insert"))

    assert [binding.id for binding in registry.iter_bindings("normal")] == ["normal.g-g"]
    assert [binding.id for binding in registry.iter_bindings("insert")] == ["insert.g-g"]


def test_register_binding_with_unknown_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_raw_binding(binding_id="normal.g-g"))


def test_register_binding_with_replace_evicts_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    first = make_raw_binding(binding_id="normal.g-g")
    second = make_raw_binding(binding_id="user.g-g")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]
    with pytest.raises(KeyError):
        registry.get_binding("normal.g-g")


def test_rebinding_an_id_to_new_keys_frees_the_old_keys() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_raw_binding(binding_id="normal.top"))

    registry.register_binding(make_raw_binding(binding_id="normal.top", notation="G"), replace=True)
    registry.register_binding(make_raw_binding(binding_id="normal.g-g"))

    assert sorted(binding.id for binding in registry.iter_bindings("normal")) == [
        "normal.g-g",
        "normal.top",
    ]


def test_default_binding_ids_follow_mode_and_tokens() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    assert registry.get_binding("normal.d-d").action_id == "delete_line"
    assert registry.get_binding("normal.g-g").action_id == "goto_top"
    assert registry.get_binding("normal.ctrl+r").action_id == "redo"
    assert registry.get_binding("insert.ESC").action_id == "exit_insert"
    assert registry.get_binding("insert.ctrl+g-u").action_id == "break_undo"
    assert registry.get_binding("command.ENTER").action_id == "submit_command"


def test_load_default_keymaps_timeout_override() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, default_sequence_timeout_ms=1500)

    assert registry.get_binding("normal.g-g").sequence.timeout_ms == 1500


def test_load_default_keymaps_excludes_bindings() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, exclude_bindings=("normal.x",))

    with pytest.raises(KeyError):
        registry.get_binding("normal.x")
    assert registry.has_action("delete_char")


def test_extra_bindings_replace_defaults_on_same_keys() -> None:
    registry = KeymapRegistry()
    custom = make_binding("normal", "x", "line_end", source="user.conf")

    load_default_keymaps(registry, extra_bindings=(custom,))

    binding = registry.get_binding("normal.x")
    assert binding.action_id == "line_end"
    assert binding.source == "user.conf"


def test_make_binding_rejects_unknown_action() -> None:
    with pytest.raises(ValueError):
        make_binding("normal", "Q", "not_an_action")
