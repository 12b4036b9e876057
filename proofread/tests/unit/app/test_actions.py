from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from proofread.app.actions import (
    MENU_ACTION_NAME,
    TRIGGER_ACTION_NAME,
    Action,
    ActionKind,
    action_name_segment,
    build_action_set,
    validate_actions,
)
from proofread.domain.models import ModelDescriptor, Prompt
from proofread.tests.unit.app.helpers import SurfaceRecorder, sample_prompts


def _models(*ids: str):
    return [ModelDescriptor(model_id) for model_id in ids]


@pytest.mark.parametrize("n_prompts, n_models", [(0, 0), (2, 0), (0, 3), (2, 3)])
def test_action_count_is_prompts_plus_models_plus_two(n_prompts, n_models) -> None:
    prompts = sample_prompts()[:n_prompts]
    models = _models(*[f"gpt-{i}" for i in range(n_models)])

    action_set = build_action_set(prompts, models, "gpt-0", context=MagicMock())

    assert len(action_set) == n_prompts + n_models + 2
    assert len(action_set.of_kind(ActionKind.MENU)) == 1
    assert len(action_set.of_kind(ActionKind.TRIGGER)) == 1


def test_actions_carry_kind_and_payload() -> None:
    action_set = build_action_set(
        sample_prompts(), _models("gpt-4o"), "gpt-4o", context=MagicMock()
    )

    grammar = action_set.get("ai-proofread-fix-grammar")
    model = action_set.get("ai-model-gpt-4o")

    assert grammar.kind is ActionKind.PROMPT
    assert grammar.payload == "fix-grammar"
    assert grammar.label == "Fix grammar"
    assert grammar.tooltip == "Fix grammar and spelling."
    assert model.kind is ActionKind.MODEL
    assert model.payload == "gpt-4o"


def test_current_model_is_marked() -> None:
    action_set = build_action_set(
        (), _models("gpt-4o", "gpt-4o-mini"), "gpt-4o-mini", context=MagicMock()
    )

    labels = {action.payload: action.label for action in action_set.model_actions()}

    assert labels == {"gpt-4o": "gpt-4o", "gpt-4o-mini": "✓ gpt-4o-mini"}
    assert action_set.menu_layout().model_menu_label == "Model (gpt-4o-mini)"


def test_prompt_activation_routes_payload_not_name() -> None:
    context = MagicMock()
    prompt = Prompt(id="Tone: Friendly!", display_name="Friendly", prompt_text="Be nice.")
    action_set = build_action_set((prompt,), (), "gpt-4o", context=context)
    surface = SurfaceRecorder()

    action = action_set.prompt_actions()[0]
    action_set.activate(action, surface)

    assert action.name == "ai-proofread-tone-friendly"
    context.start_transform.assert_called_once_with("Tone: Friendly!", surface)


def test_model_activation_selects_model() -> None:
    context = MagicMock()
    action_set = build_action_set((), _models("gpt-4o-mini"), "gpt-4o", context=context)

    action_set.activate("ai-model-gpt-4o-mini", SurfaceRecorder())

    context.select_model.assert_called_once_with("gpt-4o-mini")


def test_trigger_lists_prompts_and_routes_pick() -> None:
    context = MagicMock()
    action_set = build_action_set(sample_prompts(), (), "gpt-4o", context=context)
    surface = SurfaceRecorder()

    listed = action_set.activate("ai-proofread-dropdown", surface)
    surface.pick_from_popup(1)

    assert [action.payload for action in listed] == ["fix-grammar", "formal"]
    assert surface.popups == [listed]
    context.start_transform.assert_called_once_with("formal", surface)


def test_menu_and_unknown_actions_do_nothing() -> None:
    context = MagicMock()
    action_set = build_action_set(sample_prompts(), (), "gpt-4o", context=context)

    assert action_set.activate("ai-menu", SurfaceRecorder()) is None
    assert action_set.activate("no-such-action", SurfaceRecorder()) is None
    context.start_transform.assert_not_called()
    context.select_model.assert_not_called()


def test_missing_fields_are_backfilled(caplog) -> None:
    prompt = Prompt(id="!!!", display_name="", prompt_text="  ")
    action_set = build_action_set((prompt,), (), "gpt-4o", context=MagicMock())

    action = action_set.prompt_actions()[0]

    assert action.name == "ai-proofread-missing-0"
    assert action.label == "(no label)"
    assert action.tooltip
    assert action.payload == "!!!"
    assert "empty action name" in caplog.text


def test_duplicate_names_are_made_unique() -> None:
    actions = [
        Action(name="ai-proofread-x", label="X", tooltip="x", kind=ActionKind.PROMPT, payload="x"),
        Action(name="ai-proofread-x", label="X!", tooltip="x", kind=ActionKind.PROMPT, payload="X"),
    ]

    validated = validate_actions(actions)

    assert [action.name for action in validated] == ["ai-proofread-x", "ai-proofread-x-2"]


def test_trigger_name_wins_over_colliding_prompt() -> None:
    prompt = Prompt(id="dropdown", display_name="Dropdown", prompt_text="Fix it.")
    context = MagicMock()
    action_set = build_action_set((prompt,), (), "gpt-4o", context=context)

    trigger = action_set.get(TRIGGER_ACTION_NAME)
    renamed = action_set.prompt_actions()[0]

    assert trigger is not None
    assert trigger.kind is ActionKind.TRIGGER
    assert renamed.name == "ai-proofread-dropdown-2"
    action_set.activate(renamed.name, SurfaceRecorder())
    context.start_transform.assert_called_once()
    assert context.start_transform.call_args.args[0] == "dropdown"


def test_menu_name_is_reserved_when_listed_after_prompt() -> None:
    actions = [
        Action(name=MENU_ACTION_NAME, label="P", tooltip="p", kind=ActionKind.PROMPT, payload="p"),
        Action(name=MENU_ACTION_NAME, label="AI", tooltip="AI tools", kind=ActionKind.MENU),
    ]

    validated = validate_actions(actions)

    assert [action.name for action in validated] == [f"{MENU_ACTION_NAME}-2", MENU_ACTION_NAME]


def test_empty_model_name_uses_model_prefix() -> None:
    action_set = build_action_set((), _models("!!!"), "gpt-4o", context=MagicMock())

    model = action_set.model_actions()[0]

    assert model.name == "ai-model-missing-2"
    assert model.payload == "!!!"


def test_menu_layout_groups_actions() -> None:
    action_set = build_action_set(sample_prompts(), _models("gpt-4o"), "gpt-4o", context=MagicMock())

    layout = action_set.menu_layout()

    assert layout.menu.label == "AI"
    assert [a.payload for a in layout.prompt_items] == ["fix-grammar", "formal"]
    assert [a.payload for a in layout.model_items] == ["gpt-4o"]
    assert [a.name for a in layout.toolbar] == ["ai-proofread-dropdown"]


def test_action_name_segment() -> None:
    assert action_name_segment("  Fix  Grammar ") == "fix-grammar"
    assert action_name_segment("gpt-4o-mini") == "gpt-4o-mini"
    assert action_name_segment("") == ""
    assert action_name_segment(None) == ""
