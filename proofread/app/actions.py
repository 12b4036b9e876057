"""Selectable UI actions built from the registry.

Each action carries an explicit ``kind`` and ``payload`` set at construction,
so routing never has to re-derive intent from the action name. An
:class:`ActionSet` owns the :class:`ActionContext` it was built for and
passes it explicitly into every activation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from proofread.domain.models import ModelDescriptor, ModelId, Prompt, PromptId
from proofread.domain.ports import ComposerSurface

_log = logging.getLogger(__name__)

PROMPT_ACTION_PREFIX = "ai-proofread-"
MODEL_ACTION_PREFIX = "ai-model-"
MENU_ACTION_NAME = "ai-menu"
TRIGGER_ACTION_NAME = "ai-proofread-dropdown"
PROMPT_ICON = "tools-check-spelling"
CURRENT_MODEL_MARK = "✓"

_NAME_SEGMENT_RE = re.compile(r"[^0-9A-Za-z_.-]+")


class ActionKind(str, Enum):
    PROMPT = "prompt"
    MODEL = "model"
    MENU = "menu"
    TRIGGER = "trigger"


@dataclass(frozen=True)
class Action:
    """One selectable entry.

    Attributes:
        name: Unique identifier used by the host to register the action.
        label: Menu text.
        tooltip: Hover text.
        kind: Routing tag.
        payload: Prompt id for PROMPT, model id for MODEL, ``None`` otherwise.
        icon: Optional icon name.
    """

    name: str
    label: str
    tooltip: str
    kind: ActionKind
    payload: Optional[str] = None
    icon: Optional[str] = None


class ActionContext(Protocol):
    """Operations an action set routes activations into."""

    def start_transform(self, prompt_id: PromptId, surface: ComposerSurface) -> object: ...
    def select_model(self, model_id: ModelId) -> bool: ...


class ActionHost(ComposerSurface, Protocol):
    """Composer surface that can also render actions."""

    def install_actions(self, action_set: "ActionSet") -> None: ...
    def popup_menu(self, actions: Sequence[Action], on_select: Callable[[Action], None]) -> None: ...


@dataclass(frozen=True)
class MenuLayout:
    """Menu tree for the host: AI menu, model submenu and toolbar."""

    menu: Action
    prompt_items: Tuple[Action, ...]
    model_menu_label: str
    model_items: Tuple[Action, ...]
    toolbar: Tuple[Action, ...]


@dataclass
class ActionSet:
    actions: Tuple[Action, ...]
    context: ActionContext
    current_model: ModelId
    _by_name: dict = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_name = {action.name: action for action in self.actions}

    def __len__(self) -> int:
        return len(self.actions)

    def __iter__(self):
        return iter(self.actions)

    def get(self, name: str) -> Optional[Action]:
        return self._by_name.get(name)

    def of_kind(self, kind: ActionKind) -> Tuple[Action, ...]:
        return tuple(action for action in self.actions if action.kind is kind)

    def prompt_actions(self) -> Tuple[Action, ...]:
        return self.of_kind(ActionKind.PROMPT)

    def model_actions(self) -> Tuple[Action, ...]:
        return self.of_kind(ActionKind.MODEL)

    def activate(self, action: Action | str, surface: ActionHost) -> object:
        """Route an activation by its tag.

        Returns whatever the context returned (an orchestrator for prompts,
        the save result for models), the listed prompt actions for the
        trigger, or ``None`` for the container menu.
        """
        if isinstance(action, str):
            found = self.get(action)
            if found is None:
                _log.warning("Unknown action: %s", action)
                return None
            action = found

        if action.kind is ActionKind.PROMPT:
            _log.debug("Proofread action triggered: %s", action.name)
            return self.context.start_transform(action.payload or "", surface)
        if action.kind is ActionKind.MODEL:
            _log.debug("Model selected: %s", action.payload)
            return self.context.select_model(action.payload or "")
        if action.kind is ActionKind.TRIGGER:
            prompts = self.prompt_actions()
            surface.popup_menu(prompts, lambda picked: self.activate(picked, surface))
            return prompts
        return None

    def menu_layout(self) -> MenuLayout:
        menu = self.of_kind(ActionKind.MENU)
        return MenuLayout(
            menu=menu[0],
            prompt_items=self.prompt_actions(),
            model_menu_label=f"Model ({self.current_model})",
            model_items=self.model_actions(),
            toolbar=self.of_kind(ActionKind.TRIGGER),
        )


def action_name_segment(raw: Optional[str]) -> str:
    """Turn an id into a stable action-name segment (may be empty)."""
    if not raw:
        return ""
    segment = _NAME_SEGMENT_RE.sub("-", raw.strip())
    segment = re.sub(r"-{2,}", "-", segment)
    return segment.strip("-").lower()


def prompt_action(prompt: Prompt) -> Action:
    segment = action_name_segment(prompt.id)
    return Action(
        name=f"{PROMPT_ACTION_PREFIX}{segment}" if segment else "",
        label=prompt.display_name,
        tooltip=prompt.prompt_text.strip(),
        kind=ActionKind.PROMPT,
        payload=prompt.id,
        icon=PROMPT_ICON,
    )


def model_action(model: ModelDescriptor, current_model: ModelId) -> Action:
    segment = action_name_segment(model.id)
    label = f"{CURRENT_MODEL_MARK} {model.id}" if model.id == current_model else model.id
    return Action(
        name=f"{MODEL_ACTION_PREFIX}{segment}" if segment else "",
        label=label,
        tooltip=f"Use {model.id} model" if model.id else "",
        kind=ActionKind.MODEL,
        payload=model.id,
    )


def menu_action() -> Action:
    return Action(name=MENU_ACTION_NAME, label="AI", tooltip="AI tools", kind=ActionKind.MENU)


def trigger_action() -> Action:
    return Action(
        name=TRIGGER_ACTION_NAME,
        label="AI Proofread",
        tooltip="AI Proofread",
        kind=ActionKind.TRIGGER,
        icon=PROMPT_ICON,
    )


_STRUCTURAL_KINDS = frozenset({ActionKind.MENU, ActionKind.TRIGGER})
_FALLBACK_PREFIXES = {
    ActionKind.PROMPT: PROMPT_ACTION_PREFIX,
    ActionKind.MODEL: MODEL_ACTION_PREFIX,
}


def validate_actions(actions: Iterable[Action]) -> List[Action]:
    """Backfill empty names, labels and tooltips and de-duplicate names.

    MENU and TRIGGER names are reserved up front; an entry colliding with
    one of them is the one that gets renamed.
    """
    entries = list(actions)
    reserved: Set[str] = {
        action.name for action in entries if action.kind in _STRUCTURAL_KINDS and action.name
    }
    validated: List[Action] = []
    seen: Set[str] = set()
    for index, action in enumerate(entries):
        changes = {}
        taken = seen if action.kind in _STRUCTURAL_KINDS else seen | reserved
        name = action.name
        if not name:
            prefix = _FALLBACK_PREFIXES.get(action.kind, "ai-")
            name = f"{prefix}missing-{index}"
            _log.warning("Found empty action name for entry %d, using fallback '%s'", index, name)
        if name in taken:
            base, suffix = name, 2
            while f"{base}-{suffix}" in taken:
                suffix += 1
            name = f"{base}-{suffix}"
            _log.warning("Duplicate action name '%s', renamed to '%s'", base, name)
        if name != action.name:
            changes["name"] = name
        if not action.label:
            changes["label"] = "(no label)"
            _log.warning("Action '%s' has no label", name)
        if not action.tooltip:
            changes["tooltip"] = action.label or "(no description)"
            _log.warning("Action '%s' has no tooltip", name)
        seen.add(name)
        validated.append(replace(action, **changes) if changes else action)
    return validated


def build_action_set(
    prompts: Iterable[Prompt],
    models: Iterable[ModelDescriptor],
    current_model: ModelId,
    context: ActionContext,
) -> ActionSet:
    """Build ``len(prompts) + len(models) + 2`` validated actions."""
    entries: List[Action] = [prompt_action(prompt) for prompt in prompts]
    entries.append(menu_action())
    entries.append(trigger_action())
    entries.extend(model_action(model, current_model) for model in models)
    return ActionSet(
        actions=tuple(validate_actions(entries)),
        context=context,
        current_model=current_model,
    )


__all__ = [
    "Action",
    "ActionContext",
    "ActionHost",
    "ActionKind",
    "ActionSet",
    "MenuLayout",
    "action_name_segment",
    "build_action_set",
    "validate_actions",
]
