from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional, Set, Tuple

from proofread.domain.models import DEFAULT_MODEL, OPENAI_HOST, ModelId, Prompt
from proofread.domain.ports import SettingsStorePort

_log = logging.getLogger(__name__)

APP_DIR_NAME = "ai-proofread"
PROMPTS_FILE = "prompts.json"
SETTINGS_FILE = "settings.json"
AUTHINFO_FILE = ".authinfo"
MODEL_KEY = "model"


class StorageLocal(SettingsStorePort):
    """Per-user files: prompt definitions, model selection and ``~/.authinfo``.

    Every loader is fail-soft. Problems are logged as warnings and the caller
    gets an empty or default value instead of an exception.
    """

    def __init__(self, config_dir: str, home_dir: Optional[str] = None) -> None:
        self.root = os.path.join(config_dir, APP_DIR_NAME)
        self.home_dir = home_dir or os.path.expanduser("~")

    @property
    def prompts_path(self) -> str:
        return os.path.join(self.root, PROMPTS_FILE)

    @property
    def settings_path(self) -> str:
        return os.path.join(self.root, SETTINGS_FILE)

    @property
    def authinfo_path(self) -> str:
        return os.path.join(self.home_dir, AUTHINFO_FILE)

    # ---- Prompts (JSON array) ----
    def load_prompts(self) -> Tuple[Prompt, ...]:
        path = self.prompts_path
        _log.debug("Loading prompts from: %s", path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                root = json.load(f)
        except FileNotFoundError:
            _log.warning("Prompts file not found: %s", path)
            return ()
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            _log.warning("Error loading prompts from %s: %s", path, exc)
            return ()

        if not isinstance(root, list):
            _log.warning("Prompts file root is not an array, using empty prompts list")
            return ()

        prompts: List[Prompt] = []
        seen: Set[str] = set()
        for index, entry in enumerate(root):
            prompt = _parse_prompt(index, entry)
            if prompt is None:
                continue
            if prompt.id in seen:
                _log.warning("Skipping prompt #%d: duplicate id '%s'", index, prompt.id)
                continue
            seen.add(prompt.id)
            prompts.append(prompt)
        _log.debug("Prompts loaded: %d", len(prompts))
        return tuple(prompts)

    # ---- Credentials (~/.authinfo) ----
    def load_credentials(self) -> Optional[str]:
        path = self.authinfo_path
        _log.debug("Loading authinfo from: %s", path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            _log.warning("Error loading authinfo: %s", exc)
            return None

        for line in content.splitlines():
            api_key = parse_authinfo_line(line)
            if api_key:
                _log.debug("Found API key")
                return api_key
        return None

    # ---- Model selection (JSON object) ----
    def load_selected_model(self) -> ModelId:
        settings = self._read_settings()
        value = settings.get(MODEL_KEY) if settings is not None else None
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_MODEL

    def save_selected_model(self, model_id: ModelId) -> bool:
        """Merge ``model_id`` into the settings file, keeping other keys."""
        settings = self._read_settings() or {}
        settings[MODEL_KEY] = model_id
        path = self.settings_path
        try:
            os.makedirs(self.root, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(settings, f, ensure_ascii=False, indent=2)
        except OSError as exc:
            _log.warning("Could not save model selection to %s: %s", path, exc)
            return False
        _log.debug("Saved model selection: %s", model_id)
        return True

    def _read_settings(self) -> Optional[Dict[str, Any]]:
        path = self.settings_path
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            _log.warning("Error reading settings from %s: %s", path, exc)
            return None
        if not isinstance(data, dict):
            _log.warning("Settings file root is not an object, ignoring it")
            return None
        return data


def parse_authinfo_line(line: str, host: str = OPENAI_HOST) -> Optional[str]:
    """Return the key from ``machine <host> login apikey password <key>``."""
    tokens = line.split()
    if len(tokens) < 6:
        return None
    if (
        tokens[0] == "machine"
        and tokens[1] == host
        and tokens[2] == "login"
        and tokens[3] == "apikey"
        and tokens[4] == "password"
    ):
        return tokens[5]
    return None


def _parse_prompt(index: int, entry: Any) -> Optional[Prompt]:
    if not isinstance(entry, dict):
        _log.warning("Skipping prompt #%d: entry is not an object", index)
        return None
    prompt_id = _first_text(entry, ("id", "name"))
    if prompt_id is None:
        _log.warning("Skipping prompt #%d: missing 'id'", index)
        return None
    text = entry.get("text", entry.get("prompt"))
    if not isinstance(text, str):
        _log.warning("Skipping prompt '%s': missing 'text'", prompt_id)
        return None
    display_name = _first_text(entry, ("label", "name")) or prompt_id
    return Prompt(id=prompt_id, display_name=display_name, prompt_text=text)


def _first_text(entry: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


__all__ = ["StorageLocal", "parse_authinfo_line"]
