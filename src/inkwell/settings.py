from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dynaconf import Dynaconf

PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent


def _resolve_config_dir() -> Path | None:
    env_override = os.environ.get("INKWELL_CONFIG_DIR")
    candidates: list[Path] = []

    if env_override:
        candidates.append(Path(env_override).expanduser())

    candidates.append(PROJECT_ROOT / "config")
    candidates.append(PROJECT_ROOT.parent / "config")

    for candidate in candidates:
        expanded = candidate.expanduser()
        if expanded.is_dir():
            return expanded.resolve()

    if env_override:
        searched = ", ".join(str(path) for path in candidates)
        raise RuntimeError(
            f"Unable to locate configuration directory. Searched: {searched}. "
            "Set INKWELL_CONFIG_DIR to a valid directory."
        )
    # Installed without a config directory; defaults and env vars still apply.
    return None


CONFIG_DIR = _resolve_config_dir()


DEFAULTS: dict[str, Any] = {
    "APP_NAME": "Inkwell",
    "LOG_LEVEL": "INFO",
    "BLOG": {
        "id": "default",
        "name": "My Blog",
        "timezone": "UTC",
        "recent_blog_entries_on_home_page": 3,
        "recent_responses_on_home_page": 3,
    },
    "LISTENERS": {
        "blog_entry": [],
        "response": [],
    },
    "INDEX": {
        "reindex_on_start": True,
    },
    "CACHE": {
        "entry_cache_maxsize": 512,
    },
    "REQUEST_LOG": {
        "enabled": False,
        "directory": "logs",
    },
}


def _settings_files() -> list[Path]:
    if CONFIG_DIR is None:
        return []
    return [
        CONFIG_DIR / "settings.toml",
        CONFIG_DIR / ".secrets.toml",
        CONFIG_DIR / "settings.local.toml",
    ]


settings = Dynaconf(
    envvar_prefix="INKWELL",
    settings_files=_settings_files(),
    environments=True,
    env_switcher="INKWELL_ENV",
    load_dotenv=True,
    envvar_parse_values=True,
    merge_enabled=True,
    defaults=DEFAULTS,
)


_MISSING = object()


def _ensure_defaults(prefix: str, defaults: dict[str, Any]) -> None:
    for key, value in defaults.items():
        dotted = f"{prefix}.{key}" if prefix else key
        existing = settings.get(dotted, _MISSING)

        if isinstance(value, dict):
            if existing is _MISSING:
                settings.set(dotted, value.copy())
                existing = settings.get(dotted, _MISSING)
            # Only recurse into mappings so user-provided primitives survive.
            if isinstance(existing, Mapping):
                _ensure_defaults(dotted, value)
            continue

        if existing is _MISSING:
            settings.set(dotted, value)


_ensure_defaults("", DEFAULTS)


def _normalise_listener_lists() -> None:
    for name in ("blog_entry", "response"):
        dotted = f"LISTENERS.{name}"
        raw = settings.get(dotted)
        if raw is None:
            settings.set(dotted, [])
        elif isinstance(raw, str):
            # Whitespace separated tags; "#" comments a tag out.
            tags = [part for part in raw.split() if not part.startswith("#")]
            settings.set(dotted, tags)


_normalise_listener_lists()

__all__ = ["settings", "DEFAULTS", "CONFIG_DIR"]
