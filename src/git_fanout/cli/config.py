from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


DEFAULT_WORKING_DIR = "./.git_fanout_tmp"


@dataclass(slots=True)
class AppConfig:
    working_dir: Path
    selector_expression: str
    action_commands: tuple[tuple[str, ...], ...]
    finalization_command: tuple[str, ...] | None
    access_token: str | None
    ssh_key: Path | None
    ssh_insecure: bool
    strict_fail: bool
    cleanup: bool
    clear_existing: bool
    log_level: str
    log_format: str


def load_config(args, env: Mapping[str, str]) -> AppConfig:
    working_dir_raw = (
        _normalize_empty(args.working_dir) or _normalize_empty(env.get("GIT_FANOUT_DIR")) or DEFAULT_WORKING_DIR
    )
    selector_expression = _normalize_empty(args.selector) or _normalize_empty(env.get("GIT_FANOUT_SELECTOR"))

    raw_actions = [item for item in (args.action or []) if _normalize_empty(item)]
    if not raw_actions and _normalize_empty(env.get("GIT_FANOUT_ACTION")):
        raw_actions = [env["GIT_FANOUT_ACTION"]]

    raw_finalization = _normalize_empty(args.finalization_action) or _normalize_empty(
        env.get("GIT_FANOUT_FINALIZATION_ACTION")
    )
    access_token = _normalize_empty(args.access_token) or _normalize_empty(env.get("GIT_FANOUT_ACCESS_TOKEN"))
    ssh_key_raw = _normalize_empty(args.ssh_key) or _normalize_empty(env.get("GIT_FANOUT_SSH_KEY"))

    if not selector_expression:
        raise ValueError("Missing selector. Use --selector or set GIT_FANOUT_SELECTOR")

    if not raw_actions:
        raise ValueError("Missing action. Use --action or set GIT_FANOUT_ACTION")

    action_commands = tuple(_parse_command(raw, "action") for raw in raw_actions)
    finalization_command = _parse_command(raw_finalization, "finalization action") if raw_finalization else None

    strict_fail = _resolve_bool(args.strict_fail, env.get("GIT_FANOUT_STRICT_FAIL"), "GIT_FANOUT_STRICT_FAIL", True)
    cleanup = _resolve_bool(args.cleanup, env.get("GIT_FANOUT_CLEANUP"), "GIT_FANOUT_CLEANUP", False)
    ssh_insecure = _resolve_bool(
        args.insecure_ssh or None, env.get("GIT_FANOUT_SSH_INSECURE"), "GIT_FANOUT_SSH_INSECURE", False
    )
    clear_existing = not _resolve_bool(
        args.keep_existing or None, env.get("GIT_FANOUT_KEEP_EXISTING"), "GIT_FANOUT_KEEP_EXISTING", False
    )

    log_format = (_normalize_empty(args.log_format) or _normalize_empty(env.get("LOG_FORMAT")) or "plain").lower()
    if log_format not in {"json", "plain"}:
        raise ValueError("Invalid log format. Allowed values: json, plain")

    return AppConfig(
        working_dir=Path(working_dir_raw).expanduser(),
        selector_expression=selector_expression,
        action_commands=action_commands,
        finalization_command=finalization_command,
        access_token=access_token,
        ssh_key=Path(ssh_key_raw).expanduser() if ssh_key_raw else None,
        ssh_insecure=ssh_insecure,
        strict_fail=strict_fail,
        cleanup=cleanup,
        clear_existing=clear_existing,
        log_level=_normalize_empty(env.get("LOG_LEVEL")) or "WARNING",
        log_format=log_format,
    )


def parse_bool(value: str, name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false)")


def _resolve_bool(arg_value: bool | None, env_value: str | None, name: str, default: bool) -> bool:
    if arg_value is not None:
        return arg_value
    if _normalize_empty(env_value) is not None:
        return parse_bool(env_value, name)
    return default


def _parse_command(raw: str, label: str) -> tuple[str, ...]:
    try:
        parts = tuple(shlex.split(raw))
    except ValueError as error:
        raise ValueError(f"Invalid {label} command '{raw}': {error}") from error
    if not parts:
        raise ValueError(f"Empty {label} command")
    return parts


def _normalize_empty(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
