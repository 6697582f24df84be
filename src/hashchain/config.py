"""Typed configuration loader for the hashchain REPL."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError, IOErrorEnvelope
from .core.maps import DEFAULT_BUCKETS
from .core.node import MAX_KEY_LENGTH

CONFIG_ENV = "HASHCHAIN_CONFIG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _coerce_bool(raw: Any, name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE:
            return True
        if normalized in _FALSE:
            return False
    raise BadInputError(f"{name} must be boolean")


@dataclass
class MapPolicy:
    buckets: int = DEFAULT_BUCKETS
    max_key_length: int = MAX_KEY_LENGTH

    def validate(self) -> None:
        if isinstance(self.buckets, bool) or not isinstance(self.buckets, int) or self.buckets < 1:
            raise BadInputError("map.buckets must be an integer >= 1")
        if (
            isinstance(self.max_key_length, bool)
            or not isinstance(self.max_key_length, int)
            or self.max_key_length < 1
        ):
            raise BadInputError("map.max_key_length must be an integer >= 1")


@dataclass
class ReplPolicy:
    key_prompt: str = "key > "
    value_prompt: str = "value > "
    dump_after_set: bool = True

    def validate(self) -> None:
        if not isinstance(self.key_prompt, str) or not isinstance(self.value_prompt, str):
            raise BadInputError("repl prompts must be strings")


@dataclass
class AppConfig:
    map: MapPolicy = field(default_factory=MapPolicy)
    repl: ReplPolicy = field(default_factory=ReplPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except OSError as exc:
                raise IOErrorEnvelope(f"Cannot read config file {path}: {exc}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        map_data = data.get("map", {})
        if not isinstance(map_data, dict):
            raise BadInputError("[map] section must be a table")
        repl_data = data.get("repl", {})
        if not isinstance(repl_data, dict):
            raise BadInputError("[repl] section must be a table")
        try:
            map_policy = MapPolicy(**map_data)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [map]: {exc}") from exc
        repl_kwargs = dict(repl_data)
        if "dump_after_set" in repl_kwargs:
            repl_kwargs["dump_after_set"] = _coerce_bool(
                repl_kwargs["dump_after_set"], "repl.dump_after_set"
            )
        try:
            repl_policy = ReplPolicy(**repl_kwargs)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [repl]: {exc}") from exc
        return cls(map=map_policy, repl=repl_policy)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        map_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "HASHCHAIN_BUCKETS": ("buckets", int),
            "HASHCHAIN_MAX_KEY_LENGTH": ("max_key_length", int),
        }
        for key, (attr, caster) in map_mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.map, attr, value)

        for key, attr in (
            ("HASHCHAIN_KEY_PROMPT", "key_prompt"),
            ("HASHCHAIN_VALUE_PROMPT", "value_prompt"),
        ):
            raw_value = env.get(key)
            if raw_value is not None:
                setattr(self.repl, attr, raw_value)

        raw_dump = env.get("HASHCHAIN_DUMP_AFTER_SET")
        if raw_dump is not None:
            try:
                self.repl.dump_after_set = _coerce_bool(raw_dump, "HASHCHAIN_DUMP_AFTER_SET")
            except BadInputError as exc:
                raise BadInputError(
                    f"Invalid env override HASHCHAIN_DUMP_AFTER_SET={raw_dump!r}"
                ) from exc

    def validate(self) -> None:
        self.map.validate()
        self.repl.validate()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
