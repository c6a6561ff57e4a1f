"""Config – SettingsLoader port and EnvSettingsLoader."""
from __future__ import annotations

import abc
import dataclasses
import os
from typing import Any, Callable, Mapping, TypeVar

from entry_export.config.errors import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)
from entry_export.config.settings import Settings

S = TypeVar("S", bound=Settings)

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


def _to_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"expected a boolean, got {raw!r}")


def _to_items(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


# Keyed by the annotation text; settings modules use postponed annotations.
_COERCERS: dict[str, Callable[[str], Any]] = {
    "bool": _to_bool,
    "int": int,
    "float": float,
    "str": str,
    "list[str]": _to_items,
    "frozenset[str]": lambda raw: frozenset(_to_items(raw)),
}


class SettingsLoader(abc.ABC):
    """Port: build a :class:`Settings` subclass from an external source."""

    @abc.abstractmethod
    def load(self, settings_class: type[S]) -> S: ...


class EnvSettingsLoader(SettingsLoader):
    """Read ``<PREFIX>_<FIELD>`` variables, e.g. ``ENTRY_EXPORT_ENTRIES_PER_STEP``.

    Booleans accept ``1/0``, ``true/false``, ``yes/no`` and ``on/off``;
    collections are comma separated.  *environ* defaults to ``os.environ``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def load(self, settings_class: type[S]) -> S:
        environ = os.environ if self._environ is None else self._environ
        prefix = settings_class._prefix.upper()
        values: dict[str, Any] = {}

        for field in dataclasses.fields(settings_class):
            key = f"{prefix}_{field.name.upper()}" if prefix else field.name.upper()
            if key not in environ:
                if field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
                    raise MissingRequiredSettingError(key)
                continue
            values[field.name] = self._coerce(key, environ[key], field.type)

        try:
            return settings_class(**values)
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Could not build {settings_class.__name__}: {exc}") from exc

    @staticmethod
    def _coerce(key: str, raw: str, annotation: Any) -> Any:
        hint = annotation if isinstance(annotation, str) else getattr(annotation, "__name__", str(annotation))
        coerce = _COERCERS.get(hint.replace(" ", ""), str)
        try:
            return coerce(raw)
        except ValueError as exc:
            raise InvalidSettingValueError(key, str(exc)) from exc


__all__ = ["EnvSettingsLoader", "SettingsLoader"]
