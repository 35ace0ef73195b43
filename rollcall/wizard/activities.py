"""Missionary activity keys, count helpers and load-path key reconciliation.

The write path always emits the canonical snake_case keys of `ActivityType`.
Records coming back from storage (or older clients) may spell the same fields
differently, e.g. ``literaturasDistribuidas`` or ``Visitantes``; those are
matched by `reconcile_counts` through an ordered list of resolvers.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Optional

from rollcall.wizard.errors import InvalidCountError, UnknownActivityError


class ActivityType(str, Enum):
    """The closed set of weekly activity counts, in wizard order."""

    CONTATOS_MISSIONARIOS = "qtd_contatos_missionarios"
    LITERATURAS_DISTRIBUIDAS = "literaturas_distribuidas"
    VISITAS_MISSIONARIAS = "visitas_missionarias"
    ESTUDOS_BIBLICOS = "estudos_biblicos"
    PESSOAS_AUXILIADAS = "pessoas_auxiliadas"
    PESSOAS_TRAZIDAS_IGREJA = "pessoas_trazidas_igreja"
    VISITANTES = "visitantes"

    @property
    def label(self) -> str:
        return ACTIVITY_LABELS[self]


ACTIVITY_LABELS: dict[ActivityType, str] = {
    ActivityType.CONTATOS_MISSIONARIOS: "Contatos Missionários",
    ActivityType.LITERATURAS_DISTRIBUIDAS: "Literaturas Distribuídas",
    ActivityType.VISITAS_MISSIONARIAS: "Visitas Missionárias",
    ActivityType.ESTUDOS_BIBLICOS: "Estudos Bíblicos",
    ActivityType.PESSOAS_AUXILIADAS: "Pessoas Auxiliadas",
    ActivityType.PESSOAS_TRAZIDAS_IGREJA: "Pessoas Trazidas à Igreja",
    ActivityType.VISITANTES: "Visitantes",
}

ACTIVITY_KEYS: tuple[str, ...] = tuple(a.value for a in ActivityType)

Resolver = Callable[[Mapping[str, Any], str], Optional[int]]

_SNAKE_WORD_RE = re.compile(r"_([a-z0-9])")


def activity_type(key: str | ActivityType) -> ActivityType:
    try:
        return ActivityType(key)
    except ValueError:
        raise UnknownActivityError(str(key)) from None


def validate_count(value: Any) -> int:
    """Direct-set path: only non-negative integers are accepted."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCountError(f"Activity count must be an integer, got {value!r}")
    if value < 0:
        raise InvalidCountError(f"Activity count must not be negative, got {value}")
    return value


def coerce_count(value: Any) -> Optional[int]:
    """Best-effort conversion of a stored value; None when it cannot be used."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if not value >= 0:
            return None
        try:
            return int(value)
        except OverflowError:
            return None
    if isinstance(value, str) and value.strip().isdecimal():
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def complete_counts(counts: Mapping[str, int] | None) -> dict[str, int]:
    """Every canonical key present, missing ones defaulted to 0."""
    counts = counts or {}
    return {key: int(counts.get(key) or 0) for key in ACTIVITY_KEYS}


def to_camel_case(key: str) -> str:
    return _SNAKE_WORD_RE.sub(lambda m: m.group(1).upper(), key)


def _squash(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def resolve_exact(raw: Mapping[str, Any], key: str) -> Optional[int]:
    return coerce_count(raw.get(key))


def resolve_camel_case(raw: Mapping[str, Any], key: str) -> Optional[int]:
    return coerce_count(raw.get(to_camel_case(key)))


def resolve_case_insensitive(raw: Mapping[str, Any], key: str) -> Optional[int]:
    wanted = key.lower()
    for raw_key, value in raw.items():
        if isinstance(raw_key, str) and raw_key.lower() == wanted:
            return coerce_count(value)
    return None


def resolve_separator_insensitive(raw: Mapping[str, Any], key: str) -> Optional[int]:
    wanted = _squash(key)
    for raw_key, value in raw.items():
        if isinstance(raw_key, str) and _squash(raw_key) == wanted:
            return coerce_count(value)
    return None


RESOLVERS: tuple[Resolver, ...] = (
    resolve_exact,
    resolve_camel_case,
    resolve_case_insensitive,
    resolve_separator_insensitive,
)


def resolve_count(
    raw: Mapping[str, Any], key: str, resolvers: tuple[Resolver, ...] = RESOLVERS
) -> Optional[int]:
    for resolver in resolvers:
        value = resolver(raw, key)
        if value is not None:
            return value
    return None


def reconcile_counts(raw: Mapping[str, Any] | None) -> dict[str, int]:
    """Map a loaded activity record onto the canonical keys.

    Fields no resolver can match stay at 0.
    """
    if not raw:
        return complete_counts(None)
    counts: dict[str, int] = {}
    for key in ACTIVITY_KEYS:
        value = resolve_count(raw, key)
        counts[key] = value if value is not None else 0
    return counts
