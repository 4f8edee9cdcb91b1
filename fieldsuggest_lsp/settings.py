"""
settings.py - Configuração do servidor (seção "fieldSuggest")

Propósito:
    Converte initializationOptions / workspace/didChangeConfiguration em
    FieldSuggestSettings e valida os padrões de exclusão.

Exemplo (settings.json do cliente):
    "fieldSuggest": {
        "ignoredFields": ["created.*", "modified.*"],
        "ignoredFiles": ["templates/"],
        "maxSuggestions": 10,
        "minScore": 60
    }

Notas de implementação:
    - Listas de padrões aceitam lista ou texto com um padrão por linha
    - Padrões inválidos são reportados por invalid_patterns() e removidos
      por validated(); o índice só recebe padrões que compilam
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any

logger = logging.getLogger(__name__)

SECTION = "fieldSuggest"


@dataclass
class FieldSuggestSettings:
    ignored_fields: list[str] = field(default_factory=list)
    ignored_files: list[str] = field(default_factory=list)
    max_suggestions: int = 10
    min_score: float = 60.0

    @classmethod
    def from_dict(cls, data: Any) -> "FieldSuggestSettings":
        """Aceita a seção diretamente ou um dict que a contenha."""
        if not isinstance(data, dict):
            return cls()
        section = data.get(SECTION, data)
        if not isinstance(section, dict):
            return cls()

        defaults = cls()
        return cls(
            ignored_fields=_pattern_list(section.get("ignoredFields")),
            ignored_files=_pattern_list(section.get("ignoredFiles")),
            max_suggestions=_as_int(section.get("maxSuggestions"), defaults.max_suggestions),
            min_score=_as_float(section.get("minScore"), defaults.min_score),
        )

    def invalid_patterns(self) -> list[tuple[str, str]]:
        """Lista (padrão, erro) dos padrões que não compilam."""
        invalid = []
        # campos são compilados como "(padrão)::" pelo FilterPolicy
        candidates = [(p, f"({p})::") for p in self.ignored_fields]
        candidates += [(p, p) for p in self.ignored_files]
        for pattern, source in candidates:
            try:
                re.compile(source)
            except re.error as e:
                invalid.append((pattern, str(e)))
        return invalid

    def validated(self) -> "FieldSuggestSettings":
        """Cópia sem os padrões inválidos."""
        bad = {pattern for pattern, _ in self.invalid_patterns()}
        if not bad:
            return self
        for pattern in sorted(bad):
            logger.warning(f"Padrão de exclusão inválido ignorado: {pattern!r}")
        return replace(
            self,
            ignored_fields=[p for p in self.ignored_fields if p not in bad],
            ignored_files=[p for p in self.ignored_files if p not in bad],
        )

    def filters_changed(self, other: "FieldSuggestSettings") -> bool:
        return (
            self.ignored_fields != other.ignored_fields
            or self.ignored_files != other.ignored_files
        )


def _pattern_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split("\n")
    if not isinstance(value, (list, tuple)):
        return []
    patterns = [str(item).strip() for item in value if item is not None]
    return [p for p in patterns if p]


def _as_int(value, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _as_float(value, default: float) -> float:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default
