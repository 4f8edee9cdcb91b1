"""
filters.py - Campos e documentos ignorados

Propósito:
    Avalia os padrões de exclusão configurados (expressões regulares).
    Alterar qualquer lista de padrões exige reconstruir o índice inteiro.
"""

from __future__ import annotations

import re
from typing import Iterable


class FilterPolicy:
    """Padrões de campos e caminhos ignorados, já compilados."""

    def __init__(self, ignored_fields: Iterable[str] = (), ignored_files: Iterable[str] = ()):
        self.ignored_fields: tuple[str, ...] = tuple(ignored_fields)
        self.ignored_files: tuple[str, ...] = tuple(ignored_files)
        self._field_patterns = [re.compile(f"({p})::") for p in self.ignored_fields]
        self._file_patterns = [re.compile(p) for p in self.ignored_files]

    @classmethod
    def from_settings(cls, settings) -> "FilterPolicy":
        return cls(settings.ignored_fields, settings.ignored_files)

    def is_field_allowed(self, composite_value: str) -> bool:
        """False se o nome do campo casar com algum padrão ignorado (ancorado no início)."""
        return not any(p.match(composite_value) for p in self._field_patterns)

    def is_document_allowed(self, path: str) -> bool:
        """False se o caminho casar (parcialmente) com algum padrão ignorado."""
        return not any(p.search(path) for p in self._file_patterns)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FilterPolicy):
            return NotImplemented
        return (
            self.ignored_fields == other.ignored_fields
            and self.ignored_files == other.ignored_files
        )

    def __repr__(self) -> str:
        return (
            f"FilterPolicy(ignored_fields={list(self.ignored_fields)!r}, "
            f"ignored_files={list(self.ignored_files)!r})"
        )
