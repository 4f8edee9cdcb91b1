"""
matcher.py - Busca aproximada sobre os valores do índice

Propósito:
    Filtra, ordena e limita os valores compostos para o texto digitado
    dentro do trecho, com os intervalos casados para destaque.

Notas de implementação:
    - rapidfuzz partial_ratio, sem diferenciar maiúsculas/minúsculas
    - Query vazia devolve os primeiros valores do índice, sem destaque
    - Empate de pontuação: valor mais curto primeiro, depois ordem do índice
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from rapidfuzz import fuzz, process

MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"


@dataclass
class Match:
    value: str
    score: float
    highlights: list[tuple[int, int]] = field(default_factory=list)


class FuzzyMatcher:
    """Busca aproximada com limite de resultados e pontuação mínima (0-100)."""

    def __init__(self, max_suggestions: int = 10, min_score: float = 60.0):
        self.max_suggestions = max_suggestions
        self.min_score = min_score

    def search(self, values: Sequence[str], query: str) -> list[Match]:
        if self.max_suggestions <= 0:
            return []
        if not query:
            return [Match(value, 100.0) for value in values[: self.max_suggestions]]

        results = process.extract(
            query,
            values,
            scorer=fuzz.partial_ratio,
            processor=str.lower,
            limit=None,
            score_cutoff=self.min_score,
        )
        results.sort(key=lambda r: (-r[1], len(r[0]), r[2]))

        matches = []
        for value, score, _idx in results[: self.max_suggestions]:
            matches.append(Match(value, score, _highlight_ranges(query, value)))
        return matches


def _highlight_ranges(query: str, value: str) -> list[tuple[int, int]]:
    alignment = fuzz.partial_ratio_alignment(query.lower(), value.lower())
    if alignment is None:
        return []
    start = min(alignment.dest_start, len(value))
    end = min(alignment.dest_end, len(value))
    if end <= start:
        return []
    return [(start, end)]


def highlight(value: str, ranges: Sequence[tuple[int, int]]) -> str:
    """Envolve os intervalos casados com <mark>...</mark>."""
    parts = []
    last = 0
    for start, end in sorted(ranges):
        if start < last:
            continue
        parts.append(value[last:start])
        parts.append(f"{MARK_OPEN}{value[start:end]}{MARK_CLOSE}")
        last = end
    parts.append(value[last:])
    return "".join(parts)
