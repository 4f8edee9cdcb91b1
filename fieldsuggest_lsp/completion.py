"""
completion.py - Autocomplete de campos inline "campo:: valor"

Propósito:
    Quando o cursor está dentro de um trecho "(...)" ou "[...]" da linha,
    sugere os valores compostos do índice que casam com o texto do trecho.

Notas de implementação:
    - Trecho detectado por trigger.resolve_trigger
    - Sem trecho ou sem índice, retorna lista vazia
    - text_edit substitui o conteúdo do trecho inteiro pelo valor escolhido
    - filter_text = query, para o cliente não descartar resultados aproximados
    - is_incomplete=True: o cliente consulta de novo a cada tecla
    - data["highlights"]: intervalos casados no label
    - Posições LSP contam unidades UTF-16; o trecho é resolvido sobre
      índices de caractere Python e convertido de volta
"""

from __future__ import annotations

import logging
from typing import Optional

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    Position,
    Range,
    TextEdit,
)

from fieldsuggest_lsp.matcher import FuzzyMatcher, highlight
from fieldsuggest_lsp.trigger import resolve_trigger

logger = logging.getLogger(__name__)


def compute_completions(
    source: str,
    position: Position,
    index,
    matcher: Optional[FuzzyMatcher] = None,
) -> CompletionList:
    """
    Computa lista de completamento.

    Args:
        source: Texto-fonte do documento
        position: Posição do cursor (0-based)
        index: SuggestionIndex (ou None se ainda não construído)
        matcher: FuzzyMatcher; padrão com 10 sugestões

    Returns:
        CompletionList com os valores que casam com o trecho sob o cursor
    """
    if index is None:
        return CompletionList(is_incomplete=False, items=[])

    lines = source.splitlines()
    line = lines[position.line] if position.line < len(lines) else ""

    span = resolve_trigger(line, _utf16_to_index(line, position.character))
    if span is None:
        return CompletionList(is_incomplete=False, items=[])

    matcher = matcher or FuzzyMatcher()
    matches = matcher.search(index.values, span.query)
    logger.debug(f"{len(matches)} sugestões para {span.query!r}")

    edit_range = Range(
        start=Position(line=position.line, character=_index_to_utf16(line, span.start)),
        end=Position(line=position.line, character=_index_to_utf16(line, span.end)),
    )
    items: list[CompletionItem] = []
    for rank, match in enumerate(matches):
        items.append(
            CompletionItem(
                label=match.value,
                kind=CompletionItemKind.Property,
                detail=highlight(match.value, match.highlights) if match.highlights else None,
                filter_text=span.query,
                sort_text=f"{rank:04d}",
                text_edit=TextEdit(range=edit_range, new_text=match.value),
                data={"highlights": [list(r) for r in match.highlights]},
            )
        )

    return CompletionList(is_incomplete=True, items=items)


def _utf16_to_index(line: str, character: int) -> int:
    """Offset UTF-16 do LSP → índice de caractere na linha."""
    units = 0
    for i, ch in enumerate(line):
        if units >= character:
            return i
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(line) + max(character - units, 0)


def _index_to_utf16(line: str, index: int) -> int:
    """Índice de caractere na linha → offset UTF-16 do LSP."""
    return index + sum(1 for ch in line[:index] if ord(ch) > 0xFFFF)
