"""
trigger.py - Detecção do campo inline sob o cursor

Propósito:
    Dada uma linha e a posição do cursor, decide se o cursor está dentro de
    um trecho delimitado por parênteses ou colchetes simples que deve
    disparar sugestões de "campo:: valor".

Componentes principais:
    - TriggerSpan: (query, start, end) em offsets de caractere da linha
    - resolve_trigger: função pura linha + cursor → TriggerSpan | None

Notas de implementação:
    - Trechos vazios "()" / "[]" só disparam com o cursor exatamente após
      o delimitador de abertura
    - Trechos preenchidos exigem abertura no início da linha ou após espaço
      e fechamento no fim da linha ou antes de espaço
    - Links markdown [texto](url), links de referência [a][b] e wiki links
      [[nota]] nunca disparam
    - Um trecho pode conter delimitadores aninhados e links completos:
      "((teste))" captura "(teste)", "(ver [[nota]])" captura "ver [[nota]]"
    - Nenhuma exceção é levantada; ausência de trecho é None
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional


class TriggerSpan(NamedTuple):
    """Texto capturado e seus limites (sem os delimitadores)."""

    query: str
    start: int
    end: int


# "()" ou "[]". O "[" de "[[" e o "(" de "[texto]()" ficam de fora, assim
# como pares seguidos de "]" ou "(".
_EMPTY_RE = re.compile(
    r"(?:(?<!\[)\[\]|(?<!\])\(\))(?![\](])"
)

# Link markdown completo "[texto](url)", aceito inteiro dentro de um trecho.
_MD_LINK = r"\[[^\[\]]*\]\([^()]*\)"

# Abertura: início da linha, espaço ou ")" (trechos adjacentes "(a)(b)").
# ")" fecha no fim da linha ou antes de espaço, "(" ou "[".
# "]" fecha só no fim da linha ou antes de espaço: exclui "](" e "]]".
# Fora de um link completo, o conteúdo não atravessa "](" (meio de link
# markdown) nem, entre colchetes, "][" (link de referência).
_FILLED_RE = re.compile(
    rf"(?<![^\s)])\((?!\))(?P<paren>(?:{_MD_LINK}|(?!\]\().)+?)\)(?![^\s(\[])"
    r"|"
    rf"(?<![^\s)])\[(?![\[\]])(?P<bracket>(?:{_MD_LINK}|(?!\][\[(]).)+?)\](?!\S)"
)


def resolve_trigger(line: str, cursor: int) -> Optional[TriggerSpan]:
    """
    Retorna o trecho da linha que contém o cursor, ou None.

    Args:
        line: Texto de uma única linha
        cursor: Offset do cursor na linha (0-based)

    Returns:
        TriggerSpan com o texto entre os delimitadores e seus limites
    """
    if not line or cursor < 0 or cursor > len(line):
        return None

    for span in _iter_spans(line):
        if span.start <= cursor <= span.end:
            return span
    return None


def _iter_spans(line: str) -> list[TriggerSpan]:
    """Todos os trechos candidatos da linha, ordenados da esquerda p/ direita."""
    spans = [
        TriggerSpan("", match.end() - 1, match.end() - 1)
        for match in _EMPTY_RE.finditer(line)
    ]
    for match in _FILLED_RE.finditer(line):
        group = "paren" if match.group("paren") is not None else "bracket"
        spans.append(
            TriggerSpan(match.group(group), match.start(group), match.end(group))
        )
    spans.sort(key=lambda span: span.start)
    return spans
