"""
formatter.py - Valores compostos "campo:: valor"

Propósito:
    Converte os campos de um documento nas strings canônicas usadas ao mesmo
    tempo como sugestão exibida e como chave de deduplicação do índice.

Notas de implementação:
    - Valor de campo é normalizado para lista de escalares antes da
      formatação (flatten_field_values); itens None são descartados
    - Links de arquivo viram [[nome-base]] ou [[nome-base|rótulo]]; a
      conversão padrão repetiria o rótulo e o caminho completo
"""

from __future__ import annotations

from typing import Any, Mapping

from fieldsuggest_lsp.values import Link, stringify


def format_composite_value(field: str, value: Any) -> str:
    """Retorna '<campo>:: <texto do valor>'."""
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, (str, int, float)):
        text = stringify(value)
    elif isinstance(value, Link) and value.kind == "file":
        if value.display is not None:
            text = f"[[{value.basename}|{value.display}]]"
        else:
            text = f"[[{value.basename}]]"
    else:
        text = stringify(value)
    return f"{field}:: {text}"


def flatten_field_values(value: Any) -> list:
    """Normaliza o valor de um campo para lista de itens não-nulos."""
    if isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]
    return [item for item in items if item is not None]


def composite_values(fields: Mapping[str, Any], policy=None) -> dict[str, None]:
    """
    Valores compostos de um documento, sem repetição e na ordem de aparição.

    Args:
        fields: Mapeamento campo → valor ou lista de valores
        policy: FilterPolicy opcional; valores de campos ignorados são omitidos

    Returns:
        Dict usado como conjunto ordenado
    """
    values: dict[str, None] = {}
    for field, raw in fields.items():
        for item in flatten_field_values(raw):
            composite = format_composite_value(field, item)
            if policy is not None and not policy.is_field_allowed(composite):
                continue
            values.setdefault(composite, None)
    return values
