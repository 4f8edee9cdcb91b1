"""
values.py - Modelo de valores de campos e conversão para texto

Propósito:
    Representa os valores extraídos de um documento (escalares, datas,
    links, listas, objetos) e fornece a representação textual padrão
    usada nas sugestões.

Componentes principais:
    - Link: referência a outro arquivo do vault ([[alvo|rótulo]])
    - type_of: nome do tipo de um valor
    - stringify: representação textual padrão
    - parse_link / parse_inline_value: texto de campo inline → valor tipado
"""

from __future__ import annotations

import datetime
import posixpath
import re
from dataclasses import dataclass
from typing import Any, Optional

_WIKI_LINK_RE = re.compile(r"^(!?)\[\[([^\[\]|]+?)(?:\|([^\[\]]*))?\]\]$")
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Link:
    """Link para um arquivo (ou cabeçalho/bloco) do mesmo vault."""

    path: str
    display: Optional[str] = None
    subpath: Optional[str] = None
    kind: str = "file"
    embed: bool = False

    @property
    def basename(self) -> str:
        """Nome do arquivo alvo sem diretório e sem extensão."""
        name = posixpath.basename(self.path)
        stem, _ext = posixpath.splitext(name)
        return stem or name


def type_of(value: Any) -> str:
    """Nome do tipo do valor: null, boolean, number, string, date, link, array, object."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return "date"
    if isinstance(value, Link):
        return "link"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def stringify(value: Any) -> str:
    """Representação textual padrão de um valor."""
    kind = type_of(value)
    if kind == "null":
        return "-"
    if kind == "boolean":
        return "true" if value else "false"
    if kind == "number":
        return _number_text(value)
    if kind == "string":
        return value
    if kind == "date":
        return value.isoformat()
    if kind == "link":
        return _link_text(value)
    if kind == "array":
        return ", ".join(stringify(item) for item in value)
    if isinstance(value, dict):
        inner = ", ".join(f"{key}: {stringify(item)}" for key, item in value.items())
        return f"{{ {inner} }}"
    return str(value)


def parse_link(text: str) -> Optional[Link]:
    """Converte '[[alvo#sub|rótulo]]' em Link; retorna None se não for um wiki link."""
    match = _WIKI_LINK_RE.match(text.strip())
    if not match:
        return None

    embed, target, display = match.groups()
    target = target.strip()
    subpath = None
    kind = "file"
    if "#" in target:
        target, subpath = target.split("#", 1)
        kind = "block" if subpath.startswith("^") else "header"
    if not target:
        return None

    path = target if posixpath.splitext(target)[1] else f"{target}.md"
    return Link(
        path=path,
        display=display.strip() if display else None,
        subpath=subpath,
        kind=kind,
        embed=bool(embed),
    )


def parse_inline_value(text: str) -> Any:
    """
    Converte o texto de um campo inline em valor tipado.

    Vazio → None, wiki link → Link, true/false → bool, números → int/float,
    demais → string sem espaços nas pontas.
    """
    text = text.strip()
    if not text:
        return None

    link = parse_link(text)
    if link is not None:
        return link

    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"

    if _NUMBER_RE.match(text):
        try:
            return int(text)
        except ValueError:
            return float(text)

    return text


def _number_text(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _link_text(link: Link) -> str:
    target = link.path
    if target.endswith(".md"):
        target = target[: -len(".md")]
    if link.subpath:
        target = f"{target}#{link.subpath}"
    display = link.display if link.display is not None else link.basename
    prefix = "!" if link.embed else ""
    return f"{prefix}[[{target}|{display}]]"
