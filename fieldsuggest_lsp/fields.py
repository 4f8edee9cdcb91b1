"""
fields.py - Extração de campos de documentos Markdown

Propósito:
    Fonte de campos do índice: lista os documentos do workspace e extrai,
    de cada um, o mapeamento campo → valor(es).

Componentes principais:
    - extract_fields: texto Markdown → dict de campos
    - MarkdownFieldSource: list_documents / get_fields sobre um diretório

Notas de implementação:
    - Frontmatter YAML (entre '---') lido com yaml.safe_load
    - Campos inline: linha inteira 'chave:: valor' ou '[chave:: valor]' /
      '(chave:: valor)' em qualquer ponto da linha
    - Blocos de código cercados (``` ou ~~~) são ignorados
    - Chave repetida acumula os valores em lista
    - Documento não reconhecido (não .md, inexistente, ilegível) → None
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from fieldsuggest_lsp.values import parse_inline_value, parse_link

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".md",)

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_KEY = r"[^\[\]()*:\n]+?"
_LINE_FIELD_RE = re.compile(
    rf"^\s*(?:>\s*)*(?:[-*+]\s+|\d+[.)]\s+)?(?:\*\*|__)?(?P<key>{_KEY})(?:\*\*|__)?::\s*(?P<value>.*)$"
)
_BRACKET_FIELD_RE = re.compile(rf"\[(?P<key>{_KEY})::(?P<value>[^\[\]]*(?:\[\[[^\]]*\]\][^\[\]]*)*)\]")
_PAREN_FIELD_RE = re.compile(rf"\((?P<key>{_KEY})::(?P<value>[^()]*)\)")


def extract_fields(text: str) -> dict[str, Any]:
    """
    Extrai campos do frontmatter e campos inline de um documento.

    Returns:
        Dict campo → valor, ou campo → lista de valores quando repetido
    """
    fields: dict[str, Any] = {}

    body = text
    match = _FRONTMATTER_RE.match(text)
    if match:
        body = text[match.end():]
        for key, value in _parse_frontmatter(match.group(1)).items():
            _add_field(fields, key, value)

    in_fence = False
    for line in body.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        for key, raw in _inline_fields(line):
            _add_field(fields, key, parse_inline_value(raw))

    return fields


class MarkdownFieldSource:
    """Documentos Markdown sob um diretório raiz, endereçados por caminho relativo."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def list_documents(self) -> list[str]:
        """Caminhos relativos (POSIX) de todos os documentos do workspace."""
        if not self.root.is_dir():
            logger.warning(f"Workspace root não existe: {self.root}")
            return []

        paths = []
        for suffix in DOCUMENT_SUFFIXES:
            for file_path in self.root.rglob(f"*{suffix}"):
                rel = file_path.relative_to(self.root)
                if any(part.startswith(".") for part in rel.parts[:-1]):
                    continue
                if file_path.is_file():
                    paths.append(rel.as_posix())
        return sorted(paths)

    def get_fields(self, path: str) -> Optional[dict[str, Any]]:
        """Campos do documento, ou None se não for um documento reconhecido."""
        if not path.lower().endswith(DOCUMENT_SUFFIXES):
            return None
        file_path = self.root / path
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Documento ignorado {path}: {e}")
            return None
        return extract_fields(text)

    def relative_path(self, file_path: Path) -> Optional[str]:
        """Caminho relativo à raiz, ou None se estiver fora do workspace."""
        try:
            return Path(file_path).relative_to(self.root).as_posix()
        except ValueError:
            return None


def _parse_frontmatter(source: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        logger.debug(f"Frontmatter inválido ignorado: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(key): _frontmatter_value(value) for key, value in data.items()}


def _frontmatter_value(value: Any) -> Any:
    if isinstance(value, str):
        link = parse_link(value)
        return link if link is not None else value
    if isinstance(value, list):
        return [_frontmatter_value(item) for item in value]
    return value


def _inline_fields(line: str) -> list[tuple[str, str]]:
    found = []
    for regex in (_BRACKET_FIELD_RE, _PAREN_FIELD_RE):
        for match in regex.finditer(line):
            found.append((match.start(), match.group("key"), match.group("value")))
    if found:
        found.sort(key=lambda item: item[0])
        return [(key.strip(), value) for _, key, value in found if key.strip()]

    match = _LINE_FIELD_RE.match(line)
    if match and match.group("key").strip():
        return [(match.group("key").strip(), match.group("value"))]
    return []


def _add_field(fields: dict[str, Any], key: str, value: Any) -> None:
    if key not in fields:
        fields[key] = value
        return
    existing = fields[key]
    if not isinstance(existing, list):
        existing = [existing]
    if isinstance(value, list):
        existing.extend(value)
    else:
        existing.append(value)
    fields[key] = existing
