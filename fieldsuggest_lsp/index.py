"""
index.py - Índice incremental de sugestões "campo:: valor"

Propósito:
    Mantém, para todo o workspace, o catálogo deduplicado de valores
    compostos e quantos documentos contribuem com cada um. Depois da
    construção inicial, eventos de um único documento (update, rename,
    delete) são aplicados sem reler o workspace.

Componentes principais:
    - SuggestionIndex: tabelas values / refcount / contributed

Invariantes (valem ao fim de toda operação):
    - values não tem repetições e contém exatamente os valores com refcount > 0
    - contributed[path] é o que uma extração nova do documento produziria
    - refcount[v] == número de documentos cujo contributed contém v

Notas de implementação:
    - values é um dict usado como conjunto ordenado (ordem da 1ª aparição),
      remoção O(1)
    - Todas as operações se reduzem a _acquire / _release sobre conjuntos
    - O novo conjunto de um documento é calculado antes de qualquer
      mutação; leitores nunca veem estado intermediário
    - Acesso de escrita é single-thread (event loop do servidor)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Optional

from fieldsuggest_lsp.filters import FilterPolicy
from fieldsuggest_lsp.formatter import composite_values

logger = logging.getLogger(__name__)

FieldsGetter = Callable[[str], Optional[Mapping[str, Any]]]


class SuggestionIndex:
    """
    Catálogo de valores compostos com contagem de referências por documento.

    Attributes:
        source: Fonte de campos com list_documents() e get_fields(path)
        policy: FilterPolicy com campos e caminhos ignorados
        ready: True depois da primeira build_full()
    """

    def __init__(self, source=None, policy: Optional[FilterPolicy] = None):
        self.source = source
        self.policy = policy or FilterPolicy()
        self.ready: bool = False
        self._values: dict[str, None] = {}
        self._refcount: dict[str, int] = {}
        self._contributed: dict[str, frozenset[str]] = {}

    # --- Leitura ---

    @property
    def values(self) -> tuple[str, ...]:
        """Snapshot imutável dos valores visíveis."""
        return tuple(self._values)

    @property
    def documents(self) -> tuple[str, ...]:
        return tuple(self._contributed)

    def refcount(self, value: str) -> int:
        return self._refcount.get(value, 0)

    def contributed(self, path: str) -> frozenset[str]:
        return self._contributed.get(path, frozenset())

    def stats(self) -> dict[str, int]:
        return {"documents": len(self._contributed), "values": len(self._values)}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, value) -> bool:
        return value in self._values

    # --- Construção completa ---

    def build_full(self) -> None:
        """Descarta o estado e reconstrói a partir de todos os documentos da fonte."""
        start = time.perf_counter()

        values: dict[str, None] = {}
        refcount: dict[str, int] = {}
        contributed: dict[str, frozenset[str]] = {}

        documents = self.source.list_documents() if self.source is not None else []
        for path in documents:
            if not self.policy.is_document_allowed(path):
                continue
            fields = self.source.get_fields(path)
            if fields is None:
                continue

            # composite_values já deduplica dentro do documento: +1 por documento
            page_values = composite_values(fields, self.policy)
            for value in page_values:
                if value in refcount:
                    refcount[value] += 1
                else:
                    refcount[value] = 1
                    values[value] = None
            contributed[path] = frozenset(page_values)

        self._values = values
        self._refcount = refcount
        self._contributed = contributed
        self.ready = True

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            f"Índice de sugestões reconstruído ({len(values)} valores, "
            f"{len(contributed)} documentos, {elapsed:.2f}ms)"
        )

    def set_policy(self, policy: FilterPolicy) -> None:
        """Troca os padrões de exclusão e reconstrói o índice."""
        self.policy = policy
        self.build_full()

    # --- Operações incrementais ---

    def apply_update(self, path: str, fields: Optional[Mapping[str, Any]]) -> None:
        """Documento criado ou modificado. fields=None: documento não reconhecido."""
        if not self.policy.is_document_allowed(path):
            return
        if fields is None:
            logger.debug(f"Documento não reconhecido, ignorado: {path}")
            return

        new = composite_values(fields, self.policy)
        old = self._contributed.get(path, frozenset())

        self._release(v for v in old if v not in new)
        self._acquire(v for v in new if v not in old)
        self._contributed[path] = frozenset(new)

    def apply_rename(self, old_path: str, new_path: str, get_fields: FieldsGetter) -> None:
        """Documento movido de old_path para new_path."""
        old_allowed = self.policy.is_document_allowed(old_path)
        new_allowed = self.policy.is_document_allowed(new_path)

        if old_allowed and new_allowed:
            if old_path not in self._contributed:
                self.apply_update(new_path, get_fields(new_path))
                return
            if new_path != old_path:
                # Destino já indexado é substituído pelo documento movido
                self.apply_delete(new_path)
            self._contributed[new_path] = self._contributed.pop(old_path)
        elif new_allowed:
            self.apply_update(new_path, get_fields(new_path))
        elif old_allowed:
            self.apply_delete(old_path)

    def apply_delete(self, path: str) -> None:
        """Remove as contribuições do documento."""
        old = self._contributed.pop(path, None)
        if old is None:
            return
        self._release(old)

    def apply_event(self, kind: str, path: str, old_path: Optional[str] = None) -> None:
        """
        Aplica um evento de documento vindo do editor.

        Args:
            kind: "update" (também criação), "rename" ou "delete"
            path: Caminho atual do documento
            old_path: Caminho anterior (apenas rename)
        """
        if not self.ready:
            logger.debug(f"Índice ainda não construído, evento ignorado: {kind} {path}")
            return

        if kind == "update":
            self.apply_update(path, self.source.get_fields(path))
        elif kind == "rename" and old_path is not None:
            self.apply_rename(old_path, path, self.source.get_fields)
        elif kind == "delete":
            self.apply_delete(path)
        else:
            logger.debug(f"Tipo de evento desconhecido: {kind} {path} {old_path}")

    # --- Primitivas de conjunto contado ---

    def _acquire(self, values: Iterable[str]) -> None:
        for value in values:
            count = self._refcount.get(value, 0)
            if count == 0:
                self._values[value] = None
            self._refcount[value] = count + 1

    def _release(self, values: Iterable[str]) -> None:
        for value in values:
            count = self._refcount.get(value, 0) - 1
            if count <= 0:
                self._refcount.pop(value, None)
                self._values.pop(value, None)
            else:
                self._refcount[value] = count
