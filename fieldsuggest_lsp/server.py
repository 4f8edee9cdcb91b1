"""
server.py - Servidor LSP de sugestões de campos inline usando pygls

Propósito:
    Language Server que sugere valores "campo:: valor" já usados no
    workspace enquanto o usuário digita dentro de "(...)" ou "[...]".

Componentes principais:
    - FieldSuggestLanguageServer: servidor com índice, matcher e configuração
    - Event handlers: didSave, didChangeWatchedFiles, didRenameFiles,
      didChangeConfiguration
    - completion: resolve o trecho sob o cursor e consulta o índice
    - Comandos: fieldSuggest/rebuildIndex, fieldSuggest/getIndexStats,
      fieldSuggest/getSuggestions

Exemplo de uso:
    python -m fieldsuggest_lsp.server

Notas de implementação:
    - Comunica via STDIO
    - Índice construído uma vez em initialized; depois, apenas eventos de
      documento individuais
    - Mudança em ignoredFields/ignoredFiles reconstrói o índice inteiro
    - Tratamento robusto de exceções (nunca crasha)
"""

from __future__ import annotations

import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from lsprotocol.types import (
    INITIALIZE,
    INITIALIZED,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_SAVE,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    WORKSPACE_DID_CHANGE_WATCHED_FILES,
    WORKSPACE_DID_RENAME_FILES,
    CompletionOptions,
    CompletionParams,
    DidChangeConfigurationParams,
    DidChangeWatchedFilesParams,
    DidChangeWatchedFilesRegistrationOptions,
    DidSaveTextDocumentParams,
    FileChangeType,
    FileOperationFilter,
    FileOperationPattern,
    FileOperationRegistrationOptions,
    FileSystemWatcher,
    InitializedParams,
    InitializeParams,
    MessageType,
    Registration,
    RegistrationParams,
    RenameFilesParams,
)
from pygls.server import LanguageServer

from fieldsuggest_lsp import __version__
from fieldsuggest_lsp.completion import compute_completions
from fieldsuggest_lsp.fields import MarkdownFieldSource
from fieldsuggest_lsp.filters import FilterPolicy
from fieldsuggest_lsp.index import SuggestionIndex
from fieldsuggest_lsp.matcher import FuzzyMatcher
from fieldsuggest_lsp.settings import SECTION, FieldSuggestSettings

# Configuração de logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DOCUMENT_GLOB = "**/*.md"


class FieldSuggestLanguageServer(LanguageServer):
    """
    Servidor LSP de sugestões de campos inline.

    Attributes:
        settings: Configuração atual (seção fieldSuggest), já validada
        index: SuggestionIndex do workspace
        matcher: FuzzyMatcher usado nas consultas de completion
        source: MarkdownFieldSource da raiz do workspace (None até initialized)
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings: FieldSuggestSettings = FieldSuggestSettings()
        self.index: SuggestionIndex = SuggestionIndex()
        self.matcher: FuzzyMatcher = FuzzyMatcher()
        self.source: Optional[MarkdownFieldSource] = None


# Instância global do servidor
server = FieldSuggestLanguageServer("fieldsuggest-lsp", f"v{__version__}")


def _normalize_workspace_path(workspace_root) -> Optional[Path]:
    """
    Normaliza workspace_root para Path, aceitando path ou file URI.

    Mantém o caminho sem resolve() para evitar dependência do filesystem.
    """
    if not workspace_root:
        return None

    if isinstance(workspace_root, Path):
        return workspace_root

    if not isinstance(workspace_root, str):
        return None

    if workspace_root.startswith("file://"):
        parsed = urlparse(workspace_root)
        path_str = unquote(parsed.path or "")

        # UNC paths: file://server/share/path -> //server/share/path
        if parsed.netloc:
            path_str = f"//{parsed.netloc}{path_str}"

        # Windows drive: /d:/path -> d:/path
        if len(path_str) >= 3 and path_str[0] == "/" and path_str[2] == ":":
            path_str = path_str[1:]

        return Path(path_str)

    return Path(workspace_root)


def _resolve_workspace_root(ls: FieldSuggestLanguageServer) -> Optional[Path]:
    """Primeira workspace folder do cliente; senão, rootUri/rootPath."""
    workspace = getattr(ls, "workspace", None)
    if workspace is None:
        return None

    folders = getattr(workspace, "folders", None)
    if folders:
        first_folder = next(iter(folders.values()), None)
        if first_folder:
            return _normalize_workspace_path(first_folder.uri)

    return _normalize_workspace_path(
        getattr(workspace, "root_uri", None) or getattr(workspace, "root_path", None)
    )


def _document_path(ls: FieldSuggestLanguageServer, uri: str) -> Optional[str]:
    """URI do documento → caminho relativo usado como chave no índice."""
    if ls.source is None:
        return None
    file_path = _normalize_workspace_path(uri)
    if file_path is None:
        return None
    return ls.source.relative_path(file_path)


def _apply_settings(ls: FieldSuggestLanguageServer, settings: FieldSuggestSettings) -> bool:
    """
    Aplica nova configuração; retorna True se o índice precisa ser reconstruído.

    Padrões inválidos são reportados ao cliente e descartados.
    """
    invalid = settings.invalid_patterns()
    if invalid:
        details = "; ".join(f"{pattern!r}: {error}" for pattern, error in invalid)
        try:
            ls.show_message(
                f"fieldSuggest: padrões de exclusão inválidos ignorados ({details})",
                MessageType.Warning,
            )
        except Exception as e:
            logger.warning(f"Falha ao notificar padrões inválidos: {e}")
    settings = settings.validated()

    rebuild = settings.filters_changed(ls.settings)
    ls.settings = settings
    ls.matcher = FuzzyMatcher(settings.max_suggestions, settings.min_score)
    ls.index.policy = FilterPolicy.from_settings(settings)
    return rebuild


def _rebuild_index(ls: FieldSuggestLanguageServer) -> dict:
    ls.index.source = ls.source
    ls.index.set_policy(FilterPolicy.from_settings(ls.settings))
    return ls.index.stats()


def _index_event(
    ls: FieldSuggestLanguageServer, kind: str, uri: str, old_uri: Optional[str] = None
) -> None:
    """Encaminha um evento de documento ao índice, se o arquivo estiver no workspace."""
    path = _document_path(ls, uri)
    old_path = _document_path(ls, old_uri) if old_uri is not None else None

    if path is None:
        if old_path is not None:
            # Saiu do workspace: equivale a remoção
            logger.debug(f"Movido para fora do workspace: {old_path}")
            ls.index.apply_event("delete", old_path)
        else:
            logger.debug(f"Fora do workspace, ignorado: {uri}")
        return

    if old_uri is not None and old_path is None:
        # Veio de fora do workspace: equivale a criação
        kind = "update"

    logger.debug(f"Evento de índice: {kind} {path}")
    ls.index.apply_event(kind, path, old_path)


@server.feature(INITIALIZE)
def initialize(ls: FieldSuggestLanguageServer, params: InitializeParams) -> None:
    """Lê a configuração inicial de initializationOptions."""
    options = getattr(params, "initialization_options", None)
    if options:
        _apply_settings(ls, FieldSuggestSettings.from_dict(options))
        logger.info(f"Configuração inicial: {ls.settings}")


@server.feature(INITIALIZED)
def initialized(ls: FieldSuggestLanguageServer, params: InitializedParams) -> None:
    """
    Constrói o índice a partir de todos os documentos do workspace.

    Também registra o watcher de arquivos Markdown no cliente.
    """
    root = _resolve_workspace_root(ls)
    if root is None:
        logger.warning("Workspace root não encontrado; índice ficará vazio")
    else:
        ls.source = MarkdownFieldSource(root)
        logger.info(f"Workspace: {root}")

    try:
        _rebuild_index(ls)
    except Exception as e:
        logger.error(f"Falha ao construir índice: {e}", exc_info=True)

    try:
        ls.register_capability(
            RegistrationParams(
                registrations=[
                    Registration(
                        id="fieldsuggest-watch-markdown",
                        method=WORKSPACE_DID_CHANGE_WATCHED_FILES,
                        register_options=DidChangeWatchedFilesRegistrationOptions(
                            watchers=[FileSystemWatcher(glob_pattern=DOCUMENT_GLOB)]
                        ),
                    )
                ]
            )
        )
    except Exception as e:
        logger.warning(f"Cliente não aceitou registro de watcher: {e}")


@server.feature(
    TEXT_DOCUMENT_COMPLETION,
    CompletionOptions(trigger_characters=["(", "[", ":"]),
)
def completion(ls: FieldSuggestLanguageServer, params: CompletionParams):
    """
    Autocomplete de "campo:: valor" dentro de (...) ou [...].

    Retorna lista vazia fora de um trecho ou antes do índice ficar pronto.
    """
    uri = params.text_document.uri
    doc = ls.workspace.get_text_document(uri)
    index = ls.index if ls.index.ready else None
    return compute_completions(doc.source, params.position, index, ls.matcher)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: FieldSuggestLanguageServer, params: DidSaveTextDocumentParams) -> None:
    """Documento salvo: reextrai seus campos."""
    uri = params.text_document.uri
    logger.info(f"Documento salvo: {uri}")
    try:
        _index_event(ls, "update", uri)
    except Exception as e:
        logger.error(f"Erro ao atualizar índice para {uri}: {e}", exc_info=True)


@server.feature(WORKSPACE_DID_CHANGE_WATCHED_FILES)
def did_change_watched_files(
    ls: FieldSuggestLanguageServer, params: DidChangeWatchedFilesParams
) -> None:
    """
    Handler para arquivos Markdown criados, modificados ou removidos.

    Created/Changed → update, Deleted → delete.
    """
    for change in params.changes:
        uri = change.uri
        logger.info(f"Arquivo monitorado mudou: {uri} (tipo: {change.type.name})")

        if change.type == FileChangeType.Deleted:
            kind = "delete"
        else:
            kind = "update"

        try:
            _index_event(ls, kind, uri)
        except Exception as e:
            logger.error(f"Erro ao atualizar índice para {uri}: {e}", exc_info=True)


@server.feature(
    WORKSPACE_DID_RENAME_FILES,
    FileOperationRegistrationOptions(
        filters=[FileOperationFilter(pattern=FileOperationPattern(glob=DOCUMENT_GLOB))]
    ),
)
def did_rename_files(ls: FieldSuggestLanguageServer, params: RenameFilesParams) -> None:
    """Arquivos renomeados/movidos no editor."""
    for file_rename in params.files:
        logger.info(f"Arquivo renomeado: {file_rename.old_uri} -> {file_rename.new_uri}")
        try:
            _index_event(ls, "rename", file_rename.new_uri, file_rename.old_uri)
        except Exception as e:
            logger.error(
                f"Erro ao renomear no índice {file_rename.old_uri}: {e}", exc_info=True
            )


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: FieldSuggestLanguageServer, params: DidChangeConfigurationParams
) -> None:
    """
    Handler para mudanças na configuração do workspace.

    Reconstrói o índice apenas se ignoredFields ou ignoredFiles mudaram.
    """
    try:
        if not isinstance(params.settings, dict):
            logger.debug(f"Configuração sem seção {SECTION}, ignorada")
            return
        settings = FieldSuggestSettings.from_dict(params.settings)
        rebuild = _apply_settings(ls, settings)
        logger.info(f"Configuração atualizada: {ls.settings}")

        if rebuild and ls.index.ready:
            logger.info("Padrões de exclusão mudaram, reconstruindo índice")
            _rebuild_index(ls)
    except Exception as e:
        logger.error(f"Erro ao processar mudança de configuração: {e}", exc_info=True)


@server.command("fieldSuggest/rebuildIndex")
def cmd_rebuild_index(ls: FieldSuggestLanguageServer, params) -> dict:
    """Reconstrói o índice e retorna estatísticas."""
    try:
        return {"success": True, "stats": _rebuild_index(ls)}
    except Exception as e:
        logger.error(f"rebuildIndex falhou: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@server.command("fieldSuggest/getIndexStats")
def cmd_get_index_stats(ls: FieldSuggestLanguageServer, params) -> dict:
    """Retorna número de documentos e valores no índice."""
    if not ls.index.ready:
        return {"success": False, "error": "Índice ainda não construído"}
    return {"success": True, "stats": ls.index.stats()}


@server.command("fieldSuggest/getSuggestions")
def cmd_get_suggestions(ls: FieldSuggestLanguageServer, params) -> dict:
    """Busca direta no índice: params {"query": "..."}."""
    if not ls.index.ready:
        return {"success": False, "error": "Índice ainda não construído"}

    query = ""
    if isinstance(params, dict):
        query = params.get("query", "")
    elif isinstance(params, list) and len(params) > 0:
        first = params[0]
        if isinstance(first, dict):
            query = first.get("query", "")
        elif isinstance(first, str):
            query = first

    matches = ls.matcher.search(ls.index.values, str(query or ""))
    return {
        "success": True,
        "suggestions": [
            {"value": m.value, "score": m.score, "highlights": [list(r) for r in m.highlights]}
            for m in matches
        ],
    }


def main() -> None:
    """
    Ponto de entrada principal do servidor.

    Inicia servidor LSP em modo STDIO.
    """
    logger.info("Iniciando fieldsuggest Language Server...")
    logger.info("Python executable: %s", sys.executable)
    try:
        logger.info("fieldsuggest-lsp package: %s", metadata.version("fieldsuggest-lsp"))
    except metadata.PackageNotFoundError:
        logger.info("fieldsuggest-lsp package: %s (não instalado)", __version__)
    server.start_io()


if __name__ == "__main__":
    main()
