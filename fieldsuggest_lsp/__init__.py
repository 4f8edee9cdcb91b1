"""
fieldsuggest_lsp - Language Server de autocomplete para campos inline

Propósito:
    Sugere valores "campo:: valor" já usados em documentos Markdown do
    workspace enquanto o usuário digita dentro de "(...)" ou "[...]".

Componentes principais:
    - trigger: detecção do trecho sob o cursor
    - index: índice incremental de valores compostos com contagem de referências
    - server: servidor principal usando pygls

Exemplo de uso:
    python -m fieldsuggest_lsp.server
"""
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path
import re


def _read_version_from_pyproject() -> str:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    try:
        text = pyproject.read_text(encoding="utf-8")
    except OSError:
        return "0.0.0"
    match = re.search(r'(?m)^version = "([^"]+)"\s*$', text)
    return match.group(1) if match else "0.0.0"


try:
    __version__ = _pkg_version("fieldsuggest-lsp")
except PackageNotFoundError:
    __version__ = _read_version_from_pyproject()

__all__ = ["server", "index", "trigger"]
