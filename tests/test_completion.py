"""
Testes para fieldsuggest_lsp/completion.py

Cobertura:
- Cursor dentro de trecho → sugestões do índice
- text_edit cobre o trecho inteiro
- Trecho vazio → primeiros valores
- Fora de trecho, sem índice, linha inexistente → lista vazia
"""

from types import SimpleNamespace

from lsprotocol.types import CompletionItemKind, Position

from fieldsuggest_lsp.completion import compute_completions
from fieldsuggest_lsp.matcher import FuzzyMatcher

VALUES = ("status:: done", "status:: open", "autor:: [[Bob]]")


def _index(values=VALUES):
    return SimpleNamespace(values=values)


class TestInsideSpan:
    def test_items_from_index(self):
        source = "Tarefa (stat) hoje\n"
        result = compute_completions(source, Position(line=0, character=10), _index())
        labels = [i.label for i in result.items]
        assert labels[:2] == ["status:: done", "status:: open"] or labels[:2] == [
            "status:: open",
            "status:: done",
        ]
        assert result.is_incomplete is True
        assert all(i.kind == CompletionItemKind.Property for i in result.items)

    def test_text_edit_replaces_span(self):
        source = "linha 1\nTarefa (autor) hoje"
        result = compute_completions(source, Position(line=1, character=9), _index())
        item = next(i for i in result.items if i.label == "autor:: [[Bob]]")
        assert item.text_edit.new_text == "autor:: [[Bob]]"
        assert item.text_edit.range.start == Position(line=1, character=8)
        assert item.text_edit.range.end == Position(line=1, character=13)
        assert item.filter_text == "autor"
        assert item.data["highlights"]

    def test_sort_text_follows_rank(self):
        source = "(status)"
        result = compute_completions(source, Position(line=0, character=3), _index())
        sort_texts = [i.sort_text for i in result.items]
        assert sort_texts == sorted(sort_texts)

    def test_empty_span(self):
        source = "Tarefa () hoje"
        matcher = FuzzyMatcher(max_suggestions=2)
        result = compute_completions(source, Position(line=0, character=8), _index(), matcher)
        assert [i.label for i in result.items] == ["status:: done", "status:: open"]
        assert result.items[0].text_edit.range.start == Position(line=0, character=8)
        assert result.items[0].text_edit.range.end == Position(line=0, character=8)

    def test_range_in_utf16_units_after_emoji(self):
        # "😀" ocupa duas unidades UTF-16: "(" está no offset 3, não 2
        source = "😀 (autor)"
        result = compute_completions(source, Position(line=0, character=5), _index())
        item = next(i for i in result.items if i.label == "autor:: [[Bob]]")
        assert item.filter_text == "autor"
        assert item.text_edit.range.start == Position(line=0, character=4)
        assert item.text_edit.range.end == Position(line=0, character=9)

    def test_cursor_after_emoji_outside_span(self):
        # Offset 3 é o "(", fora do texto capturado
        result = compute_completions("😀 (autor)", Position(line=0, character=3), _index())
        assert result.items == []


class TestNoSuggestions:
    def test_outside_span(self):
        result = compute_completions("Tarefa (stat) hoje", Position(line=0, character=2), _index())
        assert result.items == []

    def test_markdown_link(self):
        source = "[status](https://example.com)"
        result = compute_completions(source, Position(line=0, character=3), _index())
        assert result.items == []

    def test_no_index(self):
        result = compute_completions("(stat)", Position(line=0, character=2), None)
        assert result.items == []
        assert result.is_incomplete is False

    def test_line_out_of_range(self):
        result = compute_completions("(stat)", Position(line=5, character=0), _index())
        assert result.items == []

    def test_empty_index(self):
        result = compute_completions("(stat)", Position(line=0, character=2), _index(()))
        assert result.items == []
