"""
Testes para fieldsuggest_lsp/trigger.py

Cobertura:
- Trechos entre parênteses e colchetes
- Trechos vazios "()" e "[]"
- Vários trechos na mesma linha
- Parênteses aninhados
- Links markdown e wiki links (nunca disparam)
- Entradas fora do intervalo
"""

import pytest

from fieldsuggest_lsp.trigger import TriggerSpan, resolve_trigger


class TestFilledSpan:
    """Trechos com texto entre os delimitadores."""

    def test_parentheses_mid_line(self):
        assert resolve_trigger("test (capture) testing", 6) == ("capture", 6, 13)

    def test_parentheses_line_start(self):
        assert resolve_trigger("(capture::Bob) testing", 1) == ("capture::Bob", 1, 13)

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("test string (person) testing", ("person", 13, 19)),
            ("test string (person:) testing", ("person:", 13, 20)),
            ("test string (person::) testing", ("person::", 13, 21)),
            ("test string (person::Bob) testing", ("person::Bob", 13, 24)),
            ("test string (person:: Bob) testing", ("person:: Bob", 13, 25)),
            ("test string (person::   Bob) testing", ("person::   Bob", 13, 27)),
        ],
    )
    def test_field_text_variants(self, line, expected):
        assert resolve_trigger(line, 16) == expected

    def test_cursor_at_span_edges(self):
        line = "test (capture) testing"
        assert resolve_trigger(line, 6) == ("capture", 6, 13)
        assert resolve_trigger(line, 13) == ("capture", 6, 13)
        assert resolve_trigger(line, 5) is None
        assert resolve_trigger(line, 14) is None

    def test_square_brackets(self):
        assert resolve_trigger("note [status:: do] end", 8) == ("status:: do", 6, 17)

    def test_span_at_end_of_line(self):
        assert resolve_trigger("texto [autor::", 8) is None
        assert resolve_trigger("texto [autor::]", 8) == ("autor::", 7, 14)

    def test_returns_named_tuple(self):
        span = resolve_trigger("(abc)", 2)
        assert isinstance(span, TriggerSpan)
        assert span.query == "abc"
        assert span.start == 1
        assert span.end == 4

    def test_opener_must_follow_whitespace(self):
        assert resolve_trigger("funcao(arg) texto", 8) is None


class TestEmptySpan:
    """Pares vazios disparam com query vazia."""

    def test_empty_parentheses(self):
        assert resolve_trigger("test string () testing", 13) == ("", 13, 13)

    def test_empty_at_line_start(self):
        assert resolve_trigger("() testing", 1) == ("", 1, 1)

    def test_empty_requires_exact_cursor(self):
        assert resolve_trigger("() testing", 0) is None
        assert resolve_trigger("() testing", 2) is None

    def test_empty_square_brackets(self):
        assert resolve_trigger("item [] fim", 6) == ("", 6, 6)

    def test_empty_after_word(self):
        line = "test() string () testing"
        assert resolve_trigger(line, 5) == ("", 5, 5)
        assert resolve_trigger(line, 15) == ("", 15, 15)
        assert resolve_trigger(line, 17) is None

    def test_empty_wiki_link(self):
        assert resolve_trigger("[[]]", 2) is None


class TestMultipleSpans:
    """Cada trecho é avaliado independentemente."""

    def test_second_span(self):
        line = "test (test) string (test2) testing"
        assert resolve_trigger(line, 21) == ("test2", 20, 25)

    def test_first_span(self):
        line = "test (test) string (test2) testing"
        assert resolve_trigger(line, 7) == ("test", 6, 10)

    def test_outside_spans(self):
        line = "test (test) string (test2) testing"
        assert resolve_trigger(line, 2) is None
        assert resolve_trigger(line, 15) is None

    def test_adjacent_spans(self):
        line = "(a:: 1)(b:: 2)"
        assert resolve_trigger(line, 2) == ("a:: 1", 1, 6)
        assert resolve_trigger(line, 10) == ("b:: 2", 8, 13)


class TestNesting:
    """Delimitadores aninhados e links internos."""

    def test_double_parentheses(self):
        assert resolve_trigger("((test))", 1) == ("(test)", 1, 7)

    def test_wiki_link_inside_parentheses(self):
        line = "(test [[note]])"
        assert resolve_trigger(line, 3) == ("test [[note]]", 1, 14)

    def test_markdown_link_inside_parentheses(self):
        line = "(ver [doc](https://example.com))"
        assert resolve_trigger(line, 2) == ("ver [doc](https://example.com)", 1, 31)

    def test_wiki_link_inside_brackets(self):
        line = "[autor:: [[Bob]]]"
        assert resolve_trigger(line, 3) == ("autor:: [[Bob]]", 1, 16)

    def test_markdown_link_inside_brackets(self):
        line = "[ver [doc](https://e.com)]"
        assert resolve_trigger(line, 2) == ("ver [doc](https://e.com)", 1, 25)


class TestLinks:
    """Links markdown e wiki links não são trechos."""

    def test_markdown_link_text(self):
        assert resolve_trigger("[test](https://example.com)", 3) is None

    def test_markdown_link_url(self):
        assert resolve_trigger("[test](https://example.com)", 10) is None

    def test_markdown_link_empty_text(self):
        line = "[](https://example.com)"
        assert resolve_trigger(line, 1) is None
        assert resolve_trigger(line, 5) is None

    def test_markdown_link_empty_url(self):
        line = "[texto]()"
        assert resolve_trigger(line, 3) is None
        assert resolve_trigger(line, 8) is None

    def test_wiki_link(self):
        assert resolve_trigger("[[note]]", 3) is None
        assert resolve_trigger("veja [[note]] aqui", 8) is None

    def test_reference_link(self):
        assert resolve_trigger("[texto][ref]", 2) is None

    def test_markdown_link_before_bracket_span(self):
        line = "[test](https://example.com) and [x]"
        assert resolve_trigger(line, 3) is None
        assert resolve_trigger(line, 33) == ("x", 33, 34)

    def test_unclosed_parenthesis_before_markdown_link(self):
        line = "see (foo [bar](https://e.com) baz"
        assert resolve_trigger(line, 18) is None
        assert resolve_trigger(line, 6) is None


class TestEdgeCases:
    """Entradas degeneradas nunca levantam exceção."""

    @pytest.mark.parametrize("line, cursor", [("", 0), ("abc", -1), ("(abc)", 99), ("(", 1), (")", 0)])
    def test_no_span(self, line, cursor):
        assert resolve_trigger(line, cursor) is None

    def test_unbalanced(self):
        assert resolve_trigger("(abc", 2) is None
        assert resolve_trigger("abc)", 2) is None
