"""
Testes para fieldsuggest_lsp/formatter.py

Cobertura:
- Escalares, links de arquivo com e sem rótulo, links de cabeçalho
- Normalização de valores em lista
- composite_values: deduplicação, ordem e filtro de campos
"""

import datetime

from fieldsuggest_lsp.filters import FilterPolicy
from fieldsuggest_lsp.formatter import (
    composite_values,
    flatten_field_values,
    format_composite_value,
)
from fieldsuggest_lsp.values import Link


class TestFormatCompositeValue:
    def test_string(self):
        assert format_composite_value("status", "done") == "status:: done"

    def test_number(self):
        assert format_composite_value("rating", 4) == "rating:: 4"

    def test_boolean(self):
        assert format_composite_value("draft", True) == "draft:: true"

    def test_file_link_uses_basename(self):
        link = Link("pessoas/Bob.md")
        assert format_composite_value("autor", link) == "autor:: [[Bob]]"

    def test_file_link_with_display(self):
        link = Link("pessoas/Bob.md", display="Roberto")
        assert format_composite_value("autor", link) == "autor:: [[Bob|Roberto]]"

    def test_header_link_uses_default(self):
        link = Link("nota.md", subpath="Intro", kind="header")
        assert format_composite_value("ref", link) == "ref:: [[nota#Intro|nota]]"

    def test_date_uses_default(self):
        assert format_composite_value("data", datetime.date(2024, 5, 6)) == "data:: 2024-05-06"


class TestFlatten:
    def test_scalar(self):
        assert flatten_field_values("a") == ["a"]

    def test_list(self):
        assert flatten_field_values(["a", "b"]) == ["a", "b"]

    def test_none_items_dropped(self):
        assert flatten_field_values([None, "a", None]) == ["a"]
        assert flatten_field_values(None) == []


class TestCompositeValues:
    def test_order_and_dedup(self):
        fields = {"tag": ["a", "b", "a"], "status": "done"}
        assert list(composite_values(fields)) == ["tag:: a", "tag:: b", "status:: done"]

    def test_policy_filters_fields(self):
        policy = FilterPolicy(ignored_fields=["created.*"])
        fields = {"created": "2024", "createdAt": "x", "status": "done"}
        assert list(composite_values(fields, policy)) == ["status:: done"]

    def test_empty(self):
        assert composite_values({}) == {}
