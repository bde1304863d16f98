"""Tests for fragment assembly."""

from tabula_api.extraction.assembler import assemble

from conftest import fragment, rect


def test_no_fragments_gives_empty_table_for_region():
    region = rect(40)
    table = assemble([], page=2, rectangle=region)

    assert table.is_empty
    assert table.page == 2
    assert table.rectangle == region


def test_single_fragment_is_returned_as_is():
    only = fragment(1, ["a", "b"])
    assert assemble([only], page=1) is only


def test_fragments_merge_in_backend_order():
    fragments = [fragment(1, ["second"], top=50), fragment(1, ["first", "x"], top=0), fragment(1, ["third"], top=90)]

    table = assemble(fragments, page=1)

    assert table.to_list() == [["second", ""], ["first", "x"], ["third", ""]]
    assert assemble(fragments, page=1) == table
