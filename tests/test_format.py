"""Tests for category body encoding and decoding."""

from __future__ import annotations

from memkeep.memory.format import (
    UNTAGGED,
    MemoryEntry,
    decode_grouped,
    encode_entry,
    flatten,
    join_blocks,
    parse_block,
    remove_matching,
    split_blocks,
)


class TestEncode:
    def test_untagged(self):
        assert encode_entry("hello") == "hello\n\n"

    def test_tagged(self):
        assert encode_entry("hello", ["a", "b"]) == "# a b\nhello\n\n"


class TestDecode:
    def test_tagged_round_trip(self):
        grouped = decode_grouped(encode_entry("hello", ["a", "b"]))
        assert grouped == {"a b": ["hello"]}

    def test_mixed_body(self):
        body = encode_entry("one", ["x"]) + encode_entry("two") + encode_entry("three", ["x"])
        assert decode_grouped(body) == {"x": ["one", "three"], UNTAGGED: ["two"]}

    def test_blank_lines_dropped(self):
        assert decode_grouped("a\n \nb\n\n") == {UNTAGGED: ["a", "b"]}

    def test_empty_body(self):
        assert decode_grouped("") == {}
        assert decode_grouped("\n\n\n\n") == {}

    def test_header_outer_whitespace_stripped(self):
        assert decode_grouped("#  a   b \nbody\n\n") == {"a   b": ["body"]}

    def test_tag_with_space_keeps_key(self):
        assert parse_block("# dev tools\nuse uv") == MemoryEntry(data="use uv", tags=["dev", "tools"])
        assert decode_grouped(encode_entry("use uv", ["dev tools"])) == {"dev tools": ["use uv"]}

    def test_parse_block(self):
        assert parse_block("# t1 t2\nline") == MemoryEntry(data="line", tags=["t1", "t2"])
        assert parse_block("plain") == MemoryEntry(data="plain")
        assert parse_block("   ") is None

    def test_group_key(self):
        assert MemoryEntry("d", ["a", "b"]).group_key == "a b"
        assert MemoryEntry("d").group_key == UNTAGGED


class TestBlocks:
    def test_split_join_round_trip(self):
        body = encode_entry("one", ["x"]) + encode_entry("two")
        assert join_blocks(split_blocks(body)) == body

    def test_flatten_keeps_group_order(self):
        assert flatten({"b": ["1", "2"], "a": ["3"]}) == ["1", "2", "3"]

    def test_remove_matching(self):
        body = encode_entry("keep") + encode_entry("drop this") + encode_entry("also keep")
        assert remove_matching(body, "drop") == "keep\n\nalso keep\n\n"

    def test_remove_matching_no_hits(self):
        body = encode_entry("keep")
        assert remove_matching(body, "absent") == body
