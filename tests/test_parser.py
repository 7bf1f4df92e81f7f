"""
Tests for the streaming parser.
"""

import re

import pytest

from hother.markstream import (
    CodeLineStrategy,
    FragmentType,
    HashAlgorithm,
    ParserConfigurationError,
    StreamingParser,
    is_stable_key,
)
from hother.markstream.core.keys import stable_key


def keys(fragments):
    return [fragment.key for fragment in fragments]


class TestClassification:
    """Test end-to-end classification of common inputs."""

    def test_heading(self, parser):
        """Test a terminated heading is complete with a stable key."""
        parser.append_chunk("# Hello\n")
        (fragment,) = parser.finalize()
        assert fragment.type is FragmentType.HEADING
        assert fragment.data.level == 1
        assert fragment.data.content == "Hello"
        assert fragment.key.startswith("frag-")

    def test_heading_completes_without_finalize(self, parser):
        """Test a terminated heading is confirmed as soon as it is seen."""
        parser.append_chunk("## Title\n")
        (fragment,) = parser.get_fragments()
        assert fragment.is_complete
        assert fragment.key == stable_key("## Title")
        assert parser.is_complete()

    def test_image_split(self, parser):
        """Test images inside a paragraph become their own fragments."""
        parser.append_chunk("Text ![a](u.png) more\n\n")
        fragments = parser.finalize()
        assert [fragment.type for fragment in fragments] == [FragmentType.PARAGRAPH, FragmentType.IMAGE, FragmentType.PARAGRAPH]
        assert fragments[0].data.content == "Text "
        assert (fragments[1].data.alt, fragments[1].data.src) == ("a", "u.png")
        assert fragments[2].data.content == " more"

    def test_codeblock_streaming(self, parser):
        """Test a code block opens, records lines and completes on the closing fence."""
        parser.append_chunk("```js\nline1\n")
        (fragment,) = parser.get_fragments()
        assert fragment.type is FragmentType.CODEBLOCK
        assert not fragment.is_complete
        assert [(line.content, line.line_number, line.is_complete) for line in fragment.data.lines] == [("line1", 1, True)]

        parser.append_chunk("line2\n```\n")
        (fragment,) = parser.get_fragments()
        assert fragment.is_complete
        assert fragment.data.code == "line1\nline2"
        assert fragment.data.lang == "js"
        assert all(line.is_complete for line in fragment.data.lines)
        assert is_stable_key(fragment.key)

    def test_unterminated_fence_does_not_close(self, parser):
        """Test a trailing fence line may still be growing."""
        parser.append_chunk("```\ncode\n```")
        assert not parser.get_fragments()[0].is_complete
        parser.append_chunk("\n")
        assert parser.get_fragments()[0].is_complete

    def test_code_keeps_blank_lines(self, parser):
        """Test blank lines inside a code block are content."""
        parser.append_chunk("```\na\n\n\nb\n```\n")
        (fragment,) = parser.get_fragments()
        assert fragment.data.code == "a\n\n\nb"

    def test_mixed_document(self, parser):
        """Test a document with every block type."""
        parser.append_chunk("# Title\n\nSome prose\nwrapped.\n\n- one\n- [x] two\n\n> quoted\n\n---\n\n```py\nx = 1\n```\n")
        fragments = parser.finalize()
        assert [fragment.type for fragment in fragments] == [
            FragmentType.HEADING,
            FragmentType.PARAGRAPH,
            FragmentType.LIST,
            FragmentType.BLOCKQUOTE,
            FragmentType.THEMATIC_BREAK,
            FragmentType.CODEBLOCK,
        ]
        assert fragments[1].raw_content == "Some prose\nwrapped."
        assert [item.checked for item in fragments[2].data.items] == [None, True]
        assert fragments[3].data.content == "quoted"

    def test_blank_only_input(self, parser):
        """Test blank lines never start a fragment."""
        parser.append_chunk("\n\n  \n\t\n")
        assert parser.get_fragments() == ()
        assert parser.finalize() == ()

    def test_positions(self, parser):
        """Test positions use zero-based offsets and one-based lines."""
        parser.append_chunk("# Title\n\nParagraph\n\n")
        heading, paragraph = parser.get_fragments()
        assert (heading.position.start, heading.position.end, heading.position.line) == (0, 7, 1)
        assert (paragraph.position.start, paragraph.position.end, paragraph.position.line) == (9, 18, 3)


class TestKeyStability:
    """Test the key contract across appends."""

    def test_empty_chunk_is_noop(self, parser):
        """Test an empty chunk changes neither count nor keys."""
        parser.append_chunk("# Done\n\nopen para")
        before = parser.get_fragments()
        parser.append_chunk("")
        assert keys(parser.get_fragments()) == keys(before)

    def test_open_key_is_volatile(self, parser):
        """Test an open fragment's key changes when its content grows."""
        parser.append_chunk("Hel")
        first = parser.get_fragments()[0].key
        parser.append_chunk("lo")
        second = parser.get_fragments()[0].key
        assert first.startswith("temp-")
        assert second.startswith("temp-")
        assert first != second

    def test_growing_code_line_key_changes(self, parser):
        """Test the growing code line gets a new key on every append."""
        parser.append_chunk("```py\nab")
        before = parser.get_fragments()[0].data.lines[-1]
        parser.append_chunk("c")
        after = parser.get_fragments()[0].data.lines[-1]
        assert after.content == "abc"
        assert after.key != before.key

    def test_trailing_newline_keeps_open_fragment(self, parser):
        """Test a newline that does not change raw content keeps the same fragment."""
        parser.append_chunk("Para")
        before = parser.get_fragments()[0]
        parser.append_chunk("\n")
        after = parser.get_fragments()[0]
        assert after.key == before.key
        assert after.meta.update_count == before.meta.update_count

    def test_update_count_grows(self, parser):
        """Test each mutation of the open fragment is counted."""
        parser.append_chunk("a")
        parser.append_chunk("b")
        parser.append_chunk("c")
        assert parser.get_fragments()[0].meta.update_count == 2

    def test_stable_keys_never_change(self, parser):
        """Test confirmed keys survive every later append."""
        text = "# Head\n\nfirst para\n\n```\ncode\n```\n\nlast"
        seen: dict[int, str] = {}
        for char in text:
            parser.append_chunk(char)
            for index, fragment in enumerate(parser.get_fragments()):
                if fragment.is_complete:
                    assert seen.setdefault(index, fragment.key) == fragment.key

    def test_deterministic_across_instances(self):
        """Test identical input yields identical stable keys."""
        text = "# A\n\nSome ![i](x.png) text\n\n- item\n"
        first = StreamingParser()
        second = StreamingParser()
        first.append_chunk(text)
        for char in text:
            second.append_chunk(char)
        assert keys(first.finalize()) == keys(second.finalize())

    def test_reclassification(self, parser):
        """Test a tentative list becomes a thematic break."""
        parser.append_chunk("-")
        parser.append_chunk("--")
        (fragment,) = parser.get_fragments()
        assert fragment.type is FragmentType.THEMATIC_BREAK
        assert not fragment.is_complete
        parser.append_chunk("\n")
        (fragment,) = parser.get_fragments()
        assert fragment.is_complete
        assert fragment.data.marker == "-"


class TestLifecycle:
    """Test reset and finalize."""

    def test_reset(self, parser):
        """Test reset clears everything."""
        parser.append_chunk("# A\n\nsome text")
        parser.reset()
        assert parser.get_fragments() == ()
        assert parser.buffer_length == 0
        assert parser.is_complete()

    def test_finalize_completes_open_fragment(self, parser):
        """Test finalize stabilizes the open fragment."""
        parser.append_chunk("Unfinished paragraph")
        assert not parser.is_complete()
        (fragment,) = parser.finalize()
        assert fragment.is_complete
        assert fragment.key == stable_key("Unfinished paragraph")
        assert parser.is_complete()

    def test_finalize_open_codeblock(self, parser):
        """Test a code block without closing fence is completed by finalize."""
        parser.append_chunk("```py\nprint(1)\n")
        (fragment,) = parser.finalize()
        assert fragment.is_complete
        assert fragment.data.code == "print(1)"
        assert all(line.is_complete for line in fragment.data.lines)

    def test_finalize_is_idempotent(self, parser):
        """Test finalize twice returns equal snapshots."""
        parser.append_chunk("Para ![i](p.png)")
        assert parser.finalize() == parser.finalize()

    def test_append_after_finalize(self, parser):
        """Test text after finalize starts a new fragment."""
        parser.append_chunk("First line")
        (first,) = parser.finalize()
        parser.append_chunk(" more")
        fragments = parser.get_fragments()
        assert fragments[0] == first
        assert fragments[1].raw_content == " more"
        assert (fragments[1].position.start, fragments[1].position.line, fragments[1].position.column) == (10, 1, 11)
        assert not fragments[1].is_complete

    def test_snapshot_is_a_copy(self, parser):
        """Test callers cannot corrupt parser state through a snapshot."""
        parser.append_chunk("# Head\n")
        snapshot = parser.get_fragments()
        snapshot[0].raw_content = "tampered"
        assert parser.get_fragments()[0].raw_content == "# Head"

    def test_rejects_non_text(self, parser):
        """Test non-string chunks raise TypeError."""
        with pytest.raises(TypeError):
            parser.append_chunk(b"bytes")


class TestOptions:
    """Test parser configuration."""

    def test_defaults(self, parser):
        assert parser.options.hash_algorithm is HashAlgorithm.MURMUR3
        assert parser.options.incomplete_code_strategy is CodeLineStrategy.LINE

    def test_djb2(self):
        """Test the alternate hash changes keys but not structure."""
        default = StreamingParser()
        alternate = StreamingParser(hash_algorithm="djb2")
        for parser in (default, alternate):
            parser.append_chunk("# Same\n")
        assert default.get_fragments()[0].key != alternate.get_fragments()[0].key
        assert alternate.get_fragments()[0].key == stable_key("# Same", "djb2")

    def test_camel_case_mapping(self):
        """Test options accept wire-format names."""
        parser = StreamingParser({"incompleteCodeStrategy": "none", "hashAlgorithm": "djb2"})
        assert parser.options.incomplete_code_strategy is CodeLineStrategy.NONE

    def test_char_strategy(self):
        """Test the char strategy exposes the partial line without records."""
        parser = StreamingParser(incomplete_code_strategy="char")
        parser.append_chunk("```\nfirst\nsec")
        data = parser.get_fragments()[0].data
        assert data.code == "first\nsec"
        assert data.lines is None

    @pytest.mark.parametrize(
        "options",
        [
            {"hash_algorithm": "sha1"},
            {"incomplete_code_strategy": "word"},
            {"unknown": True},
        ],
    )
    def test_invalid_options(self, options):
        """Test invalid options raise a configuration error."""
        with pytest.raises(ParserConfigurationError) as exc_info:
            StreamingParser(options)
        assert exc_info.value.options == options
        assert isinstance(exc_info.value, ValueError)

    def test_temp_key_format(self, parser):
        parser.append_chunk("# Title\n\nbody")
        assert re.fullmatch(r"temp-1-4-\d+", parser.get_fragments()[1].key)
