"""Tests for the image extractor."""

from hother.markstream.blocks.data import derive_data
from hother.markstream.blocks.images import split_images
from hother.markstream.core.keys import fragment_key, stable_key
from hother.markstream.core.models import Fragment, FragmentType, ImageData, SourcePosition


def make_fragment(fragment_type: FragmentType, raw: str, is_complete: bool = True, start: int = 0, line: int = 1) -> Fragment:
    return Fragment(
        key=fragment_key(raw, 0, is_complete),
        type=fragment_type,
        raw_content=raw,
        is_complete=is_complete,
        position=SourcePosition(start=start, end=start + len(raw), line=line, column=1),
        data=derive_data(fragment_type, raw, is_complete),
    )


class TestSplitImages:
    """Test split_images."""

    def test_text_image_text(self):
        """Test a paragraph is split into ordered runs."""
        parts = split_images(make_fragment(FragmentType.PARAGRAPH, "Text ![a](u.png) more"))
        assert [part.type for part in parts] == [FragmentType.PARAGRAPH, FragmentType.IMAGE, FragmentType.PARAGRAPH]
        assert [part.raw_content for part in parts] == ["Text ", "![a](u.png)", " more"]
        assert parts[1].data == ImageData(alt="a", src="u.png", title=None)
        assert all(part.is_complete for part in parts)

    def test_image_key_depends_only_on_markup(self):
        """Test surrounding prose does not affect the image key."""
        first = split_images(make_fragment(FragmentType.PARAGRAPH, "Intro ![a](u.png)"))
        second = split_images(make_fragment(FragmentType.PARAGRAPH, "Other words ![a](u.png) here"))
        first_image = next(part for part in first if part.type is FragmentType.IMAGE)
        second_image = next(part for part in second if part.type is FragmentType.IMAGE)
        assert first_image.key == second_image.key == stable_key("![a](u.png)")

    def test_title(self):
        """Test the optional title is captured."""
        parts = split_images(make_fragment(FragmentType.PARAGRAPH, '![cat](cat.jpg "A cat")'))
        assert parts[0].data == ImageData(alt="cat", src="cat.jpg", title="A cat")

    def test_adjacent_images_drop_empty_text(self):
        """Test no empty or whitespace-only text fragments are emitted."""
        assert [part.type for part in split_images(make_fragment(FragmentType.PARAGRAPH, "![a](1.png)![b](2.png)"))] == [FragmentType.IMAGE, FragmentType.IMAGE]
        parts = split_images(make_fragment(FragmentType.PARAGRAPH, "![a](1.png) ![b](2.png)"))
        assert [part.raw_content for part in parts] == ["![a](1.png)", "![b](2.png)"]
        assert parts[0].key != parts[1].key

    def test_no_images_returns_original(self):
        """Test fragments without images are kept unchanged."""
        fragment = make_fragment(FragmentType.PARAGRAPH, "plain [link](x.html)")
        assert split_images(fragment) == [fragment]

    def test_only_completed_containers(self):
        """Test open fragments and other block types are untouched."""
        open_paragraph = make_fragment(FragmentType.PARAGRAPH, "x ![a](u.png)", is_complete=False)
        heading = make_fragment(FragmentType.HEADING, "# ![a](u.png)")
        code = make_fragment(FragmentType.CODEBLOCK, "```\n![a](u.png)\n```")
        for fragment in (open_paragraph, heading, code):
            assert split_images(fragment) == [fragment]

    def test_blockquote_text_keeps_type(self):
        """Test text runs keep the container type."""
        parts = split_images(make_fragment(FragmentType.BLOCKQUOTE, "> Quote ![i](q.png)"))
        assert [part.type for part in parts] == [FragmentType.BLOCKQUOTE, FragmentType.IMAGE]
        assert parts[0].data.content == "Quote "

    def test_positions(self):
        """Test sub-fragment offsets, lines and columns."""
        parts = split_images(make_fragment(FragmentType.PARAGRAPH, "Intro\nsee ![x](x.png)", start=10, line=3))
        text, image = parts
        assert (text.position.start, text.position.end, text.position.line) == (10, 20, 3)
        assert (image.position.start, image.position.line, image.position.column) == (20, 4, 5)
        assert image.position.end == image.position.start + len(image.raw_content)
