"""Unit tests for safe file names."""

from omnisync.utils.filenames import MAX_FILENAME_BYTES, safe_filename


class TestSafeFilename:
    """Tests for safe_filename."""

    def test_plain_title_unchanged(self) -> None:
        assert safe_filename("A Normal Title") == "A Normal Title"

    def test_hostile_characters_replaced(self) -> None:
        """Should replace characters that are invalid on common filesystems."""
        assert safe_filename('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"

    def test_control_characters_and_whitespace(self) -> None:
        assert safe_filename("Line\none\ttab\x00") == "Line one tab_"

    def test_leading_and_trailing_dots_stripped(self) -> None:
        assert safe_filename("  ...hidden title...  ") == "hidden title"

    def test_length_capped_in_bytes(self) -> None:
        """Should cap the UTF-8 length without splitting a character."""
        name = safe_filename("é" * 200)

        assert len(name.encode("utf-8")) <= MAX_FILENAME_BYTES
        assert name == "é" * (MAX_FILENAME_BYTES // 2)

    def test_fallback_used_for_empty_title(self) -> None:
        assert safe_filename("...", fallback="my-slug") == "my-slug"

    def test_untitled_when_nothing_usable(self) -> None:
        assert safe_filename("", fallback="") == "untitled"
        assert safe_filename("   ") == "untitled"
