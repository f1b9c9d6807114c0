from entrybox.editor.buffer import LineBuffer, MonospaceMetrics, WidthConstrainedInserter


def _inserter(max_lines=10, width=50, **kwargs):
    buffer = LineBuffer(max_lines)
    return WidthConstrainedInserter(buffer, MonospaceMetrics(char_width=10), width, **kwargs)


def test_insert_text_advances_caret_by_length():
    buffer = LineBuffer(3)
    buffer.insert_text("ab")
    buffer.insert_text("\\\\")
    assert buffer.lines == ["ab\\\\"]
    assert buffer.caret.col == 4


def test_delete_left_at_origin_is_noop():
    buffer = LineBuffer(3)
    assert not buffer.delete_left()
    assert buffer.lines == [""]
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 0)


def test_delete_left_merges_with_previous_line():
    buffer = LineBuffer(3)
    buffer.lines = ["hello", "world"]
    buffer.set_caret(1, 0)

    buffer.delete_left()
    assert buffer.lines == ["helloworld"]
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 5)


def test_split_line_moves_tail_to_new_line():
    buffer = LineBuffer(3)
    buffer.lines = ["hello"]
    buffer.set_caret(0, 2)

    assert buffer.split_line()
    assert buffer.lines == ["he", "llo"]
    assert (buffer.cursor_row, buffer.cursor_col) == (1, 0)


def test_split_line_respects_line_cap():
    buffer = LineBuffer(3)
    for _ in range(5):
        buffer.split_line()
    assert len(buffer.lines) == 3
    assert not buffer.split_line()
    assert len(buffer.lines) == 3


def test_horizontal_movement_wraps_between_lines():
    buffer = LineBuffer(3)
    buffer.lines = ["ab", "cd"]
    buffer.set_caret(1, 0)

    buffer.move_left()
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 2)
    buffer.move_right()
    assert (buffer.cursor_row, buffer.cursor_col) == (1, 0)


def test_horizontal_movement_stops_at_buffer_edges():
    buffer = LineBuffer(3)
    buffer.lines = ["ab"]
    buffer.move_left()
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 0)
    buffer.set_caret(0, 2)
    buffer.move_right()
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 2)


def test_vertical_movement_clamps_column():
    buffer = LineBuffer(3)
    buffer.lines = ["long line", "ab", "another"]
    buffer.set_caret(0, 7)

    buffer.move_down()
    assert (buffer.cursor_row, buffer.cursor_col) == (1, 2)
    buffer.move_down()
    assert (buffer.cursor_row, buffer.cursor_col) == (2, 2)
    buffer.move_down()
    assert (buffer.cursor_row, buffer.cursor_col) == (2, 2)
    buffer.move_up()
    buffer.move_up()
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 2)


def test_page_movement_and_home_end():
    buffer = LineBuffer(10)
    buffer.lines = ["abc"] * 6
    buffer.set_caret(5, 1)

    buffer.move_page_up(4)
    assert buffer.cursor_row == 1
    buffer.move_page_up(4)
    assert buffer.cursor_row == 0
    buffer.move_page_down(10)
    assert buffer.cursor_row == 5
    buffer.move_end()
    assert buffer.cursor_col == 3
    buffer.move_home()
    assert buffer.cursor_col == 0


def test_set_caret_clamps_out_of_range_positions():
    buffer = LineBuffer(3)
    buffer.lines = ["ab", "c"]
    buffer.set_caret(9, 9)
    assert (buffer.cursor_row, buffer.cursor_col) == (1, 1)
    buffer.set_caret(-1, -4)
    assert (buffer.cursor_row, buffer.cursor_col) == (0, 0)


def test_inserted_text_without_overflow_stays_on_one_line():
    inserter = _inserter(width=1000)
    inserter.insert_text("hello world")
    assert inserter.buffer.text() == "hello world"
    assert inserter.buffer.lines == ["hello world"]


def test_overflow_at_end_of_full_line_starts_new_line():
    inserter = _inserter(width=50)
    inserter.insert_text("abcde")
    assert inserter.buffer.lines == ["abcde"]

    inserter.insert_char("f")
    assert inserter.buffer.lines == ["abcde", "f"]
    assert "".join(inserter.buffer.lines) == "abcdef"
    assert inserter.buffer.caret.row == 1
    assert inserter.buffer.caret.col == 1


def test_overflow_mid_line_breaks_at_caret():
    inserter = _inserter(width=50)
    inserter.insert_text("abcde")
    inserter.buffer.set_caret(0, 2)

    inserter.insert_char("X")
    assert inserter.buffer.lines == ["ab", "Xcde"]
    assert (inserter.buffer.cursor_row, inserter.buffer.cursor_col) == (1, 1)


def test_overflow_at_line_start_keeps_remainder_together():
    inserter = _inserter(width=50)
    inserter.insert_text("abcde")
    inserter.buffer.set_caret(0, 0)

    inserter.insert_char("X")
    assert inserter.buffer.lines == ["X", "abcde"]
    assert (inserter.buffer.cursor_row, inserter.buffer.cursor_col) == (0, 1)


def test_wrapping_fills_line_cap_then_drops():
    rejected = []
    inserter = _inserter(max_lines=3, width=50, on_rejected=rejected.append)

    inserter.insert_text("a" * 5)
    assert len(inserter.buffer.lines) == 1
    inserter.insert_char("b")
    assert inserter.buffer.lines == ["aaaaa", "b"]
    inserter.insert_text("b" * 4 + "c" * 5)
    assert inserter.buffer.lines == ["aaaaa", "bbbbb", "ccccc"]

    assert not inserter.insert_char("d")
    assert rejected == ["d"]
    assert not inserter.split_line()
    assert inserter.buffer.lines == ["aaaaa", "bbbbb", "ccccc"]


def test_newline_goes_through_split_line():
    inserter = _inserter(max_lines=2)
    inserter.insert_text("a\nb\nc")
    assert inserter.buffer.lines == ["a", "bc"]


def test_glyph_wider_than_viewport_is_rejected():
    rejected = []
    inserter = _inserter(width=5, on_rejected=rejected.append)
    assert not inserter.insert_char("a")
    assert inserter.buffer.lines == [""]
    assert rejected == ["a"]


def test_max_chars_caps_line_length():
    rejected = []
    inserter = _inserter(width=1000, max_lines=1, max_chars=3, on_rejected=rejected.append)
    inserter.insert_text("abcd")
    assert inserter.buffer.lines == ["abc"]
    assert rejected == ["d"]


def test_escaped_backslash_inserted_and_deleted_as_unit():
    inserter = _inserter(width=1000, escape_backslash=True)
    inserter.insert_char("\\")
    assert inserter.buffer.lines == ["\\\\"]
    assert inserter.buffer.caret.col == 2

    inserter.delete_left()
    assert inserter.buffer.lines == [""]
    assert inserter.buffer.caret.col == 0


def test_backslash_left_alone_without_escape_policy():
    inserter = _inserter(width=1000)
    inserter.insert_text("\\\\")
    assert inserter.buffer.lines == ["\\\\"]
    inserter.delete_left()
    assert inserter.buffer.lines == ["\\"]


def test_load_text_merges_lines_beyond_cap():
    inserter = _inserter(max_lines=2, width=200)
    inserter.load_text("one\ntwo\nthree")
    assert inserter.buffer.lines == ["one", "two three"]
    assert inserter.buffer.caret.row == 1
    assert inserter.buffer.caret.col == len("two three")


def test_load_text_replaces_content_and_wraps_wide_lines():
    inserter = _inserter(max_lines=3)
    inserter.insert_text("xyz")
    assert inserter.load_text("abcdefg") == 7
    assert inserter.buffer.lines == ["abcde", "fg"]
    assert (inserter.buffer.caret.row, inserter.buffer.caret.col) == (1, 2)


def test_load_text_respects_max_chars():
    rejected = []
    inserter = _inserter(max_lines=1, max_chars=3, on_rejected=rejected.append)
    assert inserter.load_text("abcdefghij") == 3
    assert inserter.buffer.lines == ["abc"]
    assert rejected == list("defghij")


def test_load_text_escapes_backslashes():
    inserter = _inserter(width=1000, escape_backslash=True)
    inserter.load_text("a\\b")
    assert inserter.buffer.lines == ["a\\\\b"]
