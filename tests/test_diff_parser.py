from struct_history.diff_parser import line_hunks_to_byte_hunks, line_starts, parse_unified_diff
from struct_history.domain import DiffHunk, LineHunk
from struct_history.errors import DiffParseError, UnsupportedContentError


def _hunk(old_start, old_count, new_start, new_count):
    return LineHunk(
        header=f"@@ -{old_start},{old_count} +{new_start},{new_count} @@",
        old_start=old_start,
        old_count=old_count,
        new_start=new_start,
        new_count=new_count,
    )


def test_parse_blob_diff_with_preamble():
    raw = """\
diff --git a/HEAD:src/model.rs b/HEAD~1:src/model.rs
index 3b18e51..a9c2f0e 100644
--- a/HEAD:src/model.rs
+++ b/HEAD~1:src/model.rs
@@ -5 +5 @@ struct Foobar {
-    c: String,
+    b: String,
"""
    hunks = parse_unified_diff(raw)
    assert len(hunks) == 1
    hunk = hunks[0]
    assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (5, 1, 5, 1)
    assert [line.line_type for line in hunk.lines] == ["-", "+"]
    assert hunk.lines[0].original_lineno == 5
    assert hunk.lines[1].new_lineno == 5


def test_parse_multiple_hunks_and_missing_newline_marker():
    raw = """\
@@ -0,0 +1,2 @@
+use std::fmt;
+
@@ -9,2 +10,0 @@
-fn main() {}
-// end
\\ No newline at end of file
"""
    hunks = parse_unified_diff(raw)
    assert [(h.old_start, h.old_count, h.new_start, h.new_count) for h in hunks] == [
        (0, 0, 1, 2),
        (9, 2, 10, 0),
    ]
    assert len(hunks[1].lines) == 2


def test_parse_empty_diff():
    assert parse_unified_diff("") == []


def test_binary_diff_is_rejected():
    raw = "diff --git a/x b/x\nBinary files a/x and b/x differ\n"
    try:
        parse_unified_diff(raw)
    except UnsupportedContentError as exc:
        assert "binary" in str(exc)
    else:
        raise AssertionError("expected UnsupportedContentError to be raised")


def test_malformed_hunk_header_is_rejected():
    try:
        parse_unified_diff("@@ bogus @@\n-a\n")
    except DiffParseError as exc:
        assert "malformed hunk header" in str(exc)
    else:
        raise AssertionError("expected DiffParseError to be raised")


def test_line_starts_with_and_without_trailing_newline():
    assert line_starts(b"a\nbc\n") == [0, 2, 5]
    assert line_starts(b"a\nbc") == [0, 2, 4]
    assert line_starts(b"") == [0]


def test_deleted_lines_use_newer_offsets():
    newer = b"a\nb\nc\n"
    older = b"a\nc\n"
    hunks = line_hunks_to_byte_hunks([_hunk(2, 1, 1, 0)], newer, older)
    assert hunks == [DiffHunk("deletion", 2, 2)]


def test_pure_insertion_is_placed_after_the_anchor_line():
    newer = b"a\nc\n"
    older = b"a\nbbb\nc\n"
    hunks = line_hunks_to_byte_hunks([_hunk(1, 0, 2, 1)], newer, older)
    assert hunks == [DiffHunk("addition", 2, 4)]


def test_insertion_at_top_of_file():
    hunks = line_hunks_to_byte_hunks([_hunk(0, 0, 1, 1)], b"b\n", b"a\nb\n")
    assert hunks == [DiffHunk("addition", 0, 2)]


def test_replacement_orders_deletion_before_addition():
    newer = b"x = 1\ny\n"
    older = b"x = 22\ny\n"
    hunks = line_hunks_to_byte_hunks([_hunk(1, 1, 1, 1)], newer, older)
    assert hunks == [DiffHunk("deletion", 0, 6), DiffHunk("addition", 0, 7)]


def test_hunk_outside_content_is_rejected():
    try:
        line_hunks_to_byte_hunks([_hunk(4, 1, 4, 1)], b"a\n", b"b\n")
    except DiffParseError as exc:
        assert "newer content has 1 lines" in str(exc)
    else:
        raise AssertionError("expected DiffParseError to be raised")
