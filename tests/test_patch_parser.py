"""Tests for the hunk parser and comment applicability."""

from pr_assistant.services.reviewer.patch_parser import (
    Hunk,
    HunkSet,
    filter_applicable_comments,
    is_comment_applicable,
    to_review_comments,
)
from pr_assistant.services.reviewer.schemas import LineComment

PATCH = """@@ -50,10 +51,13 @@ export function upload() {
   const client = createClient();
-  await client.put(file);
+  await retry(() => client.put(file));
+  log.info("uploaded");
@@ -120,3 +124,4 @@ export function download() {
   return stream;
+  // done
 }"""


class TestHunkSetParse:
    """Tests for HunkSet.parse."""

    def test_parses_headers_in_order(self):
        hunks = HunkSet.parse(PATCH)

        assert hunks.hunks == [
            Hunk(left_start=50, left_end=60, right_start=51, right_end=64),
            Hunk(left_start=120, left_end=123, right_start=124, right_end=128),
        ]

    def test_empty_patch(self):
        assert len(HunkSet.parse("")) == 0

    def test_body_lines_ignored(self):
        """Lines that look like code, even with @@, are not headers."""
        patch = "+ const marker = '@@ -1,2 +3,4 @@';\n context"
        assert len(HunkSet.parse(patch)) == 0

    def test_omitted_counts_default_to_one(self):
        hunks = HunkSet.parse("@@ -3 +3 @@\n-a\n+b")

        assert hunks.hunks == [Hunk(left_start=3, left_end=4, right_start=3, right_end=4)]

    def test_zero_count(self):
        """A new file has an empty left range."""
        hunks = HunkSet.parse("@@ -0,0 +1,5 @@\n+a")

        assert hunks.hunks == [Hunk(left_start=0, left_end=0, right_start=1, right_end=6)]


class TestIsLineValid:
    """Tests for HunkSet.is_line_valid."""

    def test_right_side_inside_range(self):
        hunks = HunkSet.parse("@@ -50,10 +51,13 @@")

        assert hunks.is_line_valid("RIGHT", 52)
        assert hunks.is_line_valid("RIGHT", 58)

    def test_right_range_is_inclusive(self):
        """The right range of +51,13 is [51, 64], both ends included."""
        hunks = HunkSet.parse("@@ -50,10 +51,13 @@")

        assert hunks.is_line_valid("RIGHT", 51)
        assert hunks.is_line_valid("RIGHT", 64)
        assert not hunks.is_line_valid("RIGHT", 50)
        assert not hunks.is_line_valid("RIGHT", 65)

    def test_left_side_outside_range(self):
        hunks = HunkSet.parse("@@ -50,10 +51,13 @@")

        assert not hunks.is_line_valid("LEFT", 70)
        assert hunks.is_line_valid("LEFT", 60)

    def test_unset_side_checks_right_range(self):
        hunks = HunkSet.parse("@@ -1,2 +100,2 @@")

        assert hunks.is_line_valid(None, 101)
        assert not hunks.is_line_valid(None, 1)

    def test_any_hunk_matches(self):
        hunks = HunkSet.parse(PATCH)

        assert hunks.is_line_valid("RIGHT", 125)
        assert not hunks.is_line_valid("RIGHT", 100)


class TestCommentApplicability:
    """Tests for is_comment_applicable and filtering."""

    def test_line_comment(self):
        hunks = HunkSet.parse(PATCH)

        assert is_comment_applicable(LineComment(body="ok", line=53, side="RIGHT"), hunks)
        assert not is_comment_applicable(LineComment(body="ko", line=90, side="RIGHT"), hunks)

    def test_range_comment_uses_start_line(self):
        hunks = HunkSet.parse(PATCH)
        comment = LineComment(body="range", start_line=52, start_side="RIGHT", line=90, side="RIGHT")

        assert is_comment_applicable(comment, hunks)

    def test_range_comment_start_outside(self):
        hunks = HunkSet.parse(PATCH)
        comment = LineComment(body="range", start_line=10, start_side="RIGHT", line=53, side="RIGHT")

        assert not is_comment_applicable(comment, hunks)

    def test_comment_without_line(self):
        assert not is_comment_applicable(LineComment(body="file"), HunkSet.parse(PATCH))

    def test_to_review_comments_and_filter(self):
        comments = to_review_comments(
            "src/upload.ts",
            PATCH,
            [
                LineComment(body="keep", line=53, side="RIGHT"),
                LineComment(body="drop", line=90, side="RIGHT"),
            ],
        )

        applicable, dropped = filter_applicable_comments(comments)

        assert [c.body for c in applicable] == ["keep"]
        assert [c.body for c in dropped] == ["drop"]
        assert applicable[0].file_path == "src/upload.ts"

    def test_github_payload_omits_unset_fields(self):
        comment = to_review_comments(
            "src/upload.ts", PATCH, [LineComment(body="keep", line=53, side="RIGHT")]
        )[0]

        assert comment.to_github() == {
            "path": "src/upload.ts",
            "body": "keep",
            "line": 53,
            "side": "RIGHT",
        }
