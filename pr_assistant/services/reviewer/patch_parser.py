"""Patch parser to decide which lines accept GitHub PR review comments."""

import re
from dataclasses import dataclass

from pr_assistant.core.logging import get_logger
from pr_assistant.services.reviewer.schemas import LineComment, ReviewComment

logger = get_logger("reviewer.patch_parser")

# @@ -old_start,old_count +new_start,new_count @@
# Wider than the strict "-L,N +L,N" form: an omitted count reads as 1, as in
# unified diff output for one-line hunks.
HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


@dataclass(frozen=True)
class Hunk:
    """Line ranges of one hunk. Ends are exclusive."""

    left_start: int
    left_end: int
    right_start: int
    right_end: int


class HunkSet:
    """The hunks of a unified diff patch, in patch order."""

    def __init__(self, hunks: list[Hunk]) -> None:
        self.hunks = hunks

    @classmethod
    def parse(cls, patch: str) -> "HunkSet":
        """Extract hunks from a unified diff patch.

        Only hunk headers are read; hunk bodies and anything that is not a
        header are ignored.

        Args:
            patch: Unified diff patch string

        Returns:
            HunkSet with one hunk per header
        """
        hunks: list[Hunk] = []
        if not patch:
            return cls(hunks)

        for line in patch.split("\n"):
            match = HUNK_HEADER_PATTERN.match(line)
            if not match:
                continue
            left_start = int(match.group(1))
            left_count = int(match.group(2)) if match.group(2) is not None else 1
            right_start = int(match.group(3))
            right_count = int(match.group(4)) if match.group(4) is not None else 1
            hunks.append(
                Hunk(
                    left_start=left_start,
                    left_end=left_start + left_count,
                    right_start=right_start,
                    right_end=right_start + right_count,
                )
            )
        return cls(hunks)

    def is_line_valid(self, side: str | None, line: int) -> bool:
        """Check if a line falls inside any hunk on the given side.

        "LEFT" checks the old file; any other side checks the new file. The
        upper bound is inclusive: GitHub accepts the line right after the
        last counted line of a hunk.
        """
        if side == "LEFT":
            return any(h.left_start <= line <= h.left_end for h in self.hunks)
        return any(h.right_start <= line <= h.right_end for h in self.hunks)

    def __len__(self) -> int:
        return len(self.hunks)


def is_comment_applicable(comment: LineComment, hunks: HunkSet) -> bool:
    """A comment is applicable if its start line (range) or line passes the hunk check."""
    if comment.start_line is not None:
        return hunks.is_line_valid(comment.start_side or comment.side, comment.start_line)
    if comment.line is not None:
        return hunks.is_line_valid(comment.side, comment.line)
    return False


def to_review_comments(
    file_path: str,
    patch: str,
    comments: list[LineComment],
) -> list[ReviewComment]:
    """Attach the file path and compute applicability against the file's patch."""
    hunks = HunkSet.parse(patch)
    return [
        ReviewComment(
            file_path=file_path,
            body=c.body,
            line=c.line,
            side=c.side,
            start_line=c.start_line,
            start_side=c.start_side,
            applicable=is_comment_applicable(c, hunks),
        )
        for c in comments
    ]


def filter_applicable_comments(
    comments: list[ReviewComment],
) -> tuple[list[ReviewComment], list[ReviewComment]]:
    """Split comments into those GitHub accepts and those outside every hunk.

    Returns:
        Tuple of (applicable_comments, dropped_comments)
    """
    applicable = []
    dropped = []

    for comment in comments:
        if comment.applicable:
            applicable.append(comment)
        else:
            dropped.append(comment)
            logger.warning(
                f"Dropping comment outside the diff: {comment.file_path} "
                f"line={comment.line} side={comment.side} "
                f"start_line={comment.start_line} start_side={comment.start_side}"
            )

    return applicable, dropped
