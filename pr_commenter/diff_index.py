"""
Diff index for the PR Commenter.

Parses the per-file patches of a pull request into hunks and answers the
question the review comment API cares about: at which diff position does a
given new-file line sit, if it is part of the diff at all.

GitHub counts positions from the first ``@@`` header of a file's patch: the
line right below it is position 1, and every following line (later hunk
headers and "\\ No newline at end of file" markers included) takes the next
position.
"""

import logging
from typing import Dict, List, Mapping, Optional

from unidiff import PatchSet, UnidiffParseError

from .models import ChangeKind, DiffHunk, DiffLine


logger = logging.getLogger(__name__)

# Lines git may emit ahead of the first hunk when a patch carries file headers.
_FILE_HEADER_PREFIXES = (
    'diff --git', 'index ', '--- ', '+++ ', 'new file mode', 'deleted file mode',
    'old mode', 'new mode', 'similarity index', 'rename from', 'rename to',
    'Binary files',
)


class DiffParsingError(Exception):
    """Raised when a file's patch text cannot be parsed."""
    pass


def _split_patch(file_path: str, patch: str) -> List[str]:
    """Return the patch lines from the first ``@@`` header on, CRLF stripped.

    GitHub's per-file patches start directly at the first hunk; raw git output
    carries file headers first, which are dropped here.

    Raises:
        DiffParsingError: If anything other than git file headers precedes the first hunk
    """
    lines = [line.rstrip('\r') for line in patch.split('\n')]
    if lines and lines[-1] == '':
        lines.pop()

    for index, line in enumerate(lines):
        if line.startswith('@@'):
            return lines[index:]
        if not line.startswith(_FILE_HEADER_PREFIXES):
            raise DiffParsingError(f"{file_path}: content before the first hunk header: {line[:80]!r}")
    return []


def parse_patch(file_path: str, patch: Optional[str]) -> List[DiffHunk]:
    """Parse one file's patch text into hunks with diff positions assigned.

    Args:
        file_path: Path of the file in the pull request head
        patch: Raw unified diff text for that file (may be empty or None)

    Returns:
        The file's hunks, in patch order

    Raises:
        DiffParsingError: On a malformed hunk header, stray content before the
            first hunk, or hunk lines that do not match their header
    """
    if not patch:
        return []

    hunk_text = _split_patch(file_path, patch)
    if not hunk_text:
        return []

    # unidiff wants file headers; the per-file patch from the API has none
    diff_text = '\n'.join([f'--- a/{file_path}', f'+++ b/{file_path}'] + hunk_text) + '\n'
    try:
        patch_set = PatchSet(diff_text)
    except UnidiffParseError as e:
        raise DiffParsingError(f"{file_path}: {e}") from e

    parsed_hunks = list(patch_set[0]) if len(patch_set) else []
    header_count = sum(1 for line in hunk_text if line.startswith('@@'))
    if len(parsed_hunks) != header_count:
        raise DiffParsingError(
            f"{file_path}: unparseable hunk header "
            f"({header_count} '@@' line(s), {len(parsed_hunks)} hunk(s) parsed)"
        )

    hunks: List[DiffHunk] = []
    position = 0
    for hunk_number, hunk in enumerate(parsed_hunks):
        if hunk_number:
            # this hunk's "@@" header
            position += 1
        current = DiffHunk(
            file_path=file_path,
            source_start=hunk.source_start,
            source_lines=hunk.source_length,
            target_start=hunk.target_start,
            target_lines=hunk.target_length,
        )
        for line in hunk:
            position += 1
            content = line.value.rstrip('\n')
            if line.is_added:
                current.lines.append(DiffLine(line.target_line_no, position, ChangeKind.ADDED, content))
            elif line.is_removed:
                current.lines.append(DiffLine(line.source_line_no, position, ChangeKind.REMOVED, content))
            elif line.is_context:
                current.lines.append(DiffLine(line.target_line_no, position, ChangeKind.CONTEXT, content))
            # "\ No newline at end of file" only takes up a position
        hunks.append(current)

    return hunks


class DiffIndex:
    """Read-only lookup from (file, new-file line) to diff position."""

    def __init__(self):
        self._hunks: Dict[str, List[DiffHunk]] = {}
        self._commentable: Dict[str, Dict[int, DiffLine]] = {}
        self._line_by_position: Dict[str, Dict[int, int]] = {}
        self.parse_errors: Dict[str, str] = {}

    @classmethod
    def build(cls, patch_set: Mapping[str, Optional[str]]) -> 'DiffIndex':
        """Build an index from ``{file_path: patch_text}``.

        A file whose patch fails to parse is logged and left out of the index,
        so all of its lines resolve as not part of the diff.
        """
        index = cls()
        for file_path, patch in patch_set.items():
            index.add_patch(file_path, patch)

        logger.info(
            f"Indexed {len(index)} file(s) from the diff "
            f"({index.commentable_line_count} commentable lines, "
            f"{len(index.parse_errors)} parse error(s))"
        )
        return index

    def add_patch(self, file_path: str, patch: Optional[str]) -> bool:
        """Parse and index one file. Returns False if the patch was malformed."""
        try:
            hunks = parse_patch(file_path, patch)
        except DiffParsingError as e:
            logger.warning(f"Skipping {file_path}: {e}")
            self.parse_errors[file_path] = str(e)
            return False

        if not hunks:
            logger.debug(f"No hunks for {file_path} (binary, too large or rename only)")
            return True

        commentable: Dict[int, DiffLine] = {}
        line_by_position: Dict[int, int] = {}
        for hunk in hunks:
            for line in hunk.lines:
                if line.is_commentable:
                    commentable[line.line_number] = line
                    line_by_position[line.position] = line.line_number

        self._hunks[file_path] = hunks
        self._commentable[file_path] = commentable
        self._line_by_position[file_path] = line_by_position
        return True

    def resolve(self, file_path: str, line_number: int) -> Optional[int]:
        """Return the diff position of a new-file line, or None if it is not in the diff."""
        entry = self._commentable.get(file_path, {}).get(line_number)
        if entry is None:
            return None
        return entry.position

    def resolve_range(self, file_path: str, start_line: int, end_line: int) -> Optional[int]:
        """Resolve a multi-line range to the diff position of its end line.

        Only the end line has to be commentable; lines in between may fall
        outside the hunk since the API anchors the comment on the end line.
        """
        if start_line < 1 or end_line < 1 or start_line > end_line:
            return None
        return self.resolve(file_path, end_line)

    def line_for_position(self, file_path: str, position: int) -> Optional[int]:
        """Reverse lookup: the new-file line at a diff position (added/context only)."""
        return self._line_by_position.get(file_path, {}).get(position)

    def hunks_for(self, file_path: str) -> List[DiffHunk]:
        return list(self._hunks.get(file_path, []))

    @property
    def commentable_line_count(self) -> int:
        return sum(len(lines) for lines in self._commentable.values())

    def get_parsing_statistics(self) -> Dict[str, int]:
        return {
            "parsed_files": len(self._hunks),
            "skipped_files": len(self.parse_errors),
            "commentable_lines": self.commentable_line_count,
        }

    def __contains__(self, file_path: str) -> bool:
        return file_path in self._hunks

    def __len__(self) -> int:
        return len(self._hunks)
