"""Parsers for text produced by the CI pipeline.

Upload logs and release-note files are written by tooling outside prboard,
so both parsers skip anything they do not recognise instead of raising: one
malformed line must not hide the rest of the file.
"""

from __future__ import annotations

import re

from prboard_core.models import PRInfo, ReleaseInfo

# "Uploaded IPA successfully and created release 1.0.418-dev (720)"
_RELEASE_RE = re.compile(
    r"Uploaded (IPA|APK) successfully and created release ([\d.]+[^(\n]*?) \((\d+)\)",
    re.IGNORECASE,
)

# "- feat: Add new feature (#[11697])"
_PR_LINE_RE = re.compile(r"^-\s+(.*?)\s+\(#\[(\d+)\]\)$")


def extract_release_info(log_text: str) -> list[ReleaseInfo]:
    """Return every IPA/APK upload announced in a job log, in log order."""
    if not isinstance(log_text, str) or not log_text:
        return []
    return [
        ReleaseInfo(platform=m.group(1).upper(), version=m.group(2).strip(), build_number=m.group(3))
        for m in _RELEASE_RE.finditer(log_text)
    ]


def extract_pr_references(note_text: str) -> list[PRInfo]:
    """Return the PR number and title of every ``- <title> (#[<n>])`` line."""
    if not isinstance(note_text, str) or not note_text:
        return []
    refs = []
    for line in note_text.splitlines():
        match = _PR_LINE_RE.match(line)
        if match:
            refs.append(PRInfo(number=match.group(2), title=match.group(1).strip()))
    return refs
