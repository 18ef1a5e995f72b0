"""
Reviewer verdict parsing.

Reviewers answer either APPROVED or "CRITIQUE: <reason>" followed on the next
line by the corrected artifact. parse_review turns that text into an Approved
or Critique model. Keywords match case-insensitively on the first non-empty
line, ignoring leading markdown emphasis. Anything else is treated as an
implicit approval so a confused reviewer never stalls a run.
"""

import re

from .models import Approved, Critique, ReviewVerdict

_LEADING_NOISE = re.compile(r"^[\s*_#>`]+")
_CRITIQUE_PREFIX = re.compile(r"^critique\s*:\s*", re.IGNORECASE)
_FENCE_LINE = re.compile(r"^\s*```[\w-]*\s*$")


def strip_code_fences(text: str) -> str:
    lines = [line for line in text.splitlines() if not _FENCE_LINE.match(line)]
    return "\n".join(lines).strip()


def parse_review(text: str) -> ReviewVerdict:
    lines = (text or "").strip().splitlines()
    if not lines:
        print("[REVIEW] Empty reviewer response, treating as approval")
        return Approved(implicit=True)

    head = _LEADING_NOISE.sub("", lines[0]).rstrip("*_` ").strip()

    if head.upper().startswith("APPROVED"):
        return Approved(note=head[len("APPROVED"):].strip(" :.-"))

    match = _CRITIQUE_PREFIX.match(head)
    if match:
        reason = head[match.end():].strip()
        corrected = strip_code_fences("\n".join(lines[1:]))
        if corrected:
            return Critique(reason=reason, corrected=corrected)
        print(f"[REVIEW] Critique without a corrected artifact ({reason!r}), treating as approval")
        return Approved(implicit=True, note=reason)

    print(f"[REVIEW] Unrecognized reviewer response, treating as approval: {lines[0][:80]!r}")
    return Approved(implicit=True)
