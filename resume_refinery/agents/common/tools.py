"""
Validator tools shared by the refinement agents.

Every check is a pure function returning a ValidationResult (or JsonCheckResult)
so workflows can run it as a final deterministic check. The make_*_tool
factories wrap the same checks as pydantic-ai Tools that reviewer agents call
to self-verify a draft before answering.
"""

import json
import re
from typing import Any, Iterable, List, Optional, Sequence

from pydantic_ai import Tool

from .models import JsonCheckResult, ValidationResult

MIN_ACHIEVEMENT_LENGTH = 10
MIN_DESCRIPTION_LENGTH = 50
MAX_JD_SECTION_ITEMS = 5

JD_SECTIONS = (
    "position-title",
    "core-responsibilities",
    "desired-qualifications",
    "required-skills",
)

# Capitalized words, acronyms and dotted names (Node.js, ASP.NET)
SKILL_MENTION_PATTERNS = (
    re.compile(r"\b[A-Z][a-zA-Z0-9]+\b"),
    re.compile(r"\b[A-Z]{2,}\b"),
    re.compile(r"\b[a-zA-Z0-9]+\.[a-zA-Z0-9]+\b"),
)

SUMMARY_STOPWORDS = frozenset({
    "the", "and", "for", "with", "years", "experience", "senior", "lead",
    "engineer", "developer", "systems", "solutions", "scalable", "building",
    "expert", "specializing", "architecting", "architected", "focusing",
    "align", "innovation", "impact", "production", "proven", "track", "record",
})


def _log_tool(name: str, result) -> None:
    status = "SUCCESS" if result.valid else "ISSUES"
    print(f"[TOOL] Tool Invocation Completed: {name} | Status: {status}")


def _normalize(items: Iterable[str]) -> List[str]:
    return [item.lower().strip() for item in items]


def _substring_match(candidate: str, pool: Sequence[str]) -> bool:
    return any(entry == candidate or entry in candidate or candidate in entry for entry in pool)


def _reject_constant(name: str):
    raise ValueError(f"Unexpected token {name} in JSON")


def validate_json(json_string: str) -> JsonCheckResult:
    """
    Check that a string parses as strict JSON. The error carries the decoder message.

    NaN, Infinity and -Infinity are rejected.
    """
    try:
        parsed = json.loads(json_string, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        return JsonCheckResult(valid=False, error=f"SyntaxError: {e}")
    return JsonCheckResult(valid=True, parsed=parsed)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_skills_json(json_string: str, expected_groups: Optional[int] = None) -> ValidationResult:
    """
    Check the shape of a skills sort result: {"groupOrder": [...], "skillOrder": {group: [...]}}.

    Issues are reported in a fixed order. Invalid JSON short-circuits with a
    single issue.
    """
    check = validate_json(json_string)
    if not check.valid:
        return ValidationResult(valid=False, issues=["Output is not valid JSON"])

    issues = []
    parsed = check.parsed if isinstance(check.parsed, dict) else {}

    group_order = parsed.get("groupOrder")
    if not _is_string_list(group_order):
        issues.append("Missing or invalid groupOrder field (expected string array)")
    elif expected_groups is not None and len(group_order) < expected_groups:
        issues.append(f"groupOrder has {len(group_order)} groups, expected {expected_groups}")

    skill_order = parsed.get("skillOrder")
    if not isinstance(skill_order, dict) or not all(
        isinstance(key, str) and _is_string_list(value) for key, value in skill_order.items()
    ):
        issues.append("Missing or invalid skillOrder field (expected mapping of group to string array)")

    return ValidationResult(valid=not issues, issues=issues)


def extract_ranked_indices(parsed: Any) -> Any:
    """Accept either a bare array or a {"rankedIndices": [...]} object."""
    if isinstance(parsed, dict) and "rankedIndices" in parsed:
        return parsed["rankedIndices"]
    return parsed


def validate_ranked_indices(indices: Any, expected_length: int) -> ValidationResult:
    if not isinstance(indices, list):
        return ValidationResult(valid=False, issues=["Output is not a JSON array"])
    if not all(isinstance(i, int) and not isinstance(i, bool) for i in indices):
        return ValidationResult(valid=False, issues=["Array contains non-integer values"])

    issues = []
    if len(indices) != expected_length:
        issues.append(f"Array has {len(indices)} elements, expected {expected_length}")
    if sorted(indices) != list(range(expected_length)):
        issues.append(f"Missing or duplicate index: expected all integers 0..{expected_length - 1}")
    return ValidationResult(valid=not issues, issues=issues)


def validate_sort_order(sort_order: str, expected_length: int) -> ValidationResult:
    """Check that a JSON ranking is a permutation of 0..expected_length-1."""
    check = validate_json(sort_order)
    if not check.valid:
        return ValidationResult(valid=False, issues=["Output is not valid JSON"])
    return validate_ranked_indices(extract_ranked_indices(check.parsed), expected_length)


def validate_achievements(original: List[str], rewritten: List[str]) -> ValidationResult:
    issues = []
    if len(rewritten) != len(original):
        issues.append(f"Count mismatch: expected {len(original)} achievements, got {len(rewritten)}")

    for i, achievement in enumerate(rewritten):
        if not achievement or len(achievement.strip()) < MIN_ACHIEVEMENT_LENGTH:
            issues.append(f'Achievement [{i}] is too short or empty: "{achievement}"')

    return ValidationResult(valid=not issues, issues=issues)


def validate_description(original: str, rewritten: str) -> ValidationResult:
    issues = []
    trimmed = (rewritten or "").strip()

    if not trimmed:
        issues.append("Rewritten description is empty")
    elif len(trimmed) < MIN_DESCRIPTION_LENGTH:
        issues.append(f"Rewritten description is too short ({len(trimmed)} chars, min {MIN_DESCRIPTION_LENGTH})")

    if trimmed and trimmed == (original or "").strip():
        issues.append("Rewritten description is identical to original — no changes were made")

    return ValidationResult(valid=not issues, issues=issues)


def validate_tech_stack(original: List[str], proposed: List[str]) -> ValidationResult:
    """
    Check that a proposed tech stack only renames or reorders original items.

    An item passes when its normalized form is a substring of some original
    item or the other way round. Items shorter than two characters never pass.
    """
    issues = []
    normalized_original = _normalize(original)

    fabricated = [
        item for item in proposed
        if len(item.lower().strip()) < 2 or not _substring_match(item.lower().strip(), normalized_original)
    ]
    if fabricated:
        issues.append(f"Potentially fabricated tech items (not in original): {', '.join(fabricated)}")

    if len(proposed) > len(original) * 2:
        issues.append(f"Too many items added: original had {len(original)}, proposed has {len(proposed)}")

    return ValidationResult(valid=not issues, issues=issues)


def find_skill_mentions(summary: str) -> List[str]:
    mentions = set()
    for pattern in SKILL_MENTION_PATTERNS:
        mentions.update(match.lower() for match in pattern.findall(summary or ""))
    return sorted(m for m in mentions if len(m) >= 3 and m not in SUMMARY_STOPWORDS)


def validate_skills_in_summary(summary: str, allowed_skills: Sequence[str]) -> ValidationResult:
    """Flag technology-looking mentions in a summary that are not on the allowed list."""
    allowed = [skill for skill in _normalize(allowed_skills) if skill]
    violations = [mention for mention in find_skill_mentions(summary) if not _substring_match(mention, allowed)]
    issues = [f"Skill not in allowed list: {mention}" for mention in violations]
    return ValidationResult(valid=not issues, issues=issues)


def _count_section_items(jd_text: str, section: str, stop_sections: Sequence[str]) -> Optional[int]:
    stops = "|".join(re.escape(f"# {s}") for s in stop_sections)
    lookahead = f"(?={stops}|$)" if stops else "(?=$)"
    match = re.search(rf"# {re.escape(section)}([\s\S]*?){lookahead}", jd_text)
    if not match:
        return None
    return len(re.findall(r"^\s*-\s+", match.group(1), flags=re.MULTILINE))


def validate_jd_format(jd_text: str) -> ValidationResult:
    """Check a refined job description for its four sections and plain # / - markdown."""
    issues = [f"Missing required section: # {section}" for section in JD_SECTIONS if f"# {section}" not in jd_text]

    if re.search(r"\*\*.+?\*\*", jd_text):
        issues.append("Contains disallowed bold markdown (**)")
    if re.search(r"(?<!\*)\*(?!\*)", jd_text):
        issues.append("Contains disallowed italic markdown (*)")

    responsibilities = _count_section_items(
        jd_text, "core-responsibilities", ("desired-qualifications", "required-skills")
    )
    if responsibilities is not None and responsibilities > MAX_JD_SECTION_ITEMS:
        issues.append(f"core-responsibilities has {responsibilities} items (max {MAX_JD_SECTION_ITEMS})")

    qualifications = _count_section_items(jd_text, "desired-qualifications", ("required-skills",))
    if qualifications is not None and qualifications > MAX_JD_SECTION_ITEMS:
        issues.append(f"desired-qualifications has {qualifications} items (max {MAX_JD_SECTION_ITEMS})")

    return ValidationResult(valid=not issues, issues=issues)


# --- Agent-facing tools ---

def make_json_tool() -> Tool:
    def validate_json_tool(json_string: str) -> dict:
        """Check whether a string is valid JSON.

        Args:
            json_string: The JSON text to check.
        """
        result = validate_json(json_string)
        _log_tool("validate_json", result)
        return result.model_dump()

    return Tool(
        validate_json_tool,
        takes_ctx=False,
        name="validate_json",
        description="Checks whether the given string is valid JSON. Returns {valid, parsed} or {valid: false, error}.",
    )


def make_skills_json_tool(expected_groups: Optional[int] = None) -> Tool:
    def validate_skills_json_tool(json_string: str) -> dict:
        """Validate a skills sort result.

        Args:
            json_string: JSON with groupOrder and skillOrder fields.
        """
        result = validate_skills_json(json_string, expected_groups)
        _log_tool("validate_skills_json", result)
        return result.model_dump()

    expected = f" Expected {expected_groups} groups." if expected_groups is not None else ""
    return Tool(
        validate_skills_json_tool,
        takes_ctx=False,
        name="validate_skills_json",
        description=(
            "Validates that the output is valid JSON with a groupOrder string array and a skillOrder "
            f"object mapping each group to a string array.{expected} Returns {{valid, issues}}."
        ),
    )


def make_sort_order_tool(expected_length: int) -> Tool:
    def validate_sort_order_tool(sort_order: str) -> dict:
        """Validate a ranking of achievement indices.

        Args:
            sort_order: JSON array of indices, or an object with a rankedIndices array.
        """
        result = validate_sort_order(sort_order, expected_length)
        _log_tool("validate_sort_order", result)
        return result.model_dump()

    return Tool(
        validate_sort_order_tool,
        takes_ctx=False,
        name="validate_sort_order",
        description=(
            "Validates that the sort order is a JSON array of unique integers containing all indices "
            f"from 0 to {expected_length - 1}. Expected length: {expected_length}. Returns {{valid, issues}}."
        ),
    )


def make_achievements_tool() -> Tool:
    def validate_achievements_tool(original: List[str], rewritten: List[str]) -> dict:
        """Validate rewritten achievements against the originals.

        Args:
            original: Achievements before rewriting.
            rewritten: Achievements after rewriting.
        """
        result = validate_achievements(original, rewritten)
        _log_tool("validate_achievements_integrity", result)
        return result.model_dump()

    return Tool(
        validate_achievements_tool,
        takes_ctx=False,
        name="validate_achievements_integrity",
        description=(
            "Checks that rewritten achievements keep the original count and that none is suspiciously "
            "short or empty. Returns {valid, issues}."
        ),
    )


def make_description_tool() -> Tool:
    def validate_description_tool(original: str, rewritten: str) -> dict:
        """Validate a rewritten role description.

        Args:
            original: Description before rewriting.
            rewritten: Description after rewriting.
        """
        result = validate_description(original, rewritten)
        _log_tool("validate_description_quality", result)
        return result.model_dump()

    return Tool(
        validate_description_tool,
        takes_ctx=False,
        name="validate_description_quality",
        description=(
            "Checks that a rewritten description is non-empty, at least "
            f"{MIN_DESCRIPTION_LENGTH} characters and different from the original. Returns {{valid, issues}}."
        ),
    )


def make_tech_stack_tool() -> Tool:
    def validate_tech_stack_tool(original: List[str], proposed: List[str]) -> dict:
        """Validate a proposed tech stack against the original one.

        Args:
            original: Tech stack before alignment.
            proposed: Tech stack after alignment.
        """
        result = validate_tech_stack(original, proposed)
        _log_tool("validate_tech_stack_alignment", result)
        return result.model_dump()

    return Tool(
        validate_tech_stack_tool,
        takes_ctx=False,
        name="validate_tech_stack_alignment",
        description=(
            "Checks that the proposed tech stack only contains items from the original stack, possibly "
            "renamed or reordered, and did not grow past twice its size. Returns {valid, issues}."
        ),
    )


def make_skill_whitelist_tool(allowed_skills: Sequence[str]) -> Tool:
    allowed = tuple(allowed_skills)

    def validate_summary_skills_tool(summary: str) -> dict:
        """Check that every technology mentioned in a summary is on the candidate's skill list.

        Args:
            summary: The summary text to check.
        """
        result = validate_skills_in_summary(summary, allowed)
        _log_tool("validate_summary_skills", result)
        return result.model_dump()

    return Tool(
        validate_summary_skills_tool,
        takes_ctx=False,
        name="validate_summary_skills",
        description=(
            "Flags technologies mentioned in the summary that are not in the candidate's skill list. "
            "Returns {valid, issues}."
        ),
    )


def make_jd_format_tool() -> Tool:
    def validate_jd_format_tool(jd_text: str) -> dict:
        """Validate the section layout of a refined job description.

        Args:
            jd_text: The refined job description.
        """
        result = validate_jd_format(jd_text)
        _log_tool("validate_jd_format", result)
        return result.model_dump()

    return Tool(
        validate_jd_format_tool,
        takes_ctx=False,
        name="validate_jd_format",
        description=(
            "Validates that a job description has the position-title, core-responsibilities, "
            "desired-qualifications and required-skills sections and uses only # and - markdown. "
            "Returns {valid, issues}."
        ),
    )
