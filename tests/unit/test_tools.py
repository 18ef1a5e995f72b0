"""Unit tests for the deterministic validator tools."""

import json

import pytest

from resume_refinery.agents.common.tools import (
    find_skill_mentions,
    make_skill_whitelist_tool,
    make_skills_json_tool,
    make_sort_order_tool,
    validate_achievements,
    validate_description,
    validate_jd_format,
    validate_json,
    validate_skills_in_summary,
    validate_skills_json,
    validate_sort_order,
    validate_tech_stack,
)

IDENTICAL_ISSUE = "Rewritten description is identical to original — no changes were made"

WELL_FORMED_JD = """# position-title
- Senior Backend Engineer

# core-responsibilities
- Build Python APIs
- Operate Redis and PostgreSQL

# desired-qualifications
- 5 years of backend experience

# required-skills
- Python
- FastAPI
- Redis
"""


@pytest.mark.unit
def test_validate_json_parses_valid_input():
    """Test that valid JSON comes back parsed."""
    result = validate_json('{"a": [1, 2], "b": null}')

    assert result.valid is True
    assert result.parsed == {"a": [1, 2], "b": None}
    assert result.error is None


@pytest.mark.unit
def test_validate_json_unquoted_key_reports_syntax_error():
    """Test that an unquoted key is rejected with a SyntaxError message."""
    result = validate_json('{foo: "bar"}')

    assert result.valid is False
    assert "SyntaxError" in result.error


@pytest.mark.unit
@pytest.mark.parametrize("payload", ["NaN", "Infinity", "[1, -Infinity]", '{"score": NaN}'])
def test_validate_json_rejects_non_standard_constants(payload):
    """Test that NaN and Infinity literals are not accepted as JSON."""
    result = validate_json(payload)

    assert result.valid is False
    assert result.parsed is None
    assert result.error.startswith("SyntaxError: ")


@pytest.mark.unit
def test_skills_json_with_nan_is_invalid_json():
    """Test that a NaN literal fails the skills shape check as invalid JSON."""
    result = validate_skills_json('{"groupOrder": ["A"], "skillOrder": {"A": []}, "x": NaN}')

    assert result.valid is False
    assert result.issues == ["Output is not valid JSON"]


@pytest.mark.unit
def test_skills_json_well_formed():
    """Test the shape check on a correct skills result."""
    payload = json.dumps({
        "groupOrder": ["Frontend", "Backend"],
        "skillOrder": {"Frontend": ["React"], "Backend": ["Node"]},
    })

    result = validate_skills_json(payload)

    assert result.valid is True
    assert result.issues == []


@pytest.mark.unit
def test_skills_json_invalid_json_short_circuits():
    """Test that malformed JSON yields exactly one issue."""
    result = validate_skills_json("{groupOrder: [}")

    assert result.valid is False
    assert result.issues == ["Output is not valid JSON"]


@pytest.mark.unit
def test_skills_json_missing_fields_reported_in_order():
    """Test that groupOrder is reported before skillOrder."""
    result = validate_skills_json("{}")

    assert result.issues == [
        "Missing or invalid groupOrder field (expected string array)",
        "Missing or invalid skillOrder field (expected mapping of group to string array)",
    ]


@pytest.mark.unit
def test_skills_json_missing_skill_order_only():
    """Test a result with groups but no per-group skills."""
    result = validate_skills_json('{"groupOrder": ["Backend"]}')

    assert result.issues == ["Missing or invalid skillOrder field (expected mapping of group to string array)"]


@pytest.mark.unit
def test_skills_json_expected_group_count():
    """Test that a dropped group is flagged when the count is known."""
    payload = '{"groupOrder": ["A", "B"], "skillOrder": {"A": [], "B": []}}'

    result = validate_skills_json(payload, expected_groups=3)

    assert result.issues == ["groupOrder has 2 groups, expected 3"]


@pytest.mark.unit
def test_json_validators_are_idempotent():
    """Test that re-validating the same input yields the same verdict."""
    payload = '{"groupOrder": ["A"], "skillOrder": {"A": ["x"]}}'

    assert validate_skills_json(payload) == validate_skills_json(payload)
    assert validate_json(payload) == validate_json(json.dumps(validate_json(payload).parsed))


@pytest.mark.unit
def test_sort_order_accepts_bare_array_and_object():
    """Test both accepted ranking shapes."""
    assert validate_sort_order("[2, 0, 1]", 3).valid is True
    assert validate_sort_order('{"rankedIndices": [2, 0, 3, 1]}', 4).valid is True


@pytest.mark.unit
def test_sort_order_duplicate_index():
    """Test that a duplicate index is flagged without a length issue."""
    result = validate_sort_order("[0, 0, 1]", 3)

    assert result.issues == ["Missing or duplicate index: expected all integers 0..2"]


@pytest.mark.unit
def test_sort_order_short_array():
    """Test that a short ranking reports both the length and the missing index."""
    result = validate_sort_order("[1, 0]", 3)

    assert result.issues == [
        "Array has 2 elements, expected 3",
        "Missing or duplicate index: expected all integers 0..2",
    ]


@pytest.mark.unit
def test_sort_order_rejects_non_integers_and_non_arrays():
    """Test non-integer, non-array and non-JSON rankings."""
    assert validate_sort_order('["0", "1"]', 2).issues == ["Array contains non-integer values"]
    assert validate_sort_order('{"order": [0, 1]}', 2).issues == ["Output is not a JSON array"]
    assert validate_sort_order("first, second", 2).issues == ["Output is not valid JSON"]


@pytest.mark.unit
def test_achievements_valid_pair():
    """Test that same-count, long enough rewrites pass."""
    original = ["Reduced latency by 40%", "Migrated billing service"]
    rewritten = ["Reduced API latency by 40% with Redis", "Migrated billing service to FastAPI"]

    result = validate_achievements(original, rewritten)

    assert result.valid is True
    assert result.issues == []


@pytest.mark.unit
def test_achievements_one_issue_per_short_entry():
    """Test that every short or empty rewrite gets its own issue."""
    original = ["Reduced latency by 40%", "Migrated billing service"]

    result = validate_achievements(original, ["short", ""])

    assert result.valid is False
    assert result.issues == [
        'Achievement [0] is too short or empty: "short"',
        'Achievement [1] is too short or empty: ""',
    ]


@pytest.mark.unit
def test_achievements_count_mismatch():
    """Test that a dropped achievement is reported as a count mismatch."""
    result = validate_achievements(["First long achievement", "Second long achievement"], ["First long achievement"])

    assert result.issues == ["Count mismatch: expected 2 achievements, got 1"]


@pytest.mark.unit
def test_description_identical_and_short():
    """Test an unchanged, short description."""
    result = validate_description("Built a tool.", "Built a tool.")

    assert result.valid is False
    assert IDENTICAL_ISSUE in result.issues
    assert "Rewritten description is too short (13 chars, min 50)" in result.issues


@pytest.mark.unit
def test_description_identical_long():
    """Test that an unchanged long description reports only the identical issue."""
    text = "Built and maintained internal services for order processing and billing."

    result = validate_description(text, f"  {text}  ")

    assert result.issues == [IDENTICAL_ISSUE]


@pytest.mark.unit
def test_description_empty_and_rewritten():
    """Test the empty case and a genuine rewrite."""
    original = "Built and maintained internal services for order processing and billing."
    rewritten = "Designed and operated Python services for order processing and billing at scale."

    assert validate_description(original, "   ").issues == ["Rewritten description is empty"]
    assert validate_description(original, rewritten).valid is True


@pytest.mark.unit
def test_tech_stack_renames_pass():
    """Test that renamed and reordered items pass the provenance check."""
    result = validate_tech_stack(["Python", "PostgreSQL", "AWS"], ["AWS", "Python 3", "Postgres"])

    assert result.valid is True


@pytest.mark.unit
def test_tech_stack_flags_fabricated_and_blank_items():
    """Test that unknown and blank items are flagged together."""
    result = validate_tech_stack(["Python", "Flask"], ["Python", "Kubernetes", "  "])

    assert result.valid is False
    assert result.issues[0].startswith("Potentially fabricated tech items (not in original): Kubernetes")


@pytest.mark.unit
def test_tech_stack_flags_single_character_items():
    """Test that one-letter items are flagged even when they substring-match an original item."""
    result = validate_tech_stack(["C++", "Python"], ["C", "Python"])

    assert result.valid is False
    assert result.issues == ["Potentially fabricated tech items (not in original): C"]


@pytest.mark.unit
def test_tech_stack_growth_limit():
    """Test that more than doubling the stack is flagged."""
    result = validate_tech_stack(["Python"], ["Python", "Python 3", "python"])

    assert result.issues == ["Too many items added: original had 1, proposed has 3"]


@pytest.mark.unit
def test_find_skill_mentions():
    """Test capitalized, acronym and dotted mentions, minus stopwords."""
    mentions = find_skill_mentions("Senior engineer with AWS, Python and Node.js experience.")

    assert mentions == ["aws", "node", "node.js", "python"]


@pytest.mark.unit
def test_skills_in_summary_flags_unlisted_technology():
    """Test that a technology outside the whitelist is reported."""
    summary = "Senior engineer specializing in Python and Kubernetes."

    result = validate_skills_in_summary(summary, ["Python", "Docker"])

    assert result.issues == ["Skill not in allowed list: kubernetes"]


@pytest.mark.unit
def test_jd_format_well_formed():
    """Test a refined job description with all four sections."""
    assert validate_jd_format(WELL_FORMED_JD).valid is True


@pytest.mark.unit
def test_jd_format_missing_section_and_bold():
    """Test that missing sections and bold text are reported."""
    jd = "# position-title\n- **Senior Engineer**\n# core-responsibilities\n- Build APIs\n"

    result = validate_jd_format(jd)

    assert "Missing required section: # desired-qualifications" in result.issues
    assert "Missing required section: # required-skills" in result.issues
    assert "Contains disallowed bold markdown (**)" in result.issues
    assert "Contains disallowed italic markdown (*)" not in result.issues


@pytest.mark.unit
def test_jd_format_too_many_responsibilities():
    """Test the five item limit on core-responsibilities."""
    items = "\n".join(f"- Responsibility {i}" for i in range(6))
    jd = WELL_FORMED_JD.replace("- Build Python APIs\n- Operate Redis and PostgreSQL", items)

    result = validate_jd_format(jd)

    assert result.issues == ["core-responsibilities has 6 items (max 5)"]


@pytest.mark.unit
def test_sort_order_tool_wraps_validator():
    """Test the agent-facing sort order tool."""
    tool = make_sort_order_tool(3)

    assert tool.name == "validate_sort_order"
    assert tool.function("[2, 0, 1]") == {"valid": True, "issues": []}
    assert tool.function("[2, 2, 1]")["valid"] is False


@pytest.mark.unit
def test_skills_json_tool_checks_group_count():
    """Test that the skills tool is bound to the expected group count."""
    tool = make_skills_json_tool(2)

    result = tool.function('{"groupOrder": ["A"], "skillOrder": {"A": ["x"]}}')

    assert result["issues"] == ["groupOrder has 1 groups, expected 2"]


@pytest.mark.unit
def test_skill_whitelist_tools_are_independent():
    """Test that each whitelist tool keeps its own allowed list."""
    python_only = make_skill_whitelist_tool(["Python"])
    rust_only = make_skill_whitelist_tool(["Rust"])

    assert python_only.function("Expert in Rust.")["valid"] is False
    assert rust_only.function("Expert in Rust.")["valid"] is True
