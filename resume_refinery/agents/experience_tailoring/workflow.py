import json
import re
from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback, WorkExperience
from ..common.stages import (
    clean_json_string,
    report_progress,
    run_stage,
    run_structured_stage,
    safe_parse_json,
)
from ..common.tools import (
    MIN_ACHIEVEMENT_LENGTH,
    validate_achievements,
    validate_description,
    validate_tech_stack,
)
from .agent import TailoringAgents, create_tailoring_agents
from .models import (
    EnrichmentClassification,
    ExperienceTailoringResult,
    KeywordExtractionResult,
    TechStackAlignment,
)

MAX_AUDIT_ROUNDS = 2

_ACHIEVEMENT_PREFIX = re.compile(r"^(?:achievement\s*)?\[\d+\]:?\s*", re.IGNORECASE)
_SEED_LINE = re.compile(r"^approved keywords for\s*\[\d+\]:", re.IGNORECASE)
_BULLET = re.compile(r"^(?:[-*•]|\d+[.)])\s+")


class ExperienceTailoringState(TypedDict):
    job_description: str
    position: str
    organization: str
    original_description: str
    original_achievements: List[str]
    original_tech_stack: List[str]
    analysis: str
    description: str
    keywords: dict
    enrichment_map: dict
    achievements: List[str]
    tech_stack: List[str]


def parse_achievement_lines(text: str) -> List[str]:
    """Split optimizer output into achievements, dropping echoed labels, seed lines and bullets."""
    achievements = []
    for line in text.strip().splitlines():
        line = line.strip()
        if not line or _SEED_LINE.match(line) or line.startswith("```"):
            continue
        line = _ACHIEVEMENT_PREFIX.sub("", _BULLET.sub("", line)).strip()
        if line:
            achievements.append(line)
    return achievements


def repair_achievements(original: List[str], rewritten: List[str]) -> List[str]:
    """Keep rewritten achievements only where they are usable, otherwise fall back to the originals."""
    check = validate_achievements(original, rewritten)
    if check.valid:
        return rewritten
    print(f"[WORKFLOW] Achievement issues: {'; '.join(check.issues)}")
    if len(rewritten) != len(original):
        return list(original)
    return [
        new if new and len(new.strip()) >= MIN_ACHIEVEMENT_LENGTH else old
        for old, new in zip(original, rewritten)
    ]


def parse_tech_list(text: str) -> List[str]:
    parsed = safe_parse_json(clean_json_string(text))
    if isinstance(parsed, list):
        items = [str(item) for item in parsed]
    else:
        items = re.split(r"[,\n]", text)
    return [item.strip().strip("\"'").strip() for item in items if item.strip()]


def reconcile_tech_stack(original: List[str], proposed: List[str], evidence: str) -> List[str]:
    """
    Drop proposed items that are neither renames of original items nor named in the rewritten text.

    Falls back to the original stack when nothing survives.
    """
    check = validate_tech_stack(original, proposed)
    if check.valid:
        return proposed

    evidence_text = evidence.lower()
    normalized_original = [item.lower().strip() for item in original]
    kept = []
    for item in proposed:
        key = item.lower().strip()
        renamed = any(key in orig or orig in key for orig in normalized_original)
        if len(key) >= 2 and (renamed or key in evidence_text):
            kept.append(item)
        else:
            print(f"[WORKFLOW] Dropping unsupported tech stack item: {item}")

    kept = kept[: max(len(original) * 2, 1)]
    return kept or list(original)


def _lines(items: List[str]) -> str:
    return "\n".join(items)


def _indexed(items: List[str]) -> str:
    return "\n".join(f"[{i}] {item}" for i, item in enumerate(items))


def create_experience_tailoring_workflow(agents: TailoringAgents, on_progress: Optional[ProgressCallback] = None):
    async def analyze_node(state: ExperienceTailoringState):
        report_progress(on_progress, "Analyzing job requirements...")
        analysis = await run_stage(
            agents.analyzer,
            f"Job Description:\n{state['job_description']}\n\n"
            f"Position: {state['position']}\nOrganization: {state['organization']}\n"
            f"Description: {state['original_description']}\n"
            f"Achievements:\n{_lines(state['original_achievements'])}",
        )
        return {"analysis": analysis}

    async def describe_node(state: ExperienceTailoringState):
        report_progress(on_progress, "Tailoring description...")
        description = await run_stage(
            agents.description_writer,
            f"Analysis:\n{state['analysis']}\n\n"
            f"Original Description:\n{state['original_description']}\n\n"
            f"Job Description:\n{state['job_description']}",
        )
        check = validate_description(state["original_description"], description)
        if not check.valid:
            print(f"[WORKFLOW] Description draft issues: {'; '.join(check.issues)}")
        return {"description": description}

    async def keywords_node(state: ExperienceTailoringState):
        report_progress(on_progress, "Extracting JD keywords...")
        keywords = await run_structured_stage(
            agents.keyword_extractor,
            f"Job Description:\n{state['job_description']}\n\n"
            f"Original Achievements:\n{_lines(state['original_achievements'])}\n\n"
            "Identify JD keywords missing from the achievements for ATS optimization.",
            fallback=KeywordExtractionResult(),
        )
        return {"keywords": keywords.model_dump(by_alias=True)}

    async def classify_node(state: ExperienceTailoringState):
        candidates = KeywordExtractionResult(**state["keywords"]).candidates()
        if not candidates:
            return {"enrichment_map": {}}

        report_progress(on_progress, "Classifying keywords for achievements...")
        classification = await run_structured_stage(
            agents.enrichment_classifier,
            f"Candidate JD Keywords: {', '.join(candidates)}\n\n"
            f"Original Achievements (indexed):\n{_indexed(state['original_achievements'])}\n\n"
            f"Job Description:\n{state['job_description']}\n\n"
            "For each achievement index, determine which candidate keywords can be legitimately injected.",
            fallback=EnrichmentClassification(rationale="fallback"),
        )
        return {"enrichment_map": classification.enrichment_map}

    async def optimize_node(state: ExperienceTailoringState):
        report_progress(on_progress, "Rewriting achievements with approved keywords...")
        classification = EnrichmentClassification(enrichment_map=state["enrichment_map"])
        seeded = "\n\n".join(
            f"Achievement [{i}]: {achievement}\n"
            f"Approved keywords for [{i}]: {', '.join(classification.seeds_for(i)) or 'none'}"
            for i, achievement in enumerate(state["original_achievements"])
        )
        output = await run_stage(
            agents.achievements_optimizer,
            f"Analysis:\n{state['analysis']}\n\n"
            f"Job Description:\n{state['job_description']}\n\n"
            f"Original Achievements to Process:\n{seeded}\n",
        )
        return {"achievements": parse_achievement_lines(output)}

    async def audit_achievements_node(state: ExperienceTailoringState):
        classification = EnrichmentClassification(enrichment_map=state["enrichment_map"])
        seeds = "\n".join(
            f"[{i}]: {', '.join(classification.seeds_for(i)) or 'none'}"
            for i in range(len(state["original_achievements"]))
        )

        def build_prompt(candidate: str) -> str:
            return (
                f"Original Achievements:\n{_indexed(state['original_achievements'])}\n\n"
                f"Rewritten Achievements:\n{_indexed(parse_achievement_lines(candidate))}\n\n"
                f"Injected keyword seeds per achievement:\n{seeds}"
            )

        outcome = await run_critique_loop(
            agents.integrity_auditor,
            "\n".join(state["achievements"]),
            build_prompt,
            MAX_AUDIT_ROUNDS,
            normalize=lambda text: "\n".join(parse_achievement_lines(text)),
            on_progress=on_progress,
            progress_message="Auditing achievement integrity...",
        )
        rewritten = parse_achievement_lines(outcome.candidate)
        return {"achievements": repair_achievements(state["original_achievements"], rewritten)}

    async def align_stack_node(state: ExperienceTailoringState):
        original = state["original_tech_stack"]
        report_progress(on_progress, "Aligning tech stack to JD terminology...")
        alignment = await run_structured_stage(
            agents.tech_stack_aligner,
            f"Job Description:\n{state['job_description']}\n\n"
            f"Finalized Description:\n{state['description']}\n\n"
            f"Rewritten Achievements:\n{_lines(state['achievements'])}\n\n"
            f"Current Draft Tech Stack:\n{_lines(original)}\n\n"
            "Align the tech stack to terminology in the Job Description.",
            fallback=TechStackAlignment(tech_stack=original, rationale="fallback"),
        )
        return {"tech_stack": alignment.tech_stack or list(original)}

    async def audit_stack_node(state: ExperienceTailoringState):
        original = state["original_tech_stack"]
        evidence = f"{state['description']}\n" + "\n".join(state["achievements"])

        def build_prompt(candidate: str) -> str:
            return (
                f"Original Stack: {', '.join(original)}\n"
                f"Proposed Stack: {', '.join(parse_tech_list(candidate))}\n\n"
                f"Evidence Context:\nDescription: {state['description']}\n"
                f"Rewritten Achievements:\n{_lines(state['achievements'])}\n\n"
                "Ensure changes are justified and backed by evidence."
            )

        outcome = await run_critique_loop(
            agents.tech_stack_validator,
            json.dumps(state["tech_stack"]),
            build_prompt,
            MAX_AUDIT_ROUNDS,
            normalize=lambda text: json.dumps(parse_tech_list(text)),
            on_progress=on_progress,
            progress_message="Auditing tech stack changes...",
        )
        return {"tech_stack": reconcile_tech_stack(original, parse_tech_list(outcome.candidate), evidence)}

    async def fact_check_node(state: ExperienceTailoringState):
        def build_prompt(candidate: str) -> str:
            return (
                f"Original Description: {state['original_description']}\n"
                f"Rewritten Description: {candidate}\n\n"
                f"Original Achievements:\n{_lines(state['original_achievements'])}\n\n"
                f"Rewritten Achievements:\n{_lines(state['achievements'])}"
            )

        outcome = await run_critique_loop(
            agents.fact_checker,
            state["description"],
            build_prompt,
            MAX_AUDIT_ROUNDS,
            on_progress=on_progress,
            progress_message="Validating factual accuracy...",
        )
        return {"description": outcome.candidate}

    async def relevance_node(state: ExperienceTailoringState):
        def build_prompt(candidate: str) -> str:
            return (
                f"Job Description:\n{state['job_description']}\n\n"
                f"Rewritten Content:\nDescription: {candidate}\n"
                f"Achievements:\n{_lines(state['achievements'])}"
            )

        outcome = await run_critique_loop(
            agents.relevance_evaluator,
            state["description"],
            build_prompt,
            MAX_AUDIT_ROUNDS,
            on_progress=on_progress,
            progress_message="Evaluating alignment quality...",
        )
        description = outcome.candidate.strip() or state["description"].strip() or state["original_description"]
        return {"description": description}

    def route_tech_stack(state: ExperienceTailoringState):
        return "align_stack" if state["original_tech_stack"] else "fact_check"

    def route_achievements(state: ExperienceTailoringState):
        return "extract_keywords" if state["original_achievements"] else route_tech_stack(state)

    workflow = StateGraph(ExperienceTailoringState)
    workflow.add_node("analyze", analyze_node)
    workflow.add_node("describe", describe_node)
    workflow.add_node("extract_keywords", keywords_node)
    workflow.add_node("classify", classify_node)
    workflow.add_node("optimize", optimize_node)
    workflow.add_node("audit_achievements", audit_achievements_node)
    workflow.add_node("align_stack", align_stack_node)
    workflow.add_node("audit_stack", audit_stack_node)
    workflow.add_node("fact_check", fact_check_node)
    workflow.add_node("relevance", relevance_node)

    workflow.set_entry_point("analyze")
    workflow.add_edge("analyze", "describe")
    workflow.add_conditional_edges(
        "describe",
        route_achievements,
        {
            "extract_keywords": "extract_keywords",
            "align_stack": "align_stack",
            "fact_check": "fact_check",
        },
    )
    workflow.add_edge("extract_keywords", "classify")
    workflow.add_edge("classify", "optimize")
    workflow.add_edge("optimize", "audit_achievements")
    workflow.add_conditional_edges(
        "audit_achievements",
        route_tech_stack,
        {
            "align_stack": "align_stack",
            "fact_check": "fact_check",
        },
    )
    workflow.add_edge("align_stack", "audit_stack")
    workflow.add_edge("audit_stack", "fact_check")
    workflow.add_edge("fact_check", "relevance")
    workflow.add_edge("relevance", END)

    return workflow.compile()


async def tailor_experience(
    experience: WorkExperience,
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> ExperienceTailoringResult:
    """Rewrite one work experience entry for the target job without inventing facts."""
    agents = create_tailoring_agents(config)
    app = create_experience_tailoring_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        ExperienceTailoringState(
            job_description=job_description,
            position=experience.position,
            organization=experience.organization,
            original_description=experience.description,
            original_achievements=list(experience.key_achievements),
            original_tech_stack=list(experience.tech_stack),
            analysis="",
            description="",
            keywords={},
            enrichment_map={},
            achievements=[],
            tech_stack=[],
        )
    )

    report_progress(on_progress, "Experience tailored!", done=True)
    return ExperienceTailoringResult(
        description=final_state["description"],
        achievements=final_state["achievements"],
        tech_stack=final_state["tech_stack"] if experience.tech_stack else None,
    )
