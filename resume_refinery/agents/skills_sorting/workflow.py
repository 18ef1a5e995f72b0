import json
from typing import Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback, SkillGroup
from ..common.stages import clean_json_string, report_progress, run_stage
from ..common.tools import validate_skills_json
from .agent import SkillsSortingAgents, create_skills_sorting_agents
from .models import SkillsSortResult

MAX_REVIEW_ROUNDS = 3


class SkillsSortingState(TypedDict):
    groups: List[dict]
    job_description: str
    analysis: str
    skills_json: str
    result: Optional[dict]


def original_order(groups: List[SkillGroup]) -> SkillsSortResult:
    return SkillsSortResult(
        group_order=[group.title for group in groups],
        skill_order={group.title: list(group.skills) for group in groups},
    )


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    return [item for item in items if not (item in seen or seen.add(item))]


def repair_skill_order(skills_json: str, groups: List[SkillGroup]) -> SkillsSortResult:
    """
    Turn the reviewed JSON into a result that keeps every original group and skill.

    Groups or skills the model dropped are appended after the ones it kept.
    Anything that does not pass the shape check falls back to the original order.
    """
    check = validate_skills_json(skills_json)
    if not check.valid:
        print(f"[WORKFLOW] Skills result rejected ({'; '.join(check.issues)}), keeping original order")
        return original_order(groups)

    parsed = json.loads(skills_json)
    skill_order: Dict[str, List[str]] = {title: _dedupe(skills) for title, skills in parsed["skillOrder"].items()}
    group_order = _dedupe(parsed["groupOrder"] + list(skill_order))

    for group in groups:
        if group.title not in group_order:
            print(f"[WORKFLOW] Restoring dropped skill group: {group.title}")
            group_order.append(group.title)

    placed = {skill for skills in skill_order.values() for skill in skills}
    for group in groups:
        kept = skill_order.setdefault(group.title, [])
        for skill in group.skills:
            if skill not in placed:
                print(f"[WORKFLOW] Restoring dropped skill: {skill} ({group.title})")
                kept.append(skill)
                placed.add(skill)

    return SkillsSortResult(
        group_order=group_order,
        skill_order={title: skill_order.get(title, []) for title in group_order},
    )


def create_skills_sorting_workflow(agents: SkillsSortingAgents, on_progress: Optional[ProgressCallback] = None):
    async def brain_node(state: SkillsSortingState):
        report_progress(on_progress, "Analyzing skill relevance...")
        analysis = await run_stage(
            agents.brain,
            f"JOB DESCRIPTION:\n{state['job_description']}\n\nCURRENT SKILLS:\n{json.dumps(state['groups'])}",
        )
        return {"analysis": analysis}

    async def scribe_node(state: SkillsSortingState):
        report_progress(on_progress, "Sorting and optimizing skills...")
        draft = await run_stage(
            agents.scribe,
            f"Original Data:\n{json.dumps(state['groups'])}\n\nOptimization Analysis:\n{state['analysis']}",
        )
        return {"skills_json": clean_json_string(draft)}

    async def editor_node(state: SkillsSortingState):
        def build_prompt(candidate: str) -> str:
            return f"Original Data:\n{json.dumps(state['groups'])}\n\nGenerated JSON:\n{candidate}"

        outcome = await run_critique_loop(
            agents.editor,
            state["skills_json"],
            build_prompt,
            MAX_REVIEW_ROUNDS,
            normalize=clean_json_string,
            on_progress=on_progress,
            progress_message="Validating sort results...",
        )
        return {"skills_json": outcome.candidate}

    def finalize_node(state: SkillsSortingState):
        groups = [SkillGroup(**group) for group in state["groups"]]
        return {"result": repair_skill_order(state["skills_json"], groups).model_dump(by_alias=True)}

    workflow = StateGraph(SkillsSortingState)
    workflow.add_node("brain", brain_node)
    workflow.add_node("scribe", scribe_node)
    workflow.add_node("editor", editor_node)
    workflow.add_node("finalize", finalize_node)

    workflow.set_entry_point("brain")
    workflow.add_edge("brain", "scribe")
    workflow.add_edge("scribe", "editor")
    workflow.add_edge("editor", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


async def sort_skills(
    groups: List[SkillGroup],
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> SkillsSortResult:
    """Order skill groups and the skills inside them by relevance to the job description."""
    if not groups:
        report_progress(on_progress, "Skills sorted!", done=True)
        return original_order([])

    agents = create_skills_sorting_agents(config, len(groups))
    app = create_skills_sorting_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        SkillsSortingState(
            groups=[group.model_dump() for group in groups],
            job_description=job_description,
            analysis="",
            skills_json="",
            result=None,
        )
    )

    report_progress(on_progress, "Skills sorted!", done=True)
    return SkillsSortResult(**final_state["result"])
