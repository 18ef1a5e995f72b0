import json
from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback
from ..common.stages import clean_json_string, report_progress, run_stage, safe_parse_json
from .agent import TechStackSortingAgents, create_tech_stack_sorting_agents

MAX_REVIEW_ROUNDS = 3


class TechStackSortingState(TypedDict):
    technologies: List[str]
    job_description: str
    analysis: str
    stack_json: str
    sorted_stack: List[str]


def reconcile_tech_stack(stack_json: str, technologies: List[str]) -> List[str]:
    """
    Keep the model's order for known technologies and append anything it dropped.

    Every original entry appears exactly once in the result, so repeated or
    case-variant entries are kept as given. Extra mentions beyond the original
    count are dropped.
    """
    parsed = safe_parse_json(stack_json)
    if not isinstance(parsed, list):
        print("[WORKFLOW] Tech stack result is not a JSON array, keeping original order")
        return list(technologies)

    remaining = list(technologies)
    ordered = []
    for item in parsed:
        key = str(item).lower().strip()
        match = next((tech for tech in remaining if tech.lower().strip() == key), None)
        if match is None:
            print(f"[WORKFLOW] Dropping technology not in the original stack: {item}")
            continue
        remaining.remove(match)
        ordered.append(match)

    return ordered + remaining


def create_tech_stack_sorting_workflow(agents: TechStackSortingAgents, on_progress: Optional[ProgressCallback] = None):
    async def optimize_node(state: TechStackSortingState):
        report_progress(on_progress, "Analyzing tech stack relevance to JD...")
        analysis = await run_stage(
            agents.optimizer,
            f"JOB DESCRIPTION:\n{state['job_description']}\n\nCURRENT TECH STACK:\n{', '.join(state['technologies'])}",
        )
        return {"analysis": analysis}

    async def scribe_node(state: TechStackSortingState):
        report_progress(on_progress, "Formatting result as data...")
        draft = await run_stage(
            agents.scribe,
            f"Original Tech Stack: {', '.join(state['technologies'])}\n"
            f"Analysis:\n{state['analysis']}\n\nConvert this to a JSON array of strings:",
        )
        return {"stack_json": clean_json_string(draft)}

    async def editor_node(state: TechStackSortingState):
        def build_prompt(candidate: str) -> str:
            return f"ORIGINAL DATA: {json.dumps(state['technologies'])}\nGENERATED JSON: {candidate}"

        outcome = await run_critique_loop(
            agents.editor,
            state["stack_json"],
            build_prompt,
            MAX_REVIEW_ROUNDS,
            normalize=clean_json_string,
            on_progress=on_progress,
            progress_message="Validating data integrity...",
        )
        return {"stack_json": outcome.candidate}

    def finalize_node(state: TechStackSortingState):
        return {"sorted_stack": reconcile_tech_stack(state["stack_json"], state["technologies"])}

    workflow = StateGraph(TechStackSortingState)
    workflow.add_node("optimize", optimize_node)
    workflow.add_node("scribe", scribe_node)
    workflow.add_node("editor", editor_node)
    workflow.add_node("finalize", finalize_node)

    workflow.set_entry_point("optimize")
    workflow.add_edge("optimize", "scribe")
    workflow.add_edge("scribe", "editor")
    workflow.add_edge("editor", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


async def sort_tech_stack(
    technologies: List[str],
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> List[str]:
    """Order `technologies` by relevance to the job description without adding or losing any."""
    if len(technologies) < 2:
        report_progress(on_progress, "Tech stack sorted successfully.", done=True)
        return list(technologies)

    agents = create_tech_stack_sorting_agents(config)
    app = create_tech_stack_sorting_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        TechStackSortingState(
            technologies=list(technologies),
            job_description=job_description,
            analysis="",
            stack_json="",
            sorted_stack=[],
        )
    )

    report_progress(on_progress, "Tech stack sorted successfully.", done=True)
    return final_state["sorted_stack"]
