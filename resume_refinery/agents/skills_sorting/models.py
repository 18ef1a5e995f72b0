"""
Models for the skills sorting workflow.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class SkillsSortResult(BaseModel):
    """
    Optimized ordering of skill groups and of the skills inside each group.

    Attributes:
        group_order (List[str]): Group titles, most relevant first.
        skill_order (Dict[str, List[str]]): Skills per group, most relevant first.
    """
    model_config = ConfigDict(populate_by_name=True)

    group_order: List[str] = Field(alias="groupOrder")
    skill_order: Dict[str, List[str]] = Field(alias="skillOrder")
