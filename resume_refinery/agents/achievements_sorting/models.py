"""
Models for the achievement sorting workflow.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class AchievementsSortResult(BaseModel):
    """
    Ranking of a role's achievements, most relevant first.

    Attributes:
        ranked_indices (List[int]): A permutation of the original achievement indices.
    """
    model_config = ConfigDict(populate_by_name=True)

    ranked_indices: List[int] = Field(alias="rankedIndices")

    def apply(self, achievements: List[str]) -> List[str]:
        return [achievements[i] for i in self.ranked_indices]
