"""
Models for Experience Tailoring

Structured outputs the keyword extractor, enrichment classifier and tech
stack aligner must return, plus the final tailoring result.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KeywordExtractionResult(BaseModel):
    """
    JD keywords that the original achievements do not mention yet.

    Attributes:
        missing_keywords (List[str]): Keywords in the JD but missing from the achievements.
        critical_keywords (List[str]): Must-have keywords (repeated or listed as required).
        nice_to_have_keywords (List[str]): Keywords from desired or preferred qualifications.
    """
    model_config = ConfigDict(populate_by_name=True)

    missing_keywords: List[str] = Field(default_factory=list, alias="missingKeywords")
    critical_keywords: List[str] = Field(default_factory=list, alias="criticalKeywords")
    nice_to_have_keywords: List[str] = Field(default_factory=list, alias="niceToHaveKeywords")

    def candidates(self) -> List[str]:
        """Critical first, then nice-to-have, then any remaining missing keywords."""
        ordered = []
        for keyword in self.critical_keywords + self.nice_to_have_keywords + self.missing_keywords:
            if keyword not in ordered:
                ordered.append(keyword)
        return ordered


class EnrichmentClassification(BaseModel):
    """
    Keywords approved for injection, per achievement.

    Attributes:
        enrichment_map (Dict[str, List[str]]): Achievement index (as a string) to approved keywords.
        rationale (str): Short justification for the decisions.
    """
    model_config = ConfigDict(populate_by_name=True)

    enrichment_map: Dict[str, List[str]] = Field(default_factory=dict, alias="enrichmentMap")
    rationale: str = ""

    def seeds_for(self, index: int) -> List[str]:
        return self.enrichment_map.get(str(index), [])


class TechStackAlignment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tech_stack: List[str] = Field(default_factory=list, alias="techStack")
    rationale: str = ""


class ExperienceTailoringResult(BaseModel):
    """
    A work experience entry rewritten for the target job.

    Attributes:
        description (str): Rewritten role description.
        achievements (List[str]): Rewritten achievements, same count and order as the input.
        tech_stack (Optional[List[str]]): Aligned tech stack, or None when the entry had none.
    """
    model_config = ConfigDict(populate_by_name=True)

    description: str
    achievements: List[str]
    tech_stack: Optional[List[str]] = Field(default=None, alias="techStack")
