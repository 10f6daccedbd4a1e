from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class PageElement(BaseModel):
    """One element of a page snapshot shown to the action and observation agents."""

    index: int = Field(description="Position of the element in the snapshot")
    tag: str
    element_id: str = ""
    classes: str = ""
    label: str = Field(default="", description="aria-label or title attribute")
    text: str = Field(default="", description="Visible text, whitespace collapsed")


class ActDecision(BaseModel):
    """What the action agent wants to do for a natural-language directive."""

    action: Literal["click", "wait", "none"] = Field(
        description=(
            "'click' an element from the snapshot, 'wait' for the page to settle "
            "when the directive is about loading, or 'none' when nothing fits"
        )
    )
    element_index: Optional[int] = Field(
        default=None, description="Snapshot index of the element to click"
    )
    reasoning: str = Field(default="", description="Short justification")


class ObservedElement(BaseModel):
    """A single observation returned by the observation agent."""

    description: str = Field(
        description="Description of the element including any visible text it carries"
    )
    element_index: Optional[int] = Field(
        default=None, description="Snapshot index of the element, when known"
    )


class ObservedElements(BaseModel):
    """Observation agent output."""

    elements: List[ObservedElement]
