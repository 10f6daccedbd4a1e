import logging
from typing import Sequence

from pydantic_ai import Agent

from transcripts_machine.components.page_automation.schemas import (
    ActDecision,
    ObservedElements,
    PageElement,
)
from transcripts_machine.models.config import PAGE_ACTION_MODEL
from transcripts_machine.models.llm import get_model

_logger = logging.getLogger(__name__)


def _build_act_agent() -> Agent:
    """Agent that maps a natural-language directive onto one page action."""
    return Agent(
        model=get_model(PAGE_ACTION_MODEL),
        output_type=ActDecision,  # type: ignore[arg-type]
        retries=2,
        system_prompt="""
        You operate a web browser for a user. You receive a directive and a numbered
        snapshot of the visible interactive elements on the current page.

        Decide on exactly one action:
        - click: choose the element whose text, label, id or classes best match the directive.
          Return its index as element_index.
        - wait: the directive asks to wait for something to load and no click is needed.
        - none: no element in the snapshot can accomplish the directive.

        Prefer elements whose visible text matches the directive literally
        (e.g. "Show transcript", "...more"). Never invent an index that is not in the snapshot.
        """,
    )


def _build_observe_agent() -> Agent:
    """Agent that picks out the page elements relevant to an observation instruction."""
    return Agent(
        model=get_model(PAGE_ACTION_MODEL),
        output_type=ObservedElements,  # type: ignore[arg-type]
        retries=2,
        system_prompt="""
        You inspect a numbered snapshot of the text-bearing elements of a web page and
        return the elements relevant to the user's instruction, in page order.

        For each relevant element write a description that carries all of its visible
        text verbatim (timestamps, captions, labels). Do not summarise, merge or
        drop elements, and do not invent text that is not in the snapshot.
        The snapshot may be one consecutive part of a longer page; handle only the
        elements it shows. Return an empty list when nothing matches.
        """,
    )


def render_snapshot(elements: Sequence[PageElement]) -> str:
    """Render a page snapshot as one line per element for an agent prompt."""
    lines = []
    for element in elements:
        attributes = [f"<{element.tag}>"]
        if element.element_id:
            attributes.append(f"id={element.element_id}")
        if element.classes:
            attributes.append(f"class={element.classes}")
        if element.label:
            attributes.append(f"label={element.label!r}")
        lines.append(f"[{element.index}] {' '.join(attributes)} {element.text}".rstrip())
    return "\n".join(lines)


async def decide_action(instruction: str, elements: Sequence[PageElement]) -> ActDecision:
    """Ask the action agent which element (if any) fulfils the directive."""
    agent = _build_act_agent()
    result = await agent.run(
        f"Directive: {instruction}\n\nPage snapshot:\n{render_snapshot(elements)}"
    )
    decision = result.output
    _logger.info(
        "Act '%s' -> %s %s (%s)",
        instruction,
        decision.action,
        decision.element_index,
        decision.reasoning,
    )
    return decision


async def observe_elements(
    instruction: str, elements: Sequence[PageElement]
) -> ObservedElements:
    """Ask the observation agent for the elements matching the instruction."""
    agent = _build_observe_agent()
    result = await agent.run(
        f"Instruction: {instruction}\n\nPage snapshot:\n{render_snapshot(elements)}"
    )
    _logger.info(
        "Observe '%s' -> %d elements", instruction, len(result.output.elements)
    )
    return result.output
