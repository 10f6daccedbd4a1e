import asyncio

import pytest
from pydantic_ai import Agent
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from transcripts_machine.components.page_automation.schemas import ObservedElement
from transcripts_machine.components.transcript_extractor import structurer
from transcripts_machine.components.transcript_extractor.schemas import StructuredTranscript
from transcripts_machine.components.transcript_extractor.structurer import (
    build_structuring_prompt,
    structure_transcript,
)
from transcripts_machine.core.errors import StructuringError

OBSERVATIONS = [
    ObservedElement(description="0:05 Welcome back to the channel", element_index=3),
    ObservedElement(description="1:10 Let's get started", element_index=4),
]


def _use_model(monkeypatch, model):
    def build():
        return Agent(model, output_type=StructuredTranscript, retries=3)

    monkeypatch.setattr(structurer, "_build_structuring_agent", build)


def test_prompt_embeds_every_fragment():
    prompt = build_structuring_prompt(OBSERVATIONS)

    assert prompt.startswith("Give JSON of all transcript entries")
    assert "MM:SS format ONLY" in prompt
    assert "0:05 Welcome back to the channel" in prompt
    assert "1:10 Let's get started" in prompt


def test_structures_observations(monkeypatch):
    _use_model(
        monkeypatch,
        TestModel(
            custom_output_args={
                "transcripts": [
                    {"text": "Welcome back to the channel", "timestamp": "00:05"},
                    {"text": "Let's get started", "timestamp": "01:10"},
                ]
            }
        ),
    )

    segments = asyncio.run(structure_transcript(OBSERVATIONS))

    assert [segment.timestamp for segment in segments] == ["00:05", "01:10"]
    assert segments[0].text == "Welcome back to the channel"


def test_out_of_order_output_is_resorted(monkeypatch):
    _use_model(
        monkeypatch,
        TestModel(
            custom_output_args={
                "transcripts": [
                    {"text": "second", "timestamp": "01:10"},
                    {"text": "first", "timestamp": "00:05"},
                    {"text": "third", "timestamp": "1:00:00"},
                ]
            }
        ),
    )

    segments = asyncio.run(structure_transcript(OBSERVATIONS))

    assert [segment.text for segment in segments] == ["first", "second", "third"]


def test_empty_output_is_an_error(monkeypatch):
    _use_model(monkeypatch, TestModel(custom_output_args={"transcripts": []}))

    with pytest.raises(StructuringError, match="empty"):
        asyncio.run(structure_transcript(OBSERVATIONS))


def test_schema_violations_become_structuring_errors(monkeypatch):
    _use_model(
        monkeypatch,
        TestModel(
            custom_output_args={"transcripts": [{"text": "hello", "timestamp": "five past"}]}
        ),
    )

    with pytest.raises(StructuringError):
        asyncio.run(structure_transcript(OBSERVATIONS))


def test_text_instead_of_structured_output_fails(monkeypatch):
    def chatty(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart("Here is the transcript you asked for!")])

    _use_model(monkeypatch, FunctionModel(chatty))

    with pytest.raises(StructuringError):
        asyncio.run(structure_transcript(OBSERVATIONS))


def test_nothing_observed_skips_the_model(monkeypatch):
    def build():
        raise AssertionError("the model must not be called")

    monkeypatch.setattr(structurer, "_build_structuring_agent", build)

    with pytest.raises(StructuringError, match="No transcript text"):
        asyncio.run(structure_transcript([]))
