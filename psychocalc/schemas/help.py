from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from psychocalc.calculators.enums import ToolId

__all__ = ["FaqOut", "ToolHelpOut", "HelpQuestionIn", "HelpAnswerOut"]


class FaqOut(BaseModel):
    question: str
    answer: str


class ToolHelpOut(BaseModel):
    tool: ToolId
    welcome: str
    context: str
    faqs: List[FaqOut]
    ai_enabled: bool


class HelpQuestionIn(BaseModel):
    question: str = Field(max_length=2000)


class HelpAnswerOut(BaseModel):
    tool: ToolId
    answer: str
    source: str
