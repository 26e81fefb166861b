from fastapi import APIRouter

from psychocalc.calculators.enums import ToolId
from psychocalc.core.config import get_settings
from psychocalc.core.metrics import count_calls
from psychocalc.schemas.help import FaqOut, HelpAnswerOut, HelpQuestionIn, ToolHelpOut
from psychocalc.services.help_assistant import answer, get_tool_help

router = APIRouter(prefix="/help", tags=["help"])


@router.get("/{tool}", response_model=ToolHelpOut)
@count_calls("help.overview")
def tool_help(tool: ToolId) -> ToolHelpOut:
    settings = get_settings()
    content = get_tool_help(tool, settings.locale)
    return ToolHelpOut(
        tool=tool,
        welcome=content.welcome,
        context=content.context,
        faqs=[FaqOut(question=faq.question, answer=faq.answer) for faq in content.faqs],
        ai_enabled=settings.help_ai_enabled,
    )


@router.post("/{tool}/ask", response_model=HelpAnswerOut)
def ask(tool: ToolId, payload: HelpQuestionIn) -> HelpAnswerOut:
    result = answer(tool, payload.question)
    return HelpAnswerOut(tool=result.tool, answer=result.answer, source=result.source)
