"""Canned home-repair guidance.

Stands in for a chat model: ``assistant.invoke(...)`` returns an ``AIMessage``
the same way a langchain chat model would, so a real model can replace it
without touching the handlers.
"""
import logging

from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from schemas import TaskCategory

logger = logging.getLogger(__name__)

GUIDES = {
    TaskCategory.PLUMBING: (
        "I can help you with that plumbing issue! Here's a step-by-step guide:\n\n"
        "1. **Safety First**: Turn off the water supply\n"
        "2. **Identify the problem**: Check for leaks or blockages\n"
        "3. **Gather tools**: You'll need basic plumbing tools\n"
        "4. **Follow the repair steps**: Detailed instructions based on your specific issue\n"
        "5. **Test the repair**: Turn water back on and check for leaks\n\n"
        "\U0001F4A1 **Pro Tip**: Take photos before disassembly to remember the order!"
    ),
    TaskCategory.CARPENTRY: (
        "Let me help you with this carpentry task! Here's what you need to do:\n\n"
        "1. **Measure twice, cut once**: Ensure accurate measurements\n"
        "2. **Safety gear**: Wear protective equipment\n"
        "3. **Tools needed**: Based on your specific task\n"
        "4. **Step-by-step process**: Detailed instructions\n"
        "5. **Finishing touches**: Sanding and finishing tips\n\n"
        "\U0001F528 **Pro Tip**: Use quality materials for lasting results!"
    ),
    TaskCategory.ELECTRICAL: (
        "⚠️ **Safety Warning**: If you're not comfortable with electrical work, "
        "please consult a professional.\n\n"
        "For basic electrical tasks:\n"
        "1. **Turn off power**: Always turn off the circuit breaker\n"
        "2. **Test circuits**: Use a voltage tester\n"
        "3. **Follow codes**: Ensure compliance with local electrical codes\n"
        "4. **Professional help**: Consider hiring an electrician for complex work"
    ),
}

FALLBACK = (
    "I'm here to help with your home task! Please provide more details about what "
    "you need assistance with, and I'll give you step-by-step guidance tailored to "
    "your specific situation."
)


def generate_response(description, category=None, image=None):
    """Guide for ``category``; the description and image are not inspected yet."""
    if not isinstance(category, str):
        return FALLBACK
    try:
        return GUIDES.get(TaskCategory(category), FALLBACK)
    except ValueError:
        return FALLBACK


def _respond(inputs):
    text = generate_response(
        inputs.get("description"), inputs.get("category"), inputs.get("image")
    )
    logger.debug(f"Generated guide for category={inputs.get('category')!r}")
    return AIMessage(content=text)


assistant = RunnableLambda(_respond)
