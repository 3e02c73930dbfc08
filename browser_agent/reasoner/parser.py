"""
Turns free-form assistant text into a single ``ReasoningStep``.

Markers are matched byte-exact; the model is told to emit them verbatim.
"""
from __future__ import annotations

import re

from browser_agent.models import Action, FinalAnswer, ReasoningStep, Thought, Unparseable

FINAL_ANSWER_MARKER = "Final Answer:"
ACTION_MARKER = "Action:"
THOUGHT_MARKER = "Thought:"

_ACTION_PATTERN = re.compile(r"Action: ([A-Za-z_][A-Za-z0-9_]*)(?:\((.*?)\))?")


def parse(text: str) -> ReasoningStep:
    """Return the directive the loop should act on.

    A final answer wins over any action in the same message and keeps
    everything after its marker. Otherwise the last action is used.
    """
    final_at = text.find(FINAL_ANSWER_MARKER)
    if final_at != -1:
        return FinalAnswer(text[final_at + len(FINAL_ANSWER_MARKER):].strip())

    actions = list(_ACTION_PATTERN.finditer(text))
    if actions:
        match = actions[-1]
        argument = match.group(2)
        if argument is not None:
            argument = argument.strip() or None
        return Action(tool_name=match.group(1), argument=argument)

    thought_at = text.rfind(THOUGHT_MARKER)
    if thought_at != -1:
        return Thought(text[thought_at + len(THOUGHT_MARKER):].strip())

    return Unparseable(text)


def render(step: ReasoningStep) -> str:
    """Canonical text for a step, in the format ``parse`` accepts."""
    if isinstance(step, FinalAnswer):
        return f"{FINAL_ANSWER_MARKER} {step.text}"
    if isinstance(step, Action):
        if step.argument:
            return f"{ACTION_MARKER} {step.tool_name}({step.argument})"
        return f"{ACTION_MARKER} {step.tool_name}"
    if isinstance(step, Thought):
        return f"{THOUGHT_MARKER} {step.text}"
    return step.raw_text
