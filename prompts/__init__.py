"""
Prompt templates for Strategy Matrix.
"""

from prompts.prompt_score import SCORING_SYSTEM_PROMPT, SCORING_USER_TEMPLATE

__all__ = [
    "SCORING_SYSTEM_PROMPT",
    "SCORING_USER_TEMPLATE",
]
