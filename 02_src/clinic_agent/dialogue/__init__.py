"""Dialogue module."""

from .controller import DialogueController, IDialogueController
from .stages import STAGE_RULES, StageRule, next_stage
from .templates import PromptTemplates

__all__ = [
    "DialogueController",
    "IDialogueController",
    "PromptTemplates",
    "STAGE_RULES",
    "StageRule",
    "next_stage",
]
