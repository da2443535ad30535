"""Keyword heuristic that advances the conversation stage.

This is an approximation, not an intent classifier. Rules are evaluated in
table order and the first match wins; no match keeps the current stage.
"""

from dataclasses import dataclass
from typing import Literal

from ..models import Stage, UserProfile


@dataclass(frozen=True)
class StageRule:
    """One row of the transition table."""

    from_stage: Stage
    to_stage: Stage
    keywords: tuple[str, ...]
    source: Literal["user", "assistant"] = "user"
    requires_name: bool = False

    def matches(
        self,
        user_text: str,
        assistant_text: str,
        profile: UserProfile | None,
    ) -> bool:
        if self.requires_name and not (profile and profile.name):
            return False
        haystack = (user_text if self.source == "user" else assistant_text).lower()
        return any(keyword in haystack for keyword in self.keywords)


STAGE_RULES: tuple[StageRule, ...] = (
    StageRule(Stage.GREETING, Stage.SCHEDULING, ("agendar", "consulta", "marcar")),
    StageRule(Stage.GREETING, Stage.INFO_COLLECTION, ("valor", "preço", "quanto")),
    StageRule(
        Stage.INFO_COLLECTION,
        Stage.SCHEDULING,
        ("agendar", "marcar"),
        requires_name=True,
    ),
    StageRule(
        Stage.SCHEDULING,
        Stage.CONFIRMATION,
        ("agendado", "confirmado"),
        source="assistant",
    ),
)


def next_stage(
    current: Stage,
    user_text: str,
    assistant_text: str,
    profile: UserProfile | None = None,
    rules: tuple[StageRule, ...] = STAGE_RULES,
) -> Stage:
    """Compute the stage that follows a completed turn."""
    for rule in rules:
        if rule.from_stage == current and rule.matches(user_text, assistant_text, profile):
            return rule.to_stage
    return current
