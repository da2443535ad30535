"""Structured prompt handed to the generation backends."""

from dataclasses import dataclass, field

from ..models import Stage, Turn, UserProfile

CURRENT_MESSAGE_SENTINEL = "MENSAGEM ATUAL DO PACIENTE:"
UNKNOWN_NAME = "Não informado"
CLOSING_INSTRUCTIONS = (
    "Por favor, responda de forma apropriada ao estágio atual da conversa "
    "e à mensagem do paciente.\n"
    "Lembre-se de ser cordial, profissional e proativo."
)

ROLE_LABELS = {"user": "Paciente", "assistant": "Assistente"}


def render_turns(turns: list[Turn]) -> str:
    """Render turns oldest-first as ``Label: text`` lines."""
    return "\n".join(f"{ROLE_LABELS[turn.role]}: {turn.text}" for turn in turns)


@dataclass
class PromptBundle:
    """Prompt parts kept separate so backends never parse text to split them.

    ``history`` is the session history including the current user turn, in
    arrival order. The rendered prompt lists every turn before the current
    one and then the current text under the sentinel.
    """

    persona: str
    stage: Stage
    guidance: str
    profile: UserProfile
    current_text: str
    history: list[Turn] = field(default_factory=list)

    @property
    def prior_history(self) -> list[Turn]:
        turns = self.history
        if turns and turns[-1].role == "user" and turns[-1].text == self.current_text:
            turns = turns[:-1]
        return turns

    @property
    def system_prompt(self) -> str:
        """Everything that precedes the current message."""
        sections = [
            self.persona.strip(),
            f"ESTÁGIO ATUAL DA CONVERSA: {self.stage.value}\n{self.guidance.strip()}".rstrip(),
            "DADOS DO USUÁRIO:\n"
            f"- Nome: {self.profile.name or UNKNOWN_NAME}\n"
            f"- Telefone: {self.profile.contact}",
        ]
        prior = self.prior_history
        if prior:
            sections.append(f"HISTÓRICO DA CONVERSA:\n{render_turns(prior)}")
        return "\n\n".join(sections)

    @property
    def rendered(self) -> str:
        """Full flattened prompt."""
        return (
            f"{self.system_prompt}\n\n"
            f"{CURRENT_MESSAGE_SENTINEL} {self.current_text}\n\n"
            f"{CLOSING_INSTRUCTIONS}"
        )

    def recent(self, window: int) -> list[Turn]:
        """Most recent ``window`` turns of the history."""
        if window <= 0:
            return []
        return self.history[-window:]
