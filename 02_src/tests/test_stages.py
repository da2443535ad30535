"""Tests for the stage transition heuristic."""

import pytest

from clinic_agent.dialogue.stages import STAGE_RULES, StageRule, next_stage
from clinic_agent.models import Stage, UserProfile


class TestGreetingTransitions:
    """Rules leaving the greeting stage."""

    def test_scheduling_keyword_moves_to_scheduling(self):
        stage = next_stage(
            Stage.GREETING, "Olá, gostaria de agendar uma consulta", "Claro!"
        )
        assert stage == Stage.SCHEDULING

    def test_price_keyword_moves_to_info_collection(self):
        stage = next_stage(Stage.GREETING, "quanto custa uma limpeza?", "R$ 150")
        assert stage == Stage.INFO_COLLECTION

    def test_scheduling_wins_over_price(self):
        """Table order decides when both keyword sets match."""
        stage = next_stage(Stage.GREETING, "Qual o valor para marcar?", "")
        assert stage == Stage.SCHEDULING

    def test_matching_is_case_insensitive(self):
        assert next_stage(Stage.GREETING, "QUERO MARCAR", "") == Stage.SCHEDULING
        assert next_stage(Stage.GREETING, "Qual o PREÇO?", "") == Stage.INFO_COLLECTION

    def test_assistant_text_is_ignored_for_user_rules(self):
        stage = next_stage(Stage.GREETING, "Bom dia", "Posso agendar uma consulta?")
        assert stage == Stage.GREETING


class TestInfoCollectionTransitions:
    """info_collection requires a known name."""

    def test_moves_to_scheduling_with_name(self):
        stage = next_stage(
            Stage.INFO_COLLECTION,
            "Quero agendar",
            "",
            UserProfile(contact="X", name="Maria"),
        )
        assert stage == Stage.SCHEDULING

    def test_stays_without_name(self):
        stage = next_stage(
            Stage.INFO_COLLECTION,
            "Quero agendar",
            "",
            UserProfile(contact="X"),
        )
        assert stage == Stage.INFO_COLLECTION

    def test_stays_without_profile(self):
        assert next_stage(Stage.INFO_COLLECTION, "Quero marcar", "") == Stage.INFO_COLLECTION

    def test_consulta_alone_does_not_advance(self):
        stage = next_stage(
            Stage.INFO_COLLECTION,
            "uma consulta",
            "",
            UserProfile(contact="X", name="Maria"),
        )
        assert stage == Stage.INFO_COLLECTION


class TestSchedulingTransitions:
    """scheduling advances on the assistant's confirmation."""

    def test_assistant_confirmation_moves_to_confirmation(self):
        stage = next_stage(
            Stage.SCHEDULING, "Terça às 14h", "Horário confirmado para terça às 14h."
        )
        assert stage == Stage.CONFIRMATION

    def test_user_saying_confirmado_does_not_advance(self):
        stage = next_stage(Stage.SCHEDULING, "confirmado", "Qual horário prefere?")
        assert stage == Stage.SCHEDULING


class TestTerminalStages:
    """confirmation and follow_up have no automatic egress."""

    @pytest.mark.parametrize("stage", [Stage.CONFIRMATION, Stage.FOLLOW_UP])
    def test_no_egress(self, stage):
        assert next_stage(stage, "quero agendar outra consulta", "agendado") == stage


class TestPurity:
    """next_stage is deterministic and side-effect free."""

    def test_no_match_keeps_stage(self):
        for stage in Stage:
            assert next_stage(stage, "bom dia", "bom dia") == stage

    def test_identical_inputs_identical_output(self):
        profile = UserProfile(contact="X", name="Maria")
        results = {
            next_stage(Stage.INFO_COLLECTION, "quero marcar", "ok", profile)
            for _ in range(20)
        }
        assert results == {Stage.SCHEDULING}
        assert profile == UserProfile(contact="X", name="Maria")

    def test_custom_rule_table(self):
        rules = (StageRule(Stage.CONFIRMATION, Stage.FOLLOW_UP, ("obrigado",)),)
        assert next_stage(Stage.CONFIRMATION, "Obrigado!", "", rules=rules) == Stage.FOLLOW_UP

    def test_default_table_order(self):
        assert [(r.from_stage, r.to_stage) for r in STAGE_RULES] == [
            (Stage.GREETING, Stage.SCHEDULING),
            (Stage.GREETING, Stage.INFO_COLLECTION),
            (Stage.INFO_COLLECTION, Stage.SCHEDULING),
            (Stage.SCHEDULING, Stage.CONFIRMATION),
        ]
