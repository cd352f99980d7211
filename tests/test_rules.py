"""Unit tests for domain rules."""
from clinguard.domain.benchmarks import BENCHMARK_CASES, find_case
from clinguard.domain.models import Decision
from clinguard.domain.rules import (
    SUPPLEMENTAL_DELIMITER,
    compose_effective_note,
    format_supplemental_answers,
    image_seed,
    should_request_image,
)


class TestEffectiveNote:

    def test_no_history_returns_base_note(self):
        assert compose_effective_note("Base note.", []) == "Base note."
        assert compose_effective_note("Base note.", None) == "Base note."

    def test_history_is_appended_in_order(self):
        note = compose_effective_note("Base note.", ["Answer to Q1: 12", "Answer to Q2: none"])
        assert note == (
            "Base note.\n\n"
            f"{SUPPLEMENTAL_DELIMITER}\n"
            "Answer to Q1: 12\n"
            "Answer to Q2: none"
        )

    def test_delimiter_appears_once(self):
        note = compose_effective_note("Base note.", ["a", "b", "c"])
        assert note.count(SUPPLEMENTAL_DELIMITER) == 1


class TestSupplementalAnswers:

    def test_answers_are_numbered_from_one(self):
        entries = format_supplemental_answers({0: "WBC 9.1", 1: "No fever"})
        assert entries == ["Answer to Q1: WBC 9.1", "Answer to Q2: No fever"]

    def test_blank_answers_are_dropped(self):
        entries = format_supplemental_answers({0: "  ", 1: "", 2: "Yes"})
        assert entries == ["Answer to Q3: Yes"]

    def test_answers_follow_question_order(self):
        entries = format_supplemental_answers({2: "c", 0: "a"})
        assert entries == ["Answer to Q1: a", "Answer to Q3: c"]


class TestImageTrigger:

    def test_answer_always_triggers(self):
        assert should_request_image(Decision.ANSWER, "")

    def test_long_rationale_triggers_ask(self):
        assert should_request_image(Decision.ASK, "x" * 51)

    def test_short_rationale_does_not_trigger_ask(self):
        assert not should_request_image(Decision.ASK, "x" * 50)

    def test_seed_prefers_answer(self):
        assert image_seed("the answer", "the rationale") == "the answer"
        assert image_seed(None, "the rationale") == "the rationale"
        assert image_seed("", "the rationale") == "the rationale"

    def test_seed_is_truncated(self):
        assert len(image_seed("y" * 400, "r")) == 300


def test_benchmark_cases_lookup():
    assert len(BENCHMARK_CASES) == 3
    assert find_case("2").title == "Sepsis Screening"
    assert find_case("missing") is None
