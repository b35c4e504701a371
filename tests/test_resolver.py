"""Tests for easy_hevc.resolver module."""

from unittest.mock import MagicMock, patch

from easy_hevc.models import (
    OversizedAction,
    OversizedAnswer,
    OversizedPolicy,
    ReconvertAnswer,
    ReconvertPolicy,
)
from easy_hevc.resolver import (
    ask_oversized,
    ask_reconvert,
    confirm,
    resolve_oversized,
    resolve_reconvert,
)


class TestConfirm:
    """Tests for confirm function."""

    def test_yes(self):
        with patch("builtins.input", return_value="y"):
            assert confirm("Proceed?") is True

    def test_full_words(self):
        with patch("builtins.input", return_value=" YES "):
            assert confirm("Proceed?") is True
        with patch("builtins.input", return_value="no"):
            assert confirm("Proceed?") is False

    def test_invalid_then_valid(self, capsys):
        with patch("builtins.input", side_effect=["", "maybe", "n"]):
            assert confirm("Proceed?") is False

        assert capsys.readouterr().out.count("Invalid input") == 2


class TestAskReconvert:
    """Tests for ask_reconvert prompt."""

    def test_lowercase_answers(self):
        with patch("builtins.input", return_value="y"):
            assert ask_reconvert("a.mkv") is ReconvertAnswer.YES
        with patch("builtins.input", return_value="n"):
            assert ask_reconvert("a.mkv") is ReconvertAnswer.NO

    def test_uppercase_means_all(self):
        with patch("builtins.input", return_value="A"):
            assert ask_reconvert("a.mkv") is ReconvertAnswer.YES_ALL
        with patch("builtins.input", return_value="N"):
            assert ask_reconvert("a.mkv") is ReconvertAnswer.NO_ALL

    def test_invalid_then_valid(self, capsys):
        with patch("builtins.input", side_effect=["x", "yes"]):
            assert ask_reconvert("a.mkv") is ReconvertAnswer.YES

        out = capsys.readouterr().out
        assert "a.mkv" in out
        assert "Invalid option" in out


class TestAskOversized:
    """Tests for ask_oversized prompt."""

    def test_answers(self):
        cases = {
            "y": OversizedAnswer.YES,
            "n": OversizedAnswer.NO,
            "s": OversizedAnswer.SKIP,
            "skip": OversizedAnswer.SKIP,
            "A": OversizedAnswer.YES_ALL,
            "N": OversizedAnswer.NO_ALL,
            "S": OversizedAnswer.SKIP_ALL,
        }
        for typed, expected in cases.items():
            with patch("builtins.input", return_value=typed):
                assert ask_oversized("a.mkv", 100, 200) is expected

    def test_shows_sizes(self, capsys):
        with patch("builtins.input", return_value="s"):
            ask_oversized("a.mkv", 1024, 2048)

        out = capsys.readouterr().out
        assert "1.0 KB" in out
        assert "2.0 KB" in out


class TestResolveReconvert:
    """Tests for resolve_reconvert function."""

    def test_ask_yes_keeps_asking(self):
        ask = MagicMock(return_value=ReconvertAnswer.YES)
        decision, policy = resolve_reconvert(ReconvertPolicy.ASK, "a.mkv", ask=ask)

        assert decision is True
        assert policy is ReconvertPolicy.ASK
        ask.assert_called_once_with("a.mkv")

    def test_ask_no(self):
        decision, policy = resolve_reconvert(
            ReconvertPolicy.ASK, "a.mkv", ask=lambda _: ReconvertAnswer.NO
        )
        assert decision is False
        assert policy is ReconvertPolicy.ASK

    def test_yes_all_escalates(self):
        decision, policy = resolve_reconvert(
            ReconvertPolicy.ASK, "a.mkv", ask=lambda _: ReconvertAnswer.YES_ALL
        )
        assert decision is True
        assert policy is ReconvertPolicy.ALWAYS

    def test_no_all_escalates(self):
        decision, policy = resolve_reconvert(
            ReconvertPolicy.ASK, "a.mkv", ask=lambda _: ReconvertAnswer.NO_ALL
        )
        assert decision is False
        assert policy is ReconvertPolicy.NEVER

    def test_memoized_policies_never_prompt(self):
        ask = MagicMock()

        assert resolve_reconvert(ReconvertPolicy.ALWAYS, "a.mkv", ask=ask) == (
            True, ReconvertPolicy.ALWAYS)
        assert resolve_reconvert(ReconvertPolicy.NEVER, "a.mkv", ask=ask) == (
            False, ReconvertPolicy.NEVER)
        ask.assert_not_called()

    def test_to_all_stops_further_prompts(self):
        answers = iter([ReconvertAnswer.NO_ALL])
        ask = MagicMock(side_effect=lambda _: next(answers))
        policy = ReconvertPolicy.ASK

        decisions = []
        for name in ("a.mkv", "b.mkv", "c.mkv"):
            decision, policy = resolve_reconvert(policy, name, ask=ask)
            decisions.append(decision)

        assert decisions == [False, False, False]
        assert ask.call_count == 1


class TestResolveOversized:
    """Tests for resolve_oversized function."""

    def test_answer_mapping(self):
        expected = {
            OversizedAnswer.YES: (OversizedAction.DELETE_CONVERTED, OversizedPolicy.ASK),
            OversizedAnswer.NO: (OversizedAction.DELETE_ORIGINAL, OversizedPolicy.ASK),
            OversizedAnswer.SKIP: (OversizedAction.SKIP, OversizedPolicy.ASK),
            OversizedAnswer.YES_ALL: (OversizedAction.DELETE_CONVERTED,
                                      OversizedPolicy.DELETE_CONVERTED),
            OversizedAnswer.NO_ALL: (OversizedAction.DELETE_ORIGINAL,
                                     OversizedPolicy.KEEP_CONVERTED),
            OversizedAnswer.SKIP_ALL: (OversizedAction.SKIP, OversizedPolicy.SKIP_ALL),
        }
        for answer, result in expected.items():
            got = resolve_oversized(OversizedPolicy.ASK, "a.mkv", 100, 110,
                                    ask=lambda *_, a=answer: a)
            assert got == result

    def test_memoized_policies_never_prompt(self):
        ask = MagicMock()

        assert resolve_oversized(OversizedPolicy.DELETE_CONVERTED, "a.mkv", 1, 2, ask=ask)[0] \
            is OversizedAction.DELETE_CONVERTED
        assert resolve_oversized(OversizedPolicy.KEEP_CONVERTED, "a.mkv", 1, 2, ask=ask)[0] \
            is OversizedAction.DELETE_ORIGINAL
        assert resolve_oversized(OversizedPolicy.SKIP_ALL, "a.mkv", 1, 2, ask=ask)[0] \
            is OversizedAction.SKIP
        ask.assert_not_called()

    def test_dry_run_skips_without_prompt(self):
        ask = MagicMock()

        action, policy = resolve_oversized(
            OversizedPolicy.DELETE_CONVERTED, "a.mkv", 100, 110, dry_run=True, ask=ask
        )

        assert action is OversizedAction.SKIP
        assert policy is OversizedPolicy.DELETE_CONVERTED
        ask.assert_not_called()

    def test_default_prompt_reads_input(self):
        with patch("builtins.input", return_value="y"):
            action, policy = resolve_oversized(OversizedPolicy.ASK, "a.mkv", 100, 110)

        assert action is OversizedAction.DELETE_CONVERTED
        assert policy is OversizedPolicy.ASK
