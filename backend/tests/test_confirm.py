"""Tests for the confirmation boundary."""

import pytest

from notary.services.confirm import always, ask_confirm, is_affirmative


class TestIsAffirmative:
    @pytest.mark.parametrize("answer", ["y", "Y", "yes", "YES", "Yes", " yes\n"])
    def test_affirmative(self, answer):
        assert is_affirmative(answer) is True

    @pytest.mark.parametrize("answer", ["", "n", "no", "yep", "yes please", "ye", None])
    def test_negative(self, answer):
        assert is_affirmative(answer) is False


class TestAskConfirm:
    """Tests for ask_confirm."""

    def test_prompt_is_shown(self):
        """Test that the prompt is passed to the reader."""
        prompts = []

        def read(prompt):
            prompts.append(prompt)
            return "yes"

        assert ask_confirm("Trust it?", read=read) is True
        assert prompts == ["Trust it? (yes/no) "]

    def test_negative_answer(self):
        assert ask_confirm("Trust it?", read=lambda p: "no") is False

    @pytest.mark.parametrize("error", [EOFError, OSError])
    def test_read_error_is_negative(self, error):
        """Test that read errors count as 'no'."""

        def read(prompt):
            raise error()

        assert ask_confirm("Trust it?", read=read) is False


def test_always():
    assert always(True)("anything") is True
    assert always(False)("anything") is False
