"""Tests for prompt assembly used by generate and regenerate."""

from types import SimpleNamespace

import pytest

from personachat.core.errors import NoPriorUserMessage, NotFound
from personachat.services.assembler import (
    DEFAULT_SYSTEM_PROMPT,
    assemble_regeneration_prefix,
    build_generation_messages,
    build_system_prompt,
)


def character(**fields):
    base = dict(system_prompt=None, personality=None, backstory=None, custom_instructions=None)
    base.update(fields)
    return SimpleNamespace(**base)


def conversation(*turns):
    return [SimpleNamespace(id=i + 1, role=role, content=content) for i, (role, content) in enumerate(turns)]


class TestBuildSystemPrompt:
    def test_default_prompt_when_nothing_configured(self):
        assert build_system_prompt(character()) == DEFAULT_SYSTEM_PROMPT

    def test_sections_in_fixed_order(self):
        prompt = build_system_prompt(character(
            system_prompt="You are Iroh.",
            personality="Calm",
            backstory="Retired general",
            custom_instructions="Offer tea",
        ))
        assert prompt == (
            "You are Iroh.\n\n"
            "Personality:\nCalm\n\n"
            "Backstory:\nRetired general\n\n"
            "Additional Instructions:\nOffer tea"
        )

    def test_empty_sections_are_skipped(self):
        prompt = build_system_prompt(character(system_prompt="Base", personality="", backstory="Old"))
        assert prompt == "Base\n\nBackstory:\nOld"
        assert "Personality" not in prompt
        assert "Additional Instructions" not in prompt


class TestGenerationMessages:
    def test_system_first_then_full_history(self):
        msgs = conversation(("user", "hi"), ("assistant", "hello"), ("user", "how are you?"))
        result = build_generation_messages(character(system_prompt="S"), msgs)
        assert result == [
            {"role": "system", "content": "S"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "how are you?"},
        ]

    def test_empty_history(self):
        assert build_generation_messages(character(), []) == [{"role": "system", "content": DEFAULT_SYSTEM_PROMPT}]


class TestRegenerationPrefix:
    def test_prefix_ends_at_preceding_user_message(self):
        msgs = conversation(("user", "hi"), ("assistant", "hello"))
        prefix = assemble_regeneration_prefix(character(system_prompt="S"), msgs, target_id=2)
        assert prefix == [{"role": "system", "content": "S"}, {"role": "user", "content": "hi"}]

    def test_later_messages_are_excluded(self):
        msgs = conversation(
            ("user", "first"),
            ("assistant", "reply one"),
            ("user", "second"),
            ("assistant", "reply two"),
            ("user", "third"),
            ("assistant", "reply three"),
        )
        prefix = assemble_regeneration_prefix(character(), msgs, target_id=4)
        assert [m["content"] for m in prefix[1:]] == ["first", "reply one", "second"]

    def test_skips_back_over_consecutive_assistant_messages(self):
        msgs = conversation(("user", "q"), ("assistant", "a1"), ("assistant", "a2"))
        prefix = assemble_regeneration_prefix(character(), msgs, target_id=3)
        assert [m["content"] for m in prefix[1:]] == ["q"]

    def test_leading_assistant_message_has_no_prior_user(self):
        msgs = conversation(("assistant", "unsolicited greeting"))
        with pytest.raises(NoPriorUserMessage):
            assemble_regeneration_prefix(character(), msgs, target_id=1)

    def test_only_system_before_target_has_no_prior_user(self):
        msgs = conversation(("system", "note"), ("assistant", "greeting"), ("user", "later"))
        with pytest.raises(NoPriorUserMessage):
            assemble_regeneration_prefix(character(), msgs, target_id=2)

    def test_target_must_be_assistant(self):
        msgs = conversation(("user", "hi"), ("assistant", "hello"))
        with pytest.raises(NotFound):
            assemble_regeneration_prefix(character(), msgs, target_id=1)

    def test_unknown_target(self):
        msgs = conversation(("user", "hi"), ("assistant", "hello"))
        with pytest.raises(NotFound):
            assemble_regeneration_prefix(character(), msgs, target_id=99)

    def test_does_not_mutate_input(self):
        msgs = conversation(("user", "hi"), ("assistant", "hello"))
        assemble_regeneration_prefix(character(), msgs, target_id=2)
        assert [(m.role, m.content) for m in msgs] == [("user", "hi"), ("assistant", "hello")]
