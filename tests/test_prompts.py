"""Tests for the prompt templates."""

from __future__ import annotations

from sheetchat.prompts import build_analysis_prompt, build_voice_prompt


class TestAnalysisPrompt:
    def test_contains_context_and_question(self) -> None:
        prompt = build_analysis_prompt("DATASET", "What is the top city?")
        assert "\n\nDATASET\n\n" in prompt
        assert "User Question: What is the top city?" in prompt
        assert prompt.startswith("You are an expert data analyst")

    def test_braces_in_context_kept(self) -> None:
        prompt = build_analysis_prompt("{not a field}", "q")
        assert "{not a field}" in prompt


class TestVoicePrompt:
    def test_word_limit(self) -> None:
        prompt = build_voice_prompt("DATASET", "how many?")
        assert "Keep it under 150 words" in prompt
        assert "User Query: how many?" in prompt

    def test_custom_word_limit(self) -> None:
        assert "under 40 words" in build_voice_prompt("D", "q", word_limit=40)
