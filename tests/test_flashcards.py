"""Tests for flashcard generation and multiple-choice options."""

import asyncio
import json

import pytest

from app.core.exceptions import InvalidInputError, MalformedAIResponseError
from app.services.flashcard_service import (
    FlashcardRequest,
    build_flashcard_prompt,
    generate_flashcards,
    generate_options,
    parse_flashcards,
)


CARDS_REPLY = json.dumps({"flashcards": [
    {"question": "What is a derivative?", "answer": "The instantaneous rate of change."},
    {"question": "What is an integral?", "answer": "The accumulated area under a curve."},
]})


# ── Prompt ───────────────────────────────────────────────────


class TestFlashcardPrompt:
    def test_only_supplied_sections(self):
        prompt = build_flashcard_prompt(FlashcardRequest(topic="Photosynthesis"))

        assert "Photosynthesis" in prompt
        assert "for the class" not in prompt
        assert "chat history" not in prompt.lower()
        assert '{"flashcards"' in prompt

    def test_all_sections(self):
        prompt = build_flashcard_prompt(FlashcardRequest(
            class_name="BIO 110",
            chat_history="Student: what is ATP?",
            topic="Cell energy",
            context="Mitochondria produce ATP.",
        ))

        assert "BIO 110" in prompt
        assert "what is ATP?" in prompt
        assert "Cell energy" in prompt
        assert "Mitochondria produce ATP." in prompt


# ── Reply parsing ────────────────────────────────────────────


class TestParseFlashcards:
    def test_fenced_reply(self):
        cards = parse_flashcards(f"```json\n{CARDS_REPLY}\n```")
        assert [c.question for c in cards] == ["What is a derivative?", "What is an integral?"]

    @pytest.mark.parametrize("reply", [
        "Sorry, I can't do that.",
        json.dumps({"cards": []}),
        json.dumps({"flashcards": []}),
        json.dumps({"flashcards": [{"question": "Q only"}]}),
        json.dumps({"flashcards": ["not an object"]}),
    ])
    def test_malformed(self, reply):
        with pytest.raises(MalformedAIResponseError) as exc_info:
            parse_flashcards(reply)
        assert exc_info.value.message in ("Failed to parse flashcards response", "AI response was not valid JSON")


class TestGenerateFlashcards:
    def test_no_input(self, install_providers, fake_provider):
        primary = fake_provider("anthropic", reply=CARDS_REPLY)
        install_providers(primary)

        with pytest.raises(InvalidInputError):
            asyncio.run(generate_flashcards(FlashcardRequest(class_name=" ", topic="")))
        assert primary.calls == []

    def test_cards_in_order(self, install_providers, fake_provider):
        install_providers(fake_provider("anthropic", reply=CARDS_REPLY))

        cards = asyncio.run(generate_flashcards(FlashcardRequest(class_name="Calculus I")))
        assert [c.answer for c in cards] == [
            "The instantaneous rate of change.",
            "The accumulated area under a curve.",
        ]


# ── Options ──────────────────────────────────────────────────


class TestGenerateOptions:
    def test_four_options(self, install_providers, fake_provider):
        install_providers(fake_provider("anthropic", reply='["Paris", "Lyon", "Nice", "Lille"]'))

        options = asyncio.run(generate_options("Capital of France?", "Paris"))
        assert options == ["Paris", "Lyon", "Nice", "Lille"]

    def test_correct_answer_is_inserted(self, install_providers, fake_provider):
        install_providers(fake_provider("anthropic", reply='["Lyon", "Nice", "Lille", "Metz"]'))

        options = asyncio.run(generate_options("Capital of France?", "Paris"))
        assert len(options) == 4
        assert "Paris" in options

    @pytest.mark.parametrize("reply", ["no json here", '["only", "three", "options"]', '{"a": 1}'])
    def test_unparseable_reply_uses_placeholders(self, install_providers, fake_provider, reply):
        install_providers(fake_provider("anthropic", reply=reply))

        options = asyncio.run(generate_options("Capital of France?", "Paris"))
        assert options == ["Paris", "Option B", "Option C", "Option D"]

    def test_missing_answer(self):
        with pytest.raises(InvalidInputError):
            asyncio.run(generate_options("Capital of France?", ""))


# ── Endpoints ────────────────────────────────────────────────


class TestFlashcardEndpoints:
    def test_generate(self, client, install_providers, fake_provider):
        primary = fake_provider("anthropic", reply=CARDS_REPLY)
        install_providers(primary)

        resp = client.post("/api/flashcards/generate", json={
            "className": "Calculus I",
            "chatHistory": "Student: explain derivatives",
        })

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert len(resp.json()["flashcards"]) == 2
        assert "Calculus I" in primary.calls[0]["prompt"]

    def test_generate_without_input(self, client):
        resp = client.post("/api/flashcards/generate", json={})
        assert resp.status_code == 400

    def test_generate_malformed_reply(self, client, install_providers, fake_provider):
        install_providers(fake_provider("anthropic", reply="not json"))

        resp = client.post("/api/flashcards/generate", json={"topic": "Limits"})
        assert resp.status_code == 500
        assert resp.json()["success"] is False

    def test_generate_ai_down(self, client, install_providers, fake_provider):
        install_providers(fake_provider("anthropic", error="down"), fake_provider("openai", error="down"))

        resp = client.post("/api/flashcards/generate", json={"topic": "Limits"})
        assert resp.status_code == 503

    def test_options(self, client, install_providers, fake_provider):
        install_providers(fake_provider("anthropic", reply='["4", "3", "5", "22"]'))

        resp = client.post("/api/flashcards/options", json={"question": "2 + 2?", "correctAnswer": "4"})
        assert resp.status_code == 200
        assert resp.json()["options"] == ["4", "3", "5", "22"]
