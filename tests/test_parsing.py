"""Tests for the reasoning-output parser."""

from __future__ import annotations

from pydantic import BaseModel

from beamwatch.parsing import Parsed, ParseFailure, parse_json_payload


class _Payload(BaseModel):
    name: str
    score: int = 0


class TestParseJsonPayload:
    def test_plain_json(self):
        result = parse_json_payload('{"name": "Rival", "score": 7}', _Payload)
        assert isinstance(result, Parsed)
        assert result.value.name == "Rival"
        assert result.value.score == 7

    def test_json_wrapped_in_prose_and_fence(self):
        text = 'Sure! Here you go:\n```json\n{"name": "Rival"}\n```\nLet me know.'
        result = parse_json_payload(text, _Payload)
        assert isinstance(result, Parsed)
        assert result.value.name == "Rival"

    def test_prose_only_degrades(self):
        result = parse_json_payload("I could not find any competitors.", _Payload)
        assert isinstance(result, ParseFailure)
        assert "no JSON object" in result.reason

    def test_empty_text_degrades(self):
        assert isinstance(parse_json_payload("", _Payload), ParseFailure)

    def test_malformed_json_degrades(self):
        result = parse_json_payload('{"name": "Rival",, }', _Payload)
        assert isinstance(result, ParseFailure)
        assert result.reason.startswith("invalid JSON")

    def test_schema_mismatch_degrades(self):
        result = parse_json_payload('{"score": 3}', _Payload)
        assert isinstance(result, ParseFailure)
        assert result.reason.startswith("schema mismatch")
