"""
Gemini单词查询Agent和TTS客户端 - 单元测试（httpx.MockTransport）
"""

import json

import httpx
import pytest

from ipa_backend.models.word_models import Accent
from ipa_backend.services.word_lookup.errors import (
    MalformedResponse,
    ServiceUnavailable,
    SynthesisFailed,
    WordNotFound,
)
from ipa_backend.services.word_lookup.gemini_api import GeminiAPI, parse_json_text
from ipa_backend.services.word_lookup.gemini_tts_client import GeminiTTSClient
from ipa_backend.services.word_lookup.gemini_word_agent import GeminiWordAgent

WORD_JSON = {
    "word": "resume",
    "ipa_us": "/rɪˈzuːm/",
    "ipa_uk": "/rɪˈzjuːm/",
    "definition": "To begin again.",
    "example": "Work will resume tomorrow.",
    "partsOfSpeech": ["verb"],
}


def text_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_api(handler, requests=None):
    def recording_handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    return GeminiAPI(api_key="test-key", base_url="https://gemini.test/v1beta",
                     transport=httpx.MockTransport(recording_handler))


@pytest.mark.asyncio
async def test_lookup_word_parses_details():
    requests = []
    api = make_api(lambda r: httpx.Response(200, json=text_response(json.dumps(WORD_JSON))), requests)
    agent = GeminiWordAgent(api, model="text-model")

    details = await agent.lookup_word(" resume ")

    assert details.word == "resume"
    assert details.parts_of_speech == ["verb"]
    request = requests[0]
    assert request.url.path == "/v1beta/models/text-model:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert '"resume"' in body["contents"][0]["parts"][0]["text"]
    assert body["generationConfig"]["responseMimeType"] == "application/json"


@pytest.mark.asyncio
async def test_lookup_word_strips_markdown_fence():
    fenced = "```json\n" + json.dumps(WORD_JSON) + "\n```"
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json=text_response(fenced))))

    details = await agent.lookup_word("resume")

    assert details.ipa_uk == "/rɪˈzjuːm/"


@pytest.mark.asyncio
async def test_lookup_word_empty_object_is_not_found():
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json=text_response("{}"))))

    with pytest.raises(WordNotFound):
        await agent.lookup_word("qwzx")


@pytest.mark.asyncio
async def test_lookup_word_missing_fields_is_malformed():
    partial = {"word": "resume", "ipa_us": "/x/"}
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json=text_response(json.dumps(partial)))))

    with pytest.raises(MalformedResponse):
        await agent.lookup_word("resume")


@pytest.mark.asyncio
async def test_lookup_word_no_candidates_is_malformed():
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json={"candidates": []})))

    with pytest.raises(MalformedResponse):
        await agent.lookup_word("resume")


@pytest.mark.asyncio
async def test_http_error_is_service_unavailable():
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(500, text="internal")))

    with pytest.raises(ServiceUnavailable):
        await agent.lookup_word("resume")


@pytest.mark.asyncio
async def test_network_error_is_service_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    agent = GeminiWordAgent(make_api(handler))

    with pytest.raises(ServiceUnavailable):
        await agent.lookup_word("resume")


@pytest.mark.asyncio
async def test_missing_api_key_is_service_unavailable():
    agent = GeminiWordAgent(GeminiAPI(api_key=""))

    with pytest.raises(ServiceUnavailable):
        await agent.lookup_word("resume")


@pytest.mark.asyncio
async def test_suggest_words_caps_at_five():
    words = ["help", "hello", "helmet", "helium", "helix", "helpful", 3, ""]
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json=text_response(json.dumps(words)))))

    assert await agent.suggest_words("hel") == ["help", "hello", "helmet", "helium", "helix"]


@pytest.mark.asyncio
async def test_transcribe_paragraph_keeps_order():
    tokens = [{"original": "Hello", "ipa": "/həˈloʊ/"}, {"original": "world", "ipa": "/wɝːld/"}]
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json=text_response(json.dumps(tokens)))))

    result = await agent.transcribe_paragraph("Hello world")

    assert [(t.original, t.ipa) for t in result] == [("Hello", "/həˈloʊ/"), ("world", "/wɝːld/")]


@pytest.mark.asyncio
async def test_transcribe_paragraph_rejects_object():
    agent = GeminiWordAgent(make_api(lambda r: httpx.Response(200, json=text_response('{"a": 1}'))))

    with pytest.raises(MalformedResponse):
        await agent.transcribe_paragraph("Hello")


def test_parse_json_text_errors():
    with pytest.raises(MalformedResponse):
        parse_json_text("")
    with pytest.raises(MalformedResponse):
        parse_json_text("not json")


@pytest.mark.asyncio
async def test_tts_returns_inline_audio_with_accent_voice():
    requests = []
    audio = {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "audio/L16", "data": "AAAA"}}]}}]}
    client = GeminiTTSClient(make_api(lambda r: httpx.Response(200, json=audio), requests), model="tts-model")

    assert await client.synthesize("hello", Accent.UK) == "AAAA"

    body = json.loads(requests[0].content)
    voice = body["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"]
    assert voice == "Puck"
    assert body["generationConfig"]["responseModalities"] == ["AUDIO"]
    assert requests[0].url.path.endswith("/models/tts-model:generateContent")


@pytest.mark.asyncio
async def test_tts_without_audio_raises_synthesis_failed():
    client = GeminiTTSClient(make_api(lambda r: httpx.Response(200, json=text_response("sorry"))))

    with pytest.raises(SynthesisFailed):
        await client.synthesize("hello", Accent.US)


def test_tts_voice_overrides():
    client = GeminiTTSClient(GeminiAPI(api_key="k"), voices={"us": "Aoede"})

    assert client.voices[Accent.US] == "Aoede"
    assert client.voices[Accent.UK] == "Puck"
