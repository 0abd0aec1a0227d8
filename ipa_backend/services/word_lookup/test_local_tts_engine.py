"""
本地TTS引擎 - 单元测试（使用假的 pyttsx3 引擎）
"""

from types import SimpleNamespace

import pytest

from ipa_backend.models.word_models import Accent
from ipa_backend.services.word_lookup.local_tts_engine import LocalTTSEngine, select_voice

VOICES = [
    SimpleNamespace(id="fr", name="French", languages=[b"\x05fr"]),
    SimpleNamespace(id="gb", name="English (Great Britain)", languages=[b"\x05en-gb"]),
    SimpleNamespace(id="us", name="English (America)", languages=["en_US"]),
]


class FakeEngine:
    def __init__(self, voices):
        self.properties = {"voices": voices, "rate": 200, "voice": None}
        self.said = []
        self.stopped = False

    def getProperty(self, name):
        return self.properties[name]

    def setProperty(self, name, value):
        self.properties[name] = value

    def say(self, text):
        self.said.append(text)

    def runAndWait(self):
        pass

    def stop(self):
        self.stopped = True


def test_select_voice_matches_accent():
    assert select_voice(VOICES, Accent.UK).id == "gb"
    assert select_voice(VOICES, Accent.US).id == "us"


def test_select_voice_falls_back_to_default():
    assert select_voice(VOICES[:1], Accent.US) is None
    assert select_voice([], Accent.UK) is None


@pytest.mark.asyncio
async def test_speak_uses_matching_voice_and_slower_rate():
    engine = FakeEngine(VOICES)
    local_tts = LocalTTSEngine(engine_factory=lambda: engine)

    voice_id = await local_tts.speak("hello", Accent.UK)

    assert voice_id == "gb"
    assert engine.properties["voice"] == "gb"
    assert engine.properties["rate"] == 180
    assert engine.said == ["hello"]
    assert engine.stopped


@pytest.mark.asyncio
async def test_speak_without_matching_voice_uses_default():
    engine = FakeEngine(VOICES[:1])
    local_tts = LocalTTSEngine(engine_factory=lambda: engine)

    assert await local_tts.speak("hello", Accent.US) is None
    assert engine.properties["voice"] is None
    assert engine.said == ["hello"]
