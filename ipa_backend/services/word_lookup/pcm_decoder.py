# -*- coding: utf-8 -*-
"""
PCM音频解码 - IPA Lookup V1.0

把 Gemini TTS 返回的 Base64 16-bit PCM 转成按声道存放的浮点采样，
并提供重新封装为 WAV 的方法供浏览器直接播放。
"""

import base64
import binascii
import io
import wave
from dataclasses import dataclass

import numpy as np

from ipa_backend.services.word_lookup.errors import MalformedResponse

PCM_SCALE = 32768.0


@dataclass
class AudioBuffer:
    """解码后的音频（channel_data 形状为 (声道数, 帧数)，float32）"""
    channel_data: np.ndarray
    sample_rate: int

    @property
    def number_of_channels(self) -> int:
        return self.channel_data.shape[0]

    @property
    def length(self) -> int:
        """每个声道的帧数"""
        return self.channel_data.shape[1]

    @property
    def duration(self) -> float:
        """时长（秒）"""
        return self.length / self.sample_rate

    def get_channel_data(self, channel: int) -> np.ndarray:
        return self.channel_data[channel]


def decode_base64(payload: str) -> bytes:
    """
    Base64 字符串转字节

    Raises:
        MalformedResponse: 不是合法的 Base64
    """
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedResponse(f"音频数据不是合法的Base64: {e}") from e


def decode_pcm(data: bytes, sample_rate: int, channels: int) -> AudioBuffer:
    """
    解码有符号 16-bit 小端交错 PCM

    采样率和声道数由调用方提供，不做校验或重采样。帧数 = 采样数 // 声道数，
    末尾不完整的帧（以及落单的字节）直接丢弃。

    Args:
        data: PCM 字节
        sample_rate: 采样率
        channels: 声道数

    Returns:
        AudioBuffer: 每个采样除以 32768.0，取值范围 [-1.0, 1.0)
    """
    if channels < 1:
        raise ValueError(f"channels must be >= 1, got {channels}")
    if sample_rate < 1:
        raise ValueError(f"sample_rate must be >= 1, got {sample_rate}")

    usable = len(data) - len(data) % 2
    if usable:
        samples = np.frombuffer(data, dtype="<i2", count=usable // 2)
    else:
        samples = np.zeros(0, dtype="<i2")

    frame_count = samples.size // channels
    interleaved = samples[:frame_count * channels].reshape(frame_count, channels)
    channel_data = np.ascontiguousarray(interleaved.T, dtype=np.float32) / np.float32(PCM_SCALE)
    return AudioBuffer(channel_data=channel_data, sample_rate=sample_rate)


def decode_base64_pcm(payload: str, sample_rate: int, channels: int) -> AudioBuffer:
    """Base64 PCM 一步解码"""
    return decode_pcm(decode_base64(payload), sample_rate, channels)


def encode_wav(buffer: AudioBuffer) -> bytes:
    """
    把解码后的音频重新量化为 16-bit PCM 并封装为 WAV

    Returns:
        bytes: WAV 文件内容
    """
    scaled = np.round(buffer.channel_data.astype(np.float64) * PCM_SCALE)
    pcm = np.clip(scaled, -32768, 32767).astype("<i2")
    # (声道, 帧) -> 交错
    interleaved = pcm.T.reshape(-1)

    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
        wav.setnchannels(buffer.number_of_channels)
        wav.setsampwidth(2)
        wav.setframerate(buffer.sample_rate)
        wav.writeframes(interleaved.tobytes())
    return out.getvalue()
