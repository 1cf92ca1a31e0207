"""Sound effects backed by ``pygame.mixer``."""

from __future__ import annotations

import io
import logging
import math
import os
import wave
from array import array
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import pygame

from .game import SOUND_BOUNCE, SOUND_BRICK_HIT, SOUND_GAME_OVER, SilentAudio

logger = logging.getLogger(__name__)

SOUND_ENV_VAR = "BREAKOUT_SOUND_ROOT"

SOUND_FILES: Mapping[str, str] = {
    SOUND_BRICK_HIT: "jeej.wav",
    SOUND_BOUNCE: "boink.wav",
    SOUND_GAME_OVER: "aaww.wav",
}

# (frequency Hz, duration ms) used when a sound file is not available.
FALLBACK_TONES: Mapping[str, Tuple[int, int]] = {
    SOUND_BRICK_HIT: (880, 90),
    SOUND_BOUNCE: (440, 50),
    SOUND_GAME_OVER: (160, 600),
}

SAMPLE_RATE = 22050


def default_sound_root() -> Path:
    value = os.environ.get(SOUND_ENV_VAR)
    if value:
        return Path(value).expanduser()
    return Path(__file__).resolve().parent / "assets" / "sounds"


def synthesise_tone(
    frequency: int,
    duration_ms: int,
    *,
    volume: float = 0.4,
    sample_rate: int = SAMPLE_RATE,
) -> bytes:
    """Return a mono 16-bit WAV file containing a sine tone."""

    n_samples = int(sample_rate * duration_ms / 1000)
    amplitude = int(32767 * volume)
    samples = array("h")
    for i in range(n_samples):
        # Linear fade-out avoids a click at the end of the tone.
        envelope = 1.0 - i / max(n_samples, 1)
        value = math.sin(2 * math.pi * frequency * i / sample_rate)
        samples.append(int(amplitude * envelope * value))
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.tobytes())
    return buffer.getvalue()


class SoundBoard:
    """Fire-and-forget playback of the three game sounds.

    Every trigger rewinds the shared sound to its start. Overlapping triggers
    of the same sound within one frame simply restart it.
    """

    def __init__(self, sounds: Dict[str, "pygame.mixer.Sound"]):
        self.sounds = sounds

    @classmethod
    def load(cls, sound_root: Optional[Path] = None) -> "SoundBoard":
        root = Path(sound_root) if sound_root is not None else default_sound_root()
        sounds: Dict[str, pygame.mixer.Sound] = {}
        for sound_id, filename in SOUND_FILES.items():
            path = root / filename
            if path.exists():
                sounds[sound_id] = pygame.mixer.Sound(str(path))
            else:
                frequency, duration = FALLBACK_TONES[sound_id]
                logger.debug("%s not found, using a %d Hz tone", path, frequency)
                data = synthesise_tone(frequency, duration)
                sounds[sound_id] = pygame.mixer.Sound(file=io.BytesIO(data))
        return cls(sounds)

    def play(self, sound_id: str) -> None:
        sound = self.sounds[sound_id]
        sound.stop()
        sound.play()


def create_audio(*, enabled: bool = True, sound_root: Optional[Path] = None):
    """Return a :class:`SoundBoard`, or :class:`SilentAudio` if unavailable."""

    if not enabled:
        return SilentAudio()
    try:
        if pygame.mixer.get_init() is None:
            pygame.mixer.init(frequency=SAMPLE_RATE)
    except pygame.error as exc:
        logger.warning("Audio disabled, mixer could not start: %s", exc)
        return SilentAudio()
    return SoundBoard.load(sound_root)


__all__ = [
    "SOUND_ENV_VAR",
    "SilentAudio",
    "SoundBoard",
    "create_audio",
    "default_sound_root",
    "synthesise_tone",
]
