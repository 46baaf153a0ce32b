"""
Text-to-Speech synthesis using Kokoro.

speak() only enqueues text; a daemon worker synthesizes it and routes the
audio through the AudioManager's speech lane, so callers never wait on
the model.
"""

from __future__ import annotations

import queue
import threading
import warnings
from typing import TYPE_CHECKING

from kokoro import KPipeline

from core.errors import ConfigurationError
from core.services import SpeechService

if TYPE_CHECKING:
    from audio.manager import AudioManager

# Kokoro language codes
LANGUAGE_CODES = {
    "en-US": "a",
    "en-GB": "b",
}

_STOP = object()


class KokoroVoice:
    def __init__(self, lang_code, voice):
        self.voice = voice
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=UserWarning, module="torch")
            warnings.filterwarnings("ignore", category=FutureWarning, module="torch")
            self.pipeline = KPipeline(lang_code=lang_code, repo_id="hexgrad/Kokoro-82M")
        self.sample_rate = 24000

    def synthesize(self, text):
        """Generator that yields audio chunks for the given text and voice"""
        for _, _, audio in self.pipeline(text, voice=self.voice):
            yield audio


def load_voice(language="en-US", voice="af_heart"):
    if language not in LANGUAGE_CODES:
        raise ConfigurationError(f"Unsupported speech language: {language}")
    return KokoroVoice(LANGUAGE_CODES[language], voice)


class KokoroSpeech(SpeechService):
    """
    Queued, fire-and-forget speech.

    Utterances play in the order they were requested. stop() drops anything
    still queued and cuts off the current utterance.
    """

    def __init__(
        self,
        audio_manager: AudioManager,
        language: str = "en-US",
        voice: str = "af_heart",
        voice_obj: KokoroVoice | None = None,
    ):
        """
        Initialize the speech service and start its worker.

        Args:
            audio_manager: AudioManager whose speech lane receives the audio
            language: Fixed speech language ("en-US" or "en-GB")
            voice: Kokoro voice name
            voice_obj: Already loaded voice (loaded from language/voice if not provided)
        """
        self._language = language
        self._voice = voice_obj or load_voice(language, voice)
        self._audio_manager = audio_manager

        self._requests: queue.Queue = queue.Queue()
        self._generation = 0
        self._generation_lock = threading.Lock()
        self._thread = threading.Thread(target=self._worker, daemon=True)
        self._thread.start()

    @property
    def language(self) -> str:
        return self._language

    def speak(self, text: str) -> None:
        if not text.strip():
            return
        with self._generation_lock:
            self._requests.put((self._generation, text))

    def stop(self) -> None:
        with self._generation_lock:
            self._generation += 1
        self._audio_manager.stop_current()

    def _is_stale(self, generation: int) -> bool:
        with self._generation_lock:
            return generation != self._generation

    def _worker(self) -> None:
        while True:
            item = self._requests.get()
            if item is _STOP:
                return
            generation, text = item
            if self._is_stale(generation):
                continue
            try:
                for chunk in self._voice.synthesize(text):
                    # stop() bumps the generation under this lock, so no chunk lands after it
                    with self._generation_lock:
                        if generation != self._generation:
                            break
                        self._audio_manager.queue_audio(chunk, self._voice.sample_rate)
            except Exception as e:
                print(f"⚠️ Speech synthesis failed: {e}")

    def cleanup(self) -> None:
        """Stop speaking and shut the worker down."""
        self.stop()
        self._requests.put(_STOP)
        self._thread.join(timeout=1.0)
