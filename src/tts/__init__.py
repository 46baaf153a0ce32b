from .tts import LANGUAGE_CODES, KokoroSpeech, KokoroVoice, load_voice

__all__ = ["load_voice", "KokoroSpeech", "KokoroVoice", "LANGUAGE_CODES"]
