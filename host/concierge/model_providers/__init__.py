"""
Model provider and speech capability implementations
"""

from .base import (
    ChatCompletionProvider,
    SpeechRecognizer,
    SpeechSynthesizer,
    RecognitionCallbacks,
    UtteranceCallbacks,
    SpeechOptions,
    Voice,
)

from .factory import ModelProviderFactory

__all__ = [
    'ChatCompletionProvider',
    'SpeechRecognizer',
    'SpeechSynthesizer',
    'RecognitionCallbacks',
    'UtteranceCallbacks',
    'SpeechOptions',
    'Voice',
    'ModelProviderFactory'
]
