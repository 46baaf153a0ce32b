"""
Soundify: rule-driven audio, speech and haptic feedback for interaction events.
"""

__version__ = "0.1.0"
