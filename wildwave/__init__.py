"""Wavetable MIDI building blocks: patch configuration, resampling, voice mixing, options and errors."""

__version__ = "0.1.0"
__all__ = ["config", "errors", "library", "mixer", "options", "resample"]