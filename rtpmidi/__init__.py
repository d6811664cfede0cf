"""Encoding and decoding of RTP-MIDI (AppleMIDI) MIDI and clock sync packets."""

__version__ = "0.3.0"