# errors.py
"""
Recoverable failure kinds.

Both are terminal for the capability they describe, never for the process:
a missing drawing surface stops the animation before the first frame, a
missing microphone only removes audio influence for the session.
"""


class SurfaceUnavailableError(RuntimeError):
    """The window or its 2D drawing surface could not be acquired."""


class AudioUnavailableError(RuntimeError):
    """Microphone input is unsupported, denied, or failed to open."""
