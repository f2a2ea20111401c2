# audio.py
"""
Microphone loudness as a single per-frame scalar.

The analyser maths mirror a browser AnalyserNode: a Blackman-windowed FFT of
one block, temporal smoothing of the magnitudes, conversion to decibels and
a linear map of [min_db, max_db] onto bytes 0..255. The scalar handed to the
animation is the mean of those bytes.
"""
import logging
import threading
from typing import Any, Dict, Optional, Tuple

import numpy as np

from constants import (
    FFT_SIZE, AUDIO_SAMPLE_RATE, AUDIO_SMOOTHING, AUDIO_MIN_DECIBELS,
    AUDIO_MAX_DECIBELS
)
from errors import AudioUnavailableError


def byte_frequency_data(samples: np.ndarray, previous: Optional[np.ndarray] = None,
                        smoothing: float = AUDIO_SMOOTHING,
                        min_db: float = AUDIO_MIN_DECIBELS,
                        max_db: float = AUDIO_MAX_DECIBELS) -> Tuple[np.ndarray, np.ndarray]:
    """
    Converts one block of samples to byte-scaled frequency bins.

    Returns the bytes (len(samples) // 2 bins) and the smoothed magnitude
    spectrum, which should be passed back as `previous` for the next block.
    """
    samples = np.asarray(samples, dtype=np.float64)
    n = len(samples)
    spectrum = np.abs(np.fft.rfft(samples * np.blackman(n)))[: n // 2] / n
    if previous is not None and previous.shape == spectrum.shape:
        spectrum = smoothing * previous + (1.0 - smoothing) * spectrum

    with np.errstate(divide='ignore'):
        decibels = 20.0 * np.log10(spectrum)
    scaled = (decibels - min_db) * (255.0 / (max_db - min_db))
    scaled = np.nan_to_num(scaled, nan=0.0, neginf=0.0, posinf=255.0)
    return np.clip(np.floor(scaled), 0, 255).astype(np.uint8), spectrum


def average_frequency_energy(frequency_bytes: np.ndarray) -> float:
    if len(frequency_bytes) == 0:
        return 0.0
    return float(np.mean(frequency_bytes))


class AudioLevelMonitor:
    """
    Streams the default microphone and keeps the latest average level.

    Nothing is opened until start() is called; the stream callback runs on
    the audio thread and only ever swaps one float under the lock.
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        params = params or {}
        self.fft_size = int(params.get('fft_size', FFT_SIZE))
        self.sample_rate = int(params.get('sample_rate', AUDIO_SAMPLE_RATE))
        self.smoothing = float(params.get('smoothing', AUDIO_SMOOTHING))
        self.device = params.get('device')
        self._lock = threading.Lock()
        self._level: Optional[float] = None
        self._spectrum: Optional[np.ndarray] = None
        self._stream = None

    @property
    def active(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        """
        Opens the microphone stream.

        Raises:
            AudioUnavailableError: sounddevice/PortAudio is missing, or the
                input device refused to open.
        """
        if self._stream is not None:
            return
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise AudioUnavailableError(f"Microphone input is not supported here: {e}") from e

        try:
            stream = sd.InputStream(
                device=self.device, channels=1, samplerate=self.sample_rate,
                blocksize=self.fft_size, dtype="float32",
                callback=self._callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            raise AudioUnavailableError(f"Could not access the microphone: {e}") from e

        self._stream = stream
        logging.info(
            f"Microphone access granted: {self.sample_rate} Hz, "
            f"FFT size {self.fft_size}."
        )

    def _callback(self, indata, frames, time_info, status) -> None:
        if status:
            logging.debug(f"Audio stream status: {status}")
        self.process_block(indata[:, 0])

    def process_block(self, samples: np.ndarray) -> float:
        """Analyses one block and stores its average level."""
        frequency_bytes, self._spectrum = byte_frequency_data(
            samples, self._spectrum, smoothing=self.smoothing
        )
        level = average_frequency_energy(frequency_bytes)
        with self._lock:
            self._level = level
        return level

    def sample(self) -> Optional[float]:
        """Latest average level, or None while no block has been analysed."""
        with self._lock:
            return self._level

    def stop(self) -> None:
        if self._stream is None:
            return
        self._stream.stop()
        self._stream.close()
        self._stream = None
        with self._lock:
            self._level = None
        logging.info("Microphone stream closed.")
