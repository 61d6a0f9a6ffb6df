"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0


@dataclass(frozen=True)
class AudioBlob:
    """Finalized recording: raw PCM frames plus the format chosen at start."""
    data: bytes
    mime_type: str
    sample_rate: int = 16000
    channels: int = 1
    sample_width: int = 2  # bytes per sample (16-bit)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def duration_seconds(self) -> float:
        bytes_per_second = self.sample_rate * self.channels * self.sample_width
        return self.size / bytes_per_second if bytes_per_second else 0.0
