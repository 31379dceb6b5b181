from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class FileProperties:
    """Audio stream parameters of a file.

    Bitrates are in kbps and the sample rate in Hz. Fields a container does
    not expose (or that could not be read) are None; an unknown duration is
    zero.
    """

    duration: timedelta = timedelta(0)
    overall_bitrate: Optional[int] = None
    audio_bitrate: Optional[int] = None
    sample_rate: Optional[int] = None
    channels: Optional[int] = None

    @classmethod
    def unknown(cls) -> "FileProperties":
        return cls()

    @property
    def is_unknown(self) -> bool:
        return self == FileProperties()
