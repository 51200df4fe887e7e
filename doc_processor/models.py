"""
Data models for images, processing options, sessions, progress and results.
"""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from PIL import Image

from . import codec
from . import config
from .core import logger


@dataclass(frozen=True)
class UploadedImage:
    """A raw file as handed over by the upload surface."""
    name: str
    data: bytes
    media_type: Optional[str] = None
    mtime: int = 0  # milliseconds since epoch, 0 when unknown

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "UploadedImage":
        path = Path(path)
        stat = os.stat(path)
        return cls(
            name=path.name,
            data=path.read_bytes(),
            media_type=media_type,
            mtime=stat.st_mtime_ns // 1_000_000,
        )


@dataclass(frozen=True)
class ImageAsset:
    """One uploaded image. Never mutated in place."""
    id: str
    name: str
    media_type: str
    binary: bytes = field(repr=False)
    encoded: str = field(repr=False)

    @classmethod
    def from_upload(cls, upload: UploadedImage) -> "ImageAsset":
        media_type = upload.media_type or codec.sniff_media_type(upload.data)
        return cls(
            id=codec.derive_id(upload.name, upload.mtime, len(upload.data)),
            name=upload.name,
            media_type=media_type,
            binary=upload.data,
            encoded=codec.encode(upload.data, media_type),
        )

    @classmethod
    def from_encoded(cls, id: str, encoded: str, name: str, media_type: Optional[str] = None) -> "ImageAsset":
        binary, encoded_type = codec.decode(encoded)
        return cls(
            id=id,
            name=name,
            media_type=media_type or encoded_type,
            binary=binary,
            encoded=encoded,
        )

    @property
    def size(self) -> int:
        return len(self.binary)

    @property
    def preview_handle(self) -> str:
        """Displayable reference; data URLs render directly in the browser."""
        return self.encoded

    def preview(self, max_size: Tuple[int, int] = config.LIMITS["preview_size"]) -> Image.Image:
        return codec.make_preview(self.binary, max_size)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "encoded": self.encoded,
            "name": self.name,
            "media_type": self.media_type,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Field name -> check applied when restoring persisted options
_OPTION_CHECKS = {
    "mode": lambda v: v in config.PROCESSING_MODES,
    "instructions": lambda v: isinstance(v, str),
    "temperature": _is_number,
    "high_accuracy": lambda v: isinstance(v, bool),
    "clean_sensitivity": _is_number,
}


@dataclass
class ProcessingOptions:
    """Configuration for one processing run."""
    mode: str = config.DEFAULT_OPTIONS["mode"]
    instructions: str = config.DEFAULT_OPTIONS["instructions"]
    temperature: float = config.DEFAULT_OPTIONS["temperature"]
    high_accuracy: bool = config.DEFAULT_OPTIONS["high_accuracy"]
    clean_sensitivity: float = config.DEFAULT_OPTIONS["clean_sensitivity"]

    def merged(self, **partial: Any) -> "ProcessingOptions":
        """Shallow merge; unknown keys are rejected, values are not validated."""
        known = {f.name for f in fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise TypeError(f"Unknown processing option(s): {', '.join(sorted(unknown))}")
        return replace(self, **partial)

    def to_dict(self) -> Dict:
        return {
            "mode": self.mode,
            "instructions": self.instructions,
            "temperature": self.temperature,
            "high_accuracy": self.high_accuracy,
            "clean_sensitivity": self.clean_sensitivity,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ProcessingOptions":
        """Restore options, backfilling missing or malformed fields with defaults."""
        values = dict(config.DEFAULT_OPTIONS)
        for name, check in _OPTION_CHECKS.items():
            if name not in data:
                continue
            if check(data[name]):
                values[name] = data[name]
            else:
                logger.warning(f"Ignoring malformed option {name}={data[name]!r}; using default {values[name]!r}")
        return cls(**values)


def sensitivity_tier(value: float) -> str:
    """Map a numeric clean sensitivity to its qualitative descriptor."""
    for upper, label in config.SENSITIVITY_TIERS:
        if value <= upper:
            return label
    return config.SENSITIVITY_TIERS[-1][1]


@dataclass
class SessionSnapshot:
    """Persisted form of the image set and options."""
    images: List[ImageAsset]
    options: ProcessingOptions

    def to_dict(self) -> Dict:
        return {
            "images": [img.to_dict() for img in self.images],
            "options": self.options.to_dict(),
        }


@dataclass(frozen=True)
class ProgressState:
    fraction: float = 0.0
    label: str = ""


@dataclass(frozen=True)
class ResultArtifact:
    """Downloadable output of a successful run."""
    data: bytes = field(repr=False)
    file_name: str
    format_tag: str
    media_type: str
