import logging
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from masterdl.exceptions import ParseError

logger = logging.getLogger(__name__)


class SegmentRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: float = 0.0
    end: float = 0.0
    url: str = ""


class Rendition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    base_url: str = ""
    format: str = ""
    mime_type: str = ""
    codecs: str = ""
    bitrate: int = 0
    avg_bitrate: int = 0
    duration: float = 0.0
    framerate: float = 0.0
    width: int = 0
    height: int = 0
    max_segment_duration: int = 0
    init_segment: Optional[str] = None
    # El orden es el de reproducción; nunca se reordena.
    segments: List[SegmentRef] = Field(default_factory=list)

    @field_validator("segments", mode="before")
    @classmethod
    def null_segments(cls, v):
        return [] if v is None else v

    @property
    def resolution(self) -> int:
        """Producto ancho x alto; 0 si falta alguna dimensión."""
        if self.width <= 0 or self.height <= 0:
            return 0
        return self.width * self.height

    @property
    def has_init_segment(self) -> bool:
        return bool(self.init_segment)


class Manifest(BaseModel):
    model_config = ConfigDict(frozen=True)

    clip_id: str = ""
    base_url: str = ""
    video: List[Rendition] = Field(default_factory=list)

    @field_validator("video", mode="before")
    @classmethod
    def null_video(cls, v):
        return [] if v is None else v

    @property
    def renditions(self) -> List[Rendition]:
        return self.video


def parse_manifest(data: Union[bytes, str]) -> Manifest:
    """Decodifica el JSON del master en un `Manifest`. No hace I/O."""
    try:
        manifest = Manifest.model_validate_json(data)
    except ValidationError as e:
        raise ParseError(f"Manifiesto inválido: {e}", cause=e) from e

    logger.debug(
        f"Manifiesto {manifest.clip_id or '<sin id>'} con {len(manifest.video)} representaciones"
    )
    return manifest
