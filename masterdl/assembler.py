import base64
import binascii
import enum
import io
import logging
import os
import threading
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from masterdl.config import DownloaderConfig
from masterdl.exceptions import AssemblyCancelled, AssemblyError, ContentIOError
from masterdl.locations import resolve_base, resolve_segment, split_location
from masterdl.schemas import Manifest, Rendition
from masterdl.sources import ContentSource, source_for

logger = logging.getLogger(__name__)


class AssemblyState(enum.Enum):
    NOT_STARTED = "not_started"
    WRITING_INIT = "writing_init"
    WRITING_SEGMENTS = "writing_segments"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AssemblyReport:
    rendition_id: str
    segments_written: int
    init_bytes: int
    bytes_written: int


def decode_init_segment(encoded: str) -> bytes:
    """Decodifica el segmento inicial (base64 estándar, con padding)."""
    cleaned = encoded.replace("\r", "").replace("\n", "")
    return base64.b64decode(cleaned, validate=True)


class SegmentAssembler:
    """
    Escribe en `sink` el segmento inicial y luego cada segmento de la
    representación, uno a la vez y en el orden del manifiesto.

    Cada instancia sirve para un único ensamblado: DONE y FAILED son finales.
    Si se pasa `cancel_event`, se revisa solo entre segmentos.
    """

    def __init__(
        self,
        source: Optional[ContentSource] = None,
        config: Optional[DownloaderConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.source = source
        self.config = config
        self.cancel_event = cancel_event
        self.state = AssemblyState.NOT_STARTED
        self.current_segment: Optional[int] = None

    def assemble(
        self,
        manifest: Manifest,
        rendition: Rendition,
        manifest_location: str,
        sink: BinaryIO,
    ) -> AssemblyReport:
        if self.state is not AssemblyState.NOT_STARTED:
            raise RuntimeError(f"El ensamblador ya fue usado (estado: {self.state.value})")

        owns_source = self.source is None
        source = self.source or source_for(manifest_location, self.config)
        try:
            return self._run(manifest, rendition, manifest_location, sink, source)
        except Exception:
            self.state = AssemblyState.FAILED
            raise
        finally:
            if owns_source:
                source.close()

    def _run(
        self,
        manifest: Manifest,
        rendition: Rendition,
        manifest_location: str,
        sink: BinaryIO,
        source: ContentSource,
    ) -> AssemblyReport:
        init_bytes = self._write_init(rendition, sink)
        total = init_bytes

        self.state = AssemblyState.WRITING_SEGMENTS
        scheme, host, _ = split_location(manifest_location)
        base = resolve_base(manifest_location, manifest.base_url, rendition.base_url)
        count = 0
        for index, segment in enumerate(rendition.segments):
            self._check_cancelled(rendition, index)
            self.current_segment = index
            location, written = self._write_segment(
                source, base, segment.url, (scheme, host), sink, rendition, index
            )
            logger.debug(
                f"Segmento {index + 1}/{len(rendition.segments)}: {written} bytes ({location})"
            )
            total += written
            count += 1

        self._finalize(sink, rendition)
        self.state = AssemblyState.DONE
        return AssemblyReport(
            rendition_id=rendition.id,
            segments_written=count,
            init_bytes=init_bytes,
            bytes_written=total,
        )

    def _write_init(self, rendition: Rendition, sink: BinaryIO) -> int:
        if not rendition.has_init_segment:
            return 0

        self.state = AssemblyState.WRITING_INIT
        try:
            data = decode_init_segment(rendition.init_segment)
        except (binascii.Error, ValueError) as e:
            raise AssemblyError(
                "invalid init segment", step="init", rendition_id=rendition.id, cause=e
            ) from e

        try:
            sink.write(data)
        except OSError as e:
            raise AssemblyError(
                "No se pudo escribir el segmento inicial",
                step="init",
                rendition_id=rendition.id,
                cause=e,
            ) from e
        return len(data)

    def _write_segment(
        self,
        source: ContentSource,
        base: str,
        segment_url: str,
        origin: Tuple[str, str],
        sink: BinaryIO,
        rendition: Rendition,
        index: int,
    ) -> Tuple[str, int]:
        location = segment_url
        written = 0
        try:
            location = resolve_segment(base, segment_url, *origin)
            for chunk in source.iter_chunks(location):
                sink.write(chunk)
                written += len(chunk)
        except ContentIOError as e:
            raise AssemblyError(
                f"No se pudo descargar el segmento {index}",
                step="segment",
                rendition_id=rendition.id,
                segment_index=index,
                location=location,
                cause=e,
            ) from e
        except OSError as e:
            raise AssemblyError(
                f"No se pudo escribir el segmento {index}",
                step="segment",
                rendition_id=rendition.id,
                segment_index=index,
                location=location,
                cause=e,
            ) from e
        return location, written

    def _check_cancelled(self, rendition: Rendition, index: int) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise AssemblyCancelled(
                f"Cancelado antes del segmento {index}",
                step="segment",
                rendition_id=rendition.id,
                segment_index=index,
            )

    def _finalize(self, sink: BinaryIO, rendition: Rendition) -> None:
        try:
            sink.flush()
            try:
                fileno = sink.fileno()
            except (AttributeError, io.UnsupportedOperation):
                fileno = None
            if fileno is not None:
                os.fsync(fileno)
        except OSError as e:
            raise AssemblyError(
                "No se pudo volcar la salida a disco",
                step="finalize",
                rendition_id=rendition.id,
                cause=e,
            ) from e


def assemble(
    manifest: Manifest,
    rendition: Rendition,
    manifest_location: str,
    sink: BinaryIO,
    source: Optional[ContentSource] = None,
    config: Optional[DownloaderConfig] = None,
) -> AssemblyReport:
    """Atajo para un ensamblado con un `SegmentAssembler` nuevo."""
    assembler = SegmentAssembler(source=source, config=config)
    return assembler.assemble(manifest, rendition, manifest_location, sink)
