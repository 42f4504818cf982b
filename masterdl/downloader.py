import csv
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel

from masterdl.assembler import SegmentAssembler
from masterdl.config import DownloaderConfig
from masterdl.exceptions import ContentIOError, MasterDLError
from masterdl.output import open_output, path_with_extension
from masterdl.schemas import parse_manifest
from masterdl.selector import select_rendition
from masterdl.sources import ContentSource, source_for

logger = logging.getLogger(__name__)


class DownloadResult(BaseModel):
    manifest_location: str
    output_path: Path
    rendition_id: str
    width: int
    height: int
    segments: int = 0
    bytes_written: int = 0
    skipped: bool = False


class BatchEntry(BaseModel):
    line: int
    manifest_location: str
    output: str


@dataclass
class BatchResult:
    entry: BatchEntry
    result: Optional[DownloadResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def download(
    manifest_location: str,
    output: Union[str, Path, None] = None,
    config: Optional[DownloaderConfig] = None,
    source: Optional[ContentSource] = None,
    cancel_event: Optional[threading.Event] = None,
) -> DownloadResult:
    """
    Descarga el master de `manifest_location`, elige la representación y
    escribe el archivo final.

    Si la salida ya existe y `config.redownload` es False, no descarga nada.
    """
    config = config or DownloaderConfig()
    output = output if output is not None else config.output

    owns_source = source is None
    src = source or source_for(manifest_location, config)
    try:
        logger.info(f"🔗 Leyendo manifiesto: {manifest_location}")
        manifest = parse_manifest(src.read(manifest_location))
        rendition = select_rendition(
            manifest.renditions,
            preferred_height=config.preferred_height,
            fallback_to_best=config.fallback_to_best,
        )

        out_path = path_with_extension(output, rendition.mime_type)
        result = DownloadResult(
            manifest_location=manifest_location,
            output_path=out_path,
            rendition_id=rendition.id,
            width=rendition.width,
            height=rendition.height,
        )

        if not config.redownload and out_path.exists():
            logger.info(f"El archivo {out_path.name!r} ya existe: saltando...")
            result.skipped = True
            return result

        logger.info(
            f"Descargando {out_path.name!r} ({rendition.width}x{rendition.height}, "
            f"{len(rendition.segments)} segmentos)"
        )
        assembler = SegmentAssembler(source=src, config=config, cancel_event=cancel_event)
        try:
            with open_output(out_path) as sink:
                report = assembler.assemble(manifest, rendition, manifest_location, sink)
        except OSError as e:
            raise ContentIOError(
                f"No se pudo escribir la salida: {e}", str(out_path), cause=e
            ) from e

        result.segments = report.segments_written
        result.bytes_written = report.bytes_written
        logger.info(f"✅ Descargado: {out_path} ({report.bytes_written} bytes)")
        return result
    finally:
        if owns_source:
            src.close()


def read_batch_file(path: Union[str, Path]) -> List[BatchEntry]:
    """
    Lee un CSV separado por ';' con pares `manifiesto;salida`.
    La lectura se detiene en la primera fila con menos de dos campos.
    """
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            rows = list(csv.reader(f, delimiter=";"))
    except OSError as e:
        raise ContentIOError(f"No se pudo leer el CSV: {e}", str(path), cause=e) from e

    entries = []
    for i, row in enumerate(rows, start=1):
        if not row:
            continue
        if len(row) < 2:
            break
        entries.append(
            BatchEntry(
                line=i, manifest_location=row[0].strip(), output=row[1].strip()
            )
        )
    return entries


def download_batch(
    batch_path: Union[str, Path],
    config: Optional[DownloaderConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[BatchResult]:
    """
    Procesa cada línea del CSV de forma independiente: un fallo se registra
    y se continúa con la siguiente.
    """
    config = config or DownloaderConfig()
    entries = read_batch_file(batch_path)
    logger.info(f"Procesando {len(entries)} manifiestos de {batch_path}")

    results = []
    for entry in entries:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Lote cancelado.")
            break
        try:
            result = download(
                entry.manifest_location,
                entry.output,
                config=config,
                cancel_event=cancel_event,
            )
            results.append(BatchResult(entry=entry, result=result))
        except MasterDLError as e:
            logger.error(f"Error en la línea {entry.line}: {e}")
            results.append(BatchResult(entry=entry, error=e))

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Lote terminado: {len(results) - failed} correctos, {failed} con error")
    return results
