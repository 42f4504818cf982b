import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional

import requests

from masterdl.config import DownloaderConfig
from masterdl.exceptions import ContentIOError
from masterdl.locations import is_remote, split_location

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class ContentSource(ABC):
    """
    Contrato para leer bytes de una ubicación (archivo local o URL).
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE

    @abstractmethod
    def iter_chunks(self, location: str) -> Iterator[bytes]:
        """
        Entrega el contenido de `location` por bloques, sin cargarlo entero.
        Cualquier fallo se lanza como `ContentIOError`.
        """
        pass

    def read(self, location: str) -> bytes:
        return b"".join(self.iter_chunks(location))

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class LocalFileSource(ContentSource):
    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.chunk_size = chunk_size

    def iter_chunks(self, location: str) -> Iterator[bytes]:
        _, _, path = split_location(location)
        logger.debug(f"Leyendo archivo local: {path}")
        try:
            f = open(path, "rb")
        except OSError as e:
            raise ContentIOError(
                f"No se pudo abrir el archivo: {e}", location, cause=e
            ) from e

        with f:
            while True:
                try:
                    chunk = f.read(self.chunk_size)
                except OSError as e:
                    raise ContentIOError(
                        f"No se pudo leer el archivo: {e}", location, cause=e
                    ) from e
                if not chunk:
                    break
                yield chunk


class HttpSource(ContentSource):
    def __init__(
        self,
        timeout: float = 30.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})

    def iter_chunks(self, location: str) -> Iterator[bytes]:
        logger.debug(f"GET {location}")
        try:
            response = self.session.get(location, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise ContentIOError(f"Error de red: {e}", location, cause=e) from e

        with response:
            if not 200 <= response.status_code < 300:
                raise ContentIOError(
                    "Respuesta HTTP no exitosa",
                    location,
                    status_code=response.status_code,
                )
            try:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        yield chunk
            except requests.RequestException as e:
                raise ContentIOError(
                    f"Descarga interrumpida: {e}", location, cause=e
                ) from e

    def close(self) -> None:
        self.session.close()


def source_for(
    location: str, config: Optional[DownloaderConfig] = None
) -> ContentSource:
    """Elige la implementación según el scheme de la ubicación."""
    config = config or DownloaderConfig()
    if is_remote(location):
        return HttpSource(
            timeout=config.timeout,
            chunk_size=config.chunk_size,
            user_agent=config.user_agent,
        )
    return LocalFileSource(chunk_size=config.chunk_size)
