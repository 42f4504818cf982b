import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

import filetype

from masterdl.exceptions import ContentIOError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".mp4"
BUFFER_SIZE = 1024 * 1024


def extension_for_mime(mime_type: Optional[str]) -> Optional[str]:
    """Extensión (con punto) registrada en `filetype` para un mimetype, o None."""
    if not mime_type:
        return None
    mime = mime_type.split(";")[0].strip().lower()
    kind = filetype.get_type(mime=mime)
    if kind is None:
        return None
    return f".{kind.extension}"


def path_with_extension(
    out: Union[str, Path], mime_type: Optional[str], default_ext: str = DEFAULT_EXTENSION
) -> Path:
    """
    Si `out` no tiene extensión, le agrega la que corresponde al mimetype
    (o `default_ext`). Devuelve la ruta absoluta.
    """
    path = Path(out)
    if not path.name:
        raise ContentIOError(f"Ruta de salida inválida: {str(out)!r}", str(out))
    if not path.suffix:
        ext = extension_for_mime(mime_type) or default_ext
        logger.debug(f"Extensión para {mime_type!r}: {ext}")
        path = path.with_name(path.name + ext)
    return path.absolute()


@contextmanager
def open_output(path: Union[str, Path]) -> Iterator[BinaryIO]:
    """
    Abre la salida en modo crear-o-truncar, con buffer. Al salir siempre
    vacía el buffer y cierra, también si hubo error (el archivo parcial queda).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    f = open(path, "wb", buffering=BUFFER_SIZE)
    try:
        yield f
    finally:
        try:
            f.flush()
        finally:
            f.close()
