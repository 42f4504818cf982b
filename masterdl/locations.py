"""
Resolución léxica de ubicaciones de segmentos.

Una ubicación es una ruta del sistema de archivos o una URL http(s). Todas las
uniones se hacen sobre texto (semántica de `posixpath`): nunca se consulta el
disco ni la red.
"""

import posixpath
from typing import Tuple
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

from masterdl.exceptions import ContentIOError

NETWORK_SCHEMES = ("http", "https")


def _split(location: str) -> SplitResult:
    try:
        return urlsplit(location)
    except ValueError as e:
        raise ContentIOError(f"Ubicación inválida: {e}", location, cause=e) from e


def is_remote(location: str) -> bool:
    return _split(location).scheme.lower() in NETWORK_SCHEMES


def split_location(location: str) -> Tuple[str, str, str]:
    """Devuelve (scheme, host, path). Para rutas locales scheme y host van vacíos."""
    parts = _split(location)
    scheme = parts.scheme.lower()
    if scheme in NETWORK_SCHEMES:
        return scheme, parts.netloc, parts.path
    if scheme == "file":
        return "", "", unquote(parts.path)
    return "", "", location


def clean_path(path: str) -> str:
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    # normpath conserva un "//" inicial.
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _as_directory(path: str) -> str:
    return path if path.endswith("/") else path + "/"


def resolve_base(manifest_location: str, manifest_base: str, rendition_base: str) -> str:
    """
    Calcula la base de una representación: directorio del manifiesto, luego
    `manifest_base` y luego `rendition_base`, normalizado.

    El resultado termina en "/" para que pueda usarse a su vez como ubicación
    de un manifiesto sin perder el último componente.
    """
    _, _, path = split_location(manifest_location)
    joined = posixpath.join(posixpath.dirname(path), manifest_base, rendition_base)
    return _as_directory(clean_path(joined))


def resolve_segment(
    resolved_base: str, segment_url: str, scheme: str = "", host: str = ""
) -> str:
    """Ubicación absoluta de un segmento: URL si hay scheme/host, ruta local si no."""
    if scheme and host:
        parts = _split(segment_url)
        path = clean_path(posixpath.join(resolved_base, parts.path))
        if not path.startswith("/"):
            path = clean_path("/" + path)
        return urlunsplit((scheme, host, path, parts.query, ""))
    return clean_path(posixpath.join(resolved_base, segment_url))
