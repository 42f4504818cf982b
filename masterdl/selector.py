import logging
from typing import Optional, Sequence

from masterdl.exceptions import SelectionError
from masterdl.schemas import Rendition

logger = logging.getLogger(__name__)


def select_by_height(renditions: Sequence[Rendition], height: int) -> Rendition:
    """Devuelve la primera representación (en orden de lista) con esa altura exacta."""
    for rendition in renditions:
        if rendition.height == height:
            return rendition
    raise SelectionError(
        f"no rendition available with height {height}", preferred_height=height
    )


def select_highest_resolution(renditions: Sequence[Rendition]) -> Rendition:
    """
    Devuelve la representación con mayor ancho x alto.

    Se usa `>` estricto: en caso de empate gana la primera de la lista, y una
    representación sin dimensiones nunca se elige.
    """
    best: Optional[Rendition] = None
    highest = 0
    for rendition in renditions:
        if rendition.resolution > highest:
            highest = rendition.resolution
            best = rendition
    if best is None:
        raise SelectionError("no rendition available")
    return best


def select_rendition(
    renditions: Sequence[Rendition],
    preferred_height: Optional[int] = None,
    fallback_to_best: bool = False,
) -> Rendition:
    """
    Elige la representación a descargar.

    Con `preferred_height` solo se acepta una coincidencia exacta. Si no la hay
    y `fallback_to_best` es True, se pasa explícitamente a la de mayor resolución.
    """
    if not renditions:
        raise SelectionError("no rendition available")

    if preferred_height:
        try:
            rendition = select_by_height(renditions, preferred_height)
        except SelectionError:
            if not fallback_to_best:
                raise
            logger.warning(
                f"No hay representación de {preferred_height}p; usando la de mayor resolución."
            )
            rendition = select_highest_resolution(renditions)
    else:
        rendition = select_highest_resolution(renditions)

    logger.info(
        f"🔍 Representación seleccionada: {rendition.id or '<sin id>'} "
        f"({rendition.width}x{rendition.height}, {rendition.bitrate}bps)"
    )
    return rendition
