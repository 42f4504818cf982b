from typing import Optional


class MasterDLError(Exception):
    """Clase base para todas las excepciones del proyecto."""

    pass


class ParseError(MasterDLError):
    """El manifiesto no es JSON válido o no tiene la forma esperada."""

    def __init__(self, msg: str, cause: Optional[BaseException] = None):
        super().__init__(msg)
        self.cause = cause


class SelectionError(MasterDLError):
    """No hay ninguna representación (rendition) que se pueda elegir."""

    def __init__(self, msg: str = "no rendition available", preferred_height=None):
        super().__init__(msg)
        self.preferred_height = preferred_height


class ContentIOError(MasterDLError):
    """Fallo al leer una ubicación (archivo local o URL remota)."""

    def __init__(
        self,
        msg: str,
        location: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(msg)
        self.location = location
        self.status_code = status_code
        self.cause = cause

    def __str__(self):
        if self.status_code is not None:
            return f"{self.args[0]} [HTTP {self.status_code}] ({self.location})"
        return f"{self.args[0]} ({self.location})"


class AssemblyError(MasterDLError):
    """
    Fallo durante el ensamblado de segmentos.

    `step` indica en qué etapa ocurrió: "init", "segment" o "finalize".
    """

    def __init__(
        self,
        msg: str,
        step: str,
        rendition_id: Optional[str] = None,
        segment_index: Optional[int] = None,
        location: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(msg)
        self.step = step
        self.rendition_id = rendition_id
        self.segment_index = segment_index
        self.location = location
        self.cause = cause

    def __str__(self):
        context = [f"step={self.step}"]
        if self.rendition_id:
            context.append(f"rendition={self.rendition_id}")
        if self.segment_index is not None:
            context.append(f"segment={self.segment_index}")
        text = f"{self.args[0]} ({', '.join(context)})"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


class AssemblyCancelled(AssemblyError):
    """El ensamblado se canceló entre dos segmentos."""

    pass
