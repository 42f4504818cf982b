from pathlib import Path
from typing import Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DownloaderConfig(BaseSettings):
    """
    Configuración de una descarga. Se pasa explícitamente a cada llamada;
    no hay estado global.
    Prefijo en .env: MASTERDL_ (ej: MASTERDL_RESOLUTION=720)
    """

    output: Path = Path("download.mp4")

    # 0 o None: la de mayor resolución disponible
    resolution: Optional[int] = None
    # Si no hay coincidencia exacta con `resolution`, usar la mejor disponible
    fallback_to_best: bool = False
    redownload: bool = False

    # Red
    timeout: float = 30.0
    chunk_size: int = 64 * 1024
    user_agent: str = "masterdl/0.1"

    log_file: Path = Path("logs/masterdl.log")

    model_config = SettingsConfigDict(
        env_file="config.env",
        env_file_encoding="utf-8",
        env_prefix="MASTERDL_",
        extra="ignore",
    )

    @field_validator("resolution", mode="before")
    @classmethod
    def parse_resolution(cls, v):
        # Acepta "720p" además de "720"
        if isinstance(v, str):
            v = v.strip().lower().rstrip("p")
            return int(v) if v else None
        return v

    @property
    def preferred_height(self) -> Optional[int]:
        return self.resolution or None


def get_config(env_path: Union[str, Path, None] = None) -> DownloaderConfig:
    """
    Carga la configuración. Si se indica un archivo .env, debe existir.
    """
    if env_path is None:
        return DownloaderConfig()

    path = Path(env_path)
    if not path.exists():
        raise FileNotFoundError(
            f"No se encontró el archivo de configuración en: {path.absolute()}"
        )
    return DownloaderConfig(_env_file=path)  # type: ignore
