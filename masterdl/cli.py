"""CLI de masterdl — descarga de uno o varios master.json.

Usage:
    # Un manifiesto
    masterdl https://host/video/master.json -o videos/clip --res 720

    # Lote desde CSV (manifiesto;salida por línea)
    masterdl --csv lista.csv
"""

import argparse
import logging
from pathlib import Path

from masterdl.config import get_config
from masterdl.downloader import download, download_batch
from masterdl.exceptions import MasterDLError
from masterdl.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="masterdl",
        description="Reconstruye un video a partir de un master.json segmentado.",
    )
    parser.add_argument("input", help="Archivo o URL del master.json (o CSV con --csv)")
    parser.add_argument(
        "-o", "--output", default=None,
        help="Archivo de salida (por defecto download.mp4)",
    )
    parser.add_argument(
        "--csv", action="store_true",
        help="Leer INPUT como CSV separado por ';' con pares manifiesto;salida",
    )
    parser.add_argument(
        "--res", type=int, default=None,
        help="Altura deseada (por defecto la mayor disponible)",
    )
    parser.add_argument(
        "--fallback", action="store_true", default=None,
        help="Si no existe la altura pedida, usar la mayor disponible",
    )
    parser.add_argument(
        "-r", "--redownload", action="store_true", default=None,
        help="Volver a descargar aunque la salida ya exista",
    )
    parser.add_argument("--env-file", default=None, help="Archivo .env de configuración")
    parser.add_argument("--log-file", default=None, help="Archivo de log")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log de depuración")
    return parser


def main(args=None) -> int:
    parser = build_parser()
    parsed = parser.parse_args(args)

    try:
        config = get_config(parsed.env_file)
    except FileNotFoundError as e:
        parser.error(str(e))

    # Los argumentos de la línea de comandos tienen prioridad sobre el .env
    overrides = {
        "output": Path(parsed.output) if parsed.output else None,
        "resolution": parsed.res,
        "fallback_to_best": parsed.fallback,
        "redownload": parsed.redownload,
        "log_file": Path(parsed.log_file) if parsed.log_file else None,
    }
    config = config.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    setup_logging(config.log_file, verbose=parsed.verbose)

    if parsed.csv:
        if parsed.output is not None:
            parser.error("--output no se usa con --csv (la salida va en cada línea)")
        try:
            results = download_batch(parsed.input, config=config)
        except MasterDLError as e:
            logger.error(str(e))
            return 1
        return 0 if all(r.ok for r in results) else 1

    try:
        download(parsed.input, config=config)
    except MasterDLError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
