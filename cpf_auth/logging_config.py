from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for this repo.

    Notes:
    - Stdlib logging only.
    - Lambda and uvicorn install root handlers; a basic handler is added only
      when nothing else has (local scripts, tests run outside pytest).
    - Set `LOG_LEVEL=DEBUG` (or INFO/WARNING/ERROR) to control verbosity.
    """

    normalized = level.upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("cpf_auth").setLevel(normalized)
    logging.getLogger("cpf_auth").propagate = True


def mask_cpf(cpf: str | None) -> str:
    """Keep the last two digits only, e.g. ``*********00``."""
    if not cpf:
        return ""
    return "*" * max(len(cpf) - 2, 0) + cpf[-2:]
