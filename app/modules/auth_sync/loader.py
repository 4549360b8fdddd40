"""Credential loading from the environment.

Reads each provider's source variable from the process environment, with an
optional ``.env`` file (python-dotenv), looked up in the working directory
and then the application directory, as a lower-precedence source, runs
the validator and wraps every accepted key in a ``Secret``.

A missing ``.env`` file is normal and only logged at debug level; an
unreadable one is logged as an EnvLoadError and loading continues with the
process environment alone. ``os.environ`` is never modified.
"""

import os
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from dotenv import dotenv_values

from infrastructure.logging import get_module_logger
from infrastructure.security import Secret
from modules.auth_sync.errors import EnvLoadError, KeyValidationError
from modules.auth_sync.models import LoadedCredentials
from modules.auth_sync.providers import ProviderDefinition
from modules.auth_sync.validation import validate

logger = get_module_logger()

DEFAULT_DOTENV_NAME = ".env"
APP_DIR = Path(__file__).resolve().parents[2]


def read_dotenv(path: Path) -> Dict[str, str]:
    """Read a ``.env`` file without touching ``os.environ``.

    Returns:
        Mapping of defined variables; keys without a value are dropped.

    Raises:
        EnvLoadError: If the file exists but cannot be read.
    """
    try:
        values = dotenv_values(path, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EnvLoadError(str(path), str(e)) from e
    return {key: value for key, value in values.items() if value is not None}


class CredentialLoader:
    """Loads and validates provider credentials.

    Args:
        environ: Process environment, defaults to ``os.environ``
        dotenv_path: Explicit ``.env`` file; when None, ``.env`` in ``cwd``
            and then in ``app_dir`` is used, first one found wins
        cwd: Directory searched first for the default ``.env`` file
        app_dir: Fallback directory for the default ``.env`` file
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None,
        cwd: Optional[Path] = None,
        app_dir: Optional[Path] = None,
    ):
        self._environ = os.environ if environ is None else environ
        self._dotenv_path = dotenv_path
        self._cwd = cwd
        self._app_dir = APP_DIR if app_dir is None else app_dir

    def _dotenv_candidates(self) -> List[Path]:
        if self._dotenv_path:
            return [Path(self._dotenv_path)]
        return [
            (self._cwd or Path.cwd()) / DEFAULT_DOTENV_NAME,
            self._app_dir / DEFAULT_DOTENV_NAME,
        ]

    def _dotenv_file(self) -> Optional[Path]:
        candidates = self._dotenv_candidates()
        for path in candidates:
            if path.is_file():
                return path
        logger.debug("dotenv_file_not_found", searched=[str(p) for p in candidates])
        return None

    def _file_values(self) -> Dict[str, str]:
        path = self._dotenv_file()
        if path is None:
            return {}
        try:
            values = read_dotenv(path)
        except EnvLoadError as e:
            logger.warning("dotenv_load_failed", path=e.path, error=e.reason)
            return {}
        logger.debug("dotenv_file_loaded", path=str(path), variables=len(values))
        return values

    def load(self, definitions: Iterable[ProviderDefinition]) -> LoadedCredentials:
        """Load credentials for the given providers.

        Providers whose variable is absent appear in neither result map.
        """
        file_values = self._file_values()
        loaded = LoadedCredentials()

        for definition in definitions:
            if not definition.source_env_var:
                continue

            raw = self._environ.get(definition.source_env_var)
            if raw is None:
                raw = file_values.get(definition.source_env_var)
            if raw is None:
                continue

            outcome = validate(definition, raw)
            if outcome.is_valid:
                loaded.valid[definition.name] = Secret(raw.strip())
            else:
                logger.warning(
                    "credential_validation_failed",
                    provider=definition.name,
                    reason=outcome.reason.value,
                    detail=outcome.message,
                )
                loaded.invalid[definition.name] = KeyValidationError(
                    definition.name, outcome
                )

        logger.info(
            "credentials_loaded",
            valid=len(loaded.valid),
            invalid=len(loaded.invalid),
        )
        return loaded
