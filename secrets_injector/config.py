"""Runtime settings read from the environment.

Configuration (optional via env):
- PORT (default: 8443)
- CERT_FILE (default: /tls/tls.crt)
- KEY_FILE (default: /tls/tls.key)
- WORKLOAD_KIND (default: Deployment) - Pod or Deployment
- SKIP_EXISTING_INJECTION (default: false)
- LOG_LEVEL (default: INFO)
"""

import os
from typing import Mapping, NamedTuple, Optional

from secrets_injector.exceptions import ConfigurationError
from secrets_injector.workloads import get_workload

TRUE_VALUES = ("1", "true", "yes", "on")


class Settings(NamedTuple):
    port: int
    cert_file: str
    key_file: str
    workload_kind: str
    skip_existing: bool
    log_level: str


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from ``environ`` (``os.environ`` by default).

    Raises:
        ConfigurationError: If PORT is not a number or WORKLOAD_KIND is unsupported.
    """
    env = os.environ if environ is None else environ

    try:
        port = int(env.get("PORT", "8443"))
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer, got {env.get('PORT')!r}") from None

    workload_kind = env.get("WORKLOAD_KIND", "Deployment")
    get_workload(workload_kind)

    return Settings(
        port=port,
        cert_file=env.get("CERT_FILE", "/tls/tls.crt"),
        key_file=env.get("KEY_FILE", "/tls/tls.key"),
        workload_kind=workload_kind,
        skip_existing=env.get("SKIP_EXISTING_INJECTION", "false").lower() in TRUE_VALUES,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )


def check_tls_files(settings: Settings) -> None:
    """Raise ConfigurationError unless both TLS files exist."""
    missing = [path for path in (settings.cert_file, settings.key_file) if not os.path.exists(path)]
    if missing:
        raise ConfigurationError(f"TLS cert/key not found: {', '.join(missing)}")
