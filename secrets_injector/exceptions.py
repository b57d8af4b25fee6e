"""Exceptions raised by the secrets injector."""


class InjectorError(Exception):
    """Base exception for all secrets-injector errors."""


class ConfigurationError(InjectorError):
    """Raised at startup when the environment describes an unusable setup.

    This can occur when:
    - WORKLOAD_KIND names a kind no adapter exists for
    - PORT is not an integer
    - the TLS certificate or key file is missing
    """


class UnsupportedWorkloadError(ConfigurationError):
    """Raised when no workload adapter handles the requested kind."""
