class LinkShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:link_shortener_error'


class ConfigurationError(LinkShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(LinkShortenerError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class SecretResolutionError(InfrastructureError):
    """Raised when Secrets Manager returns an unusable secret."""

    error_code = 'infra:secret_resolution_error'


class DnsResolutionError(InfrastructureError):
    """Raised when a DNS lookup fails for reasons other than missing records.

    e.g. timeouts, unreachable nameservers, SERVFAIL.
    """

    error_code = 'infra:dns_resolution_error'
