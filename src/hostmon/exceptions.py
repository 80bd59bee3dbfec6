class HostmonError(Exception):
    """Base error for hostmon."""


class ConfigError(HostmonError):
    pass
