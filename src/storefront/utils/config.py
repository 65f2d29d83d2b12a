"""Access to application settings kept under ``[custom]`` in domain.toml."""

from protean.utils.globals import current_domain

_DEFAULTS = {
    "tax_rate": 0.05,
    "notification_max_retries": 3,
    "default_page_size": 10,
}


def setting(name: str):
    """Return a ``[custom]`` setting of the active domain, or its default."""
    custom = current_domain.config.get("custom") or {}
    value = custom.get(name)
    if value is None:
        value = _DEFAULTS[name]
    return value
