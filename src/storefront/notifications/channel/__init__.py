"""Channel adapter registry.

Provides singleton access to channel adapters. Only the fake email adapter
ships with the storefront; a real transport plugs in behind ``EmailPort``.
"""

from storefront.notifications.notification import NotificationChannel

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str):
    """Return the configured channel adapter (singleton per channel type)."""
    if channel_type not in _channel_instances:
        if channel_type == NotificationChannel.EMAIL.value:
            from storefront.notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
