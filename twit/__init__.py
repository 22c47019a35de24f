"""Follow relationships, event publishing and queue workers for a microblogging backend."""

__version__ = "0.1.0"