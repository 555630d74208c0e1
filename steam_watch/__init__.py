"""Watch Steam profiles for play-status changes and report them to registered webhooks."""

__version__ = "1.0.0"
