"""Campus Events API: club events, ticket purchases and admin moderation."""

__version__ = "1.0.0"
