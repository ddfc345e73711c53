"""Citation reading-list analytics: suggestions, author identities and formal concepts."""

__version__ = "0.1.0"
