"""Recipe engagement service: discovery, votes, favorites and notifications."""

__version__ = "0.1.0"
