"""Team capacity planning: availability, first-responder duty and project allocation."""

__version__ = "0.1.0"
