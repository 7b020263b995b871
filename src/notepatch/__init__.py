"""Context-anchored text patch engine for AI-assisted note editing."""

__version__ = "0.1.0"
