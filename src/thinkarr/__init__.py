"""Thinkarr - conversational media assistant with LLM tool calling."""

__version__ = "0.3.0"
