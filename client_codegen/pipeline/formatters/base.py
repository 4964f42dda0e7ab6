"""
Post-processing of assembled client types artifacts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import FormatterConfig


class Formatter(ABC):
    """Rewrites the text of a whole artifact once its sections are joined."""

    # Target language of the artifacts the formatter rewrites
    LANGUAGE = ""

    def apply(self, text: str, language: str, config: FormatterConfig) -> str:
        """
        Format an artifact when formatting is enabled for its language.

        Args:
            text: Assembled artifact text
            language: Target language of the artifact
            config: Formatter configuration

        Returns:
            The formatted text, or the text unchanged when the formatter is
            disabled, meant for another language or not installed
        """
        if not config.enabled or language != self.LANGUAGE or not self.is_available():
            return text
        return self.format(text, config)

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """Format the text of one artifact."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the formatting tool is installed."""
