"""
Parser Configuration
====================

Settings that control how CD-Text is decoded. Configuration can come from:
- Default values (defined here)
- Environment variables (ParserConfig.from_env)
- Command-line options (applied on top by the cdtext CLI)
"""

from dataclasses import dataclass
from enum import Enum
import codecs
import os


class ErrorPolicy(str, Enum):
    """
    What to do when a pack or its text cannot be decoded.

    RAISE aborts the parse with a typed error. SKIP drops the offending
    pack (keeping the previous pack and the text accumulated so far) and
    decodes invalid text with replacement characters.
    """
    RAISE = "raise"
    SKIP = "skip"


@dataclass
class ParserConfig:
    """
    Configuration for a CD-Text parse.

    Attributes:
        encoding: Codec for text categories (default: "utf-8")
        on_error: Decode-error policy (default: ErrorPolicy.RAISE)
    """

    encoding: str = "utf-8"
    on_error: ErrorPolicy = ErrorPolicy.RAISE

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """
        Create a ParserConfig from environment variables.

        Environment variables (all optional):
            CDTEXT_ENCODING: Text codec name (e.g. "latin-1")
            CDTEXT_ON_ERROR: "raise" or "skip"

        Returns:
            ParserConfig with values from environment variables
        """
        config = cls()

        if encoding := os.environ.get("CDTEXT_ENCODING"):
            config.encoding = encoding

        if policy := os.environ.get("CDTEXT_ON_ERROR"):
            try:
                config.on_error = ErrorPolicy(policy.lower())
            except ValueError:
                pass  # Ignore invalid values

        return config

    @property
    def skip_errors(self) -> bool:
        return self.on_error is ErrorPolicy.SKIP

    def validate(self) -> "ParserConfig":
        """
        Check that the configured codec exists.

        Raises:
            ValueError: If the encoding is unknown
        """
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {self.encoding!r}") from None
        self.on_error = ErrorPolicy(self.on_error)
        return self
