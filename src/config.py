"""Centralized configuration for prose-rules."""

import os
from dataclasses import dataclass, field

from text_generator import DEFAULT_ENTRY_RULE, DEFAULT_MAX_DEPTH


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration for grammar expansion."""
    entry_rule: str = DEFAULT_ENTRY_RULE
    max_depth: int = DEFAULT_MAX_DEPTH  # nested rule expansions


@dataclass(frozen=True)
class RunConfig:
    """Defaults for the command-line driver."""
    default_count: int = 1
    default_grammar: str = "index.txt"
    default_prefix: str = "output"


@dataclass
class Settings:
    """Application settings, can be overridden via environment variables."""
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    run: RunConfig = field(default_factory=RunConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables with PROSE_RULES_ prefix."""
        generator = GeneratorConfig(
            entry_rule=os.environ.get("PROSE_RULES_ENTRY_RULE", GeneratorConfig.entry_rule),
            max_depth=int(os.environ.get("PROSE_RULES_MAX_DEPTH", GeneratorConfig.max_depth)),
        )
        run = RunConfig(
            default_count=int(os.environ.get("PROSE_RULES_COUNT", RunConfig.default_count)),
            default_grammar=os.environ.get("PROSE_RULES_GRAMMAR", RunConfig.default_grammar),
            default_prefix=os.environ.get("PROSE_RULES_PREFIX", RunConfig.default_prefix),
        )
        return cls(generator=generator, run=run)


# Global settings instance - use from_env() for environment-aware settings
settings = Settings.from_env()
