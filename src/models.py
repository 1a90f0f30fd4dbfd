"""Pydantic models for generation requests and saved runs."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

# A rule name is one grammar word: no whitespace and no structural symbols.
RULE_NAME_PATTERN = r'^[^\s{}\[\]()?%$";]+$'


class GenerateRequest(BaseModel):
    """Validated options for one generation run."""
    grammar_path: Path
    count: int = Field(1, ge=1, le=100000)
    entry_rule: str = Field("main", min_length=1, max_length=200, pattern=RULE_NAME_PATTERN)
    seed: int | None = Field(None, ge=0)
    max_depth: int = Field(200, ge=1, le=10000)
    prefix: str = Field("output", min_length=1, max_length=100, pattern=r'^[a-zA-Z0-9_-]+$')


class RunMetadata(BaseModel):
    """Description of a saved generation run, written next to its outputs."""
    grammar_path: str
    entry_rule: str
    count: int
    seed: int | None = None
    max_depth: int
    rule_count: int = 0
    vocabulary_count: int = 0
    prefix: str = "output"
    created_at: datetime = Field(default_factory=datetime.now)
