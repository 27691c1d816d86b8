"""System prompts for LLM calls, stored as markdown beside this module."""

from functools import lru_cache
from pathlib import Path

_PROMPT_DIR = Path(__file__).parent


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    """Read a prompt file once per process. Raises FileNotFoundError for unknown names."""
    return (_PROMPT_DIR / name).read_text(encoding="utf-8")
