"""
Purpose: Load the sensitive-word list and match words against line text.
Constraints: Pure matching; the comment marker is handled by the rewriter.
"""

# Imports
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from iceminus.core.config_models import DEFAULT_WORDLIST_NAME
from iceminus.core.errors import WordListLoadError
from iceminus.core.logging import get_logger

logger = get_logger(__name__)

# Constants
DEFAULT_WORDLIST_PATH = Path(__file__).resolve().parents[1] / "resources" / DEFAULT_WORDLIST_NAME


# Public API
class WordSet:
    """Ordered, read-only sequence of sensitive words (duplicates allowed)."""

    def __init__(self, words: Iterable[str]):
        self._words: Tuple[str, ...] = tuple(w for w in words if w)

    @classmethod
    def from_text(cls, text: str) -> "WordSet":
        """One word per line; surrounding whitespace trimmed, blank lines dropped."""
        return cls(line.strip() for line in text.split("\n"))

    @property
    def words(self) -> Tuple[str, ...]:
        return self._words

    def matches(self, content: str) -> List[str]:
        """Return every word contained in content, in list order."""
        return [word for word in self._words if word in content]

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"WordSet({len(self._words)} words)"


def is_default_source(source: Optional[Union[str, Path]]) -> bool:
    """True when the caller asked for the built-in list."""
    return source is None or str(source) in ("", DEFAULT_WORDLIST_NAME)


def load_word_set(
    source: Optional[Union[str, Path]] = None,
    default_source: Path = DEFAULT_WORDLIST_PATH,
) -> WordSet:
    """Load words from an external path, or from the packaged list when source is the default."""
    path = default_source if is_default_source(source) else Path(source)
    try:
        text = path.read_bytes().decode("utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise WordListLoadError(f"failed to load sensitive words from {path}: {exc}") from exc

    word_set = WordSet.from_text(text)
    logger.info("Loaded %d sensitive words from %s", len(word_set), path)
    return word_set
