from dataclasses import dataclass
from typing import Optional

from titlefetch.error import InvalidConfigError


@dataclass(frozen=True)
class FetchConfig:
    timeout: float = 30.0
    rate: Optional[float] = 1.0
    burst: int = 3
    max_redirects: int = 5
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        if not self.timeout > 0:
            raise InvalidConfigError(reason=f"timeout must be positive (got {self.timeout!r})")
        # rate=None はレート制限なしの構成
        if self.rate is not None and not self.rate > 0:
            raise InvalidConfigError(reason=f"rate must be positive (got {self.rate!r})")
        if isinstance(self.burst, bool) or not isinstance(self.burst, int) or self.burst < 1:
            raise InvalidConfigError(reason=f"burst must be an integer of at least 1 (got {self.burst!r})")
        if self.max_redirects < 0:
            raise InvalidConfigError(reason=f"max_redirects must not be negative (got {self.max_redirects!r})")
        if self.chunk_size < 1:
            raise InvalidConfigError(reason=f"chunk_size must be at least 1 (got {self.chunk_size!r})")


from .limiter import TokenBucket  # noqa: E402
from .fetcher import FetchRequest, FetchResponse, RateLimitedFetcher  # noqa: E402
from .extractor import TitleExtractor, extract_title  # noqa: E402
from .titles import TitleResult, fetch_title, fetch_titles, iter_titles  # noqa: E402

__all__ = [
    "FetchConfig",
    "TokenBucket",
    "FetchRequest",
    "FetchResponse",
    "RateLimitedFetcher",
    "TitleExtractor",
    "extract_title",
    "TitleResult",
    "fetch_title",
    "fetch_titles",
    "iter_titles",
]
