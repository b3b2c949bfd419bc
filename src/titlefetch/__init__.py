"""
titlefetch package

公開方針:
- 例外クラスは titlefetch.error に集約しており、ここからも再exportする。
- 実処理（取得・抽出）は core、実行のオーケストレーションは cli にあり、ここでは公開APIを最小に保つ。
"""

from __future__ import annotations

# Version
__all__ = [
    "__version__",
    # errors (re-export)
    "TitleFetchError",
    "InvalidConfigError",
    "DeadlineExceeded",
    "RateLimitExceeded",
    "RequestConstructionError",
    "NetworkError",
    "ParseError",
]

__version__ = "0.1.0"

# Re-export errors for convenient import: `from titlefetch import TitleFetchError`
from .error import (  # noqa: E402
    DeadlineExceeded,
    InvalidConfigError,
    NetworkError,
    ParseError,
    RateLimitExceeded,
    RequestConstructionError,
    TitleFetchError,
)
