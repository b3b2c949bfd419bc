"""
titlefetch - error.py

titlefetch 全体で使用する例外クラスを集約するモジュール。

方針:
- 例外は「種別(kind)」と「対象URL」を属性として持ち、文字列連結ではなく
  構造化された値として呼び出し側が判定できるようにする。
- requests / bs4 の例外は core 側でここの例外に包み直し、`raise ... from e` で元例外を保持する。
- 「タイトルが見つからない」はエラーではない（空文字の結果として扱う）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional


# ============================================================
# Base
# ============================================================

@dataclass(eq=False)
class TitleFetchError(Exception):
    """titlefetch 固有の基底例外（想定内エラーの受け皿）。"""
    url: Optional[str] = None
    reason: Optional[str] = None
    status_code: Optional[int] = None

    kind: ClassVar[str] = "error"

    def __str__(self) -> str:
        parts: list[str] = []
        if self.url:
            parts.append(f"url={self.url}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.reason:
            parts.append(self.reason)
        return type(self).__name__ + (f" ({', '.join(parts)})" if parts else "")


# ============================================================
# Configuration
# ============================================================

class InvalidConfigError(TitleFetchError, ValueError):
    """rate / burst / timeout などの設定値が不正な場合の例外（構築時に即失敗させる）。"""
    kind = "invalid_config"


# ============================================================
# Deadline / Rate limit
# ============================================================

class DeadlineExceeded(TitleFetchError):
    """全体の期限（トークン待ち + 通信）を超過した場合の例外。"""
    kind = "deadline_exceeded"


class RateLimitExceeded(DeadlineExceeded):
    """期限内にレートリミッタのトークンを取得できなかった場合の例外（通信は発生していない）。"""
    kind = "rate_limit_exceeded"


# ============================================================
# Fetch / Network
# ============================================================

class RequestConstructionError(TitleFetchError):
    """URL やリクエスト引数が不正で、通信前に失敗した場合の例外。"""
    kind = "request_construction"


class NetworkError(TitleFetchError):
    """接続失敗・DNS失敗・TLS失敗・転送中の切断など、送信後のトランスポート層の失敗。"""
    kind = "network"


# ============================================================
# Parse
# ============================================================

class ParseError(TitleFetchError):
    """レスポンス本文を HTML として解釈できなかった場合の例外。"""
    kind = "parse"
