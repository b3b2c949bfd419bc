"""
titlefetch - fetcher.py

このモジュールは「レート制限に従って指定URLへ GET を1回だけ送り、本文のストリームを返す」責務のみを持つ。
設定値（FetchConfig）は core/__init__.py に集約し、本モジュールでは参照のみ行う。

- リトライは行わない（失敗はそのまま呼び出し側へ返す）。
- HTTP クライアント（requests.Session）は fetcher ごとに明示的に生成する（プロセス共通の既定クライアントは使わない）。
- 期限(deadline)は「トークン待ち + 通信 + 本文の読み出し」全体に対して1つだけ持つ。
- HTTPステータスはエラー扱いしない（呼び出し側へ status_code として渡す）。
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, TYPE_CHECKING
from urllib.parse import urlparse

import requests
from urllib3.exceptions import ReadTimeoutError

from titlefetch.error import (
    DeadlineExceeded,
    InvalidConfigError,
    NetworkError,
    RateLimitExceeded,
    RequestConstructionError,
)

from .limiter import TokenBucket

# core/__init__.py に定義された設定クラスを利用する
if TYPE_CHECKING:
    from . import FetchConfig


# NOTE:
# User-Agent は fetcher 固有の責務としてここで定義する
DEFAULT_HEADERS = {
    "User-Agent": "titlefetch/0.1 requests",
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
}

# 通信前に判明する requests 側の「リクエスト構築エラー」
_CONSTRUCTION_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidHeader,
)


# 次の関数:
# - 取得対象にできる絶対URL（http/https・host必須）か確認する
# - CLI の引数検証と fetch() の事前検証で同じ規則を使う
def check_url(url: str) -> None:
    try:
        parsed = urlparse(url)
    except (TypeError, ValueError) as e:
        raise RequestConstructionError(url=url, reason=f"Invalid URL: {e}") from e

    if not parsed.scheme:
        raise RequestConstructionError(
            url=url,
            reason="URL scheme is missing. Please specify a full URL including scheme (e.g., https://example.com).",
        )
    if parsed.scheme not in ("http", "https"):
        raise RequestConstructionError(
            url=url, reason="Unsupported URL scheme. Only http and https are allowed."
        )
    if not parsed.netloc:
        raise RequestConstructionError(
            url=url, reason="Invalid URL: host is missing. Example: https://example.com"
        )


@dataclass(frozen=True)
class FetchRequest:
    """1回の fetch 呼び出しを表す。deadline は fetcher の clock 上の絶対時刻。"""
    url: str
    deadline: float

    def remaining(self, now: float) -> float:
        return self.deadline - now


class FetchResponse:
    """
    成功した fetch の結果。本文は読み出し可能なストリームとして保持する。

    呼び出し側が所有し、読み終えたら必ず close() する（with 文での利用を想定）。
    """

    def __init__(
        self,
        request: FetchRequest,
        response: requests.Response,
        *,
        clock: Callable[[], float],
        chunk_size: int,
    ) -> None:
        self.request = request
        self.response = response
        self._clock = clock
        self._chunk_size = chunk_size
        self.closed = False

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def final_url(self) -> str:
        return self.response.url or self.request.url

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self):
        return self.response.headers

    # 次のメソッド:
    # - 本文をチャンク単位で返す
    # - チャンク間で期限を確認し、超過していれば転送を打ち切る
    def iter_body(self) -> Iterator[bytes]:
        try:
            for chunk in self.response.iter_content(chunk_size=self._chunk_size):
                if self.request.remaining(self._clock()) <= 0:
                    raise DeadlineExceeded(
                        url=self.url,
                        reason="deadline elapsed while reading the response body",
                        status_code=self.status_code,
                    )
                if chunk:
                    yield chunk
        except requests.RequestException as e:
            self.close()
            # iter_content は読み出しタイムアウトを ConnectionError に包んで送出する。
            # ソケットのタイムアウトには期限の残りを渡しているため、これは期限切れとして扱う
            if self._is_read_timeout(e) or self.request.remaining(self._clock()) <= 0:
                raise DeadlineExceeded(url=self.url, reason=str(e), status_code=self.status_code) from e
            raise NetworkError(url=self.url, reason=str(e), status_code=self.status_code) from e
        except DeadlineExceeded:
            self.close()
            raise

    @staticmethod
    def _is_read_timeout(exc: requests.RequestException) -> bool:
        if isinstance(exc, requests.Timeout):
            return True
        return any(isinstance(arg, ReadTimeoutError) for arg in exc.args)

    def read(self) -> bytes:
        return b"".join(self.iter_body())

    def close(self) -> None:
        if not self.closed:
            self.response.close()
            self.closed = True

    def __enter__(self) -> "FetchResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class RateLimitedFetcher:
    def __init__(
        self,
        config: FetchConfig,
        *,
        session: Optional[requests.Session] = None,
        headers: Optional[dict] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.config = config
        self.headers = headers or DEFAULT_HEADERS
        self._clock = clock or time.monotonic

        # 要素1: セッションは外から渡されなければ自前で生成し、close() の責任も持つ
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            session.max_redirects = config.max_redirects
        self.session = session

        # 要素2: rate=None はレート制限なし（リミッタを持たない）
        self.limiter: Optional[TokenBucket] = None
        if config.rate is not None:
            self.limiter = TokenBucket(
                config.rate,
                config.burst,
                clock=self._clock,
                sleep=sleep or time.sleep,
            )

    # ==================================================
    # public method
    # ==================================================

    # 次のメソッド:
    # - トークンを取得してから GET を1回送り、FetchResponse を返す
    # - timeout 省略時は config.timeout を全体の期限とする
    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        # 1) 期限付きのリクエストを組み立てる
        budget = self.config.timeout if timeout is None else timeout
        if not budget > 0:
            raise InvalidConfigError(url=url, reason=f"timeout must be positive (got {budget!r})")
        request = FetchRequest(url=url, deadline=self._clock() + budget)

        # 2) URLを検証する（不正ならトークンを消費せず、通信もしない）
        check_url(request.url)

        # 3) レートリミッタの許可を待つ（期限を超えるなら通信せずに失敗）
        self.wait_for_token(request)

        # 4) 残り時間を通信のタイムアウトとして GET を送る
        remaining = request.remaining(self._clock())
        if remaining <= 0:
            raise DeadlineExceeded(url=url, reason="deadline elapsed before the request was sent")

        response = self._send(request, remaining)
        return FetchResponse(
            request,
            response,
            clock=self._clock,
            chunk_size=self.config.chunk_size,
        )

    # 次のメソッド:
    # - トークンを1つ取得し、待った秒数を返す（リミッタ無しなら常に 0）
    def wait_for_token(self, request: FetchRequest) -> float:
        if self.limiter is None:
            return 0.0
        try:
            return self.limiter.acquire(request.deadline)
        except RateLimitExceeded as e:
            raise RateLimitExceeded(url=request.url, reason=e.reason) from e

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "RateLimitedFetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ==================================================
    # private methods
    # ==================================================

    # 次のメソッド:
    # - 1回だけ GET を送り、requests の例外を titlefetch の例外体系へ包み直す
    def _send(self, request: FetchRequest, timeout: float) -> requests.Response:
        try:
            return self.session.get(
                request.url,
                headers=self.headers,
                timeout=timeout,
                stream=True,
            )
        except requests.Timeout as e:
            raise DeadlineExceeded(url=request.url, reason=str(e)) from e
        except _CONSTRUCTION_ERRORS as e:
            raise RequestConstructionError(url=request.url, reason=str(e)) from e
        except requests.RequestException as e:
            raise NetworkError(url=request.url, reason=str(e)) from e
