"""
titlefetch - titles.py

URL ごとに「取得 → パース → タイトル抽出」を1サイクルとして実行する。

- 複数URLは厳密に逐次処理する（1つのサイクルが完了してから次へ進む）。
- あるURLの失敗（TitleFetchError）は、そのURLの結果に記録して次のURLへ進む。
- 想定外の例外（TitleFetchError 以外）は握りつぶさずに送出する。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from titlefetch.error import TitleFetchError

from .extractor import TitleExtractor
from .fetcher import RateLimitedFetcher


@dataclass(frozen=True)
class TitleResult:
    """
    1つのURLの処理結果。
    - title: 抽出したタイトル（見つからなければ空文字。エラーではない）
    - status_code: HTTPステータス（通信前に失敗した場合は None）
    - error: 失敗した場合の例外（成功時は None）
    """
    url: str
    title: str = ""
    status_code: Optional[int] = None
    error: Optional[TitleFetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def found(self) -> bool:
        return self.ok and bool(self.title)


def fetch_title(
    fetcher: RateLimitedFetcher,
    url: str,
    *,
    extractor: Optional[TitleExtractor] = None,
    timeout: Optional[float] = None,
) -> TitleResult:
    extractor = extractor or TitleExtractor()

    # 本文は読み終えたら必ず閉じる（途中で失敗した場合も含む）
    with fetcher.fetch(url, timeout=timeout) as response:
        status_code = response.status_code
        body = response.read()

    root = extractor.parse(body, url=url)
    return TitleResult(url=url, title=extractor.extract(root), status_code=status_code)


def iter_titles(
    urls: Iterable[str],
    fetcher: RateLimitedFetcher,
    *,
    extractor: Optional[TitleExtractor] = None,
    timeout: Optional[float] = None,
) -> Iterator[TitleResult]:
    extractor = extractor or TitleExtractor()
    for url in urls:
        try:
            result = fetch_title(fetcher, url, extractor=extractor, timeout=timeout)
        except TitleFetchError as e:
            result = TitleResult(url=url, status_code=e.status_code, error=e)
        yield result


def fetch_titles(
    urls: Iterable[str],
    fetcher: RateLimitedFetcher,
    *,
    extractor: Optional[TitleExtractor] = None,
    timeout: Optional[float] = None,
) -> List[TitleResult]:
    return list(iter_titles(urls, fetcher, extractor=extractor, timeout=timeout))
