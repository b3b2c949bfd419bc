"""
cli/main.py

titlefetch CLI の実行エントリポイント。
- args.py: 引数定義・設定生成
- core: fetch / parse / extract を URL ごとに逐次実行

出力:
- stdout: URL ごとの結果（title / not found）
- stderr: エラー・デバッグ情報（stdout を汚さないため）

終了コード（目安）:
- 0: 全URLが成功（タイトル無しも成功扱い）
- 1: 1つ以上のURLで失敗、または想定内エラー（設定不備等）
- 2: 引数エラー / 想定外エラー
"""

from __future__ import annotations

import json
import sys
from typing import Iterable, Iterator, Optional, Sequence

from titlefetch import __version__
from titlefetch.core import RateLimitedFetcher, TitleResult, iter_titles
from titlefetch.error import TitleFetchError

from . import args as cli_args


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]

    try:
        # 1) パース
        ns = cli_args.parse_args(argv_list)

        # 2) debug（stderr）
        debug = bool(getattr(ns, "debug", False))
        if debug:
            _print_debug(ns)

        # 3) core 実行パイプライン（fetcher は全URLで1つを共有し、レート制限を効かせる）
        fetch_config = cli_args.make_fetch_config(ns)
        headers = cli_args.make_headers(ns)

        failed = 0
        with RateLimitedFetcher(fetch_config, headers=headers) as fetcher:
            urls = _announce(ns.urls, fetcher, debug)
            for result in iter_titles(urls, fetcher):
                if not _report(result):
                    failed += 1

        if failed:
            print(f"[titlefetch] {failed} of {len(ns.urls)} URL(s) failed", file=sys.stderr)
            return 1
        return 0

    except SystemExit as e:
        # argparse が exit するケース（invalid args / --help / --version）
        code = int(e.code) if e.code is not None else 1
        return code

    except TitleFetchError as e:
        print(f"[titlefetch:error] {e}", file=sys.stderr)
        return 1

    except Exception as e:
        # 想定外の例外。stdout を汚さないよう stderr に出して exit code=2 とする。
        print(f"[titlefetch:error] unexpected error: {e!r}", file=sys.stderr)
        return 2


def _announce(urls: Iterable[str], fetcher: RateLimitedFetcher, debug: bool) -> Iterator[str]:
    """
    iter_titles に URL を1つずつ渡す。--debug 時は取得前にリミッタの状態を stderr に出す。
    """
    for url in urls:
        if debug:
            if fetcher.limiter is None:
                print(f"[titlefetch:debug] {url}: rate limiting disabled", file=sys.stderr)
            else:
                print(
                    f"[titlefetch:debug] {url}: waiting for rate limiter "
                    f"(tokens={fetcher.limiter.tokens:.2f}/{fetcher.limiter.burst})",
                    file=sys.stderr,
                )
        yield url


def _report(result: TitleResult) -> bool:
    """
    1つのURLの結果を出力する。成功なら True。
    """
    if not result.ok:
        print(f"[titlefetch:error] {result.url}: {result.error}", file=sys.stderr)
        return False

    print(f"url: {result.url}")
    if result.found:
        print(f"title: {result.title}")
    else:
        print("title: (not found)")
    print("---")
    return True


def _print_debug(ns) -> None:
    # 1項目1行で出す（grep しやすいように各行へ接頭辞を付ける）
    print(f"[titlefetch:debug] titlefetch {__version__}", file=sys.stderr)
    for key, value in cli_args.debug_dump(ns).items():
        print(f"[titlefetch:debug] {key}: {json.dumps(value, ensure_ascii=False)}", file=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
