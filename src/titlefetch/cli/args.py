"""
cli/args.py

titlefetch CLI の引数定義と、core 側で使う設定オブジェクトの組み立てを担当する。

方針:
- URL は位置引数で1つ以上受け取り、scheme（http/https）必須。欠けていればエラーで中断する。
- rate / burst / timeout は正の数のみ受け付ける（不正値は argparse のエラーとして扱う）。
- --no-rate-limit はレート制限なしの構成（FetchConfig.rate=None）にする。
- --debug は「デバッグ表示用の辞書を生成する」までを args.py で提供し、出力は main.py 側に委譲する。
"""

from __future__ import annotations

import argparse
from dataclasses import asdict
from typing import Optional, Sequence

from titlefetch import __version__
from titlefetch.core import FetchConfig
from titlefetch.core.fetcher import DEFAULT_HEADERS, check_url
from titlefetch.error import RequestConstructionError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="titlefetch",
        description="Fetch web pages with a rate-limited HTTP client and print the content of their <title> element.",
    )

    # ---- required urls (strict) ----
    parser.add_argument(
        "urls",
        metavar="URL",
        nargs="+",
        type=_validate_url_strict,
        help="Target URL(s) (scheme required: http/https). Processed sequentially in the given order.",
    )

    # ---- rate limit options (FetchConfig) ----
    parser.add_argument(
        "--rate",
        dest="rate",
        type=_positive_float,
        default=FetchConfig().rate,
        help=f"Sustained requests per second. (default: {FetchConfig().rate})",
    )
    parser.add_argument(
        "--burst",
        dest="burst",
        type=_positive_int,
        default=FetchConfig().burst,
        help=f"Maximum number of requests allowed back-to-back without waiting. (default: {FetchConfig().burst})",
    )
    parser.add_argument(
        "--no-rate-limit",
        dest="no_rate_limit",
        action="store_true",
        help="Disable rate limiting entirely.",
    )

    # ---- fetch options (FetchConfig) ----
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=_positive_float,
        default=FetchConfig().timeout,
        help=f"Overall deadline per URL in seconds, rate limiter wait included. (default: {FetchConfig().timeout})",
    )
    parser.add_argument(
        "--max-redirects",
        dest="max_redirects",
        type=int,
        default=FetchConfig().max_redirects,
        help=f"Maximum number of redirects to follow. (default: {FetchConfig().max_redirects})",
    )
    parser.add_argument(
        "--user-agent",
        dest="user_agent",
        default=None,
        help="Override the User-Agent header.",
    )

    # ---- misc ----
    parser.add_argument(
        "--version",
        action="version",
        version=f"titlefetch {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        help="Dump parsed configs and rate limiter state for debugging (printing is handled by main.py).",
    )

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def make_fetch_config(ns: argparse.Namespace) -> FetchConfig:
    """
    argparse.Namespace から FetchConfig を生成する。
    """
    return FetchConfig(
        timeout=float(ns.timeout),
        rate=None if ns.no_rate_limit else float(ns.rate),
        burst=int(ns.burst),
        max_redirects=int(ns.max_redirects),
    )


def make_headers(ns: argparse.Namespace) -> Optional[dict]:
    """
    --user-agent 指定時のみヘッダーを返す（None なら fetcher 既定のヘッダーを使う）。
    """
    if not ns.user_agent:
        return None
    return {**DEFAULT_HEADERS, "User-Agent": ns.user_agent}


def debug_dump(ns: argparse.Namespace) -> dict:
    """
    main.py 側で --debug 時に利用するためのデバッグ情報を辞書で返す。
    （出力先は main.py 側で制御する）
    """
    fetch = make_fetch_config(ns)
    return {
        "urls": list(ns.urls),
        "fetch_config": asdict(fetch),
        "headers": make_headers(ns),
    }


def _validate_url_strict(value: str) -> str:
    """前後の空白を除いてから fetcher と同じ規則で検証し、失敗は argparse のエラーにする。"""
    v = (value or "").strip()
    try:
        check_url(v)
    except RequestConstructionError as e:
        raise argparse.ArgumentTypeError(e.reason) from e
    return v


def _positive_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid number: {value!r}") from e
    if not f > 0:
        raise argparse.ArgumentTypeError(f"Value must be positive (got {value!r}).")
    return f


def _positive_int(value: str) -> int:
    try:
        i = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value!r}") from e
    if i < 1:
        raise argparse.ArgumentTypeError(f"Value must be at least 1 (got {value!r}).")
    return i
