"""
cli package

titlefetch の CLI 層。
- args.py : 引数定義・設定生成
- main.py : CLI 実行のオーケストレーション（entrypoint）

ここでは外部から利用しやすい最低限のAPIを re-export する。
"""

from .main import main
from .args import build_parser, parse_args, make_fetch_config, make_headers, debug_dump

__all__ = [
    # entrypoint
    "main",
    # args helpers
    "build_parser",
    "parse_args",
    "make_fetch_config",
    "make_headers",
    "debug_dump",
]
