"""
titlefetch - extractor.py

このモジュールは「取得したHTMLをパースし、最初の <title> のテキストを取り出す」責務のみを持つ。
- 入力: HTML（bytes / str）またはパース済みのノードツリー
- 出力: タイトル文字列（見つからなければ空文字）

要件:
- 探索は深さ優先・行きがけ順（ノード自身 → 子を文書順）。最初に見つかった <title> で探索を打ち切る。
  2つ目以降の <title> は、最初のものが空文字になる場合でも見ない。
- テキストは <title> の「最初の子ノード」だけを見る。それが通常のテキストノードなら前後の空白を除いて返す。
  子が無い・要素・コメント等の場合は空文字（入れ子のテキストは連結しない。浅い抽出をそのまま維持する）。
- 深い文書でも呼び出しスタックを消費しないよう、再帰ではなく明示的なスタックで辿る。
- 文字コードの判定は BeautifulSoup に委ねる。
"""

from __future__ import annotations

from typing import Optional, Union

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from titlefetch.error import ParseError


class TitleExtractor:
    """
    HTML からパースツリーを作り、最初の <title> の直下テキストを返す。
    """

    def __init__(self, parser: str = "html.parser") -> None:
        self.parser = parser

    # 次のメソッド:
    # - HTML をパースしてノードツリーを返す
    def parse(self, markup: Union[bytes, str], url: Optional[str] = None) -> BeautifulSoup:
        try:
            return BeautifulSoup(markup, self.parser)
        except ParserRejectedMarkup as e:
            raise ParseError(url=url, reason=f"markup rejected by parser: {e}") from e

    # 次のメソッド:
    # - ノードツリーを深さ優先・行きがけ順で辿り、最初の <title> のテキストを返す
    def extract(self, root: Optional[PageElement]) -> str:
        # 要素1: 根が無ければ「見つからない」
        if root is None:
            return ""

        stack: list[PageElement] = [root]
        while stack:
            node = stack.pop()

            # 要素2: title 要素なら、その時点で探索を終える（first match wins）
            if isinstance(node, Tag) and node.name == "title":
                return self._first_child_text(node)

            # 要素3: 子を逆順に積み、文書順に取り出されるようにする
            if isinstance(node, Tag):
                stack.extend(reversed(node.contents))

        return ""

    # 次のメソッド:
    # - 最初の子ノードが通常のテキストノードなら、前後の空白を除いて返す
    def _first_child_text(self, title: Tag) -> str:
        if not title.contents:
            return ""

        first = title.contents[0]
        if isinstance(first, NavigableString) and not isinstance(first, PreformattedString):
            return str(first).strip()
        return ""


# 便利関数（クラスを持ち回りたくない用途向け）

# 次のメソッド:
# - HTML をパースしてタイトルを返す（ワンショット関数）
def extract_title(markup: Union[bytes, str], url: Optional[str] = None) -> str:
    extractor = TitleExtractor()
    return extractor.extract(extractor.parse(markup, url=url))
