"""
titlefetch - limiter.py

トークンバケット方式のレートリミッタ。

- バケットは満杯（burst 個）から始まり、経過時間に応じて rate 個/秒で連続的に補充される（上限 burst）。
- acquire() はトークンを1つ消費する。足りなければ「次の1個が溜まるまで」だけ待つ。
- 待ち時間が期限(deadline)を超えることが確定している場合は、待たずに RateLimitExceeded を送出する。
  失敗した取得ではトークンを消費しない。
- 取得処理はロックで直列化し、同一インスタンスを複数スレッドから使ってもトークンを二重消費しない。
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from titlefetch.error import InvalidConfigError, RateLimitExceeded

# 浮動小数点の誤差で「ほぼ1個」になった場合は1個とみなす
_EPSILON = 1e-9


class TokenBucket:
    def __init__(
        self,
        rate: float,
        burst: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate is None or not rate > 0:
            raise InvalidConfigError(reason=f"rate must be positive (got {rate!r})")
        if isinstance(burst, bool) or not isinstance(burst, int) or burst < 1:
            raise InvalidConfigError(reason=f"burst must be an integer of at least 1 (got {burst!r})")

        self.rate = float(rate)
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(self.burst)
        self._updated = clock()
        self._lock = threading.Lock()

    @property
    def tokens(self) -> float:
        with self._lock:
            self._refill(self._clock())
            return self._tokens

    # ==================================================
    # public method
    # ==================================================

    # 次のメソッド:
    # - トークンを1つ取得し、待った秒数を返す
    # - deadline は clock と同じ時間軸の絶対値（None なら期限なし）
    def acquire(self, deadline: Optional[float] = None) -> float:
        # 要素1: ロック待ちも期限の対象にする
        if deadline is None:
            acquired = self._lock.acquire()
        else:
            acquired = self._lock.acquire(timeout=max(0.0, deadline - self._clock()))
        if not acquired:
            raise RateLimitExceeded(reason="deadline elapsed while waiting for the rate limiter")

        try:
            # 要素2: 期限を既に過ぎていれば、トークンがあっても渡さない
            start = self._clock()
            if deadline is not None and start >= deadline:
                raise RateLimitExceeded(reason="deadline elapsed before a token was granted")

            # 要素3: 経過時間分を補充し、1個以上あれば即時に消費
            self._refill(start)
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return 0.0

            # 要素4: 次の1個が溜まるまで待つ。sleep が早く戻った場合は不足分だけ待ち直す
            now = start
            while self._tokens < 1.0 - _EPSILON:
                wait = (1.0 - self._tokens) / self.rate
                if deadline is not None and now + wait > deadline:
                    raise RateLimitExceeded(
                        reason=f"rate limiter wait of {wait:.3f}s would exceed the deadline"
                    )
                self._sleep(wait)
                now = self._clock()
                self._refill(now)

            self._tokens = max(0.0, self._tokens - 1.0)
            return now - start
        finally:
            self._lock.release()

    # ==================================================
    # private methods
    # ==================================================

    def _refill(self, now: float) -> None:
        elapsed = now - self._updated
        if elapsed > 0:
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._updated = now
