# app/services/result_cache.py
"""
进程内结果缓存（TTL）。

- key 由 canonical_key 生成：同一组过滤条件无论传参顺序如何，得到同一个 key
- get 命中过期条目时视为 miss 并顺手删除；sweep 由 CacheSweeper 周期调用
- 一把 threading.Lock 保护整张表；get / set 永不抛错
- 并发 miss 时可能重复计算、重复写入，后写者的 TTL 生效
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import quote

from app.obs.metrics import dashboard_cache_evictions_total, dashboard_cache_requests_total

log = logging.getLogger("dashboard.cache")


def _render(value: Any) -> str:
    if isinstance(value, Enum):
        text = str(value.value)
    elif isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    # 值里的 ":" "_" "%" 全部转义，分隔符只可能来自 key 结构本身
    return quote(text, safe="").replace("_", "%5F")


def canonical_key(namespace: str, fields: Optional[Mapping[str, Any]] = None) -> str:
    """
    <namespace>_<k1>:<v1>_<k2>:<v2>...

    字段按名称排序，None 值丢弃；没有任何字段时为 <namespace>_all。
    值经过百分号转义，自由文本无法伪造出另一组字段。
    """
    parts = [
        f"{k}:{_render(v)}"
        for k, v in sorted((fields or {}).items())
        if v is not None
    ]
    if not parts:
        return f"{namespace}_all"
    return f"{namespace}_" + "_".join(parts)


# 已知的缓存命名空间（metrics label 只取这些值，避免 key 直接做 label）
NAMESPACES = (
    "stock_levels",
    "summary_metrics",
    "supplier_performance",
    "supplier_detail",
    "supplier_rankings",
    "warehouse_distribution",
    "warehouse_imbalances",
    "warehouse_summary",
    "stock_visualization",
    "recent_purchases",
)


def namespace_of(key: str) -> str:
    for ns in NAMESPACES:
        if key.startswith(ns + "_"):
            return ns
    return "other"


class ResultCache:
    def __init__(
        self,
        default_ttl: float = 300,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be > 0, got {default_ttl!r}")
        self.default_ttl = float(default_ttl)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        expired = False
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now >= entry[1]:
                del self._entries[key]
                entry = None
                expired = True
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1

        ns = namespace_of(key)
        if entry is None:
            dashboard_cache_requests_total.labels(ns, "miss").inc()
            if expired:
                dashboard_cache_evictions_total.labels("expired").inc()
            log.debug("cache miss: %s%s", key, " (expired)" if expired else "")
            return None

        dashboard_cache_requests_total.labels(ns, "hit").inc()
        log.debug("cache hit: %s", key)
        return entry[0]

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        if ttl is None:
            ttl = self.default_ttl
        elif ttl <= 0:
            log.warning("non-positive ttl=%r for %s, using default %s", ttl, key, self.default_ttl)
            ttl = self.default_ttl
        expires_at = self._clock() + ttl
        with self._lock:
            self._entries[key] = (value, expires_at)
        log.debug("cache set: %s ttl=%s", key, ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def invalidate_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
        if doomed:
            dashboard_cache_evictions_total.labels("invalidated").inc(len(doomed))
            log.info("cache invalidated: prefix=%s removed=%d", prefix, len(doomed))
        return len(doomed)

    def sweep(self) -> int:
        """删除所有已过期条目，返回删除数量。"""
        now = self._clock()
        with self._lock:
            doomed = [k for k, (_, exp) in self._entries.items() if now >= exp]
            for k in doomed:
                del self._entries[k]
        if doomed:
            dashboard_cache_evictions_total.labels("swept").inc(len(doomed))
            log.info("cache swept: removed=%d", len(doomed))
        return len(doomed)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"size": len(self._entries), "hits": self._hits, "misses": self._misses}
