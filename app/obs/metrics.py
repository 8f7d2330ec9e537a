# app/obs/metrics.py
import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

http_requests_total = Counter("http_requests_total", "HTTP requests", ["method", "path", "code"])
http_request_duration = Histogram(
    "http_request_duration_seconds", "HTTP request duration seconds", ["method", "path"]
)

# 结果缓存：result=hit|miss；namespace 取 key 的前缀（stock_levels / summary_metrics ...）
dashboard_cache_requests_total = Counter(
    "dashboard_cache_requests_total", "Result cache lookups", ["namespace", "result"]
)
# reason=expired（get 时发现过期）|swept（后台清扫）|invalidated（按前缀失效）
dashboard_cache_evictions_total = Counter(
    "dashboard_cache_evictions_total", "Result cache evictions", ["reason"]
)
dashboard_datasource_errors_total = Counter(
    "dashboard_datasource_errors_total", "Data source failures", ["op"]
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        # 用路由模板作 label，避免 /suppliers/{id} 按 id 爆基数
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        http_requests_total.labels(request.method, path, str(response.status_code)).inc()
        http_request_duration.labels(request.method, path).observe(elapsed)
        return response
