# app/api/__init__.py
"""
API package.

- 路由模块在 app/api/routers 下，由 app.main 逐个 include
- 这里不做任何重导出
"""

__all__ = []
