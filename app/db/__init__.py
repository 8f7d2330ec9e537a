# app/db/__init__.py
"""
数据库层：
- base.py     ORM Base + 模型集中注册
- session.py  异步 engine / sessionmaker / FastAPI 依赖
"""
