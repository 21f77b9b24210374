"""服务层模块.

主要模块:
- grants: 授权解析、差异计算、语句生成与同步编排
- connection_adapters: MySQL 执行器
"""
