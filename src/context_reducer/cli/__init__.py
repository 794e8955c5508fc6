"""
Context Reducer CLI — 命令行工具。

- reduce: 对一份对话记录应用一个策略
- compare: 对比多个策略的视图大小
- strategies: 列出内置策略
- validate: 校验策略文件或对话记录文件
"""

from context_reducer.cli.app import app, main

__all__ = ["app", "main"]
