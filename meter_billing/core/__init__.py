"""
核心模組
提供 Pipeline 框架與數據源抽象層
"""
