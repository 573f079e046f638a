"""
任務模組
"""
