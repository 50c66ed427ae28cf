"""
未使用过期证书清理工具
"""
__version__ = "1.0.0"
