"""
异常定义
"""


class CertCleanerError(Exception):
    """证书清理工具基础异常"""


class ConfigurationError(CertCleanerError):
    """配置错误（参数冲突、缺少凭证等），在任何外部调用之前报告"""

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class FetchError(CertCleanerError):
    """证书列表或域名列表获取失败"""


class DeletionError(CertCleanerError):
    """单个证书删除失败"""

    def __init__(self, cert_id: str, message: str):
        self.cert_id = cert_id
        super().__init__(message)


class TimeParseError(CertCleanerError, ValueError):
    """时间字符串无法解析"""
