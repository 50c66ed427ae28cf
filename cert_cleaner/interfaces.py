"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import List
from .models import Certificate, RunOutcome


class CertificateProviderInterface(ABC):
    """证书服务接口"""

    @abstractmethod
    def list_certificates(self) -> List[Certificate]:
        """获取账号下所有证书（失败时抛出 FetchError）"""
        pass

    @abstractmethod
    def delete_certificate(self, cert_id: str) -> None:
        """删除单个证书（失败时抛出 DeletionError）"""
        pass


class CdnProviderInterface(ABC):
    """CDN 服务接口"""

    @abstractmethod
    def list_domains(self) -> List[str]:
        """获取所有加速域名标识（失败时抛出 FetchError）"""
        pass

    @abstractmethod
    def get_domain_certificate(self, domain: str) -> str:
        """获取域名绑定的证书ID，未绑定时返回空字符串"""
        pass


class OperatorPromptInterface(ABC):
    """操作员输入接口"""

    @abstractmethod
    def read_line(self, prompt: str) -> str:
        """显示提示并读取一行输入"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_run_start(self, candidate_count: int):
        """记录清理开始"""
        pass

    @abstractmethod
    def log_dry_run(self, candidates):
        """记录模拟运行中将被删除的证书"""
        pass

    @abstractmethod
    def log_deletion(self, certificate, error: Exception = None):
        """记录单个证书的删除结果"""
        pass

    @abstractmethod
    def log_skip(self, certificate):
        """记录跳过的证书"""
        pass

    @abstractmethod
    def log_cancelled(self, candidate_count: int):
        """记录用户取消整批删除"""
        pass

    @abstractmethod
    def log_abort(self, outcome: RunOutcome):
        """记录用户中止交互删除"""
        pass

    @abstractmethod
    def log_run_end(self, outcome: RunOutcome):
        """记录清理结束"""
        pass
