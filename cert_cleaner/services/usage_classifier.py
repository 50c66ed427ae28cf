"""
证书使用情况分类服务
"""
import logging
from typing import List, Optional

from ..interfaces import CdnProviderInterface
from ..models import Binding, BindingReport, Certificate


class UsageClassifier:
    """根据 CDN 域名绑定关系判断证书是否在使用中"""

    def __init__(self, cdn_provider: CdnProviderInterface, logger: Optional[logging.Logger] = None):
        """
        初始化分类器

        Args:
            cdn_provider: CDN 服务
            logger: 日志器，默认使用模块日志器
        """
        self.cdn_provider = cdn_provider
        self.logger = logger or logging.getLogger(__name__)

    def collect_bindings(self, domains: List[str]) -> BindingReport:
        """
        查询每个域名绑定的证书

        单个域名查询失败时记录到 failed_domains 并按"未绑定"处理，不中断整体分类。

        Args:
            domains: 域名列表

        Returns:
            BindingReport: 绑定查询汇总
        """
        report = BindingReport()

        for domain in domains:
            try:
                cert_id = self.cdn_provider.get_domain_certificate(domain)
                report.add(Binding(domain=domain, certificate_id=cert_id or ""))
            except Exception as e:
                self.logger.warning(f"查询域名 {domain} 的证书配置失败，按未绑定处理: {type(e).__name__}: {str(e)}")
                report.add(Binding(domain=domain, error=str(e)))

        return report

    def classify(self) -> BindingReport:
        """获取所有域名并汇总绑定关系（域名列表获取失败时抛出 FetchError）"""
        domains = self.cdn_provider.list_domains()
        self.logger.info(f"正在检查 {len(domains)} 个 CDN 域名的证书使用情况")

        report = self.collect_bindings(domains)
        if report.failed_domains:
            self.logger.warning(f"{len(report.failed_domains)} 个域名查询失败")
        return report

    @staticmethod
    def mark_usage(certificates: List[Certificate], report: BindingReport) -> int:
        """
        标记证书使用状态

        Args:
            certificates: 证书列表
            report: 绑定查询汇总

        Returns:
            int: 使用中的证书数量（不在证书列表中的绑定ID会被忽略）
        """
        in_use = 0
        for cert in certificates:
            cert.in_use = cert.cert_id in report.used_ids
            if cert.in_use:
                in_use += 1
        return in_use
