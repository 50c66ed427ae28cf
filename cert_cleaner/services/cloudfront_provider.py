"""
CloudFront CDN 服务
"""
import logging
from typing import List

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import FetchError
from ..interfaces import CdnProviderInterface
from .error_handler import AwsErrorHandler


class CloudFrontProvider(CdnProviderInterface):
    """基于 Amazon CloudFront 的 CDN 服务"""

    def __init__(self, session):
        # CloudFront 是全局服务
        self.client = session.client('cloudfront')
        self.error_handler = AwsErrorHandler()
        self.logger = logging.getLogger(__name__)

    def list_domains(self) -> List[str]:
        """
        获取所有分配（distribution）ID

        Returns:
            List[str]: 分配 ID 列表

        Raises:
            FetchError: 列表获取失败
        """
        domains = []
        try:
            paginator = self.client.get_paginator('list_distributions')
            for page in paginator.paginate():
                items = page.get('DistributionList', {}).get('Items', [])
                domains.extend(item['Id'] for item in items)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"获取域名列表失败: {self.error_handler.format_error(e)}") from e

        return domains

    def get_domain_certificate(self, domain: str) -> str:
        """
        获取分配使用的 ACM 证书

        Args:
            domain: 分配 ID

        Returns:
            str: ACM 证书 ARN，使用默认证书或 IAM 证书时为空字符串
        """
        response = self.client.get_distribution_config(Id=domain)
        viewer_certificate = response.get('DistributionConfig', {}).get('ViewerCertificate', {})
        return viewer_certificate.get('ACMCertificateArn', '') or ''
