"""
ACM 证书服务
"""
import logging
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import DeletionError, FetchError
from ..interfaces import CertificateProviderInterface
from ..models import Certificate
from .error_handler import AwsErrorHandler
from .time_parser import format_timestamp, parse_expiry

ALL_KEY_TYPES = [
    'RSA_1024', 'RSA_2048', 'RSA_3072', 'RSA_4096',
    'EC_prime256v1', 'EC_secp384r1', 'EC_secp521r1',
]


class ACMCertificateProvider(CertificateProviderInterface):
    """基于 AWS Certificate Manager 的证书服务"""

    def __init__(self, session, region_name: Optional[str] = None):
        """
        初始化 ACM 证书服务

        Args:
            session: boto3.Session
            region_name: 区域名称，CloudFront 使用的证书位于 us-east-1
        """
        self.region_name = region_name or session.region_name or 'us-east-1'
        self.client = session.client('acm', region_name=self.region_name)
        self.error_handler = AwsErrorHandler()
        self.logger = logging.getLogger(__name__)

    def list_certificates(self) -> List[Certificate]:
        """
        获取所有证书

        Returns:
            List[Certificate]: 证书列表，顺序与 ACM 返回顺序一致

        Raises:
            FetchError: 列表或详情获取失败
        """
        certificates = []
        try:
            paginator = self.client.get_paginator('list_certificates')
            for page in paginator.paginate(Includes={'keyTypes': ALL_KEY_TYPES}):
                for summary in page.get('CertificateSummaryList', []):
                    certificates.append(self._build_certificate(summary['CertificateArn']))
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"获取证书列表失败: {self.error_handler.format_error(e)}") from e

        self.logger.debug(f"区域 {self.region_name} 共获取到 {len(certificates)} 个证书")
        return certificates

    def _build_certificate(self, arn: str) -> Certificate:
        detail = self.client.describe_certificate(CertificateArn=arn)['Certificate']
        common_name = detail.get('DomainName', '')
        raw_start = format_timestamp(detail.get('NotBefore'))
        raw_stop = format_timestamp(detail.get('NotAfter'))

        return Certificate(
            cert_id=arn,
            name=self._get_name_tag(arn) or common_name,
            common_name=common_name,
            raw_start=raw_start,
            raw_stop=raw_stop,
            expiry=parse_expiry(raw_stop),
        )

    def _get_name_tag(self, arn: str) -> str:
        response = self.client.list_tags_for_certificate(CertificateArn=arn)
        for tag in response.get('Tags', []):
            if tag.get('Key') == 'Name':
                return tag.get('Value', '')
        return ''

    def delete_certificate(self, cert_id: str) -> None:
        """
        删除证书

        Args:
            cert_id: 证书 ARN

        Raises:
            DeletionError: 删除失败
        """
        try:
            self.client.delete_certificate(CertificateArn=cert_id)
        except (ClientError, BotoCoreError) as e:
            raise DeletionError(cert_id, self.error_handler.format_error(e)) from e
