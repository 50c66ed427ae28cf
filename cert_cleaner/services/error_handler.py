"""
错误处理服务
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError


class AwsErrorHandler:
    """AWS SDK 错误处理器"""

    # 证书删除时常见的错误码
    IN_USE_ERRORS = {'ResourceInUseException'}
    NOT_FOUND_ERRORS = {'ResourceNotFoundException', 'NoSuchDistribution'}
    PERMISSION_ERRORS = {'AccessDeniedException', 'AccessDenied', 'UnauthorizedOperation'}
    THROTTLING_ERRORS = {'Throttling', 'ThrottlingException', 'TooManyRequestsException'}

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def describe_error(self, error: Exception) -> Dict[str, Any]:
        """
        将 SDK 异常转换为结构化的错误信息

        Args:
            error: 异常对象

        Returns:
            Dict[str, Any]: 错误信息
        """
        error_code = None
        error_message = str(error)

        if isinstance(error, ClientError):
            error_code = error.response.get('Error', {}).get('Code')
            error_message = error.response.get('Error', {}).get('Message', error_message)

        return {
            'error_type': type(error).__name__,
            'error_code': error_code,
            'error_message': error_message,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(error, error_code),
        }

    def format_error(self, error: Exception) -> str:
        """生成一行可读的错误描述"""
        info = self.describe_error(error)
        if info['error_code']:
            return f"{info['error_code']}: {info['error_message']}"
        return f"{info['error_type']}: {info['error_message']}"

    def _get_suggested_action(self, error: Exception, error_code) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象
            error_code: AWS 错误码

        Returns:
            str: 建议的处理方案
        """
        if isinstance(error, NoCredentialsError):
            return "检查 AWS_ACCESS_KEY_ID 和 AWS_SECRET_ACCESS_KEY 是否设置"
        if error_code in self.IN_USE_ERRORS:
            return "证书仍被其他资源使用，确认绑定关系后重试"
        if error_code in self.NOT_FOUND_ERRORS:
            return "资源不存在，可能已被删除"
        if error_code in self.PERMISSION_ERRORS:
            return "检查 IAM 权限（acm:DeleteCertificate, cloudfront:GetDistributionConfig 等）"
        if error_code in self.THROTTLING_ERRORS:
            return "请求被限流，稍后重试"
        if isinstance(error, BotoCoreError):
            return "检查网络连接和区域配置"
        return "检查 AWS 服务状态和账号配置"

    def get_error_statistics(self, error_list: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        获取错误统计信息

        Args:
            error_list: 错误信息列表

        Returns:
            Dict[str, Any]: 错误统计
        """
        if not error_list:
            return {
                'total_errors': 0,
                'error_types': {},
                'most_common_error': None
            }

        error_types = {}
        for error_info in error_list:
            key = error_info.get('error_code') or error_info.get('error_type', 'Unknown')
            error_types[key] = error_types.get(key, 0) + 1

        most_common_error = max(error_types.items(), key=lambda x: x[1])

        return {
            'total_errors': len(error_list),
            'error_types': error_types,
            'most_common_error': most_common_error[0],
            'most_common_error_count': most_common_error[1]
        }
