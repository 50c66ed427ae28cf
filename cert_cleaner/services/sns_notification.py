"""
SNS通知服务
"""
import time
import logging
from datetime import datetime
from typing import Optional, Sequence

import boto3
from botocore.exceptions import ClientError

from ..models import Certificate, RunOutcome


class SNSNotificationService:
    """清理结果 SNS 通知"""

    def __init__(self, topic_arn: Optional[str] = None, session=None, region_name: Optional[str] = None):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，为空时不发送通知
            session: boto3.Session，为空时使用默认会话
            region_name: AWS区域名称，如果为None则从主题ARN中提取
        """
        self.topic_arn = topic_arn
        self.logger = logging.getLogger(__name__)

        if region_name:
            self.region_name = region_name
        elif topic_arn and topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = topic_arn.split(':')[3]
        else:
            self.region_name = 'us-east-1'

        self.sns_client = None
        if topic_arn:
            self.sns_client = (session or boto3).client('sns', region_name=self.region_name)

    @property
    def enabled(self) -> bool:
        return self.sns_client is not None

    def send_cleanup_report(self, candidates: Sequence[Certificate], outcome: RunOutcome,
                            dry_run: bool = False) -> bool:
        """
        发送清理结果报告

        Args:
            candidates: 待删除证书
            outcome: 执行结果
            dry_run: 是否为模拟运行

        Returns:
            bool: 发送是否成功，未配置主题时返回 True
        """
        if not self.enabled:
            return True

        subject = self._format_subject(outcome, dry_run)
        message = self.format_report_content(candidates, outcome, dry_run)
        return self._publish_with_retry(subject, message)

    def _format_subject(self, outcome: RunOutcome, dry_run: bool) -> str:
        if dry_run:
            return f"证书清理模拟运行: {outcome.candidates} 个证书可清理"
        if outcome.failed > 0:
            return f"🚨 证书清理: {outcome.failed} 个删除失败, {outcome.succeeded} 个成功"
        if outcome.candidates == 0:
            return "✅ 证书清理: 没有需要清理的证书"
        return f"✅ 证书清理: 已删除 {outcome.succeeded} 个证书"

    def format_report_content(self, candidates: Sequence[Certificate], outcome: RunOutcome,
                              dry_run: bool = False) -> str:
        """
        格式化报告内容

        Args:
            candidates: 待删除证书
            outcome: 执行结果
            dry_run: 是否为模拟运行

        Returns:
            str: 报告内容
        """
        lines = [
            "未使用过期证书清理报告",
            "=" * 30,
            f"执行时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"未使用且已过期: {len(candidates)} 个",
            ""
        ]

        if dry_run:
            lines.append("[模拟运行] 未删除任何证书")
        else:
            lines.append(f"删除成功: {outcome.succeeded} 个")
            lines.append(f"跳过: {outcome.skipped} 个")
            lines.append(f"删除失败: {outcome.failed} 个")
        lines.append("")

        if candidates:
            lines.append("证书列表:")
            for cert in candidates:
                marker = "✗" if cert.cert_id in outcome.failed_ids else "•"
                lines.append(f"{marker} {cert.name} ({cert.cert_id})")
            lines.append("")

        lines.append("此消息由证书清理工具自动发送。")
        return "\n".join(lines)

    def _publish_with_retry(self, subject: str, message: str, max_retries: int = 3) -> bool:
        """
        带重试机制的SNS消息发布

        Args:
            subject: 消息主题
            message: 消息内容
            max_retries: 最大重试次数

        Returns:
            bool: 发送是否成功
        """
        for attempt in range(max_retries + 1):
            try:
                response = self.sns_client.publish(
                    TopicArn=self.topic_arn,
                    Subject=subject[:100],
                    Message=message
                )
                self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
                return True

            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                if self._is_retryable_error(error_code) and attempt < max_retries:
                    wait_time = 2 ** attempt  # 指数退避
                    self.logger.warning(
                        f"SNS发送失败 (尝试 {attempt + 1}/{max_retries + 1}) - {error_code}: {error_message}，"
                        f"{wait_time}秒后重试"
                    )
                    time.sleep(wait_time)
                    continue

                self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
                return False

        return False

    def _is_retryable_error(self, error_code: str) -> bool:
        return error_code in {'Throttling', 'ServiceUnavailable', 'InternalError', 'RequestTimeout'}
