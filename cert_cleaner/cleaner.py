"""
未使用过期证书清理主流程
"""
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import boto3

from .interfaces import CertificateProviderInterface, CdnProviderInterface, OperatorPromptInterface
from .models import BindingReport, Certificate, RunOutcome
from .services.acm_provider import ACMCertificateProvider
from .services.cloudfront_provider import CloudFrontProvider
from .services.config_validator import CleanerConfig, ConfigValidator
from .services.eligibility import EligibilityFilter
from .services.executor import ConsolePrompt, ExecutionEngine
from .services.logger import LoggerService
from .services.reporter import ConsoleReporter
from .services.sns_notification import SNSNotificationService
from .services.usage_classifier import UsageClassifier


@dataclass
class CleanupResult:
    """一次运行的完整结果"""
    now: datetime
    certificates: List[Certificate] = field(default_factory=list)
    bindings: BindingReport = field(default_factory=BindingReport)
    candidates: Tuple[Certificate, ...] = ()
    outcome: RunOutcome = field(default_factory=RunOutcome)
    execution_time: float = 0.0

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


class CertificateCleaner:
    """未使用过期证书清理器主类"""

    def __init__(self, config: CleanerConfig,
                 logger_service: Optional[LoggerService] = None,
                 certificate_provider: Optional[CertificateProviderInterface] = None,
                 cdn_provider: Optional[CdnProviderInterface] = None,
                 prompt: Optional[OperatorPromptInterface] = None,
                 reporter: Optional[ConsoleReporter] = None,
                 notification_service: Optional[SNSNotificationService] = None,
                 session=None):
        """
        初始化清理器

        配置在创建任何客户端之前验证。

        Args:
            config: 运行配置
            logger_service: 日志服务，默认按配置创建
            certificate_provider: 证书服务，默认使用 ACM
            cdn_provider: CDN 服务，默认使用 CloudFront
            prompt: 操作员输入，默认读取终端
            reporter: 控制台输出
            notification_service: SNS 通知服务
            session: boto3.Session

        Raises:
            ConfigurationError: 配置无效
        """
        self.config = config

        # 验证警告写入已配置的日志输出
        self.logger_service = logger_service or LoggerService(
            log_level=config.log_level, log_file=config.log_file
        )
        ConfigValidator().ensure_valid(config)
        self.logger_service.log_configuration_info(config.to_log_dict())

        if session is None and (certificate_provider is None or cdn_provider is None
                                or (notification_service is None and config.sns_topic_arn)):
            session = boto3.Session(
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                aws_session_token=config.session_token,
                region_name=config.region_name,
            )

        self.certificate_provider = certificate_provider or ACMCertificateProvider(session, config.region_name)
        self.cdn_provider = cdn_provider or CloudFrontProvider(session)
        self.reporter = reporter or ConsoleReporter(quiet=config.quiet)
        self.notification_service = notification_service or SNSNotificationService(
            topic_arn=config.sns_topic_arn, session=session
        )

        self.classifier = UsageClassifier(self.cdn_provider, self.logger_service.logger)
        self.eligibility_filter = EligibilityFilter()
        self.engine = ExecutionEngine(
            provider=self.certificate_provider,
            prompt=prompt or ConsolePrompt(),
            logger_service=self.logger_service,
            reporter=self.reporter,
        )

    def run(self, now: Optional[datetime] = None) -> CleanupResult:
        """
        执行一次清理

        Args:
            now: 评估时刻，整个运行过程中保持不变；默认取当前时间

        Returns:
            CleanupResult: 运行结果

        Raises:
            FetchError: 证书列表或域名列表获取失败
        """
        started = time.monotonic()
        now = now or datetime.now(timezone.utc)
        result = CleanupResult(now=now)
        logger = self.logger_service.logger

        result.certificates = self.certificate_provider.list_certificates()
        result.bindings = self.classifier.classify()
        in_use_count = self.classifier.mark_usage(result.certificates, result.bindings)

        logger.info(f"共获取到 {len(result.certificates)} 个证书，CDN 正在使用 {in_use_count} 个")
        self.reporter.render_fetch_summary(len(result.certificates), in_use_count)

        if self.config.list_all:
            stats = self.eligibility_filter.summarize(result.certificates, now)
            self.reporter.render_inventory(result.certificates, stats, now)
            return self._finish(result, started)

        result.candidates = self.eligibility_filter.select_candidates(result.certificates, now)
        result.outcome = RunOutcome(candidates=len(result.candidates))

        if not result.candidates:
            stats = self.eligibility_filter.summarize(result.certificates, now)
            self.reporter.render_no_candidates(stats, interactive=self.config.interactive)
            logger.info("检查完成，没有需要清理的证书")
            self._send_report(result)
            return self._finish(result, started)

        self.reporter.render_candidates(result.candidates, now, interactive=self.config.interactive)
        result.outcome = self.engine.execute(result.candidates, self.config.mode, now)

        if result.outcome.processed:
            self.logger_service.log_execution_summary()

        if not result.outcome.cancelled:
            self._send_report(result)

        return self._finish(result, started)

    def _send_report(self, result: CleanupResult):
        """发送清理报告，失败不影响运行结果"""
        try:
            sent = self.notification_service.send_cleanup_report(
                result.candidates, result.outcome, dry_run=self.config.dry_run
            )
        except Exception as e:
            self.logger_service.logger.error(f"发送清理报告时发生错误: {str(e)}")
            return

        if not sent:
            self.logger_service.logger.error("清理报告发送失败")

    def _finish(self, result: CleanupResult, started: float) -> CleanupResult:
        result.execution_time = time.monotonic() - started
        return result
