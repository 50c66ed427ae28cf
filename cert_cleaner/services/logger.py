"""
日志服务
"""
import os
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Sequence
from ..interfaces import LoggerServiceInterface
from ..models import Certificate, RunOutcome
from .error_handler import AwsErrorHandler


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""

    def __init__(self, logger_name: str = "cert_cleaner", log_level: Optional[str] = None,
                 log_file: Optional[str] = None):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
            log_file: 日志文件路径，设置后日志追加写入该文件而不是标准错误
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
        self.log_file = log_file
        self.error_handler = AwsErrorHandler()

        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

        # 执行统计
        self.execution_stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'start_time': None,
            'end_time': None,
            'candidates': 0,
            'succeeded': 0,
            'skipped': 0,
            'failed': 0,
            'errors': []
        }

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        self.logger.setLevel(level)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if self.log_file:
            # 日志文件替换原有输出
            for handler in list(self.logger.handlers):
                self.logger.removeHandler(handler)
                handler.close()
            handler = logging.FileHandler(self.log_file, mode='a', encoding='utf-8')
            handler.setLevel(level)
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        elif not self.logger.handlers:
            # 避免重复添加处理器
            handler = logging.StreamHandler()
            handler.setLevel(level)
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

        # 防止日志传播到根日志器
        self.logger.propagate = False

    def log_run_start(self, candidate_count: int):
        """
        记录清理开始

        Args:
            candidate_count: 待删除证书数量
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['candidates'] = candidate_count

        self.logger.info(f"开始清理 {candidate_count} 个未使用且已过期的证书")

    def log_dry_run(self, candidates: Sequence[Certificate]):
        """
        记录模拟运行中将被删除的证书

        Args:
            candidates: 待删除证书
        """
        self.execution_stats['candidates'] = len(candidates)
        self.logger.info(f"[模拟运行] 发现 {len(candidates)} 个未使用且已过期的证书，不执行删除")
        for cert in candidates:
            self.logger.info(f"[模拟运行] 待删除证书: {cert.name} ({cert.cert_id})")

    def log_deletion(self, certificate: Certificate, error: Exception = None):
        """
        记录单个证书的删除结果

        Args:
            certificate: 证书信息
            error: 删除失败时的异常
        """
        if error is None:
            self.execution_stats['succeeded'] += 1
            self.logger.info(f"删除证书成功: {certificate.name} ({certificate.cert_id})")
            return

        self.execution_stats['failed'] += 1
        error_info = self.error_handler.describe_error(error.__cause__ or error)
        error_info['cert_id'] = certificate.cert_id
        self.execution_stats['errors'].append(error_info)

        self.logger.error(f"删除证书失败: {certificate.name} ({certificate.cert_id}) - {str(error)}")

    def log_skip(self, certificate: Certificate):
        """
        记录跳过的证书

        Args:
            certificate: 证书信息
        """
        self.execution_stats['skipped'] += 1
        self.logger.info(f"跳过证书: {certificate.name} ({certificate.cert_id})")

    def log_cancelled(self, candidate_count: int):
        """记录用户取消整批删除"""
        self.logger.info(f"用户取消删除操作，{candidate_count} 个证书未删除")

    def log_abort(self, outcome: RunOutcome):
        """记录用户中止"""
        self.logger.info(f"用户中止删除操作，已删除 {outcome.succeeded} 个，跳过 {outcome.skipped} 个")

    def log_run_end(self, outcome: RunOutcome):
        """
        记录清理结束

        Args:
            outcome: 执行结果
        """
        self.execution_stats['end_time'] = datetime.now(timezone.utc)
        self.logger.info(
            f"清理完成: 成功 {outcome.succeeded} 个, 跳过 {outcome.skipped} 个, 失败 {outcome.failed} 个"
        )

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息

        Args:
            config: 配置信息字典
        """
        safe_config = self._sanitize_config(config)

        self.logger.debug("运行配置:")
        for key, value in safe_config.items():
            self.logger.debug(f"  {key}: {value}")

    def _sanitize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        清理配置信息中的敏感数据

        Args:
            config: 原始配置

        Returns:
            Dict[str, Any]: 清理后的配置
        """
        safe_config = {}
        for key, value in config.items():
            key_lower = key.lower()

            is_sensitive = (
                key_lower in {'password', 'secret', 'token', 'key', 'sns_topic_arn'} or
                key_lower.endswith('_key') or
                key_lower.endswith('_secret') or
                key_lower.endswith('_token')
            )

            if is_sensitive and isinstance(value, str) and value:
                if 'arn:' in value:
                    # ARN类型，只显示前缀和后缀
                    parts = value.split(':')
                    if len(parts) >= 6:
                        safe_value = f"{':'.join(parts[:3])}:***:{parts[-2]}:{parts[-1]}"
                    else:
                        safe_value = "***"
                else:
                    safe_value = value[:3] + "***" if len(value) > 3 else "***"
                safe_config[key] = safe_value
            else:
                safe_config[key] = value

        return safe_config

    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要

        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        stats = self.execution_stats
        duration = 0
        if stats['start_time'] and stats['end_time']:
            duration = (stats['end_time'] - stats['start_time']).total_seconds()

        return {
            'start_time': stats['start_time'].isoformat() if stats['start_time'] else None,
            'end_time': stats['end_time'].isoformat() if stats['end_time'] else None,
            'duration_seconds': duration,
            'candidates': stats['candidates'],
            'succeeded': stats['succeeded'],
            'skipped': stats['skipped'],
            'failed': stats['failed'],
            'error_count': len(stats['errors']),
            'error_statistics': self.error_handler.get_error_statistics(stats['errors']),
            'errors': stats['errors']
        }

    def log_execution_summary(self):
        """记录执行摘要"""
        summary = self.get_execution_summary()

        self.logger.info("=" * 50)
        self.logger.info("执行摘要")
        self.logger.info("=" * 50)
        self.logger.info(f"执行时长: {summary['duration_seconds']:.2f} 秒")
        self.logger.info(f"待删除证书: {summary['candidates']}")
        self.logger.info(f"删除成功: {summary['succeeded']}")
        self.logger.info(f"跳过: {summary['skipped']}")
        self.logger.info(f"删除失败: {summary['failed']}")

        if summary['errors']:
            self.logger.info(f"错误数量: {summary['error_count']}")
            for i, error in enumerate(summary['errors'][:5], 1):  # 只显示前5个错误
                self.logger.info(f"  错误 {i}: {error['cert_id']} - {error['error_type']}: {error['error_message']}")

            if len(summary['errors']) > 5:
                self.logger.info(f"  ... 还有 {len(summary['errors']) - 5} 个错误")

        self.logger.info("=" * 50)
