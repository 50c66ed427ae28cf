"""
配置验证服务
"""
import os
import re
import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

from ..exceptions import ConfigurationError
from ..models import RunMode

DEFAULT_REGION = 'us-east-1'
SNS_ARN_PATTERN = re.compile(r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$')


@dataclass
class CleanerConfig:
    """运行配置"""
    access_key: str = ""
    secret_key: str = ""
    session_token: Optional[str] = None
    region_name: str = DEFAULT_REGION
    log_file: Optional[str] = None
    log_level: Optional[str] = None
    sns_topic_arn: Optional[str] = None
    dry_run: bool = False
    list_all: bool = False
    auto: bool = False
    interactive: bool = False
    quiet: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "CleanerConfig":
        """
        从环境变量构建配置，显式传入的非空值优先

        Args:
            **overrides: 命令行等来源的显式配置

        Returns:
            CleanerConfig: 运行配置
        """
        values = {
            'access_key': os.getenv('AWS_ACCESS_KEY_ID', ''),
            'secret_key': os.getenv('AWS_SECRET_ACCESS_KEY', ''),
            'session_token': os.getenv('AWS_SESSION_TOKEN') or None,
            'region_name': os.getenv('AWS_REGION') or DEFAULT_REGION,
            'log_file': os.getenv('LOG_FILE') or None,
            'log_level': os.getenv('LOG_LEVEL') or None,
            'sns_topic_arn': os.getenv('SNS_TOPIC_ARN') or None,
        }
        for key, value in overrides.items():
            if value is not None and value != "":
                values[key] = value
        return cls(**values)

    @property
    def mode(self) -> RunMode:
        return RunMode(
            dry_run=self.dry_run,
            auto=self.auto,
            interactive=self.interactive,
            quiet=self.quiet,
        )

    def to_log_dict(self) -> Dict[str, Any]:
        """用于日志记录的配置（由日志服务负责脱敏）"""
        return {
            'access_key': self.access_key,
            'region_name': self.region_name,
            'log_file': self.log_file,
            'sns_topic_arn': self.sns_topic_arn,
            'dry_run': self.dry_run,
            'list_all': self.list_all,
            'auto': self.auto,
            'interactive': self.interactive,
            'quiet': self.quiet,
        }


class ConfigValidator:
    """配置验证器"""

    def __init__(self):
        """初始化配置验证器"""
        self.logger = logging.getLogger(__name__)

    def validate(self, config: CleanerConfig) -> Dict[str, Any]:
        """
        验证运行配置

        Args:
            config: 运行配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'warnings': []
        }

        if config.auto and config.interactive:
            result['errors'].append("--auto 和 --interactive 参数不能同时使用")

        if not config.access_key or not config.secret_key:
            result['errors'].append(
                "请设置 AWS_ACCESS_KEY_ID 和 AWS_SECRET_ACCESS_KEY 环境变量，或使用 --ak 和 --sk 参数"
            )

        if config.sns_topic_arn and not SNS_ARN_PATTERN.match(config.sns_topic_arn):
            result['errors'].append(f"SNS主题ARN格式无效: {config.sns_topic_arn}")

        if config.dry_run and config.auto:
            result['warnings'].append("--dry-run 模式下 --auto 不会删除任何证书")

        if config.region_name != DEFAULT_REGION:
            result['warnings'].append(
                f"CloudFront 只能使用 {DEFAULT_REGION} 区域的 ACM 证书，当前区域: {config.region_name}"
            )

        result['is_valid'] = not result['errors']
        return result

    def ensure_valid(self, config: CleanerConfig) -> Dict[str, Any]:
        """
        验证配置，无效时抛出异常

        Args:
            config: 运行配置

        Returns:
            Dict[str, Any]: 验证结果

        Raises:
            ConfigurationError: 配置无效
        """
        result = self.validate(config)
        for warning in result['warnings']:
            self.logger.warning(warning)

        if not result['is_valid']:
            raise ConfigurationError(result['errors'])
        return result
