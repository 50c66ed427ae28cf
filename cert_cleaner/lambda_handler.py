"""
AWS Lambda函数入口点
"""
from typing import Dict, Any
from datetime import datetime, timezone

from .cleaner import CertificateCleaner
from .exceptions import CertCleanerError
from .interfaces import OperatorPromptInterface
from .services.config_validator import CleanerConfig
from .services.logger import LoggerService


class _NoOperatorPrompt(OperatorPromptInterface):
    """定时任务中没有操作员，自动模式不会读取输入"""

    def read_line(self, prompt: str) -> str:
        return ""


def _is_dry_run(value: Any) -> bool:
    """事件中的 dry_run 只接受布尔值或 "true"/"1" 字符串"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1')
    return False


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda函数入口点，以自动、静默模式执行清理

    Args:
        event: EventBridge触发事件，可包含 {"dry_run": true}
        context: Lambda运行时上下文

    Returns:
        dict: 执行结果和统计信息
    """
    event = event or {}

    try:
        config = CleanerConfig.from_env(
            auto=True,
            quiet=True,
            dry_run=_is_dry_run(event.get('dry_run')),
        )
        cleaner = CertificateCleaner(config, prompt=_NoOperatorPrompt())
        result = cleaner.run()

        outcome = result.outcome
        response = {
            'statusCode': 200,
            'body': {
                'message': 'Certificate cleaner executed successfully',
                'summary': {
                    'total_certificates': len(result.certificates),
                    'domains_checked': result.bindings.total_domains,
                    'failed_domain_lookups': len(result.bindings.failed_domains),
                    'candidates': outcome.candidates,
                    'succeeded': outcome.succeeded,
                    'skipped': outcome.skipped,
                    'failed': outcome.failed,
                    'dry_run': config.dry_run,
                    'execution_time_seconds': result.execution_time,
                },
                'candidates': [cert.cert_id for cert in result.candidates],
                'failed_certificates': outcome.failed_ids,
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }

        # 有删除失败时返回错误状态码
        if not outcome.success:
            response['statusCode'] = 500
            response['body']['message'] = 'Certificate cleaner finished with failed deletions'

        return response

    except CertCleanerError as e:
        # 配置错误或列表获取失败
        LoggerService().logger.error(f"Lambda函数执行失败: {str(e)}")
        return {
            'statusCode': 500,
            'body': {
                'message': 'Certificate cleaner failed to execute',
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }
