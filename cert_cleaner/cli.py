"""
命令行入口
"""
import argparse
import sys
from typing import List, Optional

from . import __version__
from .cleaner import CertificateCleaner
from .exceptions import ConfigurationError, FetchError
from .services.config_validator import CleanerConfig
from .services.reporter import ConsoleReporter

USAGE_EXAMPLES = """使用方法:
  # 设置环境变量
  export AWS_ACCESS_KEY_ID='your-access-key'
  export AWS_SECRET_ACCESS_KEY='your-secret-key'

  # 列出所有证书
  cert-cleaner --list-all

  # 模拟运行（仅显示，不删除）
  cert-cleaner --dry-run

  # 批量确认删除（需输入 yes 确认）
  cert-cleaner

  # 逐个确认删除（交互模式）
  cert-cleaner --interactive

  # 自动删除（用于 crontab）
  cert-cleaner --auto

  # crontab 定时任务示例（每天凌晨 3 点执行）
  0 3 * * * /path/to/cert-cleaner --ak "YOUR_AK" --sk "YOUR_SK" --auto --quiet --log /var/log/cert-cleaner.log"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cert-cleaner',
        description="清理未被 CloudFront 使用且已过期的 ACM 证书",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--dry-run', action='store_true', help="模拟运行，仅列出未使用且过期的证书，不执行删除")
    parser.add_argument('--list-all', action='store_true', help="列出所有证书信息")
    parser.add_argument('--auto', action='store_true', help="自动模式，无需确认直接删除（用于 crontab）")
    parser.add_argument('--interactive', action='store_true', help="交互模式，逐个确认删除每个证书")
    parser.add_argument('--quiet', action='store_true', help="静默模式，仅输出错误和删除结果")
    parser.add_argument('--log', dest='log_file', help="日志文件路径（用于 crontab）")
    parser.add_argument('--ak', dest='access_key', help="AWS Access Key，默认读取 AWS_ACCESS_KEY_ID")
    parser.add_argument('--sk', dest='secret_key', help="AWS Secret Key，默认读取 AWS_SECRET_ACCESS_KEY")
    parser.add_argument('--region', dest='region_name', help="ACM 区域，默认 us-east-1")
    parser.add_argument('--sns-topic-arn', help="清理完成后发送报告的 SNS 主题")
    parser.add_argument('--version', action='version', version=f"cert-cleaner version {__version__}")
    return parser


def main(argv: Optional[List[str]] = None, prompt=None) -> int:
    """
    命令行主函数

    Args:
        argv: 命令行参数，默认读取 sys.argv
        prompt: 操作员输入，默认读取终端

    Returns:
        int: 退出码，0 表示没有删除失败
    """
    args = build_parser().parse_args(argv)
    reporter = ConsoleReporter(quiet=args.quiet)

    config = CleanerConfig.from_env(
        access_key=args.access_key,
        secret_key=args.secret_key,
        region_name=args.region_name,
        log_file=args.log_file,
        sns_topic_arn=args.sns_topic_arn,
        dry_run=args.dry_run,
        list_all=args.list_all,
        auto=args.auto,
        interactive=args.interactive,
        quiet=args.quiet,
    )

    try:
        cleaner = CertificateCleaner(config, prompt=prompt, reporter=reporter)
    except ConfigurationError as e:
        for error in e.errors:
            reporter.render_error(error)
        print(f"\n{USAGE_EXAMPLES}")
        return 1
    except OSError as e:
        reporter.render_error(f"无法打开日志文件: {e}")
        return 1

    try:
        result = cleaner.run()
    except FetchError as e:
        cleaner.logger_service.logger.error(str(e))
        reporter.render_error(str(e))
        return 1

    return result.exit_code


if __name__ == '__main__':
    sys.exit(main())
