"""
日志服务测试
"""
import pytest
import os
import logging
from unittest.mock import patch
from io import StringIO

from botocore.exceptions import ClientError

from cert_cleaner.exceptions import DeletionError
from cert_cleaner.models import Certificate, RunOutcome
from cert_cleaner.services.logger import LoggerService


class TestLoggerService:
    """日志服务测试类"""

    def setup_method(self):
        """测试前准备"""
        self.logger_service = LoggerService(logger_name="test_cert_logger")

        # 创建一个字符串流来捕获日志输出
        self.log_stream = StringIO()
        handler = logging.StreamHandler(self.log_stream)
        handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))

        self.logger_service.logger.handlers.clear()
        self.logger_service.logger.addHandler(handler)
        self.logger_service.logger.setLevel(logging.DEBUG)

        self.cert = Certificate(cert_id="arn:aws:acm:us-east-1:123456789012:certificate/abc",
                                name="old-cert", common_name="old.example.com")

    def get_log_output(self) -> str:
        return self.log_stream.getvalue()

    def test_init_default_config(self):
        """测试默认配置初始化"""
        with patch.dict(os.environ, {}, clear=True):
            service = LoggerService()

        assert service.logger_name == "cert_cleaner"
        assert service.log_level == "INFO"
        assert service.logger.propagate is False

    @patch.dict(os.environ, {'LOG_LEVEL': 'DEBUG'})
    def test_init_with_env_log_level(self):
        """测试从环境变量读取日志级别"""
        service = LoggerService(logger_name="env_level_logger")

        assert service.log_level == "DEBUG"
        assert service.logger.level == logging.DEBUG

    def test_log_file_appends(self, tmp_path):
        """测试日志写入文件（追加模式）"""
        log_file = tmp_path / "cleaner.log"
        log_file.write_text("existing line\n", encoding="utf-8")

        service = LoggerService(logger_name="file_logger", log_level="INFO", log_file=str(log_file))
        service.log_skip(self.cert)
        for handler in service.logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert content.startswith("existing line\n")
        assert "INFO - 跳过证书: old-cert" in content
        assert len(service.logger.handlers) == 1

        for handler in list(service.logger.handlers):
            handler.close()
            service.logger.removeHandler(handler)

    def test_log_run_start(self):
        self.logger_service.log_run_start(3)

        assert "INFO - 开始清理 3 个未使用且已过期的证书" in self.get_log_output()
        assert self.logger_service.execution_stats['candidates'] == 3
        assert self.logger_service.execution_stats['start_time'] is not None

    def test_log_deletion_success(self):
        """测试删除成功记录 INFO"""
        self.logger_service.log_deletion(self.cert)

        assert f"INFO - 删除证书成功: old-cert ({self.cert.cert_id})" in self.get_log_output()
        assert self.logger_service.execution_stats['succeeded'] == 1

    def test_log_deletion_failure(self):
        """测试删除失败记录 ERROR 并保留 AWS 错误码"""
        cause = ClientError({'Error': {'Code': 'ResourceInUseException', 'Message': 'in use'}}, 'DeleteCertificate')
        try:
            raise DeletionError(self.cert.cert_id, "ResourceInUseException: in use") from cause
        except DeletionError as e:
            error = e

        self.logger_service.log_deletion(self.cert, error)

        output = self.get_log_output()
        assert "ERROR - 删除证书失败: old-cert" in output
        assert "ResourceInUseException: in use" in output

        stats = self.logger_service.execution_stats
        assert stats['failed'] == 1
        assert stats['errors'][0]['error_code'] == 'ResourceInUseException'
        assert stats['errors'][0]['cert_id'] == self.cert.cert_id

    def test_log_skip_and_abort(self):
        self.logger_service.log_skip(self.cert)
        self.logger_service.log_abort(RunOutcome(candidates=3, succeeded=1, skipped=1))

        output = self.get_log_output()
        assert "跳过证书: old-cert" in output
        assert "用户中止删除操作，已删除 1 个，跳过 1 个" in output

    def test_log_cancelled(self):
        self.logger_service.log_cancelled(4)
        assert "用户取消删除操作，4 个证书未删除" in self.get_log_output()

    def test_log_run_end(self):
        self.logger_service.log_run_start(2)
        self.logger_service.log_run_end(RunOutcome(candidates=2, succeeded=1, failed=1))

        assert "清理完成: 成功 1 个, 跳过 0 个, 失败 1 个" in self.get_log_output()
        assert self.logger_service.execution_stats['end_time'] is not None

    def test_log_configuration_masks_secrets(self):
        """测试配置日志中隐藏敏感信息"""
        self.logger_service.log_configuration_info({
            'access_key': 'AKIAEXAMPLEKEY',
            'sns_topic_arn': 'arn:aws:sns:us-east-1:123456789012:cleanup',
            'region_name': 'us-east-1',
        })

        output = self.get_log_output()
        assert 'AKIAEXAMPLEKEY' not in output
        assert 'access_key: AKI***' in output
        assert 'arn:aws:sns:***:123456789012:cleanup' in output
        assert 'region_name: us-east-1' in output

    def test_get_execution_summary(self):
        """测试执行摘要"""
        self.logger_service.log_run_start(2)
        self.logger_service.log_deletion(self.cert)
        self.logger_service.log_deletion(self.cert, DeletionError(self.cert.cert_id, "boom"))
        self.logger_service.log_run_end(RunOutcome(candidates=2, succeeded=1, failed=1))

        summary = self.logger_service.get_execution_summary()

        assert summary['candidates'] == 2
        assert summary['succeeded'] == 1
        assert summary['failed'] == 1
        assert summary['error_count'] == 1
        assert summary['error_statistics']['most_common_error'] == 'DeletionError'
        assert summary['duration_seconds'] >= 0

    def test_log_execution_summary_limits_errors(self):
        for i in range(7):
            self.logger_service.log_deletion(self.cert, DeletionError(f"c{i}", "boom"))

        self.logger_service.log_execution_summary()

        output = self.get_log_output()
        assert "执行摘要" in output
        assert "删除失败: 7" in output
        assert "... 还有 2 个错误" in output

    def test_log_dry_run_lists_candidates(self):
        """测试模拟运行记录所有待删除证书"""
        other = Certificate(cert_id="arn:aws:acm:us-east-1:123456789012:certificate/def",
                            name="older-cert", common_name="older.example.com")

        self.logger_service.log_dry_run((self.cert, other))

        output = self.get_log_output()
        assert "INFO - [模拟运行] 发现 2 个未使用且已过期的证书" in output
        assert self.cert.cert_id in output
        assert other.cert_id in output
        assert self.logger_service.execution_stats['candidates'] == 2
