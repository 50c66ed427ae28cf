"""
删除执行引擎测试
"""
import pytest
from io import StringIO
from unittest.mock import MagicMock, patch
from datetime import datetime, timezone, timedelta

from cert_cleaner.exceptions import DeletionError
from cert_cleaner.models import Certificate, RunMode
from cert_cleaner.services.executor import (
    ConsolePrompt,
    ExecutionEngine,
    PromptAction,
    PromptState,
    transition,
)
from cert_cleaner.services.reporter import ConsoleReporter

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_candidates(count):
    return tuple(
        Certificate(
            cert_id=f"c{i}",
            name=f"cert-{i}",
            common_name=f"c{i}.example.com",
            expiry=NOW - timedelta(days=i),
        )
        for i in range(1, count + 1)
    )


class ScriptedPrompt:
    """按顺序返回预设答案的输入"""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        return self.answers.pop(0)


class TestTransition:
    """交互确认状态转换测试类"""

    @pytest.mark.parametrize("answer", ["y", "yes", "Y", "YES", " Yes "])
    def test_yes(self, answer):
        assert transition(PromptState.AWAITING_ANSWER, answer) == (PromptState.DELETING, PromptAction.DELETE)

    @pytest.mark.parametrize("answer", ["n", "no", "N", "No"])
    def test_no(self, answer):
        assert transition(PromptState.AWAITING_ANSWER, answer) == (PromptState.SKIPPED, PromptAction.SKIP)

    @pytest.mark.parametrize("answer", ["a", "all", "A", "ALL"])
    def test_all(self, answer):
        assert transition(PromptState.AWAITING_ANSWER, answer) == (
            PromptState.APPLY_ALL_REMAINING, PromptAction.DELETE_ALL_REMAINING
        )

    @pytest.mark.parametrize("answer", ["q", "quit", "Q", "Quit"])
    def test_quit(self, answer):
        assert transition(PromptState.AWAITING_ANSWER, answer) == (PromptState.ABORTED, PromptAction.ABORT)

    @pytest.mark.parametrize("answer", ["", "maybe", "yess", "x", None])
    def test_invalid_input_is_skip(self, answer):
        """测试无效输入按跳过处理"""
        assert transition(PromptState.AWAITING_ANSWER, answer) == (PromptState.SKIPPED, PromptAction.SKIP_INVALID)

    @pytest.mark.parametrize("state", [
        PromptState.DELETING, PromptState.SKIPPED, PromptState.APPLY_ALL_REMAINING, PromptState.ABORTED
    ])
    def test_only_awaiting_accepts_input(self, state):
        with pytest.raises(ValueError):
            transition(state, "y")


class TestExecutionEngine:
    """删除执行引擎测试类"""

    def setup_method(self):
        """测试前准备"""
        self.provider = MagicMock()
        self.logger_service = MagicMock()
        self.output = StringIO()
        self.reporter = ConsoleReporter(stream=self.output)

    def make_engine(self, answers=()):
        self.prompt = ScriptedPrompt(answers)
        return ExecutionEngine(self.provider, self.prompt, self.logger_service, self.reporter)

    def deleted_ids(self):
        return [c.args[0] for c in self.provider.delete_certificate.call_args_list]

    def test_no_candidates_is_noop(self):
        """测试没有待删除证书时不做任何操作"""
        for mode in (RunMode(), RunMode(auto=True), RunMode(interactive=True), RunMode(dry_run=True)):
            outcome = self.make_engine().execute((), mode, NOW)
            assert outcome.success is True
            assert outcome.processed == 0
        self.provider.delete_certificate.assert_not_called()

    def test_dry_run_never_deletes(self):
        """测试模拟运行不删除"""
        candidates = make_candidates(3)

        outcome = self.make_engine().execute(candidates, RunMode(dry_run=True), NOW)

        self.provider.delete_certificate.assert_not_called()
        assert outcome.candidates == 3
        assert outcome.success is True
        assert self.prompt.prompts == []
        assert "[模拟运行]" in self.output.getvalue()

    def test_quiet_dry_run_still_reports_candidates(self):
        """测试静默模拟运行仍然输出并记录所有待删除证书"""
        self.reporter = ConsoleReporter(quiet=True, stream=self.output)
        candidates = make_candidates(2)

        outcome = self.make_engine().execute(candidates, RunMode(dry_run=True, quiet=True), NOW)

        output = self.output.getvalue()
        assert outcome.candidates == 2
        assert "发现 2 个未使用且已过期的证书" in output
        assert "cert-1 (c1)" in output
        assert "cert-2 (c2)" in output
        self.logger_service.log_dry_run.assert_called_once_with(candidates)
        self.provider.delete_certificate.assert_not_called()

    def test_dry_run_with_interactive_never_prompts(self):
        outcome = self.make_engine().execute(make_candidates(2), RunMode(dry_run=True, interactive=True), NOW)
        assert self.prompt.prompts == []
        assert outcome.processed == 0

    def test_auto_deletes_all(self):
        """测试自动模式删除所有证书"""
        candidates = make_candidates(3)

        outcome = self.make_engine().execute(candidates, RunMode(auto=True), NOW)

        assert self.deleted_ids() == ["c1", "c2", "c3"]
        assert outcome.succeeded == 3
        assert outcome.failed == 0
        assert self.prompt.prompts == []
        self.logger_service.log_run_start.assert_called_once_with(3)
        self.logger_service.log_run_end.assert_called_once_with(outcome)

    def test_auto_continues_after_failure(self):
        """测试单个删除失败不中断"""
        self.provider.delete_certificate.side_effect = [None, DeletionError("c2", "ResourceInUseException"), None]

        outcome = self.make_engine().execute(make_candidates(3), RunMode(auto=True), NOW)

        assert self.deleted_ids() == ["c1", "c2", "c3"]
        assert outcome.succeeded == 2
        assert outcome.failed == 1
        assert outcome.succeeded + outcome.failed == 3
        assert outcome.failed_ids == ["c2"]
        assert outcome.success is False
        assert outcome.exit_code == 1

    def test_batch_confirmation_yes(self):
        """测试默认模式输入 yes 后删除"""
        outcome = self.make_engine(["yes"]).execute(make_candidates(2), RunMode(), NOW)

        assert len(self.prompt.prompts) == 1
        assert self.deleted_ids() == ["c1", "c2"]
        assert outcome.succeeded == 2

    @pytest.mark.parametrize("answer", ["no", "y", "YES", "", "yes please"])
    def test_batch_confirmation_declined(self, answer):
        """测试默认模式未确认时不删除且成功退出"""
        outcome = self.make_engine([answer]).execute(make_candidates(2), RunMode(), NOW)

        self.provider.delete_certificate.assert_not_called()
        assert outcome.cancelled is True
        assert outcome.processed == 0
        assert outcome.exit_code == 0
        self.logger_service.log_cancelled.assert_called_once_with(2)
        assert "已取消删除操作" in self.output.getvalue()

    def test_batch_confirmation_strips_whitespace(self):
        self.make_engine(["  yes\n"]).execute(make_candidates(1), RunMode(), NOW)
        assert self.deleted_ids() == ["c1"]

    def test_interactive_skip_then_all(self):
        """测试交互模式 n, a：跳过第一个，删除剩余全部"""
        outcome = self.make_engine(["n", "a"]).execute(make_candidates(3), RunMode(interactive=True), NOW)

        assert self.deleted_ids() == ["c2", "c3"]
        assert outcome.skipped == 1
        assert outcome.succeeded + outcome.failed == 2
        assert len(self.prompt.prompts) == 2

    def test_interactive_all_deletes_remaining_even_after_failure(self):
        """测试选择 all 后当前证书失败仍删除剩余证书"""
        self.provider.delete_certificate.side_effect = [None, DeletionError("c2", "boom"), None, None]

        outcome = self.make_engine(["y", "a"]).execute(make_candidates(4), RunMode(interactive=True), NOW)

        assert self.deleted_ids() == ["c1", "c2", "c3", "c4"]
        assert outcome.failed == 1
        assert outcome.succeeded == 3
        assert len(self.prompt.prompts) == 2

    def test_interactive_all_at_last_candidate(self):
        outcome = self.make_engine(["n", "n", "all"]).execute(make_candidates(3), RunMode(interactive=True), NOW)

        assert self.deleted_ids() == ["c3"]
        assert outcome.skipped == 2
        assert outcome.succeeded == 1

    def test_interactive_quit(self):
        """测试交互模式退出：当前证书不处理，已处理的保留结果"""
        outcome = self.make_engine(["y", "n", "q"]).execute(make_candidates(5), RunMode(interactive=True), NOW)

        assert self.deleted_ids() == ["c1"]
        assert outcome.aborted is True
        assert outcome.succeeded + outcome.failed + outcome.skipped == 2
        assert outcome.exit_code == 0
        assert len(self.prompt.prompts) == 3
        self.logger_service.log_abort.assert_called_once_with(outcome)

    def test_interactive_quit_exit_status_reflects_failures(self):
        """测试退出后的退出码仍由删除失败决定"""
        self.provider.delete_certificate.side_effect = DeletionError("c1", "boom")

        outcome = self.make_engine(["y", "q"]).execute(make_candidates(3), RunMode(interactive=True), NOW)

        assert outcome.aborted is True
        assert outcome.failed == 1
        assert outcome.exit_code == 1

    def test_interactive_invalid_input_skips_without_reprompt(self):
        """测试无效输入直接跳过，不重新询问"""
        outcome = self.make_engine(["maybe", "y"]).execute(make_candidates(2), RunMode(interactive=True), NOW)

        assert self.deleted_ids() == ["c2"]
        assert outcome.skipped == 1
        assert len(self.prompt.prompts) == 2
        assert "输入无效，已跳过" in self.output.getvalue()

    def test_interactive_answers_every_candidate(self):
        outcome = self.make_engine(["y", "n", "yes"]).execute(make_candidates(3), RunMode(interactive=True), NOW)

        assert self.deleted_ids() == ["c1", "c3"]
        assert outcome.succeeded + outcome.failed + outcome.skipped == 3
        assert outcome.aborted is False

    def test_interactive_prompt_shows_progress(self):
        self.make_engine(["n", "n"]).execute(make_candidates(2), RunMode(interactive=True), NOW)

        assert "[1/2] 证书ID: c1" in self.prompt.prompts[0]
        assert "[2/2] 证书ID: c2" in self.prompt.prompts[1]
        assert "已过期 2 天" in self.prompt.prompts[1]

    def test_quiet_suppresses_item_narration_but_not_tally(self):
        """测试静默模式只输出最终统计"""
        self.reporter.quiet = True
        self.provider.delete_certificate.side_effect = [None, DeletionError("c2", "boom")]

        self.make_engine().execute(make_candidates(2), RunMode(auto=True, quiet=True), NOW)

        output = self.output.getvalue()
        assert "删除证书成功" not in output
        assert "删除证书失败" not in output
        assert "删除完成: 成功 1 个, 失败 1 个" in output
        assert self.logger_service.log_deletion.call_count == 2

    def test_tally_shows_skipped_in_interactive(self):
        self.make_engine(["n"]).execute(make_candidates(1), RunMode(interactive=True), NOW)
        assert "删除完成: 成功 0 个, 跳过 1 个, 失败 0 个" in self.output.getvalue()

    def test_failure_logged_at_error(self):
        """测试删除失败记录错误日志"""
        error = DeletionError("c1", "boom")
        self.provider.delete_certificate.side_effect = error
        candidates = make_candidates(1)

        self.make_engine().execute(candidates, RunMode(auto=True), NOW)

        self.logger_service.log_deletion.assert_called_once_with(candidates[0], error)


class TestConsolePrompt:
    """终端输入测试类"""

    @patch('builtins.input', return_value='yes')
    def test_read_line(self, mock_input):
        assert ConsolePrompt().read_line("? ") == 'yes'
        mock_input.assert_called_once_with("? ")

    @patch('builtins.input', side_effect=EOFError)
    def test_eof_reads_empty(self, mock_input):
        assert ConsolePrompt().read_line("? ") == ''
