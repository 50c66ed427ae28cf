"""
证书删除执行服务
"""
from datetime import datetime
from enum import Enum
from typing import Sequence, Tuple

from ..interfaces import CertificateProviderInterface, OperatorPromptInterface, LoggerServiceInterface
from ..models import Certificate, RunMode, RunOutcome
from .reporter import ConsoleReporter


class PromptState(Enum):
    """交互模式下单个证书的确认状态"""
    AWAITING_ANSWER = "awaiting_answer"
    DELETING = "deleting"
    SKIPPED = "skipped"
    APPLY_ALL_REMAINING = "apply_all_remaining"
    ABORTED = "aborted"


class PromptAction(Enum):
    """状态转换附带的动作"""
    DELETE = "delete"
    SKIP = "skip"
    SKIP_INVALID = "skip_invalid"
    DELETE_ALL_REMAINING = "delete_all_remaining"
    ABORT = "abort"


YES_ANSWERS = {'y', 'yes'}
NO_ANSWERS = {'n', 'no'}
ALL_ANSWERS = {'a', 'all'}
QUIT_ANSWERS = {'q', 'quit'}

BATCH_CONFIRMATION = 'yes'


def transition(state: PromptState, answer: str) -> Tuple[PromptState, PromptAction]:
    """
    交互确认状态转换

    无法识别的输入按跳过处理，不会重新询问。

    Args:
        state: 当前状态，必须为 AWAITING_ANSWER
        answer: 操作员输入

    Returns:
        Tuple[PromptState, PromptAction]: 下一个状态及对应动作

    Raises:
        ValueError: 当前状态不是 AWAITING_ANSWER
    """
    if state is not PromptState.AWAITING_ANSWER:
        raise ValueError(f"状态 {state.value} 不接受输入")

    normalized = (answer or "").strip().lower()

    if normalized in YES_ANSWERS:
        return PromptState.DELETING, PromptAction.DELETE
    if normalized in NO_ANSWERS:
        return PromptState.SKIPPED, PromptAction.SKIP
    if normalized in ALL_ANSWERS:
        return PromptState.APPLY_ALL_REMAINING, PromptAction.DELETE_ALL_REMAINING
    if normalized in QUIT_ANSWERS:
        return PromptState.ABORTED, PromptAction.ABORT
    return PromptState.SKIPPED, PromptAction.SKIP_INVALID


class ConsolePrompt(OperatorPromptInterface):
    """从终端读取操作员输入"""

    def read_line(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError:
            return ""


class ExecutionEngine:
    """按执行模式确认并删除证书"""

    def __init__(self, provider: CertificateProviderInterface, prompt: OperatorPromptInterface,
                 logger_service: LoggerServiceInterface, reporter: ConsoleReporter):
        """
        初始化执行引擎

        Args:
            provider: 证书服务，用于删除证书
            prompt: 操作员输入
            logger_service: 日志服务
            reporter: 控制台输出
        """
        self.provider = provider
        self.prompt = prompt
        self.logger_service = logger_service
        self.reporter = reporter

    def execute(self, candidates: Sequence[Certificate], mode: RunMode, now: datetime) -> RunOutcome:
        """
        执行删除

        Args:
            candidates: 待删除证书，执行期间不再变化
            mode: 执行模式
            now: 本次运行固定的评估时刻

        Returns:
            RunOutcome: 执行结果
        """
        candidates = tuple(candidates)
        outcome = RunOutcome(candidates=len(candidates))

        if not candidates:
            return outcome

        if mode.dry_run:
            self.logger_service.log_dry_run(candidates)
            self.reporter.render_dry_run_notice(candidates)
            return outcome

        if mode.requires_batch_confirmation and not self._confirm_batch(len(candidates)):
            outcome.cancelled = True
            self.reporter.render_cancelled()
            self.logger_service.log_cancelled(len(candidates))
            return outcome

        if not mode.interactive:
            self.reporter.render_start()

        self.logger_service.log_run_start(len(candidates))

        if mode.interactive:
            self._run_interactive(candidates, outcome, now)
        else:
            for cert in candidates:
                self._delete(cert, outcome)

        self.logger_service.log_run_end(outcome)
        self.reporter.render_tally(outcome, show_skipped=mode.interactive)
        return outcome

    def _confirm_batch(self, count: int) -> bool:
        answer = self.prompt.read_line(self.reporter.batch_prompt(count))
        return (answer or "").strip() == BATCH_CONFIRMATION

    def _run_interactive(self, candidates: Tuple[Certificate, ...], outcome: RunOutcome, now: datetime):
        total = len(candidates)

        for index, cert in enumerate(candidates):
            answer = self.prompt.read_line(self.reporter.item_prompt(index + 1, total, cert, now))
            _, action = transition(PromptState.AWAITING_ANSWER, answer)

            if action is PromptAction.ABORT:
                outcome.aborted = True
                self.reporter.render_abort()
                self.logger_service.log_abort(outcome)
                return

            if action in (PromptAction.SKIP, PromptAction.SKIP_INVALID):
                outcome.skipped += 1
                self.logger_service.log_skip(cert)
                self.reporter.render_skip(cert, invalid=action is PromptAction.SKIP_INVALID)
                continue

            self._delete(cert, outcome)

            if action is PromptAction.DELETE_ALL_REMAINING:
                self.reporter.render_apply_all()
                for remaining in candidates[index + 1:]:
                    self._delete(remaining, outcome)
                return

    def _delete(self, cert: Certificate, outcome: RunOutcome):
        """删除单个证书，失败只计数不中断"""
        try:
            self.provider.delete_certificate(cert.cert_id)
        except Exception as e:
            outcome.failed += 1
            outcome.failed_ids.append(cert.cert_id)
            self.logger_service.log_deletion(cert, e)
            self.reporter.render_deletion(cert, e)
            return

        outcome.succeeded += 1
        self.logger_service.log_deletion(cert)
        self.reporter.render_deletion(cert)
