"""
控制台输出服务
"""
import sys
from datetime import datetime
from typing import List, Sequence

from ..models import Certificate, InventoryStats, RunOutcome

SEPARATOR = "=" * 80
THIN_SEPARATOR = "-" * 80


class ConsoleReporter:
    """控制台报告输出，quiet 模式下不输出逐项过程信息"""

    def __init__(self, quiet: bool = False, stream=None):
        self.quiet = quiet
        self.stream = stream or sys.stdout

    def _print(self, text: str = ""):
        print(text, file=self.stream)

    def _narrate(self, text: str = ""):
        if not self.quiet:
            self._print(text)

    def render_fetch_summary(self, certificate_count: int, in_use_count: int):
        self._narrate(f"共获取到 {certificate_count} 个证书")
        self._narrate(f"CDN 正在使用 {in_use_count} 个证书\n")

    def render_candidates(self, candidates: Sequence[Certificate], now: datetime, interactive: bool = False):
        """
        输出待删除证书列表

        Args:
            candidates: 待删除证书
            now: 评估时刻
            interactive: 是否为交互模式
        """
        self._narrate(f"发现 {len(candidates)} 个未使用且已过期的证书:")
        if interactive:
            self._narrate("\n[交互模式] 您将逐个确认是否删除以下证书")
        self._narrate(SEPARATOR)

        for i, cert in enumerate(candidates, 1):
            self._narrate(f"[{i}] 证书ID: {cert.cert_id}")
            self._narrate(self._describe(cert, now, indent=4))
            self._narrate(THIN_SEPARATOR)

    def _describe(self, cert: Certificate, now: datetime, indent: int) -> str:
        pad = " " * indent
        return "\n".join([
            f"{pad}证书名称: {cert.name}",
            f"{pad}通用名称: {cert.common_name}",
            f"{pad}过期时间: {cert.expiry.strftime('%Y-%m-%d %H:%M:%S')} (已过期 {cert.days_expired(now)} 天)",
        ])

    def render_inventory(self, certificates: List[Certificate], stats: InventoryStats, now: datetime):
        """
        输出所有证书列表及统计

        Args:
            certificates: 所有证书
            stats: 统计结果
            now: 评估时刻
        """
        self._print("所有证书列表:")
        self._print(SEPARATOR)
        self._print(f"{'证书ID':<18} {'证书名称':<30} {'使用中':<8} 过期时间")
        self._print(THIN_SEPARATOR)

        for cert in certificates:
            in_use = "是" if cert.in_use else "否"

            expiry = "未知"
            if cert.expiry is not None:
                expiry = cert.expiry.strftime('%Y-%m-%d')
                if cert.expiry < now:
                    expiry = f"{expiry} (已过期{cert.days_expired(now)}天)"
                else:
                    expiry = f"{expiry} (剩余{-cert.days_expired(now)}天)"

            name = cert.name
            if len(name) > 28:
                name = name[:25] + "..."

            self._print(f"{cert.cert_id:<18} {name:<30} {in_use:<8} {expiry}")
        self._print(SEPARATOR)

        self._print(f"\n统计: 总计 {stats.total} 个证书")
        self._print(f"  - 使用中: {stats.in_use} 个")
        self._print(f"  - 未使用: {stats.unused} 个")
        self._print(f"  - 已过期: {stats.expired} 个")
        self._print(f"  - 未使用且已过期: {stats.expired_unused} 个 (可清理)")

    def render_no_candidates(self, stats: InventoryStats, interactive: bool = False):
        self._narrate("✓ 没有发现未使用且已过期的证书")
        if not interactive:
            return

        self._narrate("\n提示: --interactive 参数仅对「未使用且已过期」的证书有效")
        self._narrate("当前所有证书均为正常证书（使用中或未过期），无需使用此参数")
        self._narrate("\n当前证书状态统计:")
        self._narrate(f"  - 总计: {stats.total} 个")
        self._narrate(f"  - 使用中: {stats.in_use} 个")
        self._narrate(f"  - 未使用: {stats.unused} 个")
        self._narrate(f"  - 已过期: {stats.expired} 个")
        self._narrate(f"  - 未使用且已过期: {stats.expired_unused} 个")

    def render_dry_run_notice(self, candidates: Sequence[Certificate]):
        """
        输出模拟运行结果，quiet 模式下同样输出

        Args:
            candidates: 待删除证书
        """
        if self.quiet:
            # 静默模式下候选列表未输出，这里补充证书ID
            self._print(f"\n[模拟运行] 发现 {len(candidates)} 个未使用且已过期的证书:")
            for cert in candidates:
                self._print(f"  - {cert.name} ({cert.cert_id})")
        self._print(f"\n[模拟运行] 以上 {len(candidates)} 个证书将在非模拟模式下被删除")
        self._print("如需执行删除，请去掉 --dry-run 参数运行")

    def batch_prompt(self, count: int) -> str:
        return f"\n确认要删除以上 {count} 个证书吗？(输入 yes 确认): "

    def item_prompt(self, index: int, total: int, cert: Certificate, now: datetime) -> str:
        """生成交互模式下单个证书的确认提示"""
        return "\n".join([
            f"\n[{index}/{total}] 证书ID: {cert.cert_id}",
            self._describe(cert, now, indent=6),
            "\n删除此证书？(y=是, n=否, a=全部, q=退出): ",
        ])

    def render_cancelled(self):
        self._print("已取消删除操作")

    def render_start(self):
        self._narrate("\n开始删除过期未使用的证书...")

    def render_apply_all(self):
        self._narrate("\n开始删除所有剩余证书...")

    def render_abort(self):
        self._print("\n已退出删除操作")

    def render_deletion(self, cert: Certificate, error: Exception = None):
        if error is None:
            self._narrate(f"✓ 删除证书成功: {cert.name} ({cert.cert_id})")
        else:
            self._narrate(f"✗ 删除证书失败: {cert.name} ({cert.cert_id}) - {error}")

    def render_skip(self, cert: Certificate, invalid: bool = False):
        if invalid:
            self._narrate(f"⊘ 输入无效，已跳过: {cert.name} ({cert.cert_id})")
        else:
            self._narrate(f"⊘ 已跳过: {cert.name} ({cert.cert_id})")

    def render_tally(self, outcome: RunOutcome, show_skipped: bool = True):
        """输出最终统计，quiet 模式下同样输出"""
        self._print("\n" + SEPARATOR)
        if show_skipped:
            self._print(f"删除完成: 成功 {outcome.succeeded} 个, 跳过 {outcome.skipped} 个, 失败 {outcome.failed} 个")
        else:
            self._print(f"删除完成: 成功 {outcome.succeeded} 个, 失败 {outcome.failed} 个")

    def render_error(self, message: str):
        self._print(f"错误: {message}")
