"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Set


@dataclass
class Certificate:
    """证书信息"""
    cert_id: str
    name: str
    common_name: str
    raw_start: str = ""
    raw_stop: str = ""
    expiry: Optional[datetime] = None
    in_use: bool = False

    def is_expired_at(self, now: datetime) -> bool:
        """判断在给定时刻是否已过期（过期时间未知视为未过期）"""
        return self.expiry is not None and self.expiry < now

    def days_expired(self, now: datetime) -> int:
        """已过期天数"""
        if self.expiry is None:
            return 0
        return int((now - self.expiry).total_seconds() // 86400)


@dataclass
class Binding:
    """域名与证书的绑定关系"""
    domain: str
    certificate_id: str = ""
    error: Optional[str] = None

    @property
    def lookup_failed(self) -> bool:
        return self.error is not None


@dataclass
class BindingReport:
    """所有域名绑定查询的汇总结果（允许部分失败）"""
    used_ids: Set[str] = field(default_factory=set)
    bindings: List[Binding] = field(default_factory=list)
    failed_domains: List[Binding] = field(default_factory=list)

    @property
    def total_domains(self) -> int:
        return len(self.bindings) + len(self.failed_domains)

    def add(self, binding: Binding):
        if binding.lookup_failed:
            self.failed_domains.append(binding)
            return
        self.bindings.append(binding)
        if binding.certificate_id:
            self.used_ids.add(binding.certificate_id)


@dataclass
class InventoryStats:
    """证书清单统计"""
    total: int
    in_use: int
    unused: int
    expired: int
    expired_unused: int


@dataclass
class RunOutcome:
    """删除执行结果统计"""
    candidates: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    cancelled: bool = False
    failed_ids: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """没有任何删除失败即视为成功"""
        return self.failed == 0

    @property
    def processed(self) -> int:
        return self.succeeded + self.skipped + self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


@dataclass(frozen=True)
class RunMode:
    """执行模式"""
    dry_run: bool = False
    auto: bool = False
    interactive: bool = False
    quiet: bool = False

    @property
    def requires_batch_confirmation(self) -> bool:
        """既非自动也非交互模式时，需要一次性确认整批删除"""
        return not self.auto and not self.interactive
