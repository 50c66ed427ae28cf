"""
可清理证书筛选服务
"""
from datetime import datetime
from typing import List, Tuple

from ..models import Certificate, InventoryStats


class EligibilityFilter:
    """筛选未使用且已过期的证书"""

    def is_candidate(self, cert: Certificate, now: datetime) -> bool:
        """
        判断证书是否可清理

        Args:
            cert: 证书信息
            now: 本次运行固定的评估时刻

        Returns:
            bool: 未使用、过期时间已知且严格早于 now
        """
        return not cert.in_use and cert.is_expired_at(now)

    def select_candidates(self, certificates: List[Certificate], now: datetime) -> Tuple[Certificate, ...]:
        """
        筛选待删除证书，保持原有顺序

        Args:
            certificates: 已标记使用状态的证书列表
            now: 本次运行固定的评估时刻

        Returns:
            Tuple[Certificate, ...]: 待删除证书
        """
        return tuple(cert for cert in certificates if self.is_candidate(cert, now))

    def summarize(self, certificates: List[Certificate], now: datetime) -> InventoryStats:
        """
        统计证书状态

        Args:
            certificates: 证书列表
            now: 评估时刻

        Returns:
            InventoryStats: 统计结果
        """
        in_use = len([cert for cert in certificates if cert.in_use])
        expired = [cert for cert in certificates if cert.is_expired_at(now)]

        return InventoryStats(
            total=len(certificates),
            in_use=in_use,
            unused=len(certificates) - in_use,
            expired=len(expired),
            expired_unused=len([cert for cert in expired if not cert.in_use]),
        )
