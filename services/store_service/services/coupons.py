"""Coupon lookup.

The store only knows a percentage-off rule per code. ``get_coupon_service()``
returns the active implementation; tests and deployments swap it with
``set_coupon_service()``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class CouponRule:
    code: str
    percent_off: Decimal


class CouponService(ABC):
    @abstractmethod
    async def resolve(self, code: str) -> Optional[CouponRule]:
        """Return the rule for ``code`` or None when it is not recognized."""


class InMemoryCouponService(CouponService):
    """Fixed table of codes, matched case-insensitively."""

    def __init__(self, percent_by_code: Optional[dict[str, Decimal]] = None):
        table = percent_by_code if percent_by_code is not None else DEFAULT_COUPONS
        self._rules = {
            code.upper(): CouponRule(code=code.upper(), percent_off=Decimal(pct))
            for code, pct in table.items()
        }

    async def resolve(self, code: str) -> Optional[CouponRule]:
        return self._rules.get(code.strip().upper())


DEFAULT_COUPONS = {"WELCOME10": Decimal("10")}

_current_service: Optional[CouponService] = None


def get_coupon_service() -> CouponService:
    """Return the current coupon service. Defaults to the in-memory table."""
    global _current_service
    if _current_service is None:
        _current_service = InMemoryCouponService()
    return _current_service


def set_coupon_service(service: CouponService) -> None:
    global _current_service
    _current_service = service


def reset_coupon_service() -> None:
    global _current_service
    _current_service = None
