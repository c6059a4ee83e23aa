"""
Holding (보유품) 정의

Account.inventory 배열의 한 항목입니다. DB 테이블이 아닌 JSON dict로 저장됩니다.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4


def new_holding_id() -> str:
    return uuid4().hex


@dataclass
class Holding:
    """
    인벤토리 보유품

    - serial_number: infinite 아이템은 None, 0은 금고 계정 전용
    - amount: 시리얼 없는 동일 아이템을 하나로 묶은 수량 (1 이상)
    - do_not_trade: 거래 금지 표시
    """
    item_id: int
    serial_number: Optional[int] = None
    amount: int = 1
    do_not_trade: bool = False
    id: str = field(default_factory=new_holding_id)
    acquired_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Holding":
        return cls(
            id=data["id"],
            item_id=int(data["item_id"]),
            serial_number=data.get("serial_number"),
            amount=int(data.get("amount") or 1),
            do_not_trade=bool(data.get("do_not_trade", False)),
            acquired_at=data.get("acquired_at") or datetime.now(timezone.utc).isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
