"""
관리자 서비스

아이템 등록/판매 중지와 계정 이용 정지를 처리합니다.
모든 조치는 관리자 로그 웹훅으로 남깁니다.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from config.economy import ROLL
from config.notification import WEBHOOK
from config.rarity import get_rarity_from_value
from exceptions import (
    AccountNotFoundError,
    AdminRequiredError,
    InvalidRequestError,
    ItemNotFoundError,
)
from models.account import Account, BanStatus
from models.item import ItemDefinition, StockMode
from models.ownership_marker import OwnershipMarker
from models.repos.catalog_cache import catalog_cache
from models.repos.treasury_cache import treasury_cache
from service.inventory_service import add_copy, load_holdings, store_holdings
from service.notification.webhook_service import WebhookService
from service.transaction import cas_update, run_transaction

logger = logging.getLogger(__name__)


async def require_admin(account_id: int) -> Account:
    """
    관리자 계정 확인

    Raises:
        AccountNotFoundError: 계정 없음
        AdminRequiredError: 관리자가 아님
    """
    account = await Account.get_or_none(id=account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    if not account.is_admin:
        raise AdminRequiredError()
    return account


class AdminService:
    """관리자 비즈니스 로직"""

    # =========================================================================
    # 아이템
    # =========================================================================

    @staticmethod
    async def create_item(
        admin_id: int,
        name: str,
        value: int,
        stock_mode: StockMode = StockMode.INFINITE,
        stock: Optional[int] = None,
        timer_ends_at: Optional[datetime] = None,
        description: str = "",
        image_url: str = "",
    ) -> ItemDefinition:
        """
        아이템 등록

        금고 계정은 한정/기간 한정 아이템의 0번 시리얼(무제한이면 시리얼 없는 1개)을 받고
        첫 번째 소유자로 기록됩니다. 0번은 재고에 포함되지 않습니다.

        Args:
            admin_id: 관리자 계정 ID
            name: 아이템 이름
            value: 가치 (등급은 가치로 자동 결정)
            stock_mode: 재고 방식
            stock: 한정 수량 (limited 전용)
            timer_ends_at: 판매 종료 시각 (timer 전용)
            description: 설명
            image_url: 이미지 URL

        Returns:
            생성된 ItemDefinition

        Raises:
            AdminRequiredError: 관리자가 아님
            InvalidRequestError: 이름/가치/재고/종료 시각 오류
        """
        admin = await require_admin(admin_id)

        # Guard: 입력 검증
        stock_mode = StockMode(stock_mode)
        if not name or not name.strip():
            raise InvalidRequestError("아이템 이름을 입력해주세요.")
        if value <= 0:
            raise InvalidRequestError("아이템 가치는 1 이상이어야 합니다.")
        if stock_mode == StockMode.LIMITED and (stock is None or stock <= 0):
            raise InvalidRequestError("한정 아이템은 1개 이상의 재고가 필요합니다.")
        if stock_mode == StockMode.TIMER:
            if timer_ends_at is None or timer_ends_at <= datetime.now(timezone.utc):
                raise InvalidRequestError("판매 종료 시각은 현재 이후여야 합니다.")

        treasury_id = await treasury_cache.get_treasury_account_id()

        async def body(conn) -> ItemDefinition:
            item = await ItemDefinition.create(
                name=name.strip(),
                description=description,
                image_url=image_url,
                value=value,
                rarity=get_rarity_from_value(value),
                stock_mode=stock_mode,
                total_stock=stock if stock_mode == StockMode.LIMITED else None,
                remaining_stock=stock if stock_mode == StockMode.LIMITED else None,
                timer_ends_at=timer_ends_at if stock_mode == StockMode.TIMER else None,
                next_serial=ROLL.FIRST_PLAYER_SERIAL,
                created_by=admin.id,
                using_db=conn,
            )

            if treasury_id is None:
                logger.warning(f"Treasury account missing, item {item.id} created without serial #0")
                return item

            treasury = await Account.get_or_none(id=treasury_id, using_db=conn)
            if treasury is None:
                return item

            serial_number = ROLL.TREASURY_SERIAL if item.is_serialized else None
            holdings = load_holdings(treasury)
            add_copy(holdings, item.id, serial_number)
            store_holdings(treasury, holdings)
            await cas_update(treasury, conn, "inventory")

            if item.is_serialized:
                await OwnershipMarker.create(item_id=item.id, account_id=treasury.id, using_db=conn)
            item.total_owners = 1
            await cas_update(item, conn, "total_owners")
            return item

        item = await run_transaction(body)

        logger.info(
            f"Admin {admin.id} created item {item.id} '{item.name}' "
            f"({item.stock_mode.value}, value={item.value}, rarity={item.rarity.value})"
        )

        # Post: 캐시 갱신 + 출시 알림
        try:
            await catalog_cache.refresh()
        except Exception as e:
            logger.error(f"Failed to refresh catalog after creating item {item.id}: {e}", exc_info=True)

        await WebhookService.send_item_release(
            name=item.name,
            rarity=item.rarity,
            value=int(item.value),
            stock=item.total_stock,
            image_url=item.image_url or None,
        )
        return item

    @staticmethod
    async def set_off_sale(admin_id: int, item_id: int, off_sale: bool) -> ItemDefinition:
        """
        판매 중지/재개

        Raises:
            AdminRequiredError: 관리자가 아님
            ItemNotFoundError: 아이템 없음
        """
        admin = await require_admin(admin_id)

        async def body(conn) -> ItemDefinition:
            item = await ItemDefinition.get_or_none(id=item_id, using_db=conn)
            if item is None:
                raise ItemNotFoundError(item_id)
            item.off_sale = off_sale
            await cas_update(item, conn, "off_sale")
            return item

        item = await run_transaction(body)

        if off_sale:
            catalog_cache.remove_item(item.id)
        else:
            try:
                await catalog_cache.refresh()
            except Exception as e:
                logger.error(f"Failed to refresh catalog after re-listing item {item.id}: {e}", exc_info=True)

        logger.info(f"Admin {admin.id} set item {item.id} off_sale={off_sale}")
        await WebhookService.send_admin_log(
            action="Item Off Sale" if off_sale else "Item On Sale",
            admin_username=admin.username,
            details=[f"Item: {item.name} (#{item.id})"],
        )
        return item

    # =========================================================================
    # 이용 정지
    # =========================================================================

    @staticmethod
    async def ban_account(
        admin_id: int,
        target_id: int,
        reason: str,
        duration_hours: Optional[int] = None,
    ) -> Account:
        """
        계정 이용 정지

        Args:
            admin_id: 관리자 계정 ID
            target_id: 대상 계정 ID
            reason: 사유
            duration_hours: 정지 기간 (None이면 영구)

        Raises:
            AdminRequiredError: 관리자가 아님
            AccountNotFoundError: 대상 없음
            InvalidRequestError: 기간 오류 또는 자기 자신
        """
        admin = await require_admin(admin_id)
        if target_id == admin.id:
            raise InvalidRequestError("자기 자신은 정지할 수 없습니다.")
        if duration_hours is not None and duration_hours <= 0:
            raise InvalidRequestError("정지 기간은 1시간 이상이어야 합니다.")

        async def body(conn) -> Account:
            target = await Account.get_or_none(id=target_id, using_db=conn)
            if target is None:
                raise AccountNotFoundError(target_id)

            if duration_hours is None:
                target.ban_status = BanStatus.PERMANENT
                target.ban_expires_at = None
            else:
                target.ban_status = BanStatus.TEMPORARY
                target.ban_expires_at = datetime.now(timezone.utc) + timedelta(hours=duration_hours)
            target.ban_reason = reason
            await cas_update(target, conn, "ban_status", "ban_expires_at", "ban_reason")
            return target

        target = await run_transaction(body)

        duration_text = "Permanent" if duration_hours is None else f"{duration_hours}h"
        logger.info(f"Admin {admin.id} banned account {target.id} ({duration_text}): {reason}")
        await WebhookService.send_admin_log(
            action="Account Banned",
            admin_username=admin.username,
            target_username=target.username,
            details=[f"Reason: {reason}", f"Duration: {duration_text}"],
            color=WEBHOOK.BAN_COLOR,
        )
        return target

    @staticmethod
    async def unban_account(admin_id: int, target_id: int) -> Account:
        """계정 이용 정지 해제"""
        admin = await require_admin(admin_id)

        async def body(conn) -> Account:
            target = await Account.get_or_none(id=target_id, using_db=conn)
            if target is None:
                raise AccountNotFoundError(target_id)
            target.ban_status = BanStatus.NONE
            target.ban_expires_at = None
            target.ban_reason = None
            await cas_update(target, conn, "ban_status", "ban_expires_at", "ban_reason")
            return target

        target = await run_transaction(body)

        logger.info(f"Admin {admin.id} unbanned account {target.id}")
        await WebhookService.send_admin_log(
            action="Account Unbanned",
            admin_username=admin.username,
            target_username=target.username,
            details=[f"Account: {target}"],
        )
        return target
