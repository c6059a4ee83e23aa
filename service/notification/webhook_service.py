"""
디스코드 웹훅 알림

아이템 출시와 관리자 조치를 디스코드 채널에 알립니다.
전송 실패는 로그만 남기고 호출한 작업에는 영향을 주지 않습니다.
"""
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import aiohttp
import discord

from config.notification import WEBHOOK
from config.rarity import RarityTier, get_rarity_info

logger = logging.getLogger(__name__)


def get_rarity_color(rarity: RarityTier) -> int:
    """등급 색상을 디스코드 정수 색상으로 변환 (rainbow는 빨강)"""
    color = get_rarity_info(rarity).color
    if color == "rainbow":
        return WEBHOOK.INSANE_COLOR
    return int(color.lstrip("#"), 16)


def build_item_release_message(
    name: str,
    rarity: RarityTier,
    value: int,
    stock: Optional[int],
    image_url: Optional[str] = None,
) -> Tuple[Optional[str], discord.Embed]:
    """
    아이템 출시 알림 메시지 생성

    Args:
        name: 아이템 이름
        rarity: 등급
        value: 가치
        stock: 한정 수량 (무제한이면 None)
        image_url: 썸네일 이미지

    Returns:
        (content, embed) - 고가 아이템이고 역할이 설정돼 있으면 content에 역할 멘션
    """
    embed = discord.Embed(
        title=name,
        color=get_rarity_color(rarity),
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="Rarity", value=get_rarity_info(rarity).name, inline=False)
    embed.add_field(name="Value", value=f"${value:,}", inline=False)
    embed.add_field(name="Stock", value="Infinite" if stock is None else f"{stock:,}", inline=False)
    if image_url:
        embed.set_thumbnail(url=image_url)

    content = None
    role_id = os.getenv(WEBHOOK.RELEASE_ROLE_ENV)
    if value >= WEBHOOK.ROLE_MENTION_MIN_VALUE and role_id:
        content = f"<@&{role_id}>"

    return content, embed


def build_admin_log_embed(
    action: str,
    admin_username: str,
    details: List[str],
    target_username: Optional[str] = None,
    color: Optional[int] = None,
) -> discord.Embed:
    """관리자 로그 embed 생성"""
    title = f"{action} - {target_username}" if target_username else action
    embed = discord.Embed(
        title=title,
        description="\n".join(details),
        color=color or WEBHOOK.ADMIN_LOG_COLOR,
        timestamp=datetime.now(timezone.utc),
    )
    embed.set_footer(text=f"Action by {admin_username}")
    return embed


class WebhookService:
    """웹훅 전송"""

    @staticmethod
    async def send_item_release(
        name: str,
        rarity: RarityTier,
        value: int,
        stock: Optional[int],
        image_url: Optional[str] = None,
    ) -> bool:
        """
        아이템 출시 알림

        Returns:
            전송 성공 여부
        """
        url = os.getenv(WEBHOOK.ITEM_RELEASE_URL_ENV)
        if not url:
            logger.warning(f"{WEBHOOK.ITEM_RELEASE_URL_ENV} not configured")
            return False

        content, embed = build_item_release_message(name, rarity, value, stock, image_url)
        return await WebhookService._deliver(url, embed, content)

    @staticmethod
    async def send_admin_log(
        action: str,
        admin_username: str,
        details: List[str],
        target_username: Optional[str] = None,
        color: Optional[int] = None,
    ) -> bool:
        """
        관리자 조치 로그

        Returns:
            전송 성공 여부
        """
        url = os.getenv(WEBHOOK.ADMIN_LOG_URL_ENV)
        if not url:
            logger.warning(f"{WEBHOOK.ADMIN_LOG_URL_ENV} not configured")
            return False

        embed = build_admin_log_embed(action, admin_username, details, target_username, color)
        return await WebhookService._deliver(url, embed)

    @staticmethod
    async def _deliver(url: str, embed: discord.Embed, content: Optional[str] = None) -> bool:
        try:
            async with aiohttp.ClientSession() as session:
                webhook = discord.Webhook.from_url(url, session=session)
                if content:
                    await webhook.send(content=content, embed=embed)
                else:
                    await webhook.send(embed=embed)
            return True
        except (discord.HTTPException, aiohttp.ClientError, ValueError) as e:
            logger.error(f"Discord webhook failed: {e}", exc_info=True)
            return False
