"""
알림 시스템

디스코드 웹훅 기반 아이템 출시/관리자 로그 알림
"""

from service.notification.webhook_service import (
    WebhookService,
    build_admin_log_embed,
    build_item_release_message,
    get_rarity_color,
)

__all__ = [
    "WebhookService",
    "build_admin_log_embed",
    "build_item_release_message",
    "get_rarity_color",
]
