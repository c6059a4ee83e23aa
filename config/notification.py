"""
웹훅 알림 설정
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class WebhookConfig:
    """디스코드 웹훅 설정"""

    ITEM_RELEASE_URL_ENV: str = "DISCORD_WEBHOOK_ITEM_RELEASE"
    """아이템 출시 알림 웹훅 URL 환경변수"""

    ADMIN_LOG_URL_ENV: str = "DISCORD_WEBHOOK_ADMIN_LOG"
    """관리자 로그 웹훅 URL 환경변수"""

    RELEASE_ROLE_ENV: str = "DISCORD_RELEASE_ROLE_ID"
    """고가 아이템 출시 시 멘션할 역할 ID 환경변수"""

    ROLE_MENTION_MIN_VALUE: int = 500_000
    """역할 멘션 대상 최소 가치"""

    ADMIN_LOG_COLOR: int = 0x5865F2
    """관리자 로그 기본 색상"""

    INSANE_COLOR: int = 0xFF0000
    """INSANE 등급 표시 색상 (무지개 대신 빨강)"""

    BAN_COLOR: int = 0xED4245
    """이용 정지 로그 색상"""


# 싱글톤 설정 객체
WEBHOOK = WebhookConfig()
