"""Logging configuration with structlog integration.

提供两种日志记录方式：
1. loguru: 用于一般调试日志
2. structlog: 用于关键业务事件的结构化日志
"""

import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """配置 structlog 处理器链。"""
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """配置 loguru。"""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            f"{settings.LOG_DIR}/autobrain_{{time:YYYY-MM-DD}}.log",
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    """将日志级别字符串转换为数字。"""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


class BusinessEvents:
    """业务事件日志助手类。

    Usage:
        from src.core.infrastructure.logging import BusinessEvents

        BusinessEvents.presence_updated(user_id="uid-123", is_online=True, last_seen=...)
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def user_fetched(cls, user_id: str, found: bool, **extra: Any) -> None:
        """记录用户文档读取事件。"""
        cls._log.info(
            "user_fetched",
            event_type="profile",
            user_id=user_id,
            found=found,
            **extra,
        )

    @classmethod
    def user_replaced(cls, user_id: str, **extra: Any) -> None:
        """记录用户文档整体覆盖事件。"""
        cls._log.info(
            "user_replaced",
            event_type="profile",
            user_id=user_id,
            **extra,
        )

    @classmethod
    def presence_updated(
        cls,
        user_id: str,
        is_online: bool,
        last_seen: int,
        **extra: Any,
    ) -> None:
        """记录在线状态变更事件。"""
        cls._log.info(
            "presence_updated",
            event_type="presence",
            user_id=user_id,
            is_online=is_online,
            last_seen=last_seen,
            **extra,
        )

    @classmethod
    def fcm_token_updated(cls, user_id: str, **extra: Any) -> None:
        """记录推送 token 更新事件。token 本身不写入日志。"""
        cls._log.info(
            "fcm_token_updated",
            event_type="notification",
            user_id=user_id,
            **extra,
        )

    @classmethod
    def remote_call_failed(
        cls,
        operation: str,
        user_id: str | None,
        error: str,
        **extra: Any,
    ) -> None:
        """记录远程文档存储调用失败事件。"""
        cls._log.warning(
            "remote_call_failed",
            event_type="remote_error",
            operation=operation,
            user_id=user_id,
            error=error,
            **extra,
        )

    @classmethod
    def local_records_pruned(
        cls,
        table: str,
        deleted: int,
        **extra: Any,
    ) -> None:
        """记录本地过期记录清理事件。"""
        cls._log.info(
            "local_records_pruned",
            event_type="cleanup",
            table=table,
            deleted=deleted,
            **extra,
        )
