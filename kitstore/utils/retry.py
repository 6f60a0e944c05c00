# kitstore/utils/retry.py
import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from sqlalchemy.exc import OperationalError
import redis

from kitstore.utils.logging import get_logger

logger = get_logger(__name__)


def db_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type(OperationalError),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def reconnect_retry():
    """Retries forever on Redis errors, for long-lived subscriptions."""
    return retry(
        wait=wait_exponential(multiplier=0.5, min=0.5, max=30),
        retry=retry_if_exception_type(redis.RedisError),
        before_sleep=before_sleep_log(logger, logging.ERROR),
    )
