"""
Redis Connection Pool Management.

Provides the singleton connection pool for the shared store that holds the
submission worklist, the processing locks and the application records.

Responsibility:
    - Manage Redis connection pool (max 10 connections by default)
    - Verify connectivity with PING, retried with exponential backoff
    - Health check that never raises
    - Thread-safe singleton pattern

Architecture Notes:
    - Infrastructure Layer (external dependency on Redis)
    - Every worker process shares one pool; every worker *instance* across
      processes shares the same Redis database, which is what makes the lock
      protocol global
    - Environment-based configuration

Business Rules:
    - REDIS_HOST (localhost), REDIS_PORT (6379), REDIS_DB (0)
    - REDIS_MAX_CONNECTIONS (10), REDIS_TIMEOUT seconds (5)
    - REDIS_RETRY_ATTEMPTS (3), backoff 1s, 2s, 4s without jitter
    - Decode responses: True (return strings not bytes)

Examples:
    >>> client = get_redis_client()
    >>> client.rpush("queue:applications", "...")
    >>>
    >>> if health_check():
    ...     print("Redis is healthy")
    >>>
    >>> close_connections()
"""

import logging
import os
import threading
import time
from typing import Optional

from redis import ConnectionPool, Redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from src.shared.utils.retry import RetryConfig, with_retry

# Configure logger for this module
logger = logging.getLogger(__name__)

# Singleton connection pool (thread-safe)
_redis_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def get_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    max_connections: Optional[int] = None,
    timeout: Optional[int] = None,
) -> Redis:
    """
    Get Redis client backed by the shared connection pool.

    Creates the pool on first call and reuses it afterwards. The returned
    client is verified with PING; connection and timeout errors are retried
    with exponential backoff before giving up.

    Args:
        host: Redis hostname (default from env: REDIS_HOST or "localhost")
        port: Redis port (default from env: REDIS_PORT or 6379)
        db: Redis database number (default from env: REDIS_DB or 0)
        max_connections: Max pool size (default from env: REDIS_MAX_CONNECTIONS or 10)
        timeout: Socket timeout in seconds (default from env: REDIS_TIMEOUT or 5)

    Returns:
        Redis client instance with connection pool

    Raises:
        RedisError: If PING fails after all retry attempts
    """
    global _redis_pool

    redis_host = host or os.getenv("REDIS_HOST", "localhost")
    redis_port = port or int(os.getenv("REDIS_PORT", "6379"))
    redis_db = db if db is not None else int(os.getenv("REDIS_DB", "0"))
    max_conn = max_connections or int(os.getenv("REDIS_MAX_CONNECTIONS", "10"))
    conn_timeout = timeout or int(os.getenv("REDIS_TIMEOUT", "5"))

    if _redis_pool is None:
        with _pool_lock:
            # Double-check locking pattern
            if _redis_pool is None:
                logger.info(
                    f"Creating Redis connection pool: "
                    f"host={redis_host}, port={redis_port}, db={redis_db}, "
                    f"max_connections={max_conn}, timeout={conn_timeout}s"
                )
                _redis_pool = ConnectionPool(
                    host=redis_host,
                    port=redis_port,
                    db=redis_db,
                    max_connections=max_conn,
                    socket_timeout=conn_timeout,
                    socket_connect_timeout=conn_timeout,
                    socket_keepalive=True,
                    decode_responses=True,
                )

    client = Redis(connection_pool=_redis_pool)

    retry_attempts = int(os.getenv("REDIS_RETRY_ATTEMPTS", "3"))
    result = with_retry(
        client.ping,
        RetryConfig(
            max_retries=max(0, retry_attempts - 1),
            base_delay_ms=1000,
            max_delay_ms=4000,
            jitter_factor=0.0,
        ),
        sleep=time.sleep,
        is_retryable=lambda e: isinstance(e, (ConnectionError, TimeoutError)),
        operation_name="Redis PING",
    )

    if result.success:
        logger.debug(f"Redis connection established (attempt {result.attempts})")
        return client

    raise RedisError(
        f"Failed to connect to Redis after {result.attempts} attempts. "
        f"Last error: {result.error}"
    )


def health_check() -> bool:
    """
    Check Redis health with PING test.

    Returns:
        True if Redis answers PING, False on any error (never raises)
    """
    try:
        client = get_redis_client()
        if client.ping():
            logger.debug("Redis health check: OK")
            return True
        logger.warning("Redis health check: PING returned False")
        return False

    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return False

    except Exception as e:
        logger.error(f"Unexpected error in Redis health check: {e}")
        return False


def close_connections() -> None:
    """
    Disconnect the pool and reset the singleton.

    Safe to call multiple times. Called on worker shutdown.
    """
    global _redis_pool

    with _pool_lock:
        if _redis_pool is None:
            logger.debug("Redis connection pool already closed or not initialized")
            return

        logger.info("Closing Redis connection pool")
        try:
            _redis_pool.disconnect()
        except Exception as e:
            logger.error(f"Error closing Redis connection pool: {e}")
        finally:
            _redis_pool = None
            logger.info("Redis connection pool closed")
