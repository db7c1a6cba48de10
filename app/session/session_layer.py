"""
Session layer - Redis-backed bearer token store.
A token is valid while "session:<token>" exists; reads slide the TTL.
"""
from typing import Optional, Dict, Any
import logging
import json
import redis

logger = logging.getLogger(__name__)

SESSION_PREFIX = "session:"

_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None
_session_ttl: int = 86400


def init_redis(host: str, port: int, db: int, session_ttl: int = 86400) -> None:
    """Initialize Redis connection pool. Call once at app startup."""
    global _redis_pool, _redis_client, _session_ttl
    _redis_pool = redis.ConnectionPool(
        host=host,
        port=port,
        db=db,
        decode_responses=True,
        max_connections=10
    )
    _redis_client = redis.Redis(connection_pool=_redis_pool)
    _session_ttl = session_ttl
    logger.info(f"Redis initialized: {host}:{port}/{db}, TTL: {session_ttl}s")


def set_redis_client(client: Optional[redis.Redis], session_ttl: Optional[int] = None) -> None:
    """Use an already constructed client (shared pool, sentinel, tests)."""
    global _redis_client, _session_ttl
    _redis_client = client
    if session_ttl is not None:
        _session_ttl = session_ttl


def is_initialized() -> bool:
    return _redis_client is not None


def _get_redis_client() -> redis.Redis:
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def _key(token: str) -> str:
    return f"{SESSION_PREFIX}{token}"


def create_session(token: str, user_data: Dict[str, Any]) -> None:
    """Store the principal for a token with TTL."""
    client = _get_redis_client()
    client.setex(_key(token), _session_ttl, json.dumps(user_data))
    logger.info(f"Session created for user: {user_data.get('email')}")


def get_session(token: str, refresh: bool = True) -> Optional[Dict[str, Any]]:
    """Principal data for a live token, or None."""
    if not token:
        return None
    client = _get_redis_client()
    data = client.get(_key(token))
    if not data:
        return None
    if refresh:
        client.expire(_key(token), _session_ttl)
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        logger.warning("Dropping unreadable session payload")
        client.delete(_key(token))
        return None


def remove_session(token: str) -> bool:
    """Remove token from the store (logout)."""
    client = _get_redis_client()
    if client.delete(_key(token)) > 0:
        logger.info("Session removed for token")
        return True
    return False


def extract_token(auth_header: Optional[str]) -> Optional[str]:
    """Extract the bearer token from an Authorization header."""
    if not auth_header:
        return None
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]
