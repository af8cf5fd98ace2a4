"""
mybank/db/mongo.py

Purpose: MongoDB session management

- Creates one pooled Motor client at startup and keeps it for the process lifetime
- Leases a database handle to each request and takes it back afterwards
- Bounds concurrent leases by the pool size, with a checkout timeout
- Bounds each operation with a timeout
- Converts driver failures into DatabaseError for the HTTP layer
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import PyMongoError

from mybank.core.config import Settings
from mybank.core.exceptions import (
    DatabaseError,
    DatabaseTimeoutError,
    DatabaseUnavailableError,
    SessionCheckoutTimeoutError,
)
from mybank.core.logging import get_logger
from mybank.core.metrics import MetricsRegistry

logger = get_logger(__name__)

T = TypeVar("T")
ClientFactory = Callable[..., Any]


class MongoSessionManager:
    """
    Owns the process-wide MongoDB client.

    The client is built once by connect() and closed only by close().
    Requests never open or close it; they borrow a handle through
    session() or with_session().
    """

    def __init__(
        self,
        settings: Settings,
        metrics: Optional[MetricsRegistry] = None,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ):
        self.settings = settings
        self.metrics = metrics
        self._client_factory = client_factory
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._slots: Optional[asyncio.Semaphore] = None
        self._in_use = 0
        self._connected = False

    @property
    def in_use(self) -> int:
        """Number of sessions currently leased."""
        return self._in_use

    @property
    def is_connected(self) -> bool:
        """True once the startup ping has succeeded."""
        return self._connected

    async def connect(self) -> None:
        """
        Establishes the pooled client. Called during application startup.

        Idempotent. A failed ping is logged and the process keeps running
        in a degraded state; there is no retry.
        """
        if self._client is not None:
            logger.warning("MongoDB client already initialized")
            return

        self._slots = asyncio.Semaphore(self.settings.MONGO_MAX_POOL_SIZE)

        try:
            self._client = self._client_factory(
                self.settings.MONGO_URL,
                maxPoolSize=self.settings.MONGO_MAX_POOL_SIZE,
                minPoolSize=self.settings.MONGO_MIN_POOL_SIZE,
                serverSelectionTimeoutMS=self.settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
                connectTimeoutMS=self.settings.MONGO_CONNECT_TIMEOUT_MS,
            )
        except (MongoConfigurationError, ValueError, TypeError) as e:
            logger.error(f"❌ Could not create MongoDB client: {e}")
            return

        self._database = self._client[self.settings.MONGODB_DB_NAME]

        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"❌ MongoDB connection error: {e}")
            return

        self._connected = True
        logger.info(f"✅ Connected to MongoDB: {self.settings.MONGODB_DB_NAME}")

    async def close(self) -> None:
        """
        Closes the pooled client. Called during application shutdown only.
        """
        if self._client is None:
            return

        logger.info("Closing MongoDB connection")
        self._client.close()
        self._client = None
        self._database = None
        self._connected = False
        logger.info("MongoDB connection closed")

    async def check_health(self) -> bool:
        """
        Checks if the database connection is healthy.

        Returns:
            True if the server answers a ping, False otherwise
        """
        if self._client is None:
            return False

        try:
            await asyncio.wait_for(
                self._client.admin.command("ping"),
                timeout=self.settings.DB_OPERATION_TIMEOUT_SECONDS,
            )
            return True
        except (PyMongoError, asyncio.TimeoutError) as e:
            logger.error(f"Database health check failed: {e}")
            return False

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncIOMotorDatabase]:
        """
        Leases the database handle for the duration of the block.

        Waits at most SESSION_CHECKOUT_TIMEOUT_SECONDS for a free slot.
        The lease is returned on exit whether or not the block raised.

        Raises:
            DatabaseUnavailableError: If connect() never produced a client
            SessionCheckoutTimeoutError: If the pool stayed exhausted
        """
        if self._database is None or self._slots is None:
            raise DatabaseUnavailableError()

        try:
            await asyncio.wait_for(
                self._slots.acquire(),
                timeout=self.settings.SESSION_CHECKOUT_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                "Database session pool exhausted",
                extra={"in_use": self._in_use}
            )
            raise SessionCheckoutTimeoutError() from e

        self._lease_changed(1)
        try:
            yield self._database
        finally:
            self._lease_changed(-1)
            self._slots.release()

    async def with_session(self, work: Callable[[AsyncIOMotorDatabase], Awaitable[T]]) -> T:
        """
        Runs work(db) inside a leased session, bounded by the operation timeout.

        Args:
            work: Coroutine function receiving the database handle

        Returns:
            Whatever work returns

        Raises:
            DatabaseError: On checkout failure, timeout or any driver error
        """
        async with self.session() as db:
            try:
                return await asyncio.wait_for(
                    work(db),
                    timeout=self.settings.DB_OPERATION_TIMEOUT_SECONDS,
                )
            except asyncio.TimeoutError as e:
                raise DatabaseTimeoutError() from e
            except (PyMongoError, BSONError, OverflowError) as e:
                # BSONError and OverflowError come from client-side encoding
                raise DatabaseError(details=type(e).__name__) from e

    def _lease_changed(self, delta: int) -> None:
        self._in_use += delta
        if self.metrics is not None:
            self.metrics.sessions_in_use.set(self._in_use)
