"""
DynamoDB-backed session store.

Mirrors the cookie jar and key-value storage into a single DynamoDB item so
a session survives process restarts and can be shared between hosts.

Table Schema:
    Partition Key: id (one item per store id, "1" by default)
"""

import json
import time
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tour_booking.utils.logger import get_logger
from .exceptions import (
    SessionStoreError,
    StoreNetworkError,
    StorePermissionError,
    StoreThrottlingError,
)
from .session_store import SessionStore

logger = get_logger(__name__)


class DynamoDBSessionStore(SessionStore):
    """
    Session store persisted in a DynamoDB table.

    Attributes:
        table_name: DynamoDB table name
        session_id: Partition key of the single session item
        max_retries: Attempts for throttled writes
    """

    def __init__(
        self,
        table_name: str = "session",
        dynamodb_resource: Optional[Any] = None,
        session_id: str = "1",
        max_retries: int = 3,
        backoff_base: float = 1.0,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        super().__init__()
        self.table_name = table_name
        self.dynamodb = dynamodb_resource or boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(table_name)
        self.session_id = session_id
        self.max_retries = max_retries
        self.backoff_base = backoff_base

    def _translate(self, e: ClientError, operation: str) -> SessionStoreError:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        context = {"session_id": self.session_id, "table": self.table_name}
        if error_code == "AccessDeniedException":
            logger.error("Permission denied", operation=operation, context=context, error=error_code)
            return StorePermissionError(f"Insufficient IAM permissions: {error_code}")

        logger.error("DynamoDB error", operation=operation, context=context, error=str(e))
        return SessionStoreError(f"DynamoDB error: {e}")

    def _restore(self) -> Optional[Dict[str, Any]]:
        context = {"session_id": self.session_id}
        logger.debug("Fetching session item", operation="restore_session", context=context)

        try:
            start_time = time.time()
            response = self.table.get_item(Key={"id": self.session_id})
            duration_ms = (time.time() - start_time) * 1000
        except ClientError as e:
            raise self._translate(e, "restore_session") from e
        except (BotoCoreError, OSError) as e:
            logger.error("Network error", operation="restore_session", context=context, error=str(e))
            raise StoreNetworkError(f"Network error: {e}") from e

        item = response.get("Item")
        if item is None:
            logger.debug("Session item not found", operation="restore_session", context=context)
            return None

        try:
            snapshot = {
                "cookies": json.loads(item.get("cookies") or "[]"),
                "storage": json.loads(item.get("storage") or "{}"),
            }
        except json.JSONDecodeError as e:
            logger.warning(
                "Session item is corrupt; starting empty",
                operation="restore_session",
                context=context,
                error=str(e),
            )
            return None

        logger.info(
            "Session item retrieved",
            operation="restore_session",
            context=context,
            duration_ms=duration_ms,
        )
        return snapshot

    def _persist(self) -> None:
        snapshot = self.snapshot()
        item = {
            "id": self.session_id,
            "cookies": json.dumps(snapshot["cookies"]),
            "storage": json.dumps(snapshot["storage"]),
        }
        context = {"session_id": self.session_id}

        for attempt in range(self.max_retries):
            try:
                self.table.put_item(Item=item)
                return

            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")

                if error_code == "ProvisionedThroughputExceededException":
                    if attempt < self.max_retries - 1:
                        wait_time = self.backoff_base * (2**attempt)
                        logger.warning(
                            f"Throttled, retrying after {wait_time}s",
                            operation="persist_session",
                            context=context,
                            error=error_code,
                        )
                        time.sleep(wait_time)
                        continue
                    raise StoreThrottlingError(
                        f"DynamoDB throttled after {self.max_retries} retries"
                    ) from e

                raise self._translate(e, "persist_session") from e

            except (BotoCoreError, OSError) as e:
                logger.error("Network error", operation="persist_session", context=context, error=str(e))
                raise StoreNetworkError(f"Network error: {e}") from e

    def _wipe(self) -> None:
        context = {"session_id": self.session_id}
        try:
            self.table.delete_item(Key={"id": self.session_id})
        except ClientError as e:
            raise self._translate(e, "delete_session") from e
        except (BotoCoreError, OSError) as e:
            logger.error("Network error", operation="delete_session", context=context, error=str(e))
            raise StoreNetworkError(f"Network error: {e}") from e

        logger.info("Session item deleted", operation="delete_session", context=context)
