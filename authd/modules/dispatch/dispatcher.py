import asyncio
import logging
from typing import Any, Dict, Optional, Set, Tuple

from pydantic import ValidationError
from redis.exceptions import RedisError

from ..auth import AuthCoordinator, AuthOutcome, FailureReason
from ..auth.interfaces import RequestFlow
from .models import AuthReply, AuthRequest, RequestType, is_valid_request_type

logger = logging.getLogger(__name__)


class RequestDispatcher:
    def __init__(
        self,
        redis_client,
        coordinator: AuthCoordinator,
        channel: str = "auth",
        reply_prefix: str = "auth:reply:",
    ):
        """
        Initialize request dispatcher.

        Args:
            redis_client: Async Redis client used for pub/sub
            coordinator: Auth coordinator that handles requests
            channel: Channel requests arrive on
            reply_prefix: Prefix of per-request reply channels
        """
        self.redis = redis_client
        self.coordinator = coordinator
        self.channel = channel
        self.reply_prefix = reply_prefix
        self._tasks: Set[asyncio.Task] = set()

    async def handle(self, request: AuthRequest) -> Tuple[AuthOutcome, Dict[str, Any]]:
        """
        Route a request to the coordinator.

        Returns:
            Tuple of (outcome, reply data)
        """
        data = request.data
        request_type = request.type

        if request_type == RequestType.AUTHENTICATE_USER:
            outcome = await self.coordinator.authenticate(data.get("email"), data.get("password"))
            return outcome, (outcome.result.to_dict() if outcome.ok else {})

        if request_type == RequestType.AUTHORIZE_USER:
            outcome = await self._with_token(self.coordinator.authorize, self.coordinator.authorize_header, data)
            return outcome, ({"user_id": outcome.result} if outcome.ok else {})

        if request_type == RequestType.DELETE_USER_ACCESS_TOKEN:
            outcome = await self._with_token(self.coordinator.revoke, self.coordinator.revoke_header, data)
            return outcome, ({"removed": outcome.result} if outcome.ok else {})

        if request_type == RequestType.REFRESH_USER_ACCESS_TOKEN:
            outcome = await self.coordinator.refresh(data.get("refresh_token"))
            return outcome, (outcome.result.to_dict() if outcome.ok else {})

        # registerUser belongs to the user record service
        flow = RequestFlow(request_type)
        return flow.fail(FailureReason.UNSUPPORTED, error=f"{request_type} is not handled here"), {}

    @staticmethod
    async def _with_token(by_token, by_header, data: Dict[str, str]) -> AuthOutcome:
        if data.get("token"):
            return await by_token(data["token"])
        return await by_header(data.get("authorization"))

    async def process_message(self, payload: Any) -> Optional[AuthReply]:
        """
        Parse one queued message, handle it and publish the reply.

        Args:
            payload: Raw message payload (JSON)

        Returns:
            The published reply, or None if the message was skipped
        """
        try:
            request = AuthRequest.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Skipping malformed request on {self.channel}: {e.error_count()} errors")
            return None

        if not is_valid_request_type(request.type):
            logger.info(f"Ignoring unsupported request type: {request.type}")
            return None

        logger.info(f"Received {request.type} request {request.request_key}")
        outcome, data = await self.handle(request)
        reply = AuthReply.from_outcome(request, outcome, data)

        reply_channel = f"{self.reply_prefix}{request.request_key}"
        try:
            await self.redis.publish(reply_channel, reply.model_dump_json())
        except RedisError as e:
            logger.error(f"Failed to publish reply for {request.request_key}: {e}")

        return reply

    async def _process_safely(self, payload: Any) -> None:
        try:
            await self.process_message(payload)
        except Exception:
            # One bad request must never stop the listener
            logger.exception("Unhandled error while processing auth request")

    def _spawn(self, payload: Any) -> None:
        task = asyncio.create_task(self._process_safely(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def listen(self) -> None:
        """
        Listen on the auth channel until cancelled.

        Each message is handled in its own task so a slow password check never
        blocks the listener loop.
        """
        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(self.channel)
            logger.info(f"Subscribed to channel: {self.channel}")

            async for message in pubsub.listen():
                if message["type"] == "message":
                    self._spawn(message["data"])

        except asyncio.CancelledError:
            logger.info("Request listener stopping")
            raise
        finally:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            await self._close(pubsub)

    async def _close(self, pubsub) -> None:
        # Cleanup errors are logged, never raised
        try:
            await pubsub.unsubscribe(self.channel)
            logger.info(f"Unsubscribed from channel: {self.channel}")
        except (RedisError, OSError) as e:
            logger.warning(f"Could not unsubscribe from {self.channel}: {e}")
        try:
            await pubsub.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"Could not close pubsub connection: {e}")
