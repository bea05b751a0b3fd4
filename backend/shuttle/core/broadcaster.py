"""Redis pub/sub broadcaster for live bus positions."""

import asyncio
import logging

import orjson
import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

CHANNEL = "shuttle:locations"
POSITIONS_KEY = "shuttle:positions"


def sample_payload(sample, name: str | None = None) -> dict:
    return {
        "bus_id": sample.bus_id,
        "name": name,
        "latitude": sample.latitude,
        "longitude": sample.longitude,
        "timestamp": sample.timestamp.isoformat(),
    }


class Broadcaster:
    """Publishes location samples to Redis and manages WebSocket subscribers.

    Without a Redis URL (or before ``connect``) it only fans out in-process.
    """

    def __init__(self, redis_url: str | None = None) -> None:
        self.redis_url = redis_url
        self._redis: aioredis.Redis | None = None
        self._subscribers: set[asyncio.Queue] = set()

    async def connect(self) -> None:
        if self.redis_url:
            self._redis = aioredis.from_url(self.redis_url, decode_responses=False)

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()

    async def publish(self, position: dict) -> None:
        """Publish one bus position to Redis and fan out to WebSocket subscribers."""
        payload = orjson.dumps({"type": "location", "bus": position})

        if self._redis:
            try:
                # Latest position per bus, served as the snapshot to new connections
                await self._redis.hset(POSITIONS_KEY, str(position["bus_id"]), orjson.dumps(position))
                await self._redis.publish(CHANNEL, payload)
            except Exception:
                logger.exception("Failed to publish bus %s position to Redis", position.get("bus_id"))

        dead = set()
        for q in self._subscribers:
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                dead.add(q)
        if dead:
            logger.info("Dropping %d slow WebSocket subscribers", len(dead))
        self._subscribers -= dead

    async def get_positions(self) -> list[dict]:
        """Latest published position of every bus, from Redis."""
        if self._redis:
            try:
                raw = await self._redis.hgetall(POSITIONS_KEY)
                return [orjson.loads(v) for v in raw.values()]
            except Exception:
                logger.exception("Failed to read positions from Redis")
        return []

    async def forget(self, bus_id: int) -> None:
        if self._redis:
            try:
                await self._redis.hdel(POSITIONS_KEY, str(bus_id))
            except Exception:
                logger.exception("Failed to drop bus %d from Redis positions", bus_id)

    def subscribe(self) -> asyncio.Queue:
        """Create a new subscriber queue for WebSocket fan-out."""
        q: asyncio.Queue = asyncio.Queue(maxsize=10)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.discard(q)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
