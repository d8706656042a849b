import os
import logging
import redis
from .events import Event

logger = logging.getLogger(__name__)

EVENT_LOG_SIZE = 1000


class PubSubClient:
    def __init__(self, redis_url: str = None, redis_client: redis.Redis = None):
        self.redis_url = redis_url or os.getenv('REDIS_URL', 'redis://localhost:6379')
        self.redis = redis_client or redis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )

    def publish(self, channel: str, event: Event):
        self.redis.publish(channel, event.to_json())

    def publish_tournament_event(self, tournament_id: str, event: Event):
        channel = f"tournament:{tournament_id}:events"
        self.publish(channel, event)

        self.redis.publish("global:announcements", event.to_json())

    def log_event(self, tournament_id: str, event: Event):
        key = f"tournament:{tournament_id}:event_log"
        self.redis.lpush(key, event.to_json())
        self.redis.ltrim(key, 0, EVENT_LOG_SIZE - 1)

    def handle_event(self, event: Event):
        """Publish and log one event; usable directly as an orchestrator listener."""
        try:
            if not event.tournament_id:
                # Creation failed before the remote service assigned an id
                self.publish("global:announcements", event)
                return
            self.publish_tournament_event(event.tournament_id, event)
            self.log_event(event.tournament_id, event)
        except redis.RedisError as e:
            logger.warning(f"Failed to publish {event.type} for {event.tournament_id}: {e}")
