import json
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from redis import Redis
from redis.exceptions import RedisError
from flask import current_app


class ChangeNotifier:
    """Publishes table change events on a Redis pub/sub channel.

    Subscribers only use the events as a cue to re-fetch; nothing in the
    payload is trusted for correctness. When Redis is not reachable the
    notifier stays disabled and publishing becomes a no-op, so API writes
    never fail because the realtime channel is down.
    """

    def __init__(self):
        self.redis = None
        self.channel = None

    def init_app(self, app):
        self.channel = app.config.get("REALTIME_CHANNEL", "evalsys:changes")
        url = app.config.get("REDIS_URL")
        if not url:
            self.redis = None
            return
        try:
            self.redis = Redis.from_url(url)
            self.redis.ping()
        except (RedisError, ValueError):
            app.logger.warning("Redis unavailable at %s, realtime notifications disabled", url)
            self.redis = None

    @property
    def enabled(self):
        return self.redis is not None

    def publish(self, table, action, record_id=None):
        if not self.redis:
            return False
        payload = json.dumps({"table": table, "action": action, "id": record_id})
        try:
            self.redis.publish(self.channel, payload)
            return True
        except RedisError:
            current_app.logger.exception("Realtime publish failed for %s/%s", table, action)
            return False

    def subscribe(self):
        """Return a PubSub already subscribed to the change channel, or None."""
        if not self.redis:
            return None
        pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(self.channel)
        return pubsub


db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
notifier = ChangeNotifier()
