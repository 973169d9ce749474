from flask import Response, jsonify, stream_with_context, current_app
from . import bp
from ...extensions import notifier


@bp.get("/events")
def change_events():
    """Server-sent events relaying table change notifications.

    Clients treat every event as "re-fetch"; when the channel is unavailable
    they get a 503 and fall back to polling.
    """
    pubsub = notifier.subscribe()
    if pubsub is None:
        return jsonify({"message": "Realtime channel unavailable"}), 503

    def stream():
        try:
            yield ": connected\n\n"
            while True:
                message = pubsub.get_message(timeout=15.0)
                if message is None:
                    yield ": keepalive\n\n"
                    continue
                data = message.get("data")
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                yield f"event: change\ndata: {data}\n\n"
        finally:
            pubsub.close()

    current_app.logger.debug("Realtime subscriber connected")
    return Response(stream_with_context(stream()), mimetype="text/event-stream",
                    headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"})
