import gc

from gridfall.events.bus import EventBus, EVENT_SCORE_UPDATE


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe("test", handler)
    bus.emit("test", value=42, msg="hello")

    assert received["value"] == 42
    assert received["msg"] == "hello"


def test_event_bus_emit_without_subscribers_is_noop():
    bus = EventBus()
    bus.emit(EVENT_SCORE_UPDATE, score=1, score_gain=1)


def test_event_bus_unsubscribe_stops_delivery():
    bus = EventBus()
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs)

    bus.subscribe(EVENT_SCORE_UPDATE, handler)
    bus.emit(EVENT_SCORE_UPDATE, score=10, score_gain=10)
    bus.unsubscribe(EVENT_SCORE_UPDATE, handler)
    bus.emit(EVENT_SCORE_UPDATE, score=20, score_gain=10)

    assert calls == [{"score": 10, "score_gain": 10}]


def test_event_bus_keeps_unreferenced_lambda_alive():
    bus = EventBus()
    calls = []
    bus.subscribe(EVENT_SCORE_UPDATE, lambda sender, **kwargs: calls.append(kwargs))
    gc.collect()

    bus.emit(EVENT_SCORE_UPDATE, score=5, score_gain=5)

    assert calls == [{"score": 5, "score_gain": 5}]
