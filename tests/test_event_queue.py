import pytest

from phase_dispatch.events import Event, EventDispatcher, EventQueue


def test_queued_events_wait_for_process_queue(dispatcher: EventDispatcher):
    received = []
    dispatcher.add_event_listener("tick", lambda e: received.append(e))

    event = Event("tick")
    dispatcher.dispatch_event(event, immediate=False)

    assert received == []
    assert dispatcher.pending_events == 1
    # Target stamping already happened at enqueue time
    assert event.target is dispatcher

    assert dispatcher.process_queue() == 1
    assert received == [event]
    assert dispatcher.pending_events == 0


def test_queued_events_are_delivered_in_enqueue_order(dispatcher: EventDispatcher):
    order = []
    dispatcher.add_event_listener("a", lambda e: order.append("a"))
    dispatcher.add_event_listener("b", lambda e: order.append("b"))

    for name in ("b", "a", "b"):
        dispatcher.dispatch_event(Event(name), immediate=False)
    dispatcher.process_queue()

    assert order == ["b", "a", "b"]


def test_process_empty_queue_is_a_noop(dispatcher: EventDispatcher):
    assert dispatcher.process_queue() == 0
    assert dispatcher.process_queue() == 0


def test_events_queued_during_flush_wait_for_next_flush(dispatcher: EventDispatcher):
    order = []

    def on_first(event):
        order.append("first")
        dispatcher.dispatch_event(Event("second"), immediate=False)

    dispatcher.add_event_listener("first", on_first)
    dispatcher.add_event_listener("second", lambda e: order.append("second"))

    dispatcher.dispatch_event(Event("first"), immediate=False)
    assert dispatcher.process_queue() == 1
    assert order == ["first"]
    assert dispatcher.pending_events == 1

    assert dispatcher.process_queue() == 1
    assert order == ["first", "second"]
    assert dispatcher.pending_events == 0


def test_nested_process_queue_call_is_ignored(dispatcher: EventDispatcher):
    nested_results = []
    order = []

    def on_tick(event):
        order.append(event)
        nested_results.append(dispatcher.process_queue())

    dispatcher.add_event_listener("tick", on_tick)
    e1, e2 = Event("tick"), Event("tick")
    dispatcher.dispatch_event(e1, immediate=False)
    dispatcher.dispatch_event(e2, immediate=False)

    assert dispatcher.process_queue() == 2
    assert order == [e1, e2]
    assert nested_results == [0, 0]


def test_event_canceled_while_queued_is_skipped(dispatcher: EventDispatcher):
    received = []
    dispatcher.add_event_listener("tick", lambda e: received.append(e))

    event = Event("tick")
    dispatcher.dispatch_event(event, immediate=False)
    event.cancel()

    assert dispatcher.process_queue() == 1
    assert received == []


def test_failing_listener_keeps_remaining_events_queued(dispatcher: EventDispatcher):
    received = []

    def on_tick(event):
        if event.type == "tick" and not received:
            received.append(event)
            return
        raise RuntimeError("boom")

    dispatcher.add_event_listener("tick", on_tick)
    dispatcher.add_event_listener("bad", on_tick)
    first, bad, last = Event("tick"), Event("bad"), Event("tick")
    for e in (first, bad, last):
        dispatcher.dispatch_event(e, immediate=False)

    with pytest.raises(RuntimeError):
        dispatcher.process_queue()

    assert received == [first]
    assert list(dispatcher._queue) == [bad, last]


def test_event_queue_primitives():
    q = EventQueue()
    assert not q
    a, b, c = Event("a"), Event("b"), Event("c")
    for e in (a, b, c):
        q.append(e)

    assert len(q) == 3
    assert q.peek(2) == (a, b)
    q.drain(2)
    assert list(q) == [c]
    q.clear()
    assert len(q) == 0


def test_dispose_during_flush_keeps_events_queued_afterwards():
    d = EventDispatcher()
    late = Event("late")
    seen = []

    def on_a(event):
        seen.append(event.type)
        d.dispose()
        d.dispatch_event(late, immediate=False)

    d.add_event_listener("a", on_a)
    d.add_event_listener("b", lambda e: seen.append(e.type))
    d.dispatch_event(Event("a"), immediate=False)
    d.dispatch_event(Event("b"), immediate=False)

    assert d.process_queue() == 1
    assert seen == ["a"]
    assert d.pending_events == 1
    assert list(d._queue) == [late]

    assert d.process_queue() == 1
    assert d.pending_events == 0


def test_clear_advances_queue_generation():
    q = EventQueue()
    start = q.generation
    q.append(Event("a"))
    q.drain(1)
    assert q.generation == start

    q.clear()
    assert q.generation == start + 1
