import time

from app.enums.garden import NotificationKind
from app.services.application.notifications_service import NotificationCenter


def test_post_sets_current_and_schedules_expiry(notifications, timers, posted):
    note = notifications.success("Plant added to your garden!")

    assert notifications.current == note
    assert note.kind is NotificationKind.SUCCESS
    assert timers.last.interval == 4.0
    assert timers.last.started
    assert posted == [note]


def test_expiry_clears_the_slot(notifications, timers, posted):
    notifications.error("Failed to update: offline")

    timers.last.fire()

    assert notifications.current is None
    assert posted[-1] is None


def test_new_notification_replaces_and_cancels_previous_timer(notifications, timers):
    notifications.error("first")
    first_timer = timers.last

    second = notifications.success("second")

    assert first_timer.cancelled
    assert notifications.current == second

    # a stale timer that fires anyway must not clear the newer notification
    first_timer.fire()
    assert notifications.current == second


def test_dismiss_clears_and_notifies(notifications, posted):
    notifications.success("hello")
    notifications.dismiss()
    notifications.dismiss()

    assert notifications.current is None
    assert posted[-1] is None
    assert posted.count(None) == 1


def test_to_dict_shape(notifications):
    data = notifications.error("Failed to delete: gone").to_dict()

    assert data["type"] == "error"
    assert data["message"] == "Failed to delete: gone"
    assert isinstance(data["id"], int)
    assert data["createdAt"].endswith("+00:00")


def test_failing_listener_does_not_break_posting(notifications):
    seen = []

    def broken(_note):
        raise RuntimeError("socket closed")

    notifications.subscribe(broken)
    notifications.subscribe(seen.append)

    note = notifications.success("still delivered")

    assert seen == [note]


def test_unsubscribe_stops_delivery(notifications):
    seen = []
    unsubscribe = notifications.subscribe(seen.append)
    unsubscribe()

    notifications.success("unheard")

    assert seen == []


def test_real_timer_expires_notification():
    center = NotificationCenter(0.05)
    center.success("short lived")

    deadline = time.time() + 2
    while center.current is not None and time.time() < deadline:
        time.sleep(0.01)

    assert center.current is None
    center.shutdown()
