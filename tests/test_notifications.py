import uuid

from fastapi import BackgroundTasks

from propertech_scheduling.services.notification_service import (
    NotificationEvent, NotificationSink, RecordingNotificationSink, get_notification_sink,
)


def test_recording_sink_keeps_events():
    sink = RecordingNotificationSink()
    user_id = uuid.uuid4()

    sink.notify(user_id, NotificationEvent.VIEWING_CONFIRMED, {"viewing_id": "v1"})

    assert sink.events == [(user_id, "viewing_confirmed", {"viewing_id": "v1"})]


def test_sink_without_webhook_only_logs(caplog):
    caplog.set_level("INFO")
    sink = NotificationSink(webhook_url="")

    sink.notify(uuid.uuid4(), NotificationEvent.VIEWING_REQUESTED, {})

    assert "[NOTIFY] viewing_requested" in caplog.text


def test_unreachable_webhook_never_raises(caplog):
    sink = NotificationSink(webhook_url="http://127.0.0.1:9/hooks", timeout=0.5)

    sink.notify(uuid.uuid4(), NotificationEvent.FOLLOW_UP_SCHEDULED, {"follow_up_id": "f1"})

    assert "Webhook delivery failed" in caplog.text


def test_webhook_delivery_is_deferred_to_background_tasks(caplog):
    tasks = BackgroundTasks()
    sink = NotificationSink(webhook_url="http://127.0.0.1:9/hooks", timeout=0.5, background=tasks)

    sink.notify(uuid.uuid4(), NotificationEvent.VIEWING_CONFIRMED, {"viewing_id": "v1"})

    assert len(tasks.tasks) == 1
    assert tasks.tasks[0].func == sink.deliver
    assert tasks.tasks[0].args[0]["event"] == "viewing_confirmed"
    assert "Webhook delivery failed" not in caplog.text


def test_sink_without_webhook_schedules_nothing():
    tasks = BackgroundTasks()
    sink = NotificationSink(webhook_url="", background=tasks)

    sink.notify(uuid.uuid4(), NotificationEvent.VIEWING_REQUESTED, {})

    assert tasks.tasks == []


def test_request_sink_uses_the_request_background_tasks():
    tasks = BackgroundTasks()

    sink = get_notification_sink(tasks)

    assert sink.background is tasks
