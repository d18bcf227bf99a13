import pytest

from deepbank.shared.notifications import (
    NotificationCenter,
    Remediation,
    Severity,
)


@pytest.mark.unit
def test_success_toast_auto_dismisses_after_three_seconds(notifications, scheduler):
    dismissed = []
    notifications.subscribe(lambda n: None, dismissed.append)

    toast = notifications.success("Deposit submitted")
    assert notifications.active == [toast]

    scheduler.advance(2.9)
    assert notifications.active == [toast]
    scheduler.advance(0.1)
    assert notifications.active == []
    assert dismissed == [toast]


@pytest.mark.unit
def test_error_with_remediation(notifications):
    toast = notifications.error(
        "Add a bank account first", remediation=Remediation.ADD_BANK_ACCOUNT
    )
    assert toast.severity == Severity.ERROR
    assert toast.icon == "✗"
    assert toast.action_label == "Add bank account"


@pytest.mark.unit
def test_success_icon_and_no_action(notifications):
    toast = notifications.success("Done")
    assert toast.icon == "✓"
    assert toast.action_label is None


@pytest.mark.unit
def test_manual_dismiss_cancels_timer(notifications, scheduler):
    toast = notifications.success("Done")
    assert notifications.dismiss(toast.id) is True
    assert notifications.dismiss(toast.id) is False
    assert scheduler.pending == 0


@pytest.mark.unit
def test_ids_are_unique_and_history_is_kept(notifications, scheduler):
    first = notifications.success("A")
    second = notifications.error("B")
    scheduler.advance(5)

    assert first.id != second.id
    assert [n.message for n in notifications.history] == ["A", "B"]


@pytest.mark.unit
def test_listener_errors_are_contained(notifications):
    def broken(notification):
        raise RuntimeError("ui gone")

    notifications.subscribe(broken)
    toast = notifications.success("Still delivered")
    assert toast in notifications.active


@pytest.mark.unit
def test_custom_display_time(scheduler):
    center = NotificationCenter(scheduler=scheduler, display_seconds=1)
    center.success("Quick")
    scheduler.advance(1)
    assert center.active == []


@pytest.mark.unit
def test_history_keeps_only_the_most_recent(scheduler):
    center = NotificationCenter(scheduler=scheduler, history_limit=3)
    for index in range(5):
        center.success(f"Toast {index}")
        scheduler.advance(3)

    assert [n.message for n in center.history] == ["Toast 2", "Toast 3", "Toast 4"]
    assert center.active == []
