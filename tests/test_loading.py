"""Unit tests for the shared loading coordinator."""

import pytest

from deepbank.shared.loading import (
    LoadingConfig,
    LoadingCoordinator,
    LoadingPhase,
    LoadingState,
    get_loading_state_message,
)


@pytest.fixture
def level_loading(scheduler):
    return LoadingCoordinator(LoadingConfig(counted=False), scheduler)


class TestLoadingStateTransitions:
    @pytest.mark.unit
    def test_starts_idle(self, loading):
        assert loading.state == LoadingState()
        assert loading.state.phase == LoadingPhase.IDLE

    @pytest.mark.unit
    def test_begin_sets_busy_with_message(self, loading):
        loading.begin("Submitting deposit...")
        assert loading.busy is True
        assert loading.message == "Submitting deposit..."
        assert loading.state.phase == LoadingPhase.BUSY

    @pytest.mark.unit
    def test_end_clears_busy_and_message(self, loading):
        token = loading.begin("Working")
        loading.end(token)
        assert loading.busy is False
        assert loading.message == ""
        assert loading.timed_out is False

    @pytest.mark.unit
    def test_end_is_idempotent(self, loading, scheduler):
        token = loading.begin()
        loading.end(token)
        loading.end(token)
        loading.end()
        assert loading.state == LoadingState()
        assert scheduler.pending == 0

    @pytest.mark.unit
    def test_end_with_unknown_token_is_ignored(self, loading):
        loading.begin()
        loading.end(999)
        assert loading.busy is True


class TestDeadline:
    @pytest.mark.unit
    def test_timeout_fires_after_ten_seconds(self, loading, scheduler):
        loading.begin("Slow call")
        scheduler.advance(9.9)
        assert loading.busy is True
        assert loading.timed_out is False

        scheduler.advance(0.2)
        assert loading.busy is False
        assert loading.timed_out is True
        assert loading.state.phase == LoadingPhase.TIMED_OUT

    @pytest.mark.unit
    def test_banner_clears_after_eight_seconds(self, loading, scheduler):
        loading.begin()
        scheduler.advance(10)
        assert loading.timed_out is True

        scheduler.advance(7.9)
        assert loading.timed_out is True
        scheduler.advance(0.2)
        assert loading.timed_out is False
        assert loading.state == LoadingState()

    @pytest.mark.unit
    def test_end_before_deadline_cancels_timeout(self, loading, scheduler):
        token = loading.begin()
        scheduler.advance(5)
        loading.end(token)
        scheduler.advance(30)
        assert loading.timed_out is False

    @pytest.mark.unit
    def test_late_end_after_timeout_is_noop(self, loading, scheduler):
        token = loading.begin()
        scheduler.advance(11)
        loading.end(token)
        assert loading.timed_out is True
        assert loading.busy is False

    @pytest.mark.unit
    def test_begin_clears_timeout_banner(self, loading, scheduler):
        loading.begin()
        scheduler.advance(10)
        assert loading.timed_out is True

        loading.begin("Retrying")
        assert loading.timed_out is False
        assert loading.busy is True
        # The old banner timer must not clear the new operation.
        scheduler.advance(8)
        assert loading.busy is True

    @pytest.mark.unit
    def test_deadline_callback_after_rearm_is_ignored(self, loading, scheduler):
        # A timer thread that passed its generation check before begin()
        # re-armed the slot still reaches the coordinator.
        loading.begin("Retrying")
        loading._on_deadline()
        assert loading.busy is True
        assert loading.timed_out is False

        scheduler.advance(10)
        assert loading.busy is False
        assert loading.timed_out is True

    @pytest.mark.unit
    def test_banner_callback_after_rearm_is_ignored(self, loading, scheduler):
        loading.begin()
        scheduler.advance(10)
        loading._on_banner_expired()
        assert loading.timed_out is True

        scheduler.advance(8)
        assert loading.timed_out is False

    @pytest.mark.unit
    def test_dismiss_timeout(self, loading, scheduler):
        loading.begin()
        scheduler.advance(10)
        loading.dismiss_timeout()
        assert loading.timed_out is False
        assert scheduler.pending == 0

    @pytest.mark.unit
    def test_custom_thresholds(self, scheduler):
        loading = LoadingCoordinator(
            LoadingConfig(timeout_seconds=2, banner_seconds=1), scheduler
        )
        loading.begin()
        scheduler.advance(2)
        assert loading.timed_out is True
        scheduler.advance(1)
        assert loading.timed_out is False


class TestOverlappingOperations:
    @pytest.mark.unit
    def test_counted_mode_waits_for_every_operation(self, loading):
        first = loading.begin("A")
        second = loading.begin("B")
        assert loading.state.pending == 2

        loading.end(first)
        assert loading.busy is True
        loading.end(second)
        assert loading.busy is False

    @pytest.mark.unit
    def test_counted_mode_rearms_deadline_on_partial_end(self, loading, scheduler):
        first = loading.begin()
        loading.begin()
        scheduler.advance(6)
        loading.end(first)
        scheduler.advance(6)
        assert loading.busy is True
        scheduler.advance(4)
        assert loading.timed_out is True

    @pytest.mark.unit
    def test_level_mode_first_end_clears(self, level_loading):
        first = level_loading.begin("A")
        level_loading.begin("B")
        assert level_loading.state.pending == 1

        level_loading.end(first)
        assert level_loading.busy is False

    @pytest.mark.unit
    def test_end_without_token_clears_everything(self, loading):
        loading.begin()
        loading.begin()
        loading.end()
        assert loading.busy is False


class TestHelpers:
    @pytest.mark.unit
    def test_operation_context_releases_on_error(self, loading):
        with pytest.raises(RuntimeError):
            with loading.operation("Boom"):
                assert loading.busy is True
                raise RuntimeError("failed")
        assert loading.busy is False

    @pytest.mark.unit
    def test_begin_with_delayed_end(self, loading, scheduler):
        loading.begin_with_delayed_end(2, "Refreshing")
        assert loading.busy is True
        scheduler.advance(2)
        assert loading.busy is False
        assert loading.timed_out is False

    @pytest.mark.unit
    def test_show_with_timeout(self, loading, scheduler):
        loading.show_with_timeout(True)
        assert loading.busy is True
        loading.show_with_timeout(False, delay=1)
        assert loading.busy is True
        scheduler.advance(1)
        assert loading.busy is False

    @pytest.mark.unit
    def test_listeners_receive_snapshots(self, loading, scheduler):
        states = []
        unsubscribe = loading.subscribe(states.append)

        token = loading.begin("Hi")
        loading.end(token)
        unsubscribe()
        loading.begin()

        assert [s.phase for s in states] == [LoadingPhase.BUSY, LoadingPhase.IDLE]

    @pytest.mark.unit
    def test_listener_errors_do_not_break_coordinator(self, loading):
        def broken(state):
            raise ValueError("listener bug")

        loading.subscribe(broken)
        token = loading.begin()
        loading.end(token)
        assert loading.busy is False

    @pytest.mark.unit
    def test_state_messages(self):
        assert get_loading_state_message(LoadingState()) == ("", "")
        assert get_loading_state_message(LoadingState(busy=True, message="x"))[1] == "x"
        title, _ = get_loading_state_message(LoadingState(timed_out=True))
        assert title == "Connection problem"
