"""
Unit tests for trial state derivation
"""
from datetime import datetime, timedelta, timezone
from db.models.user import User
from api.services.trial_service import (
    TrialState,
    ZERO_STATE,
    DAY_MS,
    is_trial_user,
    resolve_trial_state,
    onboarding_status,
    end_of_day,
)

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)
END_OF_TODAY = datetime(2026, 3, 10, 23, 59, 59, 999000, tzinfo=timezone.utc)


def trial_user(trial_ends_at, plan="Pro", subscription_status="trial"):
    return User(plan=plan, subscription_status=subscription_status, trial_ends_at=trial_ends_at)


class TestIsTrialUser:
    def test_trial_status_is_trial(self):
        assert is_trial_user(trial_user(None, plan="Pro", subscription_status="trial"))

    def test_trial_plan_without_active_subscription_is_trial(self):
        assert is_trial_user(trial_user(None, plan="trial", subscription_status="inactive"))

    def test_active_subscription_is_never_trial(self):
        assert not is_trial_user(trial_user(None, plan="trial", subscription_status="active"))
        assert not is_trial_user(trial_user(None, plan="Pro", subscription_status="active"))

    def test_plain_free_user_is_not_trial(self):
        assert not is_trial_user(trial_user(None, plan="Free", subscription_status="inactive"))

    def test_missing_user(self):
        assert not is_trial_user(None)


class TestResolveTrialState:
    def test_no_user_gives_zero_state(self):
        state = resolve_trial_state(None, NOW)
        assert state == ZERO_STATE
        assert state.is_trial is False
        assert state.days_left == 0
        assert state.is_expired is False
        assert state.trial_end_date is None

    def test_trial_ending_later_today(self):
        state = resolve_trial_state(trial_user(datetime(2026, 3, 10, 10, 0), plan="trial"), NOW)
        assert state.is_trial is True
        assert state.days_left == 1
        assert state.is_expired is False

    def test_trial_ending_exactly_at_end_of_today(self):
        state = resolve_trial_state(trial_user(END_OF_TODAY), NOW)
        assert state.days_left == 1
        assert state.is_expired is False

    def test_trial_that_ended_earlier_today_keeps_last_day(self):
        state = resolve_trial_state(trial_user(datetime(2026, 3, 10, 8, 0)), NOW)
        assert state.days_left == 1
        assert state.is_expired is False

    def test_exactly_one_day_after_end_of_today_is_one_day(self):
        state = resolve_trial_state(trial_user(END_OF_TODAY + timedelta(days=1)), NOW)
        assert state.days_left == 1

    def test_ending_tomorrow_midday(self):
        state = resolve_trial_state(trial_user(datetime(2026, 3, 11, 12, 0)), NOW)
        assert state.days_left == 1

    def test_several_days_left(self):
        state = resolve_trial_state(trial_user(datetime(2026, 3, 15, 12, 0)), NOW)
        assert state.days_left == 5
        assert state.is_expired is False

    def test_ended_more_than_a_day_ago_is_expired(self):
        state = resolve_trial_state(trial_user(NOW - timedelta(hours=25)), NOW)
        assert state.is_expired is True
        assert state.days_left == 0

    def test_ended_yesterday_is_expired(self):
        state = resolve_trial_state(trial_user(datetime(2026, 3, 9, 12, 0)), NOW)
        assert state.is_expired is True
        assert state.days_left == 0

    def test_end_of_yesterday_is_the_expiry_boundary(self):
        state = resolve_trial_state(trial_user(END_OF_TODAY - timedelta(days=1)), NOW)
        assert state.is_expired is True
        assert state.days_left == 0

    def test_active_subscription_ignores_trial_dates(self):
        user = trial_user(datetime(2026, 3, 15), plan="trial", subscription_status="active")
        state = resolve_trial_state(user, NOW)
        assert state.is_trial is False
        assert state.days_left == 0
        assert state.is_expired is False
        assert state.trial_end_date == datetime(2026, 3, 15)

    def test_trial_without_end_date(self):
        state = resolve_trial_state(trial_user(None), NOW)
        assert state.is_trial is True
        assert state.days_left == 0
        assert state.is_expired is False

    def test_aware_now_treats_stored_naive_timestamps_as_utc(self):
        now = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)
        state = resolve_trial_state(trial_user(datetime(2026, 3, 12, 12, 0)), now)
        assert state.days_left == 2

    def test_aware_trial_end_in_another_zone(self):
        now = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)
        end = datetime(2026, 3, 11, 3, 0, tzinfo=timezone(timedelta(hours=5)))  # 22:00 UTC today
        state = resolve_trial_state(trial_user(end), now)
        assert state.days_left == 1
        assert state.is_expired is False

    def test_naive_now_converts_stored_utc_to_local_time(self):
        now = datetime(2026, 7, 10, 12, 0)  # local wall time
        now_in_utc = now.astimezone(timezone.utc).replace(tzinfo=None)

        state = resolve_trial_state(trial_user(now_in_utc + timedelta(days=2)), now)
        assert state.days_left == 2

        state = resolve_trial_state(trial_user(now_in_utc - timedelta(hours=1)), now)
        assert state.days_left == 1
        assert state.is_expired is False

    def test_naive_and_aware_clocks_agree(self):
        aware_now = datetime(2026, 7, 10, 12, 0).astimezone()
        naive_now = aware_now.replace(tzinfo=None)
        stored = aware_now.astimezone(timezone.utc).replace(tzinfo=None) + timedelta(days=4, hours=3)

        assert resolve_trial_state(trial_user(stored), naive_now) == resolve_trial_state(
            trial_user(stored), aware_now
        )

    def test_days_left_never_negative(self):
        for hours in range(0, 24 * 10, 7):
            state = resolve_trial_state(trial_user(NOW - timedelta(hours=hours)), NOW)
            assert state.days_left >= 0

    def test_default_now_is_current_time(self):
        state = resolve_trial_state(trial_user(datetime.now() + timedelta(days=10)))
        assert state.is_trial is True
        assert 9 <= state.days_left <= 11


def test_end_of_day():
    assert end_of_day(NOW) == END_OF_TODAY
    assert DAY_MS == 86_400_000


def test_trial_state_is_active():
    assert TrialState(is_trial=True, days_left=3).is_active
    assert not TrialState(is_trial=True, is_expired=True).is_active
    assert not ZERO_STATE.is_active


def test_onboarding_status_shape():
    user = trial_user(datetime(2026, 3, 15, 12, 0), plan="Pro", subscription_status="trial")
    status = onboarding_status(user, NOW)
    assert status == {
        "trialStatus": {"active": True, "daysRemaining": 5},
        "plan": "Pro",
        "subscriptionStatus": "trial",
    }


def test_onboarding_status_for_expired_trial():
    user = trial_user(datetime(2026, 3, 1), plan="Pro", subscription_status="trial")
    status = onboarding_status(user, NOW)
    assert status["trialStatus"] == {"active": False, "daysRemaining": 0}
