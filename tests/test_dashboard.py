"""Tests for dashboard aggregation."""

import pytest

from food_bricks.errors import EntityNotFound
from food_bricks.models import BrickType, TrialStatus
from food_bricks.services import BabyService, DashboardAggregator, FoodStatus, classify


def progress_for(dashboard, food):
    return next(p for p in dashboard.food_progress if p.food.id == food.id)


class TestStats:
    """Tests for summary statistics."""

    def test_empty_dashboard(self, aggregator, baby):
        dashboard = aggregator.build(baby.id)
        assert dashboard.stats.total_foods == 0
        assert dashboard.stats.safe_foods == 0
        assert dashboard.stats.food_allergies == 0
        assert dashboard.active_trials == []
        assert dashboard.food_progress == []
        assert dashboard.recent_activity == []

    def test_counts(self, aggregator, baby, foods, run_trial, controller, clock):
        for _ in range(3):
            run_trial(baby.id, foods["egg"].id, "safe")
        for _ in range(2):
            run_trial(baby.id, foods["peanut"].id, "reaction")
        controller.start_trial(baby.id, foods["milk"].id, clock())

        stats = aggregator.build(baby.id).stats

        assert stats.total_foods == 3
        assert stats.safe_foods == 1
        assert stats.food_allergies == 1

    def test_warnings_cancel_safe_credit(self, aggregator, baby, foods, run_trial):
        """Test the safe-food stat and the classifier can disagree.

        Three passes then a warning: the classifier still says "Safe food"
        (warnings are not reactions) while the stat sees only two net passes.
        """
        for outcome in ("safe", "safe", "safe", "reaction"):
            run_trial(baby.id, foods["egg"].id, outcome)

        dashboard = aggregator.build(baby.id)
        progress = progress_for(dashboard, foods["egg"])

        assert progress.brick_types[-1] == BrickType.WARNING
        assert dashboard.stats.safe_foods == 0
        assert classify(progress.brick_types) == FoodStatus.SAFE

    def test_stat_counts_safe_food_the_classifier_doubts(self, aggregator, baby, foods, run_trial):
        """Test a food can be a safe-food stat while classified as sensitive."""
        for outcome in ("safe", "safe", "safe", "reaction", "safe", "reaction"):
            run_trial(baby.id, foods["milk"].id, outcome)

        dashboard = aggregator.build(baby.id)
        progress = progress_for(dashboard, foods["milk"])

        assert progress.brick_types == [
            BrickType.SAFE, BrickType.SAFE, BrickType.SAFE,
            BrickType.WARNING, BrickType.SAFE, BrickType.REACTION,
        ]
        assert dashboard.stats.safe_foods == 1
        assert classify(progress.brick_types) == FoodStatus.SAFE_WITH_SENSITIVITY

    def test_warnings_do_not_count_as_allergies(self, aggregator, baby, foods, run_trial):
        for outcome in ("safe", "reaction", "reaction"):
            run_trial(baby.id, foods["egg"].id, outcome)
        # safe, warning, reaction: only one red brick
        assert aggregator.build(baby.id).stats.food_allergies == 0


class TestActiveTrials:
    def test_soonest_ending_first(self, aggregator, controller, baby, foods, clock):
        long = controller.start_trial(baby.id, foods["egg"].id, clock(), observation_period_days=7)
        short = controller.start_trial(baby.id, foods["milk"].id, clock(), observation_period_days=2)
        done = controller.start_trial(baby.id, foods["oats"].id, clock())
        controller.complete_trial(done.id)

        active = aggregator.build(baby.id).active_trials

        assert [a.trial.id for a in active] == [short.id, long.id]
        assert active[0].food.name == "Milk"


class TestFoodProgress:
    def test_progress_entry(self, aggregator, baby, foods, run_trial, controller, clock):
        first = run_trial(baby.id, foods["egg"].id, "safe")
        run_trial(baby.id, foods["egg"].id, "reaction")
        run_trial(baby.id, foods["egg"].id, "reaction")
        last = controller.start_trial(baby.id, foods["egg"].id, clock.advance(days=1))

        progress = progress_for(aggregator.build(baby.id), foods["egg"])

        assert progress.brick_types == [BrickType.SAFE, BrickType.WARNING, BrickType.REACTION]
        assert progress.pass_count == 1
        assert progress.reaction_count == 1
        assert progress.warning_count == 1
        assert progress.first_trial_date == first.trial_date
        assert progress.last_trial_date == last.trial_date
        assert progress.has_active_trial is True
        assert [b.date for b in progress.bricks] == sorted(b.date for b in progress.bricks)

    def test_ordered_by_last_trial(self, aggregator, baby, foods, run_trial):
        run_trial(baby.id, foods["egg"].id, "safe")
        run_trial(baby.id, foods["milk"].id, "safe")
        run_trial(baby.id, foods["oats"].id, "safe")
        run_trial(baby.id, foods["egg"].id, "safe")

        names = [p.food.name for p in aggregator.build(baby.id).food_progress]
        assert names == ["Egg", "Oats", "Milk"]

    def test_only_this_babys_foods(self, aggregator, storage, baby, foods, run_trial, babies):
        other = babies.create_baby("u2", "Bo", baby.date_of_birth)
        run_trial(other.id, foods["egg"].id, "safe")
        assert aggregator.build(baby.id).food_progress == []


class TestRecentActivity:
    def test_trial_events(self, aggregator, controller, baby, foods, run_trial, clock):
        run_trial(baby.id, foods["egg"].id, "safe")
        run_trial(baby.id, foods["milk"].id, "reaction")
        clock.advance(hours=1)
        controller.start_trial(baby.id, foods["oats"].id, clock())

        events = aggregator.build(baby.id).recent_activity

        assert [e.description for e in events] == [
            "Started Oats trial observation",
            "Reaction to Milk logged",
            "Egg trial completed successfully",
        ]
        assert [e.type for e in events] == ["info", "error", "success"]

    def test_steroid_cream_events_merged(self, aggregator, storage, baby, foods, run_trial, clock):
        babies = BabyService(storage, clock=clock)
        cream = babies.start_steroid_cream(baby.id, duration_days=5)
        run_trial(baby.id, foods["egg"].id, "safe")
        clock.advance(hours=1)
        babies.end_steroid_cream(cream.id)

        events = aggregator.build(baby.id).recent_activity

        assert [e.description for e in events] == [
            "Steroid cream ended",
            "Egg trial completed successfully",
            "Steroid cream started (5 days)",
        ]
        timestamps = [e.timestamp for e in events]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_capped_at_ten(self, aggregator, baby, foods, run_trial):
        for _ in range(12):
            run_trial(baby.id, foods["egg"].id, "safe")
        assert len(aggregator.build(baby.id).recent_activity) == 10

    def test_configurable_cap(self, storage, settings, baby, foods, run_trial):
        for _ in range(4):
            run_trial(baby.id, foods["egg"].id, "safe")
        aggregator = DashboardAggregator(
            storage, settings=settings.model_copy(update={"recent_activity_limit": 2}),
        )
        assert len(aggregator.build(baby.id).recent_activity) == 2

    def test_statuses_in_events_follow_trials(self, aggregator, storage, baby, foods, run_trial):
        trial = run_trial(baby.id, foods["egg"].id, "safe")
        assert trial.status == TrialStatus.COMPLETED
        event = aggregator.build(baby.id).recent_activity[0]
        assert event.id == trial.id
        assert event.timestamp == trial.updated_at


class TestUnknownBaby:
    def test_build_unknown_baby(self, aggregator):
        with pytest.raises(EntityNotFound):
            aggregator.build("missing")
