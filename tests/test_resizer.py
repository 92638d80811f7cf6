"""Tests for growing and shrinking the week range."""

from dataclasses import replace

import pytest

from capplanner.capacity.aggregation import project_capacity
from capplanner.capacity.calculator import allocated
from capplanner.capacity.resizer import clamp_dangling_ranges, resize
from capplanner.cli import create_sample_schedule
from capplanner.domain.models import Assignment, PlannerDefaults, Project, Schedule, Week


@pytest.fixture
def sample() -> Schedule:
    """Six-week sample plan with Bob on duty in W2 and W6."""
    return replace(create_sample_schedule(), fr_schedule={"W2": 2, "W6": 2})


class TestGrow:
    """Tests for appending weeks."""

    def test_appends_sequential_weeks(self, sample):
        """New weeks follow the W{n} / Week {n} convention with 5 days."""
        grown = resize(sample, 8)
        assert grown.week_ids == ["W1", "W2", "W3", "W4", "W5", "W6", "W7", "W8"]
        assert grown.weeks[6] == Week(id="W7", name="Week 7", working_days=5)
        assert grown.planning_period.number_of_weeks == 8

    def test_provisions_zero_holidays(self, sample):
        """Every person gets an explicit 0 holiday entry for each new week."""
        grown = resize(sample, 7)
        for person in sample.people:
            assert grown.holidays[(person.id, "W7")] == 0

    def test_existing_data_untouched(self, sample):
        """Holidays, FR and projects for existing weeks survive."""
        grown = resize(sample, 10)
        assert grown.holidays[(1, "W2")] == 2
        assert grown.fr_schedule == sample.fr_schedule
        assert grown.projects == sample.projects

    def test_input_not_modified(self, sample):
        """Resizing builds a new schedule."""
        resize(sample, 9)
        assert len(sample.weeks) == 6
        assert (1, "W7") not in sample.holidays

    def test_skips_ids_in_use(self):
        """A renumbered week list never gets a duplicate id."""
        schedule = Schedule(weeks=(Week(id="W2", name="Week 2"),))
        grown = resize(schedule, 3)
        assert grown.week_ids == ["W2", "W3", "W4"]

    def test_custom_defaults(self, sample):
        """Defaults control id, name and working days of new weeks."""
        defaults = PlannerDefaults(working_days=4, week_id_prefix="S", week_name_prefix="Sprint ")
        grown = resize(sample, 7, defaults=defaults)
        assert grown.weeks[-1] == Week(id="S7", name="Sprint 7", working_days=4)


class TestShrink:
    """Tests for dropping tail weeks."""

    def test_truncates_tail(self, sample):
        """Only the first weeks are kept."""
        shrunk = resize(sample, 4)
        assert shrunk.week_ids == ["W1", "W2", "W3", "W4"]
        assert shrunk.planning_period.number_of_weeks == 4

    def test_prunes_holidays_and_fr(self, sample):
        """Holiday and FR entries of W5/W6 are removed."""
        shrunk = resize(sample, 4)
        assert not any(week_id in ("W5", "W6") for _, week_id in shrunk.holidays)
        assert shrunk.fr_schedule == {"W2": 2}
        assert shrunk.holidays[(3, "W4")] == 3

    def test_leaves_dangling_project(self, sample):
        """A project ending in a dropped week is kept as is and contributes nothing."""
        sample = replace(
            sample, projects=(replace(sample.projects[0], end_week="W6"),)
        )
        shrunk = resize(sample, 4)
        assert shrunk.projects[0].end_week == "W6"
        assert project_capacity(shrunk, shrunk.projects[0]).weeks == ()

    def test_dangling_assignment_stops_counting(self, sample):
        """An assignment ending in a dropped week no longer allocates."""
        project = Project(
            id=2,
            name="Long",
            start_week="W1",
            end_week="W6",
            assignments=(
                Assignment(person_id=3, days_per_week=2, start_week="W4", end_week="W6"),
            ),
        )
        sample = replace(sample, projects=sample.projects + (project,))
        assert allocated(sample, 3, "W4") == 2
        shrunk = resize(sample, 4)
        assert allocated(shrunk, 3, "W4") == 0

    def test_shrink_to_zero(self, sample):
        """All weeks, holidays and FR entries can be removed."""
        shrunk = resize(sample, 0)
        assert shrunk.weeks == ()
        assert shrunk.holidays == {}
        assert shrunk.fr_schedule == {}
        assert shrunk.projects == sample.projects


class TestResizeEdges:
    """Tests for no-ops, errors and round trips."""

    def test_same_count_is_noop(self, sample):
        """Resizing to the current count returns the input."""
        assert resize(sample, 6) is sample

    def test_negative_count_rejected(self, sample):
        """A negative week count is an argument error."""
        with pytest.raises(ValueError):
            resize(sample, -1)

    def test_grow_then_shrink_round_trip(self, sample):
        """Growing then shrinking back restores ids, holidays and FR entries."""
        restored = resize(resize(sample, 9), 6)
        assert restored.week_ids == sample.week_ids
        assert restored.holidays == sample.holidays
        assert restored.fr_schedule == sample.fr_schedule

    def test_shrink_then_grow_keeps_prefix(self, sample):
        """Retained weeks keep their entries; re-added weeks start clean."""
        regrown = resize(resize(sample, 4), 6)
        assert regrown.week_ids == sample.week_ids
        assert regrown.holidays[(1, "W2")] == 2
        assert regrown.holidays[(1, "W5")] == 0
        assert "W6" not in regrown.fr_schedule


class TestClampRanges:
    """Tests for the strict resize mode."""

    def test_end_week_clamped(self, sample):
        """A dropped end week becomes the last kept week."""
        sample = replace(
            sample, projects=(replace(sample.projects[0], end_week="W6"),)
        )
        shrunk = resize(sample, 4, clamp_ranges=True)
        assert shrunk.projects[0].end_week == "W4"

    def test_assignment_end_clamped(self, sample):
        """Assignments ending in dropped weeks are clamped too."""
        project = Project(
            id=2,
            name="Long",
            start_week="W1",
            end_week="W6",
            assignments=(
                Assignment(person_id=3, days_per_week=2, start_week="W4", end_week="W6"),
                Assignment(person_id=1, days_per_week=1, start_week="W5", end_week="W6"),
            ),
        )
        sample = replace(sample, projects=sample.projects + (project,))
        shrunk = resize(sample, 4, clamp_ranges=True)
        clamped = shrunk.get_project(2)
        assert clamped.end_week == "W4"
        assert clamped.assignments == (
            Assignment(person_id=3, days_per_week=2, start_week="W4", end_week="W4"),
        )
        assert allocated(shrunk, 3, "W4") == 2

    def test_project_after_new_end_removed(self, sample):
        """A project that starts in a dropped week is removed."""
        late = Project(id=2, name="Late", start_week="W5", end_week="W6")
        sample = replace(sample, projects=sample.projects + (late,))
        shrunk = resize(sample, 4, clamp_ranges=True)
        assert [p.id for p in shrunk.projects] == [1]

    def test_shrink_to_zero_removes_projects(self, sample):
        """With no weeks left every project goes."""
        assert resize(sample, 0, clamp_ranges=True).projects == ()

    def test_untouched_ranges_unchanged(self, sample):
        """Projects inside the kept weeks are left alone."""
        shrunk = resize(sample, 4, clamp_ranges=True)
        assert shrunk.projects == sample.projects

    def test_clamp_directly(self, sample):
        """clamp_dangling_ranges can be applied to an already shrunk schedule."""
        sample = replace(
            sample, projects=(replace(sample.projects[0], end_week="W6"),)
        )
        shrunk = resize(sample, 5)
        clamped = clamp_dangling_ranges(shrunk, {"W6"})
        assert clamped.projects[0].end_week == "W5"
