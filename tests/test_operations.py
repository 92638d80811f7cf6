"""Tests for schedule editing operations."""

from datetime import date

import pytest

from capplanner.cli import create_sample_schedule
from capplanner.domain.models import Assignment, PlannerDefaults, Schedule
from capplanner.editing.operations import (
    IneligibleFirstResponderError,
    add_assignment,
    add_person,
    add_project,
    delete_person,
    delete_project,
    remove_assignment,
    set_first_responder,
    set_fr_capacity_days,
    set_holiday,
    set_start_date,
    update_assignment,
    update_person,
    update_project,
    update_week,
)


@pytest.fixture
def sample() -> Schedule:
    """Sample plan: Alice, Bob and Charlie over six weeks."""
    return create_sample_schedule()


class TestPeople:
    """Tests for adding, renaming and deleting people."""

    def test_add_person_provisions_holidays(self, sample):
        """A new person gets the next id and a 0 holiday for every week."""
        updated = add_person(sample, "Dana")
        assert updated.people[-1].id == 4
        assert updated.people[-1].name == "Dana"
        for week in sample.weeks:
            assert updated.holidays[(4, week.id)] == 0
        assert len(sample.people) == 3

    def test_add_person_default_name(self, sample):
        """Without a name the person is called after their id."""
        assert add_person(sample).people[-1].name == "Person 4"

    def test_update_person(self, sample):
        """Renaming keeps the id."""
        updated = update_person(sample, 2, "Robert")
        assert updated.get_person(2).name == "Robert"

    def test_update_unknown_person(self, sample):
        """Renaming someone who is not in the team fails."""
        with pytest.raises(ValueError):
            update_person(sample, 42, "Nobody")

    def test_delete_person_prunes_holidays_and_fr(self, sample):
        """Deleting prunes holidays and FR weeks but keeps assignments."""
        sample = set_first_responder(sample, "W1", 1)
        sample = set_first_responder(sample, "W2", 2)
        updated = delete_person(sample, 1)

        assert updated.get_person(1) is None
        assert not any(pid == 1 for pid, _ in updated.holidays)
        assert updated.fr_schedule == {"W2": 2}
        assert updated.projects[0].get_assignment(1) is not None


class TestWeeksAndSettings:
    """Tests for week and document settings."""

    def test_update_week(self, sample):
        """Working days and name can be changed."""
        updated = update_week(sample, "W1", name="Kickoff", working_days=3)
        assert updated.get_week("W1").name == "Kickoff"
        assert updated.get_week("W1").working_days == 3

    def test_update_week_rejects_negative_days(self, sample):
        """Working days cannot be negative."""
        with pytest.raises(ValueError):
            update_week(sample, "W1", working_days=-1)

    def test_update_unknown_week(self, sample):
        """Only existing weeks can be updated."""
        with pytest.raises(ValueError):
            update_week(sample, "W9", name="Missing")

    def test_set_start_date(self, sample):
        """The start date moves; the week count stays."""
        updated = set_start_date(sample, date(2026, 1, 5))
        assert updated.planning_period.start_date == date(2026, 1, 5)
        assert updated.planning_period.number_of_weeks == 6

    def test_set_fr_capacity_days(self, sample):
        """FR capacity days can be changed but not made negative."""
        assert set_fr_capacity_days(sample, 2.5).fr_capacity_days == 2.5
        with pytest.raises(ValueError):
            set_fr_capacity_days(sample, -1)

    def test_set_holiday(self, sample):
        """Half days are accepted; negatives are not."""
        updated = set_holiday(sample, 2, "W3", 0.5)
        assert updated.holiday_days(2, "W3") == 0.5
        with pytest.raises(ValueError):
            set_holiday(sample, 2, "W3", -1)


class TestFirstResponderAssignment:
    """Tests for setting first-responder duty."""

    def test_assign(self, sample):
        """An eligible person can take the week."""
        updated = set_first_responder(sample, "W1", 3)
        assert updated.first_responder_for("W1") == 3

    def test_reassign_replaces_holder(self, sample):
        """At most one holder per week."""
        updated = set_first_responder(set_first_responder(sample, "W1", 3), "W1", 2)
        assert updated.fr_schedule == {"W1": 2}

    def test_clear(self, sample):
        """None leaves the week unassigned."""
        updated = set_first_responder(set_first_responder(sample, "W1", 3), "W1", None)
        assert updated.first_responder_for("W1") is None

    def test_ineligible_rejected(self, sample):
        """Charlie has 2 days in W4, below the 3 FR days."""
        with pytest.raises(IneligibleFirstResponderError) as exc_info:
            set_first_responder(sample, "W4", 3)
        assert exc_info.value.person_id == 3
        assert exc_info.value.week_id == "W4"

    def test_force_bypasses_check(self, sample):
        """Forcing records the inconsistent state; capacity floors at 0."""
        updated = set_first_responder(sample, "W5", 1, force=True)
        assert updated.first_responder_for("W5") == 1


class TestProjects:
    """Tests for projects and assignments."""

    def test_add_project_defaults(self, sample):
        """A new project covers the first three weeks."""
        updated = add_project(sample, "Search")
        project = updated.projects[-1]
        assert project.id == 2
        assert (project.start_week, project.end_week) == ("W1", "W3")
        assert project.assignments == ()

    def test_add_project_short_period(self, sample):
        """The default span shrinks to the available weeks."""
        updated = add_project(sample, defaults=PlannerDefaults(project_span_weeks=10))
        assert updated.projects[-1].end_week == "W6"
        assert updated.projects[-1].name == "Project 2"

    def test_add_project_without_weeks(self):
        """Default bounds need at least one week."""
        with pytest.raises(ValueError):
            add_project(Schedule(), "Nothing")

    def test_update_project(self, sample):
        """Patching leaves unspecified fields alone."""
        updated = update_project(sample, 1, end_week="W5", notes="Phase 2")
        project = updated.get_project(1)
        assert project.name == "API Migration"
        assert project.end_week == "W5"
        assert project.notes == "Phase 2"
        assert project.assignments[0].end_week == "W3"

    def test_delete_project(self, sample):
        """Deleting removes the project with its assignments."""
        assert delete_project(sample, 1).projects == ()

    def test_add_assignment_inherits_range(self, sample):
        """Assignment ranges default to the project's range."""
        updated = add_assignment(sample, 1, 3, days_per_week=1.5)
        assert updated.get_project(1).get_assignment(3) == Assignment(
            person_id=3, days_per_week=1.5, start_week="W1", end_week="W3"
        )

    def test_add_assignment_default_days(self, sample):
        """Days per week default to 2."""
        updated = add_assignment(sample, 1, 3, start_week="W2", end_week="W6")
        assignment = updated.get_project(1).get_assignment(3)
        assert assignment.days_per_week == 2
        assert assignment.end_week == "W6"

    def test_add_assignment_once_per_person(self, sample):
        """A person already on the project is not added again."""
        assert add_assignment(sample, 1, 1) is sample

    def test_add_assignment_unknown_person(self, sample):
        """Only team members can be assigned."""
        with pytest.raises(ValueError):
            add_assignment(sample, 1, 42)

    def test_update_assignment(self, sample):
        """Days and range can be changed independently."""
        updated = update_assignment(sample, 1, 2, days_per_week=1, end_week="W2")
        assignment = updated.get_project(1).get_assignment(2)
        assert assignment.days_per_week == 1
        assert (assignment.start_week, assignment.end_week) == ("W1", "W2")

    def test_update_missing_assignment(self, sample):
        """Updating an assignment that does not exist fails."""
        with pytest.raises(ValueError):
            update_assignment(sample, 1, 3, days_per_week=1)

    def test_remove_assignment(self, sample):
        """Removing keeps the other assignments."""
        updated = remove_assignment(sample, 1, 1)
        assert [a.person_id for a in updated.get_project(1).assignments] == [2]
