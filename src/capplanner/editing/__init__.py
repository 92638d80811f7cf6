"""Editing operations that produce updated schedules."""

from capplanner.editing.operations import (
    IneligibleFirstResponderError,
    add_assignment,
    add_person,
    add_project,
    delete_person,
    delete_project,
    next_person_id,
    next_project_id,
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

__all__ = [
    "IneligibleFirstResponderError",
    "add_assignment",
    "add_person",
    "add_project",
    "delete_person",
    "delete_project",
    "next_person_id",
    "next_project_id",
    "remove_assignment",
    "set_first_responder",
    "set_fr_capacity_days",
    "set_holiday",
    "set_start_date",
    "update_assignment",
    "update_person",
    "update_project",
    "update_week",
]
