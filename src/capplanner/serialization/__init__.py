"""Schedule document serialization (JSON files, storage rows, share links)."""

from capplanner.serialization.json_codec import (
    ScheduleFormatError,
    dumps_schedule,
    load_schedule,
    loads_schedule,
    save_schedule,
    schedule_from_dict,
    schedule_to_dict,
    schedule_to_storage_row,
)
from capplanner.serialization.share_link import (
    build_share_url,
    decode_share_token,
    encode_share_token,
    migrate_assignment_ranges,
)

__all__ = [
    "ScheduleFormatError",
    "dumps_schedule",
    "load_schedule",
    "loads_schedule",
    "save_schedule",
    "schedule_from_dict",
    "schedule_to_dict",
    "schedule_to_storage_row",
    "build_share_url",
    "decode_share_token",
    "encode_share_token",
    "migrate_assignment_ranges",
]
