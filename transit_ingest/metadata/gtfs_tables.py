"""
Expected layout of the GTFS tables stored in each feed namespace.

Types use the spelling reported by ``information_schema.columns.data_type``
so a plain string comparison against the live schema is enough.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .schema import ExpectedColumn, ExpectedTable

VARCHAR = "character varying"
INTEGER = "integer"
SMALLINT = "smallint"
DOUBLE = "double precision"


def _table(name: str, columns: Sequence[Tuple[str, str]]) -> ExpectedTable:
    return ExpectedTable(name=name, columns=tuple(ExpectedColumn(col, sql_type) for col, sql_type in columns))


GTFS_TABLES: List[ExpectedTable] = [
    _table(
        "agency",
        [
            ("agency_id", VARCHAR),
            ("agency_name", VARCHAR),
            ("agency_url", VARCHAR),
            ("agency_timezone", VARCHAR),
            ("agency_lang", VARCHAR),
            ("agency_phone", VARCHAR),
            ("agency_branding_url", VARCHAR),
            ("agency_fare_url", VARCHAR),
            ("agency_email", VARCHAR),
        ],
    ),
    _table(
        "calendar",
        [
            ("service_id", VARCHAR),
            ("monday", SMALLINT),
            ("tuesday", SMALLINT),
            ("wednesday", SMALLINT),
            ("thursday", SMALLINT),
            ("friday", SMALLINT),
            ("saturday", SMALLINT),
            ("sunday", SMALLINT),
            ("start_date", VARCHAR),
            ("end_date", VARCHAR),
            ("description", VARCHAR),
        ],
    ),
    _table(
        "calendar_dates",
        [
            ("service_id", VARCHAR),
            ("date", VARCHAR),
            ("exception_type", SMALLINT),
        ],
    ),
    _table(
        "fare_attributes",
        [
            ("fare_id", VARCHAR),
            ("price", DOUBLE),
            ("currency_type", VARCHAR),
            ("payment_method", SMALLINT),
            ("transfers", SMALLINT),
            ("agency_id", VARCHAR),
            ("transfer_duration", INTEGER),
        ],
    ),
    _table(
        "fare_rules",
        [
            ("fare_id", VARCHAR),
            ("route_id", VARCHAR),
            ("origin_id", VARCHAR),
            ("destination_id", VARCHAR),
            ("contains_id", VARCHAR),
        ],
    ),
    _table(
        "feed_info",
        [
            ("feed_id", VARCHAR),
            ("feed_publisher_name", VARCHAR),
            ("feed_publisher_url", VARCHAR),
            ("feed_lang", VARCHAR),
            ("feed_start_date", VARCHAR),
            ("feed_end_date", VARCHAR),
            ("feed_version", VARCHAR),
            ("default_route_color", VARCHAR),
            ("default_route_type", VARCHAR),
        ],
    ),
    _table(
        "frequencies",
        [
            ("trip_id", VARCHAR),
            ("start_time", INTEGER),
            ("end_time", INTEGER),
            ("headway_secs", INTEGER),
            ("exact_times", SMALLINT),
        ],
    ),
    _table(
        "routes",
        [
            ("route_id", VARCHAR),
            ("agency_id", VARCHAR),
            ("route_short_name", VARCHAR),
            ("route_long_name", VARCHAR),
            ("route_desc", VARCHAR),
            ("route_type", INTEGER),
            ("route_url", VARCHAR),
            ("route_branding_url", VARCHAR),
            ("route_color", VARCHAR),
            ("route_text_color", VARCHAR),
            ("publicly_visible", SMALLINT),
            ("wheelchair_accessible", SMALLINT),
            ("route_sort_order", INTEGER),
            ("status", SMALLINT),
            ("continuous_pickup", SMALLINT),
            ("continuous_drop_off", SMALLINT),
        ],
    ),
    _table(
        "shapes",
        [
            ("shape_id", VARCHAR),
            ("shape_pt_sequence", INTEGER),
            ("shape_pt_lat", DOUBLE),
            ("shape_pt_lon", DOUBLE),
            ("shape_dist_traveled", DOUBLE),
            ("point_type", INTEGER),
        ],
    ),
    _table(
        "stops",
        [
            ("stop_id", VARCHAR),
            ("stop_code", VARCHAR),
            ("stop_name", VARCHAR),
            ("stop_desc", VARCHAR),
            ("stop_lat", DOUBLE),
            ("stop_lon", DOUBLE),
            ("zone_id", VARCHAR),
            ("stop_url", VARCHAR),
            ("location_type", SMALLINT),
            ("parent_station", VARCHAR),
            ("stop_timezone", VARCHAR),
            ("wheelchair_boarding", SMALLINT),
            ("platform_code", VARCHAR),
        ],
    ),
    _table(
        "stop_times",
        [
            ("trip_id", VARCHAR),
            ("stop_sequence", INTEGER),
            ("stop_id", VARCHAR),
            ("arrival_time", INTEGER),
            ("departure_time", INTEGER),
            ("stop_headsign", VARCHAR),
            ("pickup_type", SMALLINT),
            ("drop_off_type", SMALLINT),
            ("continuous_pickup", SMALLINT),
            ("continuous_drop_off", SMALLINT),
            ("shape_dist_traveled", DOUBLE),
            ("timepoint", SMALLINT),
        ],
    ),
    _table(
        "transfers",
        [
            ("from_stop_id", VARCHAR),
            ("to_stop_id", VARCHAR),
            ("transfer_type", SMALLINT),
            ("min_transfer_time", INTEGER),
        ],
    ),
    _table(
        "trips",
        [
            ("trip_id", VARCHAR),
            ("route_id", VARCHAR),
            ("service_id", VARCHAR),
            ("trip_headsign", VARCHAR),
            ("trip_short_name", VARCHAR),
            ("block_id", VARCHAR),
            ("direction_id", SMALLINT),
            ("shape_id", VARCHAR),
            ("pattern_id", VARCHAR),
            ("bikes_allowed", SMALLINT),
            ("wheelchair_accessible", SMALLINT),
        ],
    ),
    _table(
        "patterns",
        [
            ("pattern_id", VARCHAR),
            ("route_id", VARCHAR),
            ("name", VARCHAR),
            ("direction_id", SMALLINT),
            ("use_frequency", SMALLINT),
            ("shape_id", VARCHAR),
        ],
    ),
    _table(
        "pattern_stops",
        [
            ("pattern_id", VARCHAR),
            ("stop_sequence", INTEGER),
            ("stop_id", VARCHAR),
            ("default_travel_time", INTEGER),
            ("default_dwell_time", INTEGER),
            ("drop_off_type", SMALLINT),
            ("pickup_type", SMALLINT),
            ("shape_dist_traveled", DOUBLE),
            ("timepoint", SMALLINT),
            ("continuous_pickup", SMALLINT),
            ("continuous_drop_off", SMALLINT),
        ],
    ),
]


__all__ = ["GTFS_TABLES"]
