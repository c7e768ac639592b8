import io

import pytest

from transit_ingest.gtfsplus.reference import GtfsReferenceDataset
from transit_ingest.gtfsplus.spec import TableSpec
from transit_ingest.gtfsplus.validation import TableReadError, ValidationIssue, validate_table

REFERENCE = GtfsReferenceDataset.from_ids(
    routes=["R1"],
    stops=["S1"],
    trips=["T1"],
    fares=["F1"],
    services=["WKDY"],
)


def _spec(*fields, table_id="attributions"):
    return TableSpec.from_config({"id": table_id, "name": f"{table_id}.txt", "fields": list(fields)})


def _validate(spec, text, **kwargs):
    return validate_table(spec, io.StringIO(text), REFERENCE, **kwargs)


ATTRIBUTIONS = _spec(
    {"name": "organization_name", "required": True, "inputType": "TEXT", "maxLength": 50},
    {"name": "is_producer", "inputType": "DROPDOWN", "options": [{"value": "0"}, {"value": "1"}]},
)


def test_invalid_dropdown_value_end_to_end():
    issues = _validate(ATTRIBUTIONS, "organization_name,is_producer\nAcme Transit,2\n")

    assert issues == [ValidationIssue("attributions", "is_producer", 0, "Value: 2 is not a valid option.")]


def test_required_empty_text_field_yields_single_issue():
    issues = _validate(ATTRIBUTIONS, "organization_name,is_producer\nAcme,1\n,0\n")

    assert issues == [ValidationIssue("attributions", "organization_name", 1, "Required field missing value")]


@pytest.mark.parametrize("value", ["bus", "BUS", "Bus", "bUs"])
def test_dropdown_match_is_case_insensitive(value):
    spec = _spec({"name": "mode", "inputType": "DROPDOWN", "options": [{"value": "Bus"}, {"value": "Rail"}]})

    assert _validate(spec, f"mode\n{value}\n") == []


def test_empty_optional_dropdown_is_accepted():
    spec = _spec({"name": "mode", "inputType": "DROPDOWN", "options": [{"value": "Bus"}]})

    assert _validate(spec, "mode,other\n,x\n") == []


def test_empty_required_dropdown_reports_missing_value_and_invalid_option():
    # Both issues fire for an empty required dropdown; the option check has no exemption here.
    spec = _spec({"name": "mode", "required": True, "inputType": "DROPDOWN", "options": [{"value": "Bus"}]})

    issues = _validate(spec, "mode,other\n,x\n")

    assert [issue.description for issue in issues] == [
        "Required field missing value",
        "Value:  is not a valid option.",
    ]
    assert {issue.row_index for issue in issues} == {0}


def test_text_max_length_boundary():
    spec = _spec({"name": "label", "inputType": "TEXT", "maxLength": 5})

    issues = _validate(spec, "label\nabcde\nabcdef\n")

    assert issues == [ValidationIssue("attributions", "label", 1, "Text value exceeds the max. length of 5")]


def test_text_without_max_length_accepts_anything():
    spec = _spec({"name": "label", "inputType": "TEXT"})

    assert _validate(spec, "label\n" + "x" * 500 + "\n") == []


@pytest.mark.parametrize(
    "input_type,entity,known",
    [
        ("GTFS_ROUTE", "Route", "R1"),
        ("GTFS_STOP", "Stop", "S1"),
        ("GTFS_TRIP", "Trip", "T1"),
        ("GTFS_FARE", "Fare", "F1"),
        ("GTFS_SERVICE", "Service", "WKDY"),
    ],
)
def test_reference_fields_check_the_gtfs_dataset(input_type, entity, known):
    spec = _spec({"name": "ref_id", "inputType": input_type})

    issues = _validate(spec, f"ref_id\n{known}\nMISSING\n")

    assert len(issues) == 1
    issue = issues[0]
    assert issue.row_index == 1
    assert issue.description == f"{entity} ID MISSING not found in GTFS"


def test_missing_required_column_is_a_header_issue_reported_first():
    spec = _spec(
        {"name": "route_id", "required": True, "inputType": "GTFS_ROUTE"},
        {"name": "stop_id", "required": True, "inputType": "GTFS_STOP"},
        {"name": "note", "inputType": "TEXT"},
    )

    issues = _validate(spec, "stop_id\nNOPE\n")

    assert issues == [
        ValidationIssue("attributions", "route_id", -1, "Required column missing."),
        ValidationIssue("attributions", "stop_id", 0, "Stop ID NOPE not found in GTFS"),
    ]


def test_unmapped_columns_and_short_rows_are_tolerated():
    spec = _spec(
        {"name": "organization_name", "required": True, "inputType": "TEXT"},
        {"name": "is_producer", "required": True, "inputType": "DROPDOWN", "options": [{"value": "1"}]},
    )

    issues = _validate(spec, "extra,organization_name,is_producer\nwhatever,Acme\nx\n")

    assert issues == []


def test_rows_keep_counting_past_issues():
    issues = _validate(ATTRIBUTIONS, "organization_name,is_producer\nA,9\nB,1\nC,8\n")

    assert [(issue.row_index, issue.field_name) for issue in issues] == [(0, "is_producer"), (2, "is_producer")]


def test_quoted_values_may_contain_the_delimiter():
    issues = _validate(ATTRIBUTIONS, 'organization_name,is_producer\n"Acme, Inc.",1\n')

    assert issues == []


def test_configured_delimiter_is_used_for_data_rows():
    spec = _spec(
        {"name": "a", "inputType": "TEXT", "maxLength": 3},
        {"name": "b", "inputType": "DROPDOWN", "options": [{"value": "y"}]},
    )

    issues = _validate(spec, "a,b\nabc|n\n", delimiter="|")

    assert issues == [ValidationIssue("attributions", "b", 0, "Value: n is not a valid option.")]


def test_unknown_input_type_only_checks_required():
    spec = _spec({"name": "agency_url", "required": True, "inputType": "URL"})

    issues = _validate(spec, "agency_url\nnot a url\n\n")

    assert issues == []
    issues = _validate(spec, "agency_url\n\"\"\n")
    assert [issue.description for issue in issues] == ["Required field missing value"]


def test_header_byte_order_mark_is_ignored():
    issues = _validate(ATTRIBUTIONS, "\ufefforganization_name,is_producer\r\nAcme,1\r\n")

    assert issues == []


def test_empty_stream_reports_all_required_columns():
    issues = _validate(ATTRIBUTIONS, "")

    assert issues == [ValidationIssue("attributions", "organization_name", -1, "Required column missing.")]


def test_issues_are_appended_to_supplied_list():
    issues = [ValidationIssue("other", "x", 3, "earlier")]

    returned = _validate(ATTRIBUTIONS, "organization_name,is_producer\nA,2\n", issues=issues)

    assert returned is issues
    assert len(issues) == 2


class _FailingStream:
    def __init__(self, header, rows):
        self._header = header
        self._rows = list(rows)

    def readline(self):
        return self._header

    def __iter__(self):
        return self

    def __next__(self):
        if self._rows:
            return self._rows.pop(0)
        raise OSError("connection reset")


def test_read_failure_keeps_issues_found_so_far():
    stream = _FailingStream("organization_name,is_producer\n", ["Acme,2\n"])

    with pytest.raises(TableReadError) as exc:
        validate_table(ATTRIBUTIONS, stream, REFERENCE)

    assert exc.value.table_id == "attributions"
    assert [issue.description for issue in exc.value.issues] == ["Value: 2 is not a valid option."]
    assert isinstance(exc.value, OSError)
