import pytest

from jalisco_turismo.csv_parser import (
    normalize_record,
    parse_csv,
    parse_csv_report,
    read_csv_file,
    split_fields,
    split_rows,
)
from jalisco_turismo.records import InvalidInput, Record, RowRejected

HEADER = "id,nombre,lat,lng,consejos,distancia,ruta,link"


def csv_of(*rows):
    return "\n".join((HEADER,) + rows)


def test_split_rows_empty_input():
    assert split_rows("") == []


def test_split_rows_drops_blank_and_crlf_rows():
    assert split_rows("a,b\r\n\r\n   \nc,d\n") == ["a,b", "c,d"]


def test_split_rows_keeps_header_and_order():
    assert split_rows("h\n2\n1") == ["h", "2", "1"]


def test_split_fields_plain():
    assert split_fields("a,b,c") == ["a", "b", "c"]


def test_split_fields_quoted_delimiter():
    row = '1,"Tequila, Jalisco",20.88,-103.84,note,2h,route,link'
    fields = split_fields(row)
    assert fields[1] == "Tequila, Jalisco"
    assert len(fields) == 8


def test_split_fields_escaped_quotes():
    assert split_fields('"She said ""hi"""') == ['She said "hi"']


def test_split_fields_keeps_text_after_closing_quote():
    assert split_fields('"She said ""hi""" ,x') == ['She said "hi" ', "x"]


def test_split_fields_trailing_delimiter_gives_empty_field():
    assert split_fields("a,b,") == ["a", "b", ""]


def test_split_fields_empty_row():
    assert split_fields("") == [""]


def test_split_fields_tolerates_unbalanced_quote():
    assert split_fields('a,"b,c') == ["a", "b,c"]


def test_split_fields_other_delimiter():
    assert split_fields('a;"b;c";d', ";") == ["a", "b;c", "d"]


def test_split_fields_delimiter_must_be_one_character():
    with pytest.raises(ValueError):
        split_fields("a,b", ",,")


def test_normalize_record_positional_mapping():
    fields = [" 7", " Tapalpa ", "19.95", " -103.77 ", " Zona segura ", " 2h ", " http://r ", " http://i "]
    assert normalize_record(fields) == Record(
        id=" 7",
        name="Tapalpa",
        latitude=19.95,
        longitude=-103.77,
        advisory_text="Zona segura",
        travel_summary="2h",
        route_url="http://r",
        info_url="http://i",
    )


def test_normalize_record_empty_optional_fields():
    record = normalize_record(["", "Tapalpa", "19.95", "-103.77", "", "", "", ""])
    assert record.id == ""
    assert record.advisory_text == record.travel_summary == ""
    assert record.route_url == record.info_url == ""


def test_normalize_record_ignores_extra_columns():
    record = normalize_record(["1", "Tapalpa", "19.95", "-103.77", "a", "b", "c", "d", "extra", "more"])
    assert record.info_url == "d"


@pytest.mark.parametrize("value, expected", [
    ("19.95", 19.95),
    ("+19.95", 19.95),
    ("-.5", -0.5),
    ("20.", 20.0),
    ("1e1", 10.0),
])
def test_normalize_record_accepts_plain_decimals(value, expected):
    record = normalize_record(["1", "Tapalpa", value, "-103.77", "a", "b", "c", "d"])
    assert record.latitude == pytest.approx(expected)


@pytest.mark.parametrize("fields", [
    ["1", "Tapalpa", "19.95", "-103.77", "a", "b", "c"],
    ["1", "   ", "19.95", "-103.77", "a", "b", "c", "d"],
    ["1", "Tapalpa", "norte", "-103.77", "a", "b", "c", "d"],
    ["1", "Tapalpa", "19.95", "", "a", "b", "c", "d"],
    ["1", "Tapalpa", "nan", "-103.77", "a", "b", "c", "d"],
    ["1", "Tapalpa", "19.95", "inf", "a", "b", "c", "d"],
    ["1", "Tapalpa", "19.9abc", "-103.77", "a", "b", "c", "d"],
    ["1", "Tapalpa", "1_9.95", "-103.77", "a", "b", "c", "d"],
    ["1", "Tapalpa", "１９.95", "-103.77", "a", "b", "c", "d"],
    ["1", "Tapalpa", "19.95", "-١٠٣", "a", "b", "c", "d"],
])
def test_normalize_record_rejections(fields):
    with pytest.raises(RowRejected):
        normalize_record(fields)


def test_advisory_truncated_to_150():
    record = normalize_record(["1", "Tapalpa", "1", "2", "x" * 200, "", "", ""])
    assert record.advisory_text == "x" * 150


def test_short_advisory_unchanged():
    text = "y" * 150
    record = normalize_record(["1", "Tapalpa", "1", "2", text, "", "", ""])
    assert record.advisory_text == text


def test_parse_csv_scenario(scenario_csv):
    records = parse_csv(scenario_csv)
    assert [r.name for r in records] == ["Tapalpa", "Mazamitla"]
    assert records[1].advisory_text == "Cuidado, lleve agua"
    assert records[1].travel_summary == "1.5h"
    assert records[1].latitude == pytest.approx(19.91)


def test_parse_csv_always_excludes_header():
    text = "\n".join([
        "0,Guadalajara,20.67,-103.35,a,b,c,d",
        "1,Tapalpa,19.95,-103.77,a,b,c,d",
    ])
    assert [r.name for r in parse_csv(text)] == ["Tapalpa"]


def test_parse_csv_header_is_first_non_blank_row():
    text = "\n\n" + csv_of("1,Tapalpa,19.95,-103.77,a,b,c,d")
    assert [r.name for r in parse_csv(text)] == ["Tapalpa"]


def test_parse_csv_short_row_does_not_affect_following_rows():
    text = csv_of(
        "1,Tequila,20.88,-103.84",
        "2,Tapalpa,19.95,-103.77,a,b,c,d",
    )
    assert [r.name for r in parse_csv(text)] == ["Tapalpa"]


def test_parse_csv_quoted_name_with_comma():
    text = csv_of('1,"Tequila, Jalisco",20.88,-103.84,note,2h,route,link')
    assert parse_csv(text)[0].name == "Tequila, Jalisco"


def test_parse_csv_escaped_quote_in_advisory():
    text = csv_of('1,Tapalpa,19.95,-103.77,"She said ""hi""" ,2h,r,l')
    assert parse_csv(text)[0].advisory_text == 'She said "hi"'


def test_parse_csv_crlf_export():
    text = csv_of("1,Tapalpa,19.95,-103.77,a,b,c,d").replace("\n", "\r\n") + "\r\n"
    assert parse_csv(text)[0].info_url == "d"


def test_parse_csv_keeps_source_order_and_duplicates():
    text = csv_of(
        "2,Zapotlanejo,20.62,-103.07,a,b,c,d",
        "1,Ajijic,20.29,-103.26,a,b,c,d",
        "1,Ajijic,20.29,-103.26,a,b,c,d",
    )
    assert [r.name for r in parse_csv(text)] == ["Zapotlanejo", "Ajijic", "Ajijic"]


def test_parse_csv_only_header_gives_empty_list():
    assert parse_csv(HEADER) == []
    assert parse_csv("") == []


def test_parse_csv_idempotent(scenario_csv):
    assert parse_csv(scenario_csv) == parse_csv(scenario_csv)


@pytest.mark.parametrize("value", [None, b"id,nombre", 42, ["a,b"]])
def test_parse_csv_invalid_input(value):
    with pytest.raises(InvalidInput):
        parse_csv(value)


def test_invalid_input_is_a_type_error():
    with pytest.raises(TypeError):
        parse_csv(None)


def test_parse_csv_report_collects_skip_reasons(scenario_csv):
    report = parse_csv_report(scenario_csv)
    assert [r.name for r in report.records] == ["Tapalpa", "Mazamitla"]
    assert len(report.skipped) == 1
    skipped = report.skipped[0]
    assert skipped.row_number == 2
    assert skipped.reason == "empty name"
    assert skipped.fields[0] == "2"


def test_parse_csv_report_matches_lenient_parse(scenario_csv):
    assert list(parse_csv_report(scenario_csv).records) == parse_csv(scenario_csv)


def test_parse_csv_report_short_row_reason():
    report = parse_csv_report(csv_of("1,Tapalpa"))
    assert report.records == ()
    assert "at least 8 fields" in report.skipped[0].reason


def test_parse_csv_report_non_numeric_coordinate_reason():
    report = parse_csv_report(csv_of("1,Tapalpa,1_9.95,-103.77,a,b,c,d"))
    assert report.records == ()
    assert report.skipped[0].reason == "non-numeric coordinate '1_9.95'"


def test_read_csv_file_utf8_with_bom(tmp_path, scenario_csv):
    path = tmp_path / "pueblos.csv"
    path.write_text(scenario_csv, encoding="utf-8-sig")
    assert len(read_csv_file(str(path))) == 2


def test_read_csv_file_windows_1252(tmp_path):
    path = tmp_path / "pueblos.csv"
    path.write_bytes(csv_of("1,San Sebastián,20.76,-104.85,a,b,c,d").encode("windows-1252"))
    assert read_csv_file(str(path))[0].name == "San Sebastián"


def test_read_csv_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_csv_file(str(tmp_path / "nope.csv"))
