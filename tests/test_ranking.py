from __future__ import annotations

from leaderboard_core import TimeEntry, build_roster, compute_diagnostics, reconcile

HEADERS = ["EPC", "BIB", "Name", "Gender", "Category"]
CATEGORIES = ["10K", "5K"]


def _roster(*sheets):
    return build_roster([(key, [HEADERS, *rows]) for key, rows in sheets])


def _times(**millis):
    return {k: TimeEntry(millis=v, raw="" if v is None else str(v)) for k, v in millis.items()}


def _assert_dense_ranks(rows):
    assert [row.rank for row in rows] == list(range(1, len(rows) + 1))
    totals = [row.total_millis for row in rows]
    assert totals == sorted(totals)


def test_single_participant_end_to_end():
    roster = _roster(("10K", [["E1", "101", "A", "", "10K"]]))
    out = reconcile(roster, _times(E1=1000), _times(E1=5723456), ["10K"])
    assert len(out.overall) == 1
    row = out.overall[0]
    assert row.rank == 1
    assert row.total_millis == 5722456
    assert row.total_display == "01:35:22"
    assert row.identifier == "E1"
    assert row.bib == "101"
    assert out.by_category["10K"][0].rank == 1


def test_overall_and_category_ranks():
    roster = _roster(
        ("10K", [["A", "1", "Ana", "F", ""], ["B", "2", "Bob", "M", ""], ["C", "3", "Cara", "F", ""]]),
        ("5K", [["D", "4", "Dan", "M", ""], ["E", "5", "Ema", "F", ""]]),
    )
    start = _times(A=0, B=0, C=0, D=0, E=0)
    finish = _times(A=300, B=100, C=500, D=200, E=400)
    out = reconcile(roster, start, finish, CATEGORIES)

    assert [row.identifier for row in out.overall] == ["B", "D", "A", "E", "C"]
    _assert_dense_ranks(out.overall)
    assert [row.identifier for row in out.by_category["10K"]] == ["B", "A", "C"]
    assert [row.identifier for row in out.by_category["5K"]] == ["D", "E"]
    for bucket in out.by_category.values():
        _assert_dense_ranks(bucket)

    # Buckets hold re-ranked copies; overall ranks are untouched.
    overall_by_id = {row.identifier: row for row in out.overall}
    assert overall_by_id["D"].rank == 2
    assert out.by_category["5K"][0].rank == 1

    bucket_ids = sorted(row.identifier for bucket in out.by_category.values() for row in bucket)
    assert bucket_ids == sorted(overall_by_id)


def test_equal_totals_get_distinct_ranks_in_roster_order():
    roster = _roster(("10K", [["A", "1", "Ana", "", ""], ["B", "2", "Bob", "", ""]]))
    out = reconcile(roster, _times(A=0, B=0), _times(A=100, B=100), ["10K"])
    assert [(row.identifier, row.rank) for row in out.overall] == [("A", 1), ("B", 2)]


def test_declared_category_without_rows_is_empty_bucket():
    roster = _roster(("10K", [["A", "1", "Ana", "", ""]]))
    out = reconcile(roster, _times(A=0), _times(A=100), ["10K", "5K"])
    assert list(out.by_category) == ["10K", "5K"]
    assert out.by_category["5K"] == ()


def test_unmatched_and_unparsed_entries_are_excluded():
    roster = _roster(
        ("10K", [["A", "1", "", "", ""], ["B", "2", "", "", ""], ["C", "3", "", "", ""], ["D", "4", "", "", ""]])
    )
    start = _times(A=0, B=None, D=0, X=0)
    finish = _times(A=100, B=200, C=300, X=50, Y=60)
    out = reconcile(roster, start, finish, ["10K"])

    assert [row.identifier for row in out.overall] == ["A"]
    diag = out.diagnostics
    assert diag.missing_in_roster == ("X", "Y")
    assert diag.missing_start == ("C", "Y")
    assert diag.missing_finish == ("D",)
    assert diag.invalid_totals == ()
    assert (diag.counts.roster, diag.counts.start, diag.counts.finish) == (4, 4, 5)
    assert diag.counts.displayed_overall == 1


def test_zero_millis_is_a_usable_time():
    roster = _roster(("10K", [["A", "1", "", "", ""]]))
    out = reconcile(roster, _times(A=0), _times(A=0), ["10K"])
    assert out.overall[0].total_millis == 0
    assert out.overall[0].total_display == "00:00:00"


def test_negative_total_is_reported_as_invalid_only():
    roster = _roster(("10K", [["A", "1", "", "", ""], ["B", "2", "", "", ""]]))
    out = reconcile(roster, _times(A=10, B=0), _times(A=5, B=100), ["10K"])
    assert [row.identifier for row in out.overall] == ["B"]
    diag = out.diagnostics
    assert diag.invalid_totals == ("A",)
    assert "A" not in diag.missing_start
    assert "A" not in diag.missing_finish


def test_row_carries_category_label_and_finish_time_of_day():
    roster = _roster(("10K", [["A", "1", "Ana", "F", "10K Umum Putri"]]))
    start = {"A": TimeEntry(millis=0, raw="07:00:00")}
    finish = {"A": TimeEntry(millis=3600500, raw="2024-01-01 08:00:00.5")}
    row = reconcile(roster, start, finish, ["10K"]).overall[0]
    assert row.category == "10K Umum Putri"
    assert row.source_category_key == "10K"
    assert row.finish_time_of_day == "08:00:00.500"
    assert row.total_display == "01:00:00"


def test_duplicate_identifier_ranked_once_under_first_category():
    roster = _roster(
        ("10K", [["A", "1", "Ana", "", ""]]),
        ("5K", [["A", "9", "Ana", "", ""]]),
    )
    out = reconcile(roster, _times(A=0), _times(A=100), CATEGORIES)
    assert len(out.overall) == 1
    assert [row.bib for row in out.by_category["10K"]] == ["1"]
    assert out.by_category["5K"] == ()


def test_compute_diagnostics_keeps_source_order():
    diag = compute_diagnostics(["c", "a", "b"], ["a"], ["z", "b", "y", "a"], ["q"])
    assert diag.missing_in_roster == ("z", "y")
    assert diag.missing_start == ("z", "b", "y")
    assert diag.missing_finish == ("c",)
    assert diag.invalid_totals == ("q",)
