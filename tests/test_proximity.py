import math

from scanner.extractors.candidates import Cand, Kind, PositionedText
from scanner.extractors.proximity import (
    calculate_score,
    collect_candidates,
    pair_candidates,
    pair_pages,
)


def test_score_is_euclidean_distance():
    assert calculate_score(3.0, 4.0) == 5.0


def test_score_infinite_when_axis_missing():
    assert calculate_score(None, 4.0) == math.inf
    assert calculate_score(3.0, None) == math.inf


def test_duplicates_keep_best_score():
    texts = [
        PositionedText("01/03/2024", top=12.0, left=0.0),
        PositionedText("01/03/2024", top=3.0, left=4.0),
    ]
    cands = collect_candidates(texts, Kind.DATE)
    assert len(cands) == 1
    assert cands[0].score == 5.0


def test_candidates_sorted_unpositioned_last():
    texts = [
        PositionedText("02/03/2024"),
        PositionedText("03/03/2024", top=30.0, left=40.0),
        PositionedText("01/03/2024", top=3.0, left=4.0),
        PositionedText("not a date", top=0.0, left=0.0),
    ]
    cands = collect_candidates(texts, Kind.DATE)
    assert [c.value for c in cands] == ["01/03/2024", "03/03/2024", "02/03/2024"]
    assert cands[-1].score == math.inf


def test_grouped_code_is_stripped():
    cands = collect_candidates([PositionedText("3011 2233 4455 6677 88", 1.0, 1.0)], Kind.PAGOPA)
    assert cands[0].value == "301122334455667788"
    assert cands[0].kind is Kind.PAGOPA


def _c(v, s, k):
    return Cand(value=v, score=s, kind=k)


def test_pairing_needs_both_lists():
    dates = [_c("01/03/2024", 1, Kind.DATE), _c("02/03/2024", 2, Kind.DATE)]
    assert pair_candidates(dates, []) == []
    assert pair_candidates([], [_c("301122334455667788", 1, Kind.PAGOPA)]) == []


def test_pairing_truncates_to_shorter_list():
    dates = [_c("01/03/2024", 1, Kind.DATE), _c("02/03/2024", 2, Kind.DATE)]
    codes = [_c("301122334455667788", 1, Kind.PAGOPA)]
    assert pair_candidates(dates, codes) == [("01/03/2024", "301122334455667788")]


HTML = """
<html><body>
<div id="page2">
  <p style="top:10pt;left:10pt">02/04/2024</p>
  <p style="top:11pt;left:10pt">3099 8877 6655 4433 22</p>
</div>
<div id="page1">
  <p style="top:50pt;left:5pt">15/03/2024</p>
  <p style="top:10pt;left:5pt">01/03/2024</p>
  <p style="top:12pt;left:4pt">3011 2233 4455 6677 88</p>
  <p style="top:80pt;left:4pt">1811 2233 4455 6677 88</p>
</div>
<div id="page3">
  <p style="top:10pt;left:10pt">09/09/2024</p>
  <p style="top:20pt;left:10pt">10/09/2024</p>
</div>
</body></html>
"""


def test_pair_pages_in_page_order_and_rank_order():
    assert pair_pages(HTML) == [
        ("01/03/2024", "301122334455667788"),
        ("15/03/2024", "181122334455667788"),
        ("02/04/2024", "309988776655443322"),
    ]


def test_pair_pages_ignores_non_page_containers():
    html = """
    <div id="summary">
      <p style="top:1;left:1">01/03/2024</p>
      <p style="top:1;left:1">301122334455667788</p>
    </div>
    """
    assert pair_pages(html) == []


def test_pair_pages_empty_markup():
    assert pair_pages("") == []
