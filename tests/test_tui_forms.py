from datetime import datetime

import pytest

from catalog.services.models import MovieData
from catalog.tui import forms, table


@pytest.mark.parametrize(
    ("text", "accepted"),
    [("1", True), ("10", True), ("0", False), ("11", False), ("5a", False), ("", False)],
)
def test_accept_rating(text, accepted):
    assert forms.accept_rating(text) is accepted


@pytest.mark.parametrize(
    ("text", "accepted"),
    [
        ("0.0", False),
        ("10", True),
        ("10.", True),
        ("10.1", False),
        ("5.55", False),
        ("7.5", True),
        ("nan", False),
        ("1e1", False),
        (".", False),
        ("+5", True),
        ("+.5", True),
        ("+", False),
        ("-5", False),
    ],
)
def test_accept_imdb_rating(text, accepted):
    assert forms.accept_imdb_rating(text) is accepted


@pytest.mark.parametrize(
    ("text", "accepted"),
    [("2020", True), ("-5", True), ("20a", False), ("2_0", False), ("", False)],
)
def test_accept_year(text, accepted):
    assert forms.accept_year(text) is accepted


def test_split_names_trims_and_drops_empty_pieces():
    assert forms.split_names(" Drama,Sci-Fi ,, Action ") == ["Drama", "Sci-Fi", "Action"]
    assert forms.split_names("") == []


def test_fields_to_movie_leaves_blank_ratings_absent():
    movie = forms.fields_to_movie(("X", "2020", "", "", "A, B", ""))
    assert movie == MovieData(title="X", year=2020, genres=["A", "B"], directors=[])
    assert movie.rating is None
    assert movie.imdb_rating is None


def test_fields_to_movie_requires_title_and_year():
    with pytest.raises(ValueError):
        forms.fields_to_movie(("", "2020", "", "", "", ""))


def test_movie_to_fields_round_trip():
    movie = MovieData(title="Heat", year=1995, rating=8, imdb_rating=8.3, genres=["Crime"], directors=["Mann"])
    fields = forms.movie_to_fields(movie)
    assert fields == ("Heat", "1995", "8", "8.3", "Crime", "Mann")
    assert forms.fields_to_movie(fields) == movie


def test_movie_filter_matches():
    heat = MovieData(title="Heat", year=1995, rating=8, genres=["Crime"], directors=["Mann"])
    criteria = forms.MovieFilter.from_fields(("he", "1990", "2000", "Crime", "", "7"))
    assert criteria.matches(heat)
    assert not forms.MovieFilter(year_to=1990).matches(heat)
    assert not forms.MovieFilter(director="mann").matches(heat)
    assert not forms.MovieFilter(min_rating=9).matches(heat)
    assert forms.MovieFilter().is_empty


def test_table_header_row_is_centered_yellow_and_not_selectable():
    rows = table.build_rows([])
    assert [cell.text for cell in rows[0]] == list(table.HEADERS)
    assert all(cell.color == "yellow" and cell.align == "center" for cell in rows[0])
    assert all(not cell.selectable for cell in rows[0])
    assert rows[0][0].background == (40, 40, 40)


def test_table_rows_alternate_and_align_year_right():
    movies = [
        MovieData(title="A", year=2001, date_added=1700000000),
        MovieData(title="B", year=2002, date_added=1700000000, rating=7, imdb_rating=8.0),
    ]
    rows = table.build_rows(movies)

    assert rows[1][0].background == (60, 60, 60)
    assert rows[2][0].background == (80, 80, 80)
    assert [cell.align for cell in rows[1]] == ["left", "right", "left", "left", "left", "left", "left"]
    assert rows[1][3].text == ""
    assert rows[1][4].text == ""
    assert rows[2][3].text == "7"
    assert rows[2][4].text == "8"
    assert rows[1][0].text == datetime.fromtimestamp(1700000000).date().isoformat()


def test_table_joins_names():
    movie = MovieData(title="A", year=1, genres=["Drama", "War"], directors=["Kubrick"])
    assert table.cell_text(movie, 5) == "Kubrick"
    assert table.cell_text(movie, 6) == "Drama, War"
