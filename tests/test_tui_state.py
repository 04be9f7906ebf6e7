from dataclasses import replace

import pytest

from catalog.services.models import MovieData
from catalog.tui import state as tui
from catalog.tui.state import AppState, KeyPress


def press(key, character=None):
    return KeyPress(key, character)


def type_text(current: AppState, text: str) -> AppState:
    for char in text:
        current, _ = tui.reduce(current, KeyPress(char, char))
    return current


def send(current: AppState, *keys: str) -> AppState:
    for key in keys:
        current, _ = tui.reduce(current, press(key))
    return current


@pytest.fixture
def movies():
    return [
        MovieData(id=1, title="Heat", year=1995, rating=8, genres=["Crime"], directors=["Mann"]),
        MovieData(id=2, title="Alien", year=1979, genres=["Horror", "Sci-Fi"], directors=["Scott"]),
        MovieData(id=3, title="Up", year=2009, rating=9, genres=["Family"], directors=["Docter"]),
    ]


@pytest.fixture
def loaded(movies):
    current, effects = tui.initial_state()
    assert effects == [tui.LoadMovies()]
    current, _ = tui.movies_loaded(current, movies)
    return current


@pytest.fixture
def add_page(loaded):
    current = send(loaded, "ctrl+j", "enter")
    assert current.page == tui.ADD
    return current


def test_ctrl_j_and_ctrl_k_move_between_table_and_buttons(loaded):
    current = send(loaded, "ctrl+j")
    assert current.main_focus == tui.ADD_BUTTON
    current = send(current, "l")
    assert current.main_focus == tui.FILTER_BUTTON
    current = send(current, "left")
    assert current.main_focus == tui.ADD_BUTTON
    current = send(current, "right", "h")
    assert current.main_focus == tui.ADD_BUTTON
    current = send(current, "ctrl+k")
    assert current.main_focus == tui.TABLE


def test_h_and_l_do_nothing_on_the_table(loaded):
    assert send(loaded, "h", "l") == loaded


def test_table_selection_is_clamped(loaded):
    current = send(loaded, "down", "down", "down", "down")
    assert current.selected == 2
    current = send(current, "up", "k", "k", "k")
    assert current.selected == 0


def test_year_rejects_non_digit_keystrokes(add_page):
    current = send(add_page, "down")
    current = type_text(current, "20a")
    assert current.add_fields[1] == "20"
    current = type_text(current, "21")
    assert current.add_fields[1] == "2021"


def test_rating_fields_reject_out_of_range_input(add_page):
    current = send(add_page, "down", "down")
    current = type_text(current, "11")
    assert current.add_fields[2] == "1"
    current = send(current, "backspace")
    current = type_text(current, "0")
    assert current.add_fields[2] == ""
    current = type_text(current, "10")
    assert current.add_fields[2] == "10"

    current = send(current, "down")
    current = type_text(current, "5.55")
    assert current.add_fields[3] == "5.5"


def test_add_button_enabled_only_with_title_and_year(add_page):
    assert not add_page.add_enabled
    current = send(add_page, "down")
    current = type_text(current, "2020")
    assert not current.add_enabled
    current = send(current, "up")
    current = type_text(current, "X")
    assert current.add_enabled
    current = send(current, "backspace")
    assert not current.add_enabled


def test_focus_wraps_when_add_is_disabled(add_page):
    current = replace(add_page, add_focus=5)
    assert send(current, "ctrl+j").add_focus == 0
    assert send(current, "down").add_focus == 0
    current = replace(add_page, add_focus=0)
    assert send(current, "ctrl+k").add_focus == 5
    assert send(current, "up").add_focus == 5


def test_focus_reaches_add_button_when_enabled(add_page):
    filled = replace(add_page, add_fields=("X", "2020", "", "", "", ""))
    assert send(replace(filled, add_focus=5), "ctrl+j").add_focus == tui.SUBMIT_INDEX
    assert send(replace(filled, add_focus=0), "ctrl+k").add_focus == tui.SUBMIT_INDEX
    assert send(replace(filled, add_focus=tui.SUBMIT_INDEX), "ctrl+j").add_focus == 0
    assert send(replace(filled, add_focus=tui.SUBMIT_INDEX), "ctrl+k").add_focus == 5


def test_focus_advances_through_fields(add_page):
    current = add_page
    for expected in (1, 2, 3, 4, 5):
        current = send(current, "ctrl+j")
        assert current.add_focus == expected
    for expected in (4, 3, 2, 1, 0):
        current = send(current, "ctrl+k")
        assert current.add_focus == expected


def test_escape_clears_form_and_returns_to_table(add_page):
    current = type_text(add_page, "Title")
    current = send(current, "escape")
    assert current.page == tui.MAIN
    assert current.main_focus == tui.TABLE
    assert current.add_fields == ("",) * 6
    assert not current.add_enabled


def test_submit_emits_save_effect(add_page):
    current = type_text(add_page, "Dune")
    current = send(current, "down")
    current = type_text(current, "2021")
    current = send(current, "down", "down", "down")
    current = type_text(current, "Sci-Fi, Drama")
    current = send(current, "down")
    current = type_text(current, "Villeneuve")
    current = send(current, "down")
    assert current.add_focus == tui.SUBMIT_INDEX

    current, effects = tui.reduce(current, press("enter"))

    assert effects == [
        tui.SaveMovie(
            movie=MovieData(title="Dune", year=2021, genres=["Sci-Fi", "Drama"], directors=["Villeneuve"]),
            movie_id=None,
        )
    ]
    assert current.busy

    current, effects = tui.movie_saved(current)
    assert effects == [tui.LoadMovies()]
    assert current.page == tui.MAIN
    assert current.add_fields == ("",) * 6


def test_failed_save_keeps_the_form(add_page):
    current = type_text(add_page, "Dune")
    current, _ = tui.request_failed(current, "Cannot communicate with server.")
    assert current.page == tui.WARNING
    assert current.warning.message == "Cannot communicate with server."
    current = send(current, "escape")
    assert current.page == tui.ADD
    assert current.add_fields[0] == "Dune"


def test_edit_prefills_form_and_targets_update(loaded):
    current = send(loaded, "down", "e")
    assert current.page == tui.ADD
    assert current.edit_id == 2
    assert current.add_fields == ("Alien", "1979", "", "", "Horror, Sci-Fi", "Scott")

    current = send(current, "ctrl+k")
    assert current.add_focus == tui.SUBMIT_INDEX
    _, effects = tui.reduce(current, press("enter"))
    assert effects[0].movie_id == 2
    assert effects[0].movie.genres == ["Horror", "Sci-Fi"]


def test_delete_requires_confirmation(loaded):
    current = send(loaded, "d")
    assert current.page == tui.WARNING
    assert "Heat" in current.warning.message

    declined, effects = tui.reduce(send(current, "l"), press("enter"))
    assert effects == []
    assert declined.page == tui.MAIN

    confirmed, effects = tui.reduce(send(current, "right", "h"), press("enter"))
    assert effects == [tui.DeleteMovie(movie_id=1)]
    assert confirmed.page == tui.MAIN


def test_error_warning_dismisses_without_effects(loaded):
    current, _ = tui.request_failed(loaded, "boom")
    current, effects = tui.reduce(current, press("enter"))
    assert effects == []
    assert current.page == tui.MAIN
    assert current.movies == loaded.movies


def test_filter_applies_and_clears(loaded):
    current = send(loaded, "ctrl+j", "l", "enter")
    assert current.page == tui.FILTER
    current = send(current, "down", "down", "down")
    current = type_text(current, "Crime")
    current = send(current, "down", "down", "down")
    assert current.filter_focus == tui.APPLY_INDEX
    current = send(current, "enter")

    assert current.page == tui.MAIN
    assert [movie.title for movie in current.visible_movies] == ["Heat"]

    current = send(current, "enter", "up")
    assert current.filter_focus == tui.CLEAR_INDEX
    current = send(current, "enter")
    assert len(current.visible_movies) == 3
    assert current.filter_fields == ("",) * 6


def test_filter_escape_keeps_criteria(loaded):
    current = send(loaded, "ctrl+j", "l", "enter")
    current = type_text(current, "zzz")
    current = send(current, "escape")
    assert current.page == tui.MAIN
    assert current.filter_fields[0] == "zzz"
    assert len(current.visible_movies) == 3


def test_refresh_key_requests_reload(loaded):
    current, effects = tui.reduce(loaded, press("r"))
    assert effects == [tui.LoadMovies()]
    assert current.busy


def test_reload_clamps_selection(loaded, movies):
    current = send(loaded, "down", "down")
    current, _ = tui.movies_loaded(current, movies[:1])
    assert current.selected == 0
    assert current.selected_movie == movies[0]


def test_pending_save_ignores_further_input(add_page):
    filled = replace(add_page, add_fields=("X", "2020", "", "", "", ""), add_focus=tui.SUBMIT_INDEX)
    current, first = tui.reduce(filled, press("enter"))
    assert first == [tui.SaveMovie(movie=MovieData(title="X", year=2020), movie_id=None)]
    assert current.saving

    current, second = tui.reduce(current, press("enter"))
    assert second == []
    assert send(current, "escape", "ctrl+j") == current

    current, effects = tui.movie_saved(current)
    assert effects == [tui.LoadMovies()]
    assert not current.saving
    assert current.page == tui.MAIN


def test_failed_save_unlocks_the_form(add_page):
    filled = replace(add_page, add_fields=("X", "2020", "", "", "", ""), add_focus=tui.SUBMIT_INDEX)
    current, _ = tui.reduce(filled, press("enter"))
    current, _ = tui.request_failed(current, "Cannot communicate with server.")
    assert not current.saving
    current = send(current, "escape")
    assert current.page == tui.ADD
    _, effects = tui.reduce(current, press("enter"))
    assert len(effects) == 1
