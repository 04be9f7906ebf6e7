"""Pure state machine behind the terminal client.

The Textual shell owns no state of its own: it forwards every key press to
``reduce`` and renders whatever ``AppState`` comes back. Network work is
requested through the returned effects; its outcome is fed back through
``movies_loaded``, ``movie_saved``, ``movie_deleted`` and ``request_failed``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Union

from catalog.services.models import MovieData
from catalog.tui import forms

MAIN = "main"
ADD = "add"
FILTER = "filter"
WARNING = "warning"

# Focus targets on the main page.
TABLE = "table"
ADD_BUTTON = "add_button"
FILTER_BUTTON = "filter_button"

# Focus targets on the warning page.
YES = "yes"
NO = "no"

ADD_FIELD_COUNT = len(forms.ADD_FIELD_LABELS)
SUBMIT_INDEX = ADD_FIELD_COUNT
FILTER_FIELD_COUNT = len(forms.FILTER_FIELD_LABELS)
APPLY_INDEX = FILTER_FIELD_COUNT
CLEAR_INDEX = FILTER_FIELD_COUNT + 1

DOWN_KEYS = {"ctrl+j", "down"}
UP_KEYS = {"ctrl+k", "up"}
LEFT_KEYS = {"left", "h"}
RIGHT_KEYS = {"right", "l"}


@dataclass(frozen=True, slots=True)
class KeyPress:
    key: str
    character: str | None = None


@dataclass(frozen=True, slots=True)
class LoadMovies:
    pass


@dataclass(frozen=True, slots=True)
class SaveMovie:
    movie: MovieData
    movie_id: int | None = None


@dataclass(frozen=True, slots=True)
class DeleteMovie:
    movie_id: int


Effect = Union[LoadMovies, SaveMovie, DeleteMovie]


@dataclass(frozen=True, slots=True)
class Notice:
    message: str
    delete_id: int | None = None


def _blank(count: int) -> tuple[str, ...]:
    return ("",) * count


@dataclass(frozen=True, slots=True)
class AppState:
    pages: tuple[str, ...] = (MAIN,)
    main_focus: str = TABLE
    movies: tuple[MovieData, ...] = ()
    selected: int = 0
    add_fields: tuple[str, ...] = field(default_factory=lambda: _blank(ADD_FIELD_COUNT))
    add_focus: int = 0
    edit_id: int | None = None
    filter_fields: tuple[str, ...] = field(default_factory=lambda: _blank(FILTER_FIELD_COUNT))
    filter_focus: int = 0
    criteria: forms.MovieFilter = field(default_factory=forms.MovieFilter)
    warning: Notice | None = None
    warning_focus: str = YES
    busy: bool = False
    saving: bool = False

    @property
    def page(self) -> str:
        return self.pages[-1]

    @property
    def add_enabled(self) -> bool:
        return forms.can_submit(self.add_fields)

    @property
    def visible_movies(self) -> tuple[MovieData, ...]:
        if self.criteria.is_empty:
            return self.movies
        return tuple(movie for movie in self.movies if self.criteria.matches(movie))

    @property
    def selected_movie(self) -> MovieData | None:
        visible = self.visible_movies
        if 0 <= self.selected < len(visible):
            return visible[self.selected]
        return None


Result = tuple[AppState, list[Effect]]


def initial_state() -> Result:
    state = AppState(busy=True)
    return state, [LoadMovies()]


def reduce(state: AppState, press: KeyPress) -> Result:
    """Apply one key press to the page currently on top of the stack."""
    handler = _PAGE_HANDLERS[state.page]
    return handler(state, press)


# Results of background requests.


def movies_loaded(state: AppState, movies: list[MovieData]) -> Result:
    state = replace(state, movies=tuple(movies), busy=False)
    return _clamp_selection(state), []


def movie_saved(state: AppState) -> Result:
    state = _close_add_page(replace(state, busy=True, saving=False))
    return state, [LoadMovies()]


def movie_deleted(state: AppState) -> Result:
    return replace(state, busy=True), [LoadMovies()]


def request_failed(state: AppState, message: str) -> Result:
    """Surface an error in the warning page; everything else is kept."""
    state = replace(state, busy=False, saving=False)
    return _open_warning(state, Notice(message=message)), []


# Page handlers.


def _main_page(state: AppState, press: KeyPress) -> Result:
    key = press.key
    if key == "ctrl+j":
        if state.main_focus == TABLE:
            return replace(state, main_focus=ADD_BUTTON), []
        return state, []
    if key == "ctrl+k":
        return replace(state, main_focus=TABLE), []
    if state.main_focus == TABLE:
        return _table_keys(state, press)
    if key in LEFT_KEYS:
        return replace(state, main_focus=ADD_BUTTON), []
    if key in RIGHT_KEYS:
        return replace(state, main_focus=FILTER_BUTTON), []
    if key == "enter":
        if state.main_focus == ADD_BUTTON:
            return _open_add_page(state), []
        return replace(state, pages=state.pages + (FILTER,), filter_focus=0), []
    return state, []


def _table_keys(state: AppState, press: KeyPress) -> Result:
    key = press.key
    if key in {"down", "j"}:
        return _clamp_selection(replace(state, selected=state.selected + 1)), []
    if key in {"up", "k"}:
        return _clamp_selection(replace(state, selected=state.selected - 1)), []
    if key == "home":
        return _clamp_selection(replace(state, selected=0)), []
    if key == "end":
        return _clamp_selection(replace(state, selected=len(state.visible_movies) - 1)), []
    if key == "r":
        return replace(state, busy=True), [LoadMovies()]
    movie = state.selected_movie
    if movie is None:
        return state, []
    if key == "e":
        return _open_add_page(state, movie), []
    if key == "d":
        warning = Notice(message=f'Delete "{movie.title}"?', delete_id=movie.id)
        return _open_warning(state, warning), []
    return state, []


def _add_page(state: AppState, press: KeyPress) -> Result:
    key = press.key
    if state.saving:
        # The form stays frozen until the pending save is answered.
        return state, []
    if key == "escape":
        return _close_add_page(state), []
    if key in DOWN_KEYS or key == "tab":
        return replace(state, add_focus=_add_focus_down(state)), []
    if key in UP_KEYS or key == "shift+tab":
        return replace(state, add_focus=_add_focus_up(state)), []
    if state.add_focus == SUBMIT_INDEX:
        if key == "enter" and state.add_enabled:
            movie = forms.fields_to_movie(state.add_fields)
            state = replace(state, busy=True, saving=True)
            return state, [SaveMovie(movie=movie, movie_id=state.edit_id)]
        return state, []
    if key == "enter":
        return replace(state, add_focus=_add_focus_down(state)), []
    fields = _edit_buffer(state.add_fields, state.add_focus, press, forms.ADD_FIELD_RULES)
    return replace(state, add_fields=fields), []


def _add_focus_down(state: AppState) -> int:
    focus = state.add_focus
    if focus < ADD_FIELD_COUNT - 1:
        return focus + 1
    if focus == ADD_FIELD_COUNT - 1 and state.add_enabled:
        return SUBMIT_INDEX
    return 0


def _add_focus_up(state: AppState) -> int:
    focus = state.add_focus
    if focus == SUBMIT_INDEX:
        return ADD_FIELD_COUNT - 1
    if focus > 0:
        return focus - 1
    return SUBMIT_INDEX if state.add_enabled else ADD_FIELD_COUNT - 1


def _filter_page(state: AppState, press: KeyPress) -> Result:
    key = press.key
    total = CLEAR_INDEX + 1
    if key == "escape":
        return _pop_page(state), []
    if key in DOWN_KEYS or key == "tab":
        return replace(state, filter_focus=(state.filter_focus + 1) % total), []
    if key in UP_KEYS or key == "shift+tab":
        return replace(state, filter_focus=(state.filter_focus - 1) % total), []
    if state.filter_focus == APPLY_INDEX:
        if key == "enter":
            criteria = forms.MovieFilter.from_fields(state.filter_fields)
            state = replace(state, criteria=criteria, selected=0)
            return _clamp_selection(_pop_page(state)), []
        if key in RIGHT_KEYS:
            return replace(state, filter_focus=CLEAR_INDEX), []
        return state, []
    if state.filter_focus == CLEAR_INDEX:
        if key == "enter":
            state = replace(
                state,
                filter_fields=_blank(FILTER_FIELD_COUNT),
                criteria=forms.MovieFilter(),
                filter_focus=0,
            )
            return _clamp_selection(_pop_page(state)), []
        if key in LEFT_KEYS:
            return replace(state, filter_focus=APPLY_INDEX), []
        return state, []
    if key == "enter":
        return replace(state, filter_focus=state.filter_focus + 1), []
    fields = _edit_buffer(state.filter_fields, state.filter_focus, press, forms.FILTER_FIELD_RULES)
    return replace(state, filter_fields=fields), []


def _warning_page(state: AppState, press: KeyPress) -> Result:
    key = press.key
    if key == "escape":
        return _close_warning(state), []
    if key in LEFT_KEYS:
        return replace(state, warning_focus=YES), []
    if key in RIGHT_KEYS:
        return replace(state, warning_focus=NO), []
    if key == "enter":
        warning = state.warning
        confirmed = state.warning_focus == YES
        state = _close_warning(state)
        if confirmed and warning is not None and warning.delete_id is not None:
            return replace(state, busy=True), [DeleteMovie(movie_id=warning.delete_id)]
        return state, []
    return state, []


_PAGE_HANDLERS: dict[str, Callable[[AppState, KeyPress], Result]] = {
    MAIN: _main_page,
    ADD: _add_page,
    FILTER: _filter_page,
    WARNING: _warning_page,
}


# Helpers.


def _edit_buffer(
    fields: tuple[str, ...],
    index: int,
    press: KeyPress,
    rules: tuple[Callable[[str], bool], ...],
) -> tuple[str, ...]:
    """Apply typing or backspace to one field; rejected input leaves it unchanged."""
    current = fields[index]
    if press.key == "backspace":
        candidate = current[:-1]
    elif press.key == "ctrl+u":
        candidate = ""
    elif press.character and press.character.isprintable():
        candidate = current + press.character
        if not rules[index](candidate):
            return fields
    else:
        return fields
    return fields[:index] + (candidate,) + fields[index + 1 :]


def _open_add_page(state: AppState, movie: MovieData | None = None) -> AppState:
    if movie is None:
        return replace(state, pages=state.pages + (ADD,), add_focus=0, edit_id=None)
    return replace(
        state,
        pages=state.pages + (ADD,),
        add_focus=0,
        add_fields=forms.movie_to_fields(movie),
        edit_id=movie.id,
    )


def _close_add_page(state: AppState) -> AppState:
    pages = tuple(page for page in state.pages if page != ADD)
    return replace(
        state,
        pages=pages,
        add_fields=_blank(ADD_FIELD_COUNT),
        add_focus=0,
        edit_id=None,
        main_focus=TABLE,
    )


def _open_warning(state: AppState, warning: Notice) -> AppState:
    pages = tuple(page for page in state.pages if page != WARNING) + (WARNING,)
    return replace(state, pages=pages, warning=warning, warning_focus=YES)


def _close_warning(state: AppState) -> AppState:
    return replace(_pop_page(state), warning=None, warning_focus=YES)


def _pop_page(state: AppState) -> AppState:
    if len(state.pages) == 1:
        return state
    return replace(state, pages=state.pages[:-1])


def _clamp_selection(state: AppState) -> AppState:
    count = len(state.visible_movies)
    selected = min(max(state.selected, 0), max(count - 1, 0))
    if selected == state.selected:
        return state
    return replace(state, selected=selected)
