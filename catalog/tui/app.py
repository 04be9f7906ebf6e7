"""Textual shell for the catalog terminal client.

Widgets here are passive: none of them takes focus. Every key reaches
``CatalogApp.on_key``, goes through ``state.reduce`` and the resulting state
is painted back onto the widgets. Requests to the service are queued to one
background thread and their outcome is marshalled back with
``call_from_thread``.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import DataTable, Static
from textual.worker import get_current_worker

from catalog.core.config import Settings, get_settings
from catalog.services.client import CatalogClient, CatalogError
from catalog.tui import forms
from catalog.tui.state import (
    ADD,
    ADD_BUTTON,
    APPLY_INDEX,
    CLEAR_INDEX,
    FILTER,
    FILTER_BUTTON,
    MAIN,
    NO,
    SUBMIT_INDEX,
    TABLE,
    WARNING,
    YES,
    AppState,
    DeleteMovie,
    Effect,
    KeyPress,
    LoadMovies,
    Result,
    SaveMovie,
    initial_state,
    movie_deleted,
    movie_saved,
    movies_loaded,
    reduce,
    request_failed,
)
from catalog.tui.table import Cell, build_rows

logger = logging.getLogger(__name__)

REQUEST_QUEUE_SIZE = 8
UNEXPECTED_ERROR_MESSAGE = "Something went wrong while talking to the server."
NAMES_HINT = "For adding multiple genres or directors, separate each value with a comma ','"


class MovieTable(DataTable, can_focus=False):
    """Movie table whose cursor is driven by the reducer, not by key presses."""


def _text(cell: Cell) -> Text:
    return Text(cell.text, style=cell.style, justify=cell.align)


class CatalogApp(App):
    CSS = """
    Screen {
        layers: base overlay;
    }
    #header {
        height: 3;
        content-align: center middle;
        text-style: bold;
    }
    #table {
        height: 1fr;
        border: round $secondary;
    }
    #table > .datatable--header {
        color: yellow;
        background: rgb(40, 40, 40);
    }
    #table > .datatable--even-row {
        background: rgb(60, 60, 60);
    }
    #table > .datatable--odd-row {
        background: rgb(80, 80, 80);
    }
    #bottom {
        height: 5;
        border: round $secondary;
        align: center middle;
    }
    .button {
        width: 16;
        height: 1;
        margin: 0 4;
        content-align: center middle;
        background: $panel;
    }
    .button.-focused {
        background: $accent;
        text-style: bold;
    }
    .button.-disabled {
        color: grey;
        text-style: dim;
    }
    .page {
        layer: overlay;
        dock: top;
        width: 100%;
        height: 100%;
        align: center middle;
        display: none;
    }
    .modal {
        width: 60;
        height: auto;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }
    #warning-page .modal {
        width: 44;
    }
    .field {
        height: 1;
    }
    .field.-focused {
        background: $boost;
        text-style: bold;
    }
    .hint {
        color: grey;
        margin: 1 0;
    }
    .buttons {
        height: 1;
        align: center middle;
    }
    #warning-text {
        content-align: center middle;
        height: 3;
    }
    """

    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [Binding("ctrl+c", "quit", "Quit", priority=True)]

    def __init__(self, client: CatalogClient, *, fetch_limit: int) -> None:
        super().__init__()
        self.client = client
        self.fetch_limit = fetch_limit
        self.view_state, self._startup_effects = initial_state()
        self._requests: queue.Queue[Effect] = queue.Queue(maxsize=REQUEST_QUEUE_SIZE)
        self._rendered_movies: tuple | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        yield MovieTable(id="table", cursor_type="row", zebra_stripes=True)
        with Horizontal(id="bottom"):
            yield Static("Add Movie", id="add-button", classes="button")
            yield Static("Filter", id="filter-button", classes="button")

        with Container(id="add-page", classes="page"):
            with Vertical(classes="modal"):
                for index, label in enumerate(forms.ADD_FIELD_LABELS):
                    yield Static(label, id=f"add-field-{index}", classes="field")
                yield Static(NAMES_HINT, classes="hint")
                with Horizontal(classes="buttons"):
                    yield Static("Add", id="add-submit", classes="button")

        with Container(id="filter-page", classes="page"):
            with Vertical(classes="modal"):
                for index, label in enumerate(forms.FILTER_FIELD_LABELS):
                    yield Static(label, id=f"filter-field-{index}", classes="field")
                with Horizontal(classes="buttons"):
                    yield Static("Apply", id="filter-apply", classes="button")
                    yield Static("Clear", id="filter-clear", classes="button")

        with Container(id="warning-page", classes="page"):
            with Vertical(classes="modal"):
                yield Static(id="warning-text")
                with Horizontal(classes="buttons"):
                    yield Static("Yes", id="warning-yes", classes="button")
                    yield Static("No", id="warning-no", classes="button")

    def on_mount(self) -> None:
        table = self.query_one(MovieTable)
        table.border_title = " Table [ Ctrl-K ] "
        header = build_rows([])[0]
        table.add_columns(*(_text(cell) for cell in header))
        self.query_one("#bottom").border_title = " Buttons [ Ctrl-J ] "
        self._serve_requests()
        self._render_state()
        self._queue_effects(self._startup_effects)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        press = KeyPress(event.key, event.character if event.is_printable else None)
        self._apply(reduce(self.view_state, press))

    def _apply(self, result: Result) -> None:
        self.view_state, effects = result
        self._render_state()
        self._queue_effects(effects)

    def _queue_effects(self, effects: list[Effect]) -> None:
        for effect in effects:
            try:
                self._requests.put_nowait(effect)
            except queue.Full:
                logger.warning("Request queue full, dropping %s", effect)
                self._apply(request_failed(self.view_state, "Too many pending requests."))

    @work(thread=True, exclusive=True, group="catalog-requests")
    def _serve_requests(self) -> None:
        worker = get_current_worker()
        while not worker.is_cancelled:
            try:
                effect = self._requests.get(timeout=0.1)
            except queue.Empty:
                continue
            self._perform(effect)

    def _perform(self, effect: Effect) -> None:
        """Run one request on the worker thread and report back to the UI thread."""
        try:
            if isinstance(effect, LoadMovies):
                movies = self.client.list_movies(limit=self.fetch_limit, skip=0)
                self.call_from_thread(self._complete, movies_loaded, movies)
            elif isinstance(effect, SaveMovie):
                if effect.movie_id is None:
                    self.client.add_movie(effect.movie)
                else:
                    self.client.update_movie(effect.movie_id, effect.movie)
                self.call_from_thread(self._complete, movie_saved)
            elif isinstance(effect, DeleteMovie):
                self.client.delete_movie(effect.movie_id)
                self.call_from_thread(self._complete, movie_deleted)
        except CatalogError as exc:
            self.call_from_thread(self._complete, request_failed, str(exc))
        except Exception:
            logger.exception("Request %s failed unexpectedly", effect)
            self.call_from_thread(self._complete, request_failed, UNEXPECTED_ERROR_MESSAGE)

    def _complete(self, transition: Callable[..., Result], *args) -> None:
        self._apply(transition(self.view_state, *args))

    # Rendering

    def _render_state(self) -> None:
        state = self.view_state
        self.query_one("#header", Static).update(_header_text(state))
        self._render_table(state)

        on_main = state.page == MAIN
        self._mark("#add-button", focused=on_main and state.main_focus == ADD_BUTTON)
        self._mark("#filter-button", focused=on_main and state.main_focus == FILTER_BUTTON)

        self.query_one("#add-page").display = ADD in state.pages
        for index, label in enumerate(forms.ADD_FIELD_LABELS):
            field = self.query_one(f"#add-field-{index}", Static)
            field.update(Text(label + state.add_fields[index]))
            field.set_class(state.add_focus == index, "-focused")
        submit = self.query_one("#add-submit", Static)
        submit.update("Save" if state.edit_id is not None else "Add")
        self._mark("#add-submit", focused=state.add_focus == SUBMIT_INDEX, disabled=not state.add_enabled)

        self.query_one("#filter-page").display = FILTER in state.pages
        for index, label in enumerate(forms.FILTER_FIELD_LABELS):
            field = self.query_one(f"#filter-field-{index}", Static)
            field.update(Text(label + state.filter_fields[index]))
            field.set_class(state.filter_focus == index, "-focused")
        self._mark("#filter-apply", focused=state.filter_focus == APPLY_INDEX)
        self._mark("#filter-clear", focused=state.filter_focus == CLEAR_INDEX)

        self.query_one("#warning-page").display = WARNING in state.pages
        message = state.warning.message if state.warning is not None else ""
        self.query_one("#warning-text", Static).update(Text(message, justify="center"))
        self._mark("#warning-yes", focused=state.warning_focus == YES)
        self._mark("#warning-no", focused=state.warning_focus == NO)

    def _render_table(self, state: AppState) -> None:
        table = self.query_one(MovieTable)
        visible = state.visible_movies
        if visible != self._rendered_movies:
            table.clear()
            for movie, row in zip(visible, build_rows(visible)[1:]):
                table.add_row(*(_text(cell) for cell in row), key=str(movie.id))
            self._rendered_movies = visible
        table.show_cursor = state.main_focus == TABLE
        if table.row_count:
            table.move_cursor(row=state.selected)

    def _mark(self, selector: str, *, focused: bool, disabled: bool = False) -> None:
        widget = self.query_one(selector)
        widget.set_class(focused, "-focused")
        widget.set_class(disabled, "-disabled")


def _header_text(state: AppState) -> Text:
    total = len(state.movies)
    shown = len(state.visible_movies)
    parts = [f"Movie Catalog | {total} movies"]
    if shown != total:
        parts.append(f"{shown} shown")
    if state.busy:
        parts.append("loading...")
    parts.append("e edit  d delete  r refresh  Ctrl-C quit")
    return Text(" | ".join(parts), justify="center")


def build_app(settings: Settings | None = None, *, client: CatalogClient | None = None) -> CatalogApp:
    """Wire settings and the HTTP client into a ready-to-run application."""

    settings = settings or get_settings()
    client = client or CatalogClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
    )
    return CatalogApp(client, fetch_limit=settings.initial_fetch_limit)
