"""NiceGUI web UI for MindVision."""

from __future__ import annotations

from uuid import UUID

from loguru import logger
from nicegui import Client, app, ui

from backend.api.routes import register_api
from backend.core.config import AppConfig
from backend.journal.gateway import LocalEntryGateway
from backend.journal.model import JournalEntry
from backend.journal.store import EntryStore
from backend.practice.catalog import format_clock, list_exercises
from backend.practice.model import Exercise, PracticeState
from backend.ui.controller import PracticeController

REFRESH_INTERVAL_SEC = 0.25

PAGE_STYLE = """
<style>
  :root {
    --mv-bg: #0f0a1f;
    --mv-surface: #1c1535;
    --mv-surface-2: #251c47;
    --mv-text: #ede9fe;
    --mv-muted: #a5a0c8;
    --mv-accent: #a78bfa;
  }
  body {
    background: radial-gradient(circle at top, #2a1f52 0%, var(--mv-bg) 60%);
    color: var(--mv-text);
    font-family: Arial, "Segoe UI", sans-serif;
  }
  .mv-card {
    background: linear-gradient(180deg, var(--mv-surface) 0%, var(--mv-surface-2) 100%);
    border: 1px solid rgba(167, 139, 250, 0.25);
    border-radius: 14px;
    box-shadow: 0 12px 24px rgba(10, 6, 30, 0.35);
  }
  .mv-clock {
    font-size: 3rem;
    font-weight: 700;
    font-variant-numeric: tabular-nums;
  }
  .mv-muted { color: var(--mv-muted); }
  .mv-error { color: #f87171; font-weight: 600; }
  .mv-prompt { color: var(--mv-muted); font-style: italic; }
</style>
"""


def _difficulty_color(exercise: Exercise) -> str:
    return {
        "Beginner": "#4ade80",
        "Intermediate": "#fbbf24",
        "Advanced": "#f87171",
    }.get(exercise.difficulty, "#a5a0c8")


def _entry_heading(entry: JournalEntry) -> str:
    stamp = entry.date.astimezone().strftime("%Y-%m-%d %H:%M")
    return f"{stamp} - {entry.exercise}"


def bind_client_teardown(client: Client, controller: PracticeController) -> None:
    # on_disconnect also fires on reconnects; on_delete runs once the client is gone.
    client.on_delete(controller.close)


def run_web_ui(config: AppConfig, exercises: tuple[Exercise, ...] | None = None) -> int:
    exercises = exercises or list_exercises()
    store = EntryStore(config.database_url)
    store.init_db()
    register_api(app, store, exercises)
    app.on_shutdown(store.dispose)
    gateway = LocalEntryGateway(store)

    @ui.page("/")
    async def index(client: Client) -> None:
        controller = PracticeController(
            gateway,
            exercises,
            tick_interval_sec=config.tick_interval_sec,
            on_exhausted=lambda ex: logger.info(f"Exercise completed: {ex.title}"),
        )
        state: PracticeState = controller.state
        rendered_entries: tuple[UUID, ...] | None = None
        delete_buttons: dict[UUID, ui.button] = {}
        bind_client_teardown(client, controller)
        ui.add_head_html(PAGE_STYLE)

        with ui.column().classes("w-full items-center gap-4") as failed_view:
            ui.label("MindVision").classes("text-2xl font-semibold")
            failed_label = ui.label("").classes("mv-error")
            retry_btn = ui.button("Retry")

        with ui.column().classes("w-full max-w-3xl mx-auto gap-4") as main_view:
            with ui.row().classes("w-full justify-center gap-2"):
                catalog_buttons = [
                    ui.button(exercise.title).props("outline no-caps")
                    for exercise in controller.exercises
                ]
            with ui.card().classes("w-full mv-card"):
                ui.label("MindVision").classes("text-2xl font-semibold")
                title_label = ui.label("").classes("text-xl font-semibold")
                description_label = ui.label("").classes("text-sm mv-muted")
                with ui.row().classes("gap-4"):
                    duration_label = ui.label("").classes("text-sm")
                    difficulty_label = ui.label("").classes("text-sm font-semibold")
                clock_label = ui.label("").classes("mv-clock self-center")
                with ui.row().classes("w-full justify-center gap-2"):
                    prev_btn = ui.button(icon="skip_previous").props("outline round")
                    play_btn = ui.button(icon="play_arrow").props("round")
                    next_btn = ui.button(icon="skip_next").props("outline round")
                progress_bar = ui.linear_progress(value=0, show_value=False).props("rounded")

            with ui.card().classes("w-full mv-card"):
                ui.label("Reflection Journal").classes("text-lg font-semibold")
                prompts_column = ui.column().classes("gap-1")
                draft_input = ui.textarea(placeholder="Record your experience...").classes("w-full")
                with ui.row().classes("w-full items-center gap-3"):
                    save_btn = ui.button("Save Entry", icon="save")
                    error_label = ui.label("").classes("mv-error")

            with ui.card().classes("w-full mv-card") as entries_card:
                ui.label("Previous Entries").classes("text-lg font-semibold")
                entries_column = ui.column().classes("w-full gap-2")

        def refresh_prompts() -> None:
            prompts_column.clear()
            with prompts_column:
                for prompt in controller.active_exercise.prompts:
                    ui.label(f'"{prompt}"').classes("mv-prompt text-sm")

        def refresh_entries() -> None:
            nonlocal rendered_entries
            journal = controller.journal
            current = tuple(entry.id for entry in journal.entries)
            if current == rendered_entries:
                for entry_id, button in delete_buttons.items():
                    button.set_enabled(not journal.is_deleting(entry_id))
                return
            rendered_entries = current
            delete_buttons.clear()
            entries_column.clear()
            with entries_column:
                for entry in journal.entries:
                    with ui.row().classes("w-full items-start justify-between no-wrap"):
                        with ui.column().classes("gap-0"):
                            ui.label(_entry_heading(entry)).classes("text-xs mv-muted")
                            ui.label(entry.content).classes("text-sm whitespace-pre-wrap")
                        delete_btn = ui.button(icon="delete").props("flat round dense")
                        delete_buttons[entry.id] = delete_btn

                        async def on_delete(entry_id: UUID = entry.id) -> None:
                            await controller.delete_entry(entry_id)
                            refresh_ui()

                        delete_btn.on_click(on_delete)
            entries_card.set_visibility(bool(journal.entries))

        def refresh_exercise() -> None:
            exercise = controller.active_exercise
            title_label.text = exercise.title
            description_label.text = exercise.description
            duration_label.text = f"Duration: {format_clock(exercise.duration_sec)}"
            difficulty_label.text = f"Level: {exercise.difficulty}"
            difficulty_label.style(f"color: {_difficulty_color(exercise)};")
            for index, button in enumerate(catalog_buttons):
                if index == state.active_index:
                    button.props(remove="outline")
                else:
                    button.props("outline")
            refresh_prompts()

        def refresh_ui() -> None:
            journal = controller.journal
            failed = journal.status == "failed"
            failed_view.set_visibility(failed)
            main_view.set_visibility(not failed)
            if failed:
                failed_label.text = journal.error or "Unable to load your journal"
                return

            clock_label.text = format_clock(state.remaining_sec)
            progress_bar.value = min(1.0, state.progress_pct / 100.0)
            play_icon = "pause" if state.is_playing else "play_arrow"
            if play_btn.props.get("icon") != play_icon:
                play_btn.props(f"icon={play_icon}")
            if draft_input.value != state.draft_text:
                draft_input.value = state.draft_text
            save_btn.set_enabled(
                journal.ready and not journal.saving and bool(state.draft_text.strip())
            )
            error_label.text = journal.error or ""
            refresh_entries()

        def on_toggle() -> None:
            controller.toggle_play()
            refresh_ui()

        def on_navigate(step: int) -> None:
            if step > 0:
                controller.next_exercise()
            else:
                controller.previous_exercise()
            refresh_exercise()
            refresh_ui()

        def on_select(index: int) -> None:
            controller.select_exercise(index)
            refresh_exercise()
            refresh_ui()

        def on_draft_change() -> None:
            controller.set_draft(str(draft_input.value or ""))

        async def on_save() -> None:
            save_btn.disable()
            await controller.save_draft()
            refresh_ui()

        async def on_retry() -> None:
            retry_btn.disable()
            await controller.retry()
            retry_btn.enable()
            refresh_exercise()
            refresh_ui()

        play_btn.on_click(on_toggle)
        prev_btn.on_click(lambda: on_navigate(-1))
        next_btn.on_click(lambda: on_navigate(1))
        for index, button in enumerate(catalog_buttons):
            button.on_click(lambda _, i=index: on_select(i))
        draft_input.on_value_change(lambda _: on_draft_change())
        save_btn.on_click(on_save)
        retry_btn.on_click(on_retry)

        failed_view.set_visibility(False)
        entries_card.set_visibility(False)
        refresh_exercise()
        ui.timer(REFRESH_INTERVAL_SEC, refresh_ui)

        await client.connected()
        await controller.load()
        refresh_ui()

    logger.info(f"Starting MindVision web UI on http://{config.web_host}:{config.web_port}")
    ui.run(host=config.web_host, port=config.web_port, reload=False, title="MindVision")
    return 0
