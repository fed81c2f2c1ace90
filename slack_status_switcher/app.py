"""System tray front end.

The coordinator lives on an asyncio loop in a background thread; the tray
menu only reads its state and hands actions over to that loop.
"""

import asyncio
import threading
import tkinter as tk
from tkinter import messagebox, simpledialog
from typing import Optional

import pystray
from PIL import Image, ImageDraw

from . import menu
from .client import SlackStatusClient
from .config import Settings, get_settings
from .coordinator import StatusCoordinator
from .exceptions import BroadcastInProgressError, RemoteError, ValidationError
from .logging_config import get_logger, setup_logging
from .models import StatusPreset

logger = get_logger(__name__)


def _noop(icon, item):
    pass


def _icon_image(size: int = 64) -> Image.Image:
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    margin = size // 8
    draw.ellipse((margin, margin, size - margin, size - 2 * margin), fill=(74, 21, 75, 255))
    draw.polygon(
        [(size // 4, size - 3 * margin), (size // 4, size - margin // 2), (size // 2, size - 2 * margin)],
        fill=(74, 21, 75, 255),
    )
    return image


class _Dialogs:
    """Modal tkinter prompts, each on a throwaway hidden root window."""

    def __enter__(self):
        self.root = tk.Tk()
        self.root.withdraw()
        self.root.attributes("-topmost", True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.root.destroy()

    def ask(self, title: str, prompt: str, **kwargs) -> Optional[str]:
        return simpledialog.askstring(title, prompt, parent=self.root, **kwargs)

    def ask_int(self, title: str, prompt: str, **kwargs) -> Optional[int]:
        return simpledialog.askinteger(title, prompt, parent=self.root, **kwargs)

    def confirm(self, title: str, message: str) -> bool:
        return messagebox.askyesno(title, message, parent=self.root)

    def info(self, title: str, message: str) -> None:
        messagebox.showinfo(title, message, parent=self.root)

    def error(self, title: str, message: str) -> None:
        messagebox.showerror(title, message, parent=self.root)


class StatusSwitcherApp:
    """Tray icon wired to a StatusCoordinator."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(target=self.loop.run_forever, name="status-loop", daemon=True)
        self.coordinator = StatusCoordinator.from_settings(self.settings)
        self.coordinator.add_listener(self._on_state_change)
        self.icon = pystray.Icon(
            "slack-status-switcher",
            icon=_icon_image(),
            title=menu.APP_TITLE,
            menu=pystray.Menu(self._menu_items),
        )

    # Loop hand-off

    def _call(self, func, *args):
        """Run a coordinator method on the loop thread and wait for its result."""
        async def runner():
            return func(*args)
        return asyncio.run_coroutine_threadsafe(runner(), self.loop).result()

    def _submit(self, coro) -> None:
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future) -> None:
        error = future.exception()
        if isinstance(error, BroadcastInProgressError):
            logger.info("Ignored status change while an update is running")
        elif error is not None:
            logger.error("Background action failed", error=str(error))

    def _on_state_change(self, _coordinator: StatusCoordinator) -> None:
        if self.icon.visible:
            self.icon.update_menu()

    # Menu

    def _menu_items(self):
        state = self.coordinator
        items = [
            pystray.MenuItem(menu.APP_TITLE, _noop, enabled=False),
            pystray.MenuItem(menu.status_line(state), _noop, enabled=False),
        ]
        warning = menu.workspace_warning(state)
        if warning:
            items.append(pystray.MenuItem(warning, _noop, enabled=False))
        items.append(pystray.Menu.SEPARATOR)

        for row in menu.preset_rows(state):
            items.append(pystray.MenuItem(row.title, self._apply_action(row.preset_id), enabled=row.enabled))
        items.append(pystray.Menu.SEPARATOR)

        if state.show_results:
            for line in menu.results_banner(state.last_results):
                items.append(pystray.MenuItem(line, _noop, enabled=False))
            items.append(pystray.Menu.SEPARATOR)

        items.extend([
            pystray.MenuItem("Clear Status", self._clear, enabled=menu.can_clear(state)),
            pystray.MenuItem("Settings", pystray.Menu(*self._settings_items())),
            pystray.MenuItem("Quit", self._quit),
        ])
        return items

    def _settings_items(self):
        state = self.coordinator
        remove_workspace = [
            pystray.MenuItem(label, self._remove_workspace_action(ws.id))
            for ws, label in zip(state.workspaces, menu.workspace_labels(state))
        ]
        remove_preset = [
            pystray.MenuItem(f"{p.display_emoji}  {p.text}", self._remove_preset_action(p.id))
            for p in state.presets
        ]
        move_up = [
            pystray.MenuItem(f"{p.display_emoji}  {p.text}", self._move_up_action(i), enabled=i > 0)
            for i, p in enumerate(state.presets)
        ]
        return [
            pystray.MenuItem("Add Workspace…", self._add_workspace),
            pystray.MenuItem("Remove Workspace", pystray.Menu(*remove_workspace), enabled=bool(remove_workspace)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Add Preset…", self._add_preset),
            pystray.MenuItem("Remove Preset", pystray.Menu(*remove_preset), enabled=bool(remove_preset)),
            pystray.MenuItem("Move Preset Up", pystray.Menu(*move_up), enabled=len(move_up) > 1),
            pystray.MenuItem("Reset Presets to Defaults", self._reset_presets),
        ]

    # Actions

    def _apply_action(self, preset_id: str):
        def action(icon, item):
            preset = next((p for p in self.coordinator.presets if p.id == preset_id), None)
            if preset is not None:
                self._submit(self.coordinator.apply_status(preset))
        return action

    def _clear(self, icon, item):
        self._submit(self.coordinator.clear_status())

    def _remove_workspace_action(self, workspace_id: str):
        def action(icon, item):
            self._call(self.coordinator.remove_workspace, workspace_id)
        return action

    def _remove_preset_action(self, preset_id: str):
        def action(icon, item):
            self._call(self.coordinator.remove_preset, preset_id)
        return action

    def _move_up_action(self, index: int):
        def action(icon, item):
            self._call(self.coordinator.move_preset, [index], index - 1)
        return action

    def _reset_presets(self, icon, item):
        self._call(self.coordinator.reset_presets)

    def _add_workspace(self, icon, item):
        with _Dialogs() as dialogs:
            name = dialogs.ask("Add Slack Workspace", "Workspace name (e.g. My Company):")
            if not name:
                return
            token = dialogs.ask("Add Slack Workspace", "User OAuth token (xoxp-...):", show="•")
            if not token:
                return

            if dialogs.confirm("Add Slack Workspace", "Test the connection before adding?"):
                dialogs.info("Connection Test", self._test_connection(token.strip()))

            try:
                self._call(self.coordinator.add_workspace, name, token)
            except ValidationError as e:
                dialogs.error("Add Slack Workspace", str(e))
                return
        self._submit(self.coordinator.refresh_current_status())

    def _test_connection(self, token: str) -> str:
        with SlackStatusClient(self.settings.api_base_url, timeout=self.settings.request_timeout) as client:
            try:
                return menu.connection_test_message(profile=client.fetch_profile(token))
            except RemoteError as e:
                return menu.connection_test_message(error=e)

    def _add_preset(self, icon, item):
        with _Dialogs() as dialogs:
            display_emoji = dialogs.ask("Add Status Preset", "Display emoji:", initialvalue="😊")
            if display_emoji is None:
                return
            emoji = dialogs.ask("Add Status Preset", "Slack emoji code:", initialvalue=":smile:")
            if emoji is None:
                return
            text = dialogs.ask("Add Status Preset", "Status text:")
            if text is None:
                return
            minutes = dialogs.ask_int(
                "Add Status Preset", "Expire after how many minutes? (0 = never)",
                initialvalue=0, minvalue=0,
            )
            if minutes is None:
                return

            try:
                preset = StatusPreset(
                    emoji=emoji.strip(),
                    display_emoji=display_emoji.strip(),
                    text=text.strip(),
                    expiration_minutes=minutes,
                )
                self._call(self.coordinator.add_preset, preset)
            except ValidationError as e:
                dialogs.error("Add Status Preset", str(e))

    def _quit(self, icon, item):
        asyncio.run_coroutine_threadsafe(self.coordinator.close(), self.loop).result()
        self.loop.call_soon_threadsafe(self.loop.stop)
        icon.stop()

    def run(self) -> None:
        self._loop_thread.start()
        self._call(self.coordinator.load)
        self._submit(self.coordinator.refresh_current_status())
        logger.info("Starting tray icon")
        self.icon.run()


def main() -> None:
    settings = get_settings()
    setup_logging(settings)
    StatusSwitcherApp(settings).run()


if __name__ == "__main__":
    main()
