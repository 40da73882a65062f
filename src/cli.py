"""Command-line interface loop for the todo list.

Keys are read one at a time with click.getchar() and decoded into App
commands; the screen is cleared and fully redrawn after every key.
"""
import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional

import click

from app import App, Command, CommandKind
from config import Settings
from logging_setup import setup_logging
from models import SortMode
from render import render_frame
from storage import Storage
from store import open_store
from theme import Theme

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# --- terminal control helpers ---
# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home)
CLEAR = "\033[3J\033[H\033[2J\033[H"
ALT_SCREEN_ON = "\033[?1049h"
ALT_SCREEN_OFF = "\033[?1049l"

ESC = "\x1b"
KEY_UP = ("\x1b[A", "\x1bOA", "\xe0H", "\x00H")
KEY_DOWN = ("\x1b[B", "\x1bOB", "\xe0P", "\x00P")
KEY_ENTER = ("\r", "\n")
KEY_TAB = "\t"
KEY_BACKTAB = ("\x1b[Z",)
KEY_BACKSPACE = ("\x7f", "\x08")

LIST_KEYMAP: Dict[str, Command] = {
    "q": Command(CommandKind.QUIT),
    ESC: Command(CommandKind.QUIT),
    " ": Command(CommandKind.TOGGLE),
    "n": Command(CommandKind.START_ADD),
    "e": Command(CommandKind.START_EDIT),
    "d": Command(CommandKind.DELETE),
    "s": Command.sort(SortMode.CREATED_DATE),
    "t": Command.sort(SortMode.TARGET_DATE),
    "c": Command.sort(SortMode.COMPLETION),
}
for _k in KEY_UP:
    LIST_KEYMAP[_k] = Command(CommandKind.MOVE_UP)
for _k in KEY_DOWN:
    LIST_KEYMAP[_k] = Command(CommandKind.MOVE_DOWN)


def decode_key(key: str, in_form: bool) -> Optional[Command]:
    """Map one raw key from click.getchar() to a Command (None = ignore)."""
    if not in_form:
        return LIST_KEYMAP.get(key if len(key) > 1 else key.lower())
    if key == ESC:
        return Command(CommandKind.CANCEL)
    if key in KEY_ENTER:
        return Command(CommandKind.SUBMIT)
    if key == KEY_TAB or key in KEY_DOWN:
        return Command(CommandKind.FOCUS_NEXT)
    if key in KEY_BACKTAB or key in KEY_UP:
        return Command(CommandKind.FOCUS_PREV)
    if key in KEY_BACKSPACE:
        return Command(CommandKind.BACKSPACE)
    if len(key) == 1 and key.isprintable():
        return Command.typed(key)
    return None


class CLI:
    def __init__(self, app: App, theme: Theme, alt_screen: bool = True,
                 read_key: Callable[[], str] = click.getchar):
        self.app: App = app
        self.theme: Theme = theme
        self.alt_screen: bool = alt_screen
        self._read_key = read_key

    def draw(self) -> None:
        width = shutil.get_terminal_size((100, 30)).columns
        click.echo(CLEAR, nl=False)
        click.echo("\n".join(render_frame(self.app.frame(), width, self.theme)))

    def run(self) -> None:
        """Main key loop; the list is cleared and redrawn each cycle.

        Uses the terminal's alternate screen (if enabled) so earlier frames
        do not pile up in scrollback. Every mutation has already been saved
        by the store, so leaving needs no final flush.
        """
        exit_message = "Goodbye."
        if self.alt_screen:
            click.echo(ALT_SCREEN_ON, nl=False)
        try:
            while True:
                self.draw()
                key = self._read_key()
                if key == "":
                    raise EOFError
                cmd = decode_key(key, in_form=self.app.form is not None)
                if cmd is None:
                    continue
                if not self.app.handle(cmd):
                    break
        except (KeyboardInterrupt, EOFError):
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                click.echo(ALT_SCREEN_OFF, nl=False)
        if self.app.store.dirty:
            exit_message += f" (unsaved changes: {self.app.store.storage.path} is out of date)"
            logger.warning("Exiting with unsaved changes")
        click.echo(exit_message)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--file", "data_file", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Task file (default: $TODO_FILE or ./todos.json).")
@click.option("--alt-screen/--no-alt-screen", default=None,
              help="Draw on the terminal's alternate screen.")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write debug logs to this file.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
                                               case_sensitive=False),
              default=None)
@click.version_option(__version__, prog_name="todo")
def main(data_file: Optional[Path], alt_screen: Optional[bool], log_file: Optional[Path],
         log_level: Optional[str]) -> None:
    """Terminal todo list: add, edit, complete, and sort tasks."""
    settings = Settings.from_env()
    level = (log_level or settings.log_level).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = "INFO"
    setup_logging(log_file or settings.log_file, level)

    storage = Storage(data_file or settings.data_file)
    store, notice = open_store(storage)
    logger.info("Session started with %d tasks from %s", len(store), storage.path)
    app = App(store, notice=notice)
    theme = Theme.detect(settings.palette)
    CLI(app, theme, settings.alt_screen if alt_screen is None else alt_screen).run()


if __name__ == '__main__':  # pragma: no cover
    main()
