"""Terminal rendering for meshctl: counts, tables, pagination, JSON/YAML and prompts."""

from __future__ import annotations

import json
import logging
from typing import Sequence, TextIO

import yaml
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from ..models import Model
from ..utils.errors import OutputFormatError, SelectionCancelledError, SelectionError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_SELECTION_ATTEMPTS = 3
CANCEL_ANSWERS = ("", "q", "quit")


class Presenter:
    """Writes command results to a Rich console.

    Args:
        console: Target console. Defaults to stdout.
        page_size: Rows per chunk in the pagination flow.
        interactive: Whether to prompt between chunks. Defaults to whether
            the console is a terminal.
        input_stream: Where prompts read answers from. Defaults to stdin.
    """

    def __init__(
        self,
        console: Console | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        interactive: bool | None = None,
        input_stream: TextIO | None = None,
    ):
        self.console = console or Console()
        self.page_size = page_size
        self.interactive = self.console.is_terminal if interactive is None else interactive
        self.input_stream = input_stream

    def notice(self, message: str) -> None:
        """Highlighted one-line notice, used for empty results."""
        self.console.print(f"[bold black on white]{escape(message)}[/bold black on white]")

    def success(self, message: str) -> None:
        self.console.print(f"[green]{escape(message)}[/green]")

    def display_count(self, resource: str, count: int) -> None:
        self.console.print(f"Total number of {resource}: {count}", highlight=False)

    def build_table(self, header: Sequence[str], rows: Sequence[Sequence[str]]) -> Table:
        table = Table(box=box.MINIMAL, show_header=True, header_style="bold", pad_edge=False)
        for column in header:
            table.add_column(column, overflow="fold")
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        return table

    def print_table(self, header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        self.console.print(self.build_table(header, rows))

    def paginate(self, header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Print rows in chunks of ``page_size``.

        On a terminal the user is asked before each further chunk and can
        stop early; otherwise every chunk is printed.
        """
        total = len(rows)
        for start in range(0, total, self.page_size):
            chunk = rows[start:start + self.page_size]
            self.print_table(header, chunk)
            shown = start + len(chunk)
            if shown >= total:
                break
            if self.interactive and not self._ask_continue(min(self.page_size, total - shown)):
                logger.debug(f"Pagination stopped after {shown} of {total} rows")
                break

    def _ask_continue(self, next_count: int) -> bool:
        try:
            answer = Prompt.ask(
                f"Press Enter to show the next {next_count} rows, or q to quit",
                console=self.console,
                default="",
                show_default=False,
                stream=self.input_stream,
            )
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            return False
        return answer.strip().lower() not in ("q", "quit")

    def output_json(self, model: Model) -> None:
        """Print a model as 2-space indented JSON with characters like ``&`` left unescaped."""
        try:
            text = json.dumps(model.to_output_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.debug(f"Falling back to pydantic JSON encoding: {e}")
            try:
                text = model.model_dump_json(indent=2, exclude_none=True)
            except (TypeError, ValueError) as fallback_error:
                raise OutputFormatError("failed to format output in JSON") from fallback_error
        self.console.out(text, highlight=False)

    def output_yaml(self, model: Model) -> None:
        try:
            text = yaml.safe_dump(
                model.to_output_dict(),
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=False,
            )
        except yaml.YAMLError as e:
            raise OutputFormatError("failed to format output in YAML") from e
        self.console.out(text.rstrip("\n"), highlight=False)

    def select_model(self, models: Sequence[Model], max_attempts: int = MAX_SELECTION_ATTEMPTS) -> Model:
        """Ask the user to pick one of several models.

        Raises:
            SelectionCancelledError: On an empty answer, ``q``, Ctrl+C or end of input.
            SelectionError: After ``max_attempts`` invalid answers.
        """
        choices = {str(i + 1): m for i, m in enumerate(models)}
        self.console.print("Select a model:")
        for key, model in choices.items():
            self.console.print(f"  [cyan]{key}[/cyan]: {escape(model.label)}", highlight=False)

        for _ in range(max_attempts):
            try:
                answer = Prompt.ask(
                    f"Enter number (1-{len(choices)}, q to cancel)",
                    console=self.console,
                    default="",
                    show_default=False,
                    stream=self.input_stream,
                )
            except (KeyboardInterrupt, EOFError) as e:
                raise SelectionCancelledError("model selection cancelled") from e

            answer = answer.strip().lower()
            if answer in CANCEL_ANSWERS:
                raise SelectionCancelledError("model selection cancelled")
            if answer in choices:
                return choices[answer]
            self.console.print(f"[yellow]'{escape(answer)}' is not a valid choice.[/yellow]")

        raise SelectionError(f"no valid model selected after {max_attempts} attempts")
