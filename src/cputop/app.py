"""cputop - Textual view over one sampling run."""

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from cputop.models import ProcessRecord

NAME_WIDTH = 20


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }

    ProcessTable #empty-notice {
        padding: 1 2;
        color: $text-muted;
    }
    """

    def __init__(self, records: list[ProcessRecord], *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._records = list(records)

    @property
    def records(self) -> list[ProcessRecord]:
        """Get the records shown in the table."""
        return list(self._records)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        if not self._records:
            yield Static("No processes sampled.", id="empty-notice")
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Fill the data table once; the view is static."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True

        table.add_column("PID", key="pid", width=10)
        table.add_column("Name", key="name", width=NAME_WIDTH)
        table.add_column("CPU(%)", key="cpu", width=10)

        for record in self._records:
            table.add_row(
                str(record.pid),
                record.name[:NAME_WIDTH],
                f"{record.cpu_percent:.2f}",
                key=str(record.pid),
            )


class CputopApp(App):
    """Scrollable table over an already ranked list of records."""

    TITLE = "cputop"
    SUB_TITLE = "CPU usage snapshot"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
    ]

    def __init__(self, records: list[ProcessRecord]) -> None:
        """Initialize the CputopApp."""
        super().__init__()
        self._records = list(records)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ProcessTable(self._records)
        yield Footer()

    def on_mount(self) -> None:
        """Focus the table so arrow keys scroll it."""
        self.query_one("#process-table", DataTable).focus()
