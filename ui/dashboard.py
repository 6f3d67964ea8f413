"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import Principal, PreparedRequest
from core.router import CredentialClass
from ui.log_utils import body_preview, write_cli_log, write_request_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, prepared: PreparedRequest, user: str, timestamp: datetime):
        path = prepared.decision.upstream_path
        self.prepared = prepared
        self.method = prepared.method
        self.path = path[:50] + "..." if len(path) > 50 else path
        self.credential = prepared.decision.credential_class
        self.user = user
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded requests and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._request_count = {CredentialClass.ADMIN: 0, CredentialClass.INSTANCE: 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    @property
    def request_count(self) -> dict[CredentialClass, int]:
        return dict(self._request_count)

    @property
    def errors(self) -> list[str]:
        return list(self._errors)

    @property
    def requests(self) -> list[RequestInfo]:
        """Recent requests, newest first."""
        return list(self._requests)

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_request(
        self,
        path: str,
        prepared: PreparedRequest,
        principal: Principal,
    ) -> None:
        """Log a request about to be forwarded upstream."""
        decision = prepared.decision
        user = principal.email or principal.id
        with self._lock:
            self._request_count[decision.credential_class] += 1
            info = RequestInfo(
                prepared=prepared,
                user=user,
                timestamp=datetime.now(),
            )
            self._requests.insert(0, info)
            self._requests = self._requests[: self._max_requests]

            write_request_log(
                prepared.method,
                path,
                decision.upstream_path,
                prepared.headers,
                credential=decision.credential_class.value,
                user=user,
            )
            write_cli_log(
                "PROXY",
                f"{prepared.method} {decision.upstream_path}",
                credential=decision.credential_class.value,
                user=user,
            )
            self._refresh()

    def log_response(self, prepared: PreparedRequest, status: int, body: bytes) -> None:
        """Log the upstream response for a forwarded request."""
        with self._lock:
            for info in self._requests:
                if info.prepared is prepared:
                    info.status = status
                    break
            write_cli_log(
                "UPSTREAM",
                body_preview(body),
                method=prepared.method,
                path=prepared.decision.upstream_path,
                status=status,
            )
            self._refresh()

    def log_error(self, code: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{code} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], code=code, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Uazapi Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Admin: {self._request_count[CredentialClass.ADMIN]}", style="blue")
        stats.append("  |  ")
        stats.append(f"Instance: {self._request_count[CredentialClass.INSTANCE]}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Upstream: {self.config.upstream.base_url}", style="dim")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=2)
            table.add_column("Token", width=8)
            table.add_column("User", ratio=1)
            table.add_column("Status", width=6)

            for req in self._requests:
                style = "blue" if req.credential is CredentialClass.ADMIN else "magenta"
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    req.path,
                    Text(req.credential.value, style=style),
                    req.user[:30],
                    str(req.status) if req.status is not None else "...",
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Send requests to http://localhost:{self.config.proxy.port}"
                f"{self.config.proxy.route_prefix}/<uazapi path>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
