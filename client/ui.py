# client/ui.py
"""Terminal UI components for the board-game client using rich."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box
from typing import Optional, Tuple
import questionary

from game.player import Player
from game.session import GameSession, SessionState, Variant
from version import VERSION


console = Console()

STATE_STYLES = {
    SessionState.WAITING_PLAYERS: "yellow",
    SessionState.IN_PROGRESS: "green",
    SessionState.PAUSED: "cyan",
    SessionState.FINISHED: "bold magenta",
    SessionState.CANCELLED: "red",
}


def clear_screen():
    """Clear the terminal screen."""
    console.clear()


def print_header(title: str, subtitle: str = ""):
    """Print a styled header."""
    header_text = Text(title, style="bold cyan")
    if subtitle:
        header_text.append(f"\n{subtitle}", style="dim")
    console.print(Panel(header_text, box=box.DOUBLE))


def build_board_table(session: GameSession) -> Table:
    """Render the board as a rich table with row/column indices."""
    board = session.board
    table = Table(box=box.SQUARE, show_lines=True, title=f"{session.variant.name} board")
    table.add_column("", style="dim", justify="right")
    for c in range(board.cols):
        table.add_column(str(c), justify="center", min_width=3)

    for r in range(board.rows):
        cells = [cell.content or "" for cell in board.row(r)]
        table.add_row(str(r), *cells)
    return table


def build_players_table(session: GameSession, you: Optional[int] = None) -> Table:
    """Roster in turn order, marking the turn holder and the local player."""
    table = Table(title="Players", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Status", justify="center")

    for i, player in enumerate(session.players):
        status = "[green]Connected[/green]" if player.connected else "[red]Disconnected[/red]"
        name = player.name
        if you is not None and player.id == you:
            name += " [dim](you)[/dim]"
        if session.state == SessionState.IN_PROGRESS and i == session.current_player:
            name = f"▶ {name}"
        table.add_row(str(i), name, str(player.score), status)
    return table


def print_session(session: GameSession, you: Optional[int] = None):
    """Print the whole session screen."""
    clear_screen()
    style = STATE_STYLES.get(session.state, "white")
    print_header(f"Session {session.id}          [{VERSION}]",
                 f"Round {session.round} - {len(session.players)}/{session.max_players} players")
    console.print(f"State: [{style}]{session.state.name}[/{style}]")
    console.print()
    console.print(build_board_table(session))
    console.print(build_players_table(session, you))
    console.print()


def print_error(message: str):
    """Print error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_info(message: str):
    """Print info message."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_connecting(url: str):
    console.print(f"[yellow]Connecting to {url}...[/yellow]")


def get_main_action() -> str:
    """Lobby menu before joining a session."""
    choices = [
        {"name": "Create session", "value": "create"},
        {"name": "Join session by id", "value": "join"},
        {"name": "Join any open session", "value": "join_any"},
        {"name": "Quit", "value": "quit"},
    ]

    result = questionary.select(
        "Choose an option:",
        choices=[c["name"] for c in choices],
        use_indicator=True,
        use_shortcuts=False,
    ).ask()

    for c in choices:
        if c["name"] == result:
            return c["value"]
    return "quit"


def get_session_action(session: GameSession) -> str:
    """In-session menu. Moves are only offered while the game runs."""
    choices = []
    if session.state == SessionState.IN_PROGRESS:
        choices.append({"name": "Place a piece", "value": "place"})
        choices.append({"name": "Move a piece", "value": "move"})
    choices.append({"name": "Refresh", "value": "refresh"})
    choices.append({"name": "Leave", "value": "leave"})

    result = questionary.select(
        "What would you like to do?",
        choices=[c["name"] for c in choices],
        use_indicator=True,
        use_shortcuts=False,
    ).ask()

    for c in choices:
        if c["name"] == result:
            return c["value"]
    return "leave"


def get_variant() -> Variant:
    """Pick the rule set for a new session."""
    names = [v.name for v in Variant]
    result = questionary.select(
        "Game type:",
        choices=names,
        default=Variant.LINE3.name,
        use_indicator=True,
    ).ask()
    return Variant[result] if result else Variant.LINE3


def get_player_name(default: str = "Player") -> str:
    """Get player name using text input."""
    name = questionary.text("Enter your name:", default=default).ask()
    return name or default


def get_session_id() -> str:
    return (questionary.text("Session id:").ask() or "").strip().upper()


def get_square(prompt: str) -> Optional[Tuple[int, int]]:
    """Ask for 'row col' (or 'row,col'); None when cancelled or unparsable."""
    raw = questionary.text(f"{prompt} (row col):").ask()
    if not raw:
        return None
    parts = raw.replace(",", " ").split()
    if len(parts) != 2:
        print_error("Enter two numbers, e.g. '1 2'")
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        print_error("Row and column must be numbers")
        return None


def get_piece(player: Player, session: GameSession) -> str:
    """Piece to place; defaults to X/O by seat for three-in-a-row."""
    default = ""
    if session.variant == Variant.LINE3:
        seat = next((i for i, p in enumerate(session.players) if p.id == player.id), 0)
        default = "X" if seat == 0 else "O"
    piece = questionary.text("Piece:", default=default).ask()
    return (piece or default).strip()


def wait_for_enter():
    """Wait for user to press Enter."""
    console.input("[dim]Press Enter to continue...[/dim]")
