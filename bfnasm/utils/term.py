from rich.console import Console
from rich.markup import escape
import os

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

# Set by the CLI from -v; stage lines are only shown when verbose
VERBOSE = False


def _is_minimal() -> bool:
    # Environment override BFNASM_MINIMAL_UI=1
    env = os.environ.get('BFNASM_MINIMAL_UI')
    if env is not None:
        return env.strip() in ('1', 'true', 'yes', 'on')
    return False


def print_stage(step: int, total: int, message: str):
    """Print a staged progress-like line (e.g. [1/4] Compiling...)"""
    if not VERBOSE:
        return
    if _is_minimal():
        console.print(f"[{step}/{total}] {escape(message)}")
    else:
        console.print(f"[cyan]●[/cyan] [bold]{step}/{total}[/bold] {escape(message)}")


def print_error(message: str):
    if _is_minimal():
        err_console.print(f"[ERROR] {message}", markup=False)
        return
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_warning(message: str):
    if _is_minimal():
        err_console.print(f"[WARN] {message}", markup=False)
        return
    err_console.print(f"[#9b59b6]Warning:[/#9b59b6] {escape(message)}")


def print_success(message: str):
    if _is_minimal():
        console.print(f"[OK] {message}", markup=False)
        return
    console.print(f"[green]Success:[/green] {escape(message)}")


def print_plain(text: str):
    """Print text verbatim to stdout (usage text)"""
    console.print(text, markup=False)
