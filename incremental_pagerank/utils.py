# utils.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Terminal reporting for the engine and the CLI: colored stage/step
#   output, bordered summary boxes, and a timing context manager.
#
#   The library itself stays quiet unless PagerankOptions.verbose is set;
#   the CLI (main.py) always reports through these helpers.
#
# Components:
#   Colors           : ANSI escape code constants for terminal styling.
#   print_stage / print_step / print_success / print_warning / print_error
#                    : Hierarchical log output with color-coded prefixes.
#   print_summary_box: Single bordered table for key-value statistics.
#   Timer            : Context manager measuring elapsed wall time.

import time


class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RESET = '\033[0m'


def print_banner(title):
    """Print a title banner at program start."""
    w = 90
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * w}")
    print(f"  {title}")
    print(f"{'=' * w}{Colors.RESET}\n")


def print_stage(name, message):
    """Print a stage header."""
    print(f"{Colors.BOLD}{Colors.CYAN}[{name}]{Colors.RESET} {message}")


def print_step(message):
    """Print a sub-step within a stage."""
    print(f"  {Colors.DIM}->{Colors.RESET} {message}")


def print_success(message):
    """Print a success message."""
    print(f"  {Colors.GREEN}[OK]{Colors.RESET} {message}")


def print_warning(message):
    """Print a warning message."""
    print(f"  {Colors.YELLOW}[WARN]{Colors.RESET} {message}")


def print_error(message):
    """Print an error message."""
    print(f"  {Colors.RED}[ERR]{Colors.RESET} {message}")


def print_summary_box(title, stats):
    """
    Print a single summary box.

    Args:
        title (str): Box title
        stats (dict): Key-value pairs to display
    """
    width = 50
    print(f"\n  +{'-' * width}+")
    padded = title + ' ' * (width - 1 - len(title))
    print(f"  | {Colors.BOLD}{padded}{Colors.RESET}|")
    print(f"  +{'-' * width}+")
    for key, val in stats.items():
        line = f" {key}: {val}"
        print(f"  |{line:<{width}}|")
    print(f"  +{'-' * width}+\n")


class Timer:
    """
    Context manager for timing code blocks.

    Elapsed time is kept in seconds on ``elapsed``; with ``verbose`` set the
    duration is also printed on exit.
    """
    def __init__(self, label="Operation", verbose=True):
        self.label = label
        self.verbose = verbose
        self.start = None
        self.elapsed = None

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start
        if self.verbose:
            print_success(f"{self.label} completed in {self.elapsed:.2f}s")

    @property
    def milliseconds(self):
        return 0.0 if self.elapsed is None else self.elapsed * 1000.0
