"""
decimath test runner output helpers.

Colored status lines, banners and the per-suite summary table printed by
test_runner.py. Not a test module.
"""
from typing import Optional


class Colors:
    """ANSI color codes for terminal output."""
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    RED = '\033[0;31m'
    BLUE = '\033[0;34m'
    CYAN = '\033[0;36m'
    NC = '\033[0m'  # No Color


# kind → (color, icon)
_STATUS_STYLES = {
    "success": (Colors.GREEN, "✅"),
    "error": (Colors.RED, "❌"),
    "warning": (Colors.YELLOW, "⚠️ "),
    "info": (Colors.BLUE, "ℹ️ "),
    }

BANNER_WIDTH = 70


# ============================================================================
# BANNERS AND STATUS LINES
# ============================================================================

def print_header(text: str):
    """Centered banner between two cyan rules."""
    rule = f"{Colors.CYAN}{'=' * BANNER_WIDTH}{Colors.NC}"
    print(f"\n{rule}\n{Colors.CYAN}{text:^{BANNER_WIDTH}}{Colors.NC}\n{rule}\n")


def print_section(title: str):
    rule = '-' * BANNER_WIDTH
    print(f"\n{rule}\n  {title}\n{rule}")


def print_status(kind: str, message: str):
    color, icon = _STATUS_STYLES[kind]
    print(f"{color}{icon} {message}{Colors.NC}")


def print_success(message: str):
    print_status("success", message)


def print_error(message: str):
    print_status("error", message)


def print_warning(message: str):
    print_status("warning", message)


def print_info(message: str):
    print_status("info", message)


# ============================================================================
# SUMMARY
# ============================================================================

def print_test_summary(
    results: dict[str, bool],
    suite_name: str = "Test Suite",
    durations: Optional[dict[str, float]] = None,
    ) -> bool:
    """
    Print one PASS/FAIL line per entry (with its duration when known).

    Args:
        results: Entry name → passed
        suite_name: Title of the summary
        durations: Entry name → seconds

    Returns:
        True if every entry passed
    """
    durations = durations or {}
    print_section(f"{suite_name} Summary")

    width = max((len(name) for name in results), default=0)
    for name, passed in results.items():
        status = f"{Colors.GREEN}PASS{Colors.NC}" if passed else f"{Colors.RED}FAIL{Colors.NC}"
        elapsed = f"  {durations[name]:6.2f}s" if name in durations else ""
        print(f"  {status}  {name:<{width}}{elapsed}")

    passed_count = sum(results.values())
    failed_count = len(results) - passed_count
    print(f"\n  {passed_count}/{len(results)} passed")

    if failed_count:
        print_error(f"{failed_count} of {suite_name.lower()} failed")
        return False
    print_success(f"All {suite_name.lower()} passed")
    return True
