"""Main entry point for ``python -m folio``."""

import sys

import click

from folio.cli.main import cli


def main() -> int:
    """Run the command line.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        result = cli.main(standalone_mode=False)
        return result if isinstance(result, int) else 0
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        print("Aborted!", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
