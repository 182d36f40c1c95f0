# file_organizer/main.py

# The command lives in the CLI module. This module only exists so the tool
# can be launched with `python -m file_organizer.main`.
from file_organizer.cli.main import organize


def main():
    """Entry point for the `file-organizer` console script."""
    organize(prog_name="file-organizer")


if __name__ == '__main__':
    main()
