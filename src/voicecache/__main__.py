"""Run the voicecache CLI with ``python -m voicecache``."""

from .cli import app


def main() -> None:
    app(prog_name="voicecache")


if __name__ == "__main__":
    main()
