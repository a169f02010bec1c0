"""Run the structcheck CLI.

Usage:
    python -m structcheck validate schema.yaml data.yaml
"""

from structcheck.cli.main import cli


def main():
    cli()


if __name__ == "__main__":
    main()
