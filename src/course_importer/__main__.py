"""Allow running the importer with ``python -m course_importer``."""

from course_importer.cli.main import cli

if __name__ == "__main__":
    cli()
