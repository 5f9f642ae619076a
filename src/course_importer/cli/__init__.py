"""
CLI Module - Command-line interface for the course importer.
============================================================

Usage:
    course-importer --help
    course-importer preview syllabus.yaml
    course-importer validate week1.txt week2.md
    course-importer commit syllabus.yaml --single-course --dry-run
"""

from course_importer.cli.main import app, cli

__all__ = ["app", "cli"]
