"""Jira sprint helper: board, sprint and issue reporting from the command line."""
