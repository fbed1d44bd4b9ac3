"""Command line tool for gae-deploy."""
