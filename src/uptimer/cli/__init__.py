"""uptimer command-line interface (Typer)."""
