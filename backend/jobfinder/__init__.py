"""JobFinder: job search with per-user favorites."""
