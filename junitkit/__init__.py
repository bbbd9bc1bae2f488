"""JUnit/XUnit XML report model and serializer, with test run results, statistics,
stopwatches, output formats and interrupt handling."""

__version__ = "0.1.0"