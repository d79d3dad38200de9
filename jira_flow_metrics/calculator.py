"""Calculator base class and pipeline runner for Jira Flow Metrics."""

import logging

logger = logging.getLogger(__name__)


class Calculator:
    """Base class for calculators.

    A calculator is one step of the metrics pipeline. `run()` computes and
    returns its result, which is stored and made available to later
    calculators through `get_result()`. `write()` writes the result to the
    output files named in `settings`.
    """

    def __init__(self, source, settings, results):
        """Initialise with the shared issue source, settings and results.

        Args:
            source: An `IssueSource` holding issues and the status universe
            settings: Dictionary of settings
            results: Dictionary of results so far, keyed by calculator class
        """
        self.source = source
        self.settings = settings
        self._results = results

    def __repr__(self):
        return f"<{type(self).__name__}>"

    def get_result(self, calculator=None, default=None):
        """Get the result of `calculator`, or of this calculator if omitted."""
        return self._results.get(calculator or self.__class__, default)

    def run(self):
        """Run the calculator and return its result."""

    def write(self):
        """Write the result of the calculation to the configured outputs."""


def run_calculators(calculators, source, settings, write=True):
    """Run each calculator in turn and return a dict of results.

    Results are keyed by calculator class. When `write` is true each
    calculator's `write()` is called right after its `run()`.
    """
    results = {}

    for c in calculators:
        calculator = c(source, settings, results)

        logger.info("%s running...", c.__name__)
        try:
            results[c] = calculator.run()
        except Exception:
            logger.exception("%s failed to run", c.__name__)
            raise
        logger.info("%s completed", c.__name__)

        if write:
            logger.info("Writing %s output...", c.__name__)
            calculator.write()

    return results
