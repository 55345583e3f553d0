"""Package entry point for ``python -m replicate_predictions``.

WHY: Users run the CLI as ``python -m replicate_predictions get <id>``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from replicate_predictions.cli import main

if __name__ == "__main__":
    main()
