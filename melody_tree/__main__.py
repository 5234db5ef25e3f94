"""Entry point wrapper for ``python -m melody_tree``.

Execution is forwarded to :func:`melody_tree.main` so ``python -m melody_tree``
and the installed ``melody-tree`` console script behave identically.

Example
-------
::

    python -m melody_tree --generations 5 --seed 42 --verbose
"""

from . import main

if __name__ == "__main__":
    main()
