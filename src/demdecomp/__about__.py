__all__ = [
    "__title__", "__summary__", "__uri__", "__version__", "__author__",
    "__email__", "__license__", "__copyright__",
]

__title__ = "demdecomp"
__summary__ = "Decomposition of differences in demographic summary measures"
__uri__ = "https://github.com/ihmeuw/demdecomp"

__version__ = "0.1.0"

__author__ = "IHME Math Sciences"
__email__ = "<USERNAME>@uw.edu"

__license__ = "BSD 3-Clause"
__copyright__ = f"Copyright 2026 {__author__}"
