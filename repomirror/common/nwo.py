"""Name-with-owner utilities.

An ``nwo`` is the ``owner/name`` identity of a remote repository and the
natural key joining the metadata store to the remote catalogue. It is not a
filesystem path, even though it uses ``/`` as a separator.
"""

from __future__ import annotations


def make_nwo(owner: str, name: str) -> str:
    """Build an ``owner/name`` identifier.

    Examples
    --------
    >>> make_nwo("fatih", "vim-go")
    'fatih/vim-go'

    """
    return f"{owner}/{name}"
