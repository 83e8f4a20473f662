"""
sources/base.py

Abstract base class for per-source export format variants.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseSourceFormat(ABC):
    """
    Contract for one delivery-platform export layout.

    A variant is bound to an integration when its configuration is loaded
    and supplies the two pieces of behaviour that differ between sources:

    - :meth:`map_record` applies cross-field fixups after every configured
      column has been mapped on its own.
    - :meth:`resolve_status` derives the order status of a mapped row.

    No I/O, no logging, and no side effects are permitted inside either
    method beyond mutating the record passed in.
    """

    key: str = ""

    def map_record(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Apply cross-field fixups to a mapped record and return it.

        The default layout has none.
        """
        return record

    @abstractmethod
    def resolve_status(self, record: dict[str, Any]) -> str:
        """
        Derive the order status for a mapped record.

        Parameters
        ----------
        record:
            Normalized record produced by the field mapper, after
            :meth:`map_record`.

        Returns
        -------
        str
            One of the :class:`~app.domain.order.OrderStatus` values.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"
