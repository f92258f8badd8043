"""Connection cost matrix between adjacent word contexts."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .errors import LinderaErrorKind

_U32_MASK = 0xFFFFFFFF


@dataclass
class ConnectionCostMatrix:
    """Costs stored as little-endian i16 values, indexed by context ids."""

    costs_data: bytes
    backward_size: int

    @classmethod
    def load(cls, conn_data: bytes) -> "ConnectionCostMatrix":
        """Load from a buffer whose first two i16 values are the sizes."""
        if len(conn_data) < 4:
            raise LinderaErrorKind.DESERIALIZE.with_error(
                "connection matrix data is shorter than its header"
            )
        (backward_size,) = struct.unpack_from("<h", conn_data, 2)
        return cls(bytes(conn_data[4:]), backward_size & _U32_MASK)

    def cost(self, forward_id: int, backward_id: int) -> int:
        cost_id = (backward_id + forward_id * self.backward_size) & _U32_MASK
        offset = cost_id * 2
        if offset + 2 > len(self.costs_data):
            raise IndexError(f"no connection cost for ({forward_id}, {backward_id})")
        return struct.unpack_from("<h", self.costs_data, offset)[0]