"""Aggregation of activation and chase records into an upload payload."""

from __future__ import annotations

from typing import Any, Iterator

from .records import Activation, Chase


class UploadData:
    """Records pending upload to the SOTA database.

    The payload produced by :meth:`to_dict` has three parts:

    * ``activations`` - every activation added, in insertion order
    * ``s2s`` - chases derived from summit-to-summit QSOs in those
      activations (activation order, then QSO order)
    * ``chases`` - every chase added explicitly, in insertion order

    The payload is rebuilt on every call and the stored records are never
    modified, so repeated calls with no additions in between are identical.
    """

    def __init__(self) -> None:
        self._activations: list[Activation] = []
        self._chases: list[Chase] = []

    def add_activation(self, activation: Activation) -> None:
        self._activations.append(activation)

    def add_chase(self, chase: Chase) -> None:
        self._chases.append(chase)

    @property
    def activations(self) -> tuple[Activation, ...]:
        return tuple(self._activations)

    @property
    def chases(self) -> tuple[Chase, ...]:
        return tuple(self._chases)

    def s2s_chases(self) -> Iterator[Chase]:
        """Yield a chase for every S2S QSO logged in the activations.

        The activator also chased the station they worked on the other
        summit, so each such QSO is reported from the chaser's side with
        the activation's summit as ``summit_code``. Two activations that
        worked the same remote summit produce two chases.
        """
        for activation in self._activations:
            for qso in activation.qsos:
                if not qso.is_s2s:
                    continue
                yield Chase(
                    date=qso.date,
                    time_str=qso.time,
                    other_callsign=qso.callsign,
                    own_callsign=activation.own_callsign,
                    s2s_summit_code=qso.s2s_summit_code,
                    summit_code=activation.summit,
                    mode=qso.mode,
                    band=qso.band,
                    comments=qso.comments,
                )

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "activations": [activation.to_dict() for activation in self._activations],
            "s2s": [chase.to_dict() for chase in self.s2s_chases()],
            "chases": [chase.to_dict() for chase in self._chases],
        }

    def summary(self) -> dict[str, int]:
        return {
            "activations": len(self._activations),
            "qsos": sum(len(activation.qsos) for activation in self._activations),
            "s2s": sum(1 for _ in self.s2s_chases()),
            "chases": len(self._chases),
        }

    def is_empty(self) -> bool:
        return not self._activations and not self._chases

    def __len__(self) -> int:
        return len(self._activations) + len(self._chases)
