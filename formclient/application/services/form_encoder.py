# formclient/application/services/form_encoder.py
from __future__ import annotations

from typing import Any, Iterable, List, Sequence, Tuple
from urllib.parse import urlencode

from formclient.domain.form import FormField, as_text


class FormEncoder:
    """
    application/x-www-form-urlencoded body encoder.

    - Keeps call order (no key sorting, no grouping of repeated keys)
    - Repeated keys are emitted once per value: a=1&a=2
    - Spaces become '+', same as requests does for data=[(k, v), ...]
    """

    def encode(self, fields: Iterable[FormField]) -> bytes:
        pairs = [f.as_pair() for f in fields]
        return urlencode(pairs).encode("ascii")

    def expand(self, pairs: Sequence[Tuple[str, Any]]) -> List[FormField]:
        """
        Turn (key, value) pairs into fields. A list or tuple value yields one field per
        element: ("date", ["a", "b"]) => ("date", "a"), ("date", "b").
        """
        result: List[FormField] = []
        for key, value in pairs:
            if isinstance(value, (list, tuple)):
                for item in value:
                    result.append(FormField(key, as_text(item)))
            else:
                result.append(FormField(key, as_text(value)))
        return result
