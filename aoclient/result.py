"""Interpretation of messenger and compute unit responses.

The compute unit reports evaluation failures inside a 200 response body
(the ``Error`` field) rather than through the status line. Both channels
are kept distinct: a bad status is a ``TransportError``, a non-empty
``Error`` is a ``ComputationError``.
"""

import json

from .errors import ComputationError, ParseError, TransportError
from .types import Result


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _decode_json(body: bytes | str):
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise ParseError(f"Response body is not valid JSON: {e}") from e


def interpret_result(status_code: int, body: bytes | str) -> Result:
    """Map a compute unit response to a Result.

    Raises:
        TransportError: On a non-2xx status. The body is not decoded.
        ParseError: If the body is not a valid result object.
        ComputationError: If the result carries a non-empty error.
    """
    if not is_success(status_code):
        raise TransportError(
            f"Compute unit returned HTTP {status_code}", status_code=status_code
        )
    result = Result.from_json(_decode_json(body))
    if result.error:
        raise ComputationError(result.error, result=result)
    return result


def parse_id(status_code: int, body: bytes | str) -> str:
    """Extract the ``id`` from a messenger unit response.

    Raises:
        TransportError: On a non-2xx status. The body is not decoded.
        ParseError: If the body is not JSON or has no string ``id``.
    """
    if not is_success(status_code):
        raise TransportError(
            f"Messenger unit returned HTTP {status_code}", status_code=status_code
        )
    data = _decode_json(body)
    if not isinstance(data, dict):
        raise ParseError("Messenger unit response must be a JSON object")
    item_id = data.get("id")
    if not isinstance(item_id, str) or not item_id:
        raise ParseError(f"Messenger unit response has no id: {data!r}")
    return item_id
