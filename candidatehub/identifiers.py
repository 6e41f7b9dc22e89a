"""Identifier generation for new candidate records."""

import uuid
from typing import Callable

# Zero-argument callable returning a fresh document id.
IdentifierGenerator = Callable[[], str]


def uuid_identifier() -> str:
    return str(uuid.uuid4())
