"""Tag set assembly for spawn and message data items.

Protocol tags always come first, in a fixed order, followed by the
caller's tags in the order given. Duplicate names are kept.
"""

from collections.abc import Iterable

from .errors import BuildError
from .types import Tag

DATA_PROTOCOL = "ao"
VARIANT = "ao.TN.1"
SDK = "aoclient"

TYPE_PROCESS = "Process"
TYPE_MESSAGE = "Message"


def normalize_tags(tags: Iterable | None) -> list[Tag]:
    """Return *tags* as a list of ``Tag``; ``None`` means no tags.

    Accepts ``Tag`` instances and ``(name, value)`` pairs of strings.
    """
    if tags is None:
        return []
    if isinstance(tags, (str, bytes, dict)):
        raise BuildError(f"tags must be a sequence of Tag, got {type(tags).__name__}")

    result = []
    for tag in tags:
        if isinstance(tag, Tag):
            name, value = tag.name, tag.value
        elif isinstance(tag, tuple) and len(tag) == 2:
            name, value = tag
        else:
            raise BuildError(f"Invalid tag: {tag!r}")
        if not isinstance(name, str) or not isinstance(value, str):
            raise BuildError(f"Tag name and value must be strings: {tag!r}")
        if not name:
            raise BuildError("Tag name must be non-empty")
        result.append(Tag(name, value))
    return result


def protocol_tags(
    item_type: str,
    module: str | None = None,
    scheduler: str | None = None,
) -> list[Tag]:
    tags = [
        Tag("Data-Protocol", DATA_PROTOCOL),
        Tag("Variant", VARIANT),
        Tag("Type", item_type),
    ]
    if module is not None:
        tags.append(Tag("Module", module))
    if scheduler:
        tags.append(Tag("Scheduler", scheduler))
    tags.append(Tag("SDK", SDK))
    return tags


def assemble_tags(protocol: list[Tag], caller: Iterable | None = None) -> list[Tag]:
    return list(protocol) + normalize_tags(caller)


def spawn_tags(module: str, scheduler: str | None, caller: Iterable | None = None) -> list[Tag]:
    if not isinstance(module, str) or not module:
        raise BuildError("module is required to spawn a process")
    return assemble_tags(protocol_tags(TYPE_PROCESS, module, scheduler), caller)


def message_tags(caller: Iterable | None = None) -> list[Tag]:
    return assemble_tags(protocol_tags(TYPE_MESSAGE), caller)
