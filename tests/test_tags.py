"""Tests for tag set assembly."""

import pytest

from aoclient.errors import BuildError
from aoclient.tags import (
    assemble_tags,
    message_tags,
    normalize_tags,
    protocol_tags,
    spawn_tags,
)
from aoclient.types import Tag


class TestProtocolTags:
    def test_message_protocol_tags(self):
        assert protocol_tags("Message") == [
            Tag("Data-Protocol", "ao"),
            Tag("Variant", "ao.TN.1"),
            Tag("Type", "Message"),
            Tag("SDK", "aoclient"),
        ]

    def test_spawn_protocol_tags_include_module_and_scheduler(self):
        tags = protocol_tags("Process", module="mod-1", scheduler="sched-1")
        assert tags[2] == Tag("Type", "Process")
        assert tags[3] == Tag("Module", "mod-1")
        assert tags[4] == Tag("Scheduler", "sched-1")
        assert tags[-1] == Tag("SDK", "aoclient")

    def test_empty_scheduler_omitted(self):
        names = [t.name for t in protocol_tags("Process", module="m", scheduler="")]
        assert "Scheduler" not in names


class TestAssembleTags:
    def test_none_treated_as_empty(self):
        assert assemble_tags(protocol_tags("Message"), None) == protocol_tags("Message")
        assert assemble_tags(protocol_tags("Message"), []) == protocol_tags("Message")

    def test_protocol_first_then_caller_in_order(self):
        caller = [Tag("B", "2"), Tag("A", "1")]
        tags = message_tags(caller)
        assert tags[:4] == protocol_tags("Message")
        assert tags[4:] == caller

    def test_duplicates_preserved(self):
        caller = [Tag("X", "1"), Tag("X", "1"), Tag("Type", "Custom")]
        tags = message_tags(caller)
        assert tags[-3:] == caller
        assert [t.value for t in tags if t.name == "Type"] == ["Message", "Custom"]

    def test_tuple_pairs_accepted(self):
        assert normalize_tags([("Name", "Value")]) == [Tag("Name", "Value")]


class TestTagValidation:
    def test_spawn_requires_module(self):
        with pytest.raises(BuildError, match="module"):
            spawn_tags("", "sched")

    def test_non_string_value_rejected(self):
        with pytest.raises(BuildError, match="strings"):
            normalize_tags([("Name", 1)])

    def test_empty_name_rejected(self):
        with pytest.raises(BuildError, match="non-empty"):
            normalize_tags([Tag("", "v")])

    def test_mapping_rejected(self):
        with pytest.raises(BuildError):
            normalize_tags({"Name": "Value"})

    def test_bare_string_rejected(self):
        with pytest.raises(BuildError, match="Invalid tag"):
            normalize_tags(["Name"])
