"""Tests for messages and builders"""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import pytest

from jsonproto.proto.message import Message, MessageBuilder, default_value
from jsonproto.proto.naming import NamingPolicy


@pytest.fixture
def sample(pool):
    return pool.message("Sample")


def describe_builder():
    def sets_and_replaces_singular_fields(expect, sample):
        builder = MessageBuilder(sample)
        count = sample.find_field("count")
        builder.set_field(count, 1)
        builder.set_field(count, 2)
        expect(builder.get_field(count)) == 2
        expect(builder.has_field(count)) == True

    def appends_repeated_fields(expect, sample):
        builder = MessageBuilder(sample)
        numbers = sample.find_field("numbers")
        builder.add_repeated(numbers, 1)
        builder.add_repeated(numbers, 2)
        expect(builder.get_field(numbers)) == (1, 2)

    def rejects_mismatched_cardinality(expect, sample):
        builder = MessageBuilder(sample)
        with pytest.raises(ValueError):
            builder.set_field(sample.find_field("numbers"), 1)
        with pytest.raises(ValueError):
            builder.add_repeated(sample.find_field("count"), 1)

    def rejects_foreign_fields(expect, pool, sample):
        builder = MessageBuilder(sample)
        with pytest.raises(ValueError):
            builder.set_field(pool.message("Point").find_field("x"), 1)

    def clears_fields(expect, sample):
        builder = MessageBuilder(sample)
        label = sample.find_field("label")
        builder.set_field(label, "x")
        builder.clear_field(label)
        expect(builder.has_field(label)) == False
        expect(builder.get_field(label)) == ""

    def creates_sub_builders(expect, pool, sample):
        builder = MessageBuilder(sample)
        sub = builder.new_sub_builder(sample.find_field("origin"))
        expect(sub.descriptor is pool.message("Point")) == True
        with pytest.raises(ValueError):
            builder.new_sub_builder(sample.find_field("count"))

    def built_messages_are_independent(expect, sample):
        builder = MessageBuilder(sample)
        numbers = sample.find_field("numbers")
        builder.add_repeated(numbers, 1)
        msg = builder.build()
        builder.add_repeated(numbers, 2)
        expect(msg["numbers"]) == (1,)
        expect(builder.build()["numbers"]) == (1, 2)


def describe_message():
    def reads_defaults(expect, pool, sample):
        expect(default_value(sample.find_field("ratio"))) == 0.0
        expect(default_value(sample.find_field("colors"))) == ()
        expect(default_value(sample.find_field("color")).number) == 0
        expect(Message.default(sample)["active"]) == False

    def rejects_unknown_names(expect, sample):
        with pytest.raises(KeyError):
            Message.default(sample)["missing"]
        expect(Message.default(sample).has_field("missing")) == False

    def converts_back_to_builder(expect, decoder, sample):
        msg = decoder.decode_json('{"count": 1, "labels": ["a"]}')
        builder = msg.to_builder()
        builder.add_repeated(sample.find_field("labels"), "b")
        expect(builder.build()["labels"]) == ("a", "b")
        expect(msg["labels"]) == ("a",)

    def compares_by_type_and_values(expect, pool, decoder):
        expect(decoder.decode_json('{"count": 1}')) == decoder.decode_json('{"count": 1}')
        expect(decoder.decode_json('{"count": 1}') != decoder.decode_json('{"count": 2}')) == True
        expect(Message.default(pool.message("Point")) != Message.default(pool.message("Sample"))) == True

    def is_unhashable(expect, sample):
        with pytest.raises(TypeError):
            hash(Message.default(sample))

    def has_readable_repr(expect, decoder):
        expect(repr(decoder.decode_json('{"count": 1, "label": "a"}'))) == "Sample(count=1, label='a')"


def describe_to_dict():
    def renders_json_ready_values(expect, decoder):
        msg = decoder.decode_json(
            """
            {
              "count": 1,
              "payload": "aGVsbG8=",
              "color": 5,
              "origin": {"x": 2},
              "colors": ["GREEN"],
              "displayName": "Ann",
              "note": "n"
            }
        """
        )
        expect(msg.to_dict()) == {
            "count": 1,
            "payload": "aGVsbG8=",
            "color": "BLUE",
            "origin": {"x": 2},
            "colors": ["GREEN"],
            "displayName": "Ann",
            "note": "n",
        }

    def honors_naming_policy(expect, decoder):
        msg = decoder.decode_json('{"displayName": "Ann"}')
        expect(msg.to_dict(NamingPolicy.SNAKE_CASE)) == {"display_name": "Ann"}

    def round_trips_through_python_values(expect, decoder):
        msg = decoder.decode_json(
            """
            {
              "total": 12,
              "score": 2.5,
              "active": true,
              "payload": "AAE=",
              "points": [{"x": 1}, {"y": 2}],
              "child": {"label": "c", "codes": [7]},
              "marker": {"y": 3}
            }
        """
        )
        expect(decoder.decode_python(msg.to_dict())) == msg
