"""Unit tests for state models and attribute flattening."""

from tfaws.state import ResourceInstance, State, flatten_attributes


def test_flatten_nested_values():
    flat = flatten_attributes({
        "name": "x",
        "enabled": True,
        "delivery_address": {"simple_address": "a@example.com"},
        "resources": ["arn:b", "arn:a"],
        "tags": {},
        "display_name": None,
    })

    assert flat == {
        "name": "x",
        "enabled": "true",
        "delivery_address.%": "1",
        "delivery_address.simple_address": "a@example.com",
        "resources.#": "2",
        "resources.0": "arn:b",
        "resources.1": "arn:a",
        "tags.%": "0",
    }


def test_flatten_sets_sorted():
    assert flatten_attributes({"s": {"b", "a"}}) == {"s.#": "2", "s.0": "a", "s.1": "b"}


class TestState:
    """Tracking applied resources by address."""

    def test_add_get_remove(self):
        state = State()
        instance = ResourceInstance(type="aws_ssmcontacts_contact", name="test", id="arn:1", attributes={"alias": "a"})

        state.add_resource(instance)

        assert state.has_resource("aws_ssmcontacts_contact.test")
        assert state.get_resource("aws_ssmcontacts_contact.test").flat_attributes() == {"alias": "a", "id": "arn:1"}
        assert state.remove_resource("aws_ssmcontacts_contact.test") is instance
        assert state.list_resources() == []

    def test_type_filter(self):
        state = State()
        state.add_resource(ResourceInstance(type="a", name="x", id="1"))
        state.add_resource(ResourceInstance(type="b", name="y", id="2", dependencies=["a.x"]))

        assert [r.address for r in state.list_resources("b")] == ["b.y"]

    def test_copy_is_deep(self):
        state = State()
        state.add_resource(ResourceInstance(type="a", name="x", id="1", attributes={"tags": {"k": "v"}}))

        copy = state.copy_state()
        copy.get_resource("a.x").attributes["tags"]["k"] = "changed"

        assert state.get_resource("a.x").attributes["tags"]["k"] == "v"
