import pytest

from drun.core.errors import DecodeFailed, NotFound, QueryFailed
from drun.core.loader import decode_descriptor, load_descriptor


def test_load_descriptor_uses_backend_inspect(fake_backend):
    desc = load_descriptor("app", fake_backend)

    assert fake_backend.calls == [("inspect", "app")]
    assert desc.normalized_name == "app"
    assert desc.image == "app:latest"


def test_load_descriptor_uses_first_match(backend_factory, inspect_document):
    """
    When the daemon returns several documents only the first is used; the
    rest are ignored without error.
    """
    backend = backend_factory(
        payload=[
            inspect_document(name="/first", config={"Image": "one:1"}),
            inspect_document(name="/second", config={"Image": "two:2"}),
        ]
    )
    desc = load_descriptor("first", backend)
    assert desc.image == "one:1"


def test_load_descriptor_empty_array_is_not_found(backend_factory):
    with pytest.raises(NotFound) as excinfo:
        load_descriptor("ghost", backend_factory(payload=[]))
    assert "ghost" in str(excinfo.value)


def test_load_descriptor_empty_name_fails_without_query(backend_factory):
    backend = backend_factory(payload=[])
    with pytest.raises(QueryFailed):
        load_descriptor("", backend)
    assert backend.calls == []


def test_backend_errors_propagate_unchanged(backend_factory):
    error = QueryFailed("Failed to inspect container", "permission denied")
    backend = backend_factory(failures={"inspect": error})
    with pytest.raises(QueryFailed) as excinfo:
        load_descriptor("app", backend)
    assert excinfo.value is error
    assert "permission denied" in str(excinfo.value)


@pytest.mark.parametrize(
    "payload",
    [
        {"Name": "app", "Config": {"Image": "x"}},
        "not json",
        None,
        42,
        ["not-an-object"],
        [{"Name": "app"}],
        [{"Name": "app", "Config": {"Image": "x"}, "HostConfig": {"Binds": "oops"}}],
    ],
)
def test_malformed_payloads_are_decode_failures(payload):
    with pytest.raises(DecodeFailed):
        decode_descriptor(payload, "app")


def test_unknown_fields_are_tolerated(inspect_document):
    doc = inspect_document(
        config={"Healthcheck": {"Test": ["CMD", "true"]}, "FutureField": 1},
        host_config={"CgroupnsMode": "private", "Annotations": None},
    )
    doc["SomethingNew"] = {"nested": True}
    desc = decode_descriptor([doc], "app")
    assert desc.image == "app:latest"
