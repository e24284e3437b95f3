"""Lifecycle tests against an in-memory stand-in for the DynamoDB collaborator."""
import pytest

from ddb_session_store import DynamoDBStore, DynamoDBStoreError, StoreConfig

NOW = 1_700_000_000


class FakeDDB:
    def __init__(self):
        self.rows = {}
        self.calls = []
        self.fail = {}

    def _check(self, op):
        if op in self.fail:
            raise DynamoDBStoreError(op, f"DynamoDB.{op}: {self.fail[op]}")

    def put_item(self, table, item):
        self.calls.append(("put_item", table))
        self._check("put_item")
        self.rows[next(iter(item.values()))] = dict(item)

    def get_item(self, table, key, projection=None, consistent_read=True):
        self.calls.append(("get_item", table, projection, consistent_read))
        self._check("get_item")
        return self.rows.get(next(iter(key.values())))

    def delete_item(self, table, key):
        self.calls.append(("delete_item", table, next(iter(key.values()))))
        self._check("delete_item")
        self.rows.pop(next(iter(key.values())), None)

    def scan(self, table, projection, filter_condition, on_row):
        self.calls.append(("scan", table, projection))
        self._check("scan")
        for key in list(self.rows):
            on_row({projection[0]: key})

    def batch_delete(self, table, key_field, keys):
        self.calls.append(("batch_delete", table, list(keys)))
        self._check("batch_delete")
        for k in keys:
            self.rows.pop(k, None)


@pytest.fixture
def fake():
    return FakeDDB()


def _store(fake, **options):
    return DynamoDBStore(fake, StoreConfig(**options), clock=lambda: NOW)


def test_get_requests_consistent_read_by_default(fake):
    s = _store(fake)
    s.get("abc")
    assert fake.calls == [("get_item", "starch_states", None, True)]


def test_consistent_read_can_be_disabled(fake):
    s = _store(fake, consistent_read=False)
    s.get("abc")
    assert fake.calls[0][3] is False


def test_data_column_layout_projects_columns(fake):
    s = _store(fake, data_field="data", expiration_field="exp")
    s.get("abc")
    assert fake.calls[0][2] == ["data", "exp"]


def test_expired_read_triggers_delete_before_returning(fake):
    s = _store(fake)
    s.set("abc", {"a": 1}, -1)
    fake.calls.clear()
    assert s.get("abc") is None
    assert [c[0] for c in fake.calls] == ["get_item", "delete_item"]
    assert fake.calls[1][2] == "abc"


def test_expiry_uses_injected_clock(fake):
    s = _store(fake)
    s.set("abc", {"a": 1}, 10)
    assert fake.rows["abc"]["__STARCH_EXPIRATION__"] == NOW + 10
    s.clock = lambda: NOW + 11
    assert s.get("abc") is None


def test_put_failure_propagates(fake):
    fake.fail["put_item"] = "ProvisionedThroughputExceededException: slow down"
    with pytest.raises(DynamoDBStoreError) as e:
        _store(fake).set("abc", {"a": 1})
    assert e.value.operation == "put_item"


def test_failed_lazy_delete_propagates(fake):
    s = _store(fake)
    s.set("abc", {"a": 1}, -1)
    fake.fail["delete_item"] = "boom"
    with pytest.raises(DynamoDBStoreError):
        s.get("abc")


def test_reap_scan_failure_skips_delete(fake):
    s = _store(fake)
    s.set("abc", {"a": 1}, -1)
    fake.fail["scan"] = "boom"
    with pytest.raises(DynamoDBStoreError):
        s.reap_expired()
    assert not any(c[0] == "batch_delete" for c in fake.calls)


def test_reap_delete_failure_is_fatal(fake):
    s = _store(fake)
    s.set("abc", {"a": 1}, -1)
    fake.fail["batch_delete"] = "boom"
    with pytest.raises(DynamoDBStoreError):
        s.reap_expired()
    assert "abc" in fake.rows


def test_reap_without_matches_makes_no_delete_call(fake):
    assert _store(fake).reap_expired() == 0
    assert [c[0] for c in fake.calls] == ["scan"]


def test_reap_sends_one_bulk_delete_with_key_projection(fake):
    s = _store(fake)
    s.set("a", {}, -1)
    s.set("b", {}, -1)
    fake.calls.clear()
    assert s.reap_expired() == 2
    assert fake.calls == [
        ("scan", "starch_states", ["__STARCH_KEY__"]),
        ("batch_delete", "starch_states", ["a", "b"]),
    ]


def test_reap_scan_filter_compares_expiration_with_now(fake):
    cond = _store(fake, expiration_field="exp").reap_scan_filter()
    expr = cond.get_expression()
    assert expr["operator"] == "<"
    assert expr["values"][0].name == "exp"
    assert expr["values"][1] == NOW
