"""
STOCK LEDGER TESTS
Ledger rules exercised against the in-memory store:
- per-type stock formula (in / out / adjustment)
- rejected movements leave stock and history untouched
- concurrent movements on one item do not lose updates
- reversal of completed purchases, all-or-nothing
"""
import threading
from decimal import Decimal

import pytest

from dao.errors import InsufficientStockError, NotFoundError, Unauthorized, ValidationError
from dao.ledger import MaterialRef, ProductRef, StockLedger, item_ref, next_stock
from db.models.stock_history import MovementType
from fakes import InMemoryStockStore

USER = 7


@pytest.fixture
def store():
    return InMemoryStockStore()


@pytest.fixture
def ledger(store):
    return StockLedger(store)


def test_item_ref_builds_material_or_product():
    assert item_ref(material_id="3") == MaterialRef(3)
    assert item_ref(product_id=5) == ProductRef(5)


@pytest.mark.parametrize(
    "material_id,product_id",
    [(None, None), ("", None), (1, 2), ("abc", None)],
)
def test_item_ref_rejects_bad_shapes(material_id, product_id):
    with pytest.raises(ValidationError):
        item_ref(material_id, product_id)


def test_sequence_follows_per_type_formula(store, ledger):
    ref = store.add_item(MaterialRef(1), stock=3)
    moves = [("in", 4), ("out", 2), ("adjustment", 20), ("out", 5), ("in", 1.5)]

    expected = Decimal(3)
    for movement, qty in moves:
        ledger.apply(ref, movement, qty, USER)
        expected = next_stock(expected, MovementType(movement), Decimal(str(qty)))

    assert store.stock[ref] == expected == Decimal("16.5")
    assert [h.type.value for h in store.history] == [m for m, _ in moves]


def test_out_beyond_stock_changes_nothing(store, ledger):
    ref = store.add_item(ProductRef(1), stock=2)
    with pytest.raises(InsufficientStockError):
        ledger.apply(ref, "out", 3, USER)
    assert store.stock[ref] == 2
    assert store.history == []


def test_adjustment_sets_absolute_level(store, ledger):
    ref = store.add_item(MaterialRef(1), stock=99)
    ledger.apply(ref, "adjustment", 12, USER)
    assert store.stock[ref] == 12
    ledger.apply(ref, "adjustment", 12, USER)
    assert store.stock[ref] == 12


def test_scenario_from_ten(store, ledger):
    ref = store.add_item(MaterialRef(1), stock=10)

    row = ledger.apply(ref, "out", 4, USER, description="sold", reference="SO-1")
    assert store.stock[ref] == 6
    assert (row.type, row.quantity, row.user_id) == (MovementType.OUT, Decimal(4), USER)
    assert len(store.history) == 1

    with pytest.raises(InsufficientStockError):
        ledger.apply(ref, "out", 10, USER)
    assert store.stock[ref] == 6
    assert len(store.history) == 1

    ledger.apply(ref, "adjustment", 0, USER)
    assert store.stock[ref] == 0
    ledger.apply(ref, "in", 5, USER)
    assert store.stock[ref] == 5


@pytest.mark.parametrize(
    "ref,movement,quantity,user,error",
    [
        (MaterialRef(1), "sideways", 1, USER, ValidationError),
        (MaterialRef(1), "in", 0, USER, ValidationError),
        (MaterialRef(1), "out", -2, USER, ValidationError),
        (MaterialRef(1), "adjustment", -1, USER, ValidationError),
        (MaterialRef(1), "in", "lots", USER, ValidationError),
        (MaterialRef(1), "in", None, USER, ValidationError),
        (MaterialRef(404), "in", 1, USER, NotFoundError),
        (MaterialRef(1), "out", 11, USER, InsufficientStockError),
        (MaterialRef(1), "in", 1, None, Unauthorized),
    ],
)
def test_failed_apply_leaves_state_unchanged(store, ledger, ref, movement, quantity, user, error):
    store.add_item(MaterialRef(1), stock=10)
    before = store.state()
    with pytest.raises(error):
        ledger.apply(ref, movement, quantity, user)
    assert store.state() == before


def test_concurrent_in_calls_do_not_lose_updates():
    # The fake store serialises whole transactions, so this covers the ledger
    # running each apply in one transaction. The database row lock is covered
    # by test_ledger_postgres.py.
    store = InMemoryStockStore(read_delay=0.05)
    ledger = StockLedger(store)
    ref = store.add_item(MaterialRef(1), stock=0)

    threads = [threading.Thread(target=ledger.apply, args=(ref, "in", 5, USER)) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.stock[ref] == 10
    assert len(store.history) == 2


def test_reverse_completed_purchase_two_lines(store, ledger):
    a = store.add_item(MaterialRef(1), stock=10)
    b = store.add_item(MaterialRef(2), stock=10)
    store.add_purchase(1, USER, "completed", [(a, 3), (b, 7)])

    deleted, reverted = ledger.bulk_delete_purchases([1], USER)

    assert (deleted, reverted) == (1, 1)
    assert store.stock[a] == 7
    assert store.stock[b] == 3
    assert [(h.type, h.quantity) for h in store.history] == [
        (MovementType.OUT, Decimal(3)),
        (MovementType.OUT, Decimal(7)),
    ]
    assert store.history[0].description == "Purchase deleted: INV/PO/001"
    assert store.purchases == {}


def test_pending_purchase_deleted_without_compensation(store, ledger):
    a = store.add_item(ProductRef(1), stock=5)
    store.add_purchase(1, USER, "pending", [(a, 3)])

    assert ledger.bulk_delete_purchases([1], USER) == (1, 0)
    assert store.stock[a] == 5
    assert store.history == []


def test_other_users_purchases_are_left_alone(store, ledger):
    a = store.add_item(MaterialRef(1), stock=5)
    store.add_purchase(1, USER + 1, "completed", [(a, 3)])

    assert ledger.bulk_delete_purchases([1], USER) == (0, 0)
    assert 1 in store.purchases
    assert store.stock[a] == 5


def test_failing_batch_rolls_back_everything(store, ledger):
    a = store.add_item(MaterialRef(1), stock=10)
    b = store.add_item(MaterialRef(2), stock=1)
    store.add_purchase(1, USER, "completed", [(a, 4)])
    store.add_purchase(2, USER, "completed", [(b, 5)])  # would go negative
    store.add_purchase(3, USER, "pending", [(a, 1)])
    before = store.state()

    with pytest.raises(InsufficientStockError):
        ledger.bulk_delete_purchases([1, 2, 3], USER)

    assert store.state() == before


@pytest.mark.parametrize("ids", [[], None, "1,2", ["x"]])
def test_bulk_delete_rejects_bad_ids(ledger, ids):
    with pytest.raises(ValidationError):
        ledger.bulk_delete_purchases(ids, USER)


def test_item_of_another_user_is_not_found(store, ledger):
    ref = store.add_item(MaterialRef(1), stock=10, owner=USER + 1)
    before = store.state()
    with pytest.raises(NotFoundError):
        ledger.apply(ref, "adjustment", 0, USER)
    assert store.state() == before

    ledger.apply(ref, "out", 4, USER + 1)
    assert store.stock[ref] == 6
